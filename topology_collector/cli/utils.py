"""
Утилиты CLI.

Общие функции для всех команд CLI.
"""

import json
import logging
import sys
from typing import Any, List, Optional

import yaml

from ..collectors.topology import TopologyCollector, normalize_operations
from ..core.config_schema import AppConfig
from ..core.connection import ConnectionManager
from ..core.credentials import CredentialsManager
from ..core.device import Device
from ..core.exceptions import ConfigError, DeviceNotFoundError
from ..core.models import Operation
from ..parsers.registry import ParserRegistry
from ..services.collection_service import CollectionService
from ..storage.database import Database
from ..storage.repositories import DeviceRepository

logger = logging.getLogger(__name__)


def open_database(config: AppConfig, db_path: Optional[str] = None) -> Database:
    """Открывает БД (путь из --db или config.database.path)."""
    path = db_path or config.database.path
    logger.debug(f"БД: {path}")
    return Database(path, busy_timeout=config.database.busy_timeout)


def build_collector(config: AppConfig) -> TopologyCollector:
    """TopologyCollector с настройками подключения и сбора из конфигурации."""
    connection_manager = ConnectionManager(
        timeout_socket=config.connection.timeout_socket,
        timeout_transport=config.connection.timeout_transport,
        timeout_ops=config.connection.timeout_ops,
        transport=config.connection.transport,
    )
    return TopologyCollector(
        registry=ParserRegistry.default(),
        connection_manager=connection_manager,
        credentials=CredentialsManager(),
        command_delay=config.collection.command_delay,
        max_workers=config.collection.max_workers,
    )


def build_service(config: AppConfig, db: Database) -> CollectionService:
    """CollectionService поверх БД."""
    return CollectionService(db, build_collector(config), parallel=config.collection.parallel)


def parse_operations(value: Optional[str], config: AppConfig) -> List[Operation]:
    """
    Операции из аргумента -o ("lldp,ospf") или из конфигурации.

    Raises:
        ValueError: Неизвестная операция
    """
    if value:
        return normalize_operations(op.strip().lower() for op in value.split(",") if op.strip())
    return normalize_operations(config.collection.operations)


def find_device(devices: DeviceRepository, key: str) -> Device:
    """
    Устройство по id, имени или IP.

    Raises:
        DeviceNotFoundError: Не найдено
    """
    device = devices.lookup(key)
    if device is None:
        raise DeviceNotFoundError(key)
    return device


def load_devices_file(path: str) -> List[Device]:
    """
    Загружает устройства из YAML.

    Формат: список словарей или {"devices": [...]}:
        - name: SW-CORE-01
          ip_address: 10.0.0.1
          vendor: huawei

    Raises:
        ConfigError: Файл не читается или неверный формат
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or []
    except yaml.YAMLError as e:
        raise ConfigError(f"Ошибка разбора YAML: {e}", config_file=path) from e
    except OSError as e:
        raise ConfigError(f"Ошибка чтения файла: {e}", config_file=path) from e

    if isinstance(data, dict):
        data = data.get("devices") or []
    if not isinstance(data, list):
        raise ConfigError("Ожидался список устройств", config_file=path, key="devices")

    devices = []
    for idx, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning(f"Пропущен элемент #{idx}: ожидался dict, получен {type(item).__name__}")
            continue
        device = Device.from_dict(item)
        if not device.ip_address:
            logger.warning(f"Пропущен элемент #{idx}: отсутствует ip_address")
            continue
        if not device.name:
            device.name = device.ip_address
        devices.append(device)

    logger.info(f"Загружено устройств: {len(devices)}")
    return devices


def print_json(data: Any) -> None:
    """Выводит данные в stdout как JSON."""
    json.dump(data, sys.stdout, ensure_ascii=False, indent=2, default=str)
    sys.stdout.write("\n")
