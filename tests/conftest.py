"""
Pytest configuration и общие fixtures для тестов.

Предоставляет переиспользуемые fixtures:
- load_fixture: Загрузка вывода команд из файлов
- db: Временная SQLite база
- make_device: Регистрация устройства в реестре
- mock_connection_manager: Mock ConnectionManager (без SSH)
"""

import pytest
from pathlib import Path
from typing import Optional
from unittest.mock import MagicMock

from topology_collector.core.connection import ConnectionManager
from topology_collector.core.device import Device
from topology_collector.storage import Database, DeviceRepository


@pytest.fixture
def fixtures_dir() -> Path:
    """Возвращает путь к директории fixtures."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def load_fixture(fixtures_dir):
    """
    Fixture для загрузки вывода команд из файлов.

    Usage:
        output = load_fixture("huawei", "display_version.txt")

    Args:
        platform: Вендор (huawei, cisco, juniper, mikrotik, datacom)
        filename: Имя файла с выводом

    Returns:
        str: Содержимое файла
    """
    def _load(platform: str, filename: str) -> str:
        fixture_path = fixtures_dir / platform / filename
        if not fixture_path.exists():
            pytest.skip(f"Fixture не найден: {fixture_path}")
        return fixture_path.read_text(encoding="utf-8")
    return _load


@pytest.fixture
def db(tmp_path):
    """Пустая база во временной директории."""
    database = Database(str(tmp_path / "topology.db"))
    yield database
    database.close()


@pytest.fixture
def device_repo(db) -> DeviceRepository:
    """Реестр устройств поверх временной базы."""
    return DeviceRepository(db)


@pytest.fixture
def make_device(device_repo):
    """
    Фабрика устройств в реестре.

    Usage:
        core = make_device("SW-CORE-01", "10.0.0.1", vendor="huawei")
    """
    def _make(
        name: str,
        ip_address: str,
        vendor: str = "huawei",
        hostname: Optional[str] = None,
        username: Optional[str] = "admin",
        password: Optional[str] = "secret",
    ) -> Device:
        return device_repo.add(Device(
            name=name,
            ip_address=ip_address,
            vendor=vendor,
            hostname=hostname,
            username=username,
            password=password,
        ))
    return _make


@pytest.fixture
def mock_connection_manager():
    """
    Mock ConnectionManager: open() возвращает фиктивную сессию,
    send_command() берёт вывод из manager.outputs по тексту команды.

    Значение в outputs может быть исключением — тогда оно бросается.
    """
    manager = MagicMock(spec=ConnectionManager)
    manager.outputs = {}
    manager.open.return_value = MagicMock(name="scrapli_connection")
    manager.get_hostname.return_value = "SW-CORE-01"

    def _send_command(connection, command, device, timeout=None):
        output = manager.outputs.get(command, "")
        if isinstance(output, Exception):
            raise output
        return output

    manager.send_command.side_effect = _send_command
    return manager
