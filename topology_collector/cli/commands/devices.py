"""
Команды реестра устройств.

Команды: devices import, devices list
"""

import logging

from ...core.config_schema import AppConfig
from ...core.exceptions import ConfigError
from ...storage.repositories import DeviceRepository
from ..utils import load_devices_file, open_database, print_json

logger = logging.getLogger(__name__)


def cmd_devices_import(args, config: AppConfig) -> int:
    """
    Обработчик команды devices import.

    Устройство с уже известным именем обновляется (id сохраняется),
    новое — добавляется.
    """
    path = args.file or config.devices_file
    if not path:
        raise ConfigError("Не указан файл устройств (аргумент FILE или devices_file в конфигурации)")

    db = open_database(config, args.db)
    try:
        repo = DeviceRepository(db)
        added = updated = 0
        for device in load_devices_file(path):
            existing = repo.get_by_name(device.name)
            if existing:
                device.id = existing.id
                device.created_at = existing.created_at
                repo.update(device)
                updated += 1
            else:
                repo.add(device)
                added += 1
    finally:
        db.close()

    logger.info(f"Импорт устройств: добавлено {added}, обновлено {updated}")
    print(f"Добавлено: {added}, обновлено: {updated}")
    return 0


def cmd_devices_list(args, config: AppConfig) -> int:
    """Обработчик команды devices list."""
    db = open_database(config, args.db)
    try:
        devices = DeviceRepository(db).list()
    finally:
        db.close()

    if args.json:
        print_json([device.to_dict() for device in devices])
        return 0

    if not devices:
        print("Реестр устройств пуст")
        return 0

    print(f"{'NAME':<24} {'IP':<16} {'VENDOR':<10} {'STATUS':<8} LAST SEEN")
    for device in devices:
        print(
            f"{device.display_name:<24} {device.ip_address:<16} {device.vendor.value:<10} "
            f"{device.status.value:<8} {device.last_seen or '-'}"
        )
    return 0


def cmd_devices(args, config: AppConfig) -> int:
    """Обработчик группы devices."""
    if args.devices_command == "import":
        return cmd_devices_import(args, config)
    return cmd_devices_list(args, config)
