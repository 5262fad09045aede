"""
Команды сбора данных.

Команды: collect, collect-all, test, history
"""

import logging

from ...core.config_schema import AppConfig
from ...storage.repositories import CollectionRepository, DeviceRepository
from ..utils import build_service, find_device, open_database, parse_operations, print_json

logger = logging.getLogger(__name__)


def cmd_collect(args, config: AppConfig) -> int:
    """Обработчик команды collect (одно устройство)."""
    operations = parse_operations(args.operations, config)
    db = open_database(config, args.db)
    try:
        service = build_service(config, db)
        device = find_device(service.devices, args.device)
        result = service.collect(device.id, operations)
    finally:
        db.close()

    print_json(result.to_dict())
    return 0 if result.success else 1


def cmd_collect_all(args, config: AppConfig) -> int:
    """Обработчик команды collect-all."""
    operations = parse_operations(args.operations, config)
    db = open_database(config, args.db)
    try:
        service = build_service(config, db)
        parallel = True if args.parallel else None
        results = service.collect_all(operations, parallel=parallel)
    finally:
        db.close()

    failed = [r for r in results if not r.success]
    for result in results:
        status = "OK" if result.success else "FAIL"
        print(f"[{status}] {result.device_name}: {result.message}")
    print(f"Итого: {len(results) - len(failed)} успешно, {len(failed)} с ошибками")
    return 1 if failed else 0


def cmd_test(args, config: AppConfig) -> int:
    """Обработчик команды test (проверка подключения)."""
    db = open_database(config, args.db)
    try:
        service = build_service(config, db)
        device = find_device(service.devices, args.device)
        result = service.test_connection(device.id)
    finally:
        db.close()

    print_json(result.to_dict())
    return 0 if result.success else 1


def cmd_history(args, config: AppConfig) -> int:
    """Обработчик команды history (последние попытки сбора)."""
    db = open_database(config, args.db)
    try:
        devices = DeviceRepository(db)
        history = CollectionRepository(db)
        if args.device:
            device = find_device(devices, args.device)
            attempts = history.list_for_device(device.id, limit=args.limit)
        else:
            attempts = history.list_recent(limit=args.limit)
        names = {d.id: d.display_name for d in devices.list()}
    finally:
        db.close()

    if args.json:
        print_json([
            {**attempt.to_dict(), "device_name": names.get(attempt.device_id)}
            for attempt in attempts
        ])
        return 0

    if not attempts:
        print("История сборов пуста")
        return 0

    print(f"{'STARTED':<33} {'DEVICE':<24} {'STATUS':<10} {'OPERATIONS':<28} ERROR")
    for attempt in attempts:
        print(
            f"{attempt.started_at:<33} {names.get(attempt.device_id, attempt.device_id):<24} "
            f"{attempt.status.value:<10} {','.join(attempt.operations):<28} {attempt.error_message or ''}"
        )
    return 0
