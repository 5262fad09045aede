"""
CLI модуль topology_collector.

Структура:
- utils.py: общие утилиты (open_database, build_service, load_devices_file)
- commands/: обработчики команд
  - devices.py: devices import, devices list
  - collect.py: collect, collect-all, test, history
  - topology.py: auto-links, topology, links, snapshot

Примеры использования:
    python -m topology_collector devices import devices.yaml
    python -m topology_collector collect SW-CORE-01 -o lldp,system
    python -m topology_collector collect-all --parallel
    python -m topology_collector topology --layout
    python -m topology_collector links add SW-CORE-01 SW-DIST-01 --source-interface GE0/0/1
    python -m topology_collector snapshot save before-migration
"""

import argparse
import logging
from typing import List, Optional

from ..config import load_config
from ..core.context import RunContext, set_current_context
from ..core.exceptions import ConfigError, TopologyCollectorError, format_error_for_log
from ..core.logging import LogConfig, setup_logging, setup_logging_from_config
from .commands import (
    cmd_auto_links,
    cmd_collect,
    cmd_collect_all,
    cmd_devices,
    cmd_history,
    cmd_links,
    cmd_snapshot,
    cmd_test,
    cmd_topology,
)

logger = logging.getLogger(__name__)

COMMANDS = {
    "devices": cmd_devices,
    "collect": cmd_collect,
    "collect-all": cmd_collect_all,
    "test": cmd_test,
    "auto-links": cmd_auto_links,
    "topology": cmd_topology,
    "links": cmd_links,
    "history": cmd_history,
    "snapshot": cmd_snapshot,
}


def setup_parser() -> argparse.ArgumentParser:
    """
    Создаёт парсер аргументов командной строки.

    Returns:
        ArgumentParser: Настроенный парсер
    """
    parser = argparse.ArgumentParser(
        prog="topology_collector",
        description="Сбор сетевой топологии по SSH (LLDP/OSPF) и построение графа связей",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры:
  %(prog)s devices import devices.yaml
  %(prog)s collect SW-CORE-01 -o lldp,system
  %(prog)s collect-all --parallel
  %(prog)s auto-links
  %(prog)s topology --layout
  %(prog)s links add SW-CORE-01 SW-DIST-01
  %(prog)s history SW-CORE-01 --limit 5
  %(prog)s snapshot save before-migration
        """,
    )

    # Общие аргументы
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Подробный вывод (DEBUG)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Логи в формате JSON",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Путь к файлу конфигурации YAML (default: config.yaml)",
    )
    parser.add_argument(
        "--db",
        default=None,
        help="Путь к файлу БД (default: database.path из конфигурации)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Команды")

    # === DEVICES ===
    devices_parser = subparsers.add_parser("devices", help="Реестр устройств")
    devices_sub = devices_parser.add_subparsers(dest="devices_command", required=True)

    import_parser = devices_sub.add_parser("import", help="Импорт устройств из YAML")
    import_parser.add_argument(
        "file",
        nargs="?",
        default=None,
        help="YAML файл (default: devices_file из конфигурации)",
    )

    list_parser = devices_sub.add_parser("list", help="Список устройств")
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Вывод в JSON",
    )

    # === COLLECT ===
    collect_parser = subparsers.add_parser("collect", help="Сбор с одного устройства")
    collect_parser.add_argument("device", help="ID, имя или IP устройства")
    collect_parser.add_argument(
        "-o",
        "--operations",
        default=None,
        help="Операции через запятую: lldp,ospf,interfaces,system",
    )

    # === COLLECT-ALL ===
    collect_all_parser = subparsers.add_parser("collect-all", help="Сбор со всех устройств")
    collect_all_parser.add_argument(
        "-o",
        "--operations",
        default=None,
        help="Операции через запятую: lldp,ospf,interfaces,system",
    )
    collect_all_parser.add_argument(
        "--parallel",
        action="store_true",
        help="Параллельный сбор (max_workers из конфигурации)",
    )

    # === TEST ===
    test_parser = subparsers.add_parser("test", help="Проверка SSH подключения")
    test_parser.add_argument("device", help="ID, имя или IP устройства")

    # === AUTO-LINKS ===
    subparsers.add_parser("auto-links", help="Достроить связи по разрешённым соседям")

    # === TOPOLOGY ===
    topology_parser = subparsers.add_parser("topology", help="Граф топологии (JSON)")
    topology_parser.add_argument(
        "--layout",
        action="store_true",
        help="Добавить координаты узлов (force-directed)",
    )

    # === LINKS ===
    links_parser = subparsers.add_parser("links", help="Связи между устройствами")
    links_sub = links_parser.add_subparsers(dest="links_command", required=True)

    links_list_parser = links_sub.add_parser("list", help="Список связей")
    links_list_parser.add_argument(
        "--json",
        action="store_true",
        help="Вывод в JSON",
    )

    links_add_parser = links_sub.add_parser("add", help="Добавить связь вручную")
    links_add_parser.add_argument("source", help="ID, имя или IP первого устройства")
    links_add_parser.add_argument("target", help="ID, имя или IP второго устройства")
    links_add_parser.add_argument("--source-interface", default=None, help="Порт первого устройства")
    links_add_parser.add_argument("--target-interface", default=None, help="Порт второго устройства")
    links_add_parser.add_argument(
        "--type",
        default="manual",
        help="Тип связи (default: manual)",
    )
    links_add_parser.add_argument(
        "--bandwidth",
        type=int,
        default=None,
        help="Пропускная способность, Мбит/с",
    )

    links_delete_parser = links_sub.add_parser("delete", help="Удалить связь")
    links_delete_parser.add_argument("link_id", help="ID связи")

    # === HISTORY ===
    history_parser = subparsers.add_parser("history", help="История сборов")
    history_parser.add_argument(
        "device",
        nargs="?",
        default=None,
        help="ID, имя или IP устройства (default: все устройства)",
    )
    history_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Сколько последних попыток показать (default: 20)",
    )
    history_parser.add_argument(
        "--json",
        action="store_true",
        help="Вывод в JSON",
    )

    # === SNAPSHOT ===
    snapshot_parser = subparsers.add_parser("snapshot", help="Снимки графа топологии")
    snapshot_sub = snapshot_parser.add_subparsers(dest="snapshot_command", required=True)

    snapshot_save_parser = snapshot_sub.add_parser("save", help="Сохранить текущий граф")
    snapshot_save_parser.add_argument("name", help="Имя снимка")
    snapshot_save_parser.add_argument("-d", "--description", default=None, help="Описание")
    snapshot_save_parser.add_argument(
        "--layout",
        action="store_true",
        help="Сохранить вместе с координатами узлов",
    )

    snapshot_list_parser = snapshot_sub.add_parser("list", help="Список снимков")
    snapshot_list_parser.add_argument(
        "--json",
        action="store_true",
        help="Вывод в JSON",
    )

    snapshot_show_parser = snapshot_sub.add_parser("show", help="Показать снимок (JSON)")
    snapshot_show_parser.add_argument("snapshot_id", help="ID снимка")

    snapshot_delete_parser = snapshot_sub.add_parser("delete", help="Удалить снимок")
    snapshot_delete_parser.add_argument("snapshot_id", help="ID снимка")

    return parser


def _setup_logging(args, log_section: dict) -> None:
    # Приоритет: -v / --json-logs > config.yaml
    log_config = LogConfig.from_dict(log_section)
    if args.verbose:
        log_config.level = logging.DEBUG

    if args.json_logs:
        setup_logging(json_format=True, level=log_config.level)
    else:
        setup_logging_from_config(log_config)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Главная функция CLI.

    Returns:
        int: Код возврата (0 — успех, 1 — ошибка выполнения, 2 — ошибка конфигурации/аргументов)
    """
    parser = setup_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = load_config(args.config)
    except ConfigError as e:
        setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)
        logger.error(format_error_for_log(e))
        return 2

    ctx = RunContext.create(triggered_by="cli", command=args.command)
    set_current_context(ctx)
    _setup_logging(args, config.logging.model_dump())

    logger.info(f"Run started (command={args.command})")
    try:
        code = COMMANDS[args.command](args, config)
    except ValueError as e:
        logger.error(f"Неверные аргументы: {e}")
        code = 2
    except TopologyCollectorError as e:
        logger.error(format_error_for_log(e))
        code = 1
    finally:
        set_current_context(None)

    logger.info(f"Run completed: {ctx.run_id} (elapsed={ctx.elapsed_human}, code={code})")
    return code


__all__ = [
    "setup_parser",
    "main",
    "COMMANDS",
]
