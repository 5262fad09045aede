"""
Команды топологии.

Команды: auto-links, topology, links list/add/delete,
snapshot save/list/show/delete
"""

import logging

from ...core.config_schema import AppConfig
from ...core.exceptions import PersistenceError
from ...services.graph import GraphBuilder
from ...services.inference import InferenceEngine
from ...storage.repositories import DeviceRepository, LinkRepository, SnapshotRepository
from ..utils import find_device, open_database, print_json

logger = logging.getLogger(__name__)


def cmd_auto_links(args, config: AppConfig) -> int:
    """Обработчик команды auto-links."""
    db = open_database(config, args.db)
    try:
        stats = InferenceEngine(db).auto_link()
    finally:
        db.close()

    print_json(stats)
    return 0


def cmd_topology(args, config: AppConfig) -> int:
    """Обработчик команды topology (граф в JSON)."""
    db = open_database(config, args.db)
    try:
        graph = GraphBuilder(db, config.layout).build(with_layout=args.layout)
    finally:
        db.close()

    print_json(graph)
    return 0


# =============================================================================
# LINKS
# =============================================================================

def cmd_links_list(args, config: AppConfig) -> int:
    """Обработчик команды links list."""
    db = open_database(config, args.db)
    try:
        links = LinkRepository(db).list()
        names = {d.id: d.display_name for d in DeviceRepository(db).list()}
    finally:
        db.close()

    if args.json:
        print_json([link.to_dict() for link in links])
        return 0

    if not links:
        print("Связей нет")
        return 0

    print(f"{'ID':<36}  {'SOURCE':<30} {'TARGET':<30} {'TYPE':<10} STATUS")
    for link in links:
        source = f"{names.get(link.source_device_id, link.source_device_id)} {link.source_interface or ''}"
        target = f"{names.get(link.target_device_id, link.target_device_id)} {link.target_interface or ''}"
        print(f"{link.id:<36}  {source:<30} {target:<30} {link.link_type:<10} {link.status.value}")
    return 0


def cmd_links_add(args, config: AppConfig) -> int:
    """
    Обработчик команды links add (ручная связь).

    Связь между устройствами уже есть (в любом направлении) — ошибка,
    существующая связь не меняется.
    """
    db = open_database(config, args.db)
    try:
        devices = DeviceRepository(db)
        source = find_device(devices, args.source)
        target = find_device(devices, args.target)
        if source.id == target.id:
            raise ValueError("Связь устройства с самим собой невозможна")

        links = LinkRepository(db)
        existing = links.find_between(source.id, target.id)
        if existing:
            raise PersistenceError(
                f"Связь {source.display_name} — {target.display_name} уже существует ({existing.id})",
                operation="create_link",
            )
        link = links.create(
            source.id,
            target.id,
            source_interface=args.source_interface,
            target_interface=args.target_interface,
            link_type=args.type,
            bandwidth_mbps=args.bandwidth,
        )
    finally:
        db.close()

    logger.info(f"Ручная связь создана: {source.display_name} — {target.display_name}")
    print_json(link.to_dict())
    return 0


def cmd_links_delete(args, config: AppConfig) -> int:
    """Обработчик команды links delete."""
    db = open_database(config, args.db)
    try:
        deleted = LinkRepository(db).delete(args.link_id)
    finally:
        db.close()

    if not deleted:
        logger.error(f"Связь не найдена: {args.link_id}")
        return 1
    print(f"Связь удалена: {args.link_id}")
    return 0


def cmd_links(args, config: AppConfig) -> int:
    """Обработчик группы links."""
    if args.links_command == "add":
        return cmd_links_add(args, config)
    if args.links_command == "delete":
        return cmd_links_delete(args, config)
    return cmd_links_list(args, config)


# =============================================================================
# SNAPSHOTS
# =============================================================================

def cmd_snapshot_save(args, config: AppConfig) -> int:
    """Обработчик команды snapshot save (текущий граф)."""
    db = open_database(config, args.db)
    try:
        graph = GraphBuilder(db, config.layout).build(with_layout=args.layout)
        snapshot = SnapshotRepository(db).create(args.name, graph, description=args.description)
    finally:
        db.close()

    print_json(snapshot.summary())
    return 0


def cmd_snapshot_list(args, config: AppConfig) -> int:
    """Обработчик команды snapshot list."""
    db = open_database(config, args.db)
    try:
        snapshots = SnapshotRepository(db).list()
    finally:
        db.close()

    if args.json:
        print_json([s.summary() for s in snapshots])
        return 0

    if not snapshots:
        print("Снимков нет")
        return 0

    print(f"{'ID':<36}  {'NAME':<24} {'DEVICES':>7} {'LINKS':>6}  CREATED")
    for snapshot in snapshots:
        info = snapshot.summary()
        print(
            f"{snapshot.id:<36}  {snapshot.name:<24} {info['device_count']:>7} "
            f"{info['link_count']:>6}  {snapshot.created_at}"
        )
    return 0


def cmd_snapshot_show(args, config: AppConfig) -> int:
    """Обработчик команды snapshot show (снимок целиком в JSON)."""
    db = open_database(config, args.db)
    try:
        snapshot = SnapshotRepository(db).get(args.snapshot_id)
    finally:
        db.close()

    if snapshot is None:
        logger.error(f"Снимок не найден: {args.snapshot_id}")
        return 1
    print_json(snapshot.to_dict())
    return 0


def cmd_snapshot_delete(args, config: AppConfig) -> int:
    """Обработчик команды snapshot delete."""
    db = open_database(config, args.db)
    try:
        deleted = SnapshotRepository(db).delete(args.snapshot_id)
    finally:
        db.close()

    if not deleted:
        logger.error(f"Снимок не найден: {args.snapshot_id}")
        return 1
    print(f"Снимок удалён: {args.snapshot_id}")
    return 0


def cmd_snapshot(args, config: AppConfig) -> int:
    """Обработчик группы snapshot."""
    handlers = {
        "save": cmd_snapshot_save,
        "show": cmd_snapshot_show,
        "delete": cmd_snapshot_delete,
    }
    return handlers.get(args.snapshot_command, cmd_snapshot_list)(args, config)
