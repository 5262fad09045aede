"""
Хранилище топологии (SQLite).

Пример использования:
    from topology_collector.storage import Database, DeviceRepository

    db = Database("topology.db")
    devices = DeviceRepository(db).list()
"""

from .database import Database, SCHEMA_VERSION, next_timestamp, now_iso
from .repositories import (
    CollectionRepository,
    DeviceRepository,
    InterfaceRepository,
    LinkRepository,
    NeighborRepository,
    SnapshotRepository,
)

__all__ = [
    "Database",
    "SCHEMA_VERSION",
    "now_iso",
    "next_timestamp",
    "DeviceRepository",
    "InterfaceRepository",
    "NeighborRepository",
    "LinkRepository",
    "CollectionRepository",
    "SnapshotRepository",
]
