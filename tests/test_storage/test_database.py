"""
Тесты Database: схема, транзакции, соединения по потокам.
"""

import sqlite3
import threading

import pytest

from topology_collector.core.device import Device
from topology_collector.core.exceptions import PersistenceError
from topology_collector.storage import SCHEMA_VERSION, Database, DeviceRepository, next_timestamp
from topology_collector.storage.database import MIGRATIONS


class TestSchema:

    def test_fresh_database_migrated(self, db):
        assert db.schema_version == SCHEMA_VERSION == 2
        tables = {row["name"] for row in db.fetchall("SELECT name FROM sqlite_master WHERE type = 'table'")}
        assert {
            "devices", "device_interfaces", "topology_neighbors",
            "topology_links", "collection_history", "topology_snapshots",
        } <= tables

    def test_reopen_keeps_data(self, tmp_path):
        path = str(tmp_path / "nested" / "topology.db")
        first = Database(path)
        DeviceRepository(first).add(Device(name="SW-01", ip_address="10.0.0.1"))
        first.close()

        second = Database(path)
        try:
            assert second.schema_version == SCHEMA_VERSION
            assert DeviceRepository(second).count() == 1
        finally:
            second.close()

    def test_upgrade_from_v1(self, tmp_path):
        """База первой версии получает таблицу снимков, данные сохраняются."""
        path = str(tmp_path / "v1.db")
        conn = sqlite3.connect(path)
        conn.executescript(MIGRATIONS[1])
        conn.execute(
            "INSERT INTO devices (id, name, ip_address, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
            ("d1", "SW-01", "10.0.0.1", "2024-01-01T00:00:00+00:00", "2024-01-01T00:00:00+00:00"),
        )
        conn.execute("PRAGMA user_version = 1")
        conn.commit()
        conn.close()

        db = Database(path)
        try:
            assert db.schema_version == 2
            assert db.fetchone("SELECT name FROM sqlite_master WHERE name = 'topology_snapshots'")
            assert DeviceRepository(db).get("d1").name == "SW-01"
        finally:
            db.close()

    def test_wal_and_foreign_keys(self, db):
        assert db.fetchone("PRAGMA journal_mode")[0] == "wal"
        assert db.fetchone("PRAGMA foreign_keys")[0] == 1


class TestTransaction:
    """BEGIN IMMEDIATE снаружи, SAVEPOINT внутри."""

    def test_commit(self, db, device_repo):
        with db.transaction():
            device_repo.add(Device(name="SW-01", ip_address="10.0.0.1"))

        assert device_repo.count() == 1

    def test_rollback_on_error(self, db, device_repo):
        with pytest.raises(ValueError):
            with db.transaction():
                device_repo.add(Device(name="SW-01", ip_address="10.0.0.1"))
                raise ValueError("прервано")

        assert device_repo.count() == 0

    def test_nested_rollback_keeps_outer(self, db, device_repo):
        """Откат вложенного уровня не трогает внешний."""
        with db.transaction():
            device_repo.add(Device(name="SW-01", ip_address="10.0.0.1"))
            with pytest.raises(RuntimeError):
                with db.transaction():
                    device_repo.add(Device(name="SW-02", ip_address="10.0.0.2"))
                    raise RuntimeError("вложенная ошибка")

        assert [d.name for d in device_repo.list()] == ["SW-01"]

    def test_outer_rollback_discards_nested(self, db, device_repo):
        with pytest.raises(RuntimeError):
            with db.transaction():
                with db.transaction():
                    device_repo.add(Device(name="SW-01", ip_address="10.0.0.1"))
                raise RuntimeError("внешняя ошибка")

        assert device_repo.count() == 0

    def test_sqlite_error_wrapped(self, db):
        with pytest.raises(PersistenceError) as exc_info:
            with db.transaction("broken_insert") as conn:
                conn.execute("INSERT INTO missing_table VALUES (1)")

        assert exc_info.value.operation == "broken_insert"

    def test_execute_error_wrapped(self, db):
        with pytest.raises(PersistenceError):
            db.execute("SELECT * FROM missing_table")

    def test_connection_per_thread(self, db, device_repo):
        device_repo.add(Device(name="SW-01", ip_address="10.0.0.1"))
        seen = {}

        def worker():
            seen["count"] = device_repo.count()
            seen["connection"] = db.connection

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert seen["count"] == 1
        assert seen["connection"] is not db.connection


class TestNextTimestamp:

    def test_strictly_greater(self):
        future = "2999-01-01T00:00:00.000000+00:00"

        assert next_timestamp(future) == "2999-01-01T00:00:00.000001+00:00"

    def test_without_previous(self):
        assert next_timestamp(None) > "2000-01-01"

    def test_naive_previous(self):
        assert next_timestamp("2999-01-01T00:00:00") == "2999-01-01T00:00:00.000001+00:00"
