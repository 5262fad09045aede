"""
SQLite хранилище топологии.

Database обеспечивает:
- Отдельное соединение на поток (WAL, foreign keys, Row factory)
- Миграции схемы через PRAGMA user_version (v2 — снимки топологии)
- Транзакции: внешняя BEGIN IMMEDIATE, вложенные через SAVEPOINT
- Преобразование sqlite3.Error в PersistenceError

Пример использования:
    db = Database("topology.db")
    with db.transaction():
        db.execute("UPDATE devices SET status = ? WHERE id = ?", ("online", device_id))
    rows = db.fetchall("SELECT * FROM devices")
"""

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Generator, List, Optional, Sequence

from ..core.exceptions import PersistenceError
from ..core.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 2

_SCHEMA_V1 = """
CREATE TABLE IF NOT EXISTS devices (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    hostname TEXT,
    ip_address TEXT NOT NULL,
    port INTEGER NOT NULL DEFAULT 22,
    vendor TEXT NOT NULL DEFAULT 'other'
        CHECK (vendor IN ('huawei', 'cisco', 'juniper', 'mikrotik', 'datacom', 'other')),
    username TEXT,
    password TEXT,
    model TEXT,
    serial_number TEXT,
    os_version TEXT,
    location TEXT,
    status TEXT NOT NULL DEFAULT 'unknown'
        CHECK (status IN ('online', 'offline', 'unknown', 'error')),
    last_seen TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_devices_ip ON devices(ip_address);

CREATE TABLE IF NOT EXISTS device_interfaces (
    id TEXT PRIMARY KEY,
    device_id TEXT NOT NULL REFERENCES devices(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    description TEXT,
    mac_address TEXT,
    speed_mbps INTEGER,
    admin_status TEXT,
    oper_status TEXT,
    ip_addresses TEXT NOT NULL DEFAULT '[]',
    vlan_id INTEGER,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (device_id, name)
);

CREATE TABLE IF NOT EXISTS topology_neighbors (
    id TEXT PRIMARY KEY,
    local_device_id TEXT NOT NULL REFERENCES devices(id) ON DELETE CASCADE,
    local_interface TEXT NOT NULL,
    discovery_protocol TEXT NOT NULL
        CHECK (discovery_protocol IN ('lldp', 'ospf', 'cdp', 'manual')),
    remote_device_name TEXT,
    remote_interface TEXT,
    remote_ip TEXT,
    remote_device_id TEXT REFERENCES devices(id) ON DELETE SET NULL,
    raw_data TEXT NOT NULL DEFAULT '{}',
    discovered_at TEXT NOT NULL,
    last_updated TEXT NOT NULL,
    UNIQUE (local_device_id, local_interface, discovery_protocol)
);

CREATE INDEX IF NOT EXISTS idx_neighbors_remote ON topology_neighbors(remote_device_id);

CREATE TABLE IF NOT EXISTS topology_links (
    id TEXT PRIMARY KEY,
    source_device_id TEXT NOT NULL REFERENCES devices(id) ON DELETE CASCADE,
    target_device_id TEXT NOT NULL REFERENCES devices(id) ON DELETE CASCADE,
    source_interface TEXT,
    target_interface TEXT,
    link_type TEXT NOT NULL DEFAULT 'discovered',
    status TEXT NOT NULL DEFAULT 'up' CHECK (status IN ('up', 'down', 'unknown')),
    bandwidth_mbps INTEGER,
    metadata TEXT NOT NULL DEFAULT '{}',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    CHECK (source_device_id <> target_device_id)
);

-- (A, B) и (B, A) — одна связь
CREATE UNIQUE INDEX IF NOT EXISTS idx_links_pair ON topology_links(
    min(source_device_id, target_device_id),
    max(source_device_id, target_device_id)
);

CREATE TABLE IF NOT EXISTS collection_history (
    id TEXT PRIMARY KEY,
    device_id TEXT NOT NULL REFERENCES devices(id) ON DELETE CASCADE,
    operations TEXT NOT NULL DEFAULT '[]',
    status TEXT NOT NULL DEFAULT 'pending'
        CHECK (status IN ('pending', 'running', 'completed', 'failed')),
    started_at TEXT NOT NULL,
    completed_at TEXT,
    raw_output TEXT NOT NULL DEFAULT '{}',
    parsed_data TEXT NOT NULL DEFAULT '{}',
    error_message TEXT
);

CREATE INDEX IF NOT EXISTS idx_history_device ON collection_history(device_id, started_at);
"""

_SCHEMA_V2 = """
CREATE TABLE IF NOT EXISTS topology_snapshots (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    topology_data TEXT NOT NULL DEFAULT '{}',
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_snapshots_created ON topology_snapshots(created_at);
"""

MIGRATIONS = {
    1: _SCHEMA_V1,
    2: _SCHEMA_V2,
}


def _py_lower(value: Optional[str]) -> Optional[str]:
    """lower() для SQL: встроенный в SQLite приводит к нижнему регистру только ASCII."""
    return value.lower() if value else value


def now_iso() -> str:
    """Текущее время UTC в ISO формате с микросекундами."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def next_timestamp(previous: Optional[str]) -> str:
    """
    Метка времени строго больше previous.

    Часы могут не сдвинуться между двумя записями подряд,
    тогда берём previous + 1 мкс.
    """
    current = datetime.now(timezone.utc)
    if previous:
        try:
            prev = datetime.fromisoformat(previous)
        except ValueError:
            prev = None
        if prev is not None:
            if prev.tzinfo is None:
                prev = prev.replace(tzinfo=timezone.utc)
            if current <= prev:
                current = prev + timedelta(microseconds=1)
    return current.isoformat(timespec="microseconds")


class Database:
    """
    SQLite база с соединением на поток.

    Attributes:
        path: Путь к файлу БД (":memory:" не поддерживается, у каждого
              потока была бы своя пустая база)
        busy_timeout: Сколько ждать блокировку записи (секунды)
    """

    def __init__(self, path: str = "topology.db", busy_timeout: float = 30.0):
        self.path = str(path)
        self.busy_timeout = busy_timeout
        self._local = threading.local()
        self._connections: List[sqlite3.Connection] = []
        self._lock = threading.Lock()

        parent = Path(self.path).parent
        parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _get_connection(self) -> sqlite3.Connection:
        """Соединение текущего потока (создаётся при первом обращении)."""
        conn = getattr(self._local, "connection", None)
        if conn is None:
            try:
                conn = sqlite3.connect(
                    self.path,
                    timeout=self.busy_timeout,
                    isolation_level=None,
                    check_same_thread=False,
                )
                conn.execute("PRAGMA journal_mode=WAL")
                conn.execute("PRAGMA foreign_keys=ON")
                conn.create_function("py_lower", 1, _py_lower, deterministic=True)
            except sqlite3.Error as e:
                raise PersistenceError(f"Не удалось открыть БД {self.path}: {e}", operation="connect") from e
            conn.row_factory = sqlite3.Row
            self._local.connection = conn
            self._local.depth = 0
            with self._lock:
                self._connections.append(conn)
        return conn

    @property
    def connection(self) -> sqlite3.Connection:
        """Соединение текущего потока."""
        return self._get_connection()

    def _init_database(self) -> None:
        """Создаёт/мигрирует схему до SCHEMA_VERSION."""
        conn = self._get_connection()
        try:
            current = conn.execute("PRAGMA user_version").fetchone()[0]
            if current < SCHEMA_VERSION:
                logger.info(f"Миграция схемы БД: {current} → {SCHEMA_VERSION}")
                self._migrate_schema(conn, current)
        except sqlite3.Error as e:
            raise PersistenceError(f"Ошибка инициализации схемы: {e}", operation="migrate") from e

    def _migrate_schema(self, conn: sqlite3.Connection, from_version: int) -> None:
        for version in range(from_version + 1, SCHEMA_VERSION + 1):
            conn.executescript(MIGRATIONS[version])
            conn.execute(f"PRAGMA user_version = {version}")
            logger.debug(f"Применена миграция схемы v{version}")

    @contextmanager
    def transaction(self, operation: str = "transaction") -> Generator[sqlite3.Connection, None, None]:
        """
        Транзакция на текущем соединении.

        Внешний уровень открывает BEGIN IMMEDIATE (блокировка записи сразу),
        вложенные уровни работают через SAVEPOINT. При исключении
        откатывается только свой уровень, ошибка пробрасывается.
        sqlite3.Error превращается в PersistenceError.

        Args:
            operation: Имя операции для сообщения об ошибке
        """
        conn = self._get_connection()
        depth = self._local.depth
        savepoint = f"sp_{depth}"

        try:
            conn.execute("BEGIN IMMEDIATE" if depth == 0 else f"SAVEPOINT {savepoint}")
        except sqlite3.Error as e:
            raise PersistenceError(f"Не удалось начать транзакцию: {e}", operation=operation) from e

        self._local.depth = depth + 1
        try:
            yield conn
        except BaseException as e:
            self._local.depth = depth
            self._rollback(conn, depth, savepoint)
            if isinstance(e, sqlite3.Error):
                raise PersistenceError(f"Ошибка БД: {e}", operation=operation) from e
            raise

        self._local.depth = depth
        try:
            conn.execute("COMMIT" if depth == 0 else f"RELEASE {savepoint}")
        except sqlite3.Error as e:
            self._rollback(conn, depth, savepoint)
            raise PersistenceError(f"Не удалось зафиксировать транзакцию: {e}", operation=operation) from e

    @staticmethod
    def _rollback(conn: sqlite3.Connection, depth: int, savepoint: str) -> None:
        try:
            if depth == 0:
                conn.execute("ROLLBACK")
            else:
                conn.execute(f"ROLLBACK TO {savepoint}")
                conn.execute(f"RELEASE {savepoint}")
        except sqlite3.Error as e:
            logger.warning(f"Ошибка отката транзакции: {e}")

    def execute(self, query: str, params: Sequence[Any] = (), operation: str = "execute") -> sqlite3.Cursor:
        """Выполняет запрос (вне transaction() — в режиме autocommit)."""
        try:
            return self._get_connection().execute(query, tuple(params))
        except sqlite3.Error as e:
            raise PersistenceError(f"Ошибка БД: {e}", operation=operation) from e

    def fetchone(self, query: str, params: Sequence[Any] = (), operation: str = "fetch") -> Optional[sqlite3.Row]:
        """Первая строка результата или None."""
        return self.execute(query, params, operation).fetchone()

    def fetchall(self, query: str, params: Sequence[Any] = (), operation: str = "fetch") -> List[sqlite3.Row]:
        """Все строки результата."""
        return self.execute(query, params, operation).fetchall()

    @property
    def schema_version(self) -> int:
        """Текущая версия схемы (PRAGMA user_version)."""
        return self.fetchone("PRAGMA user_version")[0]

    def close(self) -> None:
        """Закрывает соединения всех потоков."""
        with self._lock:
            connections, self._connections = self._connections, []
        for conn in connections:
            try:
                conn.close()
            except sqlite3.Error as e:
                logger.warning(f"Ошибка при закрытии БД: {e}")
        self._local = threading.local()
