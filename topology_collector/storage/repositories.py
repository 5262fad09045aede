"""
Репозитории поверх Database.

- DeviceRepository — реестр устройств (+ запросы для разрешения соседей)
- InterfaceRepository — интерфейсы устройств, upsert по (device_id, name)
- NeighborRepository — соседи, upsert по (device, локальный порт, протокол)
- LinkRepository — связи между устройствами, без учёта направления
- CollectionRepository — история попыток сбора
- SnapshotRepository — сохранённые снимки графа

Методы записи открывают свою транзакцию. Если вызывающий код уже
находится в transaction(), запись становится вложенным SAVEPOINT
и откатывается вместе с внешней транзакцией.
"""

import json
import sqlite3
import uuid
from typing import Any, Dict, List, Optional, Sequence, Union

from ..core.device import Device, DeviceStatus
from ..core.exceptions import DeviceNotFoundError, PersistenceError
from ..core.logging import get_logger
from ..core.models import (
    CollectionAttempt,
    CollectionStatus,
    DiscoveryProtocol,
    InterfaceRecord,
    Link,
    LinkStatus,
    Neighbor,
    SystemInfo,
    TopologySnapshot,
)
from .database import Database, next_timestamp, now_iso

logger = get_logger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def _loads(value: Optional[str], default: Any) -> Any:
    if not value:
        return default
    try:
        return json.loads(value)
    except ValueError:
        logger.warning(f"Некорректный JSON в БД: {value[:50]!r}")
        return default


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# =============================================================================
# Devices
# =============================================================================

class DeviceRepository:
    """
    Реестр устройств.

    Порядок регистрации (rowid) используется как порядок кандидатов
    при неоднозначном разрешении имени соседа.
    """

    _COLUMNS = (
        "id", "name", "hostname", "ip_address", "port", "vendor", "username",
        "password", "model", "serial_number", "os_version", "location",
        "status", "last_seen", "created_at", "updated_at",
    )

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def _to_device(row: Optional[sqlite3.Row]) -> Optional[Device]:
        if row is None:
            return None
        return Device.from_dict(dict(row))

    def _select(self, where: str = "", params: Sequence[Any] = ()) -> List[Device]:
        query = "SELECT * FROM devices"
        if where:
            query += f" WHERE {where}"
        query += " ORDER BY rowid"
        return [self._to_device(row) for row in self.db.fetchall(query, params, "select_devices")]

    def add(self, device: Device) -> Device:
        """
        Регистрирует устройство.

        Raises:
            PersistenceError: Устройство с таким id уже есть
        """
        now = now_iso()
        device.created_at = device.created_at or now
        values = device.to_dict(include_secrets=True)
        values["updated_at"] = now

        placeholders = ", ".join("?" for _ in self._COLUMNS)
        with self.db.transaction("add_device") as conn:
            conn.execute(
                f"INSERT INTO devices ({', '.join(self._COLUMNS)}) VALUES ({placeholders})",
                tuple(values.get(col) for col in self._COLUMNS),
            )
        logger.info(f"Устройство добавлено: {device}", device=device.display_name)
        return device

    def update(self, device: Device) -> Device:
        """Обновляет параметры подключения и описание устройства."""
        with self.db.transaction("update_device") as conn:
            cursor = conn.execute(
                """
                UPDATE devices SET
                    name = ?, hostname = ?, ip_address = ?, port = ?, vendor = ?,
                    username = ?, password = ?, location = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    device.name, device.hostname, device.ip_address, device.port,
                    device.vendor.value, device.username, device.password,
                    device.location, now_iso(), device.id,
                ),
            )
            if cursor.rowcount == 0:
                raise DeviceNotFoundError(device.id)
        return device

    def get(self, device_id: str) -> Optional[Device]:
        """Устройство по id или None."""
        return self._to_device(
            self.db.fetchone("SELECT * FROM devices WHERE id = ?", (device_id,), "get_device")
        )

    def require(self, device_id: str) -> Device:
        """
        Устройство по id.

        Raises:
            DeviceNotFoundError: Нет такого устройства
        """
        device = self.get(device_id)
        if device is None:
            raise DeviceNotFoundError(device_id)
        return device

    def get_by_name(self, name: str) -> Optional[Device]:
        """Устройство по имени (без учёта регистра) или None."""
        devices = self._select("py_lower(name) = ?", (name.lower(),))
        return devices[0] if devices else None

    def lookup(self, key: str) -> Optional[Device]:
        """Устройство по id, имени или IP (для CLI)."""
        return (
            self.get(key)
            or self.get_by_name(key)
            or next(iter(self._select("ip_address = ?", (key,))), None)
        )

    def list(self) -> List[Device]:
        """Все устройства в порядке регистрации."""
        return self._select()

    def count(self) -> int:
        """Количество устройств."""
        return self.db.fetchone("SELECT COUNT(*) FROM devices", (), "count_devices")[0]

    def delete(self, device_id: str) -> bool:
        """Удаляет устройство (соседи/связи/история удаляются каскадно)."""
        with self.db.transaction("delete_device") as conn:
            cursor = conn.execute("DELETE FROM devices WHERE id = ?", (device_id,))
        return cursor.rowcount > 0

    def update_status(
        self,
        device_id: str,
        status: Union[DeviceStatus, str],
        last_seen: Optional[str] = None,
    ) -> None:
        """Обновляет статус (и last_seen, если передан)."""
        status = DeviceStatus(status)
        with self.db.transaction("update_device_status") as conn:
            conn.execute(
                """
                UPDATE devices
                SET status = ?, last_seen = COALESCE(?, last_seen), updated_at = ?
                WHERE id = ?
                """,
                (status.value, last_seen, now_iso(), device_id),
            )

    def apply_system_info(self, device_id: str, info: Optional[SystemInfo]) -> None:
        """
        Записывает результат успешного сбора в устройство.

        model/serial/os_version обновляются только распознанными значениями,
        hostname заполняется если ещё пуст. Статус — online, last_seen — сейчас.
        """
        info = info or SystemInfo()
        now = now_iso()
        with self.db.transaction("apply_system_info") as conn:
            conn.execute(
                """
                UPDATE devices SET
                    hostname = COALESCE(NULLIF(hostname, ''), ?),
                    model = COALESCE(?, model),
                    serial_number = COALESCE(?, serial_number),
                    os_version = COALESCE(?, os_version),
                    status = ?,
                    last_seen = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    info.hostname or None,
                    info.model or None,
                    info.serial_number or None,
                    info.os_version or None,
                    DeviceStatus.ONLINE.value,
                    now,
                    now,
                    device_id,
                ),
            )

    # --- запросы для разрешения имени соседа ---

    def find_by_name(self, name: str, exclude_id: Optional[str] = None) -> List[Device]:
        """Точное совпадение hostname или name без учёта регистра."""
        name = name.lower()
        return self._select(
            "(py_lower(hostname) = ? OR py_lower(name) = ?) AND id IS NOT ?",
            (name, name, exclude_id),
        )

    def find_by_name_fragment(self, fragment: str, exclude_id: Optional[str] = None) -> List[Device]:
        """hostname или name содержит fragment (без учёта регистра)."""
        pattern = f"%{_escape_like(fragment.lower())}%"
        return self._select(
            "(py_lower(hostname) LIKE ? ESCAPE '\\' OR py_lower(name) LIKE ? ESCAPE '\\') AND id IS NOT ?",
            (pattern, pattern, exclude_id),
        )

    def find_by_ip(self, ip_address: str, exclude_id: Optional[str] = None) -> List[Device]:
        """Точное совпадение адреса управления."""
        return self._select("ip_address = ? AND id IS NOT ?", (ip_address, exclude_id))


# =============================================================================
# Interfaces
# =============================================================================

class InterfaceRepository:
    """Интерфейсы устройств. Удаления нет: устаревшие остаются до перезаписи."""

    def __init__(self, db: Database):
        self.db = db

    def upsert_many(self, device_id: str, interfaces: List[InterfaceRecord]) -> int:
        """
        Upsert интерфейсов устройства по (device_id, name).

        Returns:
            int: Количество записанных интерфейсов
        """
        if not interfaces:
            return 0
        now = now_iso()
        with self.db.transaction("upsert_interfaces") as conn:
            for intf in interfaces:
                conn.execute(
                    """
                    INSERT INTO device_interfaces (
                        id, device_id, name, description, mac_address, speed_mbps,
                        admin_status, oper_status, ip_addresses, vlan_id,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(device_id, name) DO UPDATE SET
                        description = excluded.description,
                        mac_address = excluded.mac_address,
                        speed_mbps = excluded.speed_mbps,
                        admin_status = excluded.admin_status,
                        oper_status = excluded.oper_status,
                        ip_addresses = excluded.ip_addresses,
                        vlan_id = excluded.vlan_id,
                        updated_at = excluded.updated_at
                    """,
                    (
                        _new_id(), device_id, intf.name, intf.description,
                        intf.mac_address, intf.speed_mbps, intf.admin_status,
                        intf.oper_status, _dumps(intf.ip_addresses), intf.vlan_id,
                        now, now,
                    ),
                )
        logger.debug(f"Записано интерфейсов: {len(interfaces)}", device=device_id)
        return len(interfaces)

    def list_for_device(self, device_id: str) -> List[InterfaceRecord]:
        """Интерфейсы устройства по имени."""
        rows = self.db.fetchall(
            "SELECT * FROM device_interfaces WHERE device_id = ? ORDER BY name",
            (device_id,),
            "list_interfaces",
        )
        result = []
        for row in rows:
            data = dict(row)
            data["ip_addresses"] = _loads(data.get("ip_addresses"), [])
            result.append(InterfaceRecord.from_dict(data))
        return result


# =============================================================================
# Neighbors
# =============================================================================

class NeighborRepository:
    """
    Соседи устройств.

    Одна строка на (local_device_id, local_interface, discovery_protocol).
    Повторное наблюдение обновляет строку: discovered_at не меняется,
    last_updated строго растёт.
    """

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def _to_neighbor(row: Optional[sqlite3.Row]) -> Optional[Neighbor]:
        if row is None:
            return None
        data = dict(row)
        data["raw_data"] = _loads(data.get("raw_data"), {})
        return Neighbor(**data)

    def get(self, neighbor_id: str) -> Optional[Neighbor]:
        """Сосед по id."""
        return self._to_neighbor(
            self.db.fetchone("SELECT * FROM topology_neighbors WHERE id = ?", (neighbor_id,), "get_neighbor")
        )

    def get_by_key(
        self,
        local_device_id: str,
        local_interface: str,
        protocol: Union[DiscoveryProtocol, str],
    ) -> Optional[Neighbor]:
        """Сосед по ключу (устройство, локальный порт, протокол)."""
        return self._to_neighbor(
            self.db.fetchone(
                """
                SELECT * FROM topology_neighbors
                WHERE local_device_id = ? AND local_interface = ? AND discovery_protocol = ?
                """,
                (local_device_id, local_interface, DiscoveryProtocol(protocol).value),
                "get_neighbor",
            )
        )

    def upsert(
        self,
        local_device_id: str,
        local_interface: str,
        protocol: Union[DiscoveryProtocol, str],
        remote_device_name: Optional[str] = None,
        remote_interface: Optional[str] = None,
        remote_ip: Optional[str] = None,
        raw_data: Optional[Dict[str, Any]] = None,
    ) -> Neighbor:
        """
        Вставляет соседа или обновляет существующего.

        Returns:
            Neighbor: Актуальная строка
        """
        protocol = DiscoveryProtocol(protocol)
        with self.db.transaction("upsert_neighbor"):
            existing = self.get_by_key(local_device_id, local_interface, protocol)
            updated = next_timestamp(existing.last_updated if existing else None)
            self.db.execute(
                """
                INSERT INTO topology_neighbors (
                    id, local_device_id, local_interface, discovery_protocol,
                    remote_device_name, remote_interface, remote_ip, raw_data,
                    discovered_at, last_updated
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(local_device_id, local_interface, discovery_protocol) DO UPDATE SET
                    remote_device_name = excluded.remote_device_name,
                    remote_interface = excluded.remote_interface,
                    remote_ip = excluded.remote_ip,
                    raw_data = excluded.raw_data,
                    last_updated = excluded.last_updated
                """,
                (
                    _new_id(), local_device_id, local_interface, protocol.value,
                    remote_device_name or None, remote_interface or None,
                    remote_ip or None, _dumps(raw_data or {}), updated, updated,
                ),
                "upsert_neighbor",
            )
            neighbor = self.get_by_key(local_device_id, local_interface, protocol)
        if neighbor is None:
            raise PersistenceError("Сосед не найден после upsert", operation="upsert_neighbor")
        return neighbor

    def set_remote_device(self, neighbor_id: str, remote_device_id: Optional[str]) -> None:
        """Записывает ссылку на разрешённое устройство (None — не разрешён)."""
        with self.db.transaction("set_remote_device") as conn:
            conn.execute(
                "UPDATE topology_neighbors SET remote_device_id = ? WHERE id = ?",
                (remote_device_id, neighbor_id),
            )

    def list(
        self,
        device_id: Optional[str] = None,
        resolved_only: bool = False,
        protocol: Optional[Union[DiscoveryProtocol, str]] = None,
    ) -> List[Neighbor]:
        """Соседи (все или одного устройства) в порядке обнаружения."""
        conditions = []
        params: List[Any] = []
        if device_id:
            conditions.append("local_device_id = ?")
            params.append(device_id)
        if resolved_only:
            conditions.append("remote_device_id IS NOT NULL")
        if protocol:
            conditions.append("discovery_protocol = ?")
            params.append(DiscoveryProtocol(protocol).value)

        query = "SELECT * FROM topology_neighbors"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY discovered_at, rowid"
        return [self._to_neighbor(row) for row in self.db.fetchall(query, params, "list_neighbors")]


# =============================================================================
# Links
# =============================================================================

class LinkRepository:
    """Связи между устройствами. (A, B) и (B, A) — одна связь."""

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def _to_link(row: Optional[sqlite3.Row]) -> Optional[Link]:
        if row is None:
            return None
        data = dict(row)
        data["metadata"] = _loads(data.get("metadata"), {})
        return Link(**data)

    def get(self, link_id: str) -> Optional[Link]:
        """Связь по id."""
        return self._to_link(
            self.db.fetchone("SELECT * FROM topology_links WHERE id = ?", (link_id,), "get_link")
        )

    def find_between(self, device_a: str, device_b: str) -> Optional[Link]:
        """Связь между двумя устройствами в любом направлении."""
        return self._to_link(
            self.db.fetchone(
                """
                SELECT * FROM topology_links
                WHERE (source_device_id = ? AND target_device_id = ?)
                   OR (source_device_id = ? AND target_device_id = ?)
                LIMIT 1
                """,
                (device_a, device_b, device_b, device_a),
                "find_link",
            )
        )

    def create(
        self,
        source_device_id: str,
        target_device_id: str,
        source_interface: Optional[str] = None,
        target_interface: Optional[str] = None,
        link_type: str = "discovered",
        status: Union[LinkStatus, str] = LinkStatus.UP,
        bandwidth_mbps: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Link:
        """
        Создаёт связь.

        Raises:
            PersistenceError: Связь между этими устройствами уже есть
                              (в любом направлении) или source == target
        """
        now = now_iso()
        link = Link(
            id=_new_id(),
            source_device_id=source_device_id,
            target_device_id=target_device_id,
            source_interface=source_interface or None,
            target_interface=target_interface or None,
            link_type=link_type,
            status=status,
            bandwidth_mbps=bandwidth_mbps,
            metadata=dict(metadata or {}),
            created_at=now,
            updated_at=now,
        )
        with self.db.transaction("create_link") as conn:
            conn.execute(
                """
                INSERT INTO topology_links (
                    id, source_device_id, target_device_id, source_interface,
                    target_interface, link_type, status, bandwidth_mbps, metadata,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    link.id, link.source_device_id, link.target_device_id,
                    link.source_interface, link.target_interface, link.link_type,
                    link.status.value, link.bandwidth_mbps, _dumps(link.metadata),
                    link.created_at, link.updated_at,
                ),
            )
        return link

    def refresh(
        self,
        link: Link,
        local_device_id: str,
        local_interface: Optional[str],
        remote_interface: Optional[str],
    ) -> Link:
        """
        Обновляет связь по свежему наблюдению с local_device_id.

        Интерфейсы раскладываются по сторонам связи (наблюдение может идти
        с target-стороны). Пустые значения не затирают существующие.
        Статус — up. Пара устройств не меняется.
        """
        if link.source_device_id == local_device_id:
            source_interface, target_interface = local_interface, remote_interface
        else:
            source_interface, target_interface = remote_interface, local_interface

        with self.db.transaction("refresh_link") as conn:
            conn.execute(
                """
                UPDATE topology_links SET
                    source_interface = COALESCE(?, source_interface),
                    target_interface = COALESCE(?, target_interface),
                    status = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    source_interface or None,
                    target_interface or None,
                    LinkStatus.UP.value,
                    now_iso(),
                    link.id,
                ),
            )
            refreshed = self.get(link.id)
        if refreshed is None:
            raise PersistenceError(f"Связь {link.id} удалена во время обновления", operation="refresh_link")
        return refreshed

    def list(self) -> List[Link]:
        """Все связи в порядке создания."""
        rows = self.db.fetchall("SELECT * FROM topology_links ORDER BY created_at, rowid", (), "list_links")
        return [self._to_link(row) for row in rows]

    def delete(self, link_id: str) -> bool:
        """Удаляет связь. False — связи с таким id нет."""
        with self.db.transaction("delete_link") as conn:
            cursor = conn.execute("DELETE FROM topology_links WHERE id = ?", (link_id,))
        return cursor.rowcount > 0

    def count(self) -> int:
        """Количество связей."""
        return self.db.fetchone("SELECT COUNT(*) FROM topology_links", (), "count_links")[0]


# =============================================================================
# Collection history
# =============================================================================

class CollectionRepository:
    """
    История сборов.

    pending → running → completed | failed. Завершённая запись не меняется.
    """

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def _to_attempt(row: Optional[sqlite3.Row]) -> Optional[CollectionAttempt]:
        if row is None:
            return None
        data = dict(row)
        data["operations"] = _loads(data.get("operations"), [])
        data["raw_output"] = _loads(data.get("raw_output"), {})
        data["parsed_data"] = _loads(data.get("parsed_data"), {})
        return CollectionAttempt(**data)

    def create(self, device_id: str, operations: List[str]) -> CollectionAttempt:
        """Новая запись в статусе pending."""
        attempt = CollectionAttempt(
            id=_new_id(),
            device_id=device_id,
            operations=list(operations),
            status=CollectionStatus.PENDING,
            started_at=now_iso(),
        )
        with self.db.transaction("create_attempt") as conn:
            conn.execute(
                """
                INSERT INTO collection_history (id, device_id, operations, status, started_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    attempt.id, attempt.device_id, _dumps(attempt.operations),
                    attempt.status.value, attempt.started_at,
                ),
            )
        return attempt

    def get(self, attempt_id: str) -> Optional[CollectionAttempt]:
        """Запись по id."""
        return self._to_attempt(
            self.db.fetchone("SELECT * FROM collection_history WHERE id = ?", (attempt_id,), "get_attempt")
        )

    def mark_running(self, attempt_id: str) -> None:
        """pending → running."""
        self._transition(
            attempt_id,
            "status = ?",
            (CollectionStatus.RUNNING.value,),
            allowed=(CollectionStatus.PENDING,),
            operation="mark_running",
        )

    def complete(
        self,
        attempt_id: str,
        raw_output: Dict[str, str],
        parsed_data: Dict[str, Any],
        error_message: Optional[str] = None,
    ) -> None:
        """running → completed (error_message — ошибки отдельных операций)."""
        self._transition(
            attempt_id,
            "status = ?, completed_at = ?, raw_output = ?, parsed_data = ?, error_message = ?",
            (
                CollectionStatus.COMPLETED.value, now_iso(), _dumps(raw_output),
                _dumps(parsed_data), error_message,
            ),
            allowed=(CollectionStatus.PENDING, CollectionStatus.RUNNING),
            operation="complete_attempt",
        )

    def fail(
        self,
        attempt_id: str,
        error_message: str,
        raw_output: Optional[Dict[str, str]] = None,
        parsed_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        """pending/running → failed."""
        self._transition(
            attempt_id,
            "status = ?, completed_at = ?, raw_output = ?, parsed_data = ?, error_message = ?",
            (
                CollectionStatus.FAILED.value, now_iso(), _dumps(raw_output or {}),
                _dumps(parsed_data or {}), error_message,
            ),
            allowed=(CollectionStatus.PENDING, CollectionStatus.RUNNING),
            operation="fail_attempt",
        )

    def _transition(
        self,
        attempt_id: str,
        assignments: str,
        params: Sequence[Any],
        allowed: Sequence[CollectionStatus],
        operation: str,
    ) -> None:
        statuses = ", ".join("?" for _ in allowed)
        with self.db.transaction(operation) as conn:
            cursor = conn.execute(
                f"UPDATE collection_history SET {assignments} WHERE id = ? AND status IN ({statuses})",
                (*params, attempt_id, *(s.value for s in allowed)),
            )
            if cursor.rowcount == 0:
                raise PersistenceError(
                    f"Запись истории {attempt_id} не найдена или уже завершена",
                    operation=operation,
                )

    def list_for_device(self, device_id: str, limit: int = 20) -> List[CollectionAttempt]:
        """Последние попытки сбора устройства (новые первыми)."""
        rows = self.db.fetchall(
            """
            SELECT * FROM collection_history WHERE device_id = ?
            ORDER BY started_at DESC, rowid DESC LIMIT ?
            """,
            (device_id, limit),
            "list_attempts",
        )
        return [self._to_attempt(row) for row in rows]

    def list_recent(self, limit: int = 20) -> List[CollectionAttempt]:
        """Последние попытки сбора по всем устройствам (новые первыми)."""
        rows = self.db.fetchall(
            "SELECT * FROM collection_history ORDER BY started_at DESC, rowid DESC LIMIT ?",
            (limit,),
            "list_attempts",
        )
        return [self._to_attempt(row) for row in rows]


# =============================================================================
# Snapshots
# =============================================================================

class SnapshotRepository:
    """Снимки графа топологии. Снимок не меняется после сохранения."""

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def _to_snapshot(row: Optional[sqlite3.Row]) -> Optional[TopologySnapshot]:
        if row is None:
            return None
        data = dict(row)
        data["topology_data"] = _loads(data.get("topology_data"), {})
        return TopologySnapshot(**data)

    def create(
        self,
        name: str,
        topology_data: Dict[str, Any],
        description: Optional[str] = None,
    ) -> TopologySnapshot:
        """
        Сохраняет снимок.

        Raises:
            ValueError: Пустое имя
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Имя снимка не может быть пустым")

        snapshot = TopologySnapshot(
            id=_new_id(),
            name=name,
            description=description or None,
            topology_data=topology_data,
            created_at=now_iso(),
        )
        with self.db.transaction("create_snapshot") as conn:
            conn.execute(
                """
                INSERT INTO topology_snapshots (id, name, description, topology_data, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    snapshot.id, snapshot.name, snapshot.description,
                    _dumps(snapshot.topology_data), snapshot.created_at,
                ),
            )
        logger.info(f"Снимок топологии сохранён: {snapshot.name}", snapshot=snapshot.id)
        return snapshot

    def get(self, snapshot_id: str) -> Optional[TopologySnapshot]:
        """Снимок по id или None."""
        return self._to_snapshot(
            self.db.fetchone("SELECT * FROM topology_snapshots WHERE id = ?", (snapshot_id,), "get_snapshot")
        )

    def list(self) -> List[TopologySnapshot]:
        """Все снимки, новые первыми."""
        rows = self.db.fetchall(
            "SELECT * FROM topology_snapshots ORDER BY created_at DESC, rowid DESC",
            (),
            "list_snapshots",
        )
        return [self._to_snapshot(row) for row in rows]

    def delete(self, snapshot_id: str) -> bool:
        """Удаляет снимок. False — снимка с таким id нет."""
        with self.db.transaction("delete_snapshot") as conn:
            cursor = conn.execute("DELETE FROM topology_snapshots WHERE id = ?", (snapshot_id,))
        return cursor.rowcount > 0
