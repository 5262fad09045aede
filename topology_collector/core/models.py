"""
Data Models для Topology Collector.

Типизированные dataclasses вместо Dict[str, Any]:
- записи, которые возвращают парсеры (NeighborRecord, RoutingPeer,
  InterfaceRecord, SystemInfo)
- записи хранилища (Neighbor, Link, CollectionAttempt)

Использование:
    from topology_collector.core.models import NeighborRecord

    neighbor = NeighborRecord(local_interface="GE0/0/1", remote_device_name="SW-01")
    data = neighbor.to_dict()
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, List, Any, Dict, Union


class Operation(str, Enum):
    """Логическая операция сбора (ключ каталога команд)."""
    LLDP = "lldp"
    OSPF = "ospf"
    INTERFACES = "interfaces"
    SYSTEM = "system"
    TEST = "test"


# Операции сбора по умолчанию (каноничный порядок)
DEFAULT_OPERATIONS: List[Operation] = [
    Operation.LLDP,
    Operation.OSPF,
    Operation.INTERFACES,
    Operation.SYSTEM,
]


class DiscoveryProtocol(str, Enum):
    """Способ, которым обнаружен сосед."""
    LLDP = "lldp"
    OSPF = "ospf"
    CDP = "cdp"
    MANUAL = "manual"


class CollectionStatus(str, Enum):
    """Жизненный цикл попытки сбора."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class LinkStatus(str, Enum):
    """Статус связи."""
    UP = "up"
    DOWN = "down"
    UNKNOWN = "unknown"


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Убирает None и пустые строки."""
    return {k: v for k, v in data.items() if v is not None and v != ""}


# =============================================================================
# Записи парсеров
# =============================================================================

@dataclass
class NeighborRecord:
    """
    Сосед канального уровня (LLDP / ip neighbor).

    Attributes:
        local_interface: Локальный порт
        remote_device_name: Имя соседа, как его сообщил сосед
        remote_interface: Порт соседа
        remote_ip: Адрес управления соседа (если есть в выводе)
        remote_description: Описание системы
        capabilities: Capability-коды (B, R, ...)
        hold_time: Hold time в секундах
        raw_data: Исходная строка и доп. поля
    """
    local_interface: str
    remote_device_name: str
    remote_interface: str = ""
    remote_ip: Optional[str] = None
    remote_description: Optional[str] = None
    capabilities: List[str] = field(default_factory=list)
    hold_time: Optional[int] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NeighborRecord":
        """Создаёт NeighborRecord из словаря."""
        return cls(
            local_interface=data.get("local_interface") or "",
            remote_device_name=data.get("remote_device_name") or "",
            remote_interface=data.get("remote_interface") or "",
            remote_ip=data.get("remote_ip"),
            remote_description=data.get("remote_description"),
            capabilities=list(data.get("capabilities") or []),
            hold_time=data.get("hold_time"),
            raw_data=dict(data.get("raw_data") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        data = _compact(asdict(self))
        if not self.capabilities:
            data.pop("capabilities", None)
        return data

    @classmethod
    def ensure_list(
        cls, data: Union[List[Dict[str, Any]], List["NeighborRecord"]]
    ) -> List["NeighborRecord"]:
        """Конвертирует List[Dict] в List[NeighborRecord] если нужно."""
        if not data:
            return []
        if isinstance(data[0], dict):
            return [cls.from_dict(d) for d in data]
        return data


@dataclass
class RoutingPeer:
    """
    OSPF-сосед.

    Attributes:
        neighbor_id: Router ID соседа
        neighbor_ip: Адрес соседа
        state: Состояние смежности (Full/DR, 2-Way, ...)
        interface: Локальный интерфейс
        area: Area
        priority: Приоритет
        dead_time: Dead time как в выводе
    """
    neighbor_id: str
    neighbor_ip: str
    state: str
    interface: str = ""
    area: str = "0"
    priority: Optional[int] = None
    dead_time: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoutingPeer":
        """Создаёт RoutingPeer из словаря."""
        return cls(
            neighbor_id=data.get("neighbor_id") or "",
            neighbor_ip=data.get("neighbor_ip") or "",
            state=data.get("state") or "",
            interface=data.get("interface") or "",
            area=str(data.get("area") or "0"),
            priority=data.get("priority"),
            dead_time=data.get("dead_time"),
            raw_data=dict(data.get("raw_data") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        return _compact(asdict(self))


@dataclass
class InterfaceRecord:
    """
    Интерфейс устройства.

    Attributes:
        name: Имя интерфейса
        admin_status: up/down
        oper_status: up/down
        description: Описание
        mac_address: MAC
        speed_mbps: Скорость (Мбит/с), если известна
        ip_addresses: IP-адреса интерфейса
        vlan_id: VLAN (access)
    """
    name: str
    admin_status: str = "down"
    oper_status: str = "down"
    description: Optional[str] = None
    mac_address: Optional[str] = None
    speed_mbps: Optional[int] = None
    ip_addresses: List[str] = field(default_factory=list)
    vlan_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterfaceRecord":
        """Создаёт InterfaceRecord из словаря."""
        return cls(
            name=data.get("name") or "",
            admin_status=data.get("admin_status") or "down",
            oper_status=data.get("oper_status") or "down",
            description=data.get("description"),
            mac_address=data.get("mac_address"),
            speed_mbps=data.get("speed_mbps"),
            ip_addresses=list(data.get("ip_addresses") or []),
            vlan_id=data.get("vlan_id"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        data = _compact(asdict(self))
        if not self.ip_addresses:
            data.pop("ip_addresses", None)
        return data


@dataclass
class SystemInfo:
    """
    Системная информация (show version / display version).

    Все поля опциональны — каждое извлекается независимо.
    """
    hostname: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    os_version: Optional[str] = None
    uptime: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SystemInfo":
        """Создаёт SystemInfo из словаря."""
        return cls(
            hostname=data.get("hostname"),
            model=data.get("model"),
            serial_number=data.get("serial_number"),
            os_version=data.get("os_version"),
            uptime=data.get("uptime"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        return _compact(asdict(self))

    def is_empty(self) -> bool:
        """Ни одно поле не распознано."""
        return not self.to_dict()


# =============================================================================
# Записи хранилища
# =============================================================================

@dataclass
class Neighbor:
    """Сохранённая запись соседа (topology_neighbors)."""
    id: str
    local_device_id: str
    local_interface: str
    discovery_protocol: DiscoveryProtocol
    remote_device_name: Optional[str] = None
    remote_interface: Optional[str] = None
    remote_ip: Optional[str] = None
    remote_device_id: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)
    discovered_at: Optional[str] = None
    last_updated: Optional[str] = None

    def __post_init__(self):
        self.discovery_protocol = DiscoveryProtocol(self.discovery_protocol)

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        data = asdict(self)
        data["discovery_protocol"] = self.discovery_protocol.value
        return data


@dataclass
class Link:
    """
    Связь между двумя устройствами (topology_links).

    Направление source/target не несёт смысла: (A, B) и (B, A) — одна связь.
    """
    id: str
    source_device_id: str
    target_device_id: str
    source_interface: Optional[str] = None
    target_interface: Optional[str] = None
    link_type: str = "discovered"
    status: LinkStatus = LinkStatus.UP
    bandwidth_mbps: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        self.status = LinkStatus(self.status)

    @property
    def pair_key(self) -> tuple:
        """Ключ пары устройств без учёта направления."""
        return tuple(sorted((self.source_device_id, self.target_device_id)))

    def connects(self, device_a: str, device_b: str) -> bool:
        """Связь соединяет эти два устройства (в любом направлении)."""
        return self.pair_key == tuple(sorted((device_a, device_b)))

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class CollectionAttempt:
    """Запись о попытке сбора (collection_history)."""
    id: str
    device_id: str
    operations: List[str] = field(default_factory=list)
    status: CollectionStatus = CollectionStatus.PENDING
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    raw_output: Dict[str, str] = field(default_factory=dict)
    parsed_data: Dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None

    def __post_init__(self):
        self.status = CollectionStatus(self.status)

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class TopologySnapshot:
    """
    Сохранённый граф топологии (topology_snapshots).

    topology_data — результат GraphBuilder.build() на момент сохранения.
    """
    id: str
    name: str
    description: Optional[str] = None
    topology_data: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None

    def summary(self) -> Dict[str, Any]:
        """Краткое описание без графа (для списка снимков)."""
        metadata = self.topology_data.get("metadata", {})
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": self.created_at,
            "device_count": metadata.get("device_count", 0),
            "link_count": metadata.get("link_count", 0),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        return asdict(self)
