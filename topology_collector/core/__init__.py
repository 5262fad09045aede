"""
Core модули Topology Collector.

Содержит базовые классы:
- Device: Запись реестра устройств
- ConnectionManager: Управление SSH подключениями через Scrapli
- CredentialsManager: Учётные данные (устройство → общие → нет)
- RunContext: Контекст выполнения для отслеживания запусков
- Structured Logging: JSON/Human-readable логирование
- models: Записи парсеров и хранилища
- domain: Разрешение соседей и раскладка графа
"""

from .device import Device, DeviceStatus, VendorType
from .connection import ConnectionManager
from .credentials import CredentialsManager, Credentials
from .context import (
    RunContext,
    get_current_context,
    set_current_context,
)
from .logging import (
    get_logger,
    setup_logging,
    setup_logging_from_config,
    StructuredLogger,
    JSONFormatter,
    HumanFormatter,
    LogConfig,
    RotationType,
)
from .exceptions import (
    TopologyCollectorError,
    CollectorError,
    ConnectionError,
    AuthenticationError,
    CommandError,
    ParseError,
    TimeoutError,
    PersistenceError,
    DeviceNotFoundError,
    ConfigError,
    format_error_for_log,
    is_retryable,
)
from .models import (
    Operation,
    DEFAULT_OPERATIONS,
    DiscoveryProtocol,
    CollectionStatus,
    LinkStatus,
    NeighborRecord,
    RoutingPeer,
    InterfaceRecord,
    SystemInfo,
    Neighbor,
    Link,
    CollectionAttempt,
    TopologySnapshot,
)
from .domain import (
    ForceLayout,
    compute_layout,
    NeighborResolver,
    short_name,
)

__all__ = [
    # Device & Connection
    "Device",
    "DeviceStatus",
    "VendorType",
    "ConnectionManager",
    "CredentialsManager",
    "Credentials",
    # Context
    "RunContext",
    "get_current_context",
    "set_current_context",
    # Structured Logging
    "get_logger",
    "setup_logging",
    "setup_logging_from_config",
    "StructuredLogger",
    "JSONFormatter",
    "HumanFormatter",
    "LogConfig",
    "RotationType",
    # Exceptions
    "TopologyCollectorError",
    "CollectorError",
    "ConnectionError",
    "AuthenticationError",
    "CommandError",
    "ParseError",
    "TimeoutError",
    "PersistenceError",
    "DeviceNotFoundError",
    "ConfigError",
    "format_error_for_log",
    "is_retryable",
    # Data Models
    "Operation",
    "DEFAULT_OPERATIONS",
    "DiscoveryProtocol",
    "CollectionStatus",
    "LinkStatus",
    "NeighborRecord",
    "RoutingPeer",
    "InterfaceRecord",
    "SystemInfo",
    "Neighbor",
    "Link",
    "CollectionAttempt",
    "TopologySnapshot",
    # Domain Layer
    "ForceLayout",
    "compute_layout",
    "NeighborResolver",
    "short_name",
]
