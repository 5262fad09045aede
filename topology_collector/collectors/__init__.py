"""
Коллекторы: сбор данных с устройств по SSH.

TopologyCollector — оркестратор сбора LLDP/OSPF/интерфейсов/system info.
"""

from .topology import (
    CollectionResult,
    CollectionState,
    ConnectionTestResult,
    TopologyCollector,
    normalize_operations,
)

__all__ = [
    "CollectionResult",
    "CollectionState",
    "ConnectionTestResult",
    "TopologyCollector",
    "normalize_operations",
]
