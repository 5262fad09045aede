"""
Domain Layer для Topology Collector.

Логика, не зависящая от SSH и хранилища:
- NeighborResolver: разрешение имени/IP соседа в устройство реестра
- ForceLayout: force-directed раскладка графа

Использование:
    from topology_collector.core.domain import ForceLayout

    positions = ForceLayout().compute(node_ids, edges)
"""

from .layout import ForceLayout, compute_layout
from .resolver import NeighborResolver, short_name

__all__ = [
    "ForceLayout",
    "compute_layout",
    "NeighborResolver",
    "short_name",
]
