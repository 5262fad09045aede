"""
Граф топологии для визуализации.

Узлы — устройства реестра, рёбра — связи (type="link") и пары
разрешённых соседей, для которых связи ещё нет (type="neighbor").
Пары считаются без учёта направления.

Пример использования:
    graph = GraphBuilder(db).build(with_layout=True)
    graph["nodes"][0]  # {"id": ..., "label": ..., "x": 100.0, "y": 100.0, ...}
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Tuple

from ..core.config_schema import LayoutConfig
from ..core.domain.layout import ForceLayout
from ..core.logging import get_logger
from ..storage.database import Database
from ..storage.repositories import DeviceRepository, LinkRepository, NeighborRepository

logger = get_logger(__name__)


def _pair(a: str, b: str) -> Tuple[str, str]:
    return (a, b) if a <= b else (b, a)


class GraphBuilder:
    """
    Сборка графа из хранилища.

    Attributes:
        layout: Раскладка (используется при build(with_layout=True))
    """

    def __init__(self, db: Database, layout_config: Optional[LayoutConfig] = None):
        self.devices = DeviceRepository(db)
        self.links = LinkRepository(db)
        self.neighbors = NeighborRepository(db)
        self.layout = ForceLayout(layout_config)

    def build(self, with_layout: bool = False) -> Dict[str, Any]:
        """
        Граф: nodes, edges, metadata.

        Args:
            with_layout: Посчитать координаты x/y узлов
        """
        devices = self.devices.list()
        nodes = [
            {
                "id": device.id,
                "label": device.display_name,
                "ip": device.ip_address,
                "vendor": device.vendor.value,
                "status": device.status.value,
                "model": device.model,
            }
            for device in devices
        ]

        edges = self._link_edges()
        edges.extend(self._neighbor_edges({_pair(e["source"], e["target"]) for e in edges}))

        if with_layout:
            positions = self.layout.compute(
                [node["id"] for node in nodes],
                [(edge["source"], edge["target"]) for edge in edges],
            )
            for node in nodes:
                node["x"], node["y"] = positions[node["id"]]

        logger.debug(f"Граф: узлов {len(nodes)}, рёбер {len(edges)}")
        return {
            "nodes": nodes,
            "edges": edges,
            "metadata": {
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "device_count": len(nodes),
                "link_count": len(edges),
            },
        }

    def _link_edges(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": link.id,
                "source": link.source_device_id,
                "target": link.target_device_id,
                "source_interface": link.source_interface,
                "target_interface": link.target_interface,
                "bandwidth_mbps": link.bandwidth_mbps,
                "status": link.status.value,
                "type": "link",
            }
            for link in self.links.list()
        ]

    def _neighbor_edges(self, existing: Set[Tuple[str, str]]) -> List[Dict[str, Any]]:
        edges = []
        for neighbor in self.neighbors.list(resolved_only=True):
            pair = _pair(neighbor.local_device_id, neighbor.remote_device_id)
            if pair in existing or pair[0] == pair[1]:
                continue
            existing.add(pair)
            edges.append({
                "id": f"neighbor-{neighbor.local_device_id}-{neighbor.remote_device_id}",
                "source": neighbor.local_device_id,
                "target": neighbor.remote_device_id,
                "source_interface": neighbor.local_interface,
                "target_interface": neighbor.remote_interface,
                "status": "discovered",
                "type": "neighbor",
                "protocol": neighbor.discovery_protocol.value,
            })
        return edges
