"""
Тесты GraphBuilder.
"""

import pytest

from topology_collector.core.config_schema import LayoutConfig
from topology_collector.services import GraphBuilder
from topology_collector.storage import LinkRepository, NeighborRepository


@pytest.fixture
def topology(db, make_device):
    core = make_device("SW-CORE-01", "10.0.0.1")
    dist = make_device("SW-DIST-01", "10.0.0.2", vendor="cisco")
    access = make_device("SW-ACCESS-01", "10.0.0.3")
    link = LinkRepository(db).create(core.id, dist.id, "GE0/0/1", "Gi0/24")
    return {"core": core, "dist": dist, "access": access, "link": link}


def _resolved(db, local, remote, interface, protocol="lldp"):
    repo = NeighborRepository(db)
    neighbor = repo.upsert(local.id, interface, protocol, remote.name, "GE0/0/1")
    repo.set_remote_device(neighbor.id, remote.id)


class TestGraphBuilder:

    def test_nodes_and_link_edges(self, db, topology):
        graph = GraphBuilder(db).build()

        assert [n["label"] for n in graph["nodes"]] == ["SW-CORE-01", "SW-DIST-01", "SW-ACCESS-01"]
        assert graph["nodes"][1]["vendor"] == "cisco"
        assert graph["nodes"][0]["status"] == "unknown"
        assert "x" not in graph["nodes"][0]

        edge = graph["edges"][0]
        assert edge["id"] == topology["link"].id
        assert edge["type"] == "link"
        assert (edge["source_interface"], edge["target_interface"]) == ("GE0/0/1", "Gi0/24")

    def test_neighbor_edge_for_unlinked_pair(self, db, topology):
        """Разрешённый сосед без связи → ребро type=neighbor."""
        _resolved(db, topology["dist"], topology["access"], "Gi0/2")

        edges = GraphBuilder(db).build()["edges"]

        assert [e["type"] for e in edges] == ["link", "neighbor"]
        assert edges[1]["source"] == topology["dist"].id
        assert edges[1]["target"] == topology["access"].id
        assert edges[1]["protocol"] == "lldp"

    def test_linked_pair_not_duplicated(self, db, topology):
        """Сосед уже связанной пары (в обратную сторону) ребро не добавляет."""
        _resolved(db, topology["dist"], topology["core"], "Gi0/24")
        _resolved(db, topology["core"], topology["dist"], "GE0/0/1")

        edges = GraphBuilder(db).build()["edges"]

        assert len(edges) == 1

    def test_metadata(self, db, topology):
        _resolved(db, topology["dist"], topology["access"], "Gi0/2", protocol="ospf")

        metadata = GraphBuilder(db).build()["metadata"]

        assert metadata["device_count"] == 3
        assert metadata["link_count"] == 2
        assert metadata["generated_at"]

    def test_with_layout(self, db, topology):
        config = LayoutConfig(width=400, height=300, padding=50)

        nodes = GraphBuilder(db, config).build(with_layout=True)["nodes"]

        for node in nodes:
            assert 50 <= node["x"] <= 350
            assert 50 <= node["y"] <= 250

    def test_empty(self, db):
        graph = GraphBuilder(db).build(with_layout=True)

        assert graph["nodes"] == []
        assert graph["edges"] == []
        assert graph["metadata"]["link_count"] == 0
