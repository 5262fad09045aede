"""
Тесты парсеров Juniper JunOS.
"""

import pytest

from topology_collector.parsers import JuniperParser


@pytest.fixture
def parser():
    return JuniperParser()


class TestJuniperNeighbors:
    """Тесты show lldp neighbors."""

    def test_lldp_neighbors(self, parser):
        output = """
Local Interface    Parent Interface    Chassis Id          Port info          System Name
ge-0/0/1           -                   00:11:22:33:44:55   ge-0/0/24          SW-ACCESS-01
xe-0/1/0           ae0                 00:11:22:33:44:66   xe-0/0/1           CORE-RTR
"""
        result = parser.parse_neighbors(output)

        assert len(result) == 2
        assert result[0].local_interface == "ge-0/0/1"
        assert result[0].remote_interface == "ge-0/0/24"
        assert result[0].remote_device_name == "SW-ACCESS-01"
        assert result[0].raw_data["chassis_id"] == "00:11:22:33:44:55"
        assert result[1].remote_device_name == "CORE-RTR"


class TestJuniperRoutingPeers:
    """Тесты show ospf neighbor."""

    def test_ospf_neighbors(self, parser):
        output = """
Address          Interface              State           ID               Pri  Dead
10.0.12.2        ge-0/0/1.0             Full            10.0.0.2         128    35
"""
        result = parser.parse_routing_peers(output)

        assert len(result) == 1
        peer = result[0]
        assert peer.neighbor_id == "10.0.0.2"
        assert peer.neighbor_ip == "10.0.12.2"
        assert peer.interface == "ge-0/0/1.0"
        assert peer.state == "Full"
        assert peer.priority == 128
        assert peer.dead_time == "35s"


class TestJuniperInterfaces:
    """Тесты show interfaces terse."""

    def test_interfaces_terse(self, parser):
        output = """
Interface               Admin Link Proto    Local                 Remote
ge-0/0/0                up    up
ge-0/0/0.0              up    up   inet     10.0.0.1/30
ge-0/0/1                up    down
xe-0/1/0                down  down
lo0                     up    up
"""
        result = {i.name: i for i in parser.parse_interfaces(output)}

        assert len(result) == 5
        assert result["ge-0/0/0.0"].ip_addresses == ["10.0.0.1/30"]
        assert result["ge-0/0/0"].speed_mbps == 1000
        assert result["ge-0/0/1"].oper_status == "down"
        assert result["xe-0/1/0"].admin_status == "down"
        assert result["xe-0/1/0"].speed_mbps == 10000
        assert result["lo0"].speed_mbps is None


class TestJuniperSystemInfo:
    """Тесты show version."""

    def test_show_version(self, parser, load_fixture):
        output = load_fixture("juniper", "show_version.txt")

        info = parser.parse_system_info(output)

        assert info.hostname == "EX-CORE-01"
        assert info.model == "ex4300-48t"
        assert info.os_version == "JUNOS 18.4R2-S3.4"

    def test_version_from_package_line(self, parser):
        """Без строки Junos: версия из строки пакета."""
        info = parser.parse_system_info("JUNOS Base OS boot [15.1X49-D170.4]")

        assert info.os_version == "JUNOS 15.1X49-D170.4"
