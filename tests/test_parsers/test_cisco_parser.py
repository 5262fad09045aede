"""
Тесты парсеров Cisco IOS / IOS-XE.
"""

import pytest

from topology_collector.parsers import CiscoParser


@pytest.fixture
def parser():
    return CiscoParser()


class TestCiscoNeighbors:
    """Тесты show lldp neighbors."""

    def test_lldp_table(self, parser, load_fixture):
        """Легенда до заголовка и итог после таблицы пропускаются."""
        output = load_fixture("cisco", "show_lldp_neighbors.txt")

        result = parser.parse_neighbors(output)

        assert len(result) == 3
        first = result[0]
        assert first.remote_device_name == "SW-DIST-01"
        assert first.local_interface == "Gi1/0/1"
        assert first.remote_interface == "Gi0/24"
        assert first.hold_time == 120
        assert first.capabilities == ["B", "R"]

    def test_empty_capability_column(self, parser, load_fixture):
        """Пустая колонка Capability не ломает разбор."""
        output = load_fixture("cisco", "show_lldp_neighbors.txt")

        access_point = parser.parse_neighbors(output)[2]

        assert access_point.remote_device_name == "AP-FLOOR-2"
        assert access_point.capabilities == []
        assert access_point.remote_interface == "Gi0"

    @pytest.mark.parametrize("count", [0, 1, 5, 20])
    def test_returns_one_record_per_data_line(self, parser, count):
        """N строк данных → N записей."""
        lines = ["Device ID           Local Intf     Hold-time  Capability      Port ID"]
        lines += [f"SW-ACCESS-{i:02d}        Gi1/0/{i + 1}        120        B               Gi0/1" for i in range(count)]
        lines += ["", f"Total entries displayed: {count}"]

        result = parser.parse_neighbors("\n".join(lines))

        assert len(result) == count


class TestCiscoRoutingPeers:
    """Тесты show ip ospf neighbor."""

    def test_ospf_neighbors(self, parser):
        """State с пробелами (FULL/  -) склеивается."""
        output = """
Neighbor ID     Pri   State           Dead Time   Address         Interface
10.0.0.2          1   FULL/DR         00:00:35    10.0.12.2       GigabitEthernet0/1
10.0.0.3          0   FULL/  -        00:00:33    10.0.13.2       Vlan10
"""
        result = parser.parse_routing_peers(output)

        assert len(result) == 2
        dr, p2p = result
        assert dr.neighbor_id == "10.0.0.2"
        assert dr.neighbor_ip == "10.0.12.2"
        assert dr.state == "FULL/DR"
        assert dr.priority == 1
        assert dr.dead_time == "00:00:35"
        assert dr.interface == "GigabitEthernet0/1"

        assert p2p.state == "FULL/-"
        assert p2p.priority == 0
        assert p2p.interface == "Vlan10"


class TestCiscoInterfaces:
    """Тесты show ip interface brief."""

    def test_ip_interface_brief(self, parser):
        output = """
Interface              IP-Address      OK? Method Status                Protocol
GigabitEthernet0/1     10.0.0.1        YES manual up                    up
GigabitEthernet0/2     unassigned      YES unset  administratively down down
Loopback0              1.1.1.1         YES manual up                    up
"""
        result = {i.name: i for i in parser.parse_interfaces(output)}

        assert len(result) == 3
        gi1 = result["GigabitEthernet0/1"]
        assert (gi1.admin_status, gi1.oper_status) == ("up", "up")
        assert gi1.ip_addresses == ["10.0.0.1"]
        assert gi1.speed_mbps == 1000

        gi2 = result["GigabitEthernet0/2"]
        assert (gi2.admin_status, gi2.oper_status) == ("down", "down")
        assert gi2.ip_addresses == []

        assert result["Loopback0"].speed_mbps is None


class TestCiscoSystemInfo:
    """Тесты show version."""

    def test_show_version(self, parser, load_fixture):
        output = load_fixture("cisco", "show_version.txt")

        info = parser.parse_system_info(output)

        assert info.hostname == "SW-CORE-01"
        assert info.model == "C9300-48P"
        assert info.serial_number == "FCW2233L0AB"
        assert info.os_version == "IOS 16.12.04"
        assert info.uptime == "2 weeks, 3 days, 4 hours, 5 minutes"
