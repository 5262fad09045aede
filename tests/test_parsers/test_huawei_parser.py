"""
Тесты парсеров Huawei VRP.

Проверяет разбор display lldp neighbor brief, display ospf peer brief,
display interface brief и display version.
"""

import pytest

from topology_collector.core.constants import speed_from_name
from topology_collector.core.models import Operation
from topology_collector.parsers import HuaweiParser


@pytest.fixture
def parser():
    return HuaweiParser()


class TestHuaweiNeighbors:
    """Тесты display lldp neighbor brief."""

    def test_four_data_lines_without_header(self, parser):
        """Четыре строки данных → ровно четыре соседа, колонки 1-3."""
        output = (
            "GE0/0/1 SW-DIST-01 GE0/0/24\n"
            "GE0/0/2 SW-DIST-02 GE0/0/24\n"
            "GE0/0/3 SW-ACCESS-01 GE0/0/1\n"
            "GE0/0/4 ROUTER-EDGE-01 GE0/0/0\n"
        )

        result = parser.parse_neighbors(output)

        assert len(result) == 4
        assert [n.local_interface for n in result] == ["GE0/0/1", "GE0/0/2", "GE0/0/3", "GE0/0/4"]
        assert [n.remote_device_name for n in result] == [
            "SW-DIST-01", "SW-DIST-02", "SW-ACCESS-01", "ROUTER-EDGE-01",
        ]
        assert [n.remote_interface for n in result] == ["GE0/0/24", "GE0/0/24", "GE0/0/1", "GE0/0/0"]
        assert result[0].hold_time is None

    def test_table_with_header(self, parser, load_fixture):
        """Таблица с заголовком: hold time из четвёртой колонки."""
        output = load_fixture("huawei", "display_lldp_neighbor_brief.txt")

        result = parser.parse_neighbors(output)

        assert len(result) == 3
        assert result[0].hold_time == 120
        assert result[2].local_interface == "XGE0/0/1"
        assert result[2].remote_device_name == "CORE-RTR.corp.local"
        assert result[2].remote_interface == "Eth1/1"

    def test_skips_non_interface_lines(self, parser):
        """Строки, не начинающиеся с имени порта, пропускаются."""
        output = (
            "Info: LLDP is enabled\n"
            "GE0/0/1 SW-DIST-01 GE0/0/24\n"
            "Total: 1\n"
        )

        result = parser.parse_neighbors(output)

        assert len(result) == 1
        assert result[0].raw_data["original_line"] == "GE0/0/1 SW-DIST-01 GE0/0/24"

    @pytest.mark.parametrize("output", ["", "   \n\n", "garbage without columns"])
    def test_garbage_returns_empty(self, parser, output):
        """Пустой или мусорный вывод → пустой список, без исключений."""
        assert parser.parse_neighbors(output) == []


class TestHuaweiRoutingPeers:
    """Тесты display ospf peer brief."""

    def test_area_table_format(self, parser):
        """Формат Area Id / Interface / Neighbor id / State."""
        output = """
 OSPF Process 1 with Router ID 10.0.0.1
  Peer Statistic Information
 ----------------------------------------------------------------------------
 Area Id          Interface                        Neighbor id      State
 0.0.0.0          GigabitEthernet0/0/1             10.0.0.2         Full
 0.0.0.1          GigabitEthernet0/0/2             10.0.0.3         ExStart
 ----------------------------------------------------------------------------
"""
        result = parser.parse_routing_peers(output)

        assert len(result) == 2
        assert result[0].neighbor_id == "10.0.0.2"
        assert result[0].neighbor_ip == "10.0.0.2"
        assert result[0].interface == "GigabitEthernet0/0/1"
        assert result[0].area == "0.0.0.0"
        assert result[0].state == "Full"
        assert result[1].area == "0.0.0.1"
        assert result[1].state == "ExStart"

    def test_router_id_table_format(self, parser):
        """Формат RouterId / Address / State / Mode / Pri / Dead-Time / Interface."""
        output = (
            "RouterId     Address      State     Mode    Pri  Dead-Time  Interface\n"
            "10.0.0.2     10.0.12.2    Full/DR   Normal  1    00:00:35   GE0/0/1\n"
        )

        result = parser.parse_routing_peers(output)

        assert len(result) == 1
        peer = result[0]
        assert peer.neighbor_id == "10.0.0.2"
        assert peer.neighbor_ip == "10.0.12.2"
        assert peer.state == "Full/DR"
        assert peer.interface == "GE0/0/1"
        assert peer.priority == 1
        assert peer.dead_time == "00:00:35"


class TestHuaweiInterfaces:
    """Тесты display interface brief."""

    def test_statuses_and_speed(self, parser, load_fixture):
        """*down — admin down, скорость по имени порта."""
        output = load_fixture("huawei", "display_interface_brief.txt")

        result = {i.name: i for i in parser.parse_interfaces(output)}

        assert set(result) == {
            "GigabitEthernet0/0/1",
            "GigabitEthernet0/0/2",
            "XGigabitEthernet0/0/1",
            "Vlanif10",
        }
        up = result["GigabitEthernet0/0/1"]
        assert (up.admin_status, up.oper_status) == ("up", "up")
        assert up.speed_mbps == 1000

        disabled = result["GigabitEthernet0/0/2"]
        assert (disabled.admin_status, disabled.oper_status) == ("down", "down")

        no_protocol = result["XGigabitEthernet0/0/1"]
        assert (no_protocol.admin_status, no_protocol.oper_status) == ("up", "down")
        assert no_protocol.speed_mbps == 10000

        assert result["Vlanif10"].speed_mbps is None

    @pytest.mark.parametrize("name, speed", [
        ("XGigabitEthernet0/0/1", 10000),
        ("XGE0/0/1", 10000),
        ("GigabitEthernet0/0/1", 1000),
        ("100GE1/0/1", 100000),
        ("Eth-Trunk1", None),
    ])
    def test_speed_from_long_and_short_names(self, name, speed):
        assert speed_from_name(name) == speed

    def test_legend_before_header_ignored(self, parser):
        """Легенда до заголовка не считается данными."""
        output = (
            "*down: administratively down\n"
            "Interface                   PHY   Protocol  InUti OutUti   inErrors  outErrors\n"
        )
        assert parser.parse_interfaces(output) == []


class TestHuaweiSystemInfo:
    """Тесты display version."""

    def test_display_version(self, parser, load_fixture):
        """Модель, версия, uptime и hostname из prompt."""
        output = load_fixture("huawei", "display_version.txt")

        info = parser.parse_system_info(output)

        assert info.hostname == "SW-CORE-01"
        assert info.model == "S5720-28X-SI-AC"
        assert info.os_version == "VRP 5.170"
        assert info.uptime == "120 days, 3 hours, 15 minutes"
        assert info.serial_number is None

    def test_empty_output(self, parser):
        """Пустой вывод → пустой SystemInfo."""
        assert parser.parse_system_info("").is_empty()


class TestHuaweiCommands:
    """Тесты каталога команд."""

    @pytest.mark.parametrize("operation, command", [
        (Operation.LLDP, "display lldp neighbor brief"),
        (Operation.OSPF, "display ospf peer brief"),
        (Operation.INTERFACES, "display interface brief"),
        (Operation.SYSTEM, "display version"),
        ("test", "display clock"),
    ])
    def test_command_for(self, parser, operation, command):
        assert parser.command_for(operation) == command

    def test_unknown_operation_raises(self, parser):
        """Неизвестная операция → ValueError."""
        with pytest.raises(ValueError):
            parser.command_for("bgp")
