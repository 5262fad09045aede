"""
Парсеры Cisco IOS / IOS-XE.

Команды:
- show lldp neighbors
- show ip ospf neighbor
- show ip interface brief
- show version
"""

import re
from typing import List

from ..core.constants.interfaces import (
    CISCO_INTERFACE_PREFIXES,
    CISCO_NEIGHBOR_PREFIXES,
    has_prefix,
    speed_from_name,
)
from ..core.device import VendorType
from ..core.models import InterfaceRecord, NeighborRecord, RoutingPeer, SystemInfo
from .base import VendorParser, is_ipv4, iter_data_lines, search_first, to_int

_CAPABILITY = re.compile(r"^[BRTCWPSOHD](?:,[BRTCWPSOHD])*$")

_HOSTNAME = [re.compile(r"^(\S+)\s+uptime is", re.IGNORECASE)]
_MODEL = [
    re.compile(r"^Model number\s*:\s*(\S+)", re.IGNORECASE),
    re.compile(r"^cisco\s+(\S+)\s.*(?:processor|bytes of memory)", re.IGNORECASE),
]
_SERIAL = [
    re.compile(r"^System serial number\s*:\s*(\S+)", re.IGNORECASE),
    re.compile(r"^Processor board ID\s+(\S+)", re.IGNORECASE),
]
_VERSION = [re.compile(r"(?:IOS|Software).*?Version\s+([^\s,]+)", re.IGNORECASE)]
_UPTIME = [re.compile(r"uptime is\s+(.+)", re.IGNORECASE)]


class CiscoParser(VendorParser):
    """Cisco IOS / IOS-XE."""

    vendor = VendorType.CISCO

    def parse_neighbors(self, raw: str) -> List[NeighborRecord]:
        """
        Парсит show lldp neighbors.

        Формат:
            Device ID        Local Intf     Hold-time  Capability      Port ID
            SW-DIST-01       Gi0/1          120        B,R             Gi0/24

        Колонка Capability может быть пустой.
        """
        neighbors = []
        for line in iter_data_lines(raw, header="Device ID"):
            parts = line.split()
            if len(parts) < 4 or not has_prefix(parts[1], CISCO_NEIGHBOR_PREFIXES):
                continue

            capabilities = []
            for token in parts[3:-1]:
                if _CAPABILITY.match(token):
                    capabilities.extend(token.split(","))

            neighbors.append(NeighborRecord(
                local_interface=parts[1],
                remote_device_name=parts[0],
                remote_interface=parts[-1],
                hold_time=to_int(parts[2]),
                capabilities=capabilities,
                raw_data={"original_line": line},
            ))
        return neighbors

    def parse_routing_peers(self, raw: str) -> List[RoutingPeer]:
        """
        Парсит show ip ospf neighbor.

        Формат:
            Neighbor ID     Pri   State           Dead Time   Address         Interface
            10.0.0.2          1   FULL/DR         00:00:35    10.0.0.2        GigabitEthernet0/1
            10.0.0.3          0   FULL/  -        00:00:33    10.0.1.2        Vlan10

        State может содержать пробелы (FULL/  -), поэтому Dead Time,
        Address и Interface берутся с конца строки.
        """
        peers = []
        for line in iter_data_lines(raw, header="Neighbor ID"):
            parts = line.split()
            if len(parts) < 6 or not is_ipv4(parts[0]):
                continue

            peers.append(RoutingPeer(
                neighbor_id=parts[0],
                neighbor_ip=parts[-2],
                state="".join(parts[2:-3]),
                interface=parts[-1],
                priority=to_int(parts[1], maximum=255),
                dead_time=parts[-3],
                raw_data={"original_line": line},
            ))
        return peers

    def parse_interfaces(self, raw: str) -> List[InterfaceRecord]:
        """
        Парсит show ip interface brief.

        Формат:
            Interface              IP-Address      OK? Method Status                Protocol
            GigabitEthernet0/1     10.0.0.1        YES manual up                    up
            GigabitEthernet0/2     unassigned      YES unset  administratively down down
        """
        interfaces = []
        for line in iter_data_lines(raw, header="Interface"):
            parts = line.split()
            if len(parts) < 6 or not has_prefix(parts[0], CISCO_INTERFACE_PREFIXES):
                continue

            status = " ".join(parts[4:-1]).lower()
            interface = InterfaceRecord(
                name=parts[0],
                admin_status="down" if status.startswith("administratively") else "up",
                oper_status="up" if parts[-1].lower() == "up" else "down",
                speed_mbps=speed_from_name(parts[0]),
            )
            if is_ipv4(parts[1]):
                interface.ip_addresses = [parts[1]]
            interfaces.append(interface)
        return interfaces

    def parse_system_info(self, raw: str) -> SystemInfo:
        """Парсит show version."""
        info = SystemInfo()
        for line in (raw or "").splitlines():
            line = line.strip()
            if not line:
                continue

            info.hostname = search_first(_HOSTNAME, line) or info.hostname
            if not info.model:
                info.model = search_first(_MODEL, line)
            if not info.serial_number:
                info.serial_number = search_first(_SERIAL, line)

            version = search_first(_VERSION, line)
            if version and not info.os_version:
                info.os_version = f"IOS {version}"

            info.uptime = search_first(_UPTIME, line) or info.uptime
        return info
