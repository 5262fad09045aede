"""
Парсеры Juniper JunOS.

Команды:
- show lldp neighbors
- show ospf neighbor
- show interfaces terse
- show version
"""

import re
from typing import List

from ..core.constants.interfaces import (
    JUNIPER_INTERFACE_PREFIXES,
    JUNIPER_NEIGHBOR_PREFIXES,
    has_prefix,
    speed_from_name,
)
from ..core.device import VendorType
from ..core.models import InterfaceRecord, NeighborRecord, RoutingPeer, SystemInfo
from .base import VendorParser, is_ipv4, iter_data_lines, search_first, to_int

_HOSTNAME = [re.compile(r"^Hostname:\s+(\S+)", re.IGNORECASE)]
_MODEL = [re.compile(r"^Model:\s+(\S+)", re.IGNORECASE)]
_SERIAL = [re.compile(r"(?:serial number|Chassis)[:\s]+(\S+)", re.IGNORECASE)]
_VERSION = [re.compile(r"^Junos:\s+(\S+)", re.IGNORECASE)]
_VERSION_ALT = [re.compile(r"JUNOS[^\[]*\[(\S+)\]", re.IGNORECASE)]
_UPTIME = [re.compile(r"System booted:\s+.*\((.+) ago\)", re.IGNORECASE)]


class JuniperParser(VendorParser):
    """Juniper EX/QFX/MX."""

    vendor = VendorType.JUNIPER

    def parse_neighbors(self, raw: str) -> List[NeighborRecord]:
        """
        Парсит show lldp neighbors.

        Формат:
            Local Interface  Parent Interface  Chassis Id         Port info   System Name
            ge-0/0/1         -                 00:11:22:33:44:55  ge-0/0/24   SW-ACCESS-01
        """
        neighbors = []
        for line in iter_data_lines(raw, header="Local Interface"):
            parts = line.split()
            if len(parts) < 4 or not has_prefix(parts[0], JUNIPER_NEIGHBOR_PREFIXES):
                continue

            neighbors.append(NeighborRecord(
                local_interface=parts[0],
                remote_device_name=parts[-1],
                remote_interface=parts[3],
                raw_data={"original_line": line, "chassis_id": parts[2]},
            ))
        return neighbors

    def parse_routing_peers(self, raw: str) -> List[RoutingPeer]:
        """
        Парсит show ospf neighbor.

        Формат:
            Address          Interface              State     ID               Pri  Dead
            10.0.0.2         ge-0/0/1.0             Full      10.0.0.2         128    35
        """
        peers = []
        for line in iter_data_lines(raw, header="Address"):
            parts = line.split()
            if len(parts) < 6 or not is_ipv4(parts[0]):
                continue

            dead = to_int(parts[5])
            peers.append(RoutingPeer(
                neighbor_id=parts[3],
                neighbor_ip=parts[0],
                state=parts[2],
                interface=parts[1],
                priority=to_int(parts[4], maximum=255),
                dead_time=f"{dead}s" if dead is not None else None,
                raw_data={"original_line": line},
            ))
        return peers

    def parse_interfaces(self, raw: str) -> List[InterfaceRecord]:
        """
        Парсит show interfaces terse.

        Формат:
            Interface        Admin Link Proto    Local                 Remote
            ge-0/0/0         up    up
            ge-0/0/0.0       up    up   inet     10.0.0.1/30
        """
        interfaces = []
        for line in iter_data_lines(raw, header="Interface"):
            parts = line.split()
            if len(parts) < 3 or not has_prefix(parts[0], JUNIPER_INTERFACE_PREFIXES):
                continue

            interface = InterfaceRecord(
                name=parts[0],
                admin_status="up" if parts[1].lower() == "up" else "down",
                oper_status="up" if parts[2].lower() == "up" else "down",
                speed_mbps=speed_from_name(parts[0]),
            )
            if len(parts) >= 5 and parts[3] == "inet":
                address = parts[4].split("/")[0]
                if is_ipv4(address):
                    interface.ip_addresses = [parts[4]]
            interfaces.append(interface)
        return interfaces

    def parse_system_info(self, raw: str) -> SystemInfo:
        """Парсит show version (и show system uptime, если вывод склеен)."""
        info = SystemInfo()
        for line in (raw or "").splitlines():
            line = line.strip()
            if not line:
                continue

            info.hostname = search_first(_HOSTNAME, line) or info.hostname
            info.model = search_first(_MODEL, line) or info.model
            info.serial_number = search_first(_SERIAL, line) or info.serial_number

            version = search_first(_VERSION, line)
            if version:
                info.os_version = f"JUNOS {version}"
            elif not info.os_version:
                alt_version = search_first(_VERSION_ALT, line)
                if alt_version:
                    info.os_version = f"JUNOS {alt_version}"

            info.uptime = search_first(_UPTIME, line) or info.uptime
        return info
