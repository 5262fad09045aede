"""
Парсеры Huawei VRP.

Команды:
- display lldp neighbor brief
- display ospf peer brief
- display interface brief
- display version

Huawei — парсер по умолчанию для неизвестных вендоров.
"""

import re
from typing import List

from ..core.constants.interfaces import (
    HUAWEI_INTERFACE_PREFIXES,
    HUAWEI_NEIGHBOR_PREFIXES,
    has_prefix,
    speed_from_name,
)
from ..core.device import VendorType
from ..core.models import InterfaceRecord, NeighborRecord, RoutingPeer, SystemInfo
from .base import VendorParser, find_ipv4, is_ipv4, iter_data_lines, search_first, to_int

# Полные имена портов в display interface brief
_HUAWEI_LONG_PREFIXES = ("GigabitEthernet", "XGigabitEthernet", "Ethernet", "25GE", "Tunnel")

_DEAD_TIME = re.compile(r"^\d{2}:\d{2}:\d{2}$")

_HOSTNAME = [re.compile(r"(?:sysname|hostname|device name)[:\s]+(\S+)", re.IGNORECASE)]
_PROMPT = re.compile(r"^[<\[]([A-Za-z0-9_.\-]+)[>\]]")
_MODEL = [
    re.compile(r"(?:HUAWEI|model|product)[:\s]*((?:S|CE|AR|NE|USG)\d+[-\w]*)", re.IGNORECASE),
]
_SERIAL = [re.compile(r"(?:serial number|ESN)[:\s]*(\S+)", re.IGNORECASE)]
_VERSION = re.compile(r"(?:VRP|software|version)[^\d]*(\d+\.\d+[.\d]*)", re.IGNORECASE)
_UPTIME = [re.compile(r"uptime(?:\s+is)?[:\s]+(.+)", re.IGNORECASE)]


class HuaweiParser(VendorParser):
    """Huawei VRP (S/CE/AR/NE)."""

    vendor = VendorType.HUAWEI

    def parse_neighbors(self, raw: str) -> List[NeighborRecord]:
        """
        Парсит display lldp neighbor brief.

        Формат:
            Local Intf   Neighbor Dev      Neighbor Intf   Exptime(s)
            GE0/0/1      SW-DIST-01        GE0/0/24        120
        """
        neighbors = []
        for line in iter_data_lines(raw, header="Local"):
            parts = line.split()
            if len(parts) < 3 or not has_prefix(parts[0], HUAWEI_NEIGHBOR_PREFIXES):
                continue

            neighbor = NeighborRecord(
                local_interface=parts[0],
                remote_device_name=parts[1],
                remote_interface=parts[2],
                raw_data={"original_line": line},
            )
            if len(parts) >= 4:
                neighbor.hold_time = to_int(parts[3])
            neighbor.remote_ip = find_ipv4(line)
            neighbors.append(neighbor)
        return neighbors

    def parse_routing_peers(self, raw: str) -> List[RoutingPeer]:
        """
        Парсит display ospf peer brief.

        Поддерживаются два вида таблицы:
            RouterId   Address    State    Mode    Pri  Dead-Time  Interface
            10.0.0.2   10.0.0.2   Full/DR  Normal  1    00:00:35   GE0/0/1

            Area Id    Interface              Neighbor id   State
            0.0.0.0    GigabitEthernet0/0/1   10.0.0.2      Full
        """
        peers = []
        for line in iter_data_lines(raw):
            parts = line.split()

            if len(parts) >= 6 and is_ipv4(parts[0]):
                peer = RoutingPeer(
                    neighbor_id=parts[0],
                    neighbor_ip=parts[1],
                    state=parts[2],
                    interface=parts[-1],
                    raw_data={"original_line": line},
                )
                for token in parts[3:-1]:
                    if peer.priority is None and to_int(token, maximum=255) is not None:
                        peer.priority = to_int(token)
                    elif peer.dead_time is None and _DEAD_TIME.match(token):
                        peer.dead_time = token
                peers.append(peer)

            elif len(parts) == 4 and is_ipv4(parts[0]) and is_ipv4(parts[2]):
                peers.append(RoutingPeer(
                    neighbor_id=parts[2],
                    neighbor_ip=parts[2],
                    state=parts[3],
                    interface=parts[1],
                    area=parts[0],
                    raw_data={"original_line": line},
                ))
        return peers

    def parse_interfaces(self, raw: str) -> List[InterfaceRecord]:
        """
        Парсит display interface brief.

        Формат:
            Interface              PHY    Protocol  InUti OutUti  inErrors  outErrors
            GigabitEthernet0/0/1   up     up        0%    0%      0         0
            GigabitEthernet0/0/2   *down  down      0%    0%      0         0

        *down — порт выключен администратором.
        """
        prefixes = HUAWEI_INTERFACE_PREFIXES + _HUAWEI_LONG_PREFIXES
        interfaces = []
        for line in iter_data_lines(raw, header="Interface"):
            parts = line.split()
            if len(parts) < 3 or not has_prefix(parts[0], prefixes):
                continue

            phy = parts[1].lower()
            protocol = parts[2].lower()
            interfaces.append(InterfaceRecord(
                name=parts[0],
                admin_status="down" if phy.startswith("*") else "up",
                oper_status="up" if phy.startswith("up") and protocol.startswith("up") else "down",
                speed_mbps=speed_from_name(parts[0]),
            ))
        return interfaces

    def parse_system_info(self, raw: str) -> SystemInfo:
        """Парсит display version (+ sysname из prompt, если попал в вывод)."""
        info = SystemInfo()
        for line in (raw or "").splitlines():
            line = line.strip()
            if not line:
                continue

            hostname = search_first(_HOSTNAME, line)
            if hostname:
                info.hostname = hostname
            elif not info.hostname:
                prompt = _PROMPT.match(line)
                if prompt:
                    info.hostname = prompt.group(1)

            info.model = search_first(_MODEL, line) or info.model
            info.serial_number = search_first(_SERIAL, line) or info.serial_number

            version = _VERSION.search(line)
            if version:
                info.os_version = f"VRP {version.group(1)}"

            info.uptime = search_first(_UPTIME, line) or info.uptime
        return info
