"""
Парсеры Datacom DmOS.

Команды:
- show lldp neighbors
- show ip ospf neighbor (формат как у Cisco)
- show interface status
- show version
"""

import re
from typing import List

from ..core.constants.interfaces import DATACOM_PREFIXES, has_prefix, speed_from_name, speed_from_token
from ..core.device import VendorType
from ..core.models import InterfaceRecord, NeighborRecord, SystemInfo
from .base import iter_data_lines, search_first, split_columns, to_int
from .cisco import CiscoParser

# Значения колонки Status в show interface status
_STATUS_WORDS = {
    "connected", "notconnect", "notconnected", "up", "down",
    "disabled", "err-disabled", "inactive",
}
_OPER_UP = {"connected", "up"}
_ADMIN_DOWN = {"disabled", "inactive"}

_HOSTNAME = [re.compile(r"(?:hostname|System Name)[:\s]+(\S+)", re.IGNORECASE)]
_MODEL = [re.compile(r"(?:Model|Product Name)[:\s]+(\S+)", re.IGNORECASE)]
_SERIAL = [re.compile(r"(?:Serial Number|S/N)[:\s]+(\S+)", re.IGNORECASE)]
_VERSION = [re.compile(r"^(?:Software\s+)?Version[:\s]+(\S+)", re.IGNORECASE)]
_UPTIME = [re.compile(r"(?:Uptime|Up Time)[:\s]+(.+)", re.IGNORECASE)]


class DatacomParser(CiscoParser):
    """
    Datacom DmOS.

    OSPF-таблица совпадает с Cisco, поэтому parse_routing_peers наследуется.
    """

    vendor = VendorType.DATACOM

    def parse_neighbors(self, raw: str) -> List[NeighborRecord]:
        """
        Парсит show lldp neighbors.

        Колонки разделены 2+ пробелами:
            Local Intf    Hold-time   Capability   Port ID     Device ID
            gi1/1         120         B, R         gi1/24      SW-DIST-01
        """
        neighbors = []
        for line in iter_data_lines(raw, header="Local Intf"):
            cols = split_columns(line)
            if len(cols) < 3 or not has_prefix(cols[0], DATACOM_PREFIXES):
                continue

            neighbor = NeighborRecord(
                local_interface=cols[0],
                remote_device_name=cols[-1],
                remote_interface=cols[-2] if len(cols) >= 4 else "",
                hold_time=to_int(cols[1]),
                raw_data={"original_line": line},
            )
            if len(cols) >= 5:
                neighbor.capabilities = [
                    cap.strip() for cap in cols[2].split(",") if cap.strip()
                ]
            neighbors.append(neighbor)
        return neighbors

    def parse_interfaces(self, raw: str) -> List[InterfaceRecord]:
        """
        Парсит show interface status.

        Формат:
            Port      Name        Status       Vlan   Duplex  Speed  Type
            gi1/1     uplink      connected    1      full    1G     1000BASE-T
            gi1/2                 notconnect   10     auto    auto   1000BASE-T

        Колонка Name может быть пустой или с пробелами, поэтому Status
        ищется по значению, а не по позиции.
        """
        interfaces = []
        for line in iter_data_lines(raw, header="Port"):
            parts = line.split()
            if len(parts) < 2 or not has_prefix(parts[0], DATACOM_PREFIXES):
                continue

            status_idx = next(
                (i for i, token in enumerate(parts[1:], start=1) if token.lower() in _STATUS_WORDS),
                None,
            )
            if status_idx is None:
                continue

            status = parts[status_idx].lower()
            interface = InterfaceRecord(
                name=parts[0],
                admin_status="down" if status in _ADMIN_DOWN else "up",
                oper_status="up" if status in _OPER_UP else "down",
                description=" ".join(parts[1:status_idx]) or None,
            )

            rest = parts[status_idx + 1:]
            if rest:
                interface.vlan_id = to_int(rest[0], maximum=4094) or None
            for token in rest:
                speed = speed_from_token(token)
                if speed:
                    interface.speed_mbps = speed
                    break
            if interface.speed_mbps is None:
                interface.speed_mbps = speed_from_name(parts[0])
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
            info.model = search_first(_MODEL, line) or info.model
            info.serial_number = search_first(_SERIAL, line) or info.serial_number
            info.os_version = search_first(_VERSION, line) or info.os_version
            info.uptime = search_first(_UPTIME, line) or info.uptime
        return info
