"""
Парсеры MikroTik RouterOS.

Команды:
- /ip neighbor print
- /routing ospf neighbor print
- /interface print
- /system resource print

Вывод RouterOS без строки-заголовка в привычном виде: строки начинаются
с номера записи и, опционально, флагов (R, X, S, D). Строки "Flags:",
"Columns:" и "#" пропускаются.
"""

import re
from typing import Dict, Iterator, List, Optional

from ..core.constants.interfaces import (
    MIKROTIK_INTERFACE_PREFIXES,
    MIKROTIK_NEIGHBOR_PREFIXES,
    has_prefix,
)
from ..core.device import VendorType
from ..core.models import InterfaceRecord, NeighborRecord, RoutingPeer, SystemInfo
from .base import VendorParser, is_ipv4, is_mac, iter_data_lines, search_first, to_int

_SKIP_PREFIXES = ("Flags", "#", "Columns")
_FLAGS = re.compile(r"^[RXSDIHAP,]{1,4}$")
_KEY_VALUE = re.compile(r'([\w.-]+)=("[^"]*"|\S+)')

_HOSTNAME = [re.compile(r"^name:\s*(\S+)", re.IGNORECASE)]
_MODEL = [re.compile(r"^board-name:\s*(.+)", re.IGNORECASE)]
_PLATFORM = [re.compile(r"^platform:\s*(\S+)", re.IGNORECASE)]
_SERIAL = [re.compile(r"^serial-number:\s*(\S+)", re.IGNORECASE)]
_VERSION = [re.compile(r"^version:\s*(\S+)", re.IGNORECASE)]
_UPTIME = [re.compile(r"^uptime:\s*(.+)", re.IGNORECASE)]


def _strip_index(parts: List[str]) -> List[str]:
    """Убирает номер записи в начале строки."""
    if parts and parts[0].isdigit():
        return parts[1:]
    return parts


def _split_flags(parts: List[str]) -> tuple:
    """Отделяет колонку флагов (R, X, RS, ...) если она есть."""
    if parts and _FLAGS.match(parts[0]):
        return parts[0].replace(",", ""), parts[1:]
    return "", parts


def _iter_key_value_records(raw: str) -> Iterator[Dict[str, str]]:
    """
    Записи в формате key=value (print без as-value, RouterOS 6).

    Запись начинается со строки с номером, строки-продолжения
    дописываются к текущей записи.
    """
    current: Optional[Dict[str, str]] = None
    for line in iter_data_lines(raw, skip_prefixes=_SKIP_PREFIXES):
        starts_record = line.split()[0].isdigit()
        if starts_record:
            if current:
                yield current
            current = {}
        if current is None:
            current = {}
        for key, value in _KEY_VALUE.findall(line):
            current[key] = value.strip('"')
    if current:
        yield current


class MikrotikParser(VendorParser):
    """MikroTik RouterOS (CRS/CCR/hEX)."""

    vendor = VendorType.MIKROTIK

    def parse_neighbors(self, raw: str) -> List[NeighborRecord]:
        """
        Парсит /ip neighbor print.

        Формат:
             # INTERFACE  ADDRESS    MAC-ADDRESS        IDENTITY      VERSION
             0 ether1     10.0.0.2   4C:5E:0C:11:22:33  SW-ACCESS-01  6.48.6

        Порт соседа RouterOS в этой таблице не показывает.
        """
        neighbors = []
        for line in iter_data_lines(raw, skip_prefixes=_SKIP_PREFIXES):
            _, parts = _split_flags(_strip_index(line.split()))
            if len(parts) < 2 or not has_prefix(parts[0], MIKROTIK_NEIGHBOR_PREFIXES):
                continue

            remote_ip = None
            identity = None
            for token in parts[1:]:
                if is_ipv4(token):
                    remote_ip = remote_ip or token
                elif is_mac(token):
                    continue
                else:
                    identity = token
                    break
            if not identity:
                continue

            neighbors.append(NeighborRecord(
                local_interface=parts[0],
                remote_device_name=identity,
                remote_interface="",
                remote_ip=remote_ip,
                raw_data={"original_line": line},
            ))
        return neighbors

    def parse_routing_peers(self, raw: str) -> List[RoutingPeer]:
        """
        Парсит /routing ospf neighbor print.

        Табличный вид:
             # INSTANCE  ROUTER-ID  ADDRESS    PRIORITY  STATE
             0 default   10.0.0.2   10.0.0.2   1         Full

        Вид key=value:
             0 instance=default router-id=10.0.0.2 address=10.0.0.2
               interface=ether1 priority=1 state="Full"
        """
        if "=" in (raw or ""):
            return self._parse_routing_peers_kv(raw)

        peers = []
        for line in iter_data_lines(raw, skip_prefixes=_SKIP_PREFIXES):
            parts = _strip_index(line.split())
            if len(parts) < 5 or not is_ipv4(parts[1]):
                continue

            peers.append(RoutingPeer(
                neighbor_id=parts[1],
                neighbor_ip=parts[2],
                state=parts[4],
                interface=parts[0],
                priority=to_int(parts[3], maximum=255),
                raw_data={"original_line": line},
            ))
        return peers

    def _parse_routing_peers_kv(self, raw: str) -> List[RoutingPeer]:
        peers = []
        for record in _iter_key_value_records(raw):
            router_id = record.get("router-id", "")
            if not is_ipv4(router_id):
                continue
            peers.append(RoutingPeer(
                neighbor_id=router_id,
                neighbor_ip=record.get("address", ""),
                state=record.get("state", "unknown"),
                interface=record.get("interface") or record.get("instance", ""),
                area=record.get("area", "0"),
                priority=to_int(record.get("priority"), maximum=255),
                dead_time=record.get("dead-time"),
                raw_data=dict(record),
            ))
        return peers

    def parse_interfaces(self, raw: str) -> List[InterfaceRecord]:
        """
        Парсит /interface print.

        Формат:
             #     NAME          TYPE   ACTUAL-MTU L2MTU  MAC-ADDRESS
             0  R  ether1        ether        1500  1598  4C:5E:0C:11:22:33
             1  X  ether2        ether        1500  1598  4C:5E:0C:11:22:34

        Флаги: R — running, X — disabled.
        """
        interfaces = []
        for line in iter_data_lines(raw, skip_prefixes=_SKIP_PREFIXES):
            flags, parts = _split_flags(_strip_index(line.split()))
            if not parts or not has_prefix(parts[0], MIKROTIK_INTERFACE_PREFIXES):
                continue

            name = parts[0]
            interface = InterfaceRecord(
                name=name,
                admin_status="down" if "X" in flags else "up",
                oper_status="up" if "R" in flags else "down",
                speed_mbps=self._guess_speed(name),
            )
            for token in parts[1:]:
                if is_mac(token):
                    interface.mac_address = token
                    break
            interfaces.append(interface)
        return interfaces

    @staticmethod
    def _guess_speed(name: str) -> Optional[int]:
        lowered = name.lower()
        if lowered.startswith("qsfp"):
            return 40000
        if "sfpplus" in lowered or "10g" in lowered:
            return 10000
        if lowered.startswith(("ether", "sfp", "combo")):
            return 1000
        return None

    def parse_system_info(self, raw: str) -> SystemInfo:
        """Парсит /system resource print (и /system identity print)."""
        info = SystemInfo()
        platform = None
        for line in (raw or "").splitlines():
            line = line.strip()
            if not line:
                continue

            info.hostname = search_first(_HOSTNAME, line) or info.hostname
            info.model = search_first(_MODEL, line) or info.model
            platform = search_first(_PLATFORM, line) or platform
            info.serial_number = search_first(_SERIAL, line) or info.serial_number

            version = search_first(_VERSION, line)
            if version:
                info.os_version = f"RouterOS {version}"

            info.uptime = search_first(_UPTIME, line) or info.uptime

        if not info.model and platform:
            info.model = platform
        return info
