"""
Имена интерфейсов: префиксы по вендорам и скорость по имени.
"""

import re
from typing import Optional, Tuple

# =============================================================================
# ПРЕФИКСЫ ФИЗИЧЕСКИХ/ЛОГИЧЕСКИХ ПОРТОВ
# =============================================================================

HUAWEI_NEIGHBOR_PREFIXES: Tuple[str, ...] = (
    "GE", "XGE", "ETH", "10GE", "40GE", "100GE", "Eth-Trunk", "MEth",
)
HUAWEI_INTERFACE_PREFIXES: Tuple[str, ...] = HUAWEI_NEIGHBOR_PREFIXES + (
    "Vlanif", "LoopBack", "NULL",
)

CISCO_NEIGHBOR_PREFIXES: Tuple[str, ...] = (
    "Gi", "Fa", "Te", "Eth", "Po", "Hu", "Fo", "Twe",
)
CISCO_INTERFACE_PREFIXES: Tuple[str, ...] = CISCO_NEIGHBOR_PREFIXES + ("Lo", "Vl", "Tu")

JUNIPER_NEIGHBOR_PREFIXES: Tuple[str, ...] = ("ge-", "xe-", "et-", "ae")
JUNIPER_INTERFACE_PREFIXES: Tuple[str, ...] = JUNIPER_NEIGHBOR_PREFIXES + ("lo", "vlan", "irb")

MIKROTIK_NEIGHBOR_PREFIXES: Tuple[str, ...] = (
    "ether", "sfp", "wlan", "bridge", "vlan", "combo", "qsfp",
)
MIKROTIK_INTERFACE_PREFIXES: Tuple[str, ...] = MIKROTIK_NEIGHBOR_PREFIXES + ("lo",)

DATACOM_PREFIXES: Tuple[str, ...] = ("gi", "te", "ge", "eth", "po", "hu", "fo", "twe")


def has_prefix(name: str, prefixes: Tuple[str, ...]) -> bool:
    """Имя начинается с одного из префиксов (без учёта регистра)."""
    if not name:
        return False
    lowered = name.lower()
    return any(lowered.startswith(p.lower()) for p in prefixes)


# =============================================================================
# СКОРОСТЬ ПО ИМЕНИ
# =============================================================================

# Порядок важен: более длинные префиксы первыми
_SPEED_BY_PREFIX: Tuple[Tuple[str, int], ...] = (
    # Huawei
    ("xgigabit", 10000),
    ("100ge", 100000),
    ("40ge", 40000),
    ("25ge", 25000),
    ("10ge", 10000),
    ("xge", 10000),
    ("ge", 1000),
    # Cisco
    ("hundredgig", 100000),
    ("hu", 100000),
    ("fortygig", 40000),
    ("fo", 40000),
    ("twentyfive", 25000),
    ("twe", 25000),
    ("tengig", 10000),
    ("te", 10000),
    ("gigabit", 1000),
    ("gi", 1000),
    ("fastethernet", 100),
    ("fa", 100),
    # Juniper
    ("et-", 100000),
    ("xe-", 10000),
    ("ge-", 1000),
)

_SPEED_TOKEN = re.compile(r"^(\d+)([MGT])$", re.IGNORECASE)
_SPEED_MULTIPLIER = {"M": 1, "G": 1000, "T": 1000000}


def speed_from_name(name: str) -> Optional[int]:
    """
    Угадывает скорость порта (Мбит/с) по имени интерфейса.

    GE0/0/1 → 1000, XGE0/0/1 → 10000, XGigabitEthernet0/0/1 → 10000, 40GE1/0/1 → 40000,
    Gi0/1 → 1000, xe-0/0/0 → 10000. Для логических портов — None.
    """
    if not name:
        return None
    lowered = name.lower()
    for prefix, speed in _SPEED_BY_PREFIX:
        if lowered.startswith(prefix):
            return speed
    return None


def speed_from_token(token: str) -> Optional[int]:
    """Разбирает токен скорости вида 1G / 100M / 10G."""
    match = _SPEED_TOKEN.match(token or "")
    if not match:
        return None
    return int(match.group(1)) * _SPEED_MULTIPLIER[match.group(2).upper()]
