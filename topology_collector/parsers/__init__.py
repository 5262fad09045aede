"""
Парсеры вывода CLI по вендорам.

Использование:
    from topology_collector.parsers import ParserRegistry

    registry = ParserRegistry.default()
    neighbors = registry.get("huawei").parse_neighbors(output)
"""

from .base import VendorParser, iter_data_lines
from .huawei import HuaweiParser
from .cisco import CiscoParser
from .juniper import JuniperParser
from .mikrotik import MikrotikParser
from .datacom import DatacomParser
from .registry import ParserRegistry

__all__ = [
    "VendorParser",
    "iter_data_lines",
    "HuaweiParser",
    "CiscoParser",
    "JuniperParser",
    "MikrotikParser",
    "DatacomParser",
    "ParserRegistry",
]
