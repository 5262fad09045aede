"""
Константы и маппинги для Topology Collector.

Импорт:
    from topology_collector.core.constants import get_command, get_scrapli_platform
"""

from .commands import VENDOR_COMMANDS, DEFAULT_VENDOR, get_command
from .platforms import SCRAPLI_PLATFORM_MAP, get_scrapli_platform
from .interfaces import has_prefix, speed_from_name, speed_from_token

__all__ = [
    "VENDOR_COMMANDS",
    "DEFAULT_VENDOR",
    "get_command",
    "SCRAPLI_PLATFORM_MAP",
    "get_scrapli_platform",
    "has_prefix",
    "speed_from_name",
    "speed_from_token",
]
