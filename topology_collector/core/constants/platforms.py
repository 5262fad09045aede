"""
Маппинг вендоров на драйверы Scrapli.

huawei_vrp и mikrotik_routeros поставляются пакетом scrapli-community,
Scrapli подгружает их сам по имени платформы.
"""

from typing import Dict

# =============================================================================
# МАППИНГ ПЛАТФОРМ
# =============================================================================

SCRAPLI_PLATFORM_MAP: Dict[str, str] = {
    "huawei": "huawei_vrp",
    "cisco": "cisco_iosxe",
    "juniper": "juniper_junos",
    "mikrotik": "mikrotik_routeros",
    # DmOS: Cisco-подобный prompt и привилегии
    "datacom": "cisco_iosxe",
    "other": "huawei_vrp",
}

DEFAULT_SCRAPLI_PLATFORM = "huawei_vrp"


def get_scrapli_platform(vendor: str) -> str:
    """
    Преобразует вендор устройства в драйвер Scrapli.

    Args:
        vendor: Вендор (huawei, cisco, juniper, ...)

    Returns:
        str: Платформа Scrapli
    """
    if not vendor:
        return DEFAULT_SCRAPLI_PLATFORM
    return SCRAPLI_PLATFORM_MAP.get(str(vendor).lower(), DEFAULT_SCRAPLI_PLATFORM)
