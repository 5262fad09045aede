"""
Команды сбора (централизованные).

Каталог: вендор → логическая операция → команда CLI.
Парсеры вендоров берут команды отсюда (VendorParser.command_for).
"""

from typing import Dict

# =============================================================================
# КАТАЛОГ КОМАНД
# =============================================================================

VENDOR_COMMANDS: Dict[str, Dict[str, str]] = {
    "huawei": {
        "lldp": "display lldp neighbor brief",
        "ospf": "display ospf peer brief",
        "interfaces": "display interface brief",
        "system": "display version",
        "test": "display clock",
    },
    "cisco": {
        "lldp": "show lldp neighbors",
        "ospf": "show ip ospf neighbor",
        "interfaces": "show ip interface brief",
        "system": "show version",
        "test": "show clock",
    },
    "juniper": {
        "lldp": "show lldp neighbors",
        "ospf": "show ospf neighbor",
        "interfaces": "show interfaces terse",
        "system": "show version",
        "test": "show system uptime",
    },
    "mikrotik": {
        "lldp": "/ip neighbor print",
        "ospf": "/routing ospf neighbor print",
        "interfaces": "/interface print",
        "system": "/system resource print",
        "test": "/system clock print",
    },
    # DmOS: синтаксис близкий к Cisco
    "datacom": {
        "lldp": "show lldp neighbors",
        "ospf": "show ip ospf neighbor",
        "interfaces": "show interface status",
        "system": "show version",
        "test": "show clock",
    },
}

# Вендор, чьи команды используются для неизвестных устройств
DEFAULT_VENDOR = "huawei"


def get_command(vendor: str, operation: str) -> str:
    """
    Возвращает команду для вендора и операции.

    Args:
        vendor: Вендор (huawei, cisco, ...)
        operation: Операция (lldp, ospf, interfaces, system, test)

    Returns:
        str: Команда, пустая строка если операция неизвестна
    """
    commands = VENDOR_COMMANDS.get(vendor, VENDOR_COMMANDS[DEFAULT_VENDOR])
    return commands.get(operation, "")
