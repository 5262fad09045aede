"""
CLI команды.

Каждый модуль содержит обработчики команд:
- devices.py: devices import, devices list
- collect.py: collect, collect-all, test, history
- topology.py: auto-links, topology, links, snapshot
"""

from .devices import cmd_devices, cmd_devices_import, cmd_devices_list
from .collect import cmd_collect, cmd_collect_all, cmd_history, cmd_test
from .topology import (
    cmd_auto_links,
    cmd_links,
    cmd_links_add,
    cmd_links_delete,
    cmd_links_list,
    cmd_snapshot,
    cmd_topology,
)

__all__ = [
    "cmd_devices",
    "cmd_devices_import",
    "cmd_devices_list",
    "cmd_collect",
    "cmd_collect_all",
    "cmd_test",
    "cmd_history",
    "cmd_auto_links",
    "cmd_topology",
    "cmd_links",
    "cmd_links_list",
    "cmd_links_add",
    "cmd_links_delete",
    "cmd_snapshot",
]
