"""
Topology Collector — сбор сетевой топологии по SSH.

Подключается к коммутаторам/маршрутизаторам (Scrapli), выполняет
вендорные команды (LLDP, OSPF, интерфейсы, версия), разбирает вывод
в типизированные записи и строит граф связей между известными устройствами.

Использование:
    from topology_collector.storage import Database
    from topology_collector.services import CollectionService, GraphBuilder
"""

__version__ = "0.1.0"
