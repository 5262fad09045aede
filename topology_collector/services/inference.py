"""
Сохранение соседей и автоматическое построение связей.

Для каждого соседа канального уровня (одна транзакция на соседа):
1. Upsert строки соседа по (устройство, локальный порт, протокол)
2. Разрешение соседа в устройство реестра (NeighborResolver)
3. Если разрешён — связь между устройствами: найти в любом направлении
   и обновить, или создать (link_type="discovered", status="up")
4. Ссылка на разрешённое устройство записывается в строку соседа

OSPF-соседи сохраняются как соседи с протоколом ospf и тоже разрешаются,
но связей не создают.

Пример использования:
    engine = InferenceEngine(db)
    stats = engine.process_neighbors(device, result.neighbors)
    engine.auto_link()  # {"created": 2, "already_exists": 5}
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple, Union

from ..core.device import Device
from ..core.domain.resolver import NeighborResolver
from ..core.logging import get_logger
from ..core.models import DiscoveryProtocol, Link, Neighbor, NeighborRecord, RoutingPeer
from ..storage.database import Database
from ..storage.repositories import DeviceRepository, LinkRepository, NeighborRepository

logger = get_logger(__name__)

# Протоколы, наблюдение по которым означает физическую связь
LINK_PROTOCOLS = (DiscoveryProtocol.LLDP, DiscoveryProtocol.CDP, DiscoveryProtocol.MANUAL)


@dataclass
class InferenceStats:
    """Итог обработки соседей одного устройства."""
    processed: int = 0
    resolved: int = 0
    links_created: int = 0
    links_updated: int = 0
    skipped: int = 0
    link_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, int]:
        """Конвертирует в словарь (без списка id)."""
        return {
            "processed": self.processed,
            "resolved": self.resolved,
            "links_created": self.links_created,
            "links_updated": self.links_updated,
            "skipped": self.skipped,
        }


class InferenceEngine:
    """
    Соседи → связи между известными устройствами.

    Attributes:
        db: База данных
        devices: Реестр устройств
        neighbors: Репозиторий соседей
        links: Репозиторий связей
        resolver: Разрешение имени/IP соседа
    """

    def __init__(
        self,
        db: Database,
        devices: Optional[DeviceRepository] = None,
        neighbors: Optional[NeighborRepository] = None,
        links: Optional[LinkRepository] = None,
        resolver: Optional[NeighborResolver] = None,
    ):
        self.db = db
        self.devices = devices or DeviceRepository(db)
        self.neighbors = neighbors or NeighborRepository(db)
        self.links = links or LinkRepository(db)
        self.resolver = resolver or NeighborResolver(self.devices)

    def resolve_remote_device(
        self,
        remote_name: Optional[str],
        remote_ip: Optional[str] = None,
        local_device_id: Optional[str] = None,
    ) -> Optional[Device]:
        """Устройство реестра для соседа или None."""
        return self.resolver.resolve(remote_name, remote_ip, local_device_id)

    def process_neighbors(
        self,
        device: Device,
        records: List[NeighborRecord],
        protocol: Union[DiscoveryProtocol, str] = DiscoveryProtocol.LLDP,
    ) -> InferenceStats:
        """
        Сохраняет соседей устройства и строит связи.

        Raises:
            PersistenceError: Ошибка БД (транзакция текущего соседа откатывается,
                              уже обработанные соседи остаются сохранёнными)
        """
        protocol = DiscoveryProtocol(protocol)
        stats = InferenceStats()

        for record in NeighborRecord.ensure_list(records):
            if not record.local_interface:
                stats.skipped += 1
                logger.debug(f"Сосед без локального порта пропущен: {record.remote_device_name}")
                continue
            self._process_one(
                device=device,
                protocol=protocol,
                local_interface=record.local_interface,
                remote_name=record.remote_device_name,
                remote_interface=record.remote_interface,
                remote_ip=record.remote_ip,
                raw_data=record.to_dict(),
                create_links=protocol in LINK_PROTOCOLS,
                stats=stats,
            )

        logger.info(
            f"Соседи {protocol.value}: обработано {stats.processed}, разрешено {stats.resolved}, "
            f"связей создано {stats.links_created}, обновлено {stats.links_updated}",
            device=device.display_name,
        )
        return stats

    def process_routing_peers(self, device: Device, peers: List[RoutingPeer]) -> InferenceStats:
        """
        Сохраняет OSPF-соседей (протокол ospf, связей не создаёт).

        local_interface — интерфейс пира, имя — router id, IP — адрес пира.
        """
        stats = InferenceStats()

        for peer in peers:
            if not peer.interface:
                stats.skipped += 1
                logger.debug(f"OSPF-сосед без интерфейса пропущен: {peer.neighbor_id}")
                continue
            self._process_one(
                device=device,
                protocol=DiscoveryProtocol.OSPF,
                local_interface=peer.interface,
                remote_name=peer.neighbor_id,
                remote_interface=None,
                remote_ip=peer.neighbor_ip,
                raw_data=peer.to_dict(),
                create_links=False,
                stats=stats,
            )

        logger.info(
            f"OSPF: обработано {stats.processed}, разрешено {stats.resolved}",
            device=device.display_name,
        )
        return stats

    def _process_one(
        self,
        device: Device,
        protocol: DiscoveryProtocol,
        local_interface: str,
        remote_name: Optional[str],
        remote_interface: Optional[str],
        remote_ip: Optional[str],
        raw_data: dict,
        create_links: bool,
        stats: InferenceStats,
    ) -> Neighbor:
        with self.db.transaction("process_neighbor"):
            neighbor = self.neighbors.upsert(
                local_device_id=device.id,
                local_interface=local_interface,
                protocol=protocol,
                remote_device_name=remote_name,
                remote_interface=remote_interface,
                remote_ip=remote_ip,
                raw_data=raw_data,
            )

            remote = self.resolve_remote_device(remote_name, remote_ip, device.id)
            if remote is not None and create_links:
                link, created = self.ensure_link(
                    local_device_id=device.id,
                    remote_device_id=remote.id,
                    local_interface=local_interface,
                    remote_interface=remote_interface,
                    protocol=protocol,
                    remote_name=remote_name,
                )
                stats.link_ids.append(link.id)
                if created:
                    stats.links_created += 1
                else:
                    stats.links_updated += 1

            remote_id = remote.id if remote else None
            if neighbor.remote_device_id != remote_id:
                self.neighbors.set_remote_device(neighbor.id, remote_id)
                neighbor.remote_device_id = remote_id

        stats.processed += 1
        if remote is not None:
            stats.resolved += 1
        else:
            logger.debug(
                f"Сосед '{remote_name}' не найден в реестре",
                device=device.display_name,
                operation=protocol.value,
            )
        return neighbor

    def ensure_link(
        self,
        local_device_id: str,
        remote_device_id: str,
        local_interface: Optional[str] = None,
        remote_interface: Optional[str] = None,
        protocol: Union[DiscoveryProtocol, str] = DiscoveryProtocol.LLDP,
        remote_name: Optional[str] = None,
    ) -> Tuple[Link, bool]:
        """
        Связь между двумя устройствами: существующая (обновлённая) или новая.

        Returns:
            Tuple[Link, bool]: Связь и признак "создана сейчас"
        """
        protocol = DiscoveryProtocol(protocol)
        with self.db.transaction("ensure_link"):
            existing = self.links.find_between(local_device_id, remote_device_id)
            if existing is not None:
                link = self.links.refresh(existing, local_device_id, local_interface, remote_interface)
                return link, False

            link = self.links.create(
                source_device_id=local_device_id,
                target_device_id=remote_device_id,
                source_interface=local_interface,
                target_interface=remote_interface,
                link_type="discovered",
                metadata={
                    "auto_created": True,
                    "discovery_protocol": protocol.value,
                    "remote_device_name": remote_name,
                },
            )
        logger.info(
            f"Создана связь {local_interface or '?'} ↔ {remote_name or remote_device_id} "
            f"{remote_interface or '?'}",
            device=local_device_id,
        )
        return link, True

    def auto_link(self) -> Dict[str, int]:
        """
        Достраивает связи по всем разрешённым соседям.

        Пары устройств считаются без учёта направления. Существующие
        связи не изменяются, повторный запуск ничего не создаёт.

        Returns:
            Dict: {"created": N, "already_exists": M}
        """
        created = 0
        already_exists = 0
        seen: Set[Tuple[str, str]] = set()

        for neighbor in self.neighbors.list(resolved_only=True):
            if neighbor.discovery_protocol not in LINK_PROTOCOLS:
                continue
            if neighbor.remote_device_id == neighbor.local_device_id:
                continue
            pair = tuple(sorted((neighbor.local_device_id, neighbor.remote_device_id)))
            if pair in seen:
                continue
            seen.add(pair)

            with self.db.transaction("auto_link"):
                if self.links.find_between(neighbor.local_device_id, neighbor.remote_device_id):
                    already_exists += 1
                    continue
                self.links.create(
                    source_device_id=neighbor.local_device_id,
                    target_device_id=neighbor.remote_device_id,
                    source_interface=neighbor.local_interface,
                    target_interface=neighbor.remote_interface,
                    link_type="discovered",
                    metadata={
                        "auto_created": True,
                        "discovery_protocol": neighbor.discovery_protocol.value,
                        "remote_device_name": neighbor.remote_device_name,
                    },
                )
                created += 1

        logger.info(f"Автосвязи: создано {created}, уже существовало {already_exists}")
        return {"created": created, "already_exists": already_exists}
