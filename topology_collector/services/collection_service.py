"""
Сервис сбора: реестр устройств → TopologyCollector → хранилище.

Для каждого устройства:
- запись в истории сборов (pending → running → completed | failed)
- сбор через TopologyCollector
- при успехе: интерфейсы, соседи (InferenceEngine), system info, статус online
- при неудаче: статус устройства error

Устройство без учётных данных пропускается: без записи в истории
и без изменения статуса.

Пример использования:
    service = CollectionService(db, collector)
    result = service.collect(device_id, ["lldp", "system"])
    results = service.collect_all(parallel=True)
"""

import threading
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Union

from ..collectors.topology import (
    CollectionResult,
    ConnectionTestResult,
    TopologyCollector,
    normalize_operations,
)
from ..core.device import Device, DeviceStatus
from ..core.exceptions import PersistenceError
from ..core.logging import get_logger
from ..core.models import CollectionAttempt, DiscoveryProtocol, Operation, SystemInfo
from ..storage.database import Database, now_iso
from ..storage.repositories import (
    CollectionRepository,
    DeviceRepository,
    InterfaceRepository,
)
from .inference import InferenceEngine

logger = get_logger(__name__)

Operations = Optional[Iterable[Union[Operation, str]]]


class CollectionService:
    """
    Сбор данных с устройств из реестра с сохранением результатов.

    Attributes:
        db: База данных
        collector: Оркестратор сбора
        inference: Сохранение соседей и построение связей
        parallel: Параллельный collect_all по умолчанию
    """

    def __init__(
        self,
        db: Database,
        collector: TopologyCollector,
        inference: Optional[InferenceEngine] = None,
        parallel: bool = False,
    ):
        self.db = db
        self.collector = collector
        self.devices = DeviceRepository(db)
        self.interfaces = InterfaceRepository(db)
        self.history = CollectionRepository(db)
        self.inference = inference or InferenceEngine(db, devices=self.devices)
        self.parallel = parallel

    def _has_credentials(self, device: Device) -> bool:
        return self.collector.credentials.for_device(device) is not None

    def _start_attempt(self, device: Device, ops: List[Operation]) -> CollectionAttempt:
        attempt = self.history.create(device.id, [op.value for op in ops])
        self.history.mark_running(attempt.id)
        return attempt

    def collect(self, device_id: str, operations: Operations = None) -> CollectionResult:
        """
        Собирает данные с одного устройства.

        Raises:
            DeviceNotFoundError: Устройства нет в реестре
            PersistenceError: Ошибка сохранения результата
        """
        device = self.devices.require(device_id)
        ops = normalize_operations(operations)

        if not self._has_credentials(device):
            return self.collector.collect(device, ops)

        attempt = self._start_attempt(device, ops)
        try:
            result = self.collector.collect(device, ops)
        except Exception as e:
            self.history.fail(attempt.id, f"Непредвиденная ошибка сбора: {e}")
            raise
        self._record(device, result, attempt)
        return result

    def collect_all(self, operations: Operations = None, parallel: Optional[bool] = None) -> List[CollectionResult]:
        """
        Собирает данные со всех устройств реестра.

        Ошибка одного устройства (включая ошибку сохранения) не влияет
        на остальные: она попадает в result.errors["persistence"].

        Args:
            operations: Операции (None — по умолчанию)
            parallel: Параллельный сбор (None — как в настройках сервиса)

        Returns:
            List[CollectionResult]: Результаты в порядке регистрации устройств
        """
        devices = self.devices.list()
        ops = normalize_operations(operations)
        parallel = self.parallel if parallel is None else parallel
        attempts: Dict[str, CollectionAttempt] = {}
        lock = threading.Lock()

        def on_start(device: Device) -> None:
            if not self._has_credentials(device):
                return
            attempt = self._start_attempt(device, ops)
            with lock:
                attempts[device.id] = attempt

        def on_result(device: Device, result: CollectionResult) -> None:
            with lock:
                attempt = attempts.pop(device.id, None)
            if attempt is None:
                return
            try:
                self._record(device, result, attempt)
            except PersistenceError as e:
                result.errors["persistence"] = str(e)
                logger.error(f"Результат не сохранён: {e}", device=device.display_name)

        logger.info(f"Сбор со всех устройств: {len(devices)} шт., операции {[op.value for op in ops]}")
        return self.collector.collect_batch(
            devices,
            ops,
            parallel=parallel,
            on_start=on_start,
            on_result=on_result,
        )

    def _record(self, device: Device, result: CollectionResult, attempt: CollectionAttempt) -> None:
        """Сохраняет результат сбора и закрывает запись истории."""
        if not result.success:
            self.history.fail(attempt.id, result.message, result.raw_output, result.parsed_data())
            self.devices.update_status(device.id, DeviceStatus.ERROR)
            return

        try:
            self._persist(device, result)
        except PersistenceError as e:
            self.history.fail(
                attempt.id,
                f"Ошибка сохранения: {e.message}",
                result.raw_output,
                result.parsed_data(),
            )
            raise

        errors = "; ".join(f"{op}: {error}" for op, error in result.errors.items()) or None
        self.history.complete(attempt.id, result.raw_output, result.parsed_data(), error_message=errors)

    def _persist(self, device: Device, result: CollectionResult) -> None:
        if Operation.INTERFACES in result.operations and result.interfaces:
            self.interfaces.upsert_many(device.id, result.interfaces)

        if Operation.LLDP in result.operations:
            self.inference.process_neighbors(device, result.neighbors, DiscoveryProtocol.LLDP)

        if Operation.OSPF in result.operations:
            self.inference.process_routing_peers(device, result.routing_peers)

        info = result.system_info or SystemInfo()
        if not info.hostname and result.prompt_hostname:
            info = replace(info, hostname=result.prompt_hostname)
        self.devices.apply_system_info(device.id, info)

    def test_connection(self, device_id: str) -> ConnectionTestResult:
        """
        Проверяет SSH подключение к устройству.

        Успех — статус online и last_seen, неудача — статус error.
        Без учётных данных статус не меняется.

        Raises:
            DeviceNotFoundError: Устройства нет в реестре
        """
        device = self.devices.require(device_id)
        if not self._has_credentials(device):
            return self.collector.test_connection(device)

        result = self.collector.test_connection(device)
        if result.success:
            self.devices.update_status(device.id, DeviceStatus.ONLINE, last_seen=now_iso())
        else:
            self.devices.update_status(device.id, DeviceStatus.ERROR)
        return result
