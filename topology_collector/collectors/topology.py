"""
Оркестратор сбора топологии с одного устройства и с группы устройств.

Машина состояний одного сбора:
    IDLE → SESSION_OPENING → EXECUTING(op)... → SESSION_CLOSING → COMPLETED | FAILED

- Одна SSH-сессия на устройство, команды строго по очереди
- Между командами пауза command_delay (не перегружаем устройство)
- Ошибка одной операции (команда вернула ошибку, таймаут, сбой парсера)
  записывается в result.errors и не прерывает остальные
- Потеря сессии посреди сбора — остальные операции не выполняются, FAILED
- Сессия закрывается на любом пути выхода
- Сбор успешен, если сессия открылась (даже если парсеры вернули пустые списки)

Пример использования:
    collector = TopologyCollector(ParserRegistry.default())
    result = collector.collect(device, ["lldp", "system"])
    if result.success:
        print(result.neighbors)
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from ..core.connection import ConnectionManager
from ..core.credentials import CredentialsManager
from ..core.device import Device, DeviceStatus
from ..core.exceptions import (
    CollectorError,
    CommandError,
    ConnectionError as CollectorConnectionError,
    ParseError,
    TimeoutError as CollectorTimeoutError,
)
from ..core.logging import get_logger
from ..core.models import (
    DEFAULT_OPERATIONS,
    InterfaceRecord,
    NeighborRecord,
    Operation,
    RoutingPeer,
    SystemInfo,
)
from ..parsers.base import VendorParser
from ..parsers.registry import ParserRegistry

logger = get_logger(__name__)

NO_CREDENTIALS_MESSAGE = "SSH credentials not configured"


class CollectionState(str, Enum):
    """Состояния сбора с одного устройства."""
    IDLE = "idle"
    SESSION_OPENING = "session_opening"
    EXECUTING = "executing"
    SESSION_CLOSING = "session_closing"
    COMPLETED = "completed"
    FAILED = "failed"


# Наблюдатель переходов: (устройство, состояние, операция или None)
StateCallback = Callable[[Device, CollectionState, Optional[Operation]], None]
StartCallback = Callable[[Device], None]
ResultCallback = Callable[[Device, "CollectionResult"], None]


def normalize_operations(
    operations: Optional[Iterable[Union[Operation, str]]] = None,
) -> List[Operation]:
    """
    Приводит запрошенные операции к списку Operation.

    Порядок сохраняется, повторы отбрасываются. Пустой запрос — набор
    по умолчанию (lldp, ospf, interfaces, system).

    Raises:
        ValueError: Неизвестная операция
    """
    if not operations:
        return list(DEFAULT_OPERATIONS)

    result: List[Operation] = []
    for op in operations:
        operation = Operation(op)
        if operation not in result:
            result.append(operation)
    return result


@dataclass
class CollectionResult:
    """
    Результат сбора с одного устройства.

    Attributes:
        device_id: ID устройства
        device_name: Имя устройства
        operations: Запрошенные операции (в порядке выполнения)
        success: Сессия открылась и не была потеряна
        message: Человекочитаемый итог
        state: Финальное состояние
        neighbors: LLDP-соседи
        routing_peers: OSPF-соседи
        interfaces: Интерфейсы
        system_info: Системная информация (None если не запрашивалась)
        raw_output: Сырой вывод по операциям
        errors: Ошибки по операциям
        prompt_hostname: Hostname из prompt
        skipped: Сбор не запускался (нет учётных данных)
    """
    device_id: str
    device_name: str
    operations: List[Operation] = field(default_factory=list)
    success: bool = False
    message: str = ""
    state: CollectionState = CollectionState.IDLE
    neighbors: List[NeighborRecord] = field(default_factory=list)
    routing_peers: List[RoutingPeer] = field(default_factory=list)
    interfaces: List[InterfaceRecord] = field(default_factory=list)
    system_info: Optional[SystemInfo] = None
    raw_output: Dict[str, str] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    prompt_hostname: Optional[str] = None
    skipped: bool = False
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    state_history: List[Tuple[CollectionState, Optional[Operation]]] = field(default_factory=list)

    @classmethod
    def not_configured(cls, device: Device, operations: List[Operation]) -> "CollectionResult":
        """Результат для устройства без учётных данных."""
        result = cls(
            device_id=device.id,
            device_name=device.display_name,
            operations=operations,
            message=NO_CREDENTIALS_MESSAGE,
            state=CollectionState.FAILED,
            skipped=True,
        )
        result.completed_at = result.started_at
        return result

    @property
    def duration_ms(self) -> Optional[float]:
        """Длительность сбора в миллисекундах."""
        if self.completed_at is None:
            return None
        return round((self.completed_at - self.started_at).total_seconds() * 1000, 2)

    def set_parsed(self, operation: Operation, parsed: Any) -> None:
        """Сохраняет результат парсера в нужное поле."""
        if operation is Operation.LLDP:
            self.neighbors = parsed
        elif operation is Operation.OSPF:
            self.routing_peers = parsed
        elif operation is Operation.INTERFACES:
            self.interfaces = parsed
        elif operation is Operation.SYSTEM:
            self.system_info = parsed

    def parsed_data(self) -> Dict[str, Any]:
        """Структурированный результат (для истории сборов)."""
        data: Dict[str, Any] = {}
        if Operation.LLDP in self.operations:
            data["lldp"] = [n.to_dict() for n in self.neighbors]
        if Operation.OSPF in self.operations:
            data["ospf"] = [p.to_dict() for p in self.routing_peers]
        if Operation.INTERFACES in self.operations:
            data["interfaces"] = [i.to_dict() for i in self.interfaces]
        if Operation.SYSTEM in self.operations:
            data["system"] = self.system_info.to_dict() if self.system_info else {}
        return data

    def summary(self) -> Dict[str, int]:
        """Количество записей по типам."""
        return {
            "neighbors": len(self.neighbors),
            "routing_peers": len(self.routing_peers),
            "interfaces": len(self.interfaces),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        return {
            "device_id": self.device_id,
            "device_name": self.device_name,
            "operations": [op.value for op in self.operations],
            "success": self.success,
            "message": self.message,
            "state": self.state.value,
            "data": self.parsed_data(),
            "errors": dict(self.errors),
            "duration_ms": self.duration_ms,
        }


@dataclass
class ConnectionTestResult:
    """Результат проверки подключения."""
    device_id: str
    success: bool
    output: str = ""
    connection_time_ms: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        return {
            "device_id": self.device_id,
            "success": self.success,
            "output": self.output,
            "connection_time_ms": self.connection_time_ms,
            "error": self.error,
        }


class TopologyCollector:
    """
    Сбор LLDP/OSPF/интерфейсов/system info с устройств по SSH.

    Attributes:
        registry: Реестр парсеров (выбор по вендору устройства)
        connection_manager: Менеджер SSH подключений
        credentials: Менеджер учётных данных
        command_delay: Пауза между командами (секунды)
        max_workers: Размер пула для параллельного batch-сбора
    """

    def __init__(
        self,
        registry: ParserRegistry,
        connection_manager: Optional[ConnectionManager] = None,
        credentials: Optional[CredentialsManager] = None,
        command_delay: float = 0.5,
        max_workers: int = 5,
        on_state: Optional[StateCallback] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.registry = registry
        self.connection_manager = connection_manager or ConnectionManager()
        self.credentials = credentials or CredentialsManager()
        self.command_delay = command_delay
        self.max_workers = max_workers
        self.on_state = on_state
        self._sleep = sleep

    def _transition(
        self,
        device: Device,
        result: CollectionResult,
        state: CollectionState,
        operation: Optional[Operation] = None,
    ) -> None:
        result.state = state
        result.state_history.append((state, operation))
        if self.on_state:
            self.on_state(device, state, operation)

    def _finish(self, device: Device, result: CollectionResult, state: CollectionState) -> CollectionResult:
        result.completed_at = datetime.now()
        self._transition(device, result, state)
        return result

    def collect(
        self,
        device: Device,
        operations: Optional[Iterable[Union[Operation, str]]] = None,
    ) -> CollectionResult:
        """
        Собирает данные с одного устройства.

        Args:
            device: Устройство
            operations: Операции в порядке выполнения (None — по умолчанию)

        Returns:
            CollectionResult: Итог сбора (исключения наружу не выходят)
        """
        ops = normalize_operations(operations)
        log = logger.bind(device=device.display_name, ip=device.ip_address)

        credentials = self.credentials.for_device(device)
        if credentials is None:
            log.warning("Пропуск устройства: нет учётных данных SSH")
            return CollectionResult.not_configured(device, ops)

        result = CollectionResult(
            device_id=device.id,
            device_name=device.display_name,
            operations=ops,
        )
        self._transition(device, result, CollectionState.IDLE)
        parser = self.registry.get(device.vendor)

        self._transition(device, result, CollectionState.SESSION_OPENING)
        try:
            connection = self.connection_manager.open(device, credentials)
        except CollectorError as e:
            device.status = DeviceStatus.ERROR
            result.message = f"Не удалось подключиться: {e.message}"
            result.errors["session"] = str(e)
            log.error(f"Сбор не выполнен: {e.message}")
            return self._finish(device, result, CollectionState.FAILED)

        result.success = True

        try:
            result.prompt_hostname = self.connection_manager.get_hostname(connection)
            for index, operation in enumerate(ops):
                if index and self.command_delay:
                    self._sleep(self.command_delay)
                self._transition(device, result, CollectionState.EXECUTING, operation)
                self._execute(connection, device, parser, operation, result)
        except CollectorConnectionError as e:
            device.status = DeviceStatus.ERROR
            result.success = False
            result.message = f"Сессия потеряна: {e.message}"
            result.errors["session"] = str(e)
            log.error(f"Сессия потеряна во время сбора: {e.message}")
        finally:
            self._transition(device, result, CollectionState.SESSION_CLOSING)
            self.connection_manager.close(connection, device)

        if not result.success:
            return self._finish(device, result, CollectionState.FAILED)

        device.status = DeviceStatus.ONLINE
        summary = result.summary()
        result.message = (
            f"Собрано: соседей {summary['neighbors']}, OSPF {summary['routing_peers']}, "
            f"интерфейсов {summary['interfaces']}"
        )
        if result.errors:
            result.message += f"; ошибок операций: {len(result.errors)}"
        log.info(result.message)
        return self._finish(device, result, CollectionState.COMPLETED)

    def _execute(
        self,
        connection: Any,
        device: Device,
        parser: VendorParser,
        operation: Operation,
        result: CollectionResult,
    ) -> None:
        """Одна операция: команда → сырой вывод → парсер."""
        command = parser.command_for(operation)
        try:
            raw = self.connection_manager.send_command(connection, command, device)
        except (CommandError, CollectorTimeoutError) as e:
            result.errors[operation.value] = str(e)
            logger.warning(
                f"Операция {operation.value} не выполнена: {e.message}",
                device=device.display_name,
            )
            return

        result.raw_output[operation.value] = raw
        try:
            parsed = parser.parse(operation, raw)
        except Exception as e:
            # Парсеры не должны бросать, сбой фиксируем как ошибку операции
            error = ParseError(
                f"Сбой парсера: {e}",
                device=device.ip_address,
                command=command,
                vendor=parser.vendor.value,
            )
            result.errors[operation.value] = str(error)
            logger.exception(f"Сбой парсера {operation.value}", device=device.display_name)
            return
        result.set_parsed(operation, parsed)

    def collect_batch(
        self,
        devices: List[Device],
        operations: Optional[Iterable[Union[Operation, str]]] = None,
        parallel: bool = False,
        on_start: Optional[StartCallback] = None,
        on_result: Optional[ResultCallback] = None,
    ) -> List[CollectionResult]:
        """
        Собирает данные с группы устройств.

        Ошибка одного устройства не влияет на остальные. При parallel=True
        устройства обрабатываются пулом потоков (max_workers), на каждом
        устройстве операции всё равно идут по очереди в одной сессии.

        Args:
            devices: Устройства
            operations: Операции
            parallel: Параллельный сбор
            on_start: Вызывается перед сбором с устройства
            on_result: Вызывается для каждого устройства сразу после сбора
                       (в потоке, который собирал)

        Returns:
            List[CollectionResult]: Результаты в порядке devices
        """
        ops = normalize_operations(operations)

        if parallel and len(devices) > 1:
            results = self._collect_parallel(devices, ops, on_start, on_result)
        else:
            results = [self._collect_one(device, ops, on_start, on_result) for device in devices]

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Сбор завершён: успешно {succeeded} из {len(devices)} устройств")
        return results

    def _collect_one(
        self,
        device: Device,
        ops: List[Operation],
        on_start: Optional[StartCallback],
        on_result: Optional[ResultCallback],
    ) -> CollectionResult:
        try:
            if on_start:
                on_start(device)
            result = self.collect(device, ops)
        except Exception as e:
            logger.exception(f"Ошибка сбора с {device.ip_address}: {e}", device=device.display_name)
            result = self._failed_result(device, ops, str(e))
        if on_result:
            on_result(device, result)
        return result

    @staticmethod
    def _failed_result(device: Device, ops: List[Operation], message: str) -> CollectionResult:
        return CollectionResult(
            device_id=device.id,
            device_name=device.display_name,
            operations=ops,
            message=message,
            state=CollectionState.FAILED,
            completed_at=datetime.now(),
        )

    def _collect_parallel(
        self,
        devices: List[Device],
        ops: List[Operation],
        on_start: Optional[StartCallback],
        on_result: Optional[ResultCallback],
    ) -> List[CollectionResult]:
        """Параллельный сбор с сохранением порядка результатов."""
        results: Dict[int, CollectionResult] = {}

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._collect_one, device, ops, on_start, on_result): index
                for index, device in enumerate(devices)
            }

            for future in as_completed(futures):
                index = futures[future]
                device = devices[index]
                try:
                    results[index] = future.result()
                except Exception as e:
                    logger.error(f"Ошибка сбора с {device.ip_address}: {e}", device=device.display_name)
                    results[index] = self._failed_result(device, ops, str(e))

        return [results[i] for i in range(len(devices))]

    def test_connection(self, device: Device) -> ConnectionTestResult:
        """
        Проверяет подключение: открывает сессию и выполняет тестовую команду.

        Returns:
            ConnectionTestResult: Вывод команды и время подключения (мс)
        """
        credentials = self.credentials.for_device(device)
        if credentials is None:
            return ConnectionTestResult(device_id=device.id, success=False, error=NO_CREDENTIALS_MESSAGE)

        parser = self.registry.get(device.vendor)
        command = parser.command_for(Operation.TEST)
        started = time.monotonic()

        try:
            with self.connection_manager.connect(device, credentials) as connection:
                output = self.connection_manager.send_command(connection, command, device)
        except CollectorError as e:
            elapsed = int((time.monotonic() - started) * 1000)
            logger.warning(f"Проверка подключения не прошла: {e.message}", device=device.display_name)
            return ConnectionTestResult(
                device_id=device.id,
                success=False,
                connection_time_ms=elapsed,
                error=str(e),
            )

        elapsed = int((time.monotonic() - started) * 1000)
        logger.info(f"Подключение OK за {elapsed} мс", device=device.display_name)
        return ConnectionTestResult(
            device_id=device.id,
            success=True,
            output=output,
            connection_time_ms=elapsed,
        )
