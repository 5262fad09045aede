"""
Базовый класс парсеров вендоров.

Каждый парсер — набор чистых функций над текстом вывода CLI:
- parse_neighbors(raw) → List[NeighborRecord]
- parse_routing_peers(raw) → List[RoutingPeer]
- parse_interfaces(raw) → List[InterfaceRecord]
- parse_system_info(raw) → SystemInfo

Парсеры никогда не бросают исключений на кривом вводе: нераспознанные
строки пропускаются, числовые поля, которые не разобрались, остаются None.

Табличный вывод обходится машиной состояний iter_data_lines():
ищем строку-заголовок, после неё непустые строки — данные,
пустая строка или разделитель после данных — снова ищем заголовок.
"""

import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ..core.constants import get_command
from ..core.device import VendorType
from ..core.models import (
    InterfaceRecord,
    NeighborRecord,
    Operation,
    RoutingPeer,
    SystemInfo,
)

IPV4_PATTERN = re.compile(r"\b(\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})\b")
_IPV4_FULL = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")
_MAC_FULL = re.compile(
    r"^(?:[0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}$|^[0-9A-Fa-f]{4}\.[0-9A-Fa-f]{4}\.[0-9A-Fa-f]{4}$"
)
_SEPARATOR = re.compile(r"^[-=_+*\s]+$")
_MULTI_SPACE = re.compile(r"\s{2,}")

ParseResult = Union[List[NeighborRecord], List[RoutingPeer], List[InterfaceRecord], SystemInfo]


class _LineState(Enum):
    SEEKING_HEADER = "seeking-header"
    IN_DATA = "in-data"


def is_ipv4(value: Optional[str]) -> bool:
    """Строка — IPv4-адрес (октеты 0..255)."""
    if not value or not _IPV4_FULL.match(value):
        return False
    return all(int(octet) <= 255 for octet in value.split("."))


def is_mac(value: Optional[str]) -> bool:
    """Строка — MAC-адрес (aa:bb:.., aa-bb-.. или aabb.ccdd.eeff)."""
    return bool(value and _MAC_FULL.match(value))


def is_separator(line: str) -> bool:
    """Строка-разделитель таблицы (-----, =====)."""
    stripped = line.strip()
    return bool(stripped) and bool(_SEPARATOR.match(stripped)) and any(c in stripped for c in "-=_")


def to_int(value: Any, maximum: Optional[int] = None) -> Optional[int]:
    """
    Безопасное преобразование в int.

    Returns:
        int или None если значение не число или больше maximum
    """
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    if number < 0 or (maximum is not None and number > maximum):
        return None
    return number


def split_columns(line: str) -> List[str]:
    """Разбивает строку по 2+ пробелам (колонки с пробелами внутри)."""
    return [col for col in _MULTI_SPACE.split(line.strip()) if col]


def find_ipv4(text: str) -> Optional[str]:
    """Первый валидный IPv4 в тексте."""
    for match in IPV4_PATTERN.finditer(text or ""):
        if is_ipv4(match.group(1)):
            return match.group(1)
    return None


def iter_data_lines(
    raw: str,
    header: Optional[str] = None,
    skip_prefixes: Tuple[str, ...] = (),
) -> Iterator[str]:
    """
    Возвращает строки данных таблицы (уже без пробелов по краям).

    Если header задан и встречается в тексте — до него строки пропускаются,
    а пустая строка/разделитель после данных возвращает к поиску заголовка
    (в выводе может быть несколько таблиц). Если заголовка в тексте нет —
    данными считаются все непустые строки, отсев делает вызывающий код
    по префиксу имени интерфейса.

    Args:
        raw: Вывод команды
        header: Начало строки-заголовка (без учёта регистра)
        skip_prefixes: Строки с такими префиксами не данные (Flags, #, ...)
    """
    if not raw:
        return

    lines = raw.splitlines()
    header_lower = header.lower() if header else None
    use_header = bool(header_lower) and any(
        line.strip().lower().startswith(header_lower) for line in lines
    )

    state = _LineState.SEEKING_HEADER if use_header else _LineState.IN_DATA
    seen_data = False

    for line in lines:
        stripped = line.strip()

        if state is _LineState.SEEKING_HEADER:
            if stripped.lower().startswith(header_lower):
                state = _LineState.IN_DATA
                seen_data = False
            continue

        if not stripped or is_separator(stripped):
            if use_header and seen_data:
                state = _LineState.SEEKING_HEADER
            continue

        if skip_prefixes and stripped.startswith(skip_prefixes):
            continue

        seen_data = True
        yield stripped


def search_first(patterns: Sequence[re.Pattern], line: str) -> Optional[str]:
    """Первая группа первого совпавшего паттерна."""
    for pattern in patterns:
        match = pattern.search(line)
        if match:
            return match.group(1).strip()
    return None


class VendorParser(ABC):
    """
    Набор парсеров одного вендора.

    Подкласс задаёт vendor и реализует четыре parse_* метода.
    Команды берутся из каталога core.constants.commands.

    Example:
        parser = HuaweiParser()
        command = parser.command_for(Operation.LLDP)
        neighbors = parser.parse_neighbors(output)
    """

    vendor: VendorType = VendorType.OTHER

    def command_for(self, operation: Union[Operation, str]) -> str:
        """Команда CLI для логической операции."""
        op = Operation(operation)
        return get_command(self.vendor.value, op.value)

    @property
    def commands(self) -> Dict[str, str]:
        """Все команды вендора: операция → команда."""
        return {op.value: self.command_for(op) for op in Operation}

    @abstractmethod
    def parse_neighbors(self, raw: str) -> List[NeighborRecord]:
        """Соседи канального уровня (LLDP)."""

    @abstractmethod
    def parse_routing_peers(self, raw: str) -> List[RoutingPeer]:
        """OSPF-соседи."""

    @abstractmethod
    def parse_interfaces(self, raw: str) -> List[InterfaceRecord]:
        """Интерфейсы."""

    @abstractmethod
    def parse_system_info(self, raw: str) -> SystemInfo:
        """Системная информация."""

    def parse(self, operation: Union[Operation, str], raw: str) -> ParseResult:
        """
        Разбирает вывод операции соответствующим парсером.

        Для TEST возвращает пустой список (вывод не разбирается).
        """
        op = Operation(operation)
        if op is Operation.LLDP:
            return self.parse_neighbors(raw)
        if op is Operation.OSPF:
            return self.parse_routing_peers(raw)
        if op is Operation.INTERFACES:
            return self.parse_interfaces(raw)
        if op is Operation.SYSTEM:
            return self.parse_system_info(raw)
        return []

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(vendor={self.vendor.value})"
