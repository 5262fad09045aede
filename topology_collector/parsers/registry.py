"""
Реестр парсеров вендоров.

Явный объект, который создаётся при старте и передаётся в
TopologyCollector. Глобального реестра нет.

Пример:
    registry = ParserRegistry.default()
    parser = registry.get("cisco")          # CiscoParser
    parser = registry.get("unknown-vendor")  # HuaweiParser (по умолчанию)
"""

import logging
from typing import Dict, Iterable, List, Optional, Union

from ..core.device import VendorType
from .base import VendorParser
from .cisco import CiscoParser
from .datacom import DatacomParser
from .huawei import HuaweiParser
from .juniper import JuniperParser
from .mikrotik import MikrotikParser

logger = logging.getLogger(__name__)


class ParserRegistry:
    """
    Выбор парсера по вендору устройства.

    Attributes:
        default_vendor: Вендор, чей парсер используется для неизвестных
    """

    def __init__(
        self,
        parsers: Optional[Iterable[VendorParser]] = None,
        default_vendor: VendorType = VendorType.HUAWEI,
    ):
        self._parsers: Dict[VendorType, VendorParser] = {}
        self.default_vendor = default_vendor
        for parser in parsers or []:
            self.register(parser)

    @classmethod
    def default(cls) -> "ParserRegistry":
        """Реестр со всеми встроенными парсерами."""
        return cls([
            HuaweiParser(),
            CiscoParser(),
            JuniperParser(),
            MikrotikParser(),
            DatacomParser(),
        ])

    def register(self, parser: VendorParser) -> None:
        """Регистрирует (или заменяет) парсер вендора."""
        self._parsers[parser.vendor] = parser

    def get(self, vendor: Union[VendorType, str, None]) -> VendorParser:
        """
        Парсер для вендора.

        Неизвестный вендор или OTHER — парсер по умолчанию.

        Raises:
            LookupError: Не зарегистрирован даже парсер по умолчанию
        """
        vendor_type = VendorType.parse(vendor)
        parser = self._parsers.get(vendor_type)
        if parser is not None:
            return parser

        fallback = self._parsers.get(self.default_vendor)
        if fallback is None:
            raise LookupError(f"Нет парсера для {vendor_type.value} и нет парсера по умолчанию")
        logger.debug(f"Парсер для {vendor} не найден, используем {self.default_vendor.value}")
        return fallback

    @property
    def vendors(self) -> List[VendorType]:
        """Зарегистрированные вендоры."""
        return list(self._parsers)

    def __contains__(self, vendor: Union[VendorType, str]) -> bool:
        return VendorType.parse(vendor) in self._parsers
