"""
Модуль представления сетевого устройства.

Device — запись реестра устройств:
- Параметры подключения (IP, порт, учётные данные)
- Вендор (определяет набор команд и парсер)
- Системная информация (model, serial, os_version — заполняются после сбора)
- Состояние (online/offline/unknown/error, last_seen)

Пример использования:
    device = Device(name="SW-CORE-01", ip_address="10.0.0.1", vendor="huawei")
    print(device.display_name)  # "SW-CORE-01"
"""

import uuid
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Dict, Any


class VendorType(str, Enum):
    """Вендор устройства (диалект CLI)."""
    HUAWEI = "huawei"
    CISCO = "cisco"
    JUNIPER = "juniper"
    MIKROTIK = "mikrotik"
    DATACOM = "datacom"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "VendorType":
        """Приводит строку к VendorType, неизвестное значение → OTHER."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.OTHER


class DeviceStatus(str, Enum):
    """Статус устройства."""
    UNKNOWN = "unknown"
    ONLINE = "online"
    OFFLINE = "offline"
    ERROR = "error"


@dataclass
class Device:
    """
    Сетевое устройство из реестра.

    Attributes:
        name: Отображаемое имя
        ip_address: Адрес управления (SSH)
        vendor: Вендор (huawei, cisco, ...)
        port: SSH порт
        hostname: Hostname (из конфигурации или system info)
        username: SSH логин (None — брать из NET_USERNAME)
        password: SSH пароль
        model: Модель (из system info)
        serial_number: Серийный номер
        os_version: Версия ПО
        location: Площадка/расположение
        status: Текущий статус
        last_seen: Время последнего успешного сбора (ISO)
        id: Идентификатор в реестре
    """

    name: str
    ip_address: str
    vendor: VendorType = VendorType.OTHER
    port: int = 22
    hostname: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    os_version: Optional[str] = None
    location: Optional[str] = None
    status: DeviceStatus = DeviceStatus.UNKNOWN
    last_seen: Optional[str] = None
    created_at: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        self.vendor = VendorType.parse(self.vendor)
        if not isinstance(self.status, DeviceStatus):
            self.status = DeviceStatus(self.status or "unknown")

    @property
    def display_name(self) -> str:
        """Имя для отображения: hostname, если известен, иначе name."""
        return self.hostname or self.name or self.ip_address

    @property
    def has_credentials(self) -> bool:
        """У устройства заданы собственные SSH учётные данные."""
        return bool(self.username and self.password)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Device":
        """
        Создаёт Device из словаря (YAML-инвентарь или строка БД).

        Поддерживает ключи host/ip как синонимы ip_address и
        platform как синоним vendor.
        """
        kwargs = dict(
            name=data.get("name") or data.get("hostname") or data.get("host") or "",
            ip_address=data.get("ip_address") or data.get("ip") or data.get("host") or "",
            vendor=data.get("vendor") or data.get("platform") or "other",
            port=int(data.get("port") or 22),
            hostname=data.get("hostname"),
            username=data.get("username"),
            password=data.get("password"),
            model=data.get("model"),
            serial_number=data.get("serial_number"),
            os_version=data.get("os_version"),
            location=data.get("location"),
            status=data.get("status") or "unknown",
            last_seen=data.get("last_seen"),
            created_at=data.get("created_at"),
        )
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        return cls(**kwargs)

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        """Конвертирует в словарь (пароль только при include_secrets=True)."""
        data = asdict(self)
        data["vendor"] = self.vendor.value
        data["status"] = self.status.value
        if not include_secrets:
            data.pop("password", None)
        return data

    def __str__(self) -> str:
        return f"{self.display_name} ({self.ip_address}, {self.vendor.value})"
