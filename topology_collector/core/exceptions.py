"""
Типизированные исключения для Topology Collector.

Иерархия:
    TopologyCollectorError (базовый)
    ├── CollectorError (сбор данных)
    │   ├── ConnectionError (SSH подключение)
    │   ├── AuthenticationError (авторизация)
    │   ├── CommandError (выполнение команды)
    │   ├── ParseError (парсинг вывода)
    │   └── TimeoutError (таймаут)
    ├── PersistenceError (хранилище)
    ├── DeviceNotFoundError (устройство не найдено в реестре)
    └── ConfigError (конфигурация)

Пример использования:
    from topology_collector.core.exceptions import ConnectionError, PersistenceError

    try:
        result = service.collect(device_id)
    except PersistenceError as e:
        logger.error(f"Ошибка БД: {e.operation} - {e.message}")
"""

from typing import Optional


class TopologyCollectorError(Exception):
    """
    Базовое исключение для всех ошибок Topology Collector.

    Attributes:
        message: Описание ошибки
        details: Дополнительные детали (dict)
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_dict(self) -> dict:
        """Сериализация для логов/отчётов."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# === Collector Errors ===

class CollectorError(TopologyCollectorError):
    """
    Ошибка при сборе данных с устройства.

    Attributes:
        device: IP или hostname устройства
    """

    def __init__(
        self,
        message: str,
        device: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.device = device
        details = details or {}
        if device:
            details["device"] = device
        super().__init__(message, details)


class ConnectionError(CollectorError):
    """
    Ошибка SSH подключения (хост недоступен, сессия оборвалась).

    Пример:
        raise ConnectionError("Connection refused", device="192.168.1.1", port=22)
    """

    def __init__(
        self,
        message: str,
        device: Optional[str] = None,
        port: int = 22,
        details: Optional[dict] = None,
    ):
        self.port = port
        details = details or {}
        details["port"] = port
        super().__init__(message, device, details)


class AuthenticationError(CollectorError):
    """Ошибка аутентификации (неверный логин/пароль)."""
    pass


class CommandError(CollectorError):
    """
    Устройство вернуло ошибку на команду.

    Attributes:
        command: Команда которая вызвала ошибку
        output: Вывод устройства (если есть)
    """

    def __init__(
        self,
        message: str,
        device: Optional[str] = None,
        command: Optional[str] = None,
        output: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.command = command
        self.output = output
        details = details or {}
        if command:
            details["command"] = command
        if output:
            details["output"] = output[:200]
        super().__init__(message, device, details)


class ParseError(CollectorError):
    """
    Ошибка парсинга вывода команды.

    Парсеры сами по себе не бросают исключений, ParseError используется
    оркестратором чтобы зафиксировать неожиданный сбой парсера
    как ошибку отдельной операции.

    Attributes:
        command: Команда чей вывод не распарсился
        vendor: Вендор устройства
    """

    def __init__(
        self,
        message: str,
        device: Optional[str] = None,
        command: Optional[str] = None,
        vendor: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.command = command
        self.vendor = vendor
        details = details or {}
        if command:
            details["command"] = command
        if vendor:
            details["vendor"] = vendor
        super().__init__(message, device, details)


class TimeoutError(CollectorError):
    """
    Таймаут при подключении или выполнении команды.

    Attributes:
        timeout_seconds: Значение таймаута
    """

    def __init__(
        self,
        message: str,
        device: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        details: Optional[dict] = None,
    ):
        self.timeout_seconds = timeout_seconds
        details = details or {}
        if timeout_seconds:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(message, device, details)


# === Storage Errors ===

class PersistenceError(TopologyCollectorError):
    """
    Ошибка работы с хранилищем (SQLite).

    Транзакция, в которой произошла ошибка, откатывается.
    Upsert-операции идемпотентны, поэтому повторный запуск безопасен.

    Attributes:
        operation: Что делали (upsert_neighbor, create_link, ...)
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.operation = operation
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class DeviceNotFoundError(TopologyCollectorError):
    """Устройство не найдено в реестре."""

    def __init__(self, device_id: str, details: Optional[dict] = None):
        self.device_id = device_id
        details = details or {}
        details["device_id"] = device_id
        super().__init__(f"Устройство не найдено: {device_id}", details)


# === Config Errors ===

class ConfigError(TopologyCollectorError):
    """
    Ошибка конфигурации.

    Attributes:
        config_file: Путь к файлу конфигурации
        key: Ключ конфигурации с ошибкой
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.config_file = config_file
        self.key = key
        details = details or {}
        if config_file:
            details["config_file"] = config_file
        if key:
            details["key"] = key
        super().__init__(message, details)


# === Utility Functions ===

def format_error_for_log(error: Exception) -> str:
    """
    Форматирует ошибку для вывода в лог.

    Args:
        error: Исключение

    Returns:
        str: Отформатированная строка ошибки
    """
    if isinstance(error, TopologyCollectorError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"


def is_retryable(error: Exception) -> bool:
    """
    Проверяет, можно ли повторить операцию после ошибки.

    Args:
        error: Исключение

    Returns:
        bool: True если можно retry
    """
    retryable_types = (
        ConnectionError,
        TimeoutError,
        PersistenceError,
    )
    return isinstance(error, retryable_types)
