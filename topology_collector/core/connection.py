"""
Модуль управления SSH подключениями через Scrapli.

ConnectionManager обеспечивает:
- Открытие сессии к устройству (драйвер выбирается по вендору)
- Выполнение команд с преобразованием ошибок Scrapli в свои исключения
- Гарантированное закрытие сессии

Поддерживаемые платформы (см. core.constants.platforms):
- huawei_vrp, mikrotik_routeros (scrapli-community)
- cisco_iosxe, juniper_junos

Пример использования:
    manager = ConnectionManager()
    with manager.connect(device, credentials) as conn:
        output = manager.send_command(conn, "display lldp neighbor brief", device)
"""

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from scrapli import Scrapli
from scrapli.exceptions import (
    ScrapliAuthenticationFailed,
    ScrapliConnectionError,
    ScrapliConnectionNotOpened,
    ScrapliException,
    ScrapliTimeout,
)

from .constants import get_scrapli_platform
from .credentials import Credentials
from .device import Device
from .exceptions import (
    AuthenticationError,
    CommandError,
    ConnectionError as CollectorConnectionError,
    TimeoutError as CollectorTimeoutError,
)

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Менеджер SSH подключений через Scrapli.

    Attributes:
        timeout_socket: Таймаут сокета (секунды)
        timeout_transport: Таймаут транспорта (секунды)
        timeout_ops: Таймаут выполнения команды (секунды)
        transport: Тип транспорта (system, paramiko, ssh2)

    Example:
        manager = ConnectionManager(timeout_socket=15)
        with manager.connect(device, creds) as conn:
            result = manager.send_command(conn, "show version", device)
    """

    def __init__(
        self,
        timeout_socket: int = 15,
        timeout_transport: int = 30,
        timeout_ops: int = 60,
        transport: str = "system",
    ):
        self.timeout_socket = timeout_socket
        self.timeout_transport = timeout_transport
        self.timeout_ops = timeout_ops
        self.transport = transport

    def _build_connection_params(
        self,
        device: Device,
        credentials: Credentials,
    ) -> Dict[str, Any]:
        """
        Формирует параметры подключения для Scrapli.

        Args:
            device: Устройство
            credentials: Учётные данные

        Returns:
            Dict: Параметры для Scrapli
        """
        params = {
            "host": device.ip_address,
            "auth_username": credentials.username,
            "auth_password": credentials.password,
            "platform": get_scrapli_platform(device.vendor.value),
            "transport": self.transport,
            "auth_strict_key": False,
            "timeout_socket": self.timeout_socket,
            "timeout_transport": self.timeout_transport,
            "timeout_ops": self.timeout_ops,
        }

        if credentials.secret:
            params["auth_secondary"] = credentials.secret

        if device.port and device.port != 22:
            params["port"] = device.port

        return params

    def open(self, device: Device, credentials: Credentials) -> Scrapli:
        """
        Открывает SSH сессию.

        Returns:
            Scrapli: Открытое подключение

        Raises:
            TimeoutError: Таймаут подключения
            AuthenticationError: Неверные учётные данные
            ConnectionError: Хост недоступен или другая ошибка транспорта
        """
        params = self._build_connection_params(device, credentials)
        logger.info(f"Подключение к {device.ip_address} ({params['platform']})...")

        try:
            connection = Scrapli(**params)
            connection.open()
        except ScrapliTimeout as e:
            logger.error(f"Таймаут при подключении к {device.ip_address}: {e}")
            raise CollectorTimeoutError(
                f"Таймаут подключения: {e}",
                device=device.ip_address,
                timeout_seconds=self.timeout_socket,
            ) from e
        except ScrapliAuthenticationFailed as e:
            logger.error(f"Ошибка аутентификации на {device.ip_address}: {e}")
            raise AuthenticationError(
                f"Ошибка аутентификации: {e}",
                device=device.ip_address,
            ) from e
        except (ScrapliException, OSError) as e:
            logger.error(f"Ошибка подключения к {device.ip_address}: {e}")
            raise CollectorConnectionError(
                f"Ошибка подключения: {e}",
                device=device.ip_address,
                port=device.port or 22,
            ) from e

        logger.info(f"Подключено к {device.display_name}")
        return connection

    def close(self, connection: Scrapli, device: Device) -> None:
        """Закрывает сессию. Ошибка закрытия не критична — только лог."""
        try:
            connection.close()
            logger.debug(f"Отключено от {device.ip_address}")
        except (ScrapliException, OSError) as e:
            logger.warning(f"Ошибка при закрытии сессии {device.ip_address}: {e}")

    @contextmanager
    def connect(
        self,
        device: Device,
        credentials: Credentials,
    ) -> Generator[Scrapli, None, None]:
        """
        Контекстный менеджер для подключения к устройству.

        Ошибки открытия сессии преобразуются в исключения collector'а,
        ошибки внутри блока with пробрасываются как есть.
        Сессия закрывается на любом пути выхода.
        """
        connection = self.open(device, credentials)
        try:
            yield connection
        finally:
            self.close(connection, device)

    def send_command(
        self,
        connection: Scrapli,
        command: str,
        device: Device,
        timeout: Optional[int] = None,
    ) -> str:
        """
        Выполняет команду на устройстве.

        Args:
            connection: Активное подключение
            command: Команда
            device: Устройство (для сообщений об ошибках)
            timeout: Таймаут выполнения (по умолчанию timeout_ops)

        Returns:
            str: Вывод команды

        Raises:
            TimeoutError: Команда не завершилась за timeout_ops
            CommandError: Устройство ответило ошибкой или scrapli не выполнил
                          команду (например, не удался вход в privilege)
            ConnectionError: Сессия потеряна
        """
        logger.debug(f"Выполнение команды: {command}")

        try:
            if timeout:
                response = connection.send_command(command, timeout_ops=timeout)
            else:
                response = connection.send_command(command)
        except ScrapliTimeout as e:
            raise CollectorTimeoutError(
                f"Таймаут команды '{command}': {e}",
                device=device.ip_address,
                timeout_seconds=timeout or self.timeout_ops,
            ) from e
        except (ScrapliConnectionNotOpened, ScrapliConnectionError, OSError) as e:
            raise CollectorConnectionError(
                f"Сессия потеряна: {e}",
                device=device.ip_address,
                port=device.port or 22,
            ) from e
        except ScrapliException as e:
            raise CommandError(
                f"Ошибка выполнения команды: {e}",
                device=device.ip_address,
                command=command,
            ) from e

        if response.failed:
            raise CommandError(
                "Устройство вернуло ошибку",
                device=device.ip_address,
                command=command,
                output=response.result,
            )
        return response.result

    @staticmethod
    def get_hostname(connection: Scrapli) -> Optional[str]:
        """
        Hostname устройства из prompt.

        <SW-CORE-01> → SW-CORE-01, SW-CORE-01# → SW-CORE-01,
        [admin@MikroTik] > → MikroTik
        """
        try:
            prompt = connection.get_prompt()
        except ScrapliException as e:
            logger.warning(f"Не удалось получить hostname: {e}")
            return None
        hostname = re.sub(r"[#>$\]\s]+$", "", prompt).strip()
        hostname = hostname.lstrip("<[")
        if "@" in hostname:
            hostname = hostname.split("@", 1)[1]
        return hostname or None
