"""
Модуль управления учётными данными.

Порядок выбора для устройства:
1. Собственные username/password устройства из реестра
2. Общие учётные данные (явно переданные или NET_USERNAME / NET_PASSWORD)
3. Нет учётных данных — устройство пропускается при сборе

Пример использования:
    creds = CredentialsManager()
    credentials = creds.for_device(device)
    if credentials is None:
        ...  # SSH credentials not configured
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .device import Device

logger = logging.getLogger(__name__)


@dataclass
class Credentials:
    """
    Контейнер для учётных данных.

    Attributes:
        username: Имя пользователя
        password: Пароль
        secret: Enable пароль (опционально)
    """
    username: str
    password: str
    secret: Optional[str] = None

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


class CredentialsManager:
    """
    Менеджер учётных данных.

    Attributes:
        _default: Общие учётные данные (или None)

    Example:
        manager = CredentialsManager(username="admin", password="secret123")
        creds = manager.for_device(device)
    """

    ENV_USERNAME = "NET_USERNAME"
    ENV_PASSWORD = "NET_PASSWORD"
    ENV_SECRET = "NET_SECRET"

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        secret: Optional[str] = None,
        use_env: bool = True,
    ):
        """
        Args:
            username: Общий логин (опционально)
            password: Общий пароль (опционально)
            secret: Enable пароль (опционально)
            use_env: Брать общие учётные данные из переменных окружения
        """
        self._default: Optional[Credentials] = None

        if username and password:
            self._default = Credentials(username=username, password=password, secret=secret)
        elif use_env:
            env_username = os.getenv(self.ENV_USERNAME)
            env_password = os.getenv(self.ENV_PASSWORD)
            if env_username and env_password:
                logger.debug("Используем учётные данные из переменных окружения")
                self._default = Credentials(
                    username=env_username,
                    password=env_password,
                    secret=os.getenv(self.ENV_SECRET) or None,
                )

    @property
    def default(self) -> Optional[Credentials]:
        """Общие учётные данные."""
        return self._default

    def for_device(self, device: Device) -> Optional[Credentials]:
        """
        Учётные данные для устройства.

        Returns:
            Credentials или None, если для устройства ничего не настроено
        """
        if device.has_credentials:
            secret = self._default.secret if self._default else None
            return Credentials(username=device.username, password=device.password, secret=secret)
        return self._default
