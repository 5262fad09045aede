"""
Pydantic схемы для валидации config.yaml.

Валидация происходит при загрузке конфигурации.
Ошибки валидации выбрасывают ConfigError.

Пример использования:
    from topology_collector.core.config_schema import validate_config

    config_dict = yaml.safe_load(open("config.yaml"))
    validated = validate_config(config_dict)  # raises ConfigError on failure
"""

from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from .exceptions import ConfigError
from .models import DEFAULT_OPERATIONS, Operation


class ConnectionConfig(BaseModel):
    """Настройки SSH подключения."""
    timeout_socket: int = Field(default=15, ge=1, le=300)
    timeout_transport: int = Field(default=30, ge=1, le=600)
    timeout_ops: int = Field(default=60, ge=1, le=600)
    transport: str = Field(default="system", pattern="^(system|paramiko|ssh2|telnet)$")


class CollectionConfig(BaseModel):
    """Настройки сбора."""
    operations: List[str] = Field(
        default_factory=lambda: [op.value for op in DEFAULT_OPERATIONS]
    )
    command_delay: float = Field(default=0.5, ge=0, le=10)
    parallel: bool = False
    max_workers: int = Field(default=5, ge=1, le=50)

    @field_validator("operations")
    @classmethod
    def validate_operations(cls, v: List[str]) -> List[str]:
        """Проверяет что операции из известного набора."""
        allowed = {op.value for op in Operation if op is not Operation.TEST}
        unknown = [op for op in v if op not in allowed]
        if unknown:
            raise PydanticCustomError(
                "invalid_operation",
                "Неизвестные операции: {unknown}",
                {"unknown": ", ".join(unknown)},
            )
        return v


class DatabaseConfig(BaseModel):
    """Настройки хранилища."""
    path: str = "topology.db"
    busy_timeout: float = Field(default=30.0, ge=0, le=600)


class LayoutConfig(BaseModel):
    """Параметры force-directed раскладки."""
    iterations: int = Field(default=50, ge=0, le=10000)
    repulsion: float = Field(default=5000.0, ge=0)
    attraction: float = Field(default=0.01, ge=0)
    damping: float = Field(default=0.9, gt=0, lt=1)
    width: float = Field(default=800.0, gt=0)
    height: float = Field(default=600.0, gt=0)
    padding: float = Field(default=100.0, ge=0)
    columns: int = Field(default=5, ge=1)


class LoggingConfig(BaseModel):
    """Настройки логирования."""
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    json_format: bool = False
    console: bool = True
    file_path: Optional[str] = None
    rotation: str = Field(default="size", pattern="^(size|time|none)$")
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)  # min 1KB
    backup_count: int = Field(default=5, ge=1, le=100)
    when: str = "midnight"


class AppConfig(BaseModel):
    """Полная конфигурация приложения."""
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    collection: CollectionConfig = Field(default_factory=CollectionConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    devices_file: Optional[str] = None


def validate_config(config_dict: dict, config_file: Optional[str] = None) -> AppConfig:
    """
    Валидирует словарь конфигурации.

    Args:
        config_dict: Словарь из YAML (уже смерженный с дефолтами)
        config_file: Путь к файлу (для сообщения об ошибке)

    Returns:
        AppConfig: Валидированная конфигурация

    Raises:
        ConfigError: При ошибке валидации
    """
    try:
        return AppConfig(**config_dict)
    except ValidationError as e:
        errors = e.errors()
        key = None
        error_msg = str(e)
        if errors:
            first_error = errors[0]
            key = ".".join(str(x) for x in first_error.get("loc", []))
            error_msg = f"{key}: {first_error.get('msg', 'Unknown error')}"

        raise ConfigError(
            message=f"Ошибка валидации конфигурации: {error_msg}",
            config_file=config_file or "config.yaml",
            key=key,
        ) from e


def get_default_config() -> AppConfig:
    """Возвращает конфигурацию по умолчанию."""
    return AppConfig()
