"""
Загрузчик конфигурации из config.yaml.

Порядок (каждый следующий перекрывает предыдущий):
1. Значения по умолчанию (core.config_schema)
2. YAML: явный путь, $TOPOLOGY_CONFIG, ./config.yaml, ./config.yml
3. Переменные окружения: TOPOLOGY_DB_PATH, TOPOLOGY_LOG_LEVEL

Пример:
    config = load_config("config.yaml")
    config.connection.timeout_ops   # 60
    config.database.path            # "topology.db"
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml

from .core.config_schema import AppConfig, get_default_config, validate_config
from .core.exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_CONFIG_FILE = "TOPOLOGY_CONFIG"

SEARCH_PATHS = ("config.yaml", "config.yml")

# Переменная окружения → путь в конфигурации
ENV_OVERRIDES = {
    "TOPOLOGY_DB_PATH": ("database", "path"),
    "TOPOLOGY_LOG_LEVEL": ("logging", "level"),
}


def _merge_dict(base: dict, override: Mapping[str, Any]) -> None:
    """Рекурсивно мержит словари."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_dict(base[key], value)
        else:
            base[key] = value


def find_config_file(
    config_file: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """
    Ищет файл конфигурации.

    Явно указанный файл обязан существовать.

    Raises:
        ConfigError: Явно указанный файл не найден
    """
    if config_file:
        if not os.path.exists(config_file):
            raise ConfigError("Файл конфигурации не найден", config_file=config_file)
        return config_file

    environ = os.environ if environ is None else environ
    env_file = environ.get(ENV_CONFIG_FILE)
    if env_file:
        if not os.path.exists(env_file):
            raise ConfigError(
                f"Файл из ${ENV_CONFIG_FILE} не найден",
                config_file=env_file,
                key=ENV_CONFIG_FILE,
            )
        return env_file

    for path in SEARCH_PATHS:
        if os.path.exists(path):
            return path
    return None


def _read_yaml(config_file: str) -> Dict[str, Any]:
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Ошибка разбора YAML: {e}", config_file=config_file) from e
    except OSError as e:
        raise ConfigError(f"Ошибка чтения файла: {e}", config_file=config_file) from e

    if not isinstance(data, dict):
        raise ConfigError("Корень конфигурации должен быть словарём", config_file=config_file)
    return data


def _apply_env(data: dict, environ: Mapping[str, str]) -> None:
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            data.setdefault(section, {})[key] = value
            logger.debug(f"{section}.{key} переопределён из {env_name}")


def load_config(
    config_file: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    Загружает и валидирует конфигурацию.

    Args:
        config_file: Путь к YAML (опционально)
        environ: Окружение (по умолчанию os.environ)

    Returns:
        AppConfig: Валидированная конфигурация

    Raises:
        ConfigError: Файл не найден, не разбирается или не проходит валидацию
    """
    environ = os.environ if environ is None else environ
    data = get_default_config().model_dump()

    path = find_config_file(config_file, environ)
    if path:
        _merge_dict(data, _read_yaml(path))
        logger.debug(f"Конфигурация загружена из {path}")

    _apply_env(data, environ)
    return validate_config(data, config_file=path)
