"""
Structured Logging для Topology Collector.

Два формата вывода:
- human-readable для консоли
- JSON для файлов и систем сбора логов (ELK/Loki)

Пример использования:
    from topology_collector.core.logging import setup_logging, get_logger

    setup_logging(json_format=False)

    logger = get_logger(__name__)
    logger.info("Подключение к устройству", device="sw-core-01", ip="10.0.0.1")

Формат вывода (JSON):
    {"timestamp": "2025-12-27T10:30:15.123456", "level": "INFO",
     "message": "Подключение к устройству", "device": "sw-core-01",
     "ip": "10.0.0.1", "run_id": "2025-12-27T10-30-00"}
"""

import json
import logging
import logging.handlers
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any, List

from .context import get_current_context


class RotationType(str, Enum):
    """Тип ротации логов."""
    SIZE = "size"
    TIME = "time"
    NONE = "none"


@dataclass
class LogConfig:
    """
    Конфигурация логирования.

    Attributes:
        level: Уровень логирования
        json_format: JSON формат для файла (True) или human-readable (False)
        console: Выводить в консоль (всегда human-readable)
        file_path: Путь к файлу логов (None = без файла)
        rotation: Тип ротации (size, time, none)
        max_bytes: Макс размер файла для size-ротации
        backup_count: Количество backup файлов
        when: Интервал для time-ротации (S, M, H, D, midnight)
    """
    level: int = logging.INFO
    json_format: bool = False
    console: bool = True
    file_path: Optional[str] = None
    rotation: RotationType = RotationType.SIZE
    max_bytes: int = 10 * 1024 * 1024  # 10 MB
    backup_count: int = 5
    when: str = "midnight"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogConfig":
        """Создаёт конфигурацию из словаря (секция logging в config.yaml)."""
        rotation = data.get("rotation", "size")
        if isinstance(rotation, str):
            rotation = RotationType(rotation)

        level = data.get("level", "INFO")
        if isinstance(level, str):
            level = getattr(logging, level.upper(), logging.INFO)

        return cls(
            level=level,
            json_format=data.get("json_format", False),
            console=data.get("console", True),
            file_path=data.get("file_path"),
            rotation=rotation,
            max_bytes=data.get("max_bytes", 10 * 1024 * 1024),
            backup_count=data.get("backup_count", 5),
            when=data.get("when", "midnight"),
        )


class JSONFormatter(logging.Formatter):
    """
    JSON форматтер.

    Стандартные поля: timestamp, level, message, logger.
    Все extra-поля (device, ip, operation, run_id, ...) добавляются как есть.
    """

    # Поля logging.LogRecord которые не нужно включать в JSON
    RESERVED_ATTRS = {
        "args", "asctime", "created", "exc_info", "exc_text",
        "filename", "funcName", "levelname", "levelno", "lineno",
        "module", "msecs", "msg", "name", "pathname", "process",
        "processName", "relativeCreated", "stack_info", "thread",
        "threadName", "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        for key, value in record.__dict__.items():
            if key not in self.RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """
    Human-readable форматтер.

    Формат: TIMESTAMP - LEVEL - [run_id] MESSAGE (device=X, ip=Y)
    """

    EXTRA_FIELDS = ("device", "ip", "vendor", "operation")

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)
        message = record.getMessage()

        run_id = getattr(record, "run_id", None)
        prefix = f"[{run_id}] " if run_id else ""

        extras = []
        for attr in self.EXTRA_FIELDS:
            value = getattr(record, attr, None)
            if value:
                extras.append(f"{attr}={value}")
        extra_str = f" ({', '.join(extras)})" if extras else ""

        result = f"{timestamp} - {level} - {prefix}{message}{extra_str}"
        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)
        return result


class StructuredLogger:
    """
    Обёртка над logging.Logger с поддержкой структурированных полей.

    Позволяет логировать с именованными параметрами:
        logger.info("Подключение", device="sw-01", ip="10.0.0.1")
    """

    def __init__(self, name: str, default_extra: Optional[Dict[str, Any]] = None):
        self._logger = logging.getLogger(name)
        self._default_extra = default_extra or {}

    def _log(
        self,
        level: int,
        message: str,
        exc_info: bool = False,
        **kwargs: Any,
    ) -> None:
        extra = {**self._default_extra, **kwargs}

        # run_id из контекста текущего запуска
        if "run_id" not in extra:
            ctx = get_current_context()
            if ctx:
                extra["run_id"] = ctx.run_id

        self._logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log DEBUG."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log INFO."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log WARNING."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log ERROR."""
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log ERROR с traceback."""
        self._log(logging.ERROR, message, exc_info=True, **kwargs)

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """
        Создаёт новый логгер с дополнительными default полями.

        Example:
            device_logger = logger.bind(device="sw-01", ip="10.0.0.1")
            device_logger.info("Connected")  # добавит device, ip
        """
        new_extra = {**self._default_extra, **kwargs}
        return StructuredLogger(self._logger.name, default_extra=new_extra)

    def isEnabledFor(self, level: int) -> bool:
        """Проверка уровня (как у logging.Logger)."""
        return self._logger.isEnabledFor(level)


# Кэш логгеров
_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """
    Получает или создаёт StructuredLogger.

    Args:
        name: Имя логгера (обычно __name__)
    """
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name)
    return _loggers[name]


def _reset_root_handlers() -> logging.Logger:
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    return root_logger


def setup_logging(
    json_format: bool = False,
    level: int = logging.INFO,
    stream: Any = None,
) -> None:
    """
    Настраивает логирование в поток (по умолчанию stderr).

    Args:
        json_format: True для JSON, False для human-readable
        level: Уровень логирования
        stream: Поток вывода

    Example:
        # CLI с флагом --json-logs
        setup_logging(json_format=args.json_logs)
    """
    root_logger = _reset_root_handlers()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else HumanFormatter())

    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def _create_file_handler(config: LogConfig) -> logging.Handler:
    """Создаёт file handler с ротацией."""
    log_path = Path(config.file_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if config.rotation == RotationType.SIZE:
        return logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    elif config.rotation == RotationType.TIME:
        return logging.handlers.TimedRotatingFileHandler(
            filename=str(log_path),
            when=config.when,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    else:
        return logging.FileHandler(str(log_path), encoding="utf-8")


def setup_logging_from_config(config: LogConfig) -> None:
    """
    Настраивает логирование из конфигурации.

    Консоль всегда human-readable, файл — по config.json_format.

    Example:
        config = LogConfig(json_format=True, file_path="logs/topology.log")
        setup_logging_from_config(config)
    """
    root_logger = _reset_root_handlers()
    handlers: List[logging.Handler] = []

    if config.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(HumanFormatter())
        handlers.append(console_handler)

    if config.file_path:
        file_handler = _create_file_handler(config)
        file_handler.setFormatter(
            JSONFormatter() if config.json_format else HumanFormatter()
        )
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(config.level)
        root_logger.addHandler(handler)

    root_logger.setLevel(config.level)
