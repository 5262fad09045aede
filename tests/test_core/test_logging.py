"""
Тесты structured logging, контекста запуска и исключений.
"""

import io
import json
import logging

import pytest

from topology_collector.core.context import RunContext, get_current_context, set_current_context
from topology_collector.core.exceptions import (
    CollectorError,
    CommandError,
    ConfigError,
    ConnectionError as CollectorConnectionError,
    DeviceNotFoundError,
    PersistenceError,
    TopologyCollectorError,
    format_error_for_log,
    is_retryable,
)
from topology_collector.core.logging import (
    HumanFormatter,
    JSONFormatter,
    LogConfig,
    RotationType,
    get_logger,
    setup_logging,
    setup_logging_from_config,
)


@pytest.fixture
def restore_root_logger():
    """Возвращает handlers/уровень root-логгера после теста."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    set_current_context(None)


def _record(message="Подключение", **extra):
    record = logging.LogRecord("topology_collector.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:

    def test_json_formatter_includes_extra(self):
        line = JSONFormatter().format(_record(device="sw-core-01", ip="10.0.0.1", run_id="run-1"))
        data = json.loads(line)

        assert data["message"] == "Подключение"
        assert data["level"] == "INFO"
        assert data["device"] == "sw-core-01"
        assert data["run_id"] == "run-1"
        assert "msg" not in data

    def test_human_formatter(self):
        line = HumanFormatter().format(_record(device="sw-core-01", operation="lldp", run_id="run-1"))

        assert "INFO" in line
        assert "[run-1] Подключение" in line
        assert line.endswith("(device=sw-core-01, operation=lldp)")


class TestStructuredLogger:

    def test_run_id_from_context(self, restore_root_logger):
        ctx = RunContext.create(triggered_by="test", command="collect")
        set_current_context(ctx)
        stream = io.StringIO()
        setup_logging(json_format=True, level=logging.DEBUG, stream=stream)

        get_logger("topology_collector.test").info("Сбор", device="sw-01")

        data = json.loads(stream.getvalue().strip())
        assert data["run_id"] == ctx.run_id
        assert data["device"] == "sw-01"

    def test_bind_adds_default_fields(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(json_format=True, stream=stream)

        log = get_logger("topology_collector.test").bind(device="sw-02", ip="10.0.0.2")
        log.warning("Пропуск устройства")

        data = json.loads(stream.getvalue().strip())
        assert (data["device"], data["ip"], data["level"]) == ("sw-02", "10.0.0.2", "WARNING")

    def test_level_filters(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(level=logging.WARNING, stream=stream)

        get_logger("topology_collector.test").info("не попадёт в вывод")

        assert stream.getvalue() == ""

    def test_get_logger_cached(self):
        assert get_logger("topology_collector.x") is get_logger("topology_collector.x")

    def test_file_handler_from_config(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "topology.log"
        config = LogConfig.from_dict({
            "level": "DEBUG",
            "json_format": True,
            "console": False,
            "file_path": str(log_file),
            "rotation": "none",
        })

        setup_logging_from_config(config)
        get_logger("topology_collector.test").debug("в файл", operation="ospf")
        for handler in logging.getLogger().handlers:
            handler.flush()

        data = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert data["operation"] == "ospf"
        assert config.rotation is RotationType.NONE


class TestExceptions:

    def test_hierarchy(self):
        assert issubclass(CollectorConnectionError, CollectorError)
        assert issubclass(PersistenceError, TopologyCollectorError)
        assert issubclass(ConfigError, TopologyCollectorError)

    def test_str_with_details(self):
        error = CommandError("Устройство вернуло ошибку", device="10.0.0.1", command="display version")

        assert str(error) == "Устройство вернуло ошибку (command='display version', device='10.0.0.1')"
        assert error.to_dict()["error_type"] == "CommandError"

    def test_device_not_found(self):
        error = DeviceNotFoundError("dev-1")

        assert error.device_id == "dev-1"
        assert "dev-1" in error.message

    def test_format_error_for_log(self):
        assert format_error_for_log(ValueError("bad")) == "ValueError: bad"
        assert format_error_for_log(PersistenceError("locked")) == "locked"

    def test_is_retryable(self):
        assert is_retryable(CollectorConnectionError("refused"))
        assert is_retryable(PersistenceError("locked"))
        assert not is_retryable(ConfigError("bad"))


class TestRunContext:

    def test_context_roundtrip(self):
        ctx = RunContext.create(triggered_by="test", command="topology", use_timestamp_id=False)
        set_current_context(ctx)
        try:
            assert get_current_context() is ctx
            assert len(ctx.run_id) == 8
            assert ctx.to_dict()["command"] == "topology"
        finally:
            set_current_context(None)

        assert get_current_context() is None
