"""Tests for queueline.core.logging module."""

import structlog
import structlog.testing

from queueline.core.logging import LogContext, _add_service, _ecs_keys, configure_logging, get_logger


class TestLogContext:
    def setup_method(self):
        structlog.contextvars.clear_contextvars()

    def teardown_method(self):
        structlog.contextvars.clear_contextvars()

    def test_binds_inside_block_only(self):
        with LogContext(config_name="default", action="send") as ctx:
            assert isinstance(ctx, LogContext)
            assert structlog.contextvars.get_contextvars() == {"config_name": "default", "action": "send"}
        assert structlog.contextvars.get_contextvars() == {}

    def test_none_values_skipped(self):
        with LogContext(config_name="default", action=None):
            assert structlog.contextvars.get_contextvars() == {"config_name": "default"}

    def test_nested_rebinding_restores_outer_value(self):
        with LogContext(config_name="outer"):
            with LogContext(config_name="inner"):
                assert structlog.contextvars.get_contextvars()["config_name"] == "inner"
            assert structlog.contextvars.get_contextvars()["config_name"] == "outer"

    def test_unbinds_on_error(self):
        try:
            with LogContext(config_name="default"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert "config_name" not in structlog.contextvars.get_contextvars()

    def test_fields_reach_log_events(self):
        capture = structlog.testing.LogCapture()
        structlog.configure(processors=[structlog.contextvars.merge_contextvars, capture])
        try:
            with LogContext(config_name="default"):
                get_logger("queueline.test").warning("filter.failed")
        finally:
            structlog.reset_defaults()
        assert capture.entries[0]["config_name"] == "default"


class TestUnconfigured:
    """Library use without configure_logging."""

    def setup_method(self):
        structlog.reset_defaults()

    def test_debug_events_stay_off_stdout(self, capsys):
        get_logger("queueline.test").debug("dispatch.run")
        get_logger("queueline.test").info("registry.configured")
        assert capsys.readouterr().out == ""

    def test_logger_wraps_stdlib_logger_of_same_name(self):
        logger = get_logger("queueline.test")
        assert logger.bind()._logger.name == "queueline.test"


class TestConfigureLogging:
    def teardown_method(self):
        structlog.reset_defaults()

    def test_json_renderer_selected(self):
        configure_logging(level="DEBUG", json_format=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert _ecs_keys in processors

    def test_console_renderer_selected(self):
        configure_logging(json_format=False)
        assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)

    def test_format_from_settings(self, monkeypatch):
        from queueline.core.config.settings import clear_settings_cache

        monkeypatch.setenv("QUEUELINE_LOG_FORMAT", "console")
        clear_settings_cache()
        configure_logging()
        assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)

    def test_level_filters_debug(self):
        configure_logging(level="WARNING", json_format=True)
        with structlog.testing.capture_logs() as logs:
            get_logger("queueline.test").debug("dispatch.run")
            get_logger("queueline.test").warning("filter.failed")
        assert [entry["event"] for entry in logs] == ["filter.failed"]


class TestProcessors:
    def test_service_name(self):
        configure_logging(service="queueline-test", json_format=True)
        try:
            event = _add_service(None, "info", {"event": "x"})
        finally:
            structlog.reset_defaults()
        assert event["service.name"] == "queueline-test"

    def test_ecs_field_names(self):
        event = _ecs_keys(None, "info", {"timestamp": "t", "level": "info", "event": "x"})
        assert event == {"@timestamp": "t", "log.level": "info", "event": "x"}
