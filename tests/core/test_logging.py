"""Tests for pact_matrix.core.logging module."""

import json

import structlog

from pact_matrix.core.logging import (
    LogContext,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
)
from pact_matrix.core.settings import MatrixSettings


class TestConfigureLogging:
    def teardown_method(self):
        structlog.reset_defaults()
        structlog.contextvars.clear_contextvars()

    def test_json_output_uses_ecs_field_names(self, capsys):
        configure_logging(level="INFO", json_format=True, service="matrix-tests")
        get_logger("tests").info("matrix_query_completed", lines=3)

        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["event"] == "matrix_query_completed"
        assert record["lines"] == 3
        assert record["service.name"] == "matrix-tests"
        assert record["log.level"] == "info"
        assert "@timestamp" in record

    def test_level_filters_debug(self, capsys):
        configure_logging(level="INFO", json_format=True)
        get_logger("tests").debug("hidden")
        assert "hidden" not in capsys.readouterr().out

    def test_log_context_binds_and_unbinds(self, capsys):
        configure_logging(level="INFO", json_format=True)
        logger = get_logger("tests")
        with LogContext(operation="matrix.find"):
            logger.info("inside")
        logger.info("outside")

        inside, outside = [
            json.loads(line) for line in capsys.readouterr().out.strip().splitlines()[-2:]
        ]
        assert inside["operation"] == "matrix.find"
        assert "operation" not in outside

    def test_configure_from_settings(self, capsys, env_file_dir):
        settings = MatrixSettings(log_level="warning", log_json=True, service_name="from-settings")
        configure_logging_from_settings(settings)
        logger = get_logger("tests")
        logger.info("hidden")
        logger.warning("matrix_selector_not_found", participant_name="Foo")

        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["event"] == "matrix_selector_not_found"
        assert record["service.name"] == "from-settings"
