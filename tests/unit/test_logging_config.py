"""Tests for logging configuration and calculation event logging."""

import logging
from unittest.mock import Mock

import pytest
import structlog

from conftest import StaticPriceProvider
from stockview_app.config.defaults import LoggingParams
from stockview_app.config.loader import ConfigLoader
from stockview_app.engine import ChartEngine
from stockview_app.logging.config import configure_logging, get_calculation_logger
from stockview_app.portfolio.store import InMemoryPortfolioStore


@pytest.fixture
def reset_structlog():
    root = logging.getLogger()
    level = root.level
    yield
    structlog.reset_defaults()
    root.setLevel(level)


class TestConfigureLogging:
    """Test structlog setup from logging parameters."""

    def test_defaults_use_console_renderer(self, reset_structlog):
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert structlog.is_configured()
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert logging.getLogger().level == logging.INFO

    def test_json_renderer(self, reset_structlog):
        configure_logging(LoggingParams(level="debug", format_json=True))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert logging.getLogger().level == logging.DEBUG

    def test_invalid_level(self, reset_structlog):
        with pytest.raises(ValueError):
            configure_logging(LoggingParams(level="LOUD"))

    def test_params_from_config_file(self, reset_structlog, tmp_path):
        (tmp_path / "engine.yaml").write_text("logging:\n  level: WARNING\n  format_json: true\n")
        params = ConfigLoader.create(tmp_path).logging_params()

        assert params == LoggingParams(level="WARNING", format_json=True)
        configure_logging(params)
        assert logging.getLogger().level == logging.WARNING

    def test_calculation_logger_binds_subsystem(self):
        logger = get_calculation_logger("test")
        assert logger._context["subsystem"] == "calculation"


class TestOverlayLogging:
    """Test that omitted overlays are logged with their reason."""

    def setup_method(self):
        self.engine = ChartEngine(StaticPriceProvider(), InMemoryPortfolioStore())
        self.engine.calculation_logger = Mock()
        self.engine.logger = Mock()

    def test_insufficient_candles_logged(self, sample_candles):
        assert self.engine.gaussian_overlay(sample_candles[:5]) is None

        self.engine.calculation_logger.info.assert_called_once()
        _, kwargs = self.engine.calculation_logger.info.call_args
        assert kwargs["error_type"] == "InsufficientDataError"

    def test_invalid_alpha_logged(self, sample_candles):
        assert self.engine.gaussian_overlay(sample_candles, {"period": 1, "poles": 9}) is None

        self.engine.calculation_logger.warning.assert_called_once()
        _, kwargs = self.engine.calculation_logger.warning.call_args
        assert kwargs["failure_reason"] == "invalid_parameters"

    def test_invalid_override_logged(self, sample_candles):
        assert self.engine.gaussian_overlay(sample_candles, {"poles": "four"}) is None

        self.engine.logger.error.assert_called_once()
        _, kwargs = self.engine.logger.error.call_args
        assert kwargs["errors"][0].startswith("poles:")
