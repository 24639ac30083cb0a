"""
ImputeGenius - Unit Tests for Logging Configuration
"""

import asyncio

import pytest
from loguru import logger

import config
from config.logging_config import (
    LogContext,
    _agents_filter,
    _auto_setup,
    clear_run_context,
    get_logger,
    log_execution_time,
    set_run_context,
    setup_logging,
)


@pytest.fixture
def captured():
    """Records emitted while the test runs."""
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(sink_id)


class TestLoggers:
    """Bound loggers and contexts"""

    def test_get_logger_binds(self, captured):
        get_logger("estimators", component="estimator", method="knn").info("fitting")

        extra = captured[-1]["extra"]
        assert extra["name"] == "estimators"
        assert extra["component"] == "estimator"
        assert extra["method"] == "knn"

    def test_log_context(self, captured):
        with LogContext(imputation_method="mice"):
            logger.info("inside")
        logger.info("outside")

        assert captured[-2]["extra"]["imputation_method"] == "mice"
        assert "imputation_method" not in captured[-1]["extra"]

    def test_run_context(self):
        setup_logging(log_level="DEBUG", reset_existing=True)
        captured = []
        sink_id = logger.add(lambda message: captured.append(message.record), level="DEBUG")
        set_run_context(run_id="run-1", dataset_id="orders")
        try:
            logger.info("tagged")
        finally:
            clear_run_context()
        logger.info("untagged")
        logger.remove(sink_id)

        assert captured[-2]["extra"]["run_id"] == "run-1"
        assert captured[-2]["extra"]["dataset_id"] == "orders"
        assert captured[-1]["extra"]["run_id"] == "-"

    def test_agents_filter(self):
        assert _agents_filter({"name": "x", "extra": {"agent": "ImputationOrchestrator"}})
        assert _agents_filter({"name": "x", "extra": {"component": "agent"}})
        assert not _agents_filter({"name": "x", "extra": {"component": "estimator"}})


class TestAutoSetup:
    """Importing the engine leaves loguru sinks alone by default"""

    def test_off_by_default(self):
        previous = config.use_test_settings(TEST_MODE=False)
        try:
            assert config.get_settings().LOG_AUTO_SETUP is False
            assert _auto_setup() is False
        finally:
            config.use_test_settings(**previous)

    def test_test_mode_wins(self):
        previous = config.use_test_settings(LOG_AUTO_SETUP=True)
        try:
            assert _auto_setup() is False
        finally:
            config.use_test_settings(**previous)


class TestExecutionTime:
    """Timing decorator"""

    def test_sync_passthrough(self):
        @log_execution_time
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"

    def test_sync_reraises(self):
        @log_execution_time
        def fail():
            raise ValueError("bad input")

        with pytest.raises(ValueError):
            fail()

    def test_async(self):
        @log_execution_time
        async def double(x):
            await asyncio.sleep(0)
            return x * 2

        assert asyncio.run(double(21)) == 42
