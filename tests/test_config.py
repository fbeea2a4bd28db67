"""
Конфигурация из переменных окружения и настройка логирования
"""

import logging
from pathlib import Path

import pytest

from momentum_engine.config import EngineConfig, Environment, LogLevel
from momentum_engine.utils.logger import setup_logger


class TestFromEnv:

    def test_defaults(self):
        config = EngineConfig.from_env({})
        assert config.environment == Environment.DEVELOPMENT
        assert config.storage.store_path == Path("data") / "momentum_store.json"
        assert config.schedule.timezone == "UTC"
        assert config.schedule.rollover_interval_seconds == 60
        assert config.schedule.focus_duration_seconds == 300
        assert config.logging.level == LogLevel.INFO
        assert config.is_development()

    def test_overrides(self, tmp_path):
        config = EngineConfig.from_env({
            "MOMENTUM_ENV": "production",
            "MOMENTUM_DATA_DIR": str(tmp_path),
            "MOMENTUM_TIMEZONE": "Europe/Moscow",
            "MOMENTUM_ROLLOVER_INTERVAL": "30",
            "MOMENTUM_LOG_LEVEL": "debug",
            "MOMENTUM_LOG_TO_FILE": "false",
        })
        assert config.environment == Environment.PRODUCTION
        assert config.storage.data_dir == tmp_path
        assert config.tz.zone == "Europe/Moscow"
        assert config.schedule.rollover_interval_seconds == 30
        assert config.logging.level == LogLevel.DEBUG
        assert config.logging.to_file is False

    def test_all_errors_reported(self):
        with pytest.raises(ValueError) as exc_info:
            EngineConfig.from_env({
                "MOMENTUM_TIMEZONE": "Mars/Olympus",
                "MOMENTUM_ROLLOVER_INTERVAL": "120",
                "MOMENTUM_FOCUS_SECONDS": "soon",
                "MOMENTUM_ENV": "staging",
            })
        message = str(exc_info.value)
        assert "Mars/Olympus" in message
        assert "MOMENTUM_ROLLOVER_INTERVAL" in message
        assert "MOMENTUM_FOCUS_SECONDS" in message
        assert "MOMENTUM_ENV" in message


class TestLogging:

    def test_file_handler_rotates(self, tmp_path):
        config = EngineConfig.from_env({"MOMENTUM_LOG_DIR": str(tmp_path)})
        handlers = config.get_logging_config()["handlers"]
        assert handlers["file"]["class"] == "logging.handlers.RotatingFileHandler"
        assert handlers["file"]["maxBytes"] == 10 * 1024 * 1024
        assert handlers["file"]["backupCount"] == 5

    def test_console_only(self):
        config = EngineConfig.from_env({"MOMENTUM_LOG_TO_FILE": "false"})
        assert list(config.get_logging_config()["handlers"]) == ["console"]

    def test_setup_logger_writes_file(self, tmp_path, isolated_logging):
        config = EngineConfig.from_env({"MOMENTUM_LOG_DIR": str(tmp_path / "logs"), "MOMENTUM_ENV": "testing"})
        logger = setup_logger(config)
        logging.getLogger("momentum_engine.tests").warning("probe")
        for handler in logger.handlers:
            handler.flush()

        log_file = tmp_path / "logs" / "momentum_testing.log"
        assert "probe" in log_file.read_text(encoding="utf-8")
