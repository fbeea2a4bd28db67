#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Momentum Engine v1.0 - Configuration
Централизованная конфигурация с валидацией

Версия: 1.0.0
Дата: 2026-10-19
"""

import os
import sys
from pathlib import Path
from typing import Dict, Any, Optional, Mapping
from dataclasses import dataclass, field
from enum import Enum

import pytz

class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"

class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

@dataclass
class StorageConfig:
    """Конфигурация хранилища"""
    data_dir: Path
    export_dir: Path
    store_file: str = "momentum_store.json"
    max_exports: int = 10

    @property
    def store_path(self) -> Path:
        return self.data_dir / self.store_file

@dataclass
class ScheduleConfig:
    """Конфигурация фоновых проверок и таймера"""
    timezone: str = "UTC"
    rollover_interval_seconds: int = 60
    focus_duration_seconds: int = 300

@dataclass
class LoggingConfig:
    """Конфигурация логирования"""
    log_dir: Path = Path("logs")
    level: LogLevel = LogLevel.INFO
    to_file: bool = True
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    max_bytes: int = 10485760  # 10MB
    backup_count: int = 5

@dataclass
class EngineConfig:
    """Главный класс конфигурации"""
    environment: Environment = Environment.DEVELOPMENT
    storage: StorageConfig = field(default_factory=lambda: StorageConfig(Path("data"), Path("exports")))
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Загрузка конфигурации из переменных окружения"""
        env = os.environ if environ is None else environ
        errors = []

        def _int(key: str, default: int) -> int:
            raw = env.get(key)
            if raw is None or raw == "":
                return default
            try:
                return int(raw)
            except ValueError:
                errors.append(f"{key} должен быть целым числом, получено {raw!r}")
                return default

        def _enum(key: str, enum_class: type, default: Enum) -> Enum:
            raw = env.get(key)
            if not raw:
                return default
            try:
                return enum_class(raw.strip().lower() if enum_class is Environment else raw.strip().upper())
            except ValueError:
                valid_values = [e.value for e in enum_class]
                errors.append(f"{key} должен быть одним из: {valid_values}")
                return default

        config = cls(
            environment=_enum("MOMENTUM_ENV", Environment, Environment.DEVELOPMENT),
            storage=StorageConfig(
                data_dir=Path(env.get("MOMENTUM_DATA_DIR", "data")),
                export_dir=Path(env.get("MOMENTUM_EXPORT_DIR", "exports")),
                max_exports=_int("MOMENTUM_MAX_EXPORTS", 10),
            ),
            schedule=ScheduleConfig(
                timezone=env.get("MOMENTUM_TIMEZONE", "UTC"),
                rollover_interval_seconds=_int("MOMENTUM_ROLLOVER_INTERVAL", 60),
                focus_duration_seconds=_int("MOMENTUM_FOCUS_SECONDS", 300),
            ),
            logging=LoggingConfig(
                log_dir=Path(env.get("MOMENTUM_LOG_DIR", "logs")),
                level=_enum("MOMENTUM_LOG_LEVEL", LogLevel, LogLevel.INFO),
                to_file=env.get("MOMENTUM_LOG_TO_FILE", "true").lower() == "true",
            ),
        )

        errors.extend(config.validate())
        if errors:
            raise ValueError("Ошибки конфигурации:\n" + "\n".join(f"• {error}" for error in errors))
        return config

    def validate(self) -> list:
        """Валидация конфигурации, возвращает список ошибок"""
        errors = []

        try:
            pytz.timezone(self.schedule.timezone)
        except pytz.UnknownTimeZoneError:
            errors.append(f"Неизвестная временная зона: {self.schedule.timezone}")

        # Интервал проверки смены дня не должен превышать минуту
        if not 1 <= self.schedule.rollover_interval_seconds <= 60:
            errors.append("MOMENTUM_ROLLOVER_INTERVAL должен быть от 1 до 60 секунд")

        if self.schedule.focus_duration_seconds <= 0:
            errors.append("MOMENTUM_FOCUS_SECONDS должен быть положительным числом")

        if self.storage.max_exports < 1:
            errors.append("MOMENTUM_MAX_EXPORTS должен быть не меньше 1")

        return errors

    @property
    def tz(self):
        """Временная зона для календарных дней"""
        return pytz.timezone(self.schedule.timezone)

    def ensure_directories(self) -> None:
        """Создание необходимых директорий"""
        directories = [self.storage.data_dir, self.storage.export_dir]
        if self.logging.to_file:
            directories.append(self.logging.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """Получение конфигурации логирования для dictConfig"""
        handlers = ['console']
        if self.logging.to_file:
            handlers.append('file')

        level = self.logging.level.value
        handler_defs: Dict[str, Any] = {
            'console': {
                'class': 'logging.StreamHandler',
                'level': level,
                'formatter': 'default',
                'stream': sys.stdout
            }
        }
        if self.logging.to_file:
            handler_defs['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': level,
                'formatter': 'default',
                'filename': str(self.logging.log_dir / f"momentum_{self.environment.value}.log"),
                'maxBytes': self.logging.max_bytes,
                'backupCount': self.logging.backup_count,
                'encoding': 'utf-8'
            }

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.logging.format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': handler_defs,
            'loggers': {
                'momentum_engine': {
                    'level': level,
                    'handlers': handlers,
                    'propagate': False
                },
                'apscheduler': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

    def is_development(self) -> bool:
        """Проверка режима разработки"""
        return self.environment == Environment.DEVELOPMENT

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация конфигурации в словарь"""
        return {
            'environment': self.environment.value,
            'store_path': str(self.storage.store_path),
            'export_dir': str(self.storage.export_dir),
            'max_exports': self.storage.max_exports,
            'timezone': self.schedule.timezone,
            'rollover_interval_seconds': self.schedule.rollover_interval_seconds,
            'focus_duration_seconds': self.schedule.focus_duration_seconds,
            'log_level': self.logging.level.value,
            'log_to_file': self.logging.to_file
        }

__all__ = [
    'EngineConfig',
    'Environment',
    'LogLevel',
    'StorageConfig',
    'ScheduleConfig',
    'LoggingConfig'
]
