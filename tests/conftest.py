"""
Общие фикстуры: управляемые часы, хранилища и фабрика движка.

Часы заморожены; планировщик, запущенный движком, останавливается после теста.
"""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import pytest
import pytz

from momentum_engine.config import EngineConfig, LoggingConfig, StorageConfig
from momentum_engine.core.database import MemoryStore, PersistenceError
from momentum_engine.engine import MomentumEngine


class FrozenClock:
    """Часы, которые двигаются только по команде теста"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
        self.now = pytz.UTC.localize(datetime(year, month, day, hour, minute))
        return self.now


class FailingStore(MemoryStore):
    """Хранилище в памяти, отказывающее в записи, пока failing == True"""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.failing = False

    def set(self, key: str, value: str) -> None:
        if self.failing:
            self.stats.error_count += 1
            raise PersistenceError(f"quota exceeded for {key}")
        super().set(key, value)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(pytz.UTC.localize(datetime(2026, 3, 10, 12, 0)))


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def config(tmp_path: Path) -> EngineConfig:
    return EngineConfig(
        storage=StorageConfig(data_dir=tmp_path / "data", export_dir=tmp_path / "exports", max_exports=3),
        logging=LoggingConfig(log_dir=tmp_path / "logs", to_file=False),
    )


@pytest.fixture
def make_engine(config, clock):
    """Фабрика движков поверх переданного хранилища"""
    created = []

    def factory(store: Optional[MemoryStore] = None) -> MomentumEngine:
        engine = MomentumEngine(store if store is not None else MemoryStore(), config=config, clock=clock)
        created.append(engine)
        return engine

    yield factory

    for engine in created:
        engine.rollover.stop()


@pytest.fixture
def engine(make_engine, store) -> MomentumEngine:
    return make_engine(store)


@pytest.fixture
def isolated_logging():
    """Снять обработчики, установленные dictConfig, после теста"""
    yield
    for name in ("momentum_engine", "apscheduler"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
