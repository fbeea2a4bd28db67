"""
Momentum Engine v1.0

Локальный движок состояния продуктивности: журнал активности, ежедневные
привычки, планирование, метрики, значки и темы, экспорт/импорт.
"""

from momentum_engine.config import EngineConfig
from momentum_engine.core.database import PersistenceError
from momentum_engine.core.models import MomentumError, NotFoundError, ValidationError
from momentum_engine.engine import MomentumEngine
from momentum_engine.services.data_export import FormatError

__version__ = "1.0.0"

__all__ = [
    'MomentumEngine',
    'EngineConfig',
    'MomentumError',
    'ValidationError',
    'FormatError',
    'PersistenceError',
    'NotFoundError',
    '__version__'
]
