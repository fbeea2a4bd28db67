#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Momentum Engine v1.0 - Persistent Store
Ключ-значение хранилище именованных слотов с атомарной записью на диск

Версия: 1.0.0
Дата: 2026-10-19
"""

import json
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass
import logging

from momentum_engine.core.models import MomentumError

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class PersistenceError(MomentumError):
    """Хранилище отказалось записать данные"""
    pass

# ===== SLOTS =====

class StorageSlot:
    """Имена слотов хранилища"""
    ENTRIES = 'momentum_entries'
    HABITS = 'momentum_habits'
    POINTS = 'momentum_points'
    LAST_RESET = 'momentum_last_reset'
    VISION = 'momentum_vision'
    MINI_GOALS = 'momentum_mini_goals'
    IF_THEN = 'momentum_if_then'
    WOOP = 'momentum_woop'
    THEME = 'momentum_theme'
    AUDIO_SHIELD = 'momentum_audio_shield'
    REMINDERS = 'momentum_reminders'
    ANALYTICS = 'momentum_analytics'
    HABIT_HISTORY = 'momentum_habit_history'
    FUTURE_COST_NOTES = 'momentum_future_cost_notes'

# ===== TEXT ENCODINGS =====

def encode_bool(value: bool) -> str:
    return "true" if value else "false"

def decode_bool(raw: Optional[str], default: bool = False) -> bool:
    """Разбор булева значения; все, кроме 'true'/'false', дает значение по умолчанию"""
    if raw is None:
        return default
    value = raw.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    logger.warning(f"Corrupt boolean value {raw!r}, using default {default}")
    return default

def decode_int(raw: Optional[str], default: int = 0) -> int:
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except (ValueError, AttributeError):
        logger.warning(f"Corrupt integer value {raw!r}, using default {default}")
        return default

# ===== HELPER CLASSES =====

@dataclass
class StoreStats:
    """Статистика хранилища"""
    save_count: int = 0
    error_count: int = 0
    load_count: int = 0
    last_save: Optional[str] = None
    last_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'save_count': self.save_count,
            'error_count': self.error_count,
            'load_count': self.load_count,
            'last_save': self.last_save,
            'last_error': self.last_error
        }

# ===== STORES =====

class KeyValueStore(ABC):
    """Долговременное хранилище текстовых значений по именованным слотам"""

    def __init__(self):
        self.stats = StoreStats()

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Получить значение слота или None"""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Записать значение слота; PersistenceError при отказе"""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        pass

    def close(self) -> None:
        pass

class MemoryStore(KeyValueStore):
    """Хранилище в памяти"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        super().__init__()
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self.stats.save_count += 1

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())

class JsonFileStore(KeyValueStore):
    """Все слоты в одном JSON файле; каждая запись переписывает файл атомарно"""

    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)
        self._data: Dict[str, str] = {}
        self._lock = threading.RLock()
        self._load()

    def _load(self) -> None:
        """Загрузка файла хранилища"""
        if not self.path.exists():
            logger.info(f"Store file {self.path} does not exist, starting with empty store")
            self.stats.load_count += 1
            return

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Store file is corrupted: {e}")
            self._handle_corruption()
            return
        except OSError as e:
            raise PersistenceError(f"Failed to read store file {self.path}: {e}")

        if not isinstance(data, dict):
            logger.error(f"Store file {self.path} does not contain an object")
            self._handle_corruption()
            return

        # Значения слотов всегда строки
        self._data = {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in data.items()}
        self.stats.load_count += 1
        logger.info(f"Loaded {len(self._data)} slots from {self.path}")

    def _handle_corruption(self) -> None:
        """Поврежденный файл перемещается в сторону, работа продолжается с пустым хранилищем"""
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        aside = self.path.with_name(f"{self.path.stem}.corrupted_{timestamp}.json")
        try:
            self.path.replace(aside)
            logger.warning(f"Corrupted store moved to {aside}")
        except OSError as e:
            logger.error(f"Failed to move corrupted store aside: {e}")
        self._data = {}

    def _write(self) -> None:
        """Атомарное сохранение через временный файл"""
        temp_file = self.path.with_suffix('.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
            temp_file.replace(self.path)
        except OSError as e:
            self.stats.error_count += 1
            self.stats.last_error = str(e)
            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError:
                    logger.debug(f"Could not remove temp file {temp_file}")
            logger.error(f"Failed to write store {self.path}: {e}")
            raise PersistenceError(f"Failed to write store {self.path}: {e}") from e

        self.stats.save_count += 1
        self.stats.last_save = datetime.now().isoformat()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            # Значение в памяти остается источником истины даже при ошибке записи
            self._data[key] = value
            self._write()

    def delete(self, key: str) -> None:
        with self._lock:
            if key in self._data:
                del self._data[key]
                self._write()

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data.keys())
