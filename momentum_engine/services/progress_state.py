# services/progress_state.py

"""
Скалярное состояние прогресса: очки, счетчики аналитики, активная тема и флаги
"""

import logging
from typing import Any

from momentum_engine.core.database import (
    KeyValueStore, StorageSlot, decode_bool, decode_int, encode_bool
)
from momentum_engine.core.models import AnalyticsData
from momentum_engine.core.repository import JsonSlotRepository, SlotRepository

logger = logging.getLogger(__name__)

class PointsCounter(SlotRepository):
    """Очки, валюта разблокировок; в обычных сценариях только растут"""

    slot = StorageSlot.POINTS

    def __init__(self, store: KeyValueStore):
        self.value = 0
        super().__init__(store)

    def reset_default(self) -> None:
        self.value = 0

    def serialize(self) -> str:
        return str(self.value)

    def deserialize(self, raw: str) -> None:
        self.value = max(0, decode_int(raw, 0))

    def add(self, amount: int = 1, save: bool = True) -> int:
        if amount < 0:
            raise ValueError("Очки не уменьшаются")
        self.value += amount
        logger.debug(f"⭐ +{amount} очков, всего {self.value}")
        self.changed(save)
        return self.value

    def replace(self, value: int) -> None:
        self.value = int(value)
        self.persist()

    def clear(self) -> None:
        self.replace(0)

class AnalyticsCounters(JsonSlotRepository):
    """Счетчики действий; каждый увеличивается ровно один раз на действие"""

    slot = StorageSlot.ANALYTICS

    def __init__(self, store: KeyValueStore):
        self.data = AnalyticsData()
        super().__init__(store)

    def reset_default(self) -> None:
        self.data = AnalyticsData()

    def to_json(self) -> Any:
        return self.data.to_dict()

    def from_json(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise TypeError("analytics должен быть объектом")
        self.data = AnalyticsData.from_dict(data)

    def increment(self, counter: str, save: bool = True) -> int:
        """Увеличить счетчик по имени атрибута AnalyticsData"""
        if counter not in AnalyticsData.WIRE_NAMES:
            raise KeyError(f"Неизвестный счетчик: {counter}")
        value = getattr(self.data, counter) + 1
        setattr(self.data, counter, value)
        self.changed(save)
        return value

    def replace(self, value: AnalyticsData) -> None:
        self.data = value
        self.persist()

    def clear(self) -> None:
        self.replace(AnalyticsData())

class ThemeSlot(SlotRepository):
    """Активная тема (цвет)"""

    slot = StorageSlot.THEME

    def __init__(self, store: KeyValueStore, default_color: str):
        self.default_color = default_color
        self.color = default_color
        super().__init__(store)

    def reset_default(self) -> None:
        self.color = self.default_color

    def serialize(self) -> str:
        return self.color

    def deserialize(self, raw: str) -> None:
        self.color = raw.strip() or self.default_color

    def replace(self, value: str) -> None:
        self.color = value
        self.persist()

    def clear(self) -> None:
        self.replace(self.default_color)

class FlagSlot(SlotRepository):
    """Булев флаг (напоминания, аудио-щит)"""

    def __init__(self, store: KeyValueStore, slot: str, default: bool = False):
        self.slot = slot
        self.default = default
        self.enabled = default
        super().__init__(store)

    def reset_default(self) -> None:
        self.enabled = self.default

    def serialize(self) -> str:
        return encode_bool(self.enabled)

    def deserialize(self, raw: str) -> None:
        self.enabled = decode_bool(raw, self.default)

    def set(self, enabled: bool) -> bool:
        self.enabled = bool(enabled)
        self.persist()
        return self.enabled

    def replace(self, value: bool) -> None:
        self.set(value)

    def clear(self) -> None:
        self.set(self.default)

class LastResetMarker(SlotRepository):
    """День последнего сброса привычек"""

    slot = StorageSlot.LAST_RESET

    def __init__(self, store: KeyValueStore):
        self.day = None
        super().__init__(store)

    def reset_default(self) -> None:
        self.day = None

    def serialize(self) -> str:
        return self.day or ""

    def deserialize(self, raw: str) -> None:
        self.day = raw.strip() or None

    def mark(self, day: str) -> None:
        self.day = day
        self.persist()

    def replace(self, value: str) -> None:
        self.mark(value)

    def clear(self) -> None:
        self.day = None
        self.persist()

def reminders_flag(store: KeyValueStore) -> FlagSlot:
    return FlagSlot(store, StorageSlot.REMINDERS)

def audio_shield_flag(store: KeyValueStore) -> FlagSlot:
    return FlagSlot(store, StorageSlot.AUDIO_SHIELD)
