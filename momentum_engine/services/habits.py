# services/habits.py

import dataclasses
import logging
import threading
from typing import Any, Dict, List, Optional

from momentum_engine.core.database import KeyValueStore, PersistenceError, StorageSlot
from momentum_engine.core.models import Habit, SEED_HABITS, validate_text
from momentum_engine.core.repository import JsonSlotRepository

logger = logging.getLogger(__name__)

class HabitSet(JsonSlotRepository):
    """
    Набор ежедневных привычек.

    Переход Pending -> Completed и обратно выполняет пользователь (toggle),
    Completed -> Pending при смене дня выполняет только reset_all().
    Обе операции берут один и тот же RLock.
    """

    slot = StorageSlot.HABITS

    def __init__(self, store: KeyValueStore):
        self.habits: List[Habit] = []
        self.lock = threading.RLock()
        self._seeded = False
        super().__init__(store)

        # Первый запуск: фиксируем сгенерированные id засеянных привычек
        if self._seeded:
            try:
                self.persist()
            except PersistenceError as e:
                logger.warning(f"⚠️ Не удалось сохранить начальные привычки: {e}")

    def reset_default(self) -> None:
        self.habits = [Habit.create(label) for label in SEED_HABITS]
        self._seeded = True

    def to_json(self) -> Any:
        return [h.to_dict() for h in self.habits]

    def from_json(self, data: Any) -> None:
        if not isinstance(data, list):
            raise TypeError("habits должен быть списком")
        self.habits = [Habit.from_dict(item) for item in data]

    def get(self, habit_id: str) -> Optional[Habit]:
        return next((h for h in self.habits if h.id == habit_id), None)

    def list_all(self) -> List[Habit]:
        """Копии привычек; изменения вносятся только через toggle/rename"""
        return [dataclasses.replace(h) for h in self.habits]

    def toggle(self, habit_id: str, save: bool = True) -> Optional[Habit]:
        """Переключить привычку; None если id не найден"""
        with self.lock:
            habit = self.get(habit_id)
            if habit is None:
                return None

            habit.toggle()
            logger.debug(f"✅ Привычка {habit.label!r}: completed={habit.completed}")
            self.changed(save)
            return dataclasses.replace(habit)

    def rename(self, habit_id: str, label: str) -> Optional[Habit]:
        """Переименование не затрагивает историю выполнения"""
        label = validate_text(label, "label")
        with self.lock:
            habit = self.get(habit_id)
            if habit is None:
                return None
            habit.label = label
            self.persist()
            return dataclasses.replace(habit)

    def reset_all(self) -> None:
        """Сбросить completed у всех привычек"""
        with self.lock:
            for habit in self.habits:
                habit.completed = False
            self.persist()

    def replace(self, value: List[Habit]) -> None:
        with self.lock:
            self.habits = list(value)
            self.persist()

    def clear(self) -> None:
        with self.lock:
            self.habits = []
            self.persist()

class HabitHistory(JsonSlotRepository):
    """День -> список названий выполненных привычек (без повторов)"""

    slot = StorageSlot.HABIT_HISTORY

    def __init__(self, store: KeyValueStore):
        self.days: Dict[str, List[str]] = {}
        super().__init__(store)

    def reset_default(self) -> None:
        self.days = {}

    def to_json(self) -> Any:
        return self.days

    def from_json(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise TypeError("habit history должен быть объектом")
        self.days = {str(day): [str(label) for label in labels] for day, labels in data.items()}

    def record(self, day: str, label: str, save: bool = True) -> bool:
        """Добавить название привычки в историю дня; повтор игнорируется"""
        labels = self.days.get(day, [])
        if label in labels:
            return False

        self.days[day] = labels + [label]
        self.changed(save)
        return True

    def labels_on(self, day: str) -> List[str]:
        return list(self.days.get(day, []))

    def replace(self, value: Dict[str, List[str]]) -> None:
        self.days = {day: list(labels) for day, labels in value.items()}
        self.persist()

    def clear(self) -> None:
        self.days = {}
        self.persist()
