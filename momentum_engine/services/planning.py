# services/planning.py

"""
Репозитории планирования: мини-цели, правила «если-то», WOOP и видение
"""

import dataclasses
import logging
from typing import Any, List, Optional

from momentum_engine.core.database import KeyValueStore, StorageSlot
from momentum_engine.core.models import (
    IF_THEN_PRESETS, IfThenPlan, MiniGoal, NotFoundError, WOOPPlan, ValidationError
)
from momentum_engine.core.repository import JsonSlotRepository, SlotRepository

logger = logging.getLogger(__name__)

class GoalSet(JsonSlotRepository):
    """Мини-цели; completed переключается вручную и никогда не сбрасывается"""

    slot = StorageSlot.MINI_GOALS

    def __init__(self, store: KeyValueStore):
        self.goals: List[MiniGoal] = []
        super().__init__(store)

    def reset_default(self) -> None:
        self.goals = []

    def to_json(self) -> Any:
        return [g.to_dict() for g in self.goals]

    def from_json(self, data: Any) -> None:
        if not isinstance(data, list):
            raise TypeError("miniGoals должен быть списком")
        self.goals = [MiniGoal.from_dict(item) for item in data]

    def add(self, text: str, deadline: str = "", save: bool = True) -> MiniGoal:
        goal = MiniGoal.create(text, deadline)
        self.goals.append(goal)
        logger.debug(f"🎯 Добавлена цель {goal.id}")
        self.changed(save)
        return dataclasses.replace(goal)

    def toggle(self, goal_id: str) -> Optional[MiniGoal]:
        goal = self.get(goal_id)
        if goal is None:
            return None
        goal.toggle()
        self.persist()
        return dataclasses.replace(goal)

    def remove(self, goal_id: str) -> bool:
        remaining = [g for g in self.goals if g.id != goal_id]
        if len(remaining) == len(self.goals):
            return False
        self.goals = remaining
        self.persist()
        return True

    def get(self, goal_id: str) -> Optional[MiniGoal]:
        return next((g for g in self.goals if g.id == goal_id), None)

    def list_all(self) -> List[MiniGoal]:
        return [dataclasses.replace(g) for g in self.goals]

    def replace(self, value: List[MiniGoal]) -> None:
        self.goals = list(value)
        self.persist()

    def clear(self) -> None:
        self.goals = []
        self.persist()

class IfThenPlanSet(JsonSlotRepository):
    """Правила «если-то»"""

    slot = StorageSlot.IF_THEN

    def __init__(self, store: KeyValueStore):
        self.plans: List[IfThenPlan] = []
        super().__init__(store)

    def reset_default(self) -> None:
        self.plans = []

    def to_json(self) -> Any:
        return [p.to_dict() for p in self.plans]

    def from_json(self, data: Any) -> None:
        if not isinstance(data, list):
            raise TypeError("ifThenPlans должен быть списком")
        self.plans = [IfThenPlan.from_dict(item) for item in data]

    def add(self, trigger: str, action: str, save: bool = True) -> IfThenPlan:
        plan = IfThenPlan.create(trigger, action)
        self.plans.append(plan)
        self.changed(save)
        return dataclasses.replace(plan)

    def apply_preset(self, index: int, save: bool = True) -> IfThenPlan:
        """Создать правило из шаблона по индексу"""
        if not 0 <= index < len(IF_THEN_PRESETS):
            raise NotFoundError(f"Шаблон #{index} не найден")
        trigger, action = IF_THEN_PRESETS[index]
        return self.add(trigger, action, save)

    def remove(self, plan_id: str) -> bool:
        remaining = [p for p in self.plans if p.id != plan_id]
        if len(remaining) == len(self.plans):
            return False
        self.plans = remaining
        self.persist()
        return True

    def list_all(self) -> List[IfThenPlan]:
        return [dataclasses.replace(p) for p in self.plans]

    def replace(self, value: List[IfThenPlan]) -> None:
        self.plans = list(value)
        self.persist()

    def clear(self) -> None:
        self.plans = []
        self.persist()

class WoopSlot(JsonSlotRepository):
    """Единственный WOOP план, перезаписывается на месте"""

    slot = StorageSlot.WOOP

    def __init__(self, store: KeyValueStore):
        self.woop = WOOPPlan()
        super().__init__(store)

    def reset_default(self) -> None:
        self.woop = WOOPPlan()

    def to_json(self) -> Any:
        return self.woop.to_dict()

    def from_json(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise TypeError("woop должен быть объектом")
        self.woop = WOOPPlan.from_dict(data)

    def update(self, **fields: str) -> WOOPPlan:
        unknown = set(fields) - set(WOOPPlan.FIELDS)
        if unknown:
            raise ValidationError(f"Неизвестные поля WOOP: {sorted(unknown)}")

        for name, value in fields.items():
            if value is not None:
                setattr(self.woop, name, str(value))
        self.persist()
        return dataclasses.replace(self.woop)

    def replace(self, value: WOOPPlan) -> None:
        self.woop = value
        self.persist()

    def clear(self) -> None:
        self.woop = WOOPPlan()
        self.persist()

class VisionSlot(SlotRepository):
    """Свободный текст видения; хранится как есть"""

    slot = StorageSlot.VISION

    def __init__(self, store: KeyValueStore):
        self.text = ""
        super().__init__(store)

    def reset_default(self) -> None:
        self.text = ""

    def serialize(self) -> str:
        return self.text

    def deserialize(self, raw: str) -> None:
        self.text = raw

    def set(self, text: str) -> str:
        self.text = text or ""
        self.persist()
        return self.text

    def replace(self, value: str) -> None:
        self.set(value)

    def clear(self) -> None:
        self.set("")
