#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Momentum Engine v1.0 - Core Data Models
Модели данных с валидацией и типизацией

Версия: 1.0.0
Дата: 2026-10-19
"""

import uuid
from datetime import date
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field, asdict
import logging

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class MomentumError(Exception):
    """Базовое исключение движка"""
    pass

class ValidationError(MomentumError):
    """Ошибка валидации пользовательского ввода"""
    pass

class NotFoundError(MomentumError):
    """Объект не найден"""
    pass

# ===== VALIDATION HELPERS =====

def validate_text(text: str, field_name: str = "text") -> str:
    """Валидация текстовых полей: строка, непустая после strip()"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} должен быть строкой")

    text = text.strip()
    if not text:
        raise ValidationError(f"{field_name} не может быть пустым")

    return text

def new_id() -> str:
    """Уникальный идентификатор, не зависящий от времени создания"""
    return uuid.uuid4().hex

# ===== STATIC CATALOGS =====

SEED_HABITS = [
    "Wake up 30m earlier",
    "Read 10 pages",
    "Meditate 5 minutes",
    "Gratitude journal",
]

IF_THEN_PRESETS = [
    ("I get distracted by my phone", "I will set a timer of 20 minutes to do deep-work"),
    ("I want to spend something online", "I will wait 30 minutes and see if I still need it"),
    ("I feel like procrastinating", "I will do 10 pushups and start a 5-minute burst"),
    ("I lose focus on my task", "I will take 3 deep breaths and write down my next tiny step"),
]

SPARK_TASKS = [
    "Clear 5 emails",
    "Do 10 pushups",
    "Drink a glass of water",
    "Write down 1 tiny win",
    "Tidy your desk for 2 mins",
    "Take 5 deep breaths",
    "Plan your next 1 hour",
    "Stretch for 60 seconds",
    "Close all unused tabs",
    "Message a friend",
]

FOCUS_SESSION_TEXT = "Completed 5-Minute Action Burst"

# ===== CORE MODELS =====

@dataclass(frozen=True)
class ActivityEntry:
    """Запись журнала активности (неизменяемая)"""
    id: str
    text: str
    timestamp: int  # epoch, миллисекунды

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActivityEntry":
        return cls(id=str(data["id"]), text=str(data["text"]), timestamp=int(data["timestamp"]))

    @classmethod
    def create(cls, text: str, timestamp: int) -> "ActivityEntry":
        """Создание новой записи"""
        return cls(id=new_id(), text=validate_text(text, "text"), timestamp=timestamp)

@dataclass
class Habit:
    """Ежедневная привычка; completed действителен только для текущего дня"""
    id: str
    label: str
    completed: bool = False

    def toggle(self) -> bool:
        """Переключить статус выполнения"""
        self.completed = not self.completed
        return self.completed

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        return cls(id=str(data["id"]), label=str(data["label"]), completed=bool(data.get("completed", False)))

    @classmethod
    def create(cls, label: str) -> "Habit":
        return cls(id=new_id(), label=validate_text(label, "label"))

@dataclass
class MiniGoal:
    """Мини-цель с произвольным сроком"""
    id: str
    text: str
    deadline: str = ""
    completed: bool = False

    def toggle(self) -> bool:
        self.completed = not self.completed
        return self.completed

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MiniGoal":
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            deadline=str(data.get("deadline") or ""),
            completed=bool(data.get("completed", False))
        )

    @classmethod
    def create(cls, text: str, deadline: str = "") -> "MiniGoal":
        return cls(id=new_id(), text=validate_text(text, "text"), deadline=(deadline or "").strip())

@dataclass
class IfThenPlan:
    """Правило «если-то»; постоянное, без статуса выполнения"""
    id: str
    trigger: str
    action: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IfThenPlan":
        return cls(id=str(data["id"]), trigger=str(data["trigger"]), action=str(data["action"]))

    @classmethod
    def create(cls, trigger: str, action: str) -> "IfThenPlan":
        return cls(
            id=new_id(),
            trigger=validate_text(trigger, "trigger"),
            action=validate_text(action, "action")
        )

@dataclass
class WOOPPlan:
    """WOOP: Wish, Outcome, Obstacle, Plan"""
    wish: str = ""
    outcome: str = ""
    obstacle: str = ""
    plan: str = ""

    FIELDS = ("wish", "outcome", "obstacle", "plan")

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.FIELDS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WOOPPlan":
        return cls(**{name: str(data.get(name) or "") for name in cls.FIELDS})

@dataclass
class AnalyticsData:
    """Монотонные счетчики действий пользователя"""
    timer_sessions: int = 0
    habits_completed: int = 0
    goals_created: int = 0
    if_then_created: int = 0

    # Имена полей в сохраненном/экспортированном виде
    WIRE_NAMES = {
        "timer_sessions": "timerSessions",
        "habits_completed": "habitsCompleted",
        "goals_created": "goalsCreated",
        "if_then_created": "ifThenCreated",
    }

    def to_dict(self) -> Dict[str, int]:
        return {wire: getattr(self, attr) for attr, wire in self.WIRE_NAMES.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalyticsData":
        return cls(**{attr: int(data.get(wire) or 0) for attr, wire in cls.WIRE_NAMES.items()})

@dataclass
class DaySummary:
    """Сводка за календарный день"""
    day: date
    entries: List[ActivityEntry] = field(default_factory=list)
    habits: List[str] = field(default_factory=list)
    future_cost_note: Optional[str] = None

    @property
    def actions_count(self) -> int:
        return len(self.entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'day': self.day.isoformat(),
            'entries': [e.to_dict() for e in self.entries],
            'habits': list(self.habits),
            'futureCostNote': self.future_cost_note
        }
