#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Momentum Engine v1.0 - Progression Engine
Значки и темы, открываемые по накопленной статистике

Версия: 1.0.0
Дата: 2026-10-19
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
import logging

from momentum_engine.core.models import AnalyticsData

logger = logging.getLogger(__name__)

# ===== DATA CLASSES =====

@dataclass(frozen=True)
class ProgressStats:
    """Снимок статистики для проверки условий"""
    points: int = 0
    streak: int = 0
    best_streak: int = 0
    analytics: AnalyticsData = field(default_factory=AnalyticsData)

@dataclass(frozen=True)
class Theme:
    """Тема оформления из статического каталога"""
    name: str
    color: str
    unlock_points: int

    def is_unlocked(self, points: int) -> bool:
        return points >= self.unlock_points

    def to_dict(self) -> Dict[str, object]:
        return {'name': self.name, 'color': self.color, 'unlockPoints': self.unlock_points}

@dataclass(frozen=True)
class BadgeDefinition:
    """Определение значка"""
    badge_id: str
    name: str
    description: str
    icon: str

@dataclass(frozen=True)
class BadgeStatus:
    """Результат проверки значка"""
    badge: BadgeDefinition
    unlocked: bool
    progress: int
    target: int

    @property
    def progress_percentage(self) -> float:
        if self.target == 0:
            return 100.0
        return min(100.0, self.progress / self.target * 100)

    def to_dict(self) -> Dict[str, object]:
        return {
            'id': self.badge.badge_id,
            'name': self.badge.name,
            'description': self.badge.description,
            'unlocked': self.unlocked,
            'progress': self.progress,
            'target': self.target
        }

# ===== CHECKERS =====

class BadgeChecker(ABC):
    """Базовый класс для проверки условия значка"""

    @abstractmethod
    def check(self, stats: ProgressStats) -> bool:
        """Проверить условие"""
        pass

    @abstractmethod
    def get_progress(self, stats: ProgressStats) -> Tuple[int, int]:
        """Получить прогресс (текущий, целевой)"""
        pass

class ThresholdChecker(BadgeChecker):
    """Значение статистики достигло порога"""

    def __init__(self, target: int, value_getter: Callable[[ProgressStats], int]):
        self.target = target
        self.value_getter = value_getter

    def check(self, stats: ProgressStats) -> bool:
        return self.value_getter(stats) >= self.target

    def get_progress(self, stats: ProgressStats) -> Tuple[int, int]:
        return min(self.target, self.value_getter(stats)), self.target

class StreakChecker(ThresholdChecker):
    """
    Проверка серии.

    Используется лучшая серия за всю историю журнала, а не текущая: значок,
    однажды показанный, не пропадает после обрыва серии.
    """

    def __init__(self, target_streak: int):
        super().__init__(target_streak, lambda s: max(s.streak, s.best_streak))

# ===== CATALOGS =====

THEMES: List[Theme] = [
    Theme('Matrix Green', '#00FF41', 0),
    Theme('Amber Alert', '#FFB000', 50),
    Theme('Plasma Blue', '#00D1FF', 100),
    Theme('Crimson Surge', '#FF3131', 250),
    Theme('Void Purple', '#BC13FE', 500),
]

DEFAULT_THEME_COLOR = THEMES[0].color

# ===== REGISTRY =====

class ProgressionEngine:
    """Реестр значков и тем; проверка без состояния"""

    def __init__(self, themes: Optional[List[Theme]] = None):
        self.themes: List[Theme] = list(themes or THEMES)
        self.badges: Dict[str, BadgeDefinition] = {}
        self.checkers: Dict[str, BadgeChecker] = {}
        self._load_default_badges()

    def register_badge(self, definition: BadgeDefinition, checker: BadgeChecker) -> None:
        """Зарегистрировать значок"""
        self.badges[definition.badge_id] = definition
        self.checkers[definition.badge_id] = checker
        logger.debug(f"Registered badge: {definition.badge_id}")

    def _load_default_badges(self) -> None:
        """Загрузка значков по умолчанию"""
        self.register_badge(
            BadgeDefinition('starter', 'Engine Start', 'Earn your first 10 points', '⚡'),
            ThresholdChecker(10, lambda s: s.points)
        )
        self.register_badge(
            BadgeDefinition('consistent', 'Steady State', 'Maintain a 3-day streak', '📈'),
            StreakChecker(3)
        )
        self.register_badge(
            BadgeDefinition('focused', 'Deep Diver', 'Complete 10 timer sessions', '⏱️'),
            ThresholdChecker(10, lambda s: s.analytics.timer_sessions)
        )
        self.register_badge(
            BadgeDefinition('planner', 'Strategist', 'Create 5 If-Then plans', '💡'),
            ThresholdChecker(5, lambda s: s.analytics.if_then_created)
        )
        self.register_badge(
            BadgeDefinition('master', 'Momentum Master', 'Earn 500 points', '🏆'),
            ThresholdChecker(500, lambda s: s.points)
        )

    # ===== BADGES =====

    def evaluate_badges(self, stats: ProgressStats) -> List[BadgeStatus]:
        """Проверить все значки в порядке каталога"""
        statuses = []
        for badge_id, definition in self.badges.items():
            checker = self.checkers[badge_id]
            progress, target = checker.get_progress(stats)
            statuses.append(BadgeStatus(definition, checker.check(stats), progress, target))
        return statuses

    def is_badge_unlocked(self, badge_id: str, stats: ProgressStats) -> bool:
        checker = self.checkers.get(badge_id)
        return checker is not None and checker.check(stats)

    # ===== THEMES =====

    def get_theme(self, color: str) -> Optional[Theme]:
        return next((t for t in self.themes if t.color.lower() == color.lower()), None)

    def evaluate_themes(self, points: int) -> List[Tuple[Theme, bool]]:
        return [(theme, theme.is_unlocked(points)) for theme in self.themes]

    def unlocked_themes(self, points: int) -> List[Theme]:
        return [theme for theme in self.themes if theme.is_unlocked(points)]

    def can_select_theme(self, color: str, points: int) -> bool:
        theme = self.get_theme(color)
        return theme is not None and theme.is_unlocked(points)
