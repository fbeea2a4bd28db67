#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Momentum Engine v1.0 - Engine
Объект-контекст, владеющий всеми репозиториями движка

Версия: 1.0.0
Дата: 2026-10-19
"""

import logging
import random
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from momentum_engine.config import EngineConfig
from momentum_engine.core.achievements import (
    DEFAULT_THEME_COLOR, BadgeStatus, ProgressionEngine, ProgressStats, Theme
)
from momentum_engine.core.database import JsonFileStore, KeyValueStore, PersistenceError
from momentum_engine.core.models import (
    FOCUS_SESSION_TEXT, SPARK_TASKS, ActivityEntry, DaySummary, Habit, IfThenPlan,
    MiniGoal, ValidationError, WOOPPlan
)
from momentum_engine.core.repository import persist_all
from momentum_engine.services import data_export, metrics
from momentum_engine.services.activity_log import ActivityLog
from momentum_engine.services.habits import HabitHistory, HabitSet
from momentum_engine.services.notes import FutureCostNotes
from momentum_engine.services.planning import GoalSet, IfThenPlanSet, VisionSlot, WoopSlot
from momentum_engine.services.progress_state import (
    AnalyticsCounters, LastResetMarker, PointsCounter, ThemeSlot,
    audio_shield_flag, reminders_flag
)
from momentum_engine.services.rollover import RolloverController
from momentum_engine.services.timer_service import FocusTimer
from momentum_engine.utils.datetime_utils import Clock, day_key, parse_day, system_clock

logger = logging.getLogger(__name__)

class MomentumEngine:
    """
    Движок состояния продуктивности.

    Обеспечивает:
    - Загрузку всех репозиториев из хранилища (или значения по умолчанию)
    - Точки входа для всех мутаций
    - Производные метрики и проверку разблокировок, пересчитываемые при чтении
    - Ежедневный сброс привычек при запуске и по расписанию
    - Экспорт и импорт полного состояния
    """

    def __init__(self, store: KeyValueStore, config: Optional[EngineConfig] = None,
                 clock: Optional[Clock] = None, rng: Optional[random.Random] = None):
        self.config = config or EngineConfig()
        self.tz = self.config.tz
        self.clock: Clock = clock or system_clock(self.tz)
        self.rng = rng or random.Random()
        self.store = store
        self.progression = ProgressionEngine()

        # Репозитории
        self.activity_log = ActivityLog(store, self.clock)
        self.habits = HabitSet(store)
        self.habit_history = HabitHistory(store)
        self.goals = GoalSet(store)
        self.plans = IfThenPlanSet(store)
        self.woop = WoopSlot(store)
        self.vision = VisionSlot(store)
        self.future_cost_notes = FutureCostNotes(store)
        self.points = PointsCounter(store)
        self.analytics = AnalyticsCounters(store)
        self.theme = ThemeSlot(store, DEFAULT_THEME_COLOR)
        self.reminders = reminders_flag(store)
        self.audio_shield = audio_shield_flag(store)
        self.last_reset = LastResetMarker(store)

        self.rollover = RolloverController(
            self.habits, self.last_reset, self.clock,
            interval_seconds=self.config.schedule.rollover_interval_seconds,
            tz=self.tz
        )
        self.timer = FocusTimer(
            self.clock, self.complete_focus_session,
            duration_seconds=self.config.schedule.focus_duration_seconds
        )

        logger.info(f"✅ Движок инициализирован: {len(self.activity_log)} записей, "
                    f"{len(self.habits.habits)} привычек")

    @classmethod
    def open(cls, config: Optional[EngineConfig] = None, clock: Optional[Clock] = None) -> "MomentumEngine":
        """Движок поверх файлового хранилища из конфигурации"""
        config = config or EngineConfig.from_env()
        config.ensure_directories()
        store = JsonFileStore(config.storage.store_path)
        return cls(store, config=config, clock=clock)

    # ===== ЖИЗНЕННЫЙ ЦИКЛ =====

    def start(self) -> None:
        """Сброс дня при запуске и фоновая проверка"""
        self.rollover.start()

    def close(self) -> None:
        self.rollover.stop()
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def repositories(self) -> List[Any]:
        return [
            self.activity_log, self.habits, self.habit_history, self.goals, self.plans,
            self.woop, self.vision, self.future_cost_notes, self.points, self.analytics,
            self.theme, self.reminders, self.audio_shield, self.last_reset,
        ]

    def flush(self) -> int:
        """Повторная запись репозиториев, не сохраненных из-за ошибки хранилища"""
        dirty = [repo for repo in self.repositories if repo.dirty]
        for repo in dirty:
            repo.persist()
        if dirty:
            logger.info(f"💾 Повторно сохранено слотов: {len(dirty)}")
        return len(dirty)

    def clear_all(self) -> None:
        """Очистить все репозитории"""
        for repo in self.repositories:
            if hasattr(repo, "clear"):
                repo.clear()
        logger.warning("🧹 Все репозитории очищены")

    def health_check(self) -> Dict[str, Any]:
        """Состояние движка"""
        dirty = [repo.slot for repo in self.repositories if repo.dirty]
        return {
            "status": "warning" if dirty else "healthy",
            "dirty_slots": dirty,
            "store": self.store.stats.to_dict(),
            "rollover_running": self.rollover.is_running,
            "last_reset": self.last_reset.day,
            "timer": self.timer.get_timer_info()
        }

    # ===== ВРЕМЯ =====

    def now(self) -> datetime:
        return self.clock()

    def today(self) -> date:
        return self.clock().astimezone(self.tz).date()

    def today_key(self) -> str:
        return day_key(self.today())

    @staticmethod
    def _parse_day(value: str) -> date:
        try:
            return parse_day(value)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Некорректный день {value!r}, ожидается YYYY-MM-DD") from e

    # ===== ЖУРНАЛ АКТИВНОСТИ =====

    def log_activity(self, text: str) -> ActivityEntry:
        return self.activity_log.append(text)

    def remove_entry(self, entry_id: str) -> bool:
        return self.activity_log.remove(entry_id)

    def list_entries(self) -> List[ActivityEntry]:
        return self.activity_log.list_all()

    # ===== ПРИВЫЧКИ =====

    def list_habits(self) -> List[Habit]:
        return self.habits.list_all()

    def toggle_habit(self, habit_id: str) -> Optional[Habit]:
        """
        Переключить привычку.

        При переходе в Completed увеличивает habitsCompleted и добавляет
        название в историю дня. Обратный переход ничего не откатывает.
        """
        with self.habits.lock:
            habit = self.habits.toggle(habit_id, save=False)
            if habit is None:
                return None

            touched = [self.habits]
            if habit.completed:
                self.analytics.increment("habits_completed", save=False)
                touched.append(self.analytics)
                if self.habit_history.record(self.today_key(), habit.label, save=False):
                    touched.append(self.habit_history)
            persist_all(touched)
            return habit

    def rename_habit(self, habit_id: str, label: str) -> Optional[Habit]:
        return self.habits.rename(habit_id, label)

    def check_rollover(self) -> bool:
        return self.rollover.check()

    # ===== ЦЕЛИ И ПЛАНЫ =====

    def add_goal(self, text: str, deadline: str = "") -> MiniGoal:
        goal = self.goals.add(text, deadline, save=False)
        self.analytics.increment("goals_created", save=False)
        persist_all([self.goals, self.analytics])
        return goal

    def toggle_goal(self, goal_id: str) -> Optional[MiniGoal]:
        return self.goals.toggle(goal_id)

    def remove_goal(self, goal_id: str) -> bool:
        return self.goals.remove(goal_id)

    def add_plan(self, trigger: str, action: str) -> IfThenPlan:
        plan = self.plans.add(trigger, action, save=False)
        self.analytics.increment("if_then_created", save=False)
        persist_all([self.plans, self.analytics])
        return plan

    def apply_preset(self, index: int) -> IfThenPlan:
        plan = self.plans.apply_preset(index, save=False)
        self.analytics.increment("if_then_created", save=False)
        persist_all([self.plans, self.analytics])
        return plan

    def remove_plan(self, plan_id: str) -> bool:
        return self.plans.remove(plan_id)

    def update_woop(self, **fields: str) -> WOOPPlan:
        return self.woop.update(**fields)

    def set_vision(self, text: str) -> str:
        return self.vision.set(text)

    def set_future_cost_note(self, text: str, day: Optional[str] = None) -> Optional[str]:
        key = self.today_key() if day is None else day_key(self._parse_day(day))
        return self.future_cost_notes.set_note(key, text)

    # ===== ФОКУС-СЕССИИ =====

    def complete_focus_session(self) -> ActivityEntry:
        """Завершение фокус-сессии: +1 очко, +1 сессия, запись в журнал"""
        self.points.add(1, save=False)
        self.analytics.increment("timer_sessions", save=False)
        entry = self.activity_log.append(FOCUS_SESSION_TEXT, save=False)
        persist_all([self.points, self.analytics, self.activity_log])
        return entry

    def spark_task(self) -> str:
        return self.rng.choice(SPARK_TASKS)

    # ===== НАСТРОЙКИ =====

    def set_reminders(self, enabled: bool) -> bool:
        return self.reminders.set(enabled)

    def set_audio_shield(self, enabled: bool) -> bool:
        return self.audio_shield.set(enabled)

    def select_theme(self, color: str) -> bool:
        """Выбор темы; закрытая или неизвестная тема не меняет состояние"""
        theme = self.progression.get_theme(color)
        if theme is None or not theme.is_unlocked(self.points.value):
            logger.debug(f"🔒 Тема {color} недоступна")
            return False

        self.theme.replace(theme.color)
        return True

    # ===== МЕТРИКИ =====

    def streak(self) -> int:
        return metrics.streak(self.activity_log.entries, self.today(), self.tz)

    def longest_streak(self) -> int:
        return metrics.longest_streak(self.activity_log.entries, self.tz)

    def activity_map(self) -> Dict[str, int]:
        return metrics.activity_map(self.activity_log.entries, self.tz)

    def velocity_series(self, window: int = metrics.VELOCITY_WINDOW) -> List[Tuple[str, int]]:
        return metrics.velocity_series(self.activity_log.entries, self.today(), self.tz, window)

    def heatmap(self, window: int = metrics.HEATMAP_WINDOW) -> List[metrics.HeatCell]:
        return metrics.heatmap(self.activity_log.entries, self.today(), self.tz, window)

    def average_per_active_day(self) -> float:
        return metrics.average_per_active_day(self.activity_log.entries, self.tz)

    def peak_day(self) -> Tuple[Optional[str], int]:
        return metrics.peak_day(self.activity_log.entries, self.tz)

    def day_summary(self, day: Union[str, date]) -> DaySummary:
        """Записи, привычки и заметка за день"""
        if isinstance(day, str):
            day = self._parse_day(day)
        key = day_key(day)
        return DaySummary(
            day=day,
            entries=self.activity_log.entries_on(day, self.tz),
            habits=self.habit_history.labels_on(key),
            future_cost_note=self.future_cost_notes.get_note(key)
        )

    # ===== ПРОГРЕСС =====

    def progress_stats(self) -> ProgressStats:
        return ProgressStats(
            points=self.points.value,
            streak=self.streak(),
            best_streak=self.longest_streak(),
            analytics=self.analytics.data
        )

    def evaluate_badges(self) -> List[BadgeStatus]:
        return self.progression.evaluate_badges(self.progress_stats())

    def evaluate_themes(self) -> List[Tuple[Theme, bool]]:
        return self.progression.evaluate_themes(self.points.value)

    # ===== ЭКСПОРТ / ИМПОРТ =====

    def export(self) -> Dict[str, Any]:
        return data_export.build_snapshot(self, self.now())

    def import_snapshot(self, document: Union[str, bytes, Mapping[str, Any]]) -> List[str]:
        return data_export.import_snapshot(self, document)

    def export_to_file(self, export_dir: Optional[Path] = None) -> Path:
        now = self.now()
        return data_export.write_snapshot_file(
            data_export.build_snapshot(self, now),
            export_dir or self.config.storage.export_dir,
            now,
            max_exports=self.config.storage.max_exports
        )

    def import_from_file(self, path: Path) -> List[str]:
        return self.import_snapshot(data_export.read_snapshot_file(path))

    def export_entries_csv(self, path: Optional[Path] = None) -> Path:
        path = path or self.config.storage.export_dir / f"momentum_entries_{self.today_key()}.csv"
        return data_export.export_entries_csv(self.activity_log.list_all(), path, self.tz)

__all__ = ['MomentumEngine', 'PersistenceError']
