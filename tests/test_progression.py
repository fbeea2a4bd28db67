"""
Значки и темы: чистая проверка условий разблокировки
"""

import random

import pytest

from momentum_engine.core.achievements import (
    DEFAULT_THEME_COLOR, THEMES, ProgressionEngine, ProgressStats
)
from momentum_engine.core.models import AnalyticsData


@pytest.fixture
def progression():
    return ProgressionEngine()


def unlocked_ids(progression, stats):
    return {s.badge.badge_id for s in progression.evaluate_badges(stats) if s.unlocked}


class TestBadges:

    def test_nothing_unlocked_at_start(self, progression):
        assert unlocked_ids(progression, ProgressStats()) == set()

    def test_thresholds(self, progression):
        stats = ProgressStats(
            points=10,
            streak=0,
            best_streak=3,
            analytics=AnalyticsData(timer_sessions=10, if_then_created=5)
        )
        assert unlocked_ids(progression, stats) == {"starter", "consistent", "focused", "planner"}

    def test_master_at_500(self, progression):
        assert "master" not in unlocked_ids(progression, ProgressStats(points=499))
        assert "master" in unlocked_ids(progression, ProgressStats(points=500))

    def test_streak_badge_kept_after_streak_breaks(self, progression):
        stats = ProgressStats(streak=0, best_streak=4)
        assert progression.is_badge_unlocked("consistent", stats)

    def test_progress_is_capped_at_target(self, progression):
        status = next(s for s in progression.evaluate_badges(ProgressStats(points=42))
                      if s.badge.badge_id == "starter")
        assert (status.progress, status.target) == (10, 10)
        assert status.progress_percentage == 100.0

    def test_evaluation_is_pure_and_order_independent(self, progression):
        stats = ProgressStats(points=120, streak=2, best_streak=2,
                              analytics=AnalyticsData(timer_sessions=3, if_then_created=7))
        first = progression.evaluate_badges(stats)
        second = progression.evaluate_badges(stats)
        assert first == second

        badge_ids = list(progression.checkers)
        random.Random(7).shuffle(badge_ids)
        shuffled = {badge_id: progression.is_badge_unlocked(badge_id, stats) for badge_id in badge_ids}
        assert shuffled == {s.badge.badge_id: s.unlocked for s in first}


class TestThemes:

    def test_default_theme_always_unlocked(self, progression):
        assert progression.can_select_theme(DEFAULT_THEME_COLOR, 0)

    @pytest.mark.parametrize("points, expected", [(0, 1), (50, 2), (249, 3), (250, 4), (1000, 5)])
    def test_unlock_by_points(self, progression, points, expected):
        assert len(progression.unlocked_themes(points)) == expected

    def test_theme_evaluation_is_pure(self, progression):
        assert progression.evaluate_themes(100) == progression.evaluate_themes(100)

    def test_lookup_is_case_insensitive(self, progression):
        assert progression.get_theme("#ffb000") == THEMES[1]
        assert progression.get_theme("#123456") is None


class TestEngineSelection:

    def test_locked_theme_is_noop(self, engine):
        assert engine.select_theme("#BC13FE") is False
        assert engine.theme.color == DEFAULT_THEME_COLOR

    def test_unknown_theme_is_noop(self, engine):
        assert engine.select_theme("#000000") is False
        assert engine.theme.color == DEFAULT_THEME_COLOR

    def test_unlocked_theme_selected(self, engine):
        engine.points.add(60)
        assert engine.select_theme("#ffb000") is True
        assert engine.theme.color == "#FFB000"

    def test_engine_badges_follow_state(self, engine):
        for _ in range(10):
            engine.complete_focus_session()
        statuses = {s.badge.badge_id: s.unlocked for s in engine.evaluate_badges()}
        assert statuses["starter"] is True
        assert statuses["focused"] is True
        assert statuses["consistent"] is False
