"""
Таймер фокус-сессии
"""

import pytest

from momentum_engine.services.timer_service import FocusTimer, TimerState, format_time


@pytest.fixture
def completions():
    return []


@pytest.fixture
def timer(clock, completions):
    return FocusTimer(clock, lambda: completions.append(clock()), duration_seconds=300)


class TestFocusTimer:

    def test_counts_down_while_running(self, timer, clock):
        assert timer.start() is True
        clock.advance(seconds=90)
        assert timer.remaining_seconds() == 210
        assert timer.is_active()

    def test_start_twice_is_noop(self, timer):
        timer.start()
        assert timer.start() is False

    def test_pause_freezes_remaining(self, timer, clock):
        timer.start()
        clock.advance(seconds=100)
        timer.pause()
        clock.advance(seconds=500)

        assert timer.state == TimerState.PAUSED
        assert timer.remaining_seconds() == 200
        assert timer.poll() is False

    def test_resume_after_pause(self, timer, clock):
        timer.start()
        clock.advance(seconds=100)
        assert timer.toggle() is False
        assert timer.toggle() is True
        clock.advance(seconds=150)
        assert timer.remaining_seconds() == 50

    def test_expiry_fires_once(self, timer, clock, completions):
        timer.start()
        clock.advance(seconds=299)
        assert timer.poll() is False

        clock.advance(seconds=5)
        assert timer.poll() is True
        assert timer.poll() is False
        assert len(completions) == 1
        assert timer.state == TimerState.IDLE
        assert timer.remaining_seconds() == 300

    def test_reset(self, timer, clock):
        timer.start()
        clock.advance(seconds=30)
        timer.reset()
        assert timer.get_timer_info() == {"state": "idle", "remaining_seconds": 300, "duration_seconds": 300}


class TestEngineTimer:

    def test_expired_session_awards_point(self, engine, clock):
        engine.timer.start()
        clock.advance(minutes=5)
        assert engine.timer.poll() is True

        assert engine.points.value == 1
        assert engine.analytics.data.timer_sessions == 1
        assert len(engine.list_entries()) == 1


@pytest.mark.parametrize("seconds, expected", [(300, "5:00"), (65, "1:05"), (0, "0:00"), (None, "0:00")])
def test_format_time(seconds, expected):
    assert format_time(seconds) == expected
