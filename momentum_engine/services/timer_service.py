"""
Сервис таймера фокус-сессий
"""

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Any

from momentum_engine.utils.datetime_utils import Clock

logger = logging.getLogger(__name__)

class TimerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"

class FocusTimer:
    """Таймер фокус-сессии; по истечении вызывает on_complete ровно один раз"""

    def __init__(self, clock: Clock, on_complete: Callable[[], Any], duration_seconds: int = 300):
        self.clock = clock
        self.on_complete = on_complete
        self.duration_seconds = duration_seconds
        self.state = TimerState.IDLE
        self._remaining = float(duration_seconds)
        self._started_at = None

    def start(self) -> bool:
        """Запуск или продолжение после паузы"""
        if self.state == TimerState.RUNNING:
            return False

        self._started_at = self.clock()
        self.state = TimerState.RUNNING
        logger.info(f"⏰ Фокус-сессия запущена ({int(self._remaining)} с)")
        return True

    def pause(self) -> bool:
        if self.state != TimerState.RUNNING:
            return False

        self._remaining = self.remaining_seconds()
        self._started_at = None
        self.state = TimerState.PAUSED
        logger.info(f"⏸️ Фокус-сессия на паузе ({int(self._remaining)} с осталось)")
        return True

    def toggle(self) -> bool:
        """Старт/пауза; возвращает True если таймер теперь идет"""
        if self.state == TimerState.RUNNING:
            self.pause()
            return False
        self.start()
        return True

    def reset(self) -> None:
        self.state = TimerState.IDLE
        self._remaining = float(self.duration_seconds)
        self._started_at = None

    def remaining_seconds(self) -> float:
        if self.state != TimerState.RUNNING or self._started_at is None:
            return self._remaining
        elapsed = (self.clock() - self._started_at).total_seconds()
        return max(0.0, self._remaining - elapsed)

    def is_active(self) -> bool:
        return self.state == TimerState.RUNNING

    def poll(self) -> bool:
        """Проверить истечение; True если сессия завершилась именно сейчас"""
        if self.state != TimerState.RUNNING or self.remaining_seconds() > 0:
            return False

        self.reset()
        logger.info("✅ Фокус-сессия завершена")
        self.on_complete()
        return True

    def get_timer_info(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "remaining_seconds": int(self.remaining_seconds()),
            "duration_seconds": self.duration_seconds
        }

def format_time(seconds: Optional[float]) -> str:
    """M:SS"""
    total = int(seconds or 0)
    return f"{total // 60}:{total % 60:02d}"
