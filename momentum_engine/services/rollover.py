# services/rollover.py

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from momentum_engine.core.database import PersistenceError
from momentum_engine.services.habits import HabitSet
from momentum_engine.services.progress_state import LastResetMarker
from momentum_engine.utils.datetime_utils import Clock, day_key

logger = logging.getLogger(__name__)

JOB_ID = 'daily_rollover'

class RolloverController:
    """
    Ежедневный сброс отметок привычек.

    Сравнивает сохраненный маркер последнего сброса с текущим днем; при
    расхождении сбрасывает все привычки и только потом сохраняет маркер.
    Пропуск нескольких дней схлопывается в один сброс.
    """

    def __init__(self, habits: HabitSet, marker: LastResetMarker, clock: Clock,
                 interval_seconds: int = 60, tz=None):
        self.habits = habits
        self.marker = marker
        self.clock = clock
        self.tz = tz
        self.interval_seconds = interval_seconds
        self.scheduler: Optional[BackgroundScheduler] = None
        self._owns_scheduler = False
        self.reset_count = 0

    def check(self) -> bool:
        """Выполнить сброс, если сегодня он еще не выполнялся"""
        with self.habits.lock:
            now = self.clock()
            today = day_key((now.astimezone(self.tz) if self.tz else now).date())
            if self.marker.day == today:
                return False

            logger.info(f"🌅 Новый день {today} (последний сброс: {self.marker.day}), сбрасываем привычки")
            self.habits.reset_all()
            self.marker.mark(today)
            self.reset_count += 1
            return True

    def _scheduled_check(self) -> None:
        """Фоновая проверка; ошибка записи не должна останавливать планировщик"""
        try:
            self.check()
        except PersistenceError as e:
            logger.error(f"❌ Ошибка сохранения при сбросе дня: {e}")

    def start(self, scheduler: Optional[BackgroundScheduler] = None) -> None:
        """Проверка при запуске и запуск периодической проверки"""
        self.check()

        if self.scheduler is not None:
            return

        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler or BackgroundScheduler()
        self.scheduler.add_job(
            self._scheduled_check,
            IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info(f"⏰ Проверка смены дня запущена (каждые {self.interval_seconds} с)")

    def stop(self) -> None:
        if self.scheduler is None:
            return

        if self.scheduler.get_job(JOB_ID):
            self.scheduler.remove_job(JOB_ID)
        if self._owns_scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self.scheduler = None
        logger.info("🛑 Проверка смены дня остановлена")

    @property
    def is_running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running
