from datetime import datetime, date, timedelta
from typing import Callable, List

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

Clock = Callable[[], datetime]

def system_clock(tz) -> Clock:
    def now() -> datetime:
        return datetime.now(tz)
    return now

def to_epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)

def day_of_timestamp(timestamp_ms: int, tz) -> date:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz).date()

def day_key(day: date) -> str:
    return day.isoformat()

def parse_day(day_str: str) -> date:
    return date.fromisoformat(day_str)

def weekday_label(day: date) -> str:
    return WEEKDAY_LABELS[day.weekday()]

def last_n_days(today: date, n: int) -> List[date]:
    # oldest first, today last
    return [today - timedelta(days=offset) for offset in range(n - 1, -1, -1)]