# services/metrics.py

"""
Производные метрики журнала активности.

Все функции чистые и пересчитываются при каждом запросе; кэша нет.
Календарные дни считаются во временной зоне tz и представлены как ISO строки.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Tuple

from momentum_engine.core.models import ActivityEntry
from momentum_engine.utils.datetime_utils import (
    day_key, day_of_timestamp, last_n_days, weekday_label
)

VELOCITY_WINDOW = 7
HEATMAP_WINDOW = 30

class HeatTier(Enum):
    """Интенсивность ячейки календаря"""
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

@dataclass(frozen=True)
class HeatCell:
    day: date
    count: int
    tier: HeatTier

def heat_tier(count: int) -> HeatTier:
    """0 -> none, 1-2 -> low, 3-5 -> medium, 6+ -> high"""
    if count <= 0:
        return HeatTier.NONE
    if count <= 2:
        return HeatTier.LOW
    if count <= 5:
        return HeatTier.MEDIUM
    return HeatTier.HIGH

def active_days(entries: Iterable[ActivityEntry], tz) -> Set[date]:
    return {day_of_timestamp(e.timestamp, tz) for e in entries}

def streak(entries: Iterable[ActivityEntry], today: date, tz) -> int:
    """Текущая серия с одним днем отсрочки: серия может заканчиваться вчера"""
    dates = active_days(entries, tz)
    yesterday = today - timedelta(days=1)

    if today in dates:
        current = today
    elif yesterday in dates:
        current = yesterday
    else:
        return 0

    count = 0
    while current in dates:
        count += 1
        current -= timedelta(days=1)
    return count

def longest_streak(entries: Iterable[ActivityEntry], tz) -> int:
    """Самая длинная серия подряд идущих активных дней"""
    dates = sorted(active_days(entries, tz))
    if not dates:
        return 0

    max_streak = 1
    current_streak = 1
    for i in range(1, len(dates)):
        if dates[i] == dates[i - 1] + timedelta(days=1):
            current_streak += 1
            max_streak = max(max_streak, current_streak)
        else:
            current_streak = 1
    return max_streak

def activity_map(entries: Iterable[ActivityEntry], tz) -> Dict[str, int]:
    """День -> количество записей, в хронологическом порядке"""
    counts = Counter(day_key(day_of_timestamp(e.timestamp, tz)) for e in entries)
    return {day: counts[day] for day in sorted(counts)}

def velocity_series(entries: Iterable[ActivityEntry], today: date, tz,
                    window: int = VELOCITY_WINDOW) -> List[Tuple[str, int]]:
    """Последние window дней от старых к новым: (короткий день недели, количество)"""
    counts = activity_map(entries, tz)
    return [(weekday_label(day), counts.get(day_key(day), 0)) for day in last_n_days(today, window)]

def heatmap(entries: Iterable[ActivityEntry], today: date, tz,
            window: int = HEATMAP_WINDOW) -> List[HeatCell]:
    counts = activity_map(entries, tz)
    cells = []
    for day in last_n_days(today, window):
        count = counts.get(day_key(day), 0)
        cells.append(HeatCell(day, count, heat_tier(count)))
    return cells

def average_per_active_day(entries: Iterable[ActivityEntry], tz) -> float:
    """Записей на активный день; 0 для пустого журнала"""
    counts = activity_map(entries, tz)
    if not counts:
        return 0.0
    return sum(counts.values()) / len(counts)

def peak_day(entries: Iterable[ActivityEntry], tz) -> Tuple[Optional[str], int]:
    """
    День с максимумом записей.

    При равенстве выигрывает самый ранний день (обход в хронологическом порядке).
    Для пустого журнала возвращает (None, 0).
    """
    best_day, best_count = None, 0
    for day, count in activity_map(entries, tz).items():
        if count > best_count:
            best_day, best_count = day, count
    return best_day, best_count
