# services/activity_log.py

import logging
from datetime import date
from typing import Any, List, Optional

from momentum_engine.core.database import KeyValueStore, StorageSlot
from momentum_engine.core.models import ActivityEntry, ValidationError
from momentum_engine.core.repository import JsonSlotRepository
from momentum_engine.utils.datetime_utils import Clock, day_of_timestamp, to_epoch_ms

logger = logging.getLogger(__name__)

class ActivityLog(JsonSlotRepository):
    """Журнал активности; новые записи первыми"""

    slot = StorageSlot.ENTRIES

    def __init__(self, store: KeyValueStore, clock: Clock):
        self.clock = clock
        self.entries: List[ActivityEntry] = []
        super().__init__(store)

    def reset_default(self) -> None:
        self.entries = []

    def to_json(self) -> Any:
        return [e.to_dict() for e in self.entries]

    def from_json(self, data: Any) -> None:
        if not isinstance(data, list):
            raise TypeError("entries должен быть списком")
        self.entries = [ActivityEntry.from_dict(item) for item in data]

    def append(self, text: str, save: bool = True) -> ActivityEntry:
        """Добавить запись; ValidationError для пустого текста"""
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Текст записи не может быть пустым")

        entry = ActivityEntry.create(text, to_epoch_ms(self.clock()))
        self.entries.insert(0, entry)
        logger.debug(f"📝 Добавлена запись {entry.id}")
        self.changed(save)
        return entry

    def remove(self, entry_id: str) -> bool:
        """Удалить запись; отсутствующий id не считается ошибкой"""
        remaining = [e for e in self.entries if e.id != entry_id]
        if len(remaining) == len(self.entries):
            return False

        self.entries = remaining
        logger.debug(f"🗑️ Удалена запись {entry_id}")
        self.persist()
        return True

    def get(self, entry_id: str) -> Optional[ActivityEntry]:
        return next((e for e in self.entries if e.id == entry_id), None)

    def list_all(self) -> List[ActivityEntry]:
        return list(self.entries)

    def entries_on(self, day: date, tz) -> List[ActivityEntry]:
        """Записи за календарный день"""
        return [e for e in self.entries if day_of_timestamp(e.timestamp, tz) == day]

    def replace(self, value: List[ActivityEntry]) -> None:
        # Импорт сохраняет порядок документа
        self.entries = list(value)
        self.persist()

    def clear(self) -> None:
        self.entries = []
        self.persist()

    def __len__(self) -> int:
        return len(self.entries)
