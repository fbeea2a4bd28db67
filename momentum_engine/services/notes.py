# services/notes.py

import logging
from typing import Any, Dict, Optional

from momentum_engine.core.database import KeyValueStore, StorageSlot
from momentum_engine.core.repository import JsonSlotRepository

logger = logging.getLogger(__name__)

class FutureCostNotes(JsonSlotRepository):
    """Заметки «цена бездействия»: не больше одной на день, последняя запись побеждает"""

    slot = StorageSlot.FUTURE_COST_NOTES

    def __init__(self, store: KeyValueStore):
        self.notes: Dict[str, str] = {}
        super().__init__(store)

    def reset_default(self) -> None:
        self.notes = {}

    def to_json(self) -> Any:
        return self.notes

    def from_json(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise TypeError("futureCostNotes должен быть объектом")
        self.notes = {str(day): str(text) for day, text in data.items()}

    def set_note(self, day: str, text: str) -> Optional[str]:
        """Записать заметку дня; пустой текст удаляет заметку"""
        if text and text.strip():
            self.notes[day] = text
        elif day in self.notes:
            del self.notes[day]
        else:
            return None

        self.persist()
        return self.notes.get(day)

    def get_note(self, day: str) -> Optional[str]:
        return self.notes.get(day)

    def replace(self, value: Dict[str, str]) -> None:
        self.notes = dict(value)
        self.persist()

    def clear(self) -> None:
        self.notes = {}
        self.persist()
