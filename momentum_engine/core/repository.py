"""
Базовый репозиторий: коллекция в памяти, привязанная к одному слоту хранилища
"""

import json
import logging
from typing import Any, Iterable, List

from momentum_engine.core.database import KeyValueStore, PersistenceError

logger = logging.getLogger(__name__)

class SlotRepository:
    """
    Репозиторий одного слота.

    Каждая мутация завершается полной записью сериализованного состояния
    (без частичных/дельта записей). Если хранилище отказывает, состояние в
    памяти сохраняется, репозиторий помечается как dirty, а PersistenceError
    пробрасывается вызывающему коду.
    """

    slot: str = ""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.dirty = False
        self.load()

    # ===== ПЕРЕОПРЕДЕЛЯЕТСЯ В НАСЛЕДНИКАХ =====

    def reset_default(self) -> None:
        raise NotImplementedError

    def serialize(self) -> str:
        raise NotImplementedError

    def deserialize(self, raw: str) -> None:
        raise NotImplementedError

    # ===== ЗАГРУЗКА И СОХРАНЕНИЕ =====

    def load(self) -> None:
        """Загрузка из хранилища; отсутствующий или поврежденный слот дает значение по умолчанию"""
        raw = self.store.get(self.slot)
        if raw is None:
            self.reset_default()
            return

        try:
            self.deserialize(raw)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning(f"⚠️ Слот {self.slot} поврежден ({e}), используется значение по умолчанию")
            self.reset_default()

    def persist(self) -> None:
        """Полная запись состояния в слот"""
        try:
            self.store.set(self.slot, self.serialize())
        except PersistenceError:
            self.dirty = True
            raise
        self.dirty = False

    def changed(self, save: bool = True) -> None:
        """Завершить мутацию: записать сразу или отложить запись до persist_all()"""
        if save:
            self.persist()
        else:
            self.dirty = True

    def replace(self, value: Any) -> None:
        """Полная замена содержимого (импорт)"""
        raise NotImplementedError

class JsonSlotRepository(SlotRepository):
    """Репозиторий, чье состояние хранится как JSON"""

    def to_json(self) -> Any:
        raise NotImplementedError

    def from_json(self, data: Any) -> None:
        raise NotImplementedError

    def serialize(self) -> str:
        return json.dumps(self.to_json(), ensure_ascii=False)

    def deserialize(self, raw: str) -> None:
        self.from_json(json.loads(raw))

def persist_all(repositories: Iterable[SlotRepository]) -> None:
    """
    Записать несколько репозиториев одной операции.

    Каждый репозиторий пишется даже после отказа предыдущего; неудачные слоты
    остаются dirty, и в конце выбрасывается одна PersistenceError со всеми слотами.
    """
    failed: List[str] = []
    for repo in repositories:
        try:
            repo.persist()
        except PersistenceError as e:
            failed.append(repo.slot)
            logger.error(f"❌ Слот {repo.slot} не сохранен: {e}")

    if failed:
        raise PersistenceError(f"Не удалось сохранить слоты: {', '.join(failed)}")
