# services/data_export.py

"""
Экспорт и импорт полного состояния движка.

Импорт выполняет частичное слияние: каждое распознанное поле, присутствующее в
документе и не пустое, заменяет соответствующий репозиторий целиком;
отсутствующие поля оставляют состояние нетронутым. Разбор и проверка формы
всего документа выполняются до любой мутации.
"""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any, Dict, List, Mapping, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from momentum_engine.core.database import PersistenceError
from momentum_engine.core.models import (
    ActivityEntry, AnalyticsData, Habit, IfThenPlan, MiniGoal, MomentumError, WOOPPlan
)
from momentum_engine.utils.datetime_utils import day_key, day_of_timestamp

logger = logging.getLogger(__name__)

EXPORT_FORMAT_VERSION = "1.0"
SNAPSHOT_PREFIX = "momentum_engine_backup_"

class FormatError(MomentumError):
    """Документ импорта не разбирается или поле имеет несовместимую форму"""
    pass

# ===== СХЕМА ДОКУМЕНТА =====

def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("строка не может быть пустой")
    return value

Text = Annotated[str, AfterValidator(_not_blank)]
ItemId = Annotated[str, Field(min_length=1)]

class _Item(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True, extra='ignore')

class EntryModel(_Item):
    id: ItemId
    text: Text
    timestamp: int

class HabitModel(_Item):
    id: ItemId
    label: Text
    completed: bool = False

class GoalModel(_Item):
    id: ItemId
    text: Text
    deadline: str = ""
    completed: bool = False

class PlanModel(_Item):
    id: ItemId
    trigger: Text
    action: Text

class WoopModel(_Item):
    wish: str = ""
    outcome: str = ""
    obstacle: str = ""
    plan: str = ""

class AnalyticsModel(BaseModel):
    """Счетчики аналитики; все четыре обязательны"""
    model_config = ConfigDict(extra='ignore')

    timerSessions: int = Field(ge=0)
    habitsCompleted: int = Field(ge=0)
    goalsCreated: int = Field(ge=0)
    ifThenCreated: int = Field(ge=0)

class SnapshotDocument(BaseModel):
    """Документ экспорта/импорта; неизвестные ключи игнорируются"""
    model_config = ConfigDict(extra='ignore')

    entries: Optional[List[EntryModel]] = None
    habits: Optional[List[HabitModel]] = None
    vision: Optional[str] = None
    miniGoals: Optional[List[GoalModel]] = None
    ifThenPlans: Optional[List[PlanModel]] = None
    woop: Optional[WoopModel] = None
    points: Optional[int] = Field(None, ge=0)
    activeTheme: Optional[str] = None
    habitHistory: Optional[Dict[str, List[str]]] = None
    futureCostNotes: Optional[Dict[str, str]] = None
    analytics: Optional[AnalyticsModel] = None
    timestamp: Optional[str] = None

# Порядок применения полей при импорте
IMPORT_FIELDS = (
    "entries", "habits", "vision", "miniGoals", "ifThenPlans", "woop",
    "points", "activeTheme", "habitHistory", "futureCostNotes", "analytics",
)

# ===== ЭКСПОРТ =====

def build_snapshot(engine, exported_at: datetime) -> Dict[str, Any]:
    """Полный снимок состояния движка"""
    return {
        "exportInfo": {
            "format": "json",
            "version": EXPORT_FORMAT_VERSION,
            "exported_at": exported_at.isoformat()
        },
        "entries": [e.to_dict() for e in engine.activity_log.list_all()],
        "habits": [h.to_dict() for h in engine.habits.list_all()],
        "vision": engine.vision.text,
        "miniGoals": [g.to_dict() for g in engine.goals.list_all()],
        "ifThenPlans": [p.to_dict() for p in engine.plans.list_all()],
        "woop": engine.woop.woop.to_dict(),
        "points": engine.points.value,
        "activeTheme": engine.theme.color,
        "habitHistory": {day: list(labels) for day, labels in engine.habit_history.days.items()},
        "futureCostNotes": dict(engine.future_cost_notes.notes),
        "analytics": engine.analytics.data.to_dict(),
        "timestamp": exported_at.isoformat()
    }

# ===== ИМПОРТ =====

def parse_snapshot(document: Union[str, bytes, Mapping[str, Any]]) -> Dict[str, Any]:
    """Разбор документа; FormatError если это не JSON объект"""
    if isinstance(document, (str, bytes, bytearray)):
        try:
            data = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise FormatError(f"Документ не является корректным JSON: {e}") from e
    else:
        data = document

    if not isinstance(data, Mapping):
        raise FormatError("Документ должен быть JSON объектом")
    return dict(data)

def _check_unique_ids(name: str, items: Optional[List[Any]]) -> None:
    if not items:
        return
    ids = [item.id for item in items]
    if len(ids) != len(set(ids)):
        raise FormatError(f"{name}: повторяющиеся id")

def validate_snapshot(data: Dict[str, Any]) -> SnapshotDocument:
    """Проверка формы всех распознанных полей"""
    try:
        snapshot = SnapshotDocument.model_validate(data)
    except PydanticValidationError as e:
        raise FormatError(f"Несовместимая форма документа: {e.error_count()} ошибок\n{e}") from e

    _check_unique_ids("entries", snapshot.entries)
    _check_unique_ids("habits", snapshot.habits)
    _check_unique_ids("miniGoals", snapshot.miniGoals)
    _check_unique_ids("ifThenPlans", snapshot.ifThenPlans)
    return snapshot

def _converted(name: str, snapshot: SnapshotDocument) -> Any:
    """Значение поля документа в виде объектов модели движка"""
    value = getattr(snapshot, name)
    if name == "entries":
        # Канонический порядок журнала: новые первыми
        entries = [ActivityEntry(e.id, e.text, e.timestamp) for e in value]
        return sorted(entries, key=lambda e: e.timestamp, reverse=True)
    if name == "habits":
        return [Habit(h.id, h.label, h.completed) for h in value]
    if name == "miniGoals":
        return [MiniGoal(g.id, g.text, g.deadline, g.completed) for g in value]
    if name == "ifThenPlans":
        return [IfThenPlan(p.id, p.trigger, p.action) for p in value]
    if name == "woop":
        return WOOPPlan.from_dict(value.model_dump())
    if name == "analytics":
        return AnalyticsData.from_dict(value.model_dump())
    return value

def import_snapshot(engine, document: Union[str, bytes, Mapping[str, Any]]) -> List[str]:
    """
    Импорт снимка с частичным слиянием.

    Returns:
        Список примененных полей документа

    Raises:
        FormatError: документ не разобран или форма поля несовместима;
            в этом случае состояние не изменяется
        PersistenceError: состояние в памяти обновлено, но часть слотов не записана
    """
    data = parse_snapshot(document)
    snapshot = validate_snapshot(data)

    targets = {
        "entries": engine.activity_log,
        "habits": engine.habits,
        "vision": engine.vision,
        "miniGoals": engine.goals,
        "ifThenPlans": engine.plans,
        "woop": engine.woop,
        "points": engine.points,
        "activeTheme": engine.theme,
        "habitHistory": engine.habit_history,
        "futureCostNotes": engine.future_cost_notes,
        "analytics": engine.analytics,
    }

    applied = []
    failed = []
    for name in IMPORT_FIELDS:
        # Пустые и ложные значения (в том числе points == 0) не применяются
        if not data.get(name):
            continue

        try:
            targets[name].replace(_converted(name, snapshot))
        except PersistenceError as e:
            failed.append(name)
            logger.error(f"❌ Поле {name} импортировано, но не сохранено: {e}")
        applied.append(name)

    logger.info(f"📥 Импорт завершен, применены поля: {', '.join(applied) or '-'}")
    if failed:
        raise PersistenceError(f"Не удалось сохранить импортированные поля: {', '.join(failed)}")
    return applied

# ===== ФАЙЛЫ =====

def snapshot_filename(exported_at: datetime) -> str:
    return f"{SNAPSHOT_PREFIX}{exported_at.date().isoformat()}.json"

def write_snapshot_file(document: Dict[str, Any], export_dir: Path, exported_at: datetime,
                        max_exports: int = 10) -> Path:
    """Записать снимок в export_dir; старые снимки сверх max_exports удаляются"""
    filename = Path(export_dir) / snapshot_filename(exported_at)
    try:
        filename.parent.mkdir(parents=True, exist_ok=True)
        with open(filename, "w", encoding="utf-8") as f:
            json.dump(document, f, ensure_ascii=False, indent=2)
    except OSError as e:
        raise PersistenceError(f"Не удалось записать снимок {filename}: {e}") from e

    logger.info(f"📤 Снимок сохранен: {filename}")
    cleanup_old_snapshots(Path(export_dir), max_exports)
    return filename

def cleanup_old_snapshots(export_dir: Path, keep_count: int) -> int:
    """Удалить старые снимки; имя файла содержит дату, сортировка по имени хронологична"""
    snapshots = sorted(export_dir.glob(f"{SNAPSHOT_PREFIX}*.json"), reverse=True)
    deleted_count = 0
    for snapshot in snapshots[keep_count:]:
        try:
            snapshot.unlink()
            deleted_count += 1
            logger.info(f"🗑️ Удален старый снимок: {snapshot.name}")
        except OSError as e:
            logger.error(f"❌ Ошибка удаления снимка {snapshot}: {e}")
    return deleted_count

def read_snapshot_file(path: Path) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()

def export_entries_csv(entries: List[ActivityEntry], path: Path, tz) -> Path:
    """Журнал активности в CSV: id,text,timestamp,day"""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, ["id", "text", "timestamp", "day"])
            writer.writeheader()
            for entry in entries:
                row = entry.to_dict()
                row["day"] = day_key(day_of_timestamp(entry.timestamp, tz))
                writer.writerow(row)
    except OSError as e:
        raise PersistenceError(f"Не удалось записать CSV {path}: {e}") from e

    logger.info(f"📊 CSV экспорт подготовлен ({len(entries)} записей): {path}")
    return path
