"""
Экспорт и импорт снимков состояния
"""

import csv
import json

import pytest

from momentum_engine.core.database import PersistenceError
from momentum_engine.services.data_export import (
    FormatError, cleanup_old_snapshots, snapshot_filename
)


@pytest.fixture
def populated(engine, clock):
    engine.log_activity("Morning pages")
    clock.advance(hours=2)
    engine.log_activity("Gym")
    engine.toggle_habit(engine.list_habits()[0].id)
    engine.add_goal("Finish chapter 3", deadline="Sunday")
    engine.apply_preset(0)
    engine.update_woop(wish="Write a book", plan="Two pages a day")
    engine.set_vision("A calm, productive year")
    engine.set_future_cost_note("Another year without the book")
    engine.points.add(75)
    engine.select_theme("#FFB000")
    return engine


class TestExport:

    def test_document_keys(self, populated):
        document = populated.export()
        assert set(document) >= {
            "entries", "habits", "vision", "miniGoals", "ifThenPlans", "woop", "points",
            "activeTheme", "habitHistory", "futureCostNotes", "analytics", "timestamp", "exportInfo"
        }
        assert document["points"] == 75
        assert document["activeTheme"] == "#FFB000"
        assert document["analytics"] == {
            "timerSessions": 0, "habitsCompleted": 1, "goalsCreated": 1, "ifThenCreated": 1
        }

    def test_document_is_json_serializable(self, populated):
        json.dumps(populated.export())


class TestImport:

    def test_round_trip_after_clear(self, populated):
        before = populated.export()
        populated.clear_all()
        assert populated.list_entries() == []

        populated.import_snapshot(json.dumps(before))
        after = populated.export()
        for key in ("entries", "habits", "vision", "miniGoals", "ifThenPlans", "woop", "points",
                    "activeTheme", "habitHistory", "futureCostNotes", "analytics"):
            assert after[key] == before[key], key

    def test_partial_import_only_points(self, populated):
        before = populated.export()
        applied = populated.import_snapshot({"points": 999})

        after = populated.export()
        assert applied == ["points"]
        assert after["points"] == 999
        for key in before:
            if key not in ("points", "timestamp", "exportInfo"):
                assert after[key] == before[key], key

    def test_falsy_fields_are_ignored(self, populated):
        applied = populated.import_snapshot({"points": 0, "entries": [], "vision": ""})
        assert applied == []
        assert populated.points.value == 75
        assert len(populated.list_entries()) == 2

    def test_unknown_keys_ignored(self, engine):
        assert engine.import_snapshot({"somethingElse": [1, 2, 3]}) == []

    def test_entries_sorted_newest_first(self, engine):
        engine.import_snapshot({"entries": [
            {"id": "a", "text": "older", "timestamp": 1000},
            {"id": "b", "text": "newer", "timestamp": 2000},
        ]})
        assert [e.id for e in engine.list_entries()] == ["b", "a"]

    @pytest.mark.parametrize("document", [
        "{not json",
        "[1, 2, 3]",
        {"entries": [{"id": "x", "text": "no timestamp"}]},
        {"entries": "not a list"},
        {"habits": [{"id": "h", "label": "a"}, {"id": "h", "label": "b"}]},
        {"points": -5},
        {"analytics": {"timerSessions": "many"}},
        {"points": 10, "woop": ["wrong"]},
        {"analytics": {"somethingElse": 1}},
        {"analytics": {"timerSessions": 3}},
        {"entries": [{"id": "x", "text": "   ", "timestamp": 1}]},
        {"entries": [{"id": "", "text": "blank id", "timestamp": 1}]},
        {"habits": [{"id": "h", "label": ""}]},
        {"miniGoals": [{"id": "g", "text": " "}]},
        {"ifThenPlans": [{"id": "p", "trigger": "when", "action": "\t"}]},
    ])
    def test_bad_document_leaves_state_unchanged(self, populated, document):
        before = populated.export()
        with pytest.raises(FormatError):
            populated.import_snapshot(document)
        assert populated.export() == before

    def test_persistence_failure_keeps_memory_state(self, make_engine, failing_store):
        engine = make_engine(failing_store)
        failing_store.failing = True

        with pytest.raises(PersistenceError):
            engine.import_snapshot({"points": 42, "vision": "Keep going"})

        assert engine.points.value == 42
        assert engine.vision.text == "Keep going"
        assert engine.points.dirty and engine.vision.dirty


class TestSnapshotFiles:

    def test_export_and_import_file(self, populated, make_engine, config):
        path = populated.export_to_file()
        assert path.parent == config.storage.export_dir
        assert path.name == "momentum_engine_backup_2026-03-10.json"

        fresh = make_engine()
        applied = fresh.import_from_file(path)
        assert "entries" in applied
        assert fresh.points.value == 75
        assert [e.id for e in fresh.list_entries()] == [e.id for e in populated.list_entries()]

    def test_old_snapshots_pruned(self, populated, clock, config):
        for _ in range(5):
            populated.export_to_file()
            clock.advance(days=1)

        files = sorted(p.name for p in config.storage.export_dir.glob("momentum_engine_backup_*.json"))
        assert len(files) == config.storage.max_exports
        assert files[-1] == snapshot_filename(clock.advance(days=-1))

    def test_cleanup_on_empty_dir(self, tmp_path):
        assert cleanup_old_snapshots(tmp_path, 3) == 0

    def test_entries_csv(self, populated, tmp_path):
        path = populated.export_entries_csv(tmp_path / "entries.csv")
        with open(path, encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))

        assert [row["text"] for row in rows] == ["Gym", "Morning pages"]
        assert rows[0]["day"] == "2026-03-10"
