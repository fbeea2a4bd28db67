"""
Журнал активности: порядок, валидация, удаление и загрузка из хранилища
"""

import pytest

from momentum_engine.core.database import StorageSlot
from momentum_engine.core.models import ValidationError
from momentum_engine.services.activity_log import ActivityLog
from momentum_engine.utils.datetime_utils import to_epoch_ms


class TestAppend:

    def test_new_entry_goes_first(self, engine, clock):
        first = engine.log_activity("Wrote the intro")
        clock.advance(minutes=5)
        second = engine.log_activity("Sent the invoice")

        entries = engine.list_entries()
        assert [e.id for e in entries] == [second.id, first.id]
        assert len(entries) == 2

    def test_length_grows_by_one(self, engine):
        before = len(engine.activity_log)
        engine.log_activity("Cleared inbox")
        assert len(engine.activity_log) == before + 1

    def test_timestamp_comes_from_clock(self, engine, clock):
        entry = engine.log_activity("Stretch")
        assert entry.timestamp == to_epoch_ms(clock())

    def test_text_is_stripped(self, engine):
        entry = engine.log_activity("  Walked 2km  ")
        assert entry.text == "Walked 2km"

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_empty_text_rejected_without_change(self, engine, text):
        engine.log_activity("Existing")
        with pytest.raises(ValidationError):
            engine.log_activity(text)
        assert len(engine.activity_log) == 1

    def test_ids_unique_for_same_timestamp(self, engine):
        a = engine.log_activity("one")
        b = engine.log_activity("two")
        assert a.timestamp == b.timestamp
        assert a.id != b.id


class TestRemove:

    def test_remove_existing(self, engine):
        entry = engine.log_activity("Temporary")
        assert engine.remove_entry(entry.id) is True
        assert engine.list_entries() == []

    def test_remove_missing_is_noop(self, engine):
        engine.log_activity("Keep me")
        assert engine.remove_entry("no-such-id") is False
        assert len(engine.activity_log) == 1


class TestPersistence:

    def test_entries_reload_from_store(self, engine, store, clock):
        engine.log_activity("first")
        engine.log_activity("second")

        reloaded = ActivityLog(store, clock)
        assert [e.text for e in reloaded.entries] == ["second", "first"]

    def test_corrupt_slot_loads_empty(self, store, clock):
        store.set(StorageSlot.ENTRIES, "{not json")
        log = ActivityLog(store, clock)
        assert log.entries == []

    def test_wrong_shape_loads_empty(self, store, clock):
        store.set(StorageSlot.ENTRIES, '{"id": "x"}')
        log = ActivityLog(store, clock)
        assert log.entries == []

    def test_entries_on_day(self, engine, clock):
        engine.log_activity("yesterday")
        clock.advance(days=1)
        today = engine.log_activity("today")

        assert engine.activity_log.entries_on(engine.today(), engine.tz) == [today]
