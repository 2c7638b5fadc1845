"""Tests for calculation history persistence."""

import sqlite3
from unittest.mock import patch

import pytest

from calc_engine.errors import PersistenceError
from calc_engine.persistence.history_store import HistoryEntry, HistoryStore


class TestHistoryEntry:
    """Test HistoryEntry dataclass."""

    def test_history_entry_creation(self):
        entry = HistoryEntry(
            id=1,
            expression="2 + 2",
            result="4",
            timestamp_ms=1672574400000,
            created_at="2023-01-01T12:00:00+00:00",
        )

        assert entry.id == 1
        assert entry.expression == "2 + 2"
        assert entry.result == "4"


class TestHistoryStore:
    """Test HistoryStore class."""

    def test_init_database(self, tmp_path):
        db_path = tmp_path / "history.db"
        HistoryStore(str(db_path))

        assert db_path.exists()
        with sqlite3.connect(db_path) as conn:
            tables = [row[0] for row in conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            )]
        assert "history" in tables

    def test_record_and_get(self, history_store):
        entry_id = history_store.record("( 2 + 3 ) * 4", "20", timestamp_ms=1000)

        entry = history_store.get(entry_id)
        assert entry.expression == "( 2 + 3 ) * 4"
        assert entry.result == "20"
        assert entry.timestamp_ms == 1000
        assert entry.created_at

    def test_get_missing_entry(self, history_store):
        assert history_store.get(999) is None

    def test_record_defaults_timestamp_to_now(self, history_store):
        with patch("calc_engine.persistence.history_store.to_epoch_ms", return_value=1234):
            entry_id = history_store.record("1 + 1", "2")
        assert history_store.get(entry_id).timestamp_ms == 1234

    def test_recent_is_newest_first(self, history_store):
        history_store.record("1", "1", timestamp_ms=1000)
        history_store.record("2", "2", timestamp_ms=3000)
        history_store.record("3", "3", timestamp_ms=2000)

        assert [e.expression for e in history_store.recent()] == ["2", "3", "1"]
        assert [e.expression for e in history_store.recent(limit=1)] == ["2"]

    def test_capped_at_max_entries(self, history_store):
        for i in range(55):
            history_store.record(f"{i} + 0", str(i), timestamp_ms=i)

        assert history_store.count() == 50
        entries = history_store.recent()
        assert entries[0].expression == "54 + 0"
        assert entries[-1].expression == "5 + 0"

    def test_custom_cap(self, tmp_path):
        store = HistoryStore(str(tmp_path / "small.db"), max_entries=2)
        for i in range(4):
            store.record(str(i), str(i), timestamp_ms=i)

        assert [e.result for e in store.recent()] == ["3", "2"]

    def test_same_timestamp_keeps_latest_inserts(self, tmp_path):
        store = HistoryStore(str(tmp_path / "tie.db"), max_entries=2)
        for i in range(3):
            store.record(str(i), str(i), timestamp_ms=5)

        assert [e.result for e in store.recent()] == ["2", "1"]

    def test_clear(self, history_store):
        history_store.record("1", "1")
        history_store.record("2", "2")

        assert history_store.clear() == 2
        assert history_store.count() == 0
        assert history_store.recent() == []

    def test_persists_across_instances(self, tmp_path):
        db_path = str(tmp_path / "shared.db")
        HistoryStore(db_path).record("7 * 6", "42")

        assert HistoryStore(db_path).recent()[0].result == "42"

    def test_record_failure_raises_persistence_error(self, history_store):
        with patch.object(history_store, "_get_connection", side_effect=sqlite3.OperationalError("disk I/O error")):
            with pytest.raises(PersistenceError) as exc_info:
                history_store.record("1 + 1", "2")

        assert exc_info.value.operation == "record"
        assert exc_info.value.recoverable is False

    def test_read_failure_returns_empty(self, history_store):
        with patch.object(history_store, "_get_connection", side_effect=sqlite3.OperationalError("locked")):
            assert history_store.recent() == []
            assert history_store.get(1) is None
            assert history_store.count() == 0

    def test_unwritable_location(self, tmp_path):
        with pytest.raises(PersistenceError) as exc_info:
            HistoryStore(str(tmp_path / "missing" / "history.db"))
        assert exc_info.value.operation == "init"
