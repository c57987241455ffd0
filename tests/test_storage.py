"""Tests for Storage class."""

import sqlite3

import pytest

from core.errors import StorageError
from core.models import GameStats
from core.storage import Storage


class TestStorage:
    """Test Storage class."""

    def test_init_database(self, storage):
        """Test database initialization."""
        with sqlite3.connect(storage.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = [row[0] for row in cursor.fetchall()]

        assert 'game_stats' in tables
        assert 'sessions' in tables

    def test_reopen_keeps_data(self, storage, make_record):
        storage.insert_session(make_record("cat", "cat"))

        reopened = Storage(storage.db_path)
        assert reopened.count_sessions() == 1

    def test_init_fails_on_bad_path(self, tmp_path):
        with pytest.raises(StorageError):
            Storage(tmp_path / "missing" / "dir" / "racer.db")


class TestGameStats:
    """Test aggregate stats."""

    def test_initial_stats(self, storage):
        assert storage.get_game_stats() == GameStats()

    def test_update_game_stats(self, storage):
        stats = GameStats(total=3, total_completed=2, total_attempted=5, last_test_id=7)
        storage.update_game_stats(stats)

        assert storage.get_game_stats() == stats

    def test_single_row(self, storage):
        storage.update_game_stats(GameStats(total=1))
        storage.update_game_stats(GameStats(total=2))

        with sqlite3.connect(storage.db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM game_stats").fetchone()[0]
        assert count == 1


class TestSessions:
    """Test session storage."""

    def test_insert_and_read_back(self, storage, make_record):
        record = make_record("cat dog", "cat dig").model_copy(update={
            "allow_backspace": True,
            "cps_samples": [3, 4],
            "accuracy_samples": [1.0, 0.875],
        })
        session_id = storage.insert_session(record)

        stored = storage.get_sessions()[0]
        assert stored.id == session_id
        assert stored.target == "cat dog"
        assert stored.input == "cat dig"
        assert stored.allow_backspace is True
        assert stored.cps_samples == [3, 4]
        assert stored.accuracy_samples == [1.0, 0.875]

    def test_recent_sessions_newest_first(self, storage, make_record):
        for i in range(5):
            storage.insert_session(make_record(f"word{i}", f"word{i}", created_at_ms=i))

        recent = storage.get_sessions(limit=3)

        assert [r.target for r in recent] == ["word4", "word3", "word2"]

    def test_get_sessions_returns_full_history(self, storage, make_record):
        for i in range(150):
            storage.insert_session(make_record(f"word{i}", f"word{i}", created_at_ms=i))

        history = storage.get_sessions()

        assert len(history) == 150
        assert history[0].target == "word149"
        assert history[-1].target == "word0"

    def test_count_sessions(self, storage, make_record):
        assert storage.count_sessions() == 0
        storage.insert_session(make_record("a", "a"))
        storage.insert_session(make_record("b", "b"))
        assert storage.count_sessions() == 2


class TestSaveStatsAndSession:
    """Test the combined transactional write."""

    def test_sets_last_test_id(self, storage, make_record):
        storage.insert_session(make_record("first", "first"))
        stats = GameStats(total=2, total_completed=2, total_attempted=2)

        session_id = storage.save_stats_and_session(stats, make_record("second", "second"))

        saved = storage.get_game_stats()
        assert session_id == 2
        assert saved.last_test_id == session_id
        assert saved.total == 2

    def test_rollback_on_failure(self, storage, make_record, monkeypatch):
        storage.update_game_stats(GameStats(total=1, total_completed=1, total_attempted=1))

        def fail(conn, stats):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(storage, "_update_game_stats", fail)

        with pytest.raises(StorageError):
            storage.save_stats_and_session(GameStats(total=9), make_record("cat", "cat"))

        # Neither the session nor the stats were written
        assert storage.count_sessions() == 0
        assert storage.get_game_stats().total == 1
