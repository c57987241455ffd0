"""Storage management for typing racer - SQLite database operations."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from core.errors import StorageError
from core.models import GameStats, SessionRecord

log = logging.getLogger("typeracer.storage")

_SESSION_COLUMNS = (
    "created_at_ms",
    "test_name",
    "mode",
    "test_duration",
    "test_size",
    "allow_backspace",
    "target",
    "input",
    "accuracy",
    "cps",
    "wpm",
    "rle",
    "raw_input",
    "sample_rate",
    "cps_samples",
    "accuracy_samples",
)


class Storage:
    """Database storage for aggregate stats and completed sessions."""

    def __init__(self, db_path: Path):
        """Initialize storage with database at given path.

        Args:
            db_path: Path to SQLite database file

        Raises:
            StorageError: If the database cannot be initialized
        """
        self.db_path = Path(db_path)
        self._init_database()

    def _get_connection(self) -> sqlite3.Connection:
        """Create a database connection."""
        return sqlite3.connect(self.db_path)

    def _init_database(self) -> None:
        """Create all database tables if they don't exist."""
        try:
            with self._get_connection() as conn:
                self._create_game_stats_table(conn)
                self._create_sessions_table(conn)
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot initialize database {self.db_path}: {e}") from e

    def _create_game_stats_table(self, conn: sqlite3.Connection) -> None:
        """Create single-row game_stats table."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS game_stats (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                total INTEGER NOT NULL DEFAULT 0,
                total_completed INTEGER NOT NULL DEFAULT 0,
                total_attempted INTEGER NOT NULL DEFAULT 0,
                last_test_id INTEGER NOT NULL DEFAULT 0
            )
        """)
        conn.execute("INSERT OR IGNORE INTO game_stats (id) VALUES (1)")

    def _create_sessions_table(self, conn: sqlite3.Connection) -> None:
        """Create sessions table."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at_ms INTEGER NOT NULL,
                test_name TEXT NOT NULL,
                mode TEXT NOT NULL,
                test_duration INTEGER NOT NULL,
                test_size INTEGER NOT NULL,
                allow_backspace INTEGER NOT NULL DEFAULT 0,
                target TEXT NOT NULL,
                input TEXT NOT NULL,
                accuracy REAL NOT NULL,
                cps REAL NOT NULL,
                wpm REAL NOT NULL,
                rle TEXT NOT NULL,
                raw_input TEXT NOT NULL DEFAULT '',
                sample_rate REAL NOT NULL DEFAULT 1.0,
                cps_samples TEXT NOT NULL DEFAULT '[]',
                accuracy_samples TEXT NOT NULL DEFAULT '[]'
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_sessions_created_at ON sessions(created_at_ms)"
        )

    def get_game_stats(self) -> GameStats:
        """Get aggregate stats."""
        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    SELECT total, total_completed, total_attempted, last_test_id
                    FROM game_stats WHERE id = 1
                """)
                row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot read game stats: {e}") from e

        if not row:
            return GameStats()
        return GameStats(
            total=row[0], total_completed=row[1], total_attempted=row[2], last_test_id=row[3]
        )

    def update_game_stats(self, stats: GameStats) -> None:
        """Overwrite aggregate stats."""
        try:
            with self._get_connection() as conn:
                self._update_game_stats(conn, stats)
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot update game stats: {e}") from e

    def insert_session(self, record: SessionRecord) -> int:
        """Store a completed session.

        Returns:
            Row id of the new session
        """
        try:
            with self._get_connection() as conn:
                session_id = self._insert_session(conn, record)
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot insert session: {e}") from e

        log.debug(f"Stored session {session_id}")
        return session_id

    def save_stats_and_session(self, stats: GameStats, record: SessionRecord) -> int:
        """Store a session and update stats in one transaction.

        ``last_test_id`` is set to the id of the new session. Nothing is
        written if any step fails.

        Returns:
            Row id of the new session

        Raises:
            StorageError: If the transaction was rolled back
        """
        conn = None
        try:
            conn = self._get_connection()
            session_id = self._insert_session(conn, record)
            updated = stats.model_copy(update={"last_test_id": session_id})
            self._update_game_stats(conn, updated)
            conn.commit()
        except sqlite3.Error as e:
            if conn is not None:
                conn.rollback()
            raise StorageError(f"Cannot save stats and session, rolled back: {e}") from e
        finally:
            if conn is not None:
                conn.close()

        log.debug(f"Stored session {session_id} with stats")
        return session_id

    def _update_game_stats(self, conn: sqlite3.Connection, stats: GameStats) -> None:
        # last_test_id only moves forward; stats snapshots taken before a save lag behind
        conn.execute("""
            UPDATE game_stats
            SET total = ?, total_completed = ?, total_attempted = ?,
                last_test_id = MAX(last_test_id, ?)
            WHERE id = 1
        """, (stats.total, stats.total_completed, stats.total_attempted, stats.last_test_id))

    def _insert_session(self, conn: sqlite3.Connection, record: SessionRecord) -> int:
        placeholders = ", ".join("?" for _ in _SESSION_COLUMNS)
        cursor = conn.execute(
            f"INSERT INTO sessions ({', '.join(_SESSION_COLUMNS)}) VALUES ({placeholders})",
            (
                record.created_at_ms,
                record.test_name,
                record.mode,
                record.test_duration,
                record.test_size,
                1 if record.allow_backspace else 0,
                record.target,
                record.input,
                record.accuracy,
                record.cps,
                record.wpm,
                record.rle,
                record.raw_input,
                record.sample_rate,
                json.dumps(record.cps_samples),
                json.dumps(record.accuracy_samples),
            ),
        )
        return cursor.lastrowid

    def get_sessions(self, limit: Optional[int] = None) -> List[SessionRecord]:
        """Get stored sessions, newest first.

        Args:
            limit: Maximum number of sessions to return (all if None)

        Returns:
            List of SessionRecord
        """
        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                # SQLite treats a negative LIMIT as no limit
                cursor.execute(
                    f"SELECT id, {', '.join(_SESSION_COLUMNS)} FROM sessions "
                    "ORDER BY id DESC LIMIT ?",
                    (-1 if limit is None else limit,),
                )
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot read sessions: {e}") from e

        return [self._row_to_record(row) for row in rows]

    def count_sessions(self) -> int:
        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) FROM sessions")
                return cursor.fetchone()[0]
        except sqlite3.Error as e:
            raise StorageError(f"Cannot count sessions: {e}") from e

    def _row_to_record(self, row: tuple) -> SessionRecord:
        values = dict(zip(("id",) + _SESSION_COLUMNS, row))
        values["allow_backspace"] = bool(values["allow_backspace"])
        values["cps_samples"] = json.loads(values["cps_samples"])
        values["accuracy_samples"] = json.loads(values["accuracy_samples"])
        return SessionRecord(**values)
