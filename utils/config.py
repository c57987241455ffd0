"""Configuration management for typing racer."""

import logging
import sqlite3
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

log = logging.getLogger("typeracer.config")

GAME_MODES = ("time", "words")


class AppSettings(BaseModel):
    """Application settings with validation."""

    # Test selection
    test_name: str = Field(
        default="english", min_length=1, description="Word list to draw targets from"
    )
    game_mode: str = Field(
        default="time", description="'time' (countdown) or 'words' (type whole target)"
    )
    test_duration: int = Field(
        default=30, gt=0, description="Countdown length for time mode (seconds)"
    )
    test_size: int = Field(
        default=500, gt=0, description="Words in the target for time mode"
    )
    words_test_size: int = Field(
        default=25, gt=0, description="Words in the target for words mode"
    )

    # Layout
    num_words_per_line: int = Field(
        default=20, gt=0, description="Words per wrapped line"
    )
    window_size: int = Field(
        default=3, gt=0, description="Lines visible in the viewport window"
    )

    # Behaviour
    allow_backspace: bool = Field(default=False, description="Allow backspace edits")
    debug: bool = Field(default=False, description="Check viewport invariants on every move")

    # Metrics
    tick_interval_sec: float = Field(
        default=1.0, gt=0, description="Seconds between metric samples"
    )
    wpm_chars_per_word: float = Field(
        default=5.0, gt=0, description="Characters counted as one word for WPM"
    )

    # Mistake mining
    mining_interval: int = Field(
        default=3, ge=0, description="Mine mistakes every N completed tests (0 = never)"
    )
    mined_list_name: str = Field(
        default="frequent", min_length=1, description="Name of the mined word list"
    )
    mined_list_size: int = Field(
        default=50, gt=0, description="Maximum words in the mined word list"
    )

    # Error display
    error_banner_sec: float = Field(
        default=3.0, ge=0, description="How long storage errors stay visible (seconds)"
    )

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("game_mode")
    @classmethod
    def validate_game_mode(cls, v):
        """Only the two known modes are accepted."""
        if v not in GAME_MODES:
            raise ValueError(f"game_mode must be one of {GAME_MODES}, got {v!r}")
        return v

    def target_size(self) -> int:
        """Number of words in the target for the configured mode."""
        if self.game_mode == "words":
            return self.words_test_size
        return self.test_size


class Config:
    """Configuration manager using SQLite for persistence with Pydantic validation."""

    def __init__(self, db_path: Path):
        """Initialize config with database connection.

        Args:
            db_path: Path to SQLite database
        """
        self.db_path = Path(db_path)
        self._init_settings_table()
        self._ensure_defaults()

    def _get_connection(self) -> sqlite3.Connection:
        """Create database connection."""
        return sqlite3.connect(self.db_path)

    def _init_settings_table(self) -> None:
        """Create settings table if not exists."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()

    def _ensure_defaults(self) -> None:
        """Ensure all default settings exist in database."""
        defaults = AppSettings().model_dump()

        with self._get_connection() as conn:
            cursor = conn.cursor()
            for key, value in defaults.items():
                cursor.execute(
                    """
                    INSERT OR IGNORE INTO settings (key, value)
                    VALUES (?, ?)
                """,
                    (key, self._serialize_value(value)),
                )
            conn.commit()

    def _serialize_value(self, value: Any) -> str:
        """Convert value to string for storage."""
        if isinstance(value, bool):
            return "True" if value else "False"
        return str(value)

    def _validate(self, key: str, value: Any) -> Any:
        """Coerce a value through the AppSettings field of the same name."""
        if key not in AppSettings.model_fields:
            raise KeyError(f"Unknown setting: {key}")
        return getattr(AppSettings(**{key: value}), key)

    def _load_raw(self) -> dict[str, str]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT key, value FROM settings")
            return dict(cursor.fetchall())

    def _coerce(self, key: str, raw: Optional[str]) -> Any:
        """Typed value of a stored string; the default if missing or invalid."""
        if raw is None:
            return getattr(AppSettings(), key)
        try:
            return self._validate(key, raw)
        except ValidationError:
            log.warning(f"Stored value for {key} is invalid: {raw!r}, using default")
            return getattr(AppSettings(), key)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value with pydantic validation.

        Args:
            key: Setting key
            value: Setting value

        Raises:
            KeyError: If key is not an AppSettings field
            ValueError: If value fails validation
        """
        try:
            value = self._validate(key, value)
        except ValidationError as e:
            raise ValueError(f"Invalid value for {key}: {e}") from e

        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO settings (key, value)
                VALUES (?, ?)
            """,
                (key, self._serialize_value(value)),
            )
            conn.commit()
        log.info(f"Setting {key} = {value!r}")

    def get_settings(self) -> AppSettings:
        """Snapshot of all settings as a validated AppSettings."""
        raw = self._load_raw()
        values = {key: self._coerce(key, raw.get(key)) for key in AppSettings.model_fields}
        return AppSettings(**values)
