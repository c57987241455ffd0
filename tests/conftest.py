"""Shared test fixtures for typing racer tests."""

import json
import random
import tempfile
from pathlib import Path

import pytest

from core.models import SessionRecord
from core.storage import Storage
from utils.config import AppSettings


@pytest.fixture
def temp_db_path():
    """Create a temporary database path and clean up afterwards."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield db_path


@pytest.fixture
def storage(temp_db_path):
    """Storage on a temporary database."""
    return Storage(temp_db_path)


@pytest.fixture
def rng():
    """Seeded random source for reproducible targets."""
    return random.Random(1234)


@pytest.fixture
def settings():
    """Words-mode settings with a short target."""
    return AppSettings(
        test_name="english",
        game_mode="words",
        words_test_size=6,
        num_words_per_line=2,
        window_size=2,
        allow_backspace=True,
        debug=True,
    )


@pytest.fixture
def words_dir(tmp_path):
    """Directory with two valid word list files."""
    directory = tmp_path / "words"
    directory.mkdir()
    (directory / "english.json").write_text(json.dumps({
        "name": "english",
        "noLazyMode": False,
        "orderedByFrequency": True,
        "words": ["the", "be", "of", "and", "a", "to"],
    }))
    (directory / "animals.json").write_text(json.dumps({
        "name": "animals",
        "words": ["cat", "dog"],
    }))
    return directory


@pytest.fixture
def make_record():
    """Factory for minimal session records."""
    def factory(target: str, input_text: str, created_at_ms: int = 1000) -> SessionRecord:
        return SessionRecord(
            created_at_ms=created_at_ms,
            test_name="english",
            mode="words",
            test_duration=30,
            test_size=len(target.split()),
            target=target,
            input=input_text,
            accuracy=1.0,
            cps=4.0,
            wpm=48.0,
            rle=f"{len(input_text)}m" if len(input_text) > 1 else "m",
        )

    return factory
