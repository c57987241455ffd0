"""Tests for the headless replay entry point."""

import json
import logging

import pytest

import main
from core.storage import Storage
from utils.logging_setup import setup_logging


@pytest.fixture(autouse=True)
def state_home(tmp_path, monkeypatch):
    """Keep log files inside the test directory."""
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    yield tmp_path / "state"

    log = logging.getLogger("typeracer")
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()


class TestMain:
    """Test main function."""

    def test_words_mode_replay(self, words_dir, capsys):
        data_dir = words_dir.parent

        code = main.main(["--data-dir", str(data_dir), "--mode", "words", "--seed", "5"])

        assert code == 0
        out = capsys.readouterr().out
        assert "accuracy: 100.00%" in out
        assert "rle: " in out

        storage = Storage(data_dir / "racer.db")
        assert storage.count_sessions() == 1
        assert storage.get_game_stats().total_completed == 1

    def test_time_mode_runs_out_the_clock(self, words_dir, capsys):
        data_dir = words_dir.parent

        code = main.main(["--data-dir", str(data_dir), "--mode", "time", "--text", "xyz"])

        assert code == 0
        record = Storage(data_dir / "racer.db").get_sessions()[0]
        assert record.input == "xyz"
        assert len(record.cps_samples) == 30

    def test_unfinished_words_session(self, words_dir, capsys):
        code = main.main(["--data-dir", str(words_dir.parent), "--mode", "words",
                          "--text", "th"])

        assert code == 1
        assert "not completed" in capsys.readouterr().err

    def test_missing_word_lists(self, tmp_path):
        assert main.main(["--data-dir", str(tmp_path / "empty")]) == 1

    def test_input_file(self, words_dir, tmp_path):
        typed = tmp_path / "typed.txt"
        typed.write_text("abc\n")

        code = main.main(["--data-dir", str(words_dir.parent), "--mode", "time",
                          "--input-file", str(typed)])

        assert code == 0
        record = Storage(words_dir.parent / "racer.db").get_sessions()[0]
        assert record.input == "abc"

    def test_missing_input_file(self, words_dir, tmp_path, caplog):
        code = main.main(["--data-dir", str(words_dir.parent), "--mode", "time",
                          "--input-file", str(tmp_path / "nope.txt")])

        assert code == 1
        assert "Cannot read input file" in caplog.text

    def test_missed_words_printed(self, tmp_path, capsys):
        words = tmp_path / "data" / "words"
        words.mkdir(parents=True)
        (words / "english.json").write_text(json.dumps({"name": "english", "words": ["a"]}))
        typed = "b" + " a" * 24

        code = main.main(["--data-dir", str(words.parent), "--mode", "words", "--text", typed])

        assert code == 0
        assert "missed: a" in capsys.readouterr().out


class TestReplayHelpers:
    """Test argument parsing and logging setup."""

    def test_parse_args_defaults(self):
        args = main.parse_args([])
        assert args.chars_per_tick == 5
        assert args.mode is None
        assert args.seed is None

    def test_text_and_input_file_exclusive(self):
        with pytest.raises(SystemExit):
            main.parse_args(["--text", "a", "--input-file", "b.txt"])

    def test_setup_logging_writes_log_file(self, state_home):
        log = setup_logging(console=False)
        log.getChild("test").info("hello")
        for handler in log.handlers:
            handler.flush()

        content = (state_home / "typeracer" / "typeracer.log").read_text()
        assert "typeracer.test - INFO - hello" in content

    def test_setup_logging_replaces_handlers(self, tmp_path):
        setup_logging(log_dir=tmp_path, console=True)
        log = setup_logging(log_dir=tmp_path, console=False)
        assert len(log.handlers) == 1
