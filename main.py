#!/usr/bin/env python3
"""Typing racer - headless session replay.

Replays typed text against a generated target, persists the session and
prints the results.

Usage:
    python3 main.py --text "the quick brown fox"
    python3 main.py --input-file typed.txt --mode words --chars-per-tick 6
"""

import argparse
import logging
import random
import sys
from pathlib import Path

from core.controller import RacerController
from core.errors import ConfigurationError, StorageError
from core.persistence_worker import PersistenceWorker
from core.session import BACKSPACE
from core.storage import Storage
from core.word_bank import load_word_bank
from utils.config import Config
from utils.logging_setup import setup_logging

log = logging.getLogger('typeracer')


def default_data_dir() -> Path:
    return Path.home() / '.local' / 'share' / 'typeracer'


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay a typing test headlessly")
    source = parser.add_mutually_exclusive_group()
    source.add_argument('--text', help="Text to type (defaults to the target itself)")
    source.add_argument('--input-file', type=Path, help="File with the text to type")
    parser.add_argument('--data-dir', type=Path, default=default_data_dir(),
                        help="Directory holding the database and word lists")
    parser.add_argument('--mode', choices=['time', 'words'], help="Override game mode")
    parser.add_argument('--chars-per-tick', type=int, default=5,
                        help="Keystrokes replayed between metric ticks")
    parser.add_argument('--seed', type=int, help="Seed for target generation")
    parser.add_argument('--debug', action='store_true', help="Verbose logging")
    return parser.parse_args(argv)


def replay(controller: RacerController, typed: str, chars_per_tick: int) -> None:
    """Feed typed text into the current session, ticking periodically."""
    session = controller.session
    for i, char in enumerate(typed, start=1):
        if session.finished:
            break
        controller.handle_keystroke(BACKSPACE if char == '\b' else char)
        if chars_per_tick > 0 and i % chars_per_tick == 0:
            controller.tick()

    # Only the countdown mode finishes on its own
    while not session.finished and session.mode == 'time':
        controller.tick()


def main(argv=None) -> int:
    args = parse_args(argv)
    data_dir: Path = args.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(debug=args.debug)

    config = Config(data_dir / 'settings.db')
    if args.mode:
        config.set('game_mode', args.mode)
    settings = config.get_settings()

    words_dir = data_dir / 'words'
    try:
        word_bank = load_word_bank(words_dir)
        storage = Storage(data_dir / 'racer.db')
        stats = storage.get_game_stats()
    except (ConfigurationError, StorageError) as e:
        log.error(f"Startup failed: {e}")
        return 1

    worker = PersistenceWorker(storage)
    worker.start()
    controller = RacerController(
        settings, word_bank, worker, stats=stats, word_list_dir=words_dir,
        rng=random.Random(args.seed) if args.seed is not None else None,
    )

    try:
        session = controller.start_session()
    except ConfigurationError as e:
        log.error(f"Cannot start session: {e}")
        controller.shutdown()
        return 1

    if args.input_file:
        try:
            typed = args.input_file.read_text().rstrip('\n')
        except OSError as e:
            log.error(f"Cannot read input file: {e}")
            controller.shutdown()
            return 1
    elif args.text is not None:
        typed = args.text
    else:
        typed = session.target

    replay(controller, typed, args.chars_per_tick)
    controller.shutdown()

    record = controller.last_record
    if record is None:
        print("session not completed: typed text is shorter than the target", file=sys.stderr)
        return 1
    print(f"accuracy: {record.accuracy:.2%}")
    print(f"cps: {record.cps:.2f}")
    print(f"wpm: {record.wpm:.1f}")
    print(f"rle: {record.rle}")
    if controller.missed_words:
        print(f"missed: {' '.join(controller.missed_words)}")

    banner = controller.banner_message()
    if banner:
        print(banner, file=sys.stderr)
        return 2
    return 0


if __name__ == '__main__':
    sys.exit(main())
