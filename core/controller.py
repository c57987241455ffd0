"""Event-loop controller tying sessions, word bank and persistence together."""

import logging
import random
import time
from pathlib import Path
from typing import Callable, List, Optional

from core.models import GameStats, SessionRecord
from core.persistence_worker import (
    MineMistakesRequest,
    PersistenceWorker,
    SaveStatsAndSessionRequest,
    SaveStatsRequest,
)
from core.session import KeystrokeOutcome, RenderSpan, TickResult, TypingSession, start_session
from core.word_bank import WordBank
from utils.config import AppSettings

log = logging.getLogger("typeracer.controller")


class ErrorBanner:
    """Transient error message that clears itself after a delay."""

    def __init__(self, duration_sec: float, clock: Callable[[], float] = time.monotonic):
        self.duration_sec = duration_sec
        self.clock = clock
        self.message: Optional[str] = None
        self.shown_at = 0.0

    def show(self, message: str) -> None:
        self.message = message
        self.shown_at = self.clock()

    def current(self) -> Optional[str]:
        """Message to display, or None once it has expired."""
        if self.message is not None and self.clock() - self.shown_at >= self.duration_sec:
            self.message = None
        return self.message


class RacerController:
    """Owns the current session; runs on the single input-handling thread.

    Storage work is only ever enqueued on the persistence worker; results and
    failures come back through ``poll_background()``.
    """

    def __init__(self, settings: AppSettings, word_bank: WordBank,
                 worker: PersistenceWorker, stats: Optional[GameStats] = None,
                 word_list_dir: Optional[Path] = None,
                 rng: Optional[random.Random] = None,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize controller.

        Args:
            settings: Settings snapshot for new sessions
            word_bank: Word lists; only mutated by this controller
            worker: Persistence worker for durable writes
            stats: Aggregate stats loaded at startup
            word_list_dir: Where mined word lists are written (not written if None)
            rng: Random source for target generation
            clock: Monotonic clock for the error banner
        """
        self.settings = settings
        self.word_bank = word_bank
        self.worker = worker
        self.stats = stats.model_copy() if stats else GameStats()
        self.word_list_dir = word_list_dir
        self.rng = rng
        self.banner = ErrorBanner(settings.error_banner_sec, clock)
        self.session: Optional[TypingSession] = None
        self.last_record: Optional[SessionRecord] = None
        self.missed_words: List[str] = []
        self.completed_since_mining = 0

    def start_session(self) -> TypingSession:
        """Start a new session on a snapshot of the configured word list.

        Raises:
            ConfigurationError: If the word list is missing or empty
        """
        words = self.word_bank.snapshot(self.settings.test_name)
        self.session = start_session(self.settings, words, self.rng)
        self.last_record = None
        self.missed_words = []

        self.stats = self.stats.model_copy(
            update={"total_attempted": self.stats.total_attempted + 1}
        )
        self.worker.submit(SaveStatsRequest(stats=self.stats))
        return self.session

    def restart(self) -> TypingSession:
        """Discard the current session and start a new one."""
        if self.session is not None and not self.session.finished:
            log.info("Restarting unfinished session")
        self.session = None
        return self.start_session()

    def handle_keystroke(self, key: str) -> KeystrokeOutcome:
        if self.session is None:
            return KeystrokeOutcome.IGNORED

        outcome = self.session.handle_keystroke(key)
        if outcome == KeystrokeOutcome.COMPLETED:
            self._complete_session()
        return outcome

    def tick(self) -> TickResult:
        if self.session is None:
            return TickResult(sample=None)

        result = self.session.tick()
        if result.completed:
            self._complete_session()
        return result

    def _complete_session(self) -> None:
        """Hand an immutable record to the worker and maybe trigger mining."""
        record = self.session.finalize_session()
        self.last_record = record
        self.missed_words = self.session.missed_words()

        self.stats = self.stats.model_copy(update={
            "total": self.stats.total + 1,
            "total_completed": self.stats.total_completed + 1,
        })
        self.worker.submit(SaveStatsAndSessionRequest(stats=self.stats, record=record))
        log.info(
            f"Session finished: accuracy={record.accuracy:.2%} "
            f"cps={record.cps:.2f} wpm={record.wpm:.1f}"
        )

        self.completed_since_mining += 1
        interval = self.settings.mining_interval
        if interval and self.completed_since_mining >= interval:
            self.completed_since_mining = 0
            self.worker.submit(MineMistakesRequest(
                list_name=self.settings.mined_list_name,
                list_size=self.settings.mined_list_size,
                output_dir=self.word_list_dir,
            ))

    def poll_background(self) -> None:
        """Apply worker results: show failures, merge mined word lists."""
        for failure in self.worker.poll_errors():
            self.banner.show(f"Could not save ({failure.request_kind}): {failure.message}")

        for result in self.worker.poll_results():
            self.word_bank.set(result.word_list)

    def render_span(self) -> Optional[RenderSpan]:
        if self.session is None:
            return None
        return self.session.current_render_span()

    def banner_message(self) -> Optional[str]:
        return self.banner.current()

    def shutdown(self) -> None:
        """Stop the worker after it drained everything already enqueued."""
        self.worker.stop()
        self.poll_background()
