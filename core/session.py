"""Typing session: keystroke handling, ticks and final record."""

import logging
import math
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from core.alignment import AlignmentRecorder, EditOp
from core.errors import InvariantViolation
from core.metrics import MetricsSampler
from core.mistake_miner import DEFAULT_MINED_LIST_SIZE, count_mismatched_words, rank_mistakes
from core.models import MetricSample, SessionRecord
from core.text_generator import GeneratedTest, generate_test
from core.viewport import ViewportTracker
from utils.config import AppSettings

log = logging.getLogger("typeracer.session")

BACKSPACE = "BACKSPACE"
SPACE = "SPACE"


class SessionState(Enum):
    RUNNING = "running"
    FINISHED = "finished"


class KeystrokeOutcome(Enum):
    PROGRESSED = "progressed"
    COMPLETED = "completed"
    IGNORED = "ignored"


@dataclass(frozen=True)
class TickResult:
    """Outcome of one tick; ``completed`` is True only on the finishing tick."""
    sample: Optional[MetricSample]
    completed: bool = False


@dataclass(frozen=True)
class RenderSpan:
    """What the presentation layer needs to paint the window."""
    left: int
    right: int
    cursor: int
    ops: Tuple[EditOp, ...]  # committed ops within [left, right)
    text: str  # target[left:right]


class TypingSession:
    """One typing test from start to completion."""

    def __init__(self, test: GeneratedTest, settings: AppSettings):
        """Initialize session for a generated test.

        Args:
            test: Target text and line offsets
            settings: Settings snapshot for this session
        """
        self.test = test
        self.target = test.target
        self.settings = settings
        self.mode = settings.game_mode
        self.inputs: List[str] = []
        self.state = SessionState.RUNNING

        self.viewport = ViewportTracker(
            len(self.target), test.line_offsets, settings.window_size, settings.debug
        )
        self.recorder = AlignmentRecorder()
        self.sampler = MetricsSampler(
            self.recorder, settings.tick_interval_sec, settings.wpm_chars_per_word
        )
        self.elapsed_ticks = 0
        self.duration_ticks = max(1, math.ceil(settings.test_duration / settings.tick_interval_sec))

    @property
    def finished(self) -> bool:
        return self.state == SessionState.FINISHED

    @property
    def input_text(self) -> str:
        return ''.join(self.inputs)

    def handle_keystroke(self, key: str) -> KeystrokeOutcome:
        """Process one key.

        Args:
            key: Single character, SPACE or BACKSPACE

        Returns:
            KeystrokeOutcome
        """
        if self.state == SessionState.RUNNING:
            return self._handle_running_key(key)
        elif self.state == SessionState.FINISHED:
            return KeystrokeOutcome.IGNORED
        raise InvariantViolation(f"unhandled session state {self.state}")

    def tick(self) -> TickResult:
        """Advance the session clock by one tick and sample metrics."""
        if self.state == SessionState.RUNNING:
            return self._tick_running()
        elif self.state == SessionState.FINISHED:
            return TickResult(sample=None)
        raise InvariantViolation(f"unhandled session state {self.state}")

    def _handle_running_key(self, key: str) -> KeystrokeOutcome:
        if key == BACKSPACE:
            return self._backspace()

        char = ' ' if key == SPACE else key
        if len(char) != 1:
            log.debug(f"Ignoring key {key!r}")
            return KeystrokeOutcome.IGNORED

        self.recorder.record(self.target[len(self.inputs)], char)
        self.inputs.append(char)
        self.viewport.advance()

        if len(self.inputs) == len(self.target):
            self.state = SessionState.FINISHED
            self._check_lengths()
            log.info(f"Session completed: {len(self.inputs)} chars typed")
            return KeystrokeOutcome.COMPLETED

        self._check_lengths()
        return KeystrokeOutcome.PROGRESSED

    def _backspace(self) -> KeystrokeOutcome:
        if not self.settings.allow_backspace or not self.inputs:
            return KeystrokeOutcome.IGNORED

        self.inputs.pop()
        self.recorder.trim()
        self.viewport.retreat()
        self._check_lengths()
        return KeystrokeOutcome.PROGRESSED

    def _tick_running(self) -> TickResult:
        self.elapsed_ticks += 1
        sample = self.sampler.sample(len(self.inputs))

        if self.mode == "time" and self.elapsed_ticks >= self.duration_ticks:
            self.state = SessionState.FINISHED
            log.info(f"Session timed out after {self.elapsed_ticks} ticks")
            return TickResult(sample=sample, completed=True)
        return TickResult(sample=sample)

    def _check_lengths(self) -> None:
        if not self.settings.debug:
            return
        if len(self.recorder) != len(self.inputs):
            raise InvariantViolation(
                f"alignment length {len(self.recorder)} != input length {len(self.inputs)}"
            )
        if not self.finished and self.viewport.cursor != len(self.inputs):
            raise InvariantViolation(
                f"cursor {self.viewport.cursor} != input length {len(self.inputs)}"
            )

    def current_render_span(self) -> RenderSpan:
        left, right, cursor = self.viewport.span()
        committed_end = min(right, len(self.inputs))
        return RenderSpan(
            left=left,
            right=right,
            cursor=cursor,
            ops=tuple(self.recorder.slice(left, committed_end)),
            text=self.target[left:right],
        )

    def missed_words(self, limit: int = DEFAULT_MINED_LIST_SIZE) -> List[str]:
        """Target words mistyped in this session, most frequent first."""
        counts = count_mismatched_words(self.target, self.input_text)
        return rank_mistakes(counts, limit)

    def finalize_session(self, created_at_ms: Optional[int] = None) -> SessionRecord:
        """Build the session record from the current state.

        Args:
            created_at_ms: Completion timestamp (now if None)

        Returns:
            SessionRecord with copies of all session data
        """
        if created_at_ms is None:
            created_at_ms = int(time.time() * 1000)

        return SessionRecord(
            created_at_ms=created_at_ms,
            test_name=self.settings.test_name,
            mode=self.mode,
            test_duration=self.settings.test_duration,
            test_size=self.settings.target_size(),
            allow_backspace=self.settings.allow_backspace,
            target=self.target,
            input=self.input_text,
            accuracy=self.sampler.final_accuracy(),
            cps=self.sampler.final_cps(),
            wpm=self.sampler.final_wpm(),
            rle=self.recorder.run_length_encode(),
            raw_input=self.recorder.raw_string(),
            sample_rate=self.settings.tick_interval_sec,
            cps_samples=list(self.sampler.cps_samples),
            accuracy_samples=list(self.sampler.accuracy_samples),
        )


def start_session(settings: AppSettings, words: Sequence[str],
                  rng: Optional[random.Random] = None) -> TypingSession:
    """Generate a target and start a session on it.

    Args:
        settings: Settings snapshot
        words: Snapshot of the word list to draw from
        rng: Random source for target generation

    Returns:
        Running TypingSession

    Raises:
        ConfigurationError: If the word list is empty or sizes are invalid
    """
    test = generate_test(words, settings.target_size(), settings.num_words_per_line, rng)
    log.info(
        f"Starting {settings.game_mode} session on '{settings.test_name}': "
        f"{len(test.target)} chars, {len(test.line_offsets)} lines"
    )
    return TypingSession(test, settings)
