"""Metrics sampling and WPM calculation utilities."""

import logging
from typing import List, Optional

from core.alignment import AlignmentRecorder
from core.models import MetricSample

log = logging.getLogger("typeracer.metrics")

DEFAULT_CHARS_PER_WORD = 5.0


def calculate_wpm(cps: float, tick_interval_sec: float = 1.0,
                  chars_per_word: float = DEFAULT_CHARS_PER_WORD) -> float:
    """Calculate words per minute from characters per tick.

    Standard: 5 characters = 1 word, so wpm = cps / interval * 60 / 5.

    Args:
        cps: Mean characters committed per tick
        tick_interval_sec: Seconds per tick
        chars_per_word: Characters counted as one word

    Returns:
        WPM (words per minute), or 0.0 if interval or word length is not positive
    """
    if tick_interval_sec <= 0 or chars_per_word <= 0:
        return 0.0

    chars_per_sec = cps / tick_interval_sec
    return chars_per_sec * 60.0 / chars_per_word


class MetricsSampler:
    """Samples committed progress and accuracy once per tick."""

    def __init__(self, recorder: AlignmentRecorder, tick_interval_sec: float = 1.0,
                 chars_per_word: float = DEFAULT_CHARS_PER_WORD):
        """Initialize sampler.

        Args:
            recorder: Alignment recorder to read accuracy from
            tick_interval_sec: Seconds per tick
            chars_per_word: Characters counted as one word for WPM
        """
        self.recorder = recorder
        self.tick_interval_sec = tick_interval_sec
        self.chars_per_word = chars_per_word
        self.ticks = 0
        self.prev_sample_idx = 0
        self.cps_samples: List[int] = []
        self.accuracy_samples: List[float] = []

    def sample(self, sample_idx: int) -> MetricSample:
        """Take one sample.

        Args:
            sample_idx: Number of characters committed so far

        Returns:
            The new MetricSample
        """
        # Backspaces can move the index back; that tick committed nothing
        cps = max(0, sample_idx - self.prev_sample_idx)
        self.prev_sample_idx = sample_idx
        accuracy = self.recorder.accuracy()

        self.ticks += 1
        self.cps_samples.append(cps)
        self.accuracy_samples.append(accuracy)
        return MetricSample(tick=self.ticks, cps=cps, accuracy=accuracy)

    def last_sample(self) -> Optional[MetricSample]:
        if not self.cps_samples:
            return None
        return MetricSample(
            tick=self.ticks, cps=self.cps_samples[-1], accuracy=self.accuracy_samples[-1]
        )

    def final_accuracy(self) -> float:
        """Last sampled accuracy, or the cumulative value if never sampled."""
        if self.accuracy_samples:
            return self.accuracy_samples[-1]
        return self.recorder.accuracy()

    def final_cps(self) -> float:
        """Mean of the cps series (0.0 when empty)."""
        if not self.cps_samples:
            return 0.0
        return sum(self.cps_samples) / len(self.cps_samples)

    def final_wpm(self) -> float:
        return calculate_wpm(self.final_cps(), self.tick_interval_sec, self.chars_per_word)
