"""Target text generation with line segmentation."""

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from core.errors import EmptyWordBank, InvalidTestSize

log = logging.getLogger("typeracer.text_generator")


@dataclass(frozen=True)
class GeneratedTest:
    """Target text and the indices where its wrapped lines start."""
    target: str
    line_offsets: List[int] = field(default_factory=lambda: [0])

    @property
    def line_boundaries(self) -> List[int]:
        """Line offsets followed by the end-of-text sentinel."""
        return self.line_offsets + [len(self.target)]


def compute_line_offsets(target: str, words_per_line: int) -> List[int]:
    """Compute the start index of every wrapped line.

    A new line starts after every ``words_per_line``-th space.

    Args:
        target: Target text
        words_per_line: Words per line

    Returns:
        Ascending offsets, always starting with 0
    """
    if words_per_line <= 0:
        raise InvalidTestSize(f"words_per_line must be positive, got {words_per_line}")

    offsets = [0]
    count = 0
    for i, char in enumerate(target):
        if char == ' ':
            count += 1
            if count == words_per_line:
                count = 0
                offsets.append(i + 1)
    return offsets


def generate_test(words: Sequence[str], size: int, words_per_line: int,
                  rng: Optional[random.Random] = None) -> GeneratedTest:
    """Build a target by drawing words uniformly with replacement.

    Args:
        words: Word bank to draw from
        size: Number of words in the target
        words_per_line: Words per wrapped line
        rng: Random source (module-level random if None)

    Returns:
        GeneratedTest with target and line offsets

    Raises:
        EmptyWordBank: If words is empty
        InvalidTestSize: If size or words_per_line is not positive
    """
    if not words:
        raise EmptyWordBank("word bank has no words")
    if size <= 0:
        raise InvalidTestSize(f"test size must be positive, got {size}")

    rng = rng or random
    drawn = [words[rng.randrange(len(words))] for _ in range(size)]
    target = ' '.join(drawn)
    offsets = compute_line_offsets(target, words_per_line)

    log.debug(f"Generated target: {size} words, {len(target)} chars, {len(offsets)} lines")
    return GeneratedTest(target=target, line_offsets=offsets)
