"""Mining of commonly mistyped words from session history."""

import logging
from typing import Dict, Iterable, List, Optional

from core.models import SessionRecord, WordList

log = logging.getLogger("typeracer.mistake_miner")

DEFAULT_MINED_LIST_NAME = "frequent"
DEFAULT_MINED_LIST_SIZE = 50


def count_mismatched_words(target: str, input_text: str,
                           counts: Optional[Dict[str, int]] = None) -> Dict[str, int]:
    """Count target words whose typed slice differs from the target.

    Only the part of the target that was actually typed is compared.

    Args:
        target: Target text
        input_text: Typed text
        counts: Map to accumulate into (new map if None)

    Returns:
        Word -> mismatch count
    """
    if counts is None:
        counts = {}

    typed_target = target[:len(input_text)]
    start = 0

    for i, char in enumerate(typed_target):
        if char != ' ':
            continue
        _count_span(typed_target, input_text, start, i, counts)
        start = i + 1

    # Trailing word has no terminating space
    _count_span(typed_target, input_text, start, len(typed_target), counts)

    return counts


def _count_span(target: str, input_text: str, start: int, end: int,
                counts: Dict[str, int]) -> None:
    word = target[start:end]
    if not word or any(c.isspace() for c in word):
        return
    if input_text[start:end] != word:
        counts[word] = counts.get(word, 0) + 1


def mine_mistakes(history: Iterable[SessionRecord]) -> Dict[str, int]:
    """Build the mistake frequency map over all records.

    Args:
        history: Session records in any order

    Returns:
        Word -> number of times it was mistyped
    """
    counts: Dict[str, int] = {}
    for record in history:
        count_mismatched_words(record.target, record.input, counts)
    return counts


def rank_mistakes(counts: Dict[str, int], limit: int = DEFAULT_MINED_LIST_SIZE) -> List[str]:
    """Return the most frequently mistyped words, most frequent first.

    Pairs are sorted ascending by count with a stable sort over word-sorted
    input, so equal counts always come out in the same order regardless of
    the order the history was scanned in.

    Args:
        counts: Word -> mismatch count
        limit: Maximum number of words

    Returns:
        Up to ``limit`` words
    """
    if limit <= 0:
        return []

    pairs = sorted(counts.items())
    pairs.sort(key=lambda pair: pair[1])
    top = pairs[-limit:]
    top.reverse()
    return [word for word, _ in top]


def build_mistake_list(history: Iterable[SessionRecord],
                       name: str = DEFAULT_MINED_LIST_NAME,
                       limit: int = DEFAULT_MINED_LIST_SIZE) -> WordList:
    """Build a practice word list from mistyped words.

    Args:
        history: Session records
        name: Name of the resulting word list
        limit: Maximum number of words

    Returns:
        WordList ordered by frequency; empty if no word was ever mistyped
    """
    counts = mine_mistakes(history)
    words = rank_mistakes(counts, limit)
    log.info(f"Mined {len(counts)} mistyped words, keeping {len(words)}")

    return WordList(name=name, words=words, ordered_by_frequency=True)
