"""Sliding-window viewport over the target text."""

import logging
from typing import List, Tuple

from core.errors import InvariantViolation

log = logging.getLogger("typeracer.viewport")


class ViewportTracker:
    """Tracks the cursor, current line and the window of lines to render.

    The window covers ``window_size`` wrapped lines. ``left_index`` and
    ``right_index`` are always line offsets or the end-of-text sentinel.
    """

    def __init__(self, text_length: int, line_offsets: List[int],
                 window_size: int = 3, debug: bool = False):
        """Initialize viewport at the start of the text.

        Args:
            text_length: Length of the target text (N)
            line_offsets: Ascending line start indices, first must be 0
            window_size: Number of lines per window
            debug: Re-check invariants after every move

        Raises:
            ValueError: If window_size is not positive or offsets are malformed
        """
        if window_size <= 0:
            raise ValueError("window_size must be positive")
        if not line_offsets or line_offsets[0] != 0:
            raise ValueError("line_offsets must start with 0")

        self.text_length = text_length
        self.line_offsets = list(line_offsets)
        self.window_size = window_size
        self.debug = debug

        self.cursor = 0
        self.current_line = 0
        self.window_start_line = 0
        self.left_index = 0
        self.right_index = self._window_end(0)

    def _window_end(self, window_start_line: int) -> int:
        """Right bound of the window starting at the given line."""
        end_line = window_start_line + self.window_size
        if end_line < len(self.line_offsets):
            return self.line_offsets[end_line]
        return self.text_length

    def advance(self) -> None:
        """Move the cursor forward by one character."""
        if self.cursor + 1 >= self.text_length:
            return

        self.cursor += 1

        next_line = self.current_line + 1
        if next_line < len(self.line_offsets) and self.cursor == self.line_offsets[next_line]:
            self.current_line = next_line
            self.window_start_line = (self.current_line // self.window_size) * self.window_size
            if self.current_line % self.window_size == 0:
                self.left_index = self.right_index
                self.right_index = self._window_end(self.window_start_line)

        if self.debug:
            self.check_invariants()

    def retreat(self) -> None:
        """Move the cursor back by one character."""
        if self.cursor <= 0:
            return

        self.cursor -= 1

        if self.current_line > 0 and self.cursor < self.line_offsets[self.current_line]:
            self.current_line -= 1
            self.window_start_line = (self.current_line // self.window_size) * self.window_size
            if self.current_line % self.window_size == self.window_size - 1:
                self.right_index = self.left_index
                self.left_index = self.line_offsets[self.window_start_line]

        if self.debug:
            self.check_invariants()

    def span(self) -> Tuple[int, int, int]:
        """Return (left_index, right_index, cursor)."""
        return self.left_index, self.right_index, self.cursor

    def state(self) -> Tuple[int, int, int, int]:
        """Return (cursor, current_line, left_index, right_index)."""
        return self.cursor, self.current_line, self.left_index, self.right_index

    def check_invariants(self) -> None:
        """Raise InvariantViolation if the window bookkeeping is inconsistent."""
        bounds = set(self.line_offsets)
        bounds.add(self.text_length)

        if not (0 <= self.left_index <= self.cursor <= self.right_index <= self.text_length):
            raise InvariantViolation(
                f"window out of order: left={self.left_index} cursor={self.cursor} "
                f"right={self.right_index} n={self.text_length}"
            )
        if self.left_index not in bounds or self.right_index not in bounds:
            raise InvariantViolation(
                f"window bounds not on line offsets: left={self.left_index} "
                f"right={self.right_index}"
            )
        if self.window_start_line % self.window_size != 0:
            raise InvariantViolation(
                f"window start line {self.window_start_line} not a multiple "
                f"of {self.window_size}"
            )
