"""Edit trace of committed keystrokes against the target."""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

log = logging.getLogger("typeracer.alignment")

_RLE_TOKEN = re.compile(r"(\d*)([msd])")


class EditKind(str, Enum):
    """Kind of an edit operation; the value is its RLE code."""

    MATCH = "m"
    SUBSTITUTE = "s"
    DELETE = "d"


@dataclass(frozen=True)
class EditOp:
    """Classification of one committed character."""
    kind: EditKind
    char: str
    overlap_space: bool = False  # space typed over a non-space target

    @property
    def is_match(self) -> bool:
        return self.kind == EditKind.MATCH


def classify(target_char: Optional[str], input_char: str) -> EditOp:
    """Classify a typed character against the expected one.

    Args:
        target_char: Expected character, None if input ran past the target
        input_char: Typed character

    Returns:
        EditOp for the typed character
    """
    if target_char is None:
        return EditOp(EditKind.DELETE, input_char)
    if target_char == input_char:
        return EditOp(EditKind.MATCH, input_char)
    if input_char == ' ':
        return EditOp(EditKind.SUBSTITUTE, input_char, overlap_space=True)
    return EditOp(EditKind.SUBSTITUTE, input_char)


def decode_rle(encoded: str) -> List[EditKind]:
    """Expand an RLE string back to one kind per position.

    Args:
        encoded: String produced by AlignmentRecorder.run_length_encode

    Returns:
        List of EditKind

    Raises:
        ValueError: If the string is not a valid encoding
    """
    kinds: List[EditKind] = []
    pos = 0
    while pos < len(encoded):
        match = _RLE_TOKEN.match(encoded, pos)
        if not match:
            raise ValueError(f"invalid RLE at position {pos}: {encoded!r}")
        count_str, code = match.groups()
        count = int(count_str) if count_str else 1
        if count < 1:
            raise ValueError(f"invalid run length {count} at position {pos}")
        kinds.extend([EditKind(code)] * count)
        pos = match.end()
    return kinds


class AlignmentRecorder:
    """Append-only trace of edit operations, one per committed input character."""

    def __init__(self):
        self.ops: List[EditOp] = []
        self.matches = 0
        self.mismatches = 0

    def __len__(self) -> int:
        return len(self.ops)

    def append_op(self, op: EditOp) -> None:
        """Append an operation to the trace."""
        self.ops.append(op)
        if op.is_match:
            self.matches += 1
        else:
            self.mismatches += 1

    def record(self, target_char: Optional[str], input_char: str) -> EditOp:
        """Classify a typed character and append it.

        Returns:
            The appended EditOp
        """
        op = classify(target_char, input_char)
        self.append_op(op)
        return op

    def trim(self) -> str:
        """Remove the most recent operation.

        Returns:
            The character of the removed operation

        Raises:
            IndexError: If the trace is empty
        """
        op = self.ops.pop()
        if op.is_match:
            self.matches -= 1
        else:
            self.mismatches -= 1
        return op.char

    def accuracy(self) -> float:
        """Matches over all classified characters (0.0 when nothing is typed)."""
        total = self.matches + self.mismatches
        if total == 0:
            return 0.0
        return self.matches / total

    def kinds(self) -> List[EditKind]:
        return [op.kind for op in self.ops]

    def slice(self, start: int, end: int) -> List[EditOp]:
        """Operations for positions [start, end)."""
        return self.ops[start:end]

    def raw_string(self) -> str:
        """Characters as they were committed."""
        return ''.join(op.char for op in self.ops)

    def run_length_encode(self) -> str:
        """Encode the kind sequence, e.g. match, sub, 3 matches -> 'ms3m'."""
        parts = []
        run_kind: Optional[EditKind] = None
        run_length = 0

        for op in self.ops:
            if op.kind == run_kind:
                run_length += 1
                continue
            if run_kind is not None:
                parts.append(_encode_run(run_kind, run_length))
            run_kind = op.kind
            run_length = 1

        if run_kind is not None:
            parts.append(_encode_run(run_kind, run_length))

        return ''.join(parts)

    def reset(self) -> None:
        self.ops = []
        self.matches = 0
        self.mismatches = 0


def _encode_run(kind: EditKind, length: int) -> str:
    if length > 1:
        return f"{length}{kind.value}"
    return kind.value
