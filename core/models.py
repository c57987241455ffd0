"""Pydantic models for typing racer data structures."""

from pydantic import BaseModel, Field, field_validator


class WordList(BaseModel):
    """Named list of words used to build test targets.

    The list may be empty (a mined list of a clean history); starting a
    session on an empty list fails with EmptyWordBank.
    """

    name: str = Field(..., min_length=1, description="Word list name")
    words: list[str] = Field(..., description="Words to draw from")
    no_lazy_mode: bool = Field(
        default=False, alias="noLazyMode", description="Disable lazy mode for this list"
    )
    ordered_by_frequency: bool = Field(
        default=False,
        alias="orderedByFrequency",
        description="Whether words are sorted by frequency",
    )

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("words")
    @classmethod
    def validate_words(cls, v):
        """Reject empty words and words containing whitespace."""
        for word in v:
            if not word or any(c.isspace() for c in word):
                raise ValueError(f"invalid word {word!r}")
        return v


class GameStats(BaseModel):
    """Aggregate counters across all sessions."""

    total: int = Field(default=0, ge=0, description="Total finished tests")
    total_completed: int = Field(default=0, ge=0, description="Completed tests")
    total_attempted: int = Field(default=0, ge=0, description="Started tests")
    last_test_id: int = Field(default=0, ge=0, description="Id of last stored test")

    class Config:
        extra = "ignore"


class MetricSample(BaseModel):
    """One metrics sample taken on a tick."""

    tick: int = Field(..., description="Tick number (1-based)")
    cps: int = Field(..., description="Characters committed since previous tick")
    accuracy: float = Field(..., description="Running accuracy (0.0-1.0)")

    class Config:
        extra = "ignore"


class SessionRecord(BaseModel):
    """Summary of one completed typing session."""

    id: int | None = Field(default=None, description="Storage row id")
    created_at_ms: int = Field(..., description="Completion timestamp in milliseconds")
    test_name: str = Field(..., description="Word list the target was drawn from")
    mode: str = Field(..., description="'time' or 'words'")
    test_duration: int = Field(..., description="Configured duration in seconds")
    test_size: int = Field(..., description="Number of words in the target")
    allow_backspace: bool = Field(default=False, description="Backspace enabled")
    target: str = Field(..., description="Target text")
    input: str = Field(..., description="Committed input")
    accuracy: float = Field(..., ge=0.0, le=1.0, description="Final accuracy (0.0-1.0)")
    cps: float = Field(..., description="Mean characters per tick")
    wpm: float = Field(..., description="Words per minute derived from cps")
    rle: str = Field(..., description="Run-length encoded alignment kinds")
    raw_input: str = Field(default="", description="Characters recorded in the alignment")
    sample_rate: float = Field(default=1.0, gt=0, description="Seconds per tick")
    cps_samples: list[int] = Field(default_factory=list, description="CPS per tick")
    accuracy_samples: list[float] = Field(
        default_factory=list, description="Accuracy per tick"
    )

    class Config:
        extra = "ignore"
