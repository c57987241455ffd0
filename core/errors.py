"""Exception hierarchy for the typing racer engine."""


class RacerError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(RacerError):
    """Session cannot start with the given configuration."""


class EmptyWordBank(ConfigurationError):
    """Word bank has no words to draw from."""


class InvalidTestSize(ConfigurationError):
    """Requested test size (or line width) is not positive."""


class UnknownWordList(ConfigurationError):
    """Configured word list is not in the word bank."""


class WordBankLoadError(ConfigurationError):
    """One of the word list files could not be loaded."""


class StorageError(RacerError):
    """Durable write or read failed."""


class InvariantViolation(RacerError):
    """Internal index bookkeeping went out of its documented bounds."""


__all__ = [
    "RacerError",
    "ConfigurationError",
    "EmptyWordBank",
    "InvalidTestSize",
    "UnknownWordList",
    "WordBankLoadError",
    "StorageError",
    "InvariantViolation",
]
