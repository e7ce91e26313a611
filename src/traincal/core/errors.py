"""Exceptions raised by the training program core."""


class TraincalError(Exception):
    """Base error for traincal."""


class NoRangeError(TraincalError):
    """Raised when an operation needs a defined date range and there is none."""

    def __init__(self, message: str = "No date range defined."):
        super().__init__(message)


class ProgramFormatError(TraincalError):
    """Raised when a saved program document cannot be parsed at all."""
