"""Exceptions raised inside the storage layer."""


class VocabTrackException(Exception):
    """Base exception for all progress-tracker errors."""

    pass


class StoreError(VocabTrackException):
    """Raised when the key-value store cannot read, decode or write a value.

    Services catch it at their public boundary and fall back to defaults.
    """

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key
