"""Error taxonomy for the matching engine and review workflow."""

from __future__ import annotations


class HotelMatchError(Exception):
    """Base class for all hotelmatch errors."""


class ValidationError(HotelMatchError):
    """A record is missing required identity fields or has malformed values."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(HotelMatchError):
    """A referenced supplier hotel, master hotel or candidate does not exist."""


class ConflictError(HotelMatchError):
    """A mutating transition lost a race or hit a state it may not change.

    Callers should refresh the record and retry; the engine never retries.
    """


class PersistenceError(HotelMatchError):
    """The underlying store failed; the transaction was rolled back."""
