"""Error taxonomy shared by the form, roster and store adapter."""

from __future__ import annotations


class TrackerError(RuntimeError):
    """Base class for every failure the tracker reports to the user."""


class ValidationError(TrackerError):
    """Raised when form data fails validation, before any store call."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class StoreError(TrackerError):
    """Raised by the store adapter for any backend failure."""


class DuplicateError(StoreError):
    """Raised when the store rejects an insert on a uniqueness constraint."""


class SubmissionError(TrackerError):
    """Raised when a service entry could not be saved."""


class AddError(TrackerError):
    """Raised when a therapist could not be added for a non-duplicate reason."""


class RemoveError(TrackerError):
    """Raised when a therapist could not be removed."""


class FetchError(TrackerError):
    """Recorded when a load from the store fails; never blocks the view."""
