"""Error taxonomy shared by gateways and the mutation engine.

// [LAW:one-source-of-truth] Every failure a Result can carry is a RecordError.
Gateways raise these; the mutation engine converts them into Result values.
"""

from __future__ import annotations


class RecordError(Exception):
    """Base class for every failure surfaced through a Result."""

    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        return self.message


class NotFoundError(RecordError):
    """The remote reports that the identifier does not exist."""

    def __init__(self, message: str = "record not found", *, record_id: int | None = None):
        super().__init__(message, status=404)
        self.record_id = record_id


class TransportError(RecordError):
    """Network or connectivity failure; no HTTP status was received."""


class ServerError(RecordError):
    """The remote answered with 5xx or a payload that could not be decoded."""


class HttpStatusError(RecordError):
    """Any other non-2xx answer (4xx other than 404)."""


class ValidationError(RecordError):
    """A mutation was rejected before any network call."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field
