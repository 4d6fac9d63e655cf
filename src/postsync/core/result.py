"""Result value returned by every mutation engine operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from postsync.core.errors import RecordError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either ``success=True`` with ``data`` or ``success=False`` with ``error``.

    delete() succeeds with ``data=None``.
    """

    success: bool
    data: T | None = None
    error: RecordError | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> "Result[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: RecordError) -> "Result[T]":
        return cls(success=False, error=error)

    def unwrap(self) -> T | None:
        """Return data, or raise the carried error."""
        if not self.success:
            raise self.error
        return self.data
