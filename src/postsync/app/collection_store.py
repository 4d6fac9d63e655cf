"""Collection store — the authoritative in-memory copy of records.

// [LAW:one-source-of-truth] The snapshot tuple lives here and nowhere else.
// [LAW:one-way-deps] No gateway imports. No view-store imports.

All mutators are synchronous and total: a missing id returns False and
leaves the snapshot untouched. Every effective change publishes
``last_change`` = (sequence, kind) so view-state rules can react to the
kind of change without being called from mutation sites.
"""

from __future__ import annotations

from collections.abc import Iterable

from snarfx import Observable, transaction

from postsync.core.records import Record

CHANGE_NONE = "none"
CHANGE_REPLACE = "replace"
CHANGE_INSERT = "insert"
CHANGE_UPDATE = "update"
CHANGE_REMOVE = "remove"


class CollectionStore:
    """Ordered records in insertion order (last fetch, then mutations)."""

    def __init__(self, records: Iterable[Record] = ()):
        self._records: Observable[tuple[Record, ...]] = Observable(tuple(records))
        self._sequence = 0
        self.last_change: Observable[tuple[int, str]] = Observable((0, CHANGE_NONE))

    def get_snapshot(self) -> tuple[Record, ...]:
        """Current records. Tracked when read inside a computed or reaction."""
        return self._records.get()

    def __len__(self) -> int:
        return len(self._records.get())

    def find_by_id(self, record_id: int) -> Record | None:
        return next((r for r in self._records.get() if r.id == record_id), None)

    def contains(self, record_id: int) -> bool:
        return self.find_by_id(record_id) is not None

    # ─── Mutators ─────────────────────────────────────────────────────

    def replace(self, records: Iterable[Record]) -> None:
        """Swap in a whole new snapshot (fetch result)."""
        self._commit(tuple(records), CHANGE_REPLACE)

    def insert_front(self, record: Record) -> None:
        """Most-recent-first: created records go to index 0."""
        self._commit((record, *self._records.get()), CHANGE_INSERT)

    def replace_by_id(self, record_id: int, record: Record) -> bool:
        current = self._records.get()
        for index, existing in enumerate(current):
            if existing.id == record_id:
                updated = current[:index] + (record,) + current[index + 1:]
                self._commit(updated, CHANGE_UPDATE)
                return True
        return False

    def remove_by_id(self, record_id: int) -> bool:
        current = self._records.get()
        kept = tuple(r for r in current if r.id != record_id)
        if len(kept) == len(current):
            return False
        self._commit(kept, CHANGE_REMOVE)
        return True

    def _commit(self, records: tuple[Record, ...], kind: str) -> None:
        # Reactions see the new snapshot and the change kind together.
        self._sequence += 1
        with transaction():
            self._records.set(records)
            self.last_change.set((self._sequence, kind))


class OperationStatus:
    """Loading/error state shared by every operation on one collection.

    Last writer wins: whichever operation settles last decides both fields.
    ``in_flight`` and ``peak_in_flight`` expose overlapping operations; they
    never gate anything.
    """

    def __init__(self):
        self.loading: Observable[bool] = Observable(False)
        self.last_error: Observable[Exception | None] = Observable(None)
        self.in_flight: Observable[int] = Observable(0)
        self.peak_in_flight = 0
        self.overlap_count = 0

    @property
    def is_loading(self) -> bool:
        return self.loading.get()

    @property
    def error(self) -> Exception | None:
        return self.last_error.get()

    @property
    def overlapping(self) -> bool:
        return self.in_flight.get() > 1

    def begin(self) -> None:
        active = self.in_flight.get() + 1
        if active > 1:
            self.overlap_count += 1
        self.peak_in_flight = max(self.peak_in_flight, active)
        with transaction():
            self.in_flight.set(active)
            self.loading.set(True)
            self.last_error.set(None)

    def settle(self, error: Exception | None = None) -> None:
        with transaction():
            self.last_error.set(error)
            self.loading.set(False)
            self.in_flight.set(max(0, self.in_flight.get() - 1))
