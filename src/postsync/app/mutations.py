"""Mutation engine — fetch/create/update/delete against the remote gateway.

Every operation follows one template (_run):
    status.begin()              loading on, last error cleared
    validate, await gateway     suspends only here
    apply to collection         on success only
    status.settle(error)        always, on every exit path

Operations return Result values and never raise across this boundary.
There is no locking: overlapping operations each apply their result when
they resolve, in resolution order. status.in_flight exposes the overlap.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Awaitable, Callable
from enum import Enum

from postsync.app.collection_store import CollectionStore, OperationStatus
from postsync.core.errors import RecordError, ServerError, ValidationError
from postsync.core.records import Record, RecordDraft, validate_draft, validate_record
from postsync.core.result import Result
from postsync.io.gateway import RemoteGateway

logger = logging.getLogger(__name__)


class ApplyStrategy(str, Enum):
    """What a successful write puts into the collection."""

    SERVER = "server"  # the payload the server echoed back
    DRAFT = "draft"    # the caller's input (create keeps the server-assigned id)


def _check_id(record_id) -> int:
    if not isinstance(record_id, int) or isinstance(record_id, bool) or record_id < 1:
        raise ValidationError(f"id must be a positive integer, got {record_id!r}", field="id")
    return record_id


class MutationEngine:
    def __init__(
        self,
        gateway: RemoteGateway,
        collection: CollectionStore,
        status: OperationStatus,
        strategy: ApplyStrategy = ApplyStrategy.SERVER,
    ):
        self.gateway = gateway
        self.collection = collection
        self.status = status
        self.strategy = ApplyStrategy(strategy)

    async def _run(self, name: str, operation: Callable[[], Awaitable]) -> Result:
        error: RecordError | None = None
        self.status.begin()
        logger.debug("%s started (%d in flight)", name, self.status.in_flight.get())
        try:
            return Result.ok(await operation())
        except RecordError as e:
            error = e
        except Exception as e:
            logger.exception("%s raised an unexpected error", name)
            error = RecordError(f"{name} failed: {e}")
            error.__cause__ = e
        finally:
            self.status.settle(error)
        logger.warning("%s failed: %s", name, error)
        return Result.fail(error)

    # ─── Reads ────────────────────────────────────────────────────────

    async def fetch_all(self) -> Result[tuple[Record, ...]]:
        """Replace the whole snapshot with the remote list."""

        async def operation():
            records = tuple(await self.gateway.list())
            repeated = sorted(i for i, n in Counter(r.id for r in records).items() if n > 1)
            if repeated:
                raise ServerError(f"list response repeats ids {repeated}")
            self.collection.replace(records)
            return records

        return await self._run("fetch_all", operation)

    async def fetch_by_id(self, record_id: int) -> Result[Record]:
        """Read one record. The snapshot is not modified."""

        async def operation():
            return await self.gateway.get(_check_id(record_id))

        return await self._run(f"fetch_by_id({record_id})", operation)

    # ─── Writes ───────────────────────────────────────────────────────

    async def create(self, draft: RecordDraft) -> Result[Record]:
        """Create remotely, then insert at the front of the collection."""

        async def operation():
            validate_draft(draft)
            echoed = await self.gateway.create(draft)
            # The demo endpoint hands out the same id for every create.
            if self.collection.contains(echoed.id):
                raise ServerError(f"create returned id {echoed.id}, which is already in the collection")
            record = echoed
            if self.strategy is ApplyStrategy.DRAFT:
                record = Record(id=echoed.id, title=draft.title, body=draft.body, owner_id=draft.owner_id)
            self.collection.insert_front(record)
            return record

        return await self._run("create", operation)

    async def update(self, record: Record) -> Result[Record]:
        """Replace a record wholesale with the server's representation."""

        async def operation():
            validate_record(record)
            if not self.collection.contains(record.id):
                raise ValidationError(f"record {record.id} is not in the collection", field="id")
            echoed = await self.gateway.replace(record.id, record)
            if echoed.id != record.id:
                raise ServerError(f"update of record {record.id} echoed id {echoed.id}")
            applied = record if self.strategy is ApplyStrategy.DRAFT else echoed
            self.collection.replace_by_id(record.id, applied)
            return applied

        return await self._run(f"update({getattr(record, 'id', None)})", operation)

    async def delete(self, record_id: int) -> Result[None]:
        """Delete remotely, then drop the record locally.

        The view store reacts to the removal and steps back a page when the
        current one is left empty.
        """

        async def operation():
            await self.gateway.remove(_check_id(record_id))
            self.collection.remove_by_id(record_id)
            return None

        return await self._run(f"delete({record_id})", operation)
