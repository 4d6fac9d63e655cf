"""Session — one explicitly constructed context per client session.

Owns the collection, its operation status, the view store and the mutation
engine. Nothing here is module-global: two sessions never share state.

Consumers read ``view``, ``is_loading`` and ``last_error``; they call the
engine operations and the view-store setters exposed below. They never
mutate the collection directly.
"""

from __future__ import annotations

from collections.abc import Callable

import postsync.app.view_store as view_store
from postsync.app.collection_store import CollectionStore, OperationStatus
from postsync.app.mutations import ApplyStrategy, MutationEngine
from postsync.core.query import DerivedView, QueryParams, owner_counts
from postsync.core.records import Record, RecordDraft
from postsync.core.result import Result
from postsync.io.gateway import HttpGateway, RemoteGateway
from postsync.io.settings import ClientConfig


class Session:
    def __init__(
        self,
        gateway: RemoteGateway,
        *,
        page_size: int | None = None,
        strategy: ApplyStrategy = ApplyStrategy.SERVER,
        on_view: Callable[[DerivedView], None] | None = None,
    ):
        self.collection = CollectionStore()
        self.status = OperationStatus()
        overrides = {"query:page_size": page_size} if page_size is not None else None
        self.store = view_store.create(self.collection, initial_overrides=overrides)
        self._context = {"on_view": on_view} if on_view is not None else None
        self.store.reconcile(view_store.SCHEMA, self._setup_reactions)
        self.engine = MutationEngine(gateway, self.collection, self.status, strategy)

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs) -> "Session":
        gateway = HttpGateway(
            config.base_url,
            timeout=config.timeout,
            owner_field=config.owner_field,
        )
        return cls(
            gateway,
            page_size=config.page_size,
            strategy=ApplyStrategy(config.apply_strategy),
            **kwargs,
        )

    def _setup_reactions(self, store):
        return view_store.setup_reactions(store, self._context)

    def dispose(self) -> None:
        """Stop all reactions. The session's data stays readable."""
        self.store.dispose()

    # ─── Read-only projections ────────────────────────────────────────

    @property
    def view(self) -> DerivedView:
        return self.store.view.get()

    @property
    def params(self) -> QueryParams:
        return view_store.read_params(self.store)

    @property
    def is_loading(self) -> bool:
        return self.status.is_loading

    @property
    def last_error(self) -> Exception | None:
        return self.status.error

    @property
    def records(self) -> tuple[Record, ...]:
        return self.collection.get_snapshot()

    def owner_counts(self) -> dict[int, int]:
        return owner_counts(self.collection.get_snapshot())

    # ─── Operations ───────────────────────────────────────────────────

    async def fetch_all(self) -> Result[tuple[Record, ...]]:
        return await self.engine.fetch_all()

    async def fetch_by_id(self, record_id: int) -> Result[Record]:
        return await self.engine.fetch_by_id(record_id)

    async def create(self, draft: RecordDraft) -> Result[Record]:
        return await self.engine.create(draft)

    async def update(self, record: Record) -> Result[Record]:
        return await self.engine.update(record)

    async def delete(self, record_id: int) -> Result[None]:
        return await self.engine.delete(record_id)

    # ─── Query parameters ─────────────────────────────────────────────

    def set_search(self, text: str) -> None:
        view_store.set_search(self.store, text)

    def set_owner_filter(self, owner: int | None) -> None:
        view_store.set_owner_filter(self.store, owner)

    def set_sort(self, key, direction=None) -> None:
        view_store.set_sort(self.store, key, direction)

    def toggle_sort_direction(self) -> None:
        view_store.toggle_sort_direction(self.store)

    def set_page_size(self, size: int) -> None:
        view_store.set_page_size(self.store, size)

    def set_page(self, page: int) -> int:
        return view_store.set_page(self.store, page)

    def next_page(self) -> int:
        return view_store.next_page(self.store)

    def prev_page(self) -> int:
        return view_store.prev_page(self.store)

    def clear_search(self) -> None:
        view_store.clear_search(self.store)

    def clear_filter(self) -> None:
        view_store.clear_filter(self.store)

    def clear_all_filters(self) -> None:
        view_store.clear_all_filters(self.store)
