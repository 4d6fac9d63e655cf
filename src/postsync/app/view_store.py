"""View store — query parameters, derived view and pagination rules. RELOADABLE.

// [LAW:one-source-of-truth] Query parameters live only in this store.
// [LAW:single-enforcer] Page corrections happen only in the reactions below;
// setters change parameters and the reactions repair the page.

Rules (each a reaction keyed on its trigger):
    search / owner filter set      → page := 1
    page size changed              → page := max(1, total_pages) if past the end
    collection replaced / inserted → page := 1
    record removed, page now empty → page := page - 1 (when page > 1)
    record updated, page past end  → page := max(1, total_pages)
Sort changes never touch the page.
"""

from __future__ import annotations

import logging

from snarfx import computed, reaction, transaction
from snarfx.hot_reload import HotReloadStore

import postsync.app.collection_store as cs
from postsync.core.query import (
    DEFAULT_PAGE_SIZE,
    DerivedView,
    QueryParams,
    SortDirection,
    SortKey,
    compute_view,
    filter_and_sort,
    paginate,
)

logger = logging.getLogger(__name__)

# [LAW:one-source-of-truth] Defaults for a fresh session.
# Sort key/direction are stored as their string values; enum identity changes on reload.
SCHEMA: dict[str, object] = {
    "query:search": "",
    "query:owner": None,
    "query:sort_key": SortKey.ID.value,
    "query:sort_dir": SortDirection.ASCENDING.value,
    "query:page": 1,
    "query:page_size": DEFAULT_PAGE_SIZE,
    # Bumped by the search/owner setters so re-setting an equal value still resets the page.
    "query:filter_rev": 0,
}


def create(collection: cs.CollectionStore, initial_overrides: dict | None = None):
    """Create the view store bound to ``collection``."""
    initial = dict(SCHEMA)
    if initial_overrides:
        initial.update(initial_overrides)
    store = HotReloadStore(SCHEMA, initial=initial)
    store.collection = collection

    # [LAW:one-source-of-truth] Everything but pagination. Page moves do not invalidate it.
    @computed
    def filtered():
        params = QueryParams(
            search=store.get("query:search"),
            owner=store.get("query:owner"),
            sort_key=SortKey(store.get("query:sort_key")),
            sort_dir=SortDirection(store.get("query:sort_dir")),
        )
        return filter_and_sort(collection.get_snapshot(), params)

    store.filtered = filtered

    @computed
    def view():
        return paginate(
            store.filtered.get(),
            store.get("query:page"),
            store.get("query:page_size"),
        )

    store.view = view
    return store


def setup_reactions(store, context=None):
    """Register pagination rules. Returns list of disposers.

    Called on create and on hot-reload reconcile.
    context: optional dict; "on_view" is called with each new DerivedView.
    """
    disposers = [
        reaction(
            lambda: (
                store.get("query:search"),
                store.get("query:owner"),
                store.get("query:filter_rev"),
            ),
            lambda _: _reset_page(store, "filter changed"),
        ),
        reaction(
            lambda: store.get("query:page_size"),
            lambda _: _clamp_page(store, "page size changed"),
        ),
        reaction(
            lambda: store.collection.last_change.get(),
            lambda change: _on_collection_change(store, change[1]),
        ),
    ]

    on_view = (context or {}).get("on_view")
    if on_view is not None:
        disposers.append(reaction(
            lambda: store.view.get(),
            on_view,
            fire_immediately=True,
        ))

    return disposers


# ─── Reads ───────────────────────────────────────────────────────────────────


def read_params(store) -> QueryParams:
    return QueryParams(
        search=store.get("query:search"),
        owner=store.get("query:owner"),
        sort_key=SortKey(store.get("query:sort_key")),
        sort_dir=SortDirection(store.get("query:sort_dir")),
        page=store.get("query:page"),
        page_size=store.get("query:page_size"),
    )


def fresh_view(store) -> DerivedView:
    """Recompute from current values, bypassing the cached computed.

    Reaction effects use this: they can run before the computed is invalidated.
    """
    return compute_view(store.collection.get_snapshot(), read_params(store))


# ─── Rules ───────────────────────────────────────────────────────────────────


def _set_page(store, page: int, reason: str) -> None:
    current = store.get("query:page")
    if page != current:
        logger.debug("page %d -> %d (%s)", current, page, reason)
        store.set("query:page", page)


def _reset_page(store, reason: str) -> None:
    _set_page(store, 1, reason)


def _clamp_page(store, reason: str) -> None:
    total = fresh_view(store).total_pages
    if store.get("query:page") > total:
        _set_page(store, max(1, total), reason)


def _step_back_if_empty(store, reason: str) -> None:
    page = store.get("query:page")
    if page > 1 and not fresh_view(store).items:
        _set_page(store, page - 1, reason)


def _on_collection_change(store, kind: str) -> None:
    # // [LAW:dataflow-not-control-flow] Dispatch on the change kind the collection published.
    if kind in (cs.CHANGE_REPLACE, cs.CHANGE_INSERT):
        _reset_page(store, f"collection {kind}")
    elif kind == cs.CHANGE_REMOVE:
        _step_back_if_empty(store, "record removed")
    elif kind == cs.CHANGE_UPDATE:
        _clamp_page(store, "record updated")


# ─── Setters ─────────────────────────────────────────────────────────────────


def set_search(store, text: str) -> None:
    if not isinstance(text, str):
        raise ValueError(f"search text must be a string, got {type(text).__name__}")
    store.update({
        "query:search": text,
        "query:filter_rev": store.get("query:filter_rev") + 1,
    })


def set_owner_filter(store, owner: int | None) -> None:
    if owner is not None and (not isinstance(owner, int) or isinstance(owner, bool)):
        raise ValueError(f"owner filter must be an integer or None, got {owner!r}")
    store.update({
        "query:owner": owner,
        "query:filter_rev": store.get("query:filter_rev") + 1,
    })


def set_sort(store, key, direction=None) -> None:
    values = {"query:sort_key": SortKey(key).value}
    if direction is not None:
        values["query:sort_dir"] = SortDirection(direction).value
    store.update(values)


def toggle_sort_direction(store) -> None:
    current = SortDirection(store.get("query:sort_dir"))
    flipped = (
        SortDirection.DESCENDING
        if current is SortDirection.ASCENDING
        else SortDirection.ASCENDING
    )
    store.set("query:sort_dir", flipped.value)


def set_page_size(store, size: int) -> None:
    if not isinstance(size, int) or isinstance(size, bool) or size < 1:
        raise ValueError(f"page size must be a positive integer, got {size!r}")
    store.set("query:page_size", size)


def set_page(store, page: int) -> int:
    """Move to ``page``, clamped to the pages that exist. Returns the page set."""
    if not isinstance(page, int) or isinstance(page, bool):
        raise ValueError(f"page must be an integer, got {page!r}")
    total = fresh_view(store).total_pages
    target = min(max(1, page), total)
    store.set("query:page", target)
    return target


def next_page(store) -> int:
    return set_page(store, store.get("query:page") + 1)


def prev_page(store) -> int:
    return set_page(store, store.get("query:page") - 1)


def clear_search(store) -> None:
    with transaction():
        set_search(store, "")
        store.set("query:page", 1)


def clear_filter(store) -> None:
    with transaction():
        set_owner_filter(store, None)
        store.set("query:page", 1)


def clear_all_filters(store) -> None:
    """Search, owner, sort back to defaults; page size is kept."""
    with transaction():
        set_search(store, SCHEMA["query:search"])
        set_owner_filter(store, SCHEMA["query:owner"])
        store.update({
            "query:sort_key": SCHEMA["query:sort_key"],
            "query:sort_dir": SCHEMA["query:sort_dir"],
            "query:page": 1,
        })
