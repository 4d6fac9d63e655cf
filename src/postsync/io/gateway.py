"""Remote gateway — CRUD against a record endpoint.

RemoteGateway is the contract the mutation engine consumes. HttpGateway is
the stock implementation: blocking urllib calls moved off the event loop with
asyncio.to_thread, so callers suspend only at the network boundary.

// [LAW:single-enforcer] HTTP status → error taxonomy mapping lives only in _raise_for.
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.request
from typing import Protocol

from postsync.core.errors import (
    HttpStatusError,
    NotFoundError,
    ServerError,
    TransportError,
)
from postsync.core.records import (
    Record,
    RecordDraft,
    draft_to_json,
    record_from_json,
    record_to_json,
    records_from_json,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://jsonplaceholder.typicode.com/posts"
DEFAULT_TIMEOUT = 30.0


class RemoteGateway(Protocol):
    async def list(self) -> tuple[Record, ...]: ...

    async def get(self, record_id: int) -> Record: ...

    async def create(self, draft: RecordDraft) -> Record: ...

    async def replace(self, record_id: int, record: Record) -> Record: ...

    async def remove(self, record_id: int) -> None: ...


def _raise_for(status: int, url: str, record_id: int | None = None) -> None:
    if 200 <= status < 300:
        return
    if status == 404:
        raise NotFoundError(f"{url}: not found (404)", record_id=record_id)
    if status >= 500:
        raise ServerError(f"{url}: server error ({status})", status=status)
    raise HttpStatusError(f"{url}: HTTP {status}", status=status)


class HttpGateway:
    """JSON-over-HTTP gateway for a REST collection endpoint."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        owner_field: str = "userId",
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.owner_field = owner_field

    def _url(self, record_id: int | None = None) -> str:
        return self.base_url if record_id is None else f"{self.base_url}/{record_id}"

    def _request(self, method: str, url: str, body: dict | None = None, record_id: int | None = None):
        """Blocking request; returns decoded JSON (None for an empty body)."""
        data = None
        headers = {"accept": "application/json"}
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["content-type"] = "application/json; charset=utf-8"
        request = urllib.request.Request(url, data=data, headers=headers, method=method)
        logger.debug("%s %s", method, url)
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                status = response.status
                raw = response.read()
        except urllib.error.HTTPError as e:
            _raise_for(e.code, url, record_id)
            raise HttpStatusError(f"{url}: HTTP {e.code}", status=e.code) from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        _raise_for(status, url, record_id)
        if not raw.strip():
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ServerError(f"{url}: response is not valid JSON", status=status) from e

    async def _call(self, method: str, url: str, body: dict | None = None, record_id: int | None = None):
        return await asyncio.to_thread(self._request, method, url, body, record_id)

    def _decode(self, decoder, payload, url: str):
        try:
            return decoder(payload, self.owner_field)
        except ValueError as e:
            raise ServerError(f"{url}: unexpected payload: {e}") from e

    async def list(self) -> tuple[Record, ...]:
        url = self._url()
        return self._decode(records_from_json, await self._call("GET", url), url)

    async def get(self, record_id: int) -> Record:
        url = self._url(record_id)
        return self._decode(record_from_json, await self._call("GET", url, record_id=record_id), url)

    async def create(self, draft: RecordDraft) -> Record:
        url = self._url()
        payload = await self._call("POST", url, draft_to_json(draft, self.owner_field))
        return self._decode(record_from_json, payload, url)

    async def replace(self, record_id: int, record: Record) -> Record:
        url = self._url(record_id)
        payload = await self._call(
            "PUT", url, record_to_json(record, self.owner_field), record_id=record_id
        )
        return self._decode(record_from_json, payload, url)

    async def remove(self, record_id: int) -> None:
        await self._call("DELETE", self._url(record_id), record_id=record_id)
