"""Record value types, JSON codec and pre-flight validation.

Records are immutable; an update replaces the whole value.
Wire shape: {"id": int, "title": str, "body": str, "ownerId": int}.
The owner key name is configurable because the default endpoint calls it "userId".
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from postsync.core.errors import ValidationError

OWNER_FIELD = "ownerId"
# Accepted on decode regardless of the configured owner field.
_OWNER_ALIASES = ("ownerId", "userId")


@dataclass(frozen=True)
class RecordDraft:
    """Fields a caller supplies on create; the server assigns the id."""

    title: str
    body: str
    owner_id: int


@dataclass(frozen=True)
class Record:
    id: int
    title: str
    body: str
    owner_id: int

    def with_fields(self, **changes) -> "Record":
        return replace(self, **changes)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def record_from_json(payload, owner_field: str = OWNER_FIELD) -> Record:
    """Decode one wire object. Raises ValueError on a wrongly shaped payload."""
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    owner = payload.get(owner_field)
    if owner is None:
        owner = next((payload[k] for k in _OWNER_ALIASES if k in payload), None)
    record_id = payload.get("id")
    if not _is_int(record_id):
        raise ValueError(f"record id must be an integer, got {record_id!r}")
    if not _is_int(owner):
        raise ValueError(f"record {record_id}: owner must be an integer, got {owner!r}")
    title = payload.get("title", "")
    body = payload.get("body", "")
    for name, value in (("title", title), ("body", body)):
        if not isinstance(value, str):
            raise ValueError(f"record {record_id}: {name} must be a string, got {value!r}")
    return Record(id=record_id, title=title, body=body, owner_id=owner)


def records_from_json(payload, owner_field: str = OWNER_FIELD) -> tuple[Record, ...]:
    if not isinstance(payload, list):
        raise ValueError(f"expected a JSON array, got {type(payload).__name__}")
    return tuple(record_from_json(item, owner_field) for item in payload)


def draft_to_json(draft: RecordDraft, owner_field: str = OWNER_FIELD) -> dict:
    return {"title": draft.title, "body": draft.body, owner_field: draft.owner_id}


def record_to_json(record: Record, owner_field: str = OWNER_FIELD) -> dict:
    return {
        "id": record.id,
        "title": record.title,
        "body": record.body,
        owner_field: record.owner_id,
    }


# ─── Validation ──────────────────────────────────────────────────────────────


def validate_draft(draft) -> RecordDraft:
    """Check the fields every write needs. Raises ValidationError."""
    title = getattr(draft, "title", None)
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title is required", field="title")
    body = getattr(draft, "body", None)
    if not isinstance(body, str):
        raise ValidationError("body must be a string", field="body")
    owner_id = getattr(draft, "owner_id", None)
    if not _is_int(owner_id) or owner_id < 1:
        raise ValidationError("owner_id must be a positive integer", field="owner_id")
    return draft


def validate_record(record) -> Record:
    if not isinstance(record, Record):
        raise ValidationError(f"expected a Record, got {type(record).__name__}")
    if not _is_int(record.id) or record.id < 1:
        raise ValidationError("id must be a positive integer", field="id")
    validate_draft(record)
    return record
