"""Test harness for postsync.

Re-exports all public API for convenient imports:
    from tests.harness import FakeGateway, make_records, ...
"""

from tests.harness.builders import make_draft, make_record, make_records
from tests.harness.gateway import FakeGateway

__all__ = [
    "FakeGateway",
    "make_draft",
    "make_record",
    "make_records",
]
