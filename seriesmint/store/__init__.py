"""
seriesmint.store
================

Light abstractions for the storage backends that make the series registry,
mint ledger, role relation and event log durable.

Backends are pluggable (in-memory, SQLite). Higher layers depend only on the
:class:`KeyValue` protocol below; only bytes go in/out.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Iterable, Optional, Protocol, Tuple


class KeyValue(Protocol):
    """Minimal byte-oriented KV interface with all-or-nothing transactions."""

    def get(self, key: bytes) -> Optional[bytes]:
        """Return value for key, or None if missing."""
        ...

    def put(self, key: bytes, value: bytes) -> None:
        """Insert or replace key with value."""
        ...

    def delete(self, key: bytes) -> None:
        """Remove key if present (no-op if absent)."""
        ...

    def has(self, key: bytes) -> bool:
        ...

    def iter_prefix(self, prefix: bytes) -> Iterable[Tuple[bytes, bytes]]:
        """Yield (key, value) pairs whose keys start with prefix, ascending by key."""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """
        Group writes; commit on success, roll back every write on error.
        Nested transactions join the outermost one.
        """
        ...

    def close(self) -> None:
        ...


__all__ = ["KeyValue"]
