"""
SQLite-backed KeyValue store for the series-mint subsystem.

Features
--------
- Simple byte-oriented KV: (key BLOB PRIMARY KEY, value BLOB NOT NULL)
- All-or-nothing writes via ``with kv.transaction(): ...`` (BEGIN IMMEDIATE)
- Prefix iteration using range scans [prefix, next_prefix(prefix))
- WAL journal, synchronous=NORMAL

The connection is opened with ``check_same_thread=False``; callers serialize
access (the engine holds its own lock around every store interaction).
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Generator, Iterable, Optional, Tuple

log = logging.getLogger(__name__)


def _ensure_dir(path: str) -> None:
    d = os.path.dirname(os.path.abspath(path))
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)


def _apply_pragmas(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA temp_store=MEMORY;")


def _init_schema(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv (
            key   BLOB PRIMARY KEY,
            value BLOB NOT NULL
        );
        """
    )


def _next_prefix(prefix: bytes) -> Optional[bytes]:
    """
    Smallest byte-string strictly greater than all keys starting with
    ``prefix``; None if no such bound exists (empty or all-0xFF prefix).
    """
    if not prefix:
        return None
    b = bytearray(prefix)
    for i in range(len(b) - 1, -1, -1):
        if b[i] != 0xFF:
            b[i] += 1
            return bytes(b[: i + 1])
    return None


class SQLiteKeyValue:
    """
    SQLite implementation of the KeyValue protocol.

    >>> kv = SQLiteKeyValue("/tmp/seriesmint.db")
    >>> with kv.transaction():
    ...     kv.put(b"hello", b"world")
    >>> kv.get(b"hello")
    b'world'
    >>> kv.close()
    """

    def __init__(self, path: str) -> None:
        self.path = path
        if path != ":memory:":
            _ensure_dir(path)
        # isolation_level=None -> autocommit; BEGIN/COMMIT are explicit.
        self._conn = sqlite3.connect(
            path, isolation_level=None, timeout=30.0, check_same_thread=False
        )
        if path != ":memory:":
            _apply_pragmas(self._conn)
        _init_schema(self._conn)
        self._depth = 0
        log.debug("sqlite: opened %s", path)

    def __enter__(self) -> "SQLiteKeyValue":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- KV API --------------------------------------------------------------

    def put(self, key: bytes, value: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or not isinstance(value, (bytes, bytearray)):
            raise TypeError("key and value must be bytes")
        self._conn.execute(
            "INSERT OR REPLACE INTO kv(key, value) VALUES(?, ?)", (bytes(key), bytes(value))
        )

    def get(self, key: bytes) -> Optional[bytes]:
        row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (bytes(key),)).fetchone()
        return bytes(row[0]) if row else None

    def has(self, key: bytes) -> bool:
        row = self._conn.execute("SELECT 1 FROM kv WHERE key = ?", (bytes(key),)).fetchone()
        return row is not None

    def delete(self, key: bytes) -> None:
        self._conn.execute("DELETE FROM kv WHERE key = ?", (bytes(key),))

    def iter_prefix(self, prefix: bytes) -> Iterable[Tuple[bytes, bytes]]:
        upper = _next_prefix(prefix)
        if upper is not None:
            sql = "SELECT key, value FROM kv WHERE key >= ? AND key < ? ORDER BY key ASC"
            args: Tuple[bytes, ...] = (prefix, upper)
        else:
            sql = "SELECT key, value FROM kv WHERE key >= ? ORDER BY key ASC"
            args = (prefix,)

        rows = self._conn.execute(sql, args).fetchall()
        for row in rows:
            k = bytes(row[0])
            if not k.startswith(prefix):
                break
            yield k, bytes(row[1])

    # --- Transactions --------------------------------------------------------

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """BEGIN IMMEDIATE; COMMIT on success, ROLLBACK on error. Nested calls join."""
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        self._conn.execute("BEGIN IMMEDIATE;")
        self._depth = 1
        try:
            yield
        except BaseException:
            self._conn.execute("ROLLBACK;")
            raise
        else:
            self._conn.execute("COMMIT;")
        finally:
            self._depth = 0

    def close(self) -> None:
        self._conn.close()


__all__ = ["SQLiteKeyValue"]
