"""
Open a KeyValue backend from a storage URI.

Supported:
  - ``memory://``               fresh in-process store
  - ``sqlite:///abs/path.db``   SQLite file (absolute path)
  - ``sqlite://rel/path.db``    SQLite file (relative path)
  - ``sqlite://:memory:``       SQLite in-memory database
"""

from __future__ import annotations

from . import KeyValue
from .memory import MemoryKeyValue
from .sqlite import SQLiteKeyValue

SCHEMES = ("memory", "sqlite")


def sqlite_path(uri: str) -> str:
    rest = uri[len("sqlite://"):]
    if not rest:
        raise ValueError("sqlite URI needs a path, e.g. sqlite:///data/series.db")
    return rest


def open_store(uri: str) -> KeyValue:
    scheme = uri.split("://", 1)[0] if "://" in uri else ""
    if scheme == "memory":
        return MemoryKeyValue()
    if scheme == "sqlite":
        return SQLiteKeyValue(sqlite_path(uri))
    raise ValueError(f"unsupported storage URI {uri!r}; expected one of {SCHEMES}")


__all__ = ["open_store", "sqlite_path", "SCHEMES"]
