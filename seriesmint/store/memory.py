"""
In-memory KeyValue backend.

Writes made inside ``transaction()`` are journaled (first pre-image per key)
so a failure restores the exact prior state without copying the whole map.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Generator, Iterable, List, Optional, Tuple

_MISSING = object()


class MemoryKeyValue:
    """Dict-backed implementation of the KeyValue protocol."""

    def __init__(self) -> None:
        self._data: Dict[bytes, bytes] = {}
        self._journal: Optional[Dict[bytes, object]] = None
        self._depth = 0

    def _remember(self, key: bytes) -> None:
        if self._journal is not None and key not in self._journal:
            self._journal[key] = self._data.get(key, _MISSING)

    def get(self, key: bytes) -> Optional[bytes]:
        return self._data.get(bytes(key))

    def put(self, key: bytes, value: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or not isinstance(value, (bytes, bytearray)):
            raise TypeError("key and value must be bytes")
        k = bytes(key)
        self._remember(k)
        self._data[k] = bytes(value)

    def delete(self, key: bytes) -> None:
        k = bytes(key)
        if k in self._data:
            self._remember(k)
            del self._data[k]

    def has(self, key: bytes) -> bool:
        return bytes(key) in self._data

    def iter_prefix(self, prefix: bytes) -> Iterable[Tuple[bytes, bytes]]:
        keys: List[bytes] = sorted(k for k in self._data if k.startswith(prefix))
        for k in keys:
            yield k, self._data[k]

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        self._journal = {}
        self._depth = 1
        try:
            yield
        except BaseException:
            for k, old in self._journal.items():
                if old is _MISSING:
                    self._data.pop(k, None)
                else:
                    self._data[k] = old  # type: ignore[assignment]
            raise
        finally:
            self._journal = None
            self._depth = 0

    def close(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self._data)


__all__ = ["MemoryKeyValue"]
