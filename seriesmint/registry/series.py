"""
seriesmint.registry.series
==========================

The append-only catalogue of series, backed by a KeyValue store.

Each series has an immutable root, name and declared capacity, plus mutable
bookkeeping: the list of metadata references and the list of issued asset
ids. Existence is a presence check (``0 <= id < series_count``); the root's
value is never used to decide whether a series exists.

Storage layout
--------------
- SERIES: compose(SERIES_PREFIX, u64(id))           -> cbor header
          {"root", "name", "capacity", "refs", "issued"}
- REFS:   compose(REFS_PREFIX, u64(id), u64(i))     -> 32-byte ref
- ISSUED: compose(ISSUED_PREFIX, u64(id), u64(i))   -> u64(asset id)
- META:   b"series_count"

Role checks and event emission belong to the engine; this class only
validates and stores. ``record_issuance`` is engine-internal.
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..errors import InvalidArgument, NotFound
from ..store import KeyValue
from ..store.buckets import (ISSUED_PREFIX, REFS_PREFIX, SERIES_PREFIX,
                             Buckets, compose, from_u64, u64)
from ..types import Series
from ..utils.bytes import require_hash32

_COUNT = b"series_count"


class SeriesRegistry:
    def __init__(self, kv: KeyValue) -> None:
        self._b = Buckets(kv)

    # ---- internals -----------------------------------------------------------

    def _header_key(self, series_id: int) -> bytes:
        return compose(SERIES_PREFIX, u64(series_id))

    def _header(self, series_id: int) -> Dict[str, Any]:
        if not self.exists(series_id):
            raise NotFound(series_id=series_id)
        rec = self._b.get_record(self._header_key(series_id))
        if rec is None:  # pragma: no cover - counter/record skew means a corrupt store
            raise NotFound("series record missing", series_id=series_id)
        return rec

    # ---- reads ---------------------------------------------------------------

    def series_count(self) -> int:
        return self._b.get_counter(_COUNT)

    def exists(self, series_id: int) -> bool:
        if isinstance(series_id, bool) or not isinstance(series_id, int):
            return False
        return 0 <= series_id < self.series_count()

    def get_root(self, series_id: int) -> bytes:
        return bytes(self._header(series_id)["root"])

    def catalogue_size(self, series_id: int) -> int:
        return int(self._header(series_id)["issued"])

    def declared_capacity(self, series_id: int) -> int:
        return int(self._header(series_id)["capacity"])

    def metadata_refs(self, series_id: int) -> List[bytes]:
        self._header(series_id)
        return [v for _, v in self._b.kv.iter_prefix(compose(REFS_PREFIX, u64(series_id)))]

    def issued_asset_ids(self, series_id: int) -> List[int]:
        self._header(series_id)
        return [from_u64(v) for _, v in self._b.kv.iter_prefix(compose(ISSUED_PREFIX, u64(series_id)))]

    def get_series(self, series_id: int) -> Series:
        h = self._header(series_id)
        return Series(
            id=series_id,
            merkle_root=bytes(h["root"]),
            name=h["name"],
            declared_capacity=int(h["capacity"]),
            metadata_refs=tuple(self.metadata_refs(series_id)),
            issued_asset_ids=tuple(self.issued_asset_ids(series_id)),
        )

    # ---- writes --------------------------------------------------------------

    def add_series(
        self, root: bytes, name: str, initial_metadata_ref: bytes, declared_capacity: int
    ) -> int:
        r = require_hash32(root, "root", nonzero=True)
        if not isinstance(name, str) or not name:
            raise InvalidArgument("name must be a non-empty string", field="name")
        ref = require_hash32(initial_metadata_ref, "metadata_ref", nonzero=True)
        if isinstance(declared_capacity, bool) or not isinstance(declared_capacity, int):
            raise InvalidArgument("declared_capacity must be an integer", field="declared_capacity")
        if declared_capacity <= 0:
            raise InvalidArgument("declared_capacity must be > 0", field="declared_capacity")

        sid = self.series_count()
        self._b.put_record(
            self._header_key(sid),
            {"root": r, "name": name, "capacity": declared_capacity, "refs": 1, "issued": 0},
        )
        self._b.kv.put(compose(REFS_PREFIX, u64(sid), u64(0)), ref)
        self._b.set_counter(_COUNT, sid + 1)
        return sid

    def add_metadata_ref(self, series_id: int, ref: bytes) -> int:
        """Append ``ref``; returns its index in the series' reference list."""
        h = self._header(series_id)
        r = require_hash32(ref, "metadata_ref", nonzero=True)
        idx = int(h["refs"])
        self._b.kv.put(compose(REFS_PREFIX, u64(series_id), u64(idx)), r)
        h["refs"] = idx + 1
        self._b.put_record(self._header_key(series_id), h)
        return idx

    def record_issuance(self, series_id: int, asset_id: int) -> int:
        """Append ``asset_id`` and bump the issued count; returns its catalogue index."""
        h = self._header(series_id)
        idx = int(h["issued"])
        self._b.kv.put(compose(ISSUED_PREFIX, u64(series_id), u64(idx)), u64(asset_id))
        h["issued"] = idx + 1
        self._b.put_record(self._header_key(series_id), h)
        return idx


__all__ = ["SeriesRegistry"]
