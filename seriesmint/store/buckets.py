"""
Logical buckets over a raw byte-oriented KeyValue backend.

Buckets
-------
- SERIES:  per-series header record (root, name, capacity, counters)
- REFS:    per-(series, index) metadata reference
- ISSUED:  per-(series, index) issued asset id
- LEDGER:  per-fingerprint consumed flag
- ROLES:   per-(namespace, role, account) membership flag
- EVENTS:  per-sequence event record
- META:    singleton counters (series count, event sequence, ...)
- TOKENS:  the reference token ledger's state

Keys are ``PREFIX || concat(u32_be(len(part)) || part)`` so parts can never
run into each other. Structured values are canonical CBOR (``cbor2``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

import cbor2

from . import KeyValue

SERIES_PREFIX = b"\x01"
REFS_PREFIX = b"\x02"
ISSUED_PREFIX = b"\x03"
LEDGER_PREFIX = b"\x04"
ROLES_PREFIX = b"\x05"
EVENTS_PREFIX = b"\x06"
META_PREFIX = b"\x07"
TOKENS_PREFIX = b"\x08"

FLAG = b"\x01"


def _be_u32(n: int) -> bytes:
    if n < 0 or n > 0xFFFFFFFF:
        raise ValueError("length out of range for u32")
    return n.to_bytes(4, "big")


def u64(n: int) -> bytes:
    if n < 0 or n > 0xFFFFFFFFFFFFFFFF:
        raise ValueError("value out of range for u64")
    return int(n).to_bytes(8, "big")


def from_u64(b: bytes) -> int:
    return int.from_bytes(b, "big")


def compose(prefix: bytes, *parts: bytes) -> bytes:
    return prefix + b"".join(_be_u32(len(p)) + p for p in parts)


def encode_record(obj: Any) -> bytes:
    return cbor2.dumps(obj, canonical=True)


def decode_record(data: bytes) -> Any:
    return cbor2.loads(data)


@dataclass(frozen=True)
class Buckets:
    """Namespaced view over a byte KV store."""

    kv: KeyValue

    # --- counters ------------------------------------------------------------

    def get_counter(self, name: bytes) -> int:
        raw = self.kv.get(compose(META_PREFIX, name))
        return from_u64(raw) if raw is not None else 0

    def set_counter(self, name: bytes, value: int) -> None:
        self.kv.put(compose(META_PREFIX, name), u64(value))

    # --- records -------------------------------------------------------------

    def get_record(self, key: bytes) -> Optional[Any]:
        raw = self.kv.get(key)
        return decode_record(raw) if raw is not None else None

    def put_record(self, key: bytes, obj: Any) -> None:
        self.kv.put(key, encode_record(obj))

    def iter_records(self, prefix: bytes) -> Iterable[Tuple[bytes, Any]]:
        for k, v in self.kv.iter_prefix(prefix):
            yield k, decode_record(v)

    # --- flags ---------------------------------------------------------------

    def has_flag(self, key: bytes) -> bool:
        return self.kv.get(key) == FLAG

    def set_flag(self, key: bytes) -> None:
        self.kv.put(key, FLAG)

    def clear_flag(self, key: bytes) -> None:
        self.kv.delete(key)


__all__ = [
    "SERIES_PREFIX",
    "REFS_PREFIX",
    "ISSUED_PREFIX",
    "LEDGER_PREFIX",
    "ROLES_PREFIX",
    "EVENTS_PREFIX",
    "META_PREFIX",
    "TOKENS_PREFIX",
    "FLAG",
    "u64",
    "from_u64",
    "compose",
    "encode_record",
    "decode_record",
    "Buckets",
]
