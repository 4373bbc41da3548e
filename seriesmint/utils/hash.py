"""
seriesmint.utils.hash
=====================

SHA3 helpers plus **domain-separated** hashing used for mint fingerprints.
Stdlib `hashlib` only.

Parts are encoded in a stable, length-delimited TLV format so that two
different argument lists can never serialize to the same byte string
(``("ab", "c")`` and ``("a", "bc")`` hash differently, as do a proof of two
elements and a proof of one element holding their concatenation).
"""

from __future__ import annotations

from hashlib import sha3_256 as _sha3_256
from typing import Any, Iterable, Union

from ..constants import DOMAIN_PREFIX

DomainLike = Union[str, bytes]

__all__ = ["sha3_256", "dsha3_256", "encode_parts"]


def sha3_256(data: bytes) -> bytes:
    """Return SHA3-256(data)."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("sha3_256 expects a bytes-like object")
    return _sha3_256(bytes(data)).digest()


# Item type tags (single-byte, stable):
_TT_BYTES = b"\x01"
_TT_STR = b"\x02"
_TT_INT = b"\x03"
_TT_BOOL = b"\x04"
_TT_SEQ = b"\x05"
_TT_NONE = b"\x06"


def _varint_u(n: int) -> bytes:
    """LEB128 unsigned varint."""
    if n < 0:
        raise ValueError("varint only supports non-negative integers")
    out = bytearray()
    while True:
        b = n & 0x7F
        n >>= 7
        if n:
            out.append(b | 0x80)
        else:
            out.append(b)
            break
    return bytes(out)


def _int_to_be(n: int) -> bytes:
    if n < 0:
        raise ValueError("only non-negative integers are supported")
    if n == 0:
        return b"\x00"
    return n.to_bytes((n.bit_length() + 7) // 8, "big")


def _encode_one(x: Any) -> bytes:
    if x is None:
        return _TT_NONE
    if isinstance(x, (bytes, bytearray, memoryview)):
        b = bytes(x)
        return _TT_BYTES + _varint_u(len(b)) + b
    if isinstance(x, str):
        b = x.encode("utf-8")
        return _TT_STR + _varint_u(len(b)) + b
    if isinstance(x, bool):
        return _TT_BOOL + (b"\x01" if x else b"\x00")
    if isinstance(x, int):
        b = _int_to_be(x)
        return _TT_INT + _varint_u(len(b)) + b
    if isinstance(x, (tuple, list)):
        items = b"".join(_encode_one(v) for v in x)
        return _TT_SEQ + _varint_u(len(items)) + items
    raise TypeError(f"unsupported part type: {type(x)!r}")


def encode_parts(parts: Iterable[Any]) -> bytes:
    """Canonical envelope: count || payload_len || TLV items."""
    enc_items = [_encode_one(p) for p in parts]
    payload = b"".join(enc_items)
    return _varint_u(len(enc_items)) + _varint_u(len(payload)) + payload


def _domain_prefix(domain: DomainLike) -> bytes:
    tag = domain if isinstance(domain, bytes) else str(domain).encode("ascii", "strict")
    return DOMAIN_PREFIX + _varint_u(len(tag)) + tag + b"|"


def dsha3_256(domain: DomainLike, *parts: Any) -> bytes:
    """
    Domain-separated SHA3-256 over *parts*:

        SHA3-256( DOMAIN_PREFIX || len(tag) || tag || '|' || ENCODE(parts) )
    """
    h = _sha3_256()
    h.update(_domain_prefix(domain))
    h.update(encode_parts(parts))
    return h.digest()
