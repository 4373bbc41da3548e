"""
Byte/hex helpers for hashes and addresses.

All hex inputs accept an optional ``0x`` prefix; all hex outputs carry one.
"""

from __future__ import annotations

from typing import Any, List, Sequence

from ..constants import HASH_LEN, ZERO_HASH
from ..errors import InvalidArgument


def strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def hex_to_bytes(s: str) -> bytes:
    try:
        return bytes.fromhex(strip_0x(s.strip()))
    except ValueError as e:
        raise InvalidArgument(f"not a hex string: {s!r}") from e


def to_hex(b: bytes) -> str:
    return "0x" + bytes(b).hex()


def is_hash32(x: Any) -> bool:
    return isinstance(x, (bytes, bytearray)) and len(x) == HASH_LEN


def require_hash32(x: Any, field: str, *, nonzero: bool = False) -> bytes:
    """Return ``x`` as 32 immutable bytes or raise InvalidArgument."""
    if not is_hash32(x):
        raise InvalidArgument(f"{field} must be {HASH_LEN} bytes", field=field)
    b = bytes(x)
    if nonzero and b == ZERO_HASH:
        raise InvalidArgument(f"{field} must be non-zero", field=field)
    return b


def require_hash32_list(xs: Sequence[Any], field: str) -> List[bytes]:
    if isinstance(xs, (bytes, bytearray, str)):
        raise InvalidArgument(f"{field} must be a sequence of hashes", field=field)
    return [require_hash32(x, f"{field}[{i}]") for i, x in enumerate(xs)]


def require_address(x: Any, field: str = "address") -> bytes:
    if not isinstance(x, (bytes, bytearray)) or len(x) == 0:
        raise InvalidArgument(f"{field} must be non-empty bytes", field=field)
    return bytes(x)


def require_text(x: Any, field: str) -> str:
    """Return ``x`` if it is a str that encodes as UTF-8 (no lone surrogates)."""
    if not isinstance(x, str):
        raise InvalidArgument(f"{field} must be a string", field=field)
    try:
        x.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidArgument(f"{field} is not valid UTF-8 text", field=field) from e
    return x


__all__ = [
    "strip_0x",
    "hex_to_bytes",
    "to_hex",
    "is_hash32",
    "require_hash32",
    "require_hash32_list",
    "require_address",
    "require_text",
]
