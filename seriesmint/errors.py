from __future__ import annotations
# seriesmint/errors.py
"""
Error types for the series-mint engine. These are lightweight, serializable,
and safe to surface over RPC/logs.

Every engine operation is all-or-nothing: when one of these is raised, no
registry, ledger or event state from that call has been retained.

Exports:
- SeriesMintError (base)
- Unauthorized
- InvalidArgument
- NotFound
- AlreadyMinted
- AlreadyConsumed
- InvalidProof
- IssuanceFailed
- CapacityExhausted
"""


import json
from typing import Any, Dict, Mapping, Optional


class SeriesMintError(Exception):
    """Base class for series-mint domain errors."""

    code: str = "SERIES_ERROR"

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.__class__.__name__
        self.details = dict(details or {})
        super().__init__(self.__str__())

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.details:
            try:
                packed = json.dumps(self.details, sort_keys=True, separators=(",", ":"))
            except Exception:
                packed = str(self.details)
            return f"{self.code}: {self.message} [{packed}]"
        return f"{self.code}: {self.message}"


class Unauthorized(SeriesMintError):
    """The caller does not hold the role the operation requires."""
    code = "SERIES_UNAUTHORIZED"

    def __init__(
        self,
        message: str = "caller lacks required role",
        *,
        role: Optional[bytes] = None,
        account: Optional[bytes] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if role is not None:
            d.setdefault("role", "0x" + bytes(role).hex())
        if account is not None:
            d.setdefault("account", "0x" + bytes(account).hex())
        super().__init__(message, details=d)


class InvalidArgument(SeriesMintError):
    """Malformed or empty input to a creation or mint call."""
    code = "SERIES_INVALID_ARGUMENT"

    def __init__(
        self,
        message: str = "invalid argument",
        *,
        field: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if field is not None:
            d.setdefault("field", field)
        super().__init__(message, details=d)


class NotFound(SeriesMintError):
    """Unknown series id."""
    code = "SERIES_NOT_FOUND"

    def __init__(
        self,
        message: str = "series not found",
        *,
        series_id: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if series_id is not None:
            d.setdefault("series_id", int(series_id))
        super().__init__(message, details=d)


class _FingerprintError(SeriesMintError):
    def __init__(
        self,
        message: str,
        *,
        fingerprint: Optional[bytes] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if fingerprint is not None:
            d.setdefault("fingerprint", "0x" + bytes(fingerprint).hex())
        super().__init__(message, details=d)


class AlreadyMinted(_FingerprintError):
    """
    The mint request's fingerprint was already consumed (or is being consumed
    by a request still in flight). Deterministic: do not retry.
    """
    code = "SERIES_ALREADY_MINTED"

    def __init__(self, message: str = "already minted", **kw: Any) -> None:
        super().__init__(message, **kw)


class AlreadyConsumed(_FingerprintError):
    """Low-level ledger error: consume() called twice for one fingerprint."""
    code = "SERIES_ALREADY_CONSUMED"

    def __init__(self, message: str = "fingerprint already consumed", **kw: Any) -> None:
        super().__init__(message, **kw)


class InvalidProof(SeriesMintError):
    """Merkle verification of the leaf against the series root failed."""
    code = "SERIES_INVALID_PROOF"

    def __init__(
        self,
        message: str = "invalid merkle proof",
        *,
        series_id: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if series_id is not None:
            d.setdefault("series_id", int(series_id))
        super().__init__(message, details=d)


class IssuanceFailed(SeriesMintError):
    """
    The issuance collaborator raised. Nothing was committed, so the whole
    request may be retried.
    """
    code = "SERIES_ISSUANCE_FAILED"

    def __init__(
        self,
        message: str = "issuance failed",
        *,
        series_id: Optional[int] = None,
        reason: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if series_id is not None:
            d.setdefault("series_id", int(series_id))
        if reason is not None:
            d.setdefault("reason", reason)
        super().__init__(message, details=d)


class CapacityExhausted(SeriesMintError):
    """Capacity enforcement is enabled and the series reached its declared cap."""
    code = "SERIES_CAPACITY_EXHAUSTED"

    def __init__(
        self,
        *,
        series_id: int,
        capacity: int,
        message: str = "series capacity exhausted",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d.update({"series_id": int(series_id), "capacity": int(capacity)})
        super().__init__(message, details=d)


__all__ = [
    "SeriesMintError",
    "Unauthorized",
    "InvalidArgument",
    "NotFound",
    "AlreadyMinted",
    "AlreadyConsumed",
    "InvalidProof",
    "IssuanceFailed",
    "CapacityExhausted",
]
