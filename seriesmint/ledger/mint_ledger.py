"""
seriesmint.ledger.mint_ledger
=============================

Records, per mint-request fingerprint, whether that exact
(metadata reference, series, leaf, proof) combination was consumed.

A fingerprint moves from absent to consumed exactly once and is never
cleared. ``consume`` is the step that gates the irreversible bookkeeping;
callers that need check-then-act across a suspension point (the engine
calling its issuer) must hold their own lock or reservation.
"""

from __future__ import annotations

from typing import Sequence

from ..constants import DOMAIN_FINGERPRINT
from ..errors import AlreadyConsumed
from ..store import KeyValue
from ..store.buckets import LEDGER_PREFIX, Buckets, compose
from ..utils.hash import dsha3_256


def fingerprint(metadata_ref: str, series_id: int, leaf: bytes, proof: Sequence[bytes]) -> bytes:
    """
    Deterministic 32-byte digest of a mint request.

    The full proof path is included, so two requests that differ only in
    proof content are distinct submissions.
    """
    return dsha3_256(
        DOMAIN_FINGERPRINT,
        metadata_ref,
        int(series_id),
        bytes(leaf),
        [bytes(p) for p in proof],
    )


class MintLedger:
    def __init__(self, kv: KeyValue) -> None:
        self._b = Buckets(kv)

    @staticmethod
    def fingerprint(metadata_ref: str, series_id: int, leaf: bytes, proof: Sequence[bytes]) -> bytes:
        return fingerprint(metadata_ref, series_id, leaf, proof)

    def _key(self, fp: bytes) -> bytes:
        return compose(LEDGER_PREFIX, bytes(fp))

    def is_consumed(self, fp: bytes) -> bool:
        return self._b.has_flag(self._key(fp))

    def consume(self, fp: bytes) -> None:
        key = self._key(fp)
        if self._b.has_flag(key):
            raise AlreadyConsumed(fingerprint=fp)
        self._b.set_flag(key)

    def __len__(self) -> int:
        return sum(1 for _ in self._b.kv.iter_prefix(LEDGER_PREFIX))


__all__ = ["MintLedger", "fingerprint"]
