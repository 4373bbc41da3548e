"""
Typed read-models returned by the series-mint engine.

These are immutable snapshots; mutating them has no effect on the stores.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class Series:
    """
    One published batch of authorized assets.

    Invariant: ``issued_count == len(issued_asset_ids)``.
    """

    id: int
    merkle_root: bytes
    name: str
    declared_capacity: int
    metadata_refs: Tuple[bytes, ...] = ()
    issued_asset_ids: Tuple[int, ...] = ()

    @property
    def issued_count(self) -> int:
        return len(self.issued_asset_ids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "merkleRoot": "0x" + self.merkle_root.hex(),
            "name": self.name,
            "declaredCapacity": self.declared_capacity,
            "metadataRefs": ["0x" + r.hex() for r in self.metadata_refs],
            "issuedCount": self.issued_count,
            "issuedAssetIds": list(self.issued_asset_ids),
        }


@dataclass(frozen=True)
class Event:
    """One append-only log entry."""

    seq: int
    name: str
    args: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        def _j(v: Any) -> Any:
            if isinstance(v, (bytes, bytearray)):
                return "0x" + bytes(v).hex()
            return v

        return {"seq": self.seq, "name": self.name, "args": {k: _j(v) for k, v in self.args.items()}}


@dataclass(frozen=True)
class MintReceipt:
    """Outcome of a successful mint."""

    asset_id: int
    series_id: int
    catalogue_index: int
    fingerprint: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assetId": self.asset_id,
            "seriesId": self.series_id,
            "catalogueIndex": self.catalogue_index,
            "fingerprint": "0x" + self.fingerprint.hex(),
        }


__all__ = ["Series", "Event", "MintReceipt"]
