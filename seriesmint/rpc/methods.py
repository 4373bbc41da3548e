"""
seriesmint.rpc.methods
----------------------

JSON-RPC method shims for the series-mint engine.

These are intentionally thin: they validate/normalize inputs with pydantic,
then delegate to a :class:`~seriesmint.engine.SeriesMintEngine`.

Exposed methods:

- series.addSeries(caller, root, name, metadataRef, capacity)
- series.addMetadataRef(caller, seriesId, ref)
- series.mint(caller, recipient, metadataRef, seriesId, leaf, proof)
- series.getSeries(seriesId)
- series.getRoot(seriesId)
- series.catalogueSize(seriesId)
- series.fingerprint(metadataRef, seriesId, leaf, proof)
- series.isConsumed(fingerprint)
- series.getEvents(start?, limit?, name?)

All hex-typed inputs/outputs are 0x-prefixed. The ``caller`` field is taken
at face value: this surface is meant for a trusted host (devnet, operator
tooling) that has already authenticated the request.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..engine import SeriesMintEngine
from ..errors import InvalidArgument
from ..utils.bytes import hex_to_bytes, to_hex


def _hex(v: str) -> str:
    s = v[2:] if v.startswith(("0x", "0X")) else v
    try:
        bytes.fromhex(s)
    except ValueError:
        raise ValueError("expected a 0x-prefixed hex string") from None
    return v


def _hex32(v: str) -> str:
    _hex(v)
    if len(hex_to_bytes(v)) != 32:
        raise ValueError("expected a 0x-prefixed 32-byte hex string")
    return v


# ---------- request models ----------

class _CallerArg(BaseModel):
    caller: str = Field(..., description="0x-hex identity of the caller.")

    @field_validator("caller")
    @classmethod
    def _caller_hex(cls, v: str) -> str:
        return _hex(v)


class _SeriesArg(BaseModel):
    seriesId: int = Field(..., ge=0)


class AddSeriesParams(_CallerArg):
    root: str
    name: str = Field(..., min_length=1)
    metadataRef: str
    capacity: int = Field(..., gt=0)

    @field_validator("root", "metadataRef")
    @classmethod
    def _hash_hex(cls, v: str) -> str:
        return _hex32(v)


class AddMetadataRefParams(_CallerArg, _SeriesArg):
    ref: str

    @field_validator("ref")
    @classmethod
    def _ref_hex(cls, v: str) -> str:
        return _hex32(v)


class _ProofArgs(_SeriesArg):
    metadataRef: str
    leaf: str
    proof: List[str] = Field(default_factory=list)

    @field_validator("leaf")
    @classmethod
    def _leaf_hex(cls, v: str) -> str:
        return _hex32(v)

    @field_validator("proof")
    @classmethod
    def _proof_hex(cls, v: List[str]) -> List[str]:
        return [_hex32(x) for x in v]


class MintParams(_CallerArg, _ProofArgs):
    recipient: str

    @field_validator("recipient")
    @classmethod
    def _recipient_hex(cls, v: str) -> str:
        return _hex(v)


class SeriesQuery(_SeriesArg):
    pass


class FingerprintQuery(BaseModel):
    fingerprint: str

    @field_validator("fingerprint")
    @classmethod
    def _fp_hex(cls, v: str) -> str:
        return _hex32(v)


class EventsQuery(BaseModel):
    start: int = Field(default=0, ge=0)
    limit: int = Field(default=100, ge=1, le=1000)
    name: Optional[str] = None


def _parse(model: type, args: Optional[Mapping[str, Any]]) -> Any:
    try:
        return model.model_validate(dict(args or {}))
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        raise InvalidArgument("invalid params", details={"errors": errors}) from e


# ---------- method handlers ----------

def series_add_series(engine: SeriesMintEngine, args: Mapping[str, Any]) -> Dict[str, Any]:
    p = _parse(AddSeriesParams, args)
    sid = engine.add_series(
        hex_to_bytes(p.caller), hex_to_bytes(p.root), p.name, hex_to_bytes(p.metadataRef), p.capacity
    )
    return {"seriesId": sid}


def series_add_metadata_ref(engine: SeriesMintEngine, args: Mapping[str, Any]) -> Dict[str, Any]:
    p = _parse(AddMetadataRefParams, args)
    idx = engine.add_metadata_ref(hex_to_bytes(p.caller), p.seriesId, hex_to_bytes(p.ref))
    return {"seriesId": p.seriesId, "index": idx}


def series_mint(engine: SeriesMintEngine, args: Mapping[str, Any]) -> Dict[str, Any]:
    p = _parse(MintParams, args)
    receipt = engine.mint(
        hex_to_bytes(p.caller),
        hex_to_bytes(p.recipient),
        p.metadataRef,
        p.seriesId,
        hex_to_bytes(p.leaf),
        [hex_to_bytes(x) for x in p.proof],
    )
    return receipt.to_dict()


def series_get_series(engine: SeriesMintEngine, args: Mapping[str, Any]) -> Dict[str, Any]:
    p = _parse(SeriesQuery, args)
    return engine.get_series(p.seriesId).to_dict()


def series_get_root(engine: SeriesMintEngine, args: Mapping[str, Any]) -> str:
    p = _parse(SeriesQuery, args)
    return to_hex(engine.get_root(p.seriesId))


def series_catalogue_size(engine: SeriesMintEngine, args: Mapping[str, Any]) -> int:
    p = _parse(SeriesQuery, args)
    return engine.catalogue_size(p.seriesId)


def series_fingerprint(engine: SeriesMintEngine, args: Mapping[str, Any]) -> str:
    p = _parse(_ProofArgs, args)
    fp = engine.fingerprint(p.metadataRef, p.seriesId, hex_to_bytes(p.leaf), [hex_to_bytes(x) for x in p.proof])
    return to_hex(fp)


def series_is_consumed(engine: SeriesMintEngine, args: Mapping[str, Any]) -> bool:
    p = _parse(FingerprintQuery, args)
    return engine.is_consumed(hex_to_bytes(p.fingerprint))


def series_get_events(engine: SeriesMintEngine, args: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    p = _parse(EventsQuery, args)
    return [e.to_dict() for e in engine.get_events(start=p.start, limit=p.limit, name=p.name)]


METHODS: Dict[str, Callable[[SeriesMintEngine, Mapping[str, Any]], Any]] = {
    "series.addSeries": series_add_series,
    "series.addMetadataRef": series_add_metadata_ref,
    "series.mint": series_mint,
    "series.getSeries": series_get_series,
    "series.getRoot": series_get_root,
    "series.catalogueSize": series_catalogue_size,
    "series.fingerprint": series_fingerprint,
    "series.isConsumed": series_is_consumed,
    "series.getEvents": series_get_events,
}

__all__ = [
    "AddSeriesParams",
    "AddMetadataRefParams",
    "MintParams",
    "SeriesQuery",
    "FingerprintQuery",
    "EventsQuery",
    "METHODS",
]
