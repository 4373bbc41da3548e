"""
seriesmint.engine
=================

The authorization controller. ``SeriesMintEngine`` owns the series registry,
mint ledger, role relation and event log of one store, and is the only
writer of the registry and ledger.

Mint workflow
-------------
Each gate is hard; the first failure aborts with nothing written:

  0. caller holds MINTER_ROLE (unless ``permissionless_mint``); inputs
     are well formed
  1. series exists                         -> NotFound
  2. fingerprint(metadata_ref, series, leaf, proof)
  3. fingerprint not consumed / in flight  -> AlreadyMinted
     no other issuance in flight           -> IssuanceFailed
  4. verify(leaf, root, proof)             -> InvalidProof
  5. capacity left (``enforce_capacity``)  -> CapacityExhausted
  6. issuer.mint(recipient, metadata_ref)  -> IssuanceFailed
  7. record_issuance + consume + Minted, in one storage transaction

The ledger check runs before the proof check so replays are rejected
without paying for verification.

Concurrency
-----------
All public operations run under one ``threading.RLock``, which serializes
state transitions exactly like a single-threaded chain would. Steps 6 and 7 run
inside one ``KeyValue.transaction()``; an issuer that shares the engine's
store has its writes rolled back with ours. A fingerprint is held in an
in-flight set while the issuer runs. A re-entrant request for the same
fingerprint from inside the issuer is rejected with AlreadyMinted, and any
other re-entrant mint with IssuanceFailed.

Events are collected while the transaction is open and published to
subscribers only after the outermost transaction commits.

Typical usage
-------------
    kv = MemoryKeyValue()
    ledger = TokenLedger(kv, minters=[ENGINE])
    eng = SeriesMintEngine(kv, ledger.issuer_for(ENGINE),
                           creators=[alice], minters=[bob])
    sid = eng.add_series(alice, root, "genesis", ref, 100)
    receipt = eng.mint(bob, carol, "ipfs://...", sid, leaf, proof)
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Generator, Iterable, List, Optional, Sequence, Set

from .access.roles import RoleRegistry
from .config import SeriesMintConfig
from .constants import (ADMIN_ROLE, CREATOR_ROLE, EV_METADATA_ADDED, EV_MINTED,
                        EV_SERIES_ADDED, MINTER_ROLE)
from .errors import (AlreadyMinted, CapacityExhausted, InvalidProof,
                     IssuanceFailed, NotFound)
from .events import EventLog
from .issuance import Issuer
from .ledger.mint_ledger import MintLedger, fingerprint
from .merkle.verify import verify
from .registry.series import SeriesRegistry
from .store import KeyValue
from .types import Event, MintReceipt, Series
from .utils.bytes import (require_address, require_hash32, require_hash32_list,
                          require_text)

log = logging.getLogger(__name__)


class SeriesMintEngine:
    def __init__(
        self,
        kv: KeyValue,
        issuer: Issuer,
        *,
        config: Optional[SeriesMintConfig] = None,
        admins: Iterable[bytes] = (),
        creators: Iterable[bytes] = (),
        minters: Iterable[bytes] = (),
    ) -> None:
        self.config = config or SeriesMintConfig()
        self.issuer = issuer
        self._kv = kv
        self._lock = threading.RLock()
        self._in_flight: Set[bytes] = set()
        self._tx_open = False
        self._pending: List[Event] = []

        self.events = EventLog(kv)
        self.roles = RoleRegistry(kv, namespace=b"engine", events=self.events)
        self._series = SeriesRegistry(kv)
        self._ledger = MintLedger(kv)

        with self._lock, kv.transaction():
            self.roles.bootstrap(
                {ADMIN_ROLE: list(admins), CREATOR_ROLE: list(creators), MINTER_ROLE: list(minters)}
            )

    @classmethod
    def open(
        cls,
        config: SeriesMintConfig,
        issuer: Optional[Issuer] = None,
        **grants: Iterable[bytes],
    ) -> "SeriesMintEngine":
        """
        Open the configured store. Without an explicit issuer, a TokenLedger
        in the same store is used and the engine address is bootstrapped as
        its minter.
        """
        from .issuance.token_ledger import TokenLedger
        from .store.factory import open_store

        config.validate()
        kv = open_store(config.storage.uri)
        if issuer is None:
            addr = config.engine_address_bytes()
            issuer = TokenLedger(kv, minters=[addr]).issuer_for(addr)
        return cls(kv, issuer, config=config, **grants)

    def close(self) -> None:
        with self._lock:
            self._kv.close()

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #

    @contextmanager
    def _atomic(self) -> Generator[List[Event], None, None]:
        outermost = not self._tx_open
        self._tx_open = True
        try:
            with self._kv.transaction():
                yield self._pending
        except BaseException:
            if outermost:
                self._pending = []
            raise
        finally:
            if outermost:
                self._tx_open = False
        if outermost:
            committed, self._pending = self._pending, []
            self.events.publish(committed)

    # ------------------------------------------------------------------ #
    # Series registry entry points
    # ------------------------------------------------------------------ #

    def add_series(
        self,
        caller: bytes,
        root: bytes,
        name: str,
        initial_metadata_ref: bytes,
        declared_capacity: int,
    ) -> int:
        with self._lock:
            self.roles.require_role(CREATOR_ROLE, caller)
            with self._atomic() as pending:
                sid = self._series.add_series(root, name, initial_metadata_ref, declared_capacity)
                pending.append(
                    self.events.append(
                        EV_SERIES_ADDED,
                        {
                            "id": sid,
                            "metadataRef": bytes(initial_metadata_ref),
                            "root": bytes(root),
                            "name": name,
                        },
                    )
                )
        log.info("engine: series added id=%d name=%r capacity=%d", sid, name, declared_capacity)
        return sid

    def add_metadata_ref(self, caller: bytes, series_id: int, ref: bytes) -> int:
        with self._lock:
            self.roles.require_role(CREATOR_ROLE, caller)
            with self._atomic() as pending:
                idx = self._series.add_metadata_ref(series_id, ref)
                pending.append(self.events.append(EV_METADATA_ADDED, {"id": series_id, "ref": bytes(ref)}))
        log.info("engine: metadata ref added series=%d index=%d", series_id, idx)
        return idx

    # ------------------------------------------------------------------ #
    # Mint
    # ------------------------------------------------------------------ #

    def mint(
        self,
        caller: bytes,
        recipient: bytes,
        metadata_ref: str,
        series_id: int,
        leaf: bytes,
        proof: Sequence[bytes],
    ) -> MintReceipt:
        with self._lock:
            if not self.config.permissionless_mint:
                self.roles.require_role(MINTER_ROLE, caller)

            sender = require_address(caller, "caller")
            to = require_address(recipient, "recipient")
            metadata_ref = require_text(metadata_ref, "metadata_ref")
            lf = require_hash32(leaf, "leaf")
            path = require_hash32_list(proof, "proof")

            if not self._series.exists(series_id):
                raise NotFound(series_id=series_id)
            root = self._series.get_root(series_id)

            fp = fingerprint(metadata_ref, series_id, lf, path)
            if fp in self._in_flight or self._ledger.is_consumed(fp):
                log.debug("engine: replay rejected series=%d fp=%s", series_id, fp.hex())
                raise AlreadyMinted(fingerprint=fp)
            if self._in_flight:
                log.warning("engine: mint re-entered from issuer series=%d", series_id)
                raise IssuanceFailed(series_id=series_id, reason="mint re-entered while an issuance is in flight")

            if not verify(lf, root, path):
                log.debug("engine: proof rejected series=%d leaf=%s", series_id, lf.hex())
                raise InvalidProof(series_id=series_id)

            if self.config.enforce_capacity:
                capacity = self._series.declared_capacity(series_id)
                if self._series.catalogue_size(series_id) >= capacity:
                    raise CapacityExhausted(series_id=series_id, capacity=capacity)

            self._in_flight.add(fp)
            try:
                with self._atomic() as pending:
                    asset_id = self._issue(to, metadata_ref, series_id)
                    idx = self._series.record_issuance(series_id, asset_id)
                    self._ledger.consume(fp)
                    pending.append(
                        self.events.append(
                            EV_MINTED,
                            {
                                "caller": sender,
                                "recipient": to,
                                "metadataRef": metadata_ref,
                                "series": series_id,
                                "root": root,
                                "leaf": lf,
                                "catalogueIndex": idx,
                                "assetId": asset_id,
                            },
                        )
                    )
            finally:
                self._in_flight.discard(fp)

        log.info("engine: minted series=%d asset=%d index=%d", series_id, asset_id, idx)
        return MintReceipt(asset_id=asset_id, series_id=series_id, catalogue_index=idx, fingerprint=fp)

    def _issue(self, recipient: bytes, metadata_ref: str, series_id: int) -> int:
        try:
            asset_id = self.issuer.mint(recipient, metadata_ref)
        except Exception as e:
            log.warning("engine: issuer failed series=%d: %s", series_id, e)
            raise IssuanceFailed(series_id=series_id, reason=str(e)) from e
        if isinstance(asset_id, bool) or not isinstance(asset_id, int) or asset_id < 0:
            raise IssuanceFailed(series_id=series_id, reason=f"issuer returned bad asset id {asset_id!r}")
        return asset_id

    # ------------------------------------------------------------------ #
    # Role administration
    # ------------------------------------------------------------------ #

    def has_role(self, role: bytes, account: bytes) -> bool:
        with self._lock:
            return self.roles.has_role(role, account)

    def grant_role(self, caller: bytes, role: bytes, account: bytes) -> bool:
        with self._lock, self._atomic() as pending:
            ev = self.roles.grant_role(caller, role, account)
            if ev is not None:
                pending.append(ev)
        return ev is not None

    def revoke_role(self, caller: bytes, role: bytes, account: bytes) -> bool:
        with self._lock, self._atomic() as pending:
            ev = self.roles.revoke_role(caller, role, account)
            if ev is not None:
                pending.append(ev)
        return ev is not None

    def renounce_role(self, caller: bytes, role: bytes) -> bool:
        with self._lock, self._atomic() as pending:
            ev = self.roles.renounce_role(caller, role)
            if ev is not None:
                pending.append(ev)
        return ev is not None

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def series_count(self) -> int:
        with self._lock:
            return self._series.series_count()

    def get_series(self, series_id: int) -> Series:
        with self._lock:
            return self._series.get_series(series_id)

    def get_root(self, series_id: int) -> bytes:
        with self._lock:
            return self._series.get_root(series_id)

    def catalogue_size(self, series_id: int) -> int:
        with self._lock:
            return self._series.catalogue_size(series_id)

    def is_consumed(self, fp: bytes) -> bool:
        with self._lock:
            return self._ledger.is_consumed(fp)

    @staticmethod
    def fingerprint(metadata_ref: str, series_id: int, leaf: bytes, proof: Sequence[bytes]) -> bytes:
        return fingerprint(metadata_ref, series_id, leaf, proof)

    def get_events(self, *, start: int = 0, limit: Optional[int] = None, name: Optional[str] = None) -> List[Event]:
        with self._lock:
            evs = self.events.all(start=start, limit=None if name else limit)
        if name is not None:
            evs = [e for e in evs if e.name == name]
            if limit is not None:
                evs = evs[:limit]
        return evs

    def snapshot(self) -> dict:
        """Plain-dict view of every series; handy for logs and the CLI."""
        with self._lock:
            return {
                "seriesCount": self._series.series_count(),
                "series": [self._series.get_series(i).to_dict() for i in range(self._series.series_count())],
            }


__all__ = ["SeriesMintEngine"]
