# -*- coding: utf-8 -*-
"""
Reference non-fungible ledger
=============================

A small owner/holder ledger used as the default issuance collaborator by the
CLI and the RPC host. It is deliberately minimal: mint, burn, ownership and
metadata reads. No transfers or approvals.

Key ideas
---------
- **TOKEN_MINTER_ROLE** holders may mint to any address.
- **TOKEN_BURNER_ROLE** holders may burn any asset; owners may burn their own.
- Asset ids are strictly increasing from 0 and never reused, burned or not.
- The engine talks to the ledger through :meth:`TokenLedger.issuer_for`,
  which binds the engine's address as the calling identity. If that address
  lacks the minter role, minting raises :class:`~seriesmint.errors.Unauthorized`.

Storage layout (under TOKENS_PREFIX)
------------------------------------
- compose(TOKENS_PREFIX, b"owner", u64(id))  -> owner address
- compose(TOKENS_PREFIX, b"uri", u64(id))    -> utf-8 metadata reference
- compose(TOKENS_PREFIX, b"bal", owner)      -> u64 balance
- META counters: b"token_next", b"token_supply"
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from ..access.roles import RoleRegistry
from ..constants import ADMIN_ROLE, TOKEN_BURNER_ROLE, TOKEN_MINTER_ROLE
from ..errors import NotFound, Unauthorized
from ..store import KeyValue
from ..store.buckets import TOKENS_PREFIX, Buckets, compose, from_u64, u64
from ..store.memory import MemoryKeyValue
from ..utils.bytes import require_address, require_text

log = logging.getLogger(__name__)

_NEXT = b"token_next"
_SUPPLY = b"token_supply"


class TokenLedger:
    def __init__(
        self,
        kv: Optional[KeyValue] = None,
        *,
        admin: Optional[bytes] = None,
        minters: Iterable[bytes] = (),
        burners: Iterable[bytes] = (),
    ) -> None:
        self._kv: KeyValue = kv if kv is not None else MemoryKeyValue()
        self._b = Buckets(self._kv)
        self._lock = threading.Lock()
        self.roles = RoleRegistry(self._kv, namespace=b"token")
        grants = {TOKEN_MINTER_ROLE: list(minters), TOKEN_BURNER_ROLE: list(burners)}
        if admin is not None:
            grants[ADMIN_ROLE] = [admin]
        with self._kv.transaction():
            self.roles.bootstrap(grants)

    # ---- keys ----------------------------------------------------------------

    @staticmethod
    def _k_owner(asset_id: int) -> bytes:
        return compose(TOKENS_PREFIX, b"owner", u64(asset_id))

    @staticmethod
    def _k_uri(asset_id: int) -> bytes:
        return compose(TOKENS_PREFIX, b"uri", u64(asset_id))

    @staticmethod
    def _k_bal(owner: bytes) -> bytes:
        return compose(TOKENS_PREFIX, b"bal", owner)

    # ---- reads ---------------------------------------------------------------

    def exists(self, asset_id: int) -> bool:
        return self._kv.has(self._k_owner(asset_id))

    def owner_of(self, asset_id: int) -> bytes:
        owner = self._kv.get(self._k_owner(asset_id))
        if owner is None:
            raise NotFound("asset not found", details={"asset_id": int(asset_id)})
        return owner

    def token_uri(self, asset_id: int) -> str:
        raw = self._kv.get(self._k_uri(asset_id))
        if raw is None:
            raise NotFound("asset not found", details={"asset_id": int(asset_id)})
        return raw.decode("utf-8")

    def balance_of(self, owner: bytes) -> int:
        raw = self._kv.get(self._k_bal(require_address(owner, "owner")))
        return from_u64(raw) if raw is not None else 0

    def total_supply(self) -> int:
        return self._b.get_counter(_SUPPLY)

    def next_asset_id(self) -> int:
        return self._b.get_counter(_NEXT)

    # ---- admin ---------------------------------------------------------------

    def grant_minter(self, caller: bytes, account: bytes) -> None:
        with self._kv.transaction():
            self.roles.grant_role(caller, TOKEN_MINTER_ROLE, account)

    def grant_burner(self, caller: bytes, account: bytes) -> None:
        with self._kv.transaction():
            self.roles.grant_role(caller, TOKEN_BURNER_ROLE, account)

    # ---- mint / burn ---------------------------------------------------------

    def mint(self, caller: bytes, recipient: bytes, metadata_ref: str) -> int:
        if not self.roles.has_role(TOKEN_MINTER_ROLE, caller):
            raise Unauthorized("caller is not a token minter", role=TOKEN_MINTER_ROLE, account=caller)
        to = require_address(recipient, "recipient")
        metadata_ref = require_text(metadata_ref, "metadata_ref")

        with self._lock, self._kv.transaction():
            asset_id = self._b.get_counter(_NEXT)
            self._kv.put(self._k_owner(asset_id), to)
            self._kv.put(self._k_uri(asset_id), metadata_ref.encode("utf-8"))
            self._kv.put(self._k_bal(to), u64(self.balance_of(to) + 1))
            self._b.set_counter(_NEXT, asset_id + 1)
            self._b.set_counter(_SUPPLY, self.total_supply() + 1)
        log.debug("token: minted asset=%d to=%s", asset_id, to.hex())
        return asset_id

    def burn(self, caller: bytes, asset_id: int) -> None:
        with self._lock, self._kv.transaction():
            owner = self.owner_of(asset_id)
            if caller != owner and not self.roles.has_role(TOKEN_BURNER_ROLE, caller):
                raise Unauthorized("caller may not burn this asset", role=TOKEN_BURNER_ROLE, account=caller)
            self._kv.delete(self._k_owner(asset_id))
            self._kv.delete(self._k_uri(asset_id))
            self._kv.put(self._k_bal(owner), u64(self.balance_of(owner) - 1))
            self._b.set_counter(_SUPPLY, self.total_supply() - 1)
        log.debug("token: burned asset=%d", asset_id)

    def issuer_for(self, address: bytes) -> "BoundIssuer":
        return BoundIssuer(self, require_address(address, "address"))


class BoundIssuer:
    """:class:`~seriesmint.issuance.Issuer` that mints as a fixed caller."""

    def __init__(self, ledger: TokenLedger, address: bytes) -> None:
        self.ledger = ledger
        self.address = address

    def mint(self, recipient: bytes, metadata_ref: str) -> int:
        return self.ledger.mint(self.address, recipient, metadata_ref)


__all__ = ["TokenLedger", "BoundIssuer"]
