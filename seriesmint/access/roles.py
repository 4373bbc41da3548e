# -*- coding: utf-8 -*-
"""
seriesmint.access.roles
=======================

Deterministic, flat **Role-Based Access Control**.

Design goals
------------
- **Bytes32 role identifiers** (see :mod:`seriesmint.constants`).
- **A pure predicate**: ``has_role(role, account)`` is a lookup in an explicit
  (role, account) relation; no role implies another.
- **Admin-gated mutation**: after construction-time bootstrap, only holders
  of ``ADMIN_ROLE`` may grant or revoke; anyone may renounce their own role.
- **Idempotent operations**: granting an existing role or revoking a missing
  one is a no-op and emits nothing.

Storage layout
--------------
- Member flag: ``compose(ROLES_PREFIX, namespace, role, account) -> b"\\x01"``

The namespace keeps the engine's relation apart from the token ledger's when
both live in one store.

Events
------
- RoleGranted : {"role": bytes, "account": bytes, "sender": bytes}
- RoleRevoked : {"role": bytes, "account": bytes, "sender": bytes}
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional

from ..constants import ADMIN_ROLE, EV_ROLE_GRANTED, EV_ROLE_REVOKED, HASH_LEN
from ..errors import InvalidArgument, Unauthorized
from ..events import EventLog
from ..store import KeyValue
from ..store.buckets import ROLES_PREFIX, Buckets, compose
from ..types import Event
from ..utils.bytes import require_address

log = logging.getLogger(__name__)


def normalize_role(role: bytes) -> bytes:
    if not isinstance(role, (bytes, bytearray)) or len(role) != HASH_LEN:
        raise InvalidArgument("role id must be 32 bytes", field="role")
    return bytes(role)


class RoleRegistry:
    def __init__(
        self,
        kv: KeyValue,
        *,
        namespace: bytes = b"engine",
        events: Optional[EventLog] = None,
    ) -> None:
        self._b = Buckets(kv)
        self._ns = namespace
        self._events = events

    def _key(self, role: bytes, account: bytes) -> bytes:
        return compose(ROLES_PREFIX, self._ns, role, account)

    # ---- queries -------------------------------------------------------------

    def has_role(self, role: bytes, account: bytes) -> bool:
        if not account:
            return False
        return self._b.has_flag(self._key(normalize_role(role), bytes(account)))

    def require_role(self, role: bytes, account: bytes) -> None:
        if not self.has_role(role, account):
            raise Unauthorized(role=role, account=account)

    def members(self, role: bytes) -> List[bytes]:
        prefix = compose(ROLES_PREFIX, self._ns, normalize_role(role))
        # account part = u32 length || account bytes
        return [k[len(prefix) + 4:] for k, _ in self._b.kv.iter_prefix(prefix)]

    # ---- mutations -----------------------------------------------------------

    def bootstrap(self, grants: Mapping[bytes, Iterable[bytes]]) -> None:
        """Construction-time bulk grant. Not gated and emits no events."""
        for role, accounts in grants.items():
            r = normalize_role(role)
            for acct in accounts:
                self._b.set_flag(self._key(r, require_address(acct, "account")))

    def _emit(self, name: str, role: bytes, account: bytes, sender: bytes) -> Optional[Event]:
        if self._events is None:
            return None
        return self._events.append(name, {"role": role, "account": account, "sender": sender})

    def grant_role(self, caller: bytes, role: bytes, account: bytes) -> Optional[Event]:
        self.require_role(ADMIN_ROLE, caller)
        r = normalize_role(role)
        acct = require_address(account, "account")
        key = self._key(r, acct)
        if self._b.has_flag(key):
            return None
        self._b.set_flag(key)
        log.info("roles: granted role=%s account=%s", r.hex()[:16], acct.hex())
        return self._emit(EV_ROLE_GRANTED, r, acct, bytes(caller))

    def revoke_role(self, caller: bytes, role: bytes, account: bytes) -> Optional[Event]:
        self.require_role(ADMIN_ROLE, caller)
        return self._drop(bytes(caller), normalize_role(role), require_address(account, "account"))

    def renounce_role(self, caller: bytes, role: bytes) -> Optional[Event]:
        acct = require_address(caller, "caller")
        return self._drop(acct, normalize_role(role), acct)

    def _drop(self, sender: bytes, role: bytes, account: bytes) -> Optional[Event]:
        key = self._key(role, account)
        if not self._b.has_flag(key):
            return None
        self._b.clear_flag(key)
        log.info("roles: revoked role=%s account=%s", role.hex()[:16], account.hex())
        return self._emit(EV_ROLE_REVOKED, role, account, sender)


__all__ = ["RoleRegistry", "normalize_role"]
