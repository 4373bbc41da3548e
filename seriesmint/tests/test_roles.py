# -*- coding: utf-8 -*-
from __future__ import annotations

import pytest

from seriesmint.access import RoleRegistry, normalize_role
from seriesmint.constants import (ADMIN_ROLE, CREATOR_ROLE, EV_ROLE_GRANTED,
                                  EV_ROLE_REVOKED, MINTER_ROLE)
from seriesmint.errors import InvalidArgument, Unauthorized
from seriesmint.events import EventLog


@pytest.fixture
def events(kv):
    return EventLog(kv)


@pytest.fixture
def roles(kv, events, accounts):
    r = RoleRegistry(kv, events=events)
    r.bootstrap({ADMIN_ROLE: [accounts["admin"]], CREATOR_ROLE: [accounts["alice"]]})
    return r


def test_bootstrap_grants_without_events(roles, events, accounts):
    assert roles.has_role(ADMIN_ROLE, accounts["admin"])
    assert roles.has_role(CREATOR_ROLE, accounts["alice"])
    assert len(events) == 0


def test_roles_are_independent(roles, accounts):
    # admin does not imply creator or minter
    assert not roles.has_role(CREATOR_ROLE, accounts["admin"])
    assert not roles.has_role(MINTER_ROLE, accounts["admin"])
    assert not roles.has_role(MINTER_ROLE, accounts["alice"])


def test_empty_account_never_holds_a_role(roles):
    assert not roles.has_role(ADMIN_ROLE, b"")


def test_require_role_raises_unauthorized(roles, accounts):
    roles.require_role(CREATOR_ROLE, accounts["alice"])
    with pytest.raises(Unauthorized) as ei:
        roles.require_role(CREATOR_ROLE, accounts["mallory"])
    assert ei.value.details["account"] == "0x" + accounts["mallory"].hex()
    assert ei.value.code == "SERIES_UNAUTHORIZED"


def test_grant_requires_admin(roles, accounts):
    with pytest.raises(Unauthorized):
        roles.grant_role(accounts["alice"], MINTER_ROLE, accounts["bob"])
    assert not roles.has_role(MINTER_ROLE, accounts["bob"])


def test_grant_and_revoke_emit_events(roles, events, accounts):
    ev = roles.grant_role(accounts["admin"], MINTER_ROLE, accounts["bob"])
    assert ev is not None and ev.name == EV_ROLE_GRANTED
    assert ev.args == {"role": MINTER_ROLE, "account": accounts["bob"], "sender": accounts["admin"]}
    assert roles.has_role(MINTER_ROLE, accounts["bob"])

    ev = roles.revoke_role(accounts["admin"], MINTER_ROLE, accounts["bob"])
    assert ev is not None and ev.name == EV_ROLE_REVOKED
    assert not roles.has_role(MINTER_ROLE, accounts["bob"])
    assert [e.name for e in events.all()] == [EV_ROLE_GRANTED, EV_ROLE_REVOKED]


def test_grant_and_revoke_are_idempotent(roles, events, accounts):
    assert roles.grant_role(accounts["admin"], CREATOR_ROLE, accounts["alice"]) is None
    assert roles.revoke_role(accounts["admin"], MINTER_ROLE, accounts["carol"]) is None
    assert len(events) == 0


def test_renounce_own_role(roles, accounts):
    ev = roles.renounce_role(accounts["alice"], CREATOR_ROLE)
    assert ev is not None
    assert ev.args["sender"] == accounts["alice"]
    assert not roles.has_role(CREATOR_ROLE, accounts["alice"])
    assert roles.renounce_role(accounts["alice"], CREATOR_ROLE) is None


def test_members_lists_accounts(roles, accounts):
    roles.grant_role(accounts["admin"], CREATOR_ROLE, accounts["bob"])
    assert sorted(roles.members(CREATOR_ROLE)) == sorted([accounts["alice"], accounts["bob"]])


def test_namespaces_are_isolated(kv, roles, accounts):
    other = RoleRegistry(kv, namespace=b"token")
    assert not other.has_role(ADMIN_ROLE, accounts["admin"])


@pytest.mark.parametrize("bad", [b"", b"\x00" * 31, "creator", None])
def test_malformed_role_id(bad):
    with pytest.raises(InvalidArgument):
        normalize_role(bad)  # type: ignore[arg-type]


def test_role_without_events_log_returns_none(kv, accounts):
    r = RoleRegistry(kv)
    r.bootstrap({ADMIN_ROLE: [accounts["admin"]]})
    assert r.grant_role(accounts["admin"], MINTER_ROLE, accounts["bob"]) is None
    assert r.has_role(MINTER_ROLE, accounts["bob"])
