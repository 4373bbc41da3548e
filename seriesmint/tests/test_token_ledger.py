# -*- coding: utf-8 -*-
from __future__ import annotations

import pytest

from seriesmint.errors import InvalidArgument, NotFound, Unauthorized
from seriesmint.issuance import Issuer
from seriesmint.issuance.token_ledger import TokenLedger


@pytest.fixture
def ledger(accounts):
    return TokenLedger(admin=accounts["admin"], minters=[accounts["bob"]])


def test_mint_assigns_increasing_ids(ledger, accounts):
    assert ledger.mint(accounts["bob"], accounts["carol"], "ipfs://a") == 0
    assert ledger.mint(accounts["bob"], accounts["carol"], "ipfs://b") == 1
    assert ledger.owner_of(1) == accounts["carol"]
    assert ledger.token_uri(0) == "ipfs://a"
    assert ledger.balance_of(accounts["carol"]) == 2
    assert ledger.total_supply() == 2


def test_mint_requires_minter(ledger, accounts):
    with pytest.raises(Unauthorized):
        ledger.mint(accounts["mallory"], accounts["carol"], "x")
    assert ledger.next_asset_id() == 0


def test_mint_rejects_bad_input(ledger, accounts):
    with pytest.raises(InvalidArgument):
        ledger.mint(accounts["bob"], b"", "x")
    with pytest.raises(InvalidArgument):
        ledger.mint(accounts["bob"], accounts["carol"], 5)  # type: ignore[arg-type]
    with pytest.raises(InvalidArgument) as ei:
        ledger.mint(accounts["bob"], accounts["carol"], "ipfs://\ud800")
    assert ei.value.details["field"] == "metadata_ref"
    assert ledger.next_asset_id() == 0
    assert ledger.total_supply() == 0


def test_burn_by_owner_and_burner(ledger, accounts):
    a = ledger.mint(accounts["bob"], accounts["carol"], "x")
    b = ledger.mint(accounts["bob"], accounts["carol"], "y")
    with pytest.raises(Unauthorized):
        ledger.burn(accounts["mallory"], a)
    ledger.burn(accounts["carol"], a)
    assert not ledger.exists(a)
    with pytest.raises(NotFound):
        ledger.owner_of(a)

    ledger.grant_burner(accounts["admin"], accounts["mallory"])
    ledger.burn(accounts["mallory"], b)
    assert ledger.total_supply() == 0
    assert ledger.balance_of(accounts["carol"]) == 0
    # ids are never reused
    assert ledger.mint(accounts["bob"], accounts["carol"], "z") == 2


def test_grant_minter_requires_admin(ledger, accounts):
    with pytest.raises(Unauthorized):
        ledger.grant_minter(accounts["bob"], accounts["mallory"])
    ledger.grant_minter(accounts["admin"], accounts["mallory"])
    assert ledger.mint(accounts["mallory"], accounts["carol"], "x") == 0


def test_bound_issuer_satisfies_protocol(ledger, accounts):
    bound = ledger.issuer_for(accounts["bob"])
    assert isinstance(bound, Issuer)
    assert bound.mint(accounts["carol"], "ipfs://p") == 0
    with pytest.raises(Unauthorized):
        ledger.issuer_for(accounts["mallory"]).mint(accounts["carol"], "x")
