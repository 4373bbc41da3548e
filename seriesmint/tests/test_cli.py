# -*- coding: utf-8 -*-
"""
CLI round trip over a SQLite store: init -> add-series -> mint -> show/events.
"""
from __future__ import annotations

import json

import pytest

typer = pytest.importorskip("typer")
from typer.testing import CliRunner  # type: ignore

from seriesmint.cli.main import app


def hx(b: bytes) -> str:
    return "0x" + b.hex()


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def store_uri(tmp_path) -> str:
    return f"sqlite://{tmp_path}/cli.db"


def _run(runner, store_uri, *args):
    return runner.invoke(app, ["--store", store_uri, *args])


def _ok(result):
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def _init(runner, store_uri, accounts):
    return _ok(
        _run(
            runner, store_uri, "init",
            "--admin", hx(accounts["admin"]),
            "--creator", hx(accounts["alice"]),
            "--minter", hx(accounts["bob"]),
        )
    )


def _mint_args(accounts, tree, i, series="0"):
    args = [
        "mint",
        "--caller", hx(accounts["bob"]),
        "--recipient", hx(accounts["carol"]),
        "--metadata-ref", f"ipfs://asset-{i}",
        "--series", series,
        "--leaf", hx(tree.leaf(i)),
    ]
    for p in tree.proof(i):
        args += ["--proof", hx(p)]
    return args


def test_cli_full_flow(runner, store_uri, accounts, tree, metadata_ref):
    out = _init(runner, store_uri, accounts)
    assert out["granted"] == {"admins": 1, "creators": 1, "minters": 1}
    assert out["seriesCount"] == 0

    out = _ok(
        _run(
            runner, store_uri, "add-series",
            "--caller", hx(accounts["alice"]),
            "--root", hx(tree.root),
            "--name", "genesis",
            "--metadata-ref", hx(metadata_ref),
            "--capacity", "8",
        )
    )
    assert out == {"seriesId": 0}

    out = _ok(_run(runner, store_uri, *_mint_args(accounts, tree, 0)))
    assert out["assetId"] == 0
    out = _ok(_run(runner, store_uri, *_mint_args(accounts, tree, 1)))
    assert out["assetId"] == 1

    dup = _run(runner, store_uri, *_mint_args(accounts, tree, 0))
    assert dup.exit_code == 1
    assert "SERIES_ALREADY_MINTED" in dup.output

    out = _ok(
        _run(runner, store_uri, "add-metadata", "--caller", hx(accounts["alice"]), "--series", "0",
             "--ref", hx(tree.leaf(5)))
    )
    assert out["index"] == 1

    shown = _ok(_run(runner, store_uri, "show", "0"))
    assert shown["issuedAssetIds"] == [0, 1]
    snap = _ok(_run(runner, store_uri, "show"))
    assert snap["seriesCount"] == 1

    evs = _ok(_run(runner, store_uri, "events", "--name", "Minted"))
    assert [e["args"]["assetId"] for e in evs] == [0, 1]


def test_cli_unauthorized_and_grant(runner, store_uri, accounts, tree, metadata_ref):
    _init(runner, store_uri, accounts)
    args = [
        "add-series",
        "--caller", hx(accounts["mallory"]),
        "--root", hx(tree.root),
        "--name", "x",
        "--metadata-ref", hx(metadata_ref),
        "--capacity", "1",
    ]
    res = _run(runner, store_uri, *args)
    assert res.exit_code == 1
    assert "SERIES_UNAUTHORIZED" in res.output

    out = _ok(
        _run(runner, store_uri, "grant", "--caller", hx(accounts["admin"]), "--role", "creator",
             "--account", hx(accounts["mallory"]))
    )
    assert out["changed"] is True
    assert _ok(_run(runner, store_uri, *args)) == {"seriesId": 0}


def test_cli_grant_unknown_role(runner, store_uri, accounts):
    res = _run(runner, store_uri, "grant", "--caller", hx(accounts["admin"]), "--role", "king",
               "--account", hx(accounts["bob"]))
    assert res.exit_code != 0


def test_cli_bad_hex_is_usage_error(runner, store_uri):
    res = _run(runner, store_uri, "add-metadata", "--caller", "0xnothex", "--series", "0", "--ref", "0x00")
    assert res.exit_code == 2


def test_cli_verify_proof(runner, tree):
    args = ["verify-proof", "--leaf", hx(tree.leaf(3)), "--root", hx(tree.root)]
    for p in tree.proof(3):
        args += ["--proof", hx(p)]
    res = runner.invoke(app, args)
    assert res.exit_code == 0
    assert res.output.strip() == "valid"

    res = runner.invoke(app, ["verify-proof", "--leaf", hx(tree.leaf(3)), "--root", hx(tree.root)])
    assert res.exit_code == 1
    assert res.output.strip() == "invalid"


def test_cli_version(runner):
    res = runner.invoke(app, ["--version"])
    assert res.exit_code == 0
    assert res.output.startswith("animica-seriesmint ")
