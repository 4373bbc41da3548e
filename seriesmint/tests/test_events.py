# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

import pytest

from seriesmint.constants import EV_MINTED, EV_SERIES_ADDED
from seriesmint.errors import InvalidProof
from seriesmint.events import EventLog


def test_append_assigns_sequence_numbers(kv):
    log = EventLog(kv)
    a = log.append("A", {"x": 1})
    b = log.append("B", {"y": b"\x01"})
    assert (a.seq, b.seq) == (0, 1)
    assert len(log) == 2
    assert [e.name for e in log.all()] == ["A", "B"]
    assert log.all(start=1)[0].args == {"y": b"\x01"}
    assert [e.name for e in log.all(limit=1)] == ["A"]
    assert [e.seq for e in log.by_name("B")] == [1]


def test_event_to_dict_hexes_bytes(kv):
    ev = EventLog(kv).append("A", {"root": b"\xab", "n": 3})
    assert ev.to_dict() == {"seq": 0, "name": "A", "args": {"root": "0xab", "n": 3}}


def test_unsubscribe(kv):
    log = EventLog(kv)
    got = []
    off = log.subscribe(got.append)
    ev = log.append("A", {})
    log.publish([ev])
    off()
    log.publish([ev])
    assert got == [ev]


def test_subscribers_see_committed_events_only(engine, tree, accounts, metadata_ref):
    seen = []
    engine.events.subscribe(lambda ev: seen.append(ev.name))
    sid = engine.add_series(accounts["alice"], tree.root, "s", metadata_ref, 8)
    with pytest.raises(InvalidProof):
        engine.mint(accounts["bob"], accounts["carol"], "r", sid, tree.leaf(0), [])
    engine.mint(accounts["bob"], accounts["carol"], "r", sid, tree.leaf(0), tree.proof(0))
    assert seen == [EV_SERIES_ADDED, EV_MINTED]


def test_failing_subscriber_does_not_undo_operation(engine, tree, accounts, metadata_ref, caplog):
    def broken(_ev):
        raise RuntimeError("listener bug")

    engine.events.subscribe(broken)
    with caplog.at_level(logging.ERROR, logger="seriesmint.events"):
        sid = engine.add_series(accounts["alice"], tree.root, "s", metadata_ref, 8)
    assert engine.series_count() == 1
    assert engine.get_root(sid) == tree.root
    assert any("subscriber failed" in r.getMessage() for r in caplog.records)


def test_get_events_filters_by_name_with_limit(engine, series, tree, accounts):
    for i in range(3):
        engine.mint(accounts["bob"], accounts["carol"], f"r{i}", series, tree.leaf(i), tree.proof(i))
    minted = engine.get_events(name=EV_MINTED, limit=2)
    assert [e.args["catalogueIndex"] for e in minted] == [0, 1]
    assert [e.name for e in engine.get_events(start=1, limit=1)] == [EV_MINTED]
