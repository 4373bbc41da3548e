# -*- coding: utf-8 -*-
"""
seriesmint.tests.conftest
=========================

Shared fixtures for the series-mint tests.

- Deterministic accounts derived via SHA3 (no ``random``).
- A tiny sorted-pair Merkle tree builder so tests can publish real roots
  and produce real proofs for any leaf.
- Fake issuers: one that counts, one that always raises.
- An engine wired over an in-memory store with creator/minter/admin set.

Usage:
    def test_mint(engine, series, tree, accounts):
        leaf, proof = tree.leaf(0), tree.proof(0)
        r = engine.mint(accounts["bob"], accounts["carol"], "ipfs://0", series, leaf, proof)
        assert r.asset_id == 0
"""
from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

import pytest

from seriesmint.config import SeriesMintConfig
from seriesmint.engine import SeriesMintEngine
from seriesmint.merkle.verify import hash_pair
from seriesmint.store.memory import MemoryKeyValue

os.environ.setdefault("PYTHONHASHSEED", "0")


# --- deterministic helpers ----------------------------------------------------

def _det_bytes(label: str, n: int = 32) -> bytes:
    return hashlib.sha3_256(b"seriesmint-tests|" + label.encode("utf-8")).digest()[:n]


def _det_address(tag: str) -> bytes:
    return _det_bytes("addr:" + tag, 20)


def leaf_hash(i: int, salt: str = "default") -> bytes:
    return _det_bytes(f"leaf:{salt}:{i}")


# --- sorted-pair Merkle tree ----------------------------------------------------

@dataclass
class Tree:
    """Levels from leaves (0) to root (-1); an odd node is carried up unpaired."""

    levels: List[List[bytes]] = field(default_factory=list)

    @property
    def root(self) -> bytes:
        return self.levels[-1][0]

    def leaf(self, index: int) -> bytes:
        return self.levels[0][index]

    def proof(self, index: int) -> List[bytes]:
        out: List[bytes] = []
        for level in self.levels[:-1]:
            sib = index ^ 1
            if sib < len(level):
                out.append(level[sib])
            index //= 2
        return out

    def __len__(self) -> int:
        return len(self.levels[0])


def build_tree(leaves: Sequence[bytes]) -> Tree:
    if not leaves:
        raise ValueError("need at least one leaf")
    levels = [list(leaves)]
    while len(levels[-1]) > 1:
        cur = levels[-1]
        nxt = [hash_pair(cur[i], cur[i + 1]) for i in range(0, len(cur) - 1, 2)]
        if len(cur) % 2:
            nxt.append(cur[-1])
        levels.append(nxt)
    return Tree(levels=levels)


# --- fake issuers -------------------------------------------------------------

class CountingIssuer:
    def __init__(self, start: int = 0) -> None:
        self.next_id = start
        self.calls: List[Tuple[bytes, str]] = []

    def mint(self, recipient: bytes, metadata_ref: str) -> int:
        self.calls.append((recipient, metadata_ref))
        asset_id = self.next_id
        self.next_id += 1
        return asset_id


class FailingIssuer:
    def __init__(self, message: str = "token contract reverted") -> None:
        self.message = message
        self.calls = 0

    def mint(self, recipient: bytes, metadata_ref: str) -> int:
        self.calls += 1
        raise RuntimeError(self.message)


# --- fixtures -----------------------------------------------------------------

@pytest.fixture(scope="session")
def accounts() -> Dict[str, bytes]:
    return {name: _det_address(name) for name in ("admin", "alice", "bob", "carol", "mallory")}


@pytest.fixture
def kv() -> MemoryKeyValue:
    return MemoryKeyValue()


@pytest.fixture
def tree() -> Tree:
    return build_tree([leaf_hash(i) for i in range(8)])


@pytest.fixture
def issuer() -> CountingIssuer:
    return CountingIssuer()


@pytest.fixture
def config() -> SeriesMintConfig:
    return SeriesMintConfig()


@pytest.fixture
def engine(kv, issuer, config, accounts) -> SeriesMintEngine:
    return SeriesMintEngine(
        kv,
        issuer,
        config=config,
        admins=[accounts["admin"]],
        creators=[accounts["alice"]],
        minters=[accounts["bob"]],
    )


@pytest.fixture
def metadata_ref() -> bytes:
    return _det_bytes("ref:genesis")


@pytest.fixture
def series(engine, tree, accounts, metadata_ref) -> int:
    return engine.add_series(accounts["alice"], tree.root, "genesis", metadata_ref, len(tree))


# --- nicer assertion output for byte strings ------------------------------------

def pytest_assertrepr_compare(op: str, left: Any, right: Any):
    if op == "==" and isinstance(left, (bytes, bytearray)) and isinstance(right, (bytes, bytearray)):
        return [
            "bytes differ:",
            f"  left  = 0x{bytes(left).hex()}",
            f"  right = 0x{bytes(right).hex()}",
        ]
    return None
