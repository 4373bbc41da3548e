"""
seriesmint.merkle.verify
========================

Sorted-pair Merkle inclusion checks.

Inner nodes are ``sha3_256(min(a, b) || max(a, b))`` with a bytewise
comparison, so a proof is just the ordered list of sibling hashes from the
leaf up to (excluding) the root; no left/right direction bits are carried.
Leaves are supplied *already hashed* (32 bytes); how a leaf is derived from
an asset's membership claim is the tree publisher's business.

Key functions
-------------
- hash_pair(a, b)
- process_proof(leaf, proof) -> computed root
- verify(leaf, root, proof) -> bool

All three are pure. ``verify`` never hashes malformed input: any leaf, root
or proof element that is not exactly 32 bytes yields ``False``.
"""
from __future__ import annotations

from typing import Sequence

from ..constants import HASH_LEN
from ..utils.hash import sha3_256

Hash = bytes  # convention: 32-byte digests


def hash_pair(a: Hash, b: Hash) -> Hash:
    """Commutative inner-node combiner: SHA3-256 over the sorted pair."""
    if len(a) != HASH_LEN or len(b) != HASH_LEN:
        raise ValueError("hash_pair expects two 32-byte hashes")
    a, b = bytes(a), bytes(b)
    return sha3_256(a + b) if a <= b else sha3_256(b + a)


def process_proof(leaf: Hash, proof: Sequence[Hash]) -> Hash:
    """
    Fold ``proof`` over ``leaf`` and return the reconstructed root.

    Raises ValueError if any element is not 32 bytes.
    """
    acc = bytes(leaf)
    if len(acc) != HASH_LEN:
        raise ValueError("leaf must be 32 bytes")
    for sibling in proof:
        acc = hash_pair(acc, sibling)
    return acc


def _well_formed(x: object) -> bool:
    return isinstance(x, (bytes, bytearray, memoryview)) and len(x) == HASH_LEN


def verify(leaf: Hash, root: Hash, proof: Sequence[Hash]) -> bool:
    """
    True iff ``leaf`` is provably included under ``root``.

    An empty proof is valid only for a single-leaf tree (``leaf == root``).
    """
    if not (_well_formed(leaf) and _well_formed(root)):
        return False
    if isinstance(proof, (bytes, bytearray, str)):
        return False
    for p in proof:
        if not _well_formed(p):
            return False
    return process_proof(bytes(leaf), [bytes(p) for p in proof]) == bytes(root)


__all__ = ["Hash", "hash_pair", "process_proof", "verify"]
