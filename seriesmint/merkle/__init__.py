"""
Merkle membership verification for series roots.

See :mod:`seriesmint.merkle.verify`.
"""

from .verify import Hash, hash_pair, process_proof, verify

__all__ = ["Hash", "hash_pair", "process_proof", "verify"]
