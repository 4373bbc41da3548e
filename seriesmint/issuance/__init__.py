"""
Issuance collaborator boundary.

The engine depends on the token primitive only through :class:`Issuer`:
"mint an asset for a recipient with a given metadata reference, returning a
new unique identifier". Every call mints a new asset; deduplication is the
engine's job, never the issuer's.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Issuer(Protocol):
    def mint(self, recipient: bytes, metadata_ref: str) -> int:
        """Create a new asset owned by ``recipient``; return its id. May raise."""
        ...


__all__ = ["Issuer"]
