"""
Animica series-mint package.

Merkle-authorized batch issuance: a Creator publishes a series root, and a
Minter holding a membership proof for one leaf may trigger the one-time
issuance of that asset through an injected issuer.

Only light, stable exports are surfaced here to avoid import cycles; the
engine lives in :mod:`seriesmint.engine`.
"""

from __future__ import annotations

try:
    from .version import __version__  # type: ignore
except Exception:  # pragma: no cover
    __version__ = "0.0.0+dev"

__all__ = ["__version__"]
