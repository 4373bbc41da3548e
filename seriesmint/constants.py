"""
Constants shared across the series-mint subsystem.

Role identifiers are fixed, readable 32-byte tags. Domain tags feed the
domain-separated hash helpers in :mod:`seriesmint.utils.hash`.
"""

from __future__ import annotations

from typing import Final

# ---- Hashes ------------------------------------------------------------------

HASH_LEN: Final[int] = 32
ZERO_HASH: Final[bytes] = b"\x00" * HASH_LEN

# Prefix for every domain-separated digest produced by this package.
DOMAIN_PREFIX: Final[bytes] = b"animica|series|"

# Domain tag for mint-request fingerprints.
DOMAIN_FINGERPRINT: Final[str] = "mint.fingerprint"

# ---- Roles (bytes32) ---------------------------------------------------------

ADMIN_ROLE: Final[bytes] = ZERO_HASH
CREATOR_ROLE: Final[bytes] = b"series:role:creator".ljust(32, b"\x00")
MINTER_ROLE: Final[bytes] = b"series:role:minter".ljust(32, b"\x00")

# Roles held on the token collaborator, independent of the engine's.
TOKEN_MINTER_ROLE: Final[bytes] = b"tok:role:minter".ljust(32, b"\x00")
TOKEN_BURNER_ROLE: Final[bytes] = b"tok:role:burner".ljust(32, b"\x00")

ROLE_NAMES: Final[dict] = {
    "admin": ADMIN_ROLE,
    "creator": CREATOR_ROLE,
    "minter": MINTER_ROLE,
}

# ---- Event names -------------------------------------------------------------

EV_SERIES_ADDED: Final[str] = "SeriesAdded"
EV_METADATA_ADDED: Final[str] = "MetadataAdded"
EV_MINTED: Final[str] = "Minted"
EV_ROLE_GRANTED: Final[str] = "RoleGranted"
EV_ROLE_REVOKED: Final[str] = "RoleRevoked"

__all__ = [
    "HASH_LEN",
    "ZERO_HASH",
    "DOMAIN_PREFIX",
    "DOMAIN_FINGERPRINT",
    "ADMIN_ROLE",
    "CREATOR_ROLE",
    "MINTER_ROLE",
    "TOKEN_MINTER_ROLE",
    "TOKEN_BURNER_ROLE",
    "ROLE_NAMES",
    "EV_SERIES_ADDED",
    "EV_METADATA_ADDED",
    "EV_MINTED",
    "EV_ROLE_GRANTED",
    "EV_ROLE_REVOKED",
]
