"""
Version helpers for the Animica series-mint package.

Resolution order:
1) importlib.metadata (if the distribution is installed),
2) a static fallback BASE_VERSION with a local ``+src`` tag.
"""
from __future__ import annotations

from functools import lru_cache

try:
    from importlib.metadata import PackageNotFoundError, version as _pkg_version
except Exception:  # pragma: no cover
    PackageNotFoundError = Exception  # type: ignore

    def _pkg_version(_: str) -> str:  # type: ignore
        raise PackageNotFoundError  # type: ignore

# Bump this when making intentional, source-level releases.
BASE_VERSION = "0.1.0"

_PKG_NAME = "animica-seriesmint"


@lru_cache(maxsize=1)
def get_version() -> str:
    try:
        return _pkg_version(_PKG_NAME)
    except PackageNotFoundError:
        return f"{BASE_VERSION}+src"


__version__ = get_version()
__all__ = ["__version__", "get_version", "BASE_VERSION"]
