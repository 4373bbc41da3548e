"""
HTTP surface for the series-mint engine: JSON-RPC method shims
(:mod:`.methods`) and a FastAPI mount (:mod:`.mount`).
"""

from .methods import METHODS
from .mount import create_app, dispatch, get_router, mount

__all__ = ["METHODS", "create_app", "dispatch", "get_router", "mount"]
