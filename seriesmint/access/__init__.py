"""Role-based access control for the series-mint engine and token ledger."""

from .roles import RoleRegistry, normalize_role

__all__ = ["RoleRegistry", "normalize_role"]
