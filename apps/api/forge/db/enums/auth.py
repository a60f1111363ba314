"""User role enums."""

from enum import Enum


class Role(str, Enum):
    """User roles. Only the rep roles are evaluated by alert checks."""

    SALES_REP = "sales_rep"
    MARKETING_REP = "marketing_rep"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


REP_ROLES = frozenset({Role.SALES_REP, Role.MARKETING_REP})
