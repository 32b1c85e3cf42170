# Overview: Permission system package.
# Re-exports all public APIs for convenient imports.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    DASHBOARD_PERMISSIONS,
    SALES_PERMISSIONS,
    BOOKING_PERMISSIONS,
    CATALOG_PERMISSIONS,
    PEOPLE_PERMISSIONS,
    SYSTEM_PERMISSIONS,
)
from .roles import DEFAULT_ROLE_PERMISSIONS
from .helpers import (
    get_all_permission_codes,
    get_permission_definition,
    validate_permission_code,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "DASHBOARD_PERMISSIONS",
    "SALES_PERMISSIONS",
    "BOOKING_PERMISSIONS",
    "CATALOG_PERMISSIONS",
    "PEOPLE_PERMISSIONS",
    "SYSTEM_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "get_all_permission_codes",
    "get_permission_definition",
    "validate_permission_code",
]
