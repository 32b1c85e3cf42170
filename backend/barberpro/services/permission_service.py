# Overview: Service-layer operations for permission; role checks against the tenant's settings.

"""
Role-based permission checks.

MULTI-TENANT: Each business edits its own role -> permission mapping
(settings.role_permissions), so the same role can mean different things
in two shops. The lookup always goes through the caller's business.

DESIGN PRINCIPLES:
- Fail closed: a role missing from the mapping has no permissions
- Owner is always allowed, so a shop cannot lock itself out of settings
- Denials are written to the audit log
"""

from ..extensions import db
from ..models import TenantSettings
from .audit_service import log_audit_event

OWNER_ROLE = "Owner"


class PermissionDeniedError(Exception):
    """Raised when the staff member's role lacks a permission."""


def get_role_permissions(business_id: str, role: str) -> set[str]:
    settings = db.session.query(TenantSettings).filter_by(business_id=business_id).first()
    if settings is None:
        return set()
    return set(settings.permissions_for(role))


def has_permission(business_id: str, role: str, permission_code: str) -> bool:
    if role == OWNER_ROLE:
        return True
    return permission_code in get_role_permissions(business_id, role)


def require_permission(
    *,
    business_id: str,
    staff_id: str,
    role: str,
    permission_code: str,
    resource: str | None = None,
) -> None:
    """Raise PermissionDeniedError (after logging it) unless the role holds the permission."""
    if has_permission(business_id, role, permission_code):
        return
    log_audit_event(
        "PERMISSION_DENIED",
        business_id=business_id,
        staff_id=staff_id,
        resource=resource,
        details=f"Role {role} lacks {permission_code}",
        severity="medium",
    )
    raise PermissionDeniedError(f"Missing permission: {permission_code}")
