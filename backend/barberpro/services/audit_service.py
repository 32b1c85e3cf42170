# Overview: Service-layer operations for the audit log; append-only, tenant-scoped.

from flask import request, has_request_context

from ..extensions import db
from ..models import AuditLog


def log_audit_event(
    action: str,
    *,
    business_id: str | None,
    staff_id: str | None = None,
    staff_name: str | None = None,
    resource: str | None = None,
    details: str | None = None,
    severity: str = "low",
    commit: bool = True,
) -> AuditLog:
    """
    Append one audit entry.

    MULTI-TENANT: business_id is the tenant the event is filed under; for
    cross-tenant attempts that is the CALLER's business, so the attempt
    shows up in the attacker's own log and never leaks into the target's.

    action examples:
    - LOGIN / LOGIN_FAILED / LOGOUT
    - DELETE_RECORD
    - REFUND
    - UPDATE_SETTINGS
    - PERMISSION_DENIED
    - TENANT_VIOLATION
    """
    ip_address = None
    if has_request_context():
        ip_address = request.remote_addr
        if resource is None:
            resource = request.path

    entry = AuditLog(
        business_id=business_id,
        staff_id=staff_id,
        staff_name=staff_name,
        action=action,
        resource=resource,
        details=details,
        severity=severity,
        ip_address=ip_address,
    )
    db.session.add(entry)
    if commit:
        db.session.commit()
    return entry


def list_audit_logs(business_id: str, limit: int = 50) -> list[AuditLog]:
    """Newest first, capped at `limit`."""
    return (
        db.session.query(AuditLog)
        .filter(AuditLog.business_id == business_id)
        .order_by(AuditLog.occurred_at.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )
