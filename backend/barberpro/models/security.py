from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

AUDIT_SEVERITIES = ("low", "medium", "high")


class AuditLog(db.Model):
    """
    Per-tenant audit trail of security-relevant actions.

    MULTI-TENANT: Entries are scoped to a business and only ever listed
    for that business.

    WHY: Logins, failed logins, deletes, refunds and cross-tenant write
    attempts must be attributable after the fact.

    IMMUTABLE: Never update or delete. Append-only for audit integrity.
    """
    __tablename__ = "audit_logs"
    __table_args__ = (
        db.Index("ix_audit_logs_business_occurred", "business_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Nullable for pre-auth events (unknown business slug)
    business_id = db.Column(db.String(64), nullable=True, index=True)
    staff_id = db.Column(db.String(64), nullable=True)
    staff_name = db.Column(db.String(255), nullable=True)

    action = db.Column(db.String(64), nullable=False, index=True)  # LOGIN, LOGIN_FAILED, DELETE, REFUND, TENANT_VIOLATION...
    resource = db.Column(db.String(128), nullable=True)            # e.g., "/api/products/p1"
    details = db.Column(db.Text, nullable=True)
    severity = db.Column(db.String(8), nullable=False, default="low")

    ip_address = db.Column(db.String(45), nullable=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "action": self.action,
            "resource": self.resource,
            "details": self.details,
            "severity": self.severity,
            "ip_address": self.ip_address,
            "occurred_at": to_utc_z(self.occurred_at),
        }
