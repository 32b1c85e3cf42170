from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class SessionToken(db.Model):
    """
    Bearer session issued at login.

    MULTI-TENANT: The token carries business_id and staff_id. Every
    authenticated request derives its tenant from here, never from the
    request body, so a client cannot talk itself into another business.

    SECURITY NOTES:
    - Tokens are stored hashed (SHA-256); the plaintext is returned once
    - Absolute expiry (Config.SESSION_TTL_HOURS)
    - Revocable on logout
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_staff_active", "business_id", "staff_id", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    business_id = db.Column(db.String(64), nullable=False, index=True)
    staff_id = db.Column(db.String(64), nullable=False)
    role = db.Column(db.String(16), nullable=False)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False, index=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "staff_id": self.staff_id,
            "role": self.role,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
            "revoked_at": to_utc_z(self.revoked_at) if self.revoked_at else None,
            "revoked_reason": self.revoked_reason,
        }
