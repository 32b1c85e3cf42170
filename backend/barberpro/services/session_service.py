# Overview: Bearer session tokens for staff: issue, resolve to a tenant context, revoke and purge.

"""
Staff session tokens.

A barber or cashier signs in once per shift. The token they receive is
the only thing the API trusts afterwards: it resolves to the business,
the staff member and the role captured at sign-in.

MULTI-TENANT: business_id is read from the session row, never from the
request, and cannot change for the life of the token.

SECURITY: Only a SHA-256 digest of the token is stored. The plaintext is
handed to the client once. Tokens expire after SESSION_TTL_HOURS and die
early when the staff member is removed or the business is suspended.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import Business, SessionToken, StaffMember
from ..time_utils import utcnow


@dataclass
class SessionContext:
    """What an authenticated request knows about its caller."""
    staff: StaffMember
    session: SessionToken
    business_id: str
    role: str


def generate_token() -> str:
    """64 hex characters; sent to the client, never stored."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    # Tokens carry 256 bits of entropy, so a plain digest suffices (no bcrypt)
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _session_ttl() -> timedelta:
    return timedelta(hours=int(current_app.config.get("SESSION_TTL_HOURS", 12)))


def _live_session(token: str) -> SessionToken | None:
    return db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()


def _revoke(record: SessionToken, reason: str, when=None) -> None:
    record.is_revoked = True
    record.revoked_at = when or utcnow()
    record.revoked_reason = reason


def create_session(staff: StaffMember) -> tuple[SessionToken, str]:
    """Open a session for `staff`. Returns (row, plaintext_token)."""
    token = generate_token()
    now = utcnow()

    record = SessionToken(
        business_id=staff.business_id,
        staff_id=staff.id,
        role=staff.role,
        token_hash=hash_token(token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _session_ttl(),
        is_revoked=False,
    )
    db.session.add(record)
    db.session.commit()
    return record, token


def validate_session(token: str) -> SessionContext | None:
    """
    Resolve a bearer token.

    None for an unknown, expired or revoked token. A token whose business
    is suspended, or whose staff member was deleted, is revoked on the spot
    and also yields None.
    """
    now = utcnow()
    record = _live_session(token)
    if record is None or record.expires_at < now:
        return None

    business = db.session.get(Business, record.business_id)
    if not business or not business.is_active:
        _revoke(record, "Business suspended", now)
        db.session.commit()
        return None

    staff = db.session.query(StaffMember).filter_by(
        business_id=record.business_id,
        id=record.staff_id,
    ).first()
    if not staff:
        _revoke(record, "Staff member removed", now)
        db.session.commit()
        return None

    record.last_used_at = now
    db.session.commit()
    return SessionContext(
        staff=staff,
        session=record,
        business_id=record.business_id,
        role=record.role,
    )


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """Sign out. False when the token was not live."""
    record = _live_session(token)
    if record is None:
        return False
    _revoke(record, reason)
    db.session.commit()
    return True


def cleanup_expired_sessions(older_than_days: int = 30) -> int:
    """Delete dead sessions (expired or revoked) created before the cutoff. Returns the count."""
    now = utcnow()
    cutoff = now - timedelta(days=older_than_days)

    deleted = db.session.query(SessionToken).filter(
        db.or_(
            SessionToken.expires_at < now,
            SessionToken.is_revoked.is_(True),
        ),
        SessionToken.created_at < cutoff,
    ).delete(synchronize_session=False)

    db.session.commit()
    return deleted
