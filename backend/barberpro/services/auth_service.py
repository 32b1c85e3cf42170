# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Staff authentication.

MULTI-TENANT: Usernames are unique within a business, not globally, so
login always names the business (its public slug) first.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters with at least one letter and one digit
- Session tokens managed separately (see session_service.py)
"""

import re

import bcrypt

from ..errors import ValidationError
from ..extensions import db
from ..models import StaffMember
from .tenant_service import get_business_by_slug


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""


def validate_password_strength(password: str) -> None:
    if not isinstance(password, str) or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")
    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")
    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with cost factor 12.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in the database
        return False


def authenticate(business_slug: str, username: str, password: str) -> StaffMember | None:
    """
    Resolve a login attempt to a staff member, or None.

    The business must exist and be active; unknown slug, unknown username
    and wrong password are indistinguishable to the caller.
    """
    business = get_business_by_slug(business_slug)
    if business is None:
        return None

    staff = db.session.query(StaffMember).filter_by(
        business_id=business.id,
        username=(username or "").strip(),
    ).first()
    if staff is None or not verify_password(password, staff.password_hash):
        return None
    return staff
