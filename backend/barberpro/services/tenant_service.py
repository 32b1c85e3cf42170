"""
Multi-Tenant Service: Tenant Resolution, Provisioning and Scoping Helpers

WHY: Centralize tenant logic for reuse across routes and the CLI. Every
request must be scoped to a business, and cross-tenant writes must be
refused and recorded.

SECURITY INVARIANTS:
1. Every authenticated request has g.business_id set (see decorators.py)
2. Routes never read business_id from the request body; they build a
   TenantRepository from g.business_id
3. A body that names another business_id is refused by the repository
   and recorded as a TENANT_VIOLATION audit event (severity high)

USAGE:
    from ..services.tenant_service import current_repository

    repo = current_repository()
    repo.list_records("products")
"""

import re

from flask import g

from ..errors import ConstraintViolation, TenantAccessError, ValidationError
from ..extensions import db
from ..models import Business
from ..models.mixins import generate_record_id
from ..models.tenancy import BUSINESS_ACTIVE, BUSINESS_PLANS, BUSINESS_STATUSES
from .audit_service import log_audit_event
from .tenant_repository import TenantRepository

SLUG_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,62}[a-z0-9])?$")


def get_current_business_id() -> str:
    """
    Get current tenant's business_id from Flask g context.

    SECURITY: Raises TenantAccessError if not set. This should never
    happen after @require_auth, but is a safety check.
    """
    business_id = getattr(g, "business_id", None)
    if not business_id:
        raise TenantAccessError("Tenant context not established")
    return business_id


def current_repository() -> TenantRepository:
    """Repository bound to the authenticated business and the request's session."""
    return TenantRepository(db.session, get_current_business_id())


def record_tenant_violation(exc: TenantAccessError) -> None:
    """File a cross-tenant attempt under the caller's own business."""
    staff = getattr(g, "current_staff", None)
    log_audit_event(
        "TENANT_VIOLATION",
        business_id=getattr(g, "business_id", None),
        staff_id=staff.id if staff else None,
        staff_name=staff.name if staff else None,
        details=str(exc),
        severity="high",
    )


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (value or "").lower()).strip("-")
    return slug[:64]


def get_business_by_slug(slug: str, *, active_only: bool = True) -> Business | None:
    """
    Look up a business by its public slug.

    Suspended businesses are invisible to login and public booking.
    """
    if not slug:
        return None
    query = db.session.query(Business).filter_by(slug=slug.strip().lower())
    if active_only:
        query = query.filter_by(status=BUSINESS_ACTIVE)
    return query.first()


def create_business(
    *,
    name: str,
    owner_name: str,
    username: str,
    password: str,
    slug: str | None = None,
    plan: str = "Basic",
    business_id: str | None = None,
) -> tuple[Business, dict]:
    """
    Provision a new tenant: business row, Owner staff member, default settings.

    Returns (business, owner_record). Raises ValidationError for bad input
    and ConstraintViolation when the slug is taken.
    """
    from .auth_service import hash_password

    name = (name or "").strip()
    if not name:
        raise ValidationError("Business name is required")
    slug = (slug or slugify(name)).strip().lower()
    if not SLUG_RE.match(slug):
        raise ValidationError("Shop ID may only contain lowercase letters, digits and dashes")
    if plan not in BUSINESS_PLANS:
        raise ValidationError(f"plan must be one of: {', '.join(BUSINESS_PLANS)}")
    if not username:
        raise ValidationError("Owner username is required")

    if db.session.query(Business).filter_by(slug=slug).first():
        raise ConstraintViolation("Shop ID already taken.")

    password_hash = hash_password(password)

    business = Business(
        id=business_id or generate_record_id(),
        name=name,
        slug=slug,
        status=BUSINESS_ACTIVE,
        plan=plan,
    )
    db.session.add(business)

    repo = TenantRepository(db.session, business.id)
    owner_id = generate_record_id()
    business.owner_id = owner_id
    owner = repo.add(
        "staff",
        {"id": owner_id, "name": owner_name or username, "role": "Owner", "username": username},
        extra_columns={"password_hash": password_hash},
    )
    repo.seed_defaults(business_name=name)
    return business, owner


def set_business_status(slug: str, status: str) -> Business:
    if status not in BUSINESS_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(BUSINESS_STATUSES)}")
    business = get_business_by_slug(slug, active_only=False)
    if business is None:
        raise ValidationError(f"No business with slug {slug!r}")
    business.status = status
    db.session.commit()
    return business
