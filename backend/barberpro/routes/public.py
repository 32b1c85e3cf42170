# Overview: Unauthenticated booking routes for a shop's public page.

"""
Public booking API.

MULTI-TENANT: The tenant is the business named by the slug in the URL;
suspended or unknown shops answer 404. Responses expose only what a
walk-in customer needs (no staff contact details), and a booking can only
reference that shop's own services and staff.
"""

from flask import Blueprint

from ..errors import ValidationError
from ..extensions import db
from ..models import Service, StaffMember
from ..models.bookings import APPOINTMENT_SCHEDULED
from ..services.audit_service import log_audit_event
from ..services.tenant_repository import TenantRepository
from ..services.tenant_service import get_business_by_slug
from .records import json_body

public_bp = Blueprint("public", __name__, url_prefix="/api/public")

BOOKING_FIELDS = ("customer_name", "customer_phone", "service_id", "staff_id", "scheduled_at")


def _business_or_404(slug: str):
    business = get_business_by_slug(slug)
    if business is None:
        return None, ({"error": "Shop not found or inactive.", "code": "not_found"}, 404)
    return business, None


@public_bp.get("/business/<slug>")
def public_business(slug: str):
    business, error = _business_or_404(slug)
    if error:
        return error
    settings = TenantRepository(db.session, business.id).get_settings() or {}
    info = settings.get("business") or {}
    return {
        "id": business.id,
        "name": business.name,
        "slug": business.slug,
        "phone": info.get("phone"),
        "location": info.get("location"),
    }


@public_bp.get("/services/<slug>")
def public_services(slug: str):
    business, error = _business_or_404(slug)
    if error:
        return error
    services = db.session.query(Service).filter_by(business_id=business.id).order_by(Service.name).all()
    return {"items": [
        {
            "id": s.id,
            "name": s.name,
            "price_cents": s.price_cents,
            "duration_minutes": s.duration_minutes,
            "category": s.category,
        }
        for s in services
    ]}


@public_bp.get("/staff/<slug>")
def public_staff(slug: str):
    business, error = _business_or_404(slug)
    if error:
        return error
    barbers = (
        db.session.query(StaffMember)
        .filter_by(business_id=business.id, role="Barber")
        .order_by(StaffMember.name)
        .all()
    )
    return {"items": [member.to_public_dict() for member in barbers]}


@public_bp.post("/appointments/<slug>")
def public_book(slug: str):
    """Book an appointment; status is always Scheduled and the id is server-assigned."""
    business, error = _business_or_404(slug)
    if error:
        return error

    data = json_body()
    booking = {field: data.get(field) for field in BOOKING_FIELDS}
    missing = [field for field, value in booking.items() if not value]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    repo = TenantRepository(db.session, business.id)
    # Both lookups are tenant-filtered: another shop's ids are simply not found
    repo.get_record("services", booking["service_id"])
    repo.get_record("staff", booking["staff_id"])

    created = repo.add("appointments", {**booking, "status": APPOINTMENT_SCHEDULED})
    log_audit_event(
        "ONLINE_BOOKING",
        business_id=business.id,
        details=f"Online booking {created['id']} for {created['customer_name']}",
    )
    return created, 201
