# Overview: Flask API routes for staff; CRUD plus login credentials for new staff.

from ..models.registry import EntityKind
from ..services.auth_service import hash_password
from .records import build_record_blueprint


def _prepare_staff(payload: dict) -> dict | None:
    """A new staff member may be given a password; only its bcrypt hash is stored."""
    password = payload.pop("password", None)
    if password is None:
        return None
    return {"password_hash": hash_password(password)}


staff_bp = build_record_blueprint(
    EntityKind.STAFF,
    manage_permission="manage_staff",
    prepare_create=_prepare_staff,
)
