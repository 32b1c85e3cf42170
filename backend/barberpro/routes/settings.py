# Overview: Flask API routes for tenant settings; versioned partial updates.

from flask import Blueprint, g

from ..decorators import require_auth, require_permission
from ..errors import EntityNotFound
from ..models.settings import settings_id_for
from ..permissions import get_all_permission_codes, get_permission_definition
from ..services.audit_service import log_audit_event
from ..services.tenant_service import current_repository
from .records import json_body

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
@require_auth
def get_settings():
    settings = current_repository().get_settings()
    if settings is None:
        raise EntityNotFound("settings", settings_id_for(g.business_id))
    return settings


@settings_bp.put("")
@require_auth
@require_permission("manage_settings")
def update_settings():
    """
    Body: {"settings": {<section>: {...}}, "version": <int>}

    Sections are merged one level deep; the version covers the whole row.
    """
    payload = json_body()
    repo = current_repository()
    repo.claim_tenant(payload)
    updated = repo.update_settings(payload.get("settings"), payload.get("version"))
    log_audit_event(
        "UPDATE_SETTINGS",
        business_id=g.business_id,
        staff_id=g.current_staff.id,
        staff_name=g.current_staff.name,
        details=f"Sections: {', '.join(sorted(payload['settings']))}",
        severity="medium",
    )
    return updated


@settings_bp.get("/permissions")
@require_auth
def list_permission_catalog():
    """Every permission code the role mapping may grant, for the settings screen."""
    return {"permissions": [get_permission_definition(code) for code in get_all_permission_codes()]}
