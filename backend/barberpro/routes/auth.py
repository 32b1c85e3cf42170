# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

SECURITY FEATURES:
- Login names the business (slug) so usernames only need to be unique per shop
- Session management with token-based auth (see session_service.py)
- Failed and successful logins are written to the tenant's audit log
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import bearer_token, require_auth
from ..errors import DataAccessError
from ..services import auth_service, permission_service, session_service
from ..services.audit_service import log_audit_event
from ..services.tenant_service import create_business, get_business_by_slug
from .records import json_body

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(staff, session, token: str) -> dict:
    return {
        "token": token,
        "user": staff.to_dict(),
        "business_id": session.business_id,
        "role": session.role,
        "permissions": sorted(permission_service.get_role_permissions(session.business_id, session.role)),
        "expires_at": session.to_dict()["expires_at"],
    }


@auth_bp.post("/signup")
def signup_route():
    """
    Register a new shop: business, Owner account and default settings.

    Body: {business_name, business_slug?, owner_name, username, password, plan?}
    """
    data = json_body()
    try:
        business, owner = create_business(
            name=data.get("business_name"),
            slug=data.get("business_slug"),
            owner_name=data.get("owner_name"),
            username=data.get("username"),
            password=data.get("password"),
            plan=data.get("plan") or "Basic",
        )
    except DataAccessError:
        raise
    except Exception:
        current_app.logger.exception("Failed to register business")
        return jsonify({"error": "Internal server error"}), 500

    log_audit_event(
        "SIGNUP",
        business_id=business.id,
        staff_id=owner["id"],
        staff_name=owner["name"],
        details=f"Business {business.slug} registered",
    )
    return {"business": business.to_dict(), "user": owner}, 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate a staff member and create a session token.

    Body: {business_slug, username, password}
    """
    data = json_body()
    slug = data.get("business_slug")
    username = data.get("username")
    password = data.get("password")

    if not all([slug, username, password]):
        return jsonify({"error": "business_slug, username and password required", "code": "validation_error"}), 400

    staff = auth_service.authenticate(slug, username, password)
    if not staff:
        business = get_business_by_slug(slug)
        log_audit_event(
            "LOGIN_FAILED",
            business_id=business.id if business else None,
            details=f"Failed login for {username!r}",
            severity="medium",
        )
        return jsonify({"error": "Invalid credentials.", "code": "unauthenticated"}), 401

    session, token = session_service.create_session(staff)
    log_audit_event(
        "LOGIN",
        business_id=staff.business_id,
        staff_id=staff.id,
        staff_name=staff.name,
    )
    return jsonify(_session_payload(staff, session, token)), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(bearer_token())
    log_audit_event(
        "LOGOUT",
        business_id=g.business_id,
        staff_id=g.current_staff.id,
        staff_name=g.current_staff.name,
    )
    return {"ok": True}


@auth_bp.get("/me")
@require_auth
def me_route():
    context = g.session_context
    return {
        "user": context.staff.to_dict(),
        "business_id": context.business_id,
        "role": context.role,
        "permissions": sorted(permission_service.get_role_permissions(context.business_id, context.role)),
        "session": context.session.to_dict(),
    }
