# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service, permission_service
from .services.permission_service import PermissionDeniedError


def _is_authenticated() -> bool:
    return hasattr(g, 'current_staff') and hasattr(g, 'business_id')


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require authentication and establish tenant context.

    MULTI-TENANT: Sets the following Flask g attributes:
    - g.current_staff: The authenticated StaffMember
    - g.business_id: The business (tenant) the session was issued for
    - g.role: The staff role captured at login
    - g.session_context: The full SessionContext object

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - Business suspended or staff member removed
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authentication required", "code": "unauthenticated"}), 401

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired token", "code": "unauthenticated"}), 401

        g.current_staff = context.staff
        g.business_id = context.business_id
        g.role = context.role
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require a specific permission from the tenant's role mapping.

    MULTI-TENANT: The role -> permission mapping is read from the caller's
    own business settings; denials are audited under that business.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return jsonify({"error": "Authentication required", "code": "unauthenticated"}), 401

            try:
                permission_service.require_permission(
                    business_id=g.business_id,
                    staff_id=g.current_staff.id,
                    role=g.role,
                    permission_code=permission_code,
                    resource=request.path,
                )
            except PermissionDeniedError as e:
                return jsonify({
                    "error": "Permission denied",
                    "code": "permission_denied",
                    "required_permission": permission_code,
                    "message": str(e),
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
