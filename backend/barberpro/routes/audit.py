# Overview: Flask API routes for reading the tenant's audit log.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_permission
from ..services.audit_service import list_audit_logs

audit_bp = Blueprint("audit", __name__, url_prefix="/api/audit-logs")


@audit_bp.get("")
@require_auth
@require_permission("view_reports")
def list_logs():
    limit = request.args.get("limit", default=50, type=int)
    limit = max(1, min(limit, 200))
    return {"items": [entry.to_dict() for entry in list_audit_logs(g.business_id, limit=limit)]}
