# Overview: Generic CRUD routes for one tenant entity kind; the per-kind blueprints are built from here.

"""
Record routes shared by staff, services, products, customers and
appointments.

MULTI-TENANT: Every handler builds its repository from g.business_id
(set by @require_auth). The body's business_id, if any, is only
compared against it; it never selects the tenant.

CONCURRENCY: PUT is a compare-and-swap. The body's `version` is the
version the client last saw; a stale one answers 409 version_conflict
with the current version in the body.
"""

from flask import Blueprint, g, request

from ..decorators import require_auth, require_permission
from ..errors import ValidationError
from ..models.registry import DELETABLE_KINDS, EntityKind
from ..services.audit_service import log_audit_event
from ..services.tenant_service import current_repository


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def build_record_blueprint(
    kind: EntityKind,
    *,
    manage_permission: str,
    prepare_create=None,
) -> Blueprint:
    """
    Blueprint with list / get / add / versioned update / delete for `kind`.

    prepare_create(payload) may pop server-only inputs from the payload
    and return extra column values for the insert (e.g., a password hash).
    """
    bp = Blueprint(kind.value, __name__, url_prefix=f"/api/{kind.value}")

    @bp.get("")
    @require_auth
    def list_records():
        return {"items": current_repository().list_records(kind)}

    @bp.get("/<record_id>")
    @require_auth
    def get_record(record_id: str):
        return current_repository().get_record(kind, record_id)

    @bp.post("")
    @require_auth
    @require_permission(manage_permission)
    def add_record():
        payload = json_body()
        extra = prepare_create(payload) if prepare_create else None
        created = current_repository().add(kind, payload, extra_columns=extra)
        return created, 201

    @bp.put("/<record_id>")
    @require_auth
    @require_permission(manage_permission)
    def update_record(record_id: str):
        payload = json_body()
        if payload.get("id") not in (None, record_id):
            raise ValidationError("Body id does not match the URL")
        changes = {k: v for k, v in payload.items() if k not in ("id", "version")}
        return current_repository().update_versioned(kind, record_id, changes, payload.get("version"))

    if kind in DELETABLE_KINDS:
        @bp.delete("/<record_id>")
        @require_auth
        @require_permission(manage_permission)
        def delete_record(record_id: str):
            actor_id, actor_name = g.current_staff.id, g.current_staff.name
            removed = current_repository().remove(kind, record_id)
            if removed:
                log_audit_event(
                    "DELETE_RECORD",
                    business_id=g.business_id,
                    staff_id=actor_id,
                    staff_name=actor_name,
                    details=f"Deleted {kind.value} {record_id}",
                    severity="medium",
                )
            # Idempotent: deleting an absent record is not an error
            return "", 204

    return bp
