# Overview: Flask API routes for appointments; CRUD (no delete) plus the versioned status update.

"""
Appointment routes.

Appointments are never deleted. They end as Completed or Cancelled
through PUT /api/appointments/<id>/status, which checks the version
first and the Scheduled -> Completed|Cancelled lattice second.
"""

from ..decorators import require_auth, require_permission
from ..errors import ValidationError
from ..models.registry import EntityKind
from ..services.tenant_service import current_repository
from .records import build_record_blueprint, json_body

appointments_bp = build_record_blueprint(EntityKind.APPOINTMENTS, manage_permission="create_appointment")


@appointments_bp.put("/<record_id>/status")
@require_auth
@require_permission("create_appointment")
def update_status(record_id: str):
    payload = json_body()
    status = payload.get("status")
    if not status:
        raise ValidationError("status is required")
    repo = current_repository()
    repo.claim_tenant(payload)
    return repo.update_appointment_status(record_id, status, payload.get("version"))
