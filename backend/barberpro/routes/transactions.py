# Overview: Flask API routes for sales transactions; upsert and status settlement.

"""
Transaction routes.

Transactions are not versioned. POST is an upsert (a terminal re-sending
a sale after a timeout must not create a duplicate), and status moves
only along Pending -> Completed|Failed, Completed -> Refunded.

SECURITY:
- Recording a sale requires process_sale
- Refunds additionally require process_refund and are audited
"""

from flask import Blueprint, g

from ..decorators import require_auth, require_permission
from ..errors import ValidationError
from ..models.sales import TX_REFUNDED
from ..services import permission_service
from ..services.audit_service import log_audit_event
from ..services.tenant_service import current_repository
from .records import json_body

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.get("")
@require_auth
def list_transactions():
    return {"items": current_repository().list_records("transactions")}


@transactions_bp.get("/<record_id>")
@require_auth
def get_transaction(record_id: str):
    return current_repository().get_record("transactions", record_id)


@transactions_bp.post("")
@require_auth
@require_permission("process_sale")
def upsert_transaction():
    payload = json_body()
    payload.setdefault("recorded_by", g.current_staff.id)
    return current_repository().upsert_transaction(payload), 201


@transactions_bp.put("/<record_id>/status")
@require_auth
@require_permission("process_sale")
def update_transaction_status(record_id: str):
    payload = json_body()
    status = payload.get("status")
    if not status:
        raise ValidationError("status is required")

    if status == TX_REFUNDED:
        if not permission_service.has_permission(g.business_id, g.role, "process_refund"):
            return {
                "error": "Permission denied",
                "code": "permission_denied",
                "required_permission": "process_refund",
            }, 403

    repo = current_repository()
    repo.claim_tenant(payload)
    updated = repo.update_transaction_status(
        record_id,
        status,
        settlement_reference=payload.get("settlement_reference"),
    )
    if status == TX_REFUNDED:
        log_audit_event(
            "REFUND",
            business_id=g.business_id,
            staff_id=g.current_staff.id,
            staff_name=g.current_staff.name,
            details=f"Refunded transaction {record_id} ({updated['total_cents']} cents)",
            severity="medium",
        )
    return updated
