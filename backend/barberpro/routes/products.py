# Overview: Flask API routes for products; CRUD plus the versioned stock update.

"""
Product routes.

CONCURRENCY: Stock moves only through PUT /api/products/<id>/stock with
the version the terminal last saw. Two terminals selling the last bottle
of pomade cannot both succeed.
"""

from ..decorators import require_auth, require_permission
from ..errors import ValidationError
from ..models.registry import EntityKind
from ..services.tenant_service import current_repository
from .records import build_record_blueprint, json_body

products_bp = build_record_blueprint(EntityKind.PRODUCTS, manage_permission="manage_inventory")


@products_bp.put("/<record_id>/stock")
@require_auth
@require_permission("manage_inventory")
def update_stock(record_id: str):
    payload = json_body()
    if "stock" not in payload:
        raise ValidationError("stock is required")
    repo = current_repository()
    repo.claim_tenant(payload)
    return repo.update_product_stock(record_id, payload["stock"], payload.get("version"))
