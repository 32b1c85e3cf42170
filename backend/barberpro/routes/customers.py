# Overview: Flask API routes for customer records.

from ..models.registry import EntityKind
from .records import build_record_blueprint

customers_bp = build_record_blueprint(EntityKind.CUSTOMERS, manage_permission="manage_customers")
