# Overview: Flask API routes for the service catalog (haircuts, trims...).

from ..models.registry import EntityKind
from .records import build_record_blueprint

services_bp = build_record_blueprint(EntityKind.SERVICES, manage_permission="manage_services")
