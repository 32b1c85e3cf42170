from .tenancy import Business
from .staff import StaffMember
from .catalog import Service, Product
from .bookings import Customer, Appointment
from .sales import Transaction
from .settings import TenantSettings
from .auth import SessionToken
from .security import AuditLog
from .registry import EntityKind, MODEL_BY_KIND, DELETABLE_KINDS, VERSIONED_KINDS, TENANT_TABLES

__all__ = [
    'Business',
    'StaffMember',
    'Service', 'Product',
    'Customer', 'Appointment',
    'Transaction',
    'TenantSettings',
    'SessionToken',
    'AuditLog',
    'EntityKind', 'MODEL_BY_KIND', 'DELETABLE_KINDS', 'VERSIONED_KINDS', 'TENANT_TABLES',
]
