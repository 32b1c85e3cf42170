from __future__ import annotations

import enum

from .bookings import Appointment, Customer
from .catalog import Product, Service
from .sales import Transaction
from .settings import TenantSettings
from .staff import StaffMember


class EntityKind(str, enum.Enum):
    """Entity collections addressable by the data layer. Values double as URL segments."""

    STAFF = "staff"
    SERVICES = "services"
    PRODUCTS = "products"
    CUSTOMERS = "customers"
    APPOINTMENTS = "appointments"
    TRANSACTIONS = "transactions"

    @classmethod
    def parse(cls, value) -> "EntityKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            raise ValueError(f"Unknown entity kind: {value!r}") from None


MODEL_BY_KIND = {
    EntityKind.STAFF: StaffMember,
    EntityKind.SERVICES: Service,
    EntityKind.PRODUCTS: Product,
    EntityKind.CUSTOMERS: Customer,
    EntityKind.APPOINTMENTS: Appointment,
    EntityKind.TRANSACTIONS: Transaction,
}

# Appointments and transactions are retained with a terminal status instead
DELETABLE_KINDS = frozenset({
    EntityKind.STAFF,
    EntityKind.SERVICES,
    EntityKind.PRODUCTS,
    EntityKind.CUSTOMERS,
})

VERSIONED_KINDS = frozenset(kind for kind in EntityKind if kind is not EntityKind.TRANSACTIONS)

ORDER_BY_KIND = {
    EntityKind.STAFF: (StaffMember.name, StaffMember.id),
    EntityKind.SERVICES: (Service.name, Service.id),
    EntityKind.PRODUCTS: (Product.name, Product.id),
    EntityKind.CUSTOMERS: (Customer.name, Customer.id),
    EntityKind.APPOINTMENTS: (Appointment.scheduled_at, Appointment.id),
    EntityKind.TRANSACTIONS: (Transaction.timestamp.desc(), Transaction.id),
}

# Tables the embedded store creates; businesses, sessions and audit logs stay on the service
TENANT_TABLES = [
    StaffMember.__table__,
    Service.__table__,
    Product.__table__,
    Customer.__table__,
    Appointment.__table__,
    Transaction.__table__,
    TenantSettings.__table__,
]
