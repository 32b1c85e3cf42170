# Overview: Typed, immutable records handed to client code by both backends.

"""
Client-side record types.

Both backends return these, built from the same wire dicts the service
emits (Model.to_dict), so code above the data layer never sees whether a
record came from the embedded store or over HTTP. Datetimes stay in
their ISO-8601 wire form; money is integer cents.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any

from ..models.registry import EntityKind


class _Record:
    @classmethod
    def from_dict(cls, data: dict):
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})

    def to_dict(self) -> dict:
        return asdict(self)

    def with_changes(self, **changes):
        return replace(self, **changes)


@dataclass(frozen=True)
class StaffRecord(_Record):
    id: str
    name: str
    role: str = "Barber"
    commission_rate_bps: int = 0
    phone: str | None = None
    email: str | None = None
    avatar: str | None = None
    username: str | None = None
    business_id: str | None = None
    version: int = 1
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class ServiceRecord(_Record):
    id: str
    name: str
    price_cents: int
    duration_minutes: int = 30
    category: str = "General"
    business_id: str | None = None
    version: int = 1
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class ProductRecord(_Record):
    id: str
    name: str
    price_cents: int
    stock: int = 0
    category: str = "Retail"
    business_id: str | None = None
    version: int = 1
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class CustomerRecord(_Record):
    id: str
    name: str
    phone: str
    email: str | None = None
    notes: str | None = None
    join_date: str | None = None
    business_id: str | None = None
    version: int = 1
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class AppointmentRecord(_Record):
    id: str
    customer_name: str
    customer_phone: str
    service_id: str
    staff_id: str
    scheduled_at: str
    status: str = "Scheduled"
    business_id: str | None = None
    version: int = 1
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class TransactionRecord(_Record):
    """A sale. items holds cart lines as plain dicts (see validation.validate_transaction)."""
    id: str
    items: list = field(default_factory=list)
    total_cents: int = 0
    payment_method: str = "Cash"
    status: str = "Pending"
    timestamp: str | None = None
    customer_id: str | None = None
    customer_name: str | None = None
    payment_reference: str | None = None
    mpesa_phone_number: str | None = None
    settlement_reference: str | None = None
    recorded_by: str | None = None
    business_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class SettingsRecord(_Record):
    id: str
    business: dict = field(default_factory=dict)
    payment: dict = field(default_factory=dict)
    bible: dict = field(default_factory=dict)
    role_permissions: dict = field(default_factory=dict)
    business_id: str | None = None
    version: int = 1
    updated_at: str | None = None


RECORD_BY_KIND = {
    EntityKind.STAFF: StaffRecord,
    EntityKind.SERVICES: ServiceRecord,
    EntityKind.PRODUCTS: ProductRecord,
    EntityKind.CUSTOMERS: CustomerRecord,
    EntityKind.APPOINTMENTS: AppointmentRecord,
    EntityKind.TRANSACTIONS: TransactionRecord,
}


def to_record(kind: EntityKind, data: dict):
    return RECORD_BY_KIND[EntityKind.parse(kind)].from_dict(data)


def to_payload(record: Any) -> dict:
    """Accept a record or a plain dict; always return a fresh dict."""
    if isinstance(record, _Record):
        return record.to_dict()
    if isinstance(record, dict):
        return dict(record)
    raise TypeError(f"Expected a record or dict, got {type(record).__name__}")


@dataclass
class Snapshot:
    """Everything one tenant can see, as produced by a full pull."""
    staff: list = field(default_factory=list)
    services: list = field(default_factory=list)
    products: list = field(default_factory=list)
    customers: list = field(default_factory=list)
    appointments: list = field(default_factory=list)
    transactions: list = field(default_factory=list)
    settings: SettingsRecord | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Snapshot":
        snapshot = cls()
        for kind in EntityKind:
            setattr(snapshot, kind.value, [to_record(kind, row) for row in data.get(kind.value) or []])
        settings = data.get("settings")
        snapshot.settings = SettingsRecord.from_dict(settings) if settings else None
        return snapshot

    def collection(self, kind: EntityKind) -> list:
        return getattr(self, EntityKind.parse(kind).value)
