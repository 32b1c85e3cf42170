from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

BUSINESS_ACTIVE = "Active"
BUSINESS_SUSPENDED = "Suspended"
BUSINESS_STATUSES = (BUSINESS_ACTIVE, BUSINESS_SUSPENDED)
BUSINESS_PLANS = ("Basic", "Pro", "Enterprise")


class Business(db.Model):
    """
    Multi-tenant root: every tenant is one barbershop.

    WHY: Shared-database multi-tenancy with strict isolation. Every staff
    member, service, product, customer, appointment, transaction and the
    settings row carry business_id; nothing crosses that boundary.

    The slug is the public handle used at login and by the online booking
    page. Businesses exist only on the service; the embedded store never
    holds this table.
    """
    __tablename__ = "businesses"

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(64), nullable=False, unique=True, index=True)
    owner_id = db.Column(db.String(64), nullable=True)

    status = db.Column(db.String(16), nullable=False, default=BUSINESS_ACTIVE, index=True)
    plan = db.Column(db.String(16), nullable=False, default="Basic")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == BUSINESS_ACTIVE

    def __repr__(self) -> str:
        return f"<Business id={self.id!r} slug={self.slug!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "owner_id": self.owner_id,
            "status": self.status,
            "plan": self.plan,
            "created_at": to_utc_z(self.created_at),
        }
