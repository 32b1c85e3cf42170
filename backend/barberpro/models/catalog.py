from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .mixins import TenantRecordMixin

PRODUCT_CATEGORIES = ("Retail", "Internal")


class Service(TenantRecordMixin, db.Model):
    """A bookable, sellable service (haircut, beard trim...)."""
    __tablename__ = "services"
    __table_args__ = (
        db.Index("ix_services_business_name", "business_id", "name"),
    )

    name = db.Column(db.String(255), nullable=False)
    # Authoritative storage in cents (clients only format for display)
    price_cents = db.Column(db.Integer, nullable=False, default=0)
    duration_minutes = db.Column(db.Integer, nullable=False, default=30)
    category = db.Column(db.String(64), nullable=False, default="General")

    version = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "name": self.name,
            "price_cents": self.price_cents,
            "duration_minutes": self.duration_minutes,
            "category": self.category,
            "version": self.version,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Product(TenantRecordMixin, db.Model):
    """
    Stock-keeping unit sold at the counter (Retail) or consumed by the
    shop (Internal).

    CONCURRENCY: stock changes only through the versioned stock update or
    the deduction applied when a sale completes; several terminals may
    decrement the same product at once and the version column makes the
    loser fail instead of overwriting.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_business_name", "business_id", "name"),
    )

    name = db.Column(db.String(255), nullable=False)
    price_cents = db.Column(db.Integer, nullable=False, default=0)
    stock = db.Column(db.Integer, nullable=False, default=0)
    category = db.Column(db.String(16), nullable=False, default="Retail")

    version = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "name": self.name,
            "price_cents": self.price_cents,
            "stock": self.stock,
            "category": self.category,
            "version": self.version,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
