from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .mixins import TenantRecordMixin

STAFF_ROLES = ("Owner", "Manager", "Barber", "Cashier")


class StaffMember(TenantRecordMixin, db.Model):
    """
    Shop staff: owners, managers, barbers, cashiers.

    Commission is stored in basis points (4000 = 40%) so split arithmetic
    stays in integers. username/password_hash are only meaningful on the
    service; password_hash never leaves the model.
    """
    __tablename__ = "staff"
    __table_args__ = (
        db.UniqueConstraint("business_id", "username", name="uq_staff_business_username"),
        db.Index("ix_staff_business_name", "business_id", "name"),
    )

    name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(16), nullable=False, default="Barber")
    commission_rate_bps = db.Column(db.Integer, nullable=False, default=0)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    avatar = db.Column(db.String(512), nullable=True)

    username = db.Column(db.String(64), nullable=True)
    password_hash = db.Column(db.String(255), nullable=True)

    version = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "name": self.name,
            "role": self.role,
            "commission_rate_bps": self.commission_rate_bps,
            "phone": self.phone,
            "email": self.email,
            "avatar": self.avatar,
            "username": self.username,
            "version": self.version,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

    def to_public_dict(self) -> dict:
        """Booking page view: no contact details or login name."""
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "avatar": self.avatar,
        }
