from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date, to_utc_z
from .mixins import TenantRecordMixin

APPOINTMENT_SCHEDULED = "Scheduled"
APPOINTMENT_COMPLETED = "Completed"
APPOINTMENT_CANCELLED = "Cancelled"
APPOINTMENT_STATUSES = (APPOINTMENT_SCHEDULED, APPOINTMENT_COMPLETED, APPOINTMENT_CANCELLED)

# Scheduled is the only non-terminal state
APPOINTMENT_TRANSITIONS = {
    APPOINTMENT_SCHEDULED: {APPOINTMENT_COMPLETED, APPOINTMENT_CANCELLED},
    APPOINTMENT_COMPLETED: set(),
    APPOINTMENT_CANCELLED: set(),
}


def can_transition_appointment(current: str, requested: str) -> bool:
    if current == requested:
        return True
    return requested in APPOINTMENT_TRANSITIONS.get(current, set())


class Customer(TenantRecordMixin, db.Model):
    __tablename__ = "customers"
    __table_args__ = (
        db.Index("ix_customers_business_name", "business_id", "name"),
        db.Index("ix_customers_business_phone", "business_id", "phone"),
    )

    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    join_date = db.Column(db.Date, nullable=True)

    version = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "notes": self.notes,
            "join_date": to_iso_date(self.join_date),
            "version": self.version,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Appointment(TenantRecordMixin, db.Model):
    """
    A booking for one service with one staff member.

    Never deleted: a booking ends as Completed or Cancelled. Status moves
    only through the versioned status update, because two staff members
    may act on the same booking at once (one completing it while another
    cancels).
    """
    __tablename__ = "appointments"
    __table_args__ = (
        db.Index("ix_appointments_business_scheduled", "business_id", "scheduled_at"),
        db.Index("ix_appointments_business_staff", "business_id", "staff_id"),
    )

    customer_name = db.Column(db.String(255), nullable=False)
    customer_phone = db.Column(db.String(32), nullable=False)
    service_id = db.Column(db.String(64), nullable=False)
    staff_id = db.Column(db.String(64), nullable=False)
    scheduled_at = db.Column(db.DateTime(timezone=True), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=APPOINTMENT_SCHEDULED, index=True)

    version = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "service_id": self.service_id,
            "staff_id": self.staff_id,
            "scheduled_at": to_utc_z(self.scheduled_at),
            "status": self.status,
            "version": self.version,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
