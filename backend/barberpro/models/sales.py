from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from .mixins import TenantRecordMixin

TX_PENDING = "Pending"
TX_COMPLETED = "Completed"
TX_FAILED = "Failed"
TX_REFUNDED = "Refunded"
TRANSACTION_STATUSES = (TX_PENDING, TX_COMPLETED, TX_FAILED, TX_REFUNDED)

# A sale is recorded either awaiting settlement (mobile money) or already paid
INITIAL_TRANSACTION_STATUSES = (TX_PENDING, TX_COMPLETED)

# One-way lattice; nothing is ever reversed
TRANSACTION_TRANSITIONS = {
    TX_PENDING: {TX_COMPLETED, TX_FAILED},
    TX_COMPLETED: {TX_REFUNDED},
    TX_FAILED: set(),
    TX_REFUNDED: set(),
}

PAYMENT_METHODS = ("Cash", "M-Pesa", "Card", "Split")


def can_transition_transaction(current: str | None, requested: str) -> bool:
    if current is None:
        return requested in INITIAL_TRANSACTION_STATUSES
    if current == requested:
        return True
    return requested in TRANSACTION_TRANSITIONS.get(current, set())


class Transaction(TenantRecordMixin, db.Model):
    """
    A completed or pending sale.

    Append-mostly and owned by the terminal that rang it up, so it has no
    version column: writes are plain upserts and only the status moves,
    along TRANSACTION_TRANSITIONS, typically when the payment settlement
    callback reports back.

    items is the cart as recorded at checkout (JSON list; see
    validation.validate_transaction for the item shape).
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_business_timestamp", "business_id", "timestamp"),
    )

    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    items = db.Column(db.JSON, nullable=False, default=list)
    total_cents = db.Column(db.Integer, nullable=False, default=0)
    payment_method = db.Column(db.String(16), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=TX_PENDING, index=True)

    customer_id = db.Column(db.String(64), nullable=True)
    customer_name = db.Column(db.String(255), nullable=True)

    payment_reference = db.Column(db.String(128), nullable=True)
    mpesa_phone_number = db.Column(db.String(32), nullable=True)
    # Receipt number reported by the settlement channel
    settlement_reference = db.Column(db.String(128), nullable=True)

    recorded_by = db.Column(db.String(64), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "timestamp": to_utc_z(self.timestamp),
            "items": list(self.items or []),
            "total_cents": self.total_cents,
            "payment_method": self.payment_method,
            "status": self.status,
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "payment_reference": self.payment_reference,
            "mpesa_phone_number": self.mpesa_phone_number,
            "settlement_reference": self.settlement_reference,
            "recorded_by": self.recorded_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
