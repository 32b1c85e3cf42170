from __future__ import annotations

import uuid

from ..extensions import db
from ..time_utils import utcnow


def generate_record_id() -> str:
    return uuid.uuid4().hex


class TenantRecordMixin:
    """
    Columns every tenant-owned table carries.

    MULTI-TENANT: The primary key is (business_id, id). Two businesses may
    reuse the same client-side id without colliding, and a lookup that
    does not name the business cannot address a row at all.

    The same tables are created by the service (Flask-SQLAlchemy) and by
    the embedded store (plain SQLAlchemy engine), so both backends share
    one physical schema per entity.
    """

    business_id = db.Column(db.String(64), primary_key=True)
    id = db.Column(db.String(64), primary_key=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} business_id={self.business_id!r} id={self.id!r}>"
