from __future__ import annotations

import copy

from ..extensions import db
from ..permissions import DEFAULT_ROLE_PERMISSIONS
from ..time_utils import to_utc_z
from .mixins import TenantRecordMixin

SETTINGS_SECTIONS = ("business", "payment", "bible", "role_permissions")


def default_settings(business_name: str | None = None) -> dict:
    """Section defaults written the first time a tenant is provisioned."""
    return {
        "business": {
            "name": business_name or "BarberPro",
            "phone": "",
            "email": "",
            "location": "",
            "receipt_header": "Thank you for visiting!",
            "receipt_footer": "See you next time.",
            "auto_print_receipt": False,
        },
        "payment": {
            "accept_cash": True,
            "accept_mpesa": True,
            "accept_card": True,
            "accept_split": False,
            "send_sms_receipt": False,
            "send_whatsapp_receipt": False,
            "lipa_online_shortcode": "",
            "lipa_online_endpoint": "",
            "lipa_online_callback_url": "",
        },
        "bible": {
            "enabled": True,
            "verse_of_the_day": "Proverbs 27:17",
            "show_on_dashboard": True,
            "show_on_receipt": True,
        },
        "role_permissions": copy.deepcopy(DEFAULT_ROLE_PERMISSIONS),
    }


def settings_id_for(business_id: str) -> str:
    return f"SET-{business_id}"


class TenantSettings(TenantRecordMixin, db.Model):
    """
    One settings row per business, split into JSON sections.

    Sections are replaced as whole JSON values on write (see
    TenantRepository.update_settings for the merge), so the version column
    covers the row as a unit: two terminals editing different sections
    still conflict, and the loser re-reads.
    """
    __tablename__ = "tenant_settings"
    __table_args__ = (
        db.UniqueConstraint("business_id", name="uq_tenant_settings_business"),
    )

    business = db.Column(db.JSON, nullable=False, default=dict)
    payment = db.Column(db.JSON, nullable=False, default=dict)
    bible = db.Column(db.JSON, nullable=False, default=dict)
    role_permissions = db.Column(db.JSON, nullable=False, default=dict)

    version = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version}

    def permissions_for(self, role: str) -> list[str]:
        return list((self.role_permissions or {}).get(role) or [])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_id": self.business_id,
            "business": dict(self.business or {}),
            "payment": dict(self.payment or {}),
            "bible": dict(self.bible or {}),
            "role_permissions": {k: list(v) for k, v in (self.role_permissions or {}).items()},
            "version": self.version,
            "updated_at": to_utc_z(self.updated_at),
        }
