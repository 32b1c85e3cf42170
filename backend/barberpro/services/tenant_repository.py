# Overview: Tenant-bound CRUD and compare-and-swap updates shared by the API service and the embedded store.

from __future__ import annotations

from collections import OrderedDict
from typing import Callable

from sqlalchemy.orm import Session

from ..errors import (
    ConstraintViolation,
    EntityNotFound,
    InvalidStatusTransition,
    TenantAccessError,
    ValidationError,
    VersionConflict,
)
from ..models.bookings import APPOINTMENT_STATUSES, can_transition_appointment
from ..models.mixins import generate_record_id
from ..models.registry import (
    DELETABLE_KINDS,
    MODEL_BY_KIND,
    ORDER_BY_KIND,
    EntityKind,
)
from ..models.catalog import Product
from ..models.sales import (
    TRANSACTION_STATUSES,
    TX_COMPLETED,
    TX_PENDING,
    Transaction,
    can_transition_transaction,
)
from ..models.settings import TenantSettings, default_settings, settings_id_for
from ..time_utils import utcnow
from ..validation import (
    MANAGED_FIELDS,
    UPDATE_EXCLUDED_FIELDS,
    clean_record,
    enforce_stock,
    merge_settings,
    validate_settings_patch,
    validate_transaction,
)
from .concurrency import check_version, commit_versioned, lock_for_update, touch


def strip_update_excluded(kind: EntityKind, payload: dict) -> dict:
    """Drop the fields a full-row update never changes (stock, appointment status)."""
    excluded = UPDATE_EXCLUDED_FIELDS.get(EntityKind.parse(kind), frozenset())
    return {k: v for k, v in payload.items() if k not in excluded}


class TenantRepository:
    """
    All reads and writes for ONE business over one SQLAlchemy session.

    MULTI-TENANT: Every query is filtered by the bound business_id and
    every insert is stamped with it. A payload that names a different
    business is refused with TenantAccessError; a record id that exists
    only for another business is simply not found.

    CONCURRENCY: Versioned kinds go through _apply_versioned: load the
    row, compare the caller's expected version, mutate, commit. The
    mapper's version_id_col turns the flush into
    UPDATE ... WHERE version = :loaded, so a writer that slipped in
    between our read and our commit makes the flush fail instead of
    being overwritten (see services/concurrency.py).

    The service binds this to Flask-SQLAlchemy's request session; the
    embedded store binds it to its private in-memory session. Both
    backends therefore enforce the same rules with the same code.
    """

    def __init__(self, session: Session, business_id: str | None):
        if not business_id:
            raise TenantAccessError("A business context is required")
        self.session = session
        self.business_id = business_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _query(self, model):
        return self.session.query(model).filter(model.business_id == self.business_id)

    def _find(self, kind: EntityKind, record_id: str, *, lock: bool = False):
        model = MODEL_BY_KIND[kind]
        query = self._query(model).filter(model.id == record_id)
        if lock:
            query = lock_for_update(query)
        return query.one_or_none()

    def _load(self, kind: EntityKind, record_id: str, *, lock: bool = False):
        obj = self._find(kind, record_id, lock=lock)
        if obj is None:
            raise EntityNotFound(kind.value, record_id)
        return obj

    def list_records(self, kind) -> list[dict]:
        kind = EntityKind.parse(kind)
        model = MODEL_BY_KIND[kind]
        rows = self._query(model).order_by(*ORDER_BY_KIND[kind]).all()
        return [row.to_dict() for row in rows]

    def get_record(self, kind, record_id: str) -> dict:
        return self._load(EntityKind.parse(kind), record_id).to_dict()

    def _settings_row(self) -> TenantSettings | None:
        return self._query(TenantSettings).one_or_none()

    def get_settings(self) -> dict | None:
        row = self._settings_row()
        return row.to_dict() if row else None

    def pull(self) -> dict:
        """Every collection plus settings for this business."""
        snapshot = OrderedDict((kind.value, self.list_records(kind)) for kind in EntityKind)
        snapshot["settings"] = self.get_settings()
        return dict(snapshot)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def claim_tenant(self, payload: dict) -> None:
        claimed = payload.get("business_id")
        if claimed not in (None, "", self.business_id):
            raise TenantAccessError(
                f"Record belongs to business {claimed!r}, session is bound to {self.business_id!r}"
            )

    @staticmethod
    def _unmanaged(payload: dict) -> dict:
        return {k: v for k, v in payload.items() if k not in MANAGED_FIELDS}

    def add(self, kind, payload: dict, *, extra_columns: dict | None = None) -> dict:
        """
        Insert a new record for this business with version 1.

        The id is taken from the payload when the client assigned one,
        otherwise generated. extra_columns carries server-side values the
        client may not set directly (e.g., password_hash).
        """
        kind = EntityKind.parse(kind)
        if not isinstance(payload, dict):
            raise ValidationError("Invalid JSON payload")
        self.claim_tenant(payload)

        record_id = str(payload.get("id") or generate_record_id())
        if kind is EntityKind.TRANSACTIONS:
            reason = validate_transaction({**payload, "id": record_id})
            if reason:
                raise ValidationError(reason)

        # On insert a null means "not given": column defaults apply
        provided = {k: v for k, v in self._unmanaged(payload).items() if v is not None}
        patch = clean_record(kind, provided, partial=False)

        if self._find(kind, record_id) is not None:
            raise ConstraintViolation(f"{kind.value} record {record_id!r} already exists")

        model = MODEL_BY_KIND[kind]
        obj = model(business_id=self.business_id, id=record_id, **patch)
        if extra_columns:
            for key, value in extra_columns.items():
                setattr(obj, key, value)

        if kind is EntityKind.TRANSACTIONS:
            obj.status = patch.get("status") or TX_PENDING
            if not can_transition_transaction(None, obj.status):
                raise InvalidStatusTransition(None, obj.status)
            if obj.timestamp is None:
                obj.timestamp = utcnow()

        self.session.add(obj)
        if kind is EntityKind.TRANSACTIONS and obj.status == TX_COMPLETED:
            try:
                self._deduct_stock(obj.items)
            except Exception:
                self.session.rollback()
                raise

        commit_versioned(self.session)
        return obj.to_dict()

    def update(self, kind, payload: dict) -> dict:
        """
        Full-row replace keyed by payload["id"].

        payload["version"] is the version the caller last saw. Fields that
        only move through their own versioned operation (product stock,
        appointment status) are left untouched.
        """
        kind = EntityKind.parse(kind)
        if not isinstance(payload, dict):
            raise ValidationError("Invalid JSON payload")
        if kind is EntityKind.TRANSACTIONS:
            raise ValidationError("Transactions change only through their status")
        record_id = payload.get("id")
        if not record_id:
            raise ValidationError("id is required for update")
        self.claim_tenant(payload)

        changes = strip_update_excluded(kind, self._unmanaged(payload))
        return self.update_versioned(kind, record_id, changes, payload.get("version"))

    def update_versioned(self, kind, record_id: str, mutation: dict, expected_version) -> dict:
        """
        Compare-and-swap: apply `mutation` (field -> value) only if the
        stored version equals expected_version; the result has version + 1.
        """
        kind = EntityKind.parse(kind)
        if kind is EntityKind.TRANSACTIONS:
            raise ValidationError("Transactions are not versioned")
        if not isinstance(mutation, dict):
            raise ValidationError("Mutation must be an object of field values")
        self.claim_tenant(mutation)

        mutation = self._unmanaged(mutation)
        excluded = UPDATE_EXCLUDED_FIELDS.get(kind, frozenset()) & mutation.keys()
        if excluded:
            raise ValidationError(
                f"{', '.join(sorted(excluded))} must be changed through its own update"
            )
        patch = clean_record(kind, mutation, partial=True)

        def apply(obj):
            for key, value in patch.items():
                setattr(obj, key, value)

        return self._apply_versioned(kind, record_id, apply, expected_version)

    def _apply_versioned(
        self,
        kind: EntityKind,
        record_id: str,
        mutate: Callable,
        expected_version,
    ) -> dict:
        obj = self._load(kind, record_id, lock=True)
        check_version(obj, expected_version)
        try:
            mutate(obj)
        except Exception:
            self.session.rollback()
            raise
        touch(obj)
        commit_versioned(self.session, expected_version=expected_version)
        return obj.to_dict()

    def update_product_stock(self, record_id: str, stock, expected_version) -> dict:
        enforce_stock(stock)

        def apply(product):
            product.stock = stock

        return self._apply_versioned(EntityKind.PRODUCTS, record_id, apply, expected_version)

    def update_appointment_status(self, record_id: str, status: str, expected_version) -> dict:
        if status not in APPOINTMENT_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(APPOINTMENT_STATUSES)}")

        def apply(appointment):
            if not can_transition_appointment(appointment.status, status):
                raise InvalidStatusTransition(appointment.status, status)
            appointment.status = status

        return self._apply_versioned(EntityKind.APPOINTMENTS, record_id, apply, expected_version)

    def update_settings(self, partial: dict, expected_version) -> dict:
        validate_settings_patch(partial)
        row = lock_for_update(self._query(TenantSettings)).one_or_none()
        if row is None:
            raise EntityNotFound("settings", settings_id_for(self.business_id))
        check_version(row, expected_version)

        merged = merge_settings(row.to_dict(), partial)
        for section, value in merged.items():
            setattr(row, section, value)
        touch(row)
        commit_versioned(self.session, expected_version=expected_version)
        return row.to_dict()

    def remove(self, kind, record_id: str) -> bool:
        """Hard delete. Returns False (and does nothing) when the record is already gone."""
        kind = EntityKind.parse(kind)
        if kind not in DELETABLE_KINDS:
            raise ValidationError(f"{kind.value} records cannot be deleted")
        obj = self._find(kind, record_id, lock=True)
        if obj is None:
            return False
        self.session.delete(obj)
        commit_versioned(self.session)
        return True

    # ------------------------------------------------------------------
    # Transactions (non-versioned, status lattice)
    # ------------------------------------------------------------------

    def upsert_transaction(self, payload: dict) -> dict:
        """
        Record a sale, or move an existing one along its status lattice.

        A re-sent transaction (same id) is not an error: only its status
        and settlement reference are considered, everything else was fixed
        at checkout.
        """
        reason = validate_transaction(payload)
        if reason:
            raise ValidationError(reason)
        self.claim_tenant(payload)

        existing = self._find(EntityKind.TRANSACTIONS, payload["id"], lock=True)
        if existing is None:
            return self.add(EntityKind.TRANSACTIONS, payload)

        requested = payload.get("status") or existing.status
        self._transition_transaction(existing, requested, payload.get("settlement_reference"))
        commit_versioned(self.session)
        return existing.to_dict()

    def update_transaction_status(
        self,
        record_id: str,
        status: str,
        settlement_reference: str | None = None,
    ) -> dict:
        if status not in TRANSACTION_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(TRANSACTION_STATUSES)}")
        tx = self._load(EntityKind.TRANSACTIONS, record_id, lock=True)
        self._transition_transaction(tx, status, settlement_reference)
        commit_versioned(self.session)
        return tx.to_dict()

    def _transition_transaction(self, tx: Transaction, requested: str, settlement_reference) -> None:
        if not can_transition_transaction(tx.status, requested):
            raise InvalidStatusTransition(tx.status, requested)
        try:
            if requested == TX_COMPLETED and tx.status != TX_COMPLETED:
                self._deduct_stock(tx.items)
        except Exception:
            self.session.rollback()
            raise
        if requested != tx.status or settlement_reference:
            tx.status = requested
            if settlement_reference:
                tx.settlement_reference = settlement_reference
            tx.updated_at = utcnow()

    def _deduct_stock(self, items) -> None:
        """
        Take sold product quantities out of stock, in the caller's unit of work.

        A line carrying item_version must match the product's current
        version; otherwise the whole sale fails with VersionConflict.
        """
        for item in items or []:
            if item.get("type") != "product":
                continue
            product: Product = self._load(EntityKind.PRODUCTS, item["item_id"], lock=True)
            seen = item.get("item_version")
            if seen is not None and seen != product.version:
                raise VersionConflict(
                    f"{product.name} changed since it was added to the cart",
                    expected_version=seen,
                    current_version=product.version,
                )
            remaining = product.stock - int(item.get("quantity") or 0)
            if remaining < 0:
                raise ValidationError(f"Insufficient stock for {product.name} ({product.stock} left)")
            product.stock = remaining
            touch(product)

    # ------------------------------------------------------------------
    # Provisioning
    # ------------------------------------------------------------------

    def seed_defaults(self, business_name: str | None = None) -> dict:
        """Create the settings row with default sections; no-op when it exists."""
        row = self._settings_row()
        if row is not None:
            return row.to_dict()
        row = TenantSettings(
            business_id=self.business_id,
            id=settings_id_for(self.business_id),
            **default_settings(business_name),
        )
        self.session.add(row)
        commit_versioned(self.session)
        return row.to_dict()
