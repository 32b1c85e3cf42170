from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError
from .models.bookings import APPOINTMENT_STATUSES
from .models.catalog import PRODUCT_CATEGORIES
from .models.registry import EntityKind, MODEL_BY_KIND
from .models.sales import PAYMENT_METHODS, TRANSACTION_STATUSES
from .models.settings import SETTINGS_SECTIONS
from .models.staff import STAFF_ROLES
from .permissions import validate_permission_code
from .time_utils import parse_iso_date, parse_iso_datetime


# Maximum price: KES 9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999

# Commission is stored in basis points; 10000 = 100%
MAX_COMMISSION_BPS = 10_000

# Kenyan mobile numbers: 07xx/01xx, optionally with +254 instead of the leading 0
PHONE_RE = re.compile(r"^(?:\+254|0)?[17]\d{8}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Set by the data layer itself, never by a client payload
MANAGED_FIELDS = frozenset({"id", "business_id", "version", "created_at", "updated_at"})

CART_ITEM_TYPES = ("service", "product")


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required on add
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()


POLICIES: dict[EntityKind, ModelValidationPolicy] = {
    EntityKind.STAFF: ModelValidationPolicy(
        writable_fields=frozenset({"name", "role", "commission_rate_bps", "phone", "email", "avatar", "username"}),
        required_on_create=frozenset({"name", "role"}),
    ),
    EntityKind.SERVICES: ModelValidationPolicy(
        writable_fields=frozenset({"name", "price_cents", "duration_minutes", "category"}),
        required_on_create=frozenset({"name", "price_cents", "duration_minutes"}),
    ),
    EntityKind.PRODUCTS: ModelValidationPolicy(
        writable_fields=frozenset({"name", "price_cents", "stock", "category"}),
        required_on_create=frozenset({"name", "price_cents"}),
    ),
    EntityKind.CUSTOMERS: ModelValidationPolicy(
        writable_fields=frozenset({"name", "phone", "email", "notes", "join_date"}),
        required_on_create=frozenset({"name", "phone"}),
    ),
    EntityKind.APPOINTMENTS: ModelValidationPolicy(
        writable_fields=frozenset({
            "customer_name", "customer_phone", "service_id", "staff_id", "scheduled_at", "status",
        }),
        required_on_create=frozenset({"customer_name", "customer_phone", "service_id", "staff_id", "scheduled_at"}),
    ),
    EntityKind.TRANSACTIONS: ModelValidationPolicy(
        writable_fields=frozenset({
            "timestamp", "items", "total_cents", "payment_method", "status",
            "customer_id", "customer_name", "payment_reference", "mpesa_phone_number",
            "settlement_reference", "recorded_by",
        }),
        required_on_create=frozenset({"items", "total_cents", "payment_method"}),
    ),
}

# Fields a full-row update leaves alone; they move only through their own versioned operation
UPDATE_EXCLUDED_FIELDS: dict[EntityKind, frozenset[str]] = {
    EntityKind.PRODUCTS: frozenset({"stock"}),
    EntityKind.APPOINTMENTS: frozenset({"status"}),
}


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        # String input - must be plain digits (with optional leading minus)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer")
            # Reject scientific notation (e.g., "1e15", "1E10")
            if 'e' in stripped.lower():
                raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)")
            # Reject decimal points (e.g., "12.5")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        # Reject floats explicitly
        if isinstance(value, float):
            raise ValidationError(f"{col.key} must be an integer, not a decimal")
        raise ValidationError(f"{col.key} must be an integer")

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        return bool(value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    # Dates ("YYYY-MM-DD")
    if isinstance(coltype, Date):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                d = parse_iso_date(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 date")
            if d is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 date")
            return d
        raise ValidationError(f"{col.key} must be a date")

    if isinstance(coltype, JSON):
        return value

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: replace/patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def is_valid_phone(value: str | None) -> bool:
    if not value:
        return False
    compact = re.sub(r"[\s-]", "", value)
    return bool(PHONE_RE.match(compact))


def _check_price(patch: dict, field: str = "price_cents") -> None:
    if field in patch and patch[field] is not None:
        price = patch[field]
        if price < 0:
            raise ValidationError(f"{field} must be >= 0")
        if price > MAX_PRICE_CENTS:
            raise ValidationError(f"{field} cannot exceed {MAX_PRICE_CENTS}")


def _check_phone(patch: dict, field: str) -> None:
    if patch.get(field) and not is_valid_phone(patch[field]):
        raise ValidationError(f"Invalid phone number format for {field} (e.g., 0712345678)")


def _check_email(patch: dict, field: str = "email") -> None:
    if patch.get(field) and not EMAIL_RE.match(patch[field]):
        raise ValidationError(f"Invalid email address: {patch[field]}")


def _check_choice(patch: dict, field: str, choices) -> None:
    if field in patch and patch[field] is not None and patch[field] not in choices:
        raise ValidationError(f"{field} must be one of: {', '.join(choices)}")


def enforce_rules(kind: EntityKind, patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if kind is EntityKind.STAFF:
        _check_choice(patch, "role", STAFF_ROLES)
        rate = patch.get("commission_rate_bps")
        if rate is not None and not 0 <= rate <= MAX_COMMISSION_BPS:
            raise ValidationError(f"commission_rate_bps must be between 0 and {MAX_COMMISSION_BPS}")
        _check_phone(patch, "phone")
        _check_email(patch)

    elif kind is EntityKind.SERVICES:
        _check_price(patch)
        if "duration_minutes" in patch and (patch["duration_minutes"] or 0) < 1:
            raise ValidationError("duration_minutes must be at least 1")

    elif kind is EntityKind.PRODUCTS:
        _check_price(patch)
        _check_choice(patch, "category", PRODUCT_CATEGORIES)
        enforce_stock(patch.get("stock"))

    elif kind is EntityKind.CUSTOMERS:
        _check_phone(patch, "phone")
        _check_email(patch)

    elif kind is EntityKind.APPOINTMENTS:
        _check_phone(patch, "customer_phone")
        _check_choice(patch, "status", APPOINTMENT_STATUSES)

    elif kind is EntityKind.TRANSACTIONS:
        _check_choice(patch, "payment_method", PAYMENT_METHODS)
        _check_choice(patch, "status", TRANSACTION_STATUSES)


def enforce_stock(stock) -> None:
    if stock is None:
        return
    if not isinstance(stock, int) or isinstance(stock, bool):
        raise ValidationError("stock must be an integer")
    if stock < 0:
        raise ValidationError("stock must be >= 0")


def clean_record(kind: EntityKind, payload: dict, *, partial: bool) -> dict:
    """Policy + column validation + business rules for one entity payload."""
    patch = validate_payload(
        model=MODEL_BY_KIND[kind],
        payload=payload,
        policy=POLICIES[kind],
        partial=partial,
    )
    enforce_rules(kind, patch)
    return patch


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _cart_item_problem(index: int, item) -> str | None:
    label = f"Item {index + 1}"
    if not isinstance(item, dict):
        return f"{label} must be an object"
    if not item.get("item_id") or not isinstance(item.get("item_id"), str):
        return f"{label}: item_id is required"
    if item.get("type") not in CART_ITEM_TYPES:
        return f"{label}: type must be 'service' or 'product'"
    if not item.get("name") or not isinstance(item.get("name"), str):
        return f"{label}: name is required"
    price = item.get("price_cents")
    if not _is_int(price) or price < 0:
        return f"{label}: price_cents must be a non-negative integer"
    quantity = item.get("quantity")
    if not _is_int(quantity) or quantity < 1:
        return f"{label}: quantity must be at least 1"

    staff_ids = item.get("staff_ids")
    if staff_ids is not None:
        if not isinstance(staff_ids, list) or not all(isinstance(s, str) for s in staff_ids):
            return f"{label}: staff_ids must be a list of ids"

    splits = item.get("commission_splits")
    if splits is not None:
        if not isinstance(splits, list):
            return f"{label}: commission_splits must be a list"
        total = 0
        for split in splits:
            if not isinstance(split, dict) or not split.get("staff_id"):
                return f"{label}: each commission split needs a staff_id"
            pct = split.get("percentage")
            if isinstance(pct, bool) or not isinstance(pct, (int, float)) or not 0 <= pct <= 100:
                return f"{label}: commission percentage must be between 0 and 100"
            total += pct
        if total > 100:
            return f"{label}: commission splits exceed 100%"

    version = item.get("item_version")
    if version is not None and (not _is_int(version) or version < 1):
        return f"{label}: item_version must be a positive integer"
    return None


def validate_transaction(payload) -> str | None:
    """
    Check a sale before it reaches any backend.

    Returns None when the payload is acceptable, otherwise a reason fit to
    show the cashier. Shared by the client orchestrator, the repository
    and the service routes, so a sale rejected offline is rejected online
    with the same message.
    """
    if not isinstance(payload, dict):
        return "Transaction must be an object"
    if not payload.get("id") or not isinstance(payload.get("id"), str):
        return "Transaction id is required"

    items = payload.get("items")
    if not isinstance(items, list) or not items:
        return "Cart is empty"
    for index, item in enumerate(items):
        problem = _cart_item_problem(index, item)
        if problem:
            return problem

    total = payload.get("total_cents")
    if not _is_int(total) or total < 0:
        return "total_cents must be a non-negative integer"

    if payload.get("payment_method") not in PAYMENT_METHODS:
        return f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}"
    status = payload.get("status")
    if status is not None and status not in TRANSACTION_STATUSES:
        return f"status must be one of: {', '.join(TRANSACTION_STATUSES)}"

    timestamp = payload.get("timestamp")
    if timestamp is not None and not isinstance(timestamp, datetime):
        try:
            if parse_iso_datetime(str(timestamp)) is None:
                return "timestamp must be an ISO-8601 datetime"
        except ValueError:
            return "timestamp must be an ISO-8601 datetime"

    phone = payload.get("mpesa_phone_number")
    if phone and not is_valid_phone(phone):
        return "Invalid M-Pesa phone number (e.g., 0712345678)"
    return None


def validate_settings_patch(partial) -> dict:
    """
    Validate a partial settings document: known sections only, each an
    object. role_permissions maps a role name to a list of permission codes.
    """
    if not isinstance(partial, dict) or not partial:
        raise ValidationError("settings must be a non-empty object")
    for section, value in partial.items():
        if section not in SETTINGS_SECTIONS:
            raise ValidationError(f"Unknown settings section: {section}")
        if not isinstance(value, dict):
            raise ValidationError(f"settings.{section} must be an object")
    perms = partial.get("role_permissions")
    if perms is not None:
        for role, codes in perms.items():
            if role not in STAFF_ROLES:
                raise ValidationError(f"Unknown role: {role}")
            if not isinstance(codes, list) or not all(isinstance(c, str) for c in codes):
                raise ValidationError(f"role_permissions.{role} must be a list of permission codes")
            unknown = [c for c in codes if not validate_permission_code(c)]
            if unknown:
                raise ValidationError(f"Unknown permission codes: {', '.join(unknown)}")
    return partial


def merge_settings(current: dict, partial: dict) -> dict:
    """One-level deep merge: keys inside a section replace, untouched sections stay."""
    merged = {}
    for section, value in partial.items():
        base = dict(current.get(section) or {})
        base.update(value)
        merged[section] = base
    return merged
