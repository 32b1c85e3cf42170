# Overview: Optimistic concurrency helpers; maps SQLAlchemy flush failures onto the data-layer errors.

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.orm.exc import StaleDataError

from ..errors import ConstraintViolation, ValidationError, VersionConflict
from ..time_utils import utcnow


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    The version column is what actually protects the row.
    """
    return query.with_for_update()


def check_version(obj, expected_version) -> None:
    """Compare the caller's expected version to the loaded row before mutating it."""
    if expected_version is None:
        raise VersionConflict(
            "An expected version is required for this update",
            expected_version=None,
            current_version=obj.version,
        )
    if isinstance(expected_version, bool) or not isinstance(expected_version, int):
        raise ValidationError(f"Expected version must be an integer, got {expected_version!r}")
    if obj.version != expected_version:
        raise VersionConflict(
            expected_version=expected_version,
            current_version=obj.version,
        )


def touch(obj) -> None:
    """
    Mark a versioned row dirty even when the mutation changed nothing.

    The ORM only issues UPDATE (and bumps version_id_col) for dirty rows;
    every accepted versioned write must produce version + 1.
    """
    obj.updated_at = utcnow()
    flag_modified(obj, "updated_at")


def commit_versioned(session: Session, *, expected_version: int | None = None) -> None:
    """
    Commit the current unit of work.

    StaleDataError means the UPDATE ... WHERE version = :loaded matched no
    row: someone else committed between our read and our flush. Integrity
    failures (duplicate (business_id, id), unique username) surface as
    ConstraintViolation. Either way nothing is applied.
    """
    try:
        session.commit()
    except StaleDataError:
        session.rollback()
        raise VersionConflict(expected_version=expected_version) from None
    except IntegrityError as exc:
        session.rollback()
        raise ConstraintViolation(f"Constraint violated: {exc.orig}") from None
