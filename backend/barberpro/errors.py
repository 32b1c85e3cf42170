# Overview: Typed failures shared by the API service, the embedded store and the client gateway.

"""
Data access error taxonomy.

Every failure the data layer can surface is a DataAccessError subclass.
Each class carries the HTTP status the service answers with and a short
wire `code`; the client gateway maps the code back to the same class, so
a caller sees an identical exception whichever backend served the call.

    StorageUnavailable      local durable medium cannot be opened
    PersistenceError        local snapshot write failed (mutation kept in memory)
    ValidationError         payload rejected before touching storage
    TenantAccessError       record belongs to another business
    EntityNotFound          no such record for this business
    ConstraintViolation     duplicate id or other integrity failure
    VersionConflict         stale expected version (retryable)
    InvalidStatusTransition status lattice violated
    RequestFailed           remote call failed
      ServerUnreachable     no response at all (triggers local fallback)
      ServerRejected        service answered with an error
"""
from __future__ import annotations


class DataAccessError(Exception):
    status_code = 500
    code = "internal_error"
    retryable = False

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = str(self.args[0])

    def to_payload(self) -> dict:
        return {"error": self.message, "code": self.code}


class StorageUnavailable(DataAccessError):
    """Local storage could not be opened."""
    status_code = 503
    code = "storage_unavailable"


class PersistenceError(DataAccessError):
    """Local snapshot could not be written."""
    status_code = 500
    code = "persistence_error"


class ValidationError(DataAccessError, ValueError):
    """400-level input problem."""
    status_code = 400
    code = "validation_error"


class TenantAccessError(DataAccessError):
    """Raised when cross-tenant access is attempted."""
    status_code = 403
    code = "tenant_access_denied"


class EntityNotFound(DataAccessError):
    status_code = 404
    code = "not_found"

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} record {record_id!r} not found")
        self.kind = kind
        self.record_id = record_id

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["kind"] = self.kind
        payload["record_id"] = self.record_id
        return payload


class ConstraintViolation(DataAccessError):
    """409-level integrity conflict (e.g., duplicate id)."""
    status_code = 409
    code = "constraint_violation"


class VersionConflict(DataAccessError):
    status_code = 409
    code = "version_conflict"
    retryable = True

    def __init__(
        self,
        message: str | None = None,
        *,
        expected_version: int | None = None,
        current_version: int | None = None,
    ):
        super().__init__(message or "Record was modified by someone else; reload and retry")
        self.expected_version = expected_version
        self.current_version = current_version

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["expected_version"] = self.expected_version
        payload["current_version"] = self.current_version
        return payload


class InvalidStatusTransition(DataAccessError):
    status_code = 422
    code = "invalid_transition"

    def __init__(self, current: str | None, requested: str):
        super().__init__(f"Cannot move status from {current} to {requested}")
        self.current = current
        self.requested = requested

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["current"] = self.current
        payload["requested"] = self.requested
        return payload


class RequestFailed(DataAccessError):
    """Remote request failed."""
    code = "request_failed"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ServerUnreachable(RequestFailed):
    """Remote service did not answer."""
    status_code = 503
    code = "server_unreachable"


class ServerRejected(RequestFailed):
    """Remote service answered with an error."""
    code = "server_rejected"


def error_from_payload(payload: dict, status_code: int) -> DataAccessError:
    """
    Rebuild a typed error from a service error body.

    Codes without a local counterpart become ServerRejected so the caller
    still gets the service's message and status.
    """
    message = payload.get("error") or f"Request failed with HTTP {status_code}"
    code = payload.get("code")

    if code == VersionConflict.code:
        return VersionConflict(
            message,
            expected_version=payload.get("expected_version"),
            current_version=payload.get("current_version"),
        )
    if code == EntityNotFound.code and "record_id" in payload:
        return EntityNotFound(payload.get("kind"), payload["record_id"])
    if code == InvalidStatusTransition.code and "requested" in payload:
        return InvalidStatusTransition(payload.get("current"), payload["requested"])

    simple = {
        ValidationError.code: ValidationError,
        TenantAccessError.code: TenantAccessError,
        ConstraintViolation.code: ConstraintViolation,
    }
    if code in simple:
        return simple[code](message)
    return ServerRejected(message, status_code=status_code)
