# Overview: HTTP client for the BarberPro API; mirrors the embedded store's operations and errors.

"""
Remote gateway.

Every call carries the active session's bearer token. Failures come
back as the same DataAccessError subclasses the embedded store raises:
the service's {"error", "code"} body is mapped through
error_from_payload, and a request that never got an answer (refused
connection, DNS failure, timeout) becomes ServerUnreachable, which is
the orchestrator's signal to fall back to the local store.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from ..errors import EntityNotFound, ServerUnreachable, TenantAccessError, error_from_payload
from ..models.registry import EntityKind
from ..services.tenant_repository import strip_update_excluded
from .backends import Backend
from .records import SettingsRecord, Snapshot, to_payload, to_record
from .session import SessionCredentials, SessionProvider

logger = logging.getLogger(__name__)


class RemoteGateway(Backend):
    is_remote = True

    def __init__(
        self,
        base_url: str,
        session_provider: SessionProvider,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.session_provider = session_provider
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _headers(self) -> dict:
        credentials = self.session_provider.current
        if credentials is None:
            return {}
        return {"Authorization": f"Bearer {credentials.token}"}

    def _stamp_tenant(self, payload: dict) -> dict:
        """Write payloads name the session's business; the service refuses any other."""
        credentials = self.session_provider.current
        if credentials is None:
            raise TenantAccessError("No active session")
        if not payload.get("business_id"):
            payload["business_id"] = credentials.tenant_id
        return payload

    async def _request(self, method: str, path: str, *, json: dict | None = None):
        try:
            response = await self._client.request(method, path, headers=self._headers(), json=json)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ServerUnreachable(f"Server unreachable: {exc.__class__.__name__}") from exc

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            raise error_from_payload(body, response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    async def login(self, business_slug: str, username: str, password: str) -> SessionCredentials:
        body = await self._request(
            "POST",
            "/api/auth/login",
            json={"business_slug": business_slug, "username": username, "password": password},
        )
        return SessionCredentials.from_login(body)

    async def logout(self) -> None:
        await self._request("POST", "/api/auth/logout")

    async def health(self) -> dict:
        return await self._request("GET", "/api/health")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_records(self, kind) -> list:
        kind = EntityKind.parse(kind)
        body = await self._request("GET", f"/api/{kind.value}")
        return [to_record(kind, row) for row in body["items"]]

    async def get_settings(self) -> SettingsRecord | None:
        try:
            body = await self._request("GET", "/api/settings")
        except EntityNotFound:
            return None
        return SettingsRecord.from_dict(body)

    async def pull(self) -> Snapshot:
        """Fetch every collection and the settings concurrently."""
        kinds = list(EntityKind)
        results = await asyncio.gather(
            *(self.list_records(kind) for kind in kinds),
            self.get_settings(),
        )
        snapshot = Snapshot(settings=results[-1])
        for kind, records in zip(kinds, results[:-1]):
            setattr(snapshot, kind.value, records)
        return snapshot

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add(self, kind, record):
        kind = EntityKind.parse(kind)
        payload = self._stamp_tenant(to_payload(record))
        body = await self._request("POST", f"/api/{kind.value}", json=payload)
        return to_record(kind, body)

    async def update(self, kind, record):
        """Full-row update; the record's own version is the expected one."""
        kind = EntityKind.parse(kind)
        payload = to_payload(record)
        record_id = payload.pop("id", None)
        expected_version = payload.pop("version", None)
        mutation = strip_update_excluded(kind, payload)
        for managed in ("created_at", "updated_at"):
            mutation.pop(managed, None)
        return await self.update_versioned(kind, record_id, mutation, expected_version)

    async def update_versioned(self, kind, record_id: str, mutation: dict, expected_version):
        kind = EntityKind.parse(kind)
        payload = self._stamp_tenant(dict(mutation))
        payload["version"] = expected_version
        body = await self._request("PUT", f"/api/{kind.value}/{record_id}", json=payload)
        return to_record(kind, body)

    async def remove(self, kind, record_id: str) -> None:
        kind = EntityKind.parse(kind)
        await self._request("DELETE", f"/api/{kind.value}/{record_id}")

    async def update_product_stock(self, record_id: str, stock, expected_version):
        body = await self._request(
            "PUT",
            f"/api/products/{record_id}/stock",
            json=self._stamp_tenant({"stock": stock, "version": expected_version}),
        )
        return to_record(EntityKind.PRODUCTS, body)

    async def update_appointment_status(self, record_id: str, status: str, expected_version):
        body = await self._request(
            "PUT",
            f"/api/appointments/{record_id}/status",
            json=self._stamp_tenant({"status": status, "version": expected_version}),
        )
        return to_record(EntityKind.APPOINTMENTS, body)

    async def update_settings(self, partial: dict, expected_version) -> SettingsRecord:
        body = await self._request(
            "PUT",
            "/api/settings",
            json=self._stamp_tenant({"settings": partial, "version": expected_version}),
        )
        return SettingsRecord.from_dict(body)

    async def upsert_transaction(self, record):
        payload = self._stamp_tenant(to_payload(record))
        body = await self._request("POST", "/api/transactions", json=payload)
        return to_record(EntityKind.TRANSACTIONS, body)

    async def update_transaction_status(self, record_id: str, status: str, settlement_reference=None):
        payload = self._stamp_tenant({"status": status})
        if settlement_reference:
            payload["settlement_reference"] = settlement_reference
        body = await self._request("PUT", f"/api/transactions/{record_id}/status", json=payload)
        return to_record(EntityKind.TRANSACTIONS, body)
