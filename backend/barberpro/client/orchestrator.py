# Overview: Single data façade for the POS client; picks the remote or local backend and keeps the view current.

"""
Sync orchestrator.

Holds the tenant's collections and routes every operation to exactly one
backend:

    UNINITIALIZED --start()--> REMOTE  (remote pull succeeded)
                          \\-> LOCAL   (remote pull failed for any reason)

Every refresh() is a fresh probe: one successful pull flips to REMOTE,
one failure flips to LOCAL. A remote mutation that gets no answer at all
(ServerUnreachable) flips to LOCAL and is replayed on the embedded store;
every other error reaches the caller unchanged. Version conflicts are
never retried here.

MULTI-TENANT: The embedded store handle belongs to the current session.
On a session boundary the handle is released and the view cleared before
the next tenant's data is loaded.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable

import httpx

from ..config import SyncConfig
from ..errors import (
    DataAccessError,
    PersistenceError,
    ServerUnreachable,
    StorageUnavailable,
    TenantAccessError,
    ValidationError,
)
from ..models.mixins import generate_record_id
from ..models.registry import EntityKind
from ..time_utils import to_utc_z, utcnow
from ..validation import validate_transaction
from .backends import Backend, LocalBackend
from .embedded_store import EmbeddedStore
from .gateway import RemoteGateway
from .records import Snapshot, to_payload
from .session import SessionCredentials, SessionProvider

logger = logging.getLogger(__name__)


class BackendMode(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    REMOTE = "remote"
    LOCAL = "local"


class SyncOrchestrator:
    def __init__(
        self,
        config: SyncConfig,
        session_provider: SessionProvider,
        *,
        gateway: RemoteGateway | None = None,
        store_factory: Callable[[str], EmbeddedStore] | None = None,
    ):
        self.config = config
        self.session_provider = session_provider
        self.gateway = gateway or RemoteGateway(
            config.api_base_url,
            session_provider,
            timeout=config.request_timeout,
        )
        self._store_factory = store_factory or (
            lambda business_id: EmbeddedStore(config.store_path, business_id)
        )

        self.mode = BackendMode.UNINITIALIZED
        self.is_connected = False
        self._backend: Backend | None = None
        self._store: EmbeddedStore | None = None
        self._local: LocalBackend | None = None
        self._view = Snapshot()

        self._unsubscribe = session_provider.subscribe(self.handle_session_change)

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    @property
    def is_remote(self) -> bool:
        return self.mode is BackendMode.REMOTE

    @property
    def staff(self) -> list:
        return self._view.staff

    @property
    def services(self) -> list:
        return self._view.services

    @property
    def products(self) -> list:
        return self._view.products

    @property
    def customers(self) -> list:
        return self._view.customers

    @property
    def appointments(self) -> list:
        return self._view.appointments

    @property
    def transactions(self) -> list:
        return self._view.transactions

    @property
    def settings(self):
        return self._view.settings

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """First load for the signed-in business."""
        credentials = self.session_provider.current
        if credentials is None:
            raise TenantAccessError("Sign in before loading data")
        if self._store is None:
            self._acquire_store(credentials.tenant_id)
        await self.refresh()

    async def refresh(self) -> None:
        """
        Probe the service and reload the whole view.

        Raises StorageUnavailable when neither the service nor the local
        store can produce a snapshot; the previous view is kept.
        """
        if self._store is None:
            raise TenantAccessError("No active session")

        try:
            snapshot = await self.gateway.pull()
        except (DataAccessError, httpx.HTTPError, ValueError) as exc:
            self._switch(BackendMode.LOCAL, reason=exc)
            if not self._store.is_open:
                # Opening may have failed at session start; every refresh retries it
                self._store.init()
            snapshot = self._store.pull()
        else:
            self._switch(BackendMode.REMOTE)
        self._view = snapshot

    async def handle_session_change(self, credentials: SessionCredentials | None) -> None:
        """Release the previous tenant's store and view, then load the new tenant's."""
        self._release_store()
        self._view = Snapshot()
        self.mode = BackendMode.UNINITIALIZED
        self.is_connected = False
        self._backend = None
        if credentials is None:
            return
        self._acquire_store(credentials.tenant_id)
        await self.refresh()

    async def close(self) -> None:
        self._unsubscribe()
        self._release_store()
        await self.gateway.aclose()

    def _acquire_store(self, business_id: str) -> None:
        store = self._store_factory(business_id)
        try:
            store.init()
        except StorageUnavailable as exc:
            # Remote mode still works; refresh() retries when it needs the store
            logger.error("Local store for business %s unavailable: %s", business_id, exc.message)
        self._store = store
        self._local = LocalBackend(store)

    def _release_store(self) -> None:
        store, self._store, self._local = self._store, None, None
        if store is None:
            return
        try:
            store.close()
        except PersistenceError as exc:
            logger.error("Final local snapshot for business %s not written: %s", store.business_id, exc.message)

    def _switch(self, mode: BackendMode, reason: Exception | None = None) -> None:
        if mode is not self.mode:
            if mode is BackendMode.LOCAL:
                logger.warning("Switching to local data: %s", reason)
            else:
                logger.info("Connected to server; using remote data")
        self.mode = mode
        self.is_connected = mode is BackendMode.REMOTE
        self._backend = self.gateway if mode is BackendMode.REMOTE else self._local

    # ------------------------------------------------------------------
    # Mutation pipeline
    # ------------------------------------------------------------------

    async def _mutate(self, kind: EntityKind | None, op: str, *args):
        backend = self._backend
        if backend is None:
            raise StorageUnavailable("Data layer has not been started")

        try:
            result = await self._call(backend, op, args)
        except ServerUnreachable as exc:
            if not backend.is_remote:
                raise
            self._switch(BackendMode.LOCAL, reason=exc)
            result = await self._call(self._local, op, args)

        await self._resync(kind, op, args, result)
        return result

    async def _call(self, backend: Backend, op: str, args: tuple):
        try:
            return await getattr(backend, op)(*args)
        except PersistenceError:
            # The change is live in memory even though the snapshot write failed
            self._view = self._store.pull()
            raise

    async def _resync(self, kind: EntityKind | None, op: str, args: tuple, result) -> None:
        # Sales move product stock too, so they always reload everything
        if self.config.full_refresh_after_mutation or kind is EntityKind.TRANSACTIONS:
            if self.is_remote:
                await self.refresh()
            else:
                self._view = self._store.pull()
            return
        self._patch(kind, op, args, result)

    def _patch(self, kind: EntityKind | None, op: str, args: tuple, result) -> None:
        if kind is None:
            self._view.settings = result
            return
        if op == "remove":
            record_id = args[1]
            items = [item for item in self._view.collection(kind) if item.id != record_id]
        else:
            items = list(self._view.collection(kind))
            for index, item in enumerate(items):
                if item.id == result.id:
                    items[index] = result
                    break
            else:
                items.append(result)
        setattr(self._view, kind.value, items)

    @staticmethod
    def _with_id(record):
        """Assign the id before the first attempt so a fallback replay inserts the same record."""
        payload = to_payload(record)
        if not payload.get("id"):
            payload["id"] = generate_record_id()
        return payload

    # ------------------------------------------------------------------
    # Entity operations
    # ------------------------------------------------------------------

    async def _add(self, kind: EntityKind, record):
        return await self._mutate(kind, "add", kind, self._with_id(record))

    async def _update(self, kind: EntityKind, record):
        return await self._mutate(kind, "update", kind, record)

    async def _delete(self, kind: EntityKind, record_id: str) -> None:
        await self._mutate(kind, "remove", kind, record_id)

    async def add_staff(self, record):
        return await self._add(EntityKind.STAFF, record)

    async def update_staff(self, record):
        return await self._update(EntityKind.STAFF, record)

    async def delete_staff(self, record_id: str) -> None:
        await self._delete(EntityKind.STAFF, record_id)

    async def add_service(self, record):
        return await self._add(EntityKind.SERVICES, record)

    async def update_service(self, record):
        return await self._update(EntityKind.SERVICES, record)

    async def delete_service(self, record_id: str) -> None:
        await self._delete(EntityKind.SERVICES, record_id)

    async def add_product(self, record):
        return await self._add(EntityKind.PRODUCTS, record)

    async def update_product(self, record):
        return await self._update(EntityKind.PRODUCTS, record)

    async def delete_product(self, record_id: str) -> None:
        await self._delete(EntityKind.PRODUCTS, record_id)

    async def add_customer(self, record):
        return await self._add(EntityKind.CUSTOMERS, record)

    async def update_customer(self, record):
        return await self._update(EntityKind.CUSTOMERS, record)

    async def delete_customer(self, record_id: str) -> None:
        await self._delete(EntityKind.CUSTOMERS, record_id)

    async def add_appointment(self, record):
        return await self._add(EntityKind.APPOINTMENTS, record)

    async def update_appointment(self, record):
        return await self._update(EntityKind.APPOINTMENTS, record)

    async def update_product_stock(self, record_id: str, stock, expected_version):
        return await self._mutate(EntityKind.PRODUCTS, "update_product_stock", record_id, stock, expected_version)

    async def update_appointment_status(self, record_id: str, status: str, expected_version):
        return await self._mutate(
            EntityKind.APPOINTMENTS, "update_appointment_status", record_id, status, expected_version
        )

    async def update_settings(self, partial: dict, expected_version):
        return await self._mutate(None, "update_settings", partial, expected_version)

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    async def process_sale(self, transaction):
        """
        Record a checkout.

        The business, id, timestamp and cashier are filled in when missing;
        a cart the validation layer rejects raises ValidationError before
        any backend sees it.
        """
        credentials = self.session_provider.current
        if credentials is None:
            raise TenantAccessError("No active session")

        payload = to_payload(transaction)
        if not payload.get("business_id"):
            payload["business_id"] = credentials.tenant_id
        if not payload.get("id"):
            payload["id"] = generate_record_id()
        if not payload.get("timestamp"):
            payload["timestamp"] = to_utc_z(utcnow())
        if not payload.get("recorded_by"):
            payload["recorded_by"] = credentials.staff_id

        reason = validate_transaction(payload)
        if reason:
            raise ValidationError(reason)

        return await self._mutate(EntityKind.TRANSACTIONS, "upsert_transaction", payload)

    async def update_transaction_status(self, record_id: str, status: str, settlement_reference: str | None = None):
        """Settlement (Completed/Failed) or refund of a recorded sale."""
        return await self._mutate(
            EntityKind.TRANSACTIONS, "update_transaction_status", record_id, status, settlement_reference
        )
