# Overview: The operation set both data backends expose to the sync orchestrator.

from __future__ import annotations

import abc

from .embedded_store import EmbeddedStore
from .records import SettingsRecord, Snapshot


class Backend(abc.ABC):
    """
    One source of truth for one business.

    Implementations raise the same DataAccessError subclasses for the same
    failures, so the orchestrator can replay a call on the other backend
    without translating anything.
    """

    is_remote = False

    @abc.abstractmethod
    async def pull(self) -> Snapshot: ...

    @abc.abstractmethod
    async def add(self, kind, record): ...

    @abc.abstractmethod
    async def update(self, kind, record): ...

    @abc.abstractmethod
    async def update_versioned(self, kind, record_id: str, mutation: dict, expected_version): ...

    @abc.abstractmethod
    async def remove(self, kind, record_id: str) -> None: ...

    @abc.abstractmethod
    async def update_product_stock(self, record_id: str, stock, expected_version): ...

    @abc.abstractmethod
    async def update_appointment_status(self, record_id: str, status: str, expected_version): ...

    @abc.abstractmethod
    async def update_settings(self, partial: dict, expected_version) -> SettingsRecord: ...

    @abc.abstractmethod
    async def upsert_transaction(self, record): ...

    @abc.abstractmethod
    async def update_transaction_status(self, record_id: str, status: str, settlement_reference=None): ...


class LocalBackend(Backend):
    """Async facade over an open EmbeddedStore; the store itself never blocks on I/O except its snapshot write."""

    def __init__(self, store: EmbeddedStore):
        self.store = store

    async def pull(self) -> Snapshot:
        return self.store.pull()

    async def add(self, kind, record):
        return self.store.add(kind, record)

    async def update(self, kind, record):
        return self.store.update(kind, record)

    async def update_versioned(self, kind, record_id, mutation, expected_version):
        return self.store.update_versioned(kind, record_id, mutation, expected_version)

    async def remove(self, kind, record_id) -> None:
        self.store.remove(kind, record_id)

    async def update_product_stock(self, record_id, stock, expected_version):
        return self.store.update_product_stock(record_id, stock, expected_version)

    async def update_appointment_status(self, record_id, status, expected_version):
        return self.store.update_appointment_status(record_id, status, expected_version)

    async def update_settings(self, partial, expected_version) -> SettingsRecord:
        return self.store.update_settings(partial, expected_version)

    async def upsert_transaction(self, record):
        return self.store.upsert_transaction(record)

    async def update_transaction_status(self, record_id, status, settlement_reference=None):
        return self.store.update_transaction_status(record_id, status, settlement_reference)
