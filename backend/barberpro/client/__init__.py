# Overview: POS-side data layer package; re-exports the public client API.

from .backends import Backend, LocalBackend
from .embedded_store import EmbeddedStore
from .gateway import RemoteGateway
from .orchestrator import BackendMode, SyncOrchestrator
from .records import (
    AppointmentRecord,
    CustomerRecord,
    ProductRecord,
    ServiceRecord,
    SettingsRecord,
    Snapshot,
    StaffRecord,
    TransactionRecord,
)
from .session import SessionCredentials, SessionProvider

__all__ = [
    "Backend",
    "LocalBackend",
    "EmbeddedStore",
    "RemoteGateway",
    "BackendMode",
    "SyncOrchestrator",
    "AppointmentRecord",
    "CustomerRecord",
    "ProductRecord",
    "ServiceRecord",
    "SettingsRecord",
    "Snapshot",
    "StaffRecord",
    "TransactionRecord",
    "SessionCredentials",
    "SessionProvider",
]
