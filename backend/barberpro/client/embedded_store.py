# Overview: Device-local store; an in-memory SQLite database snapshotted to one file after every write.

"""
Embedded store.

The whole database lives in memory and is written back to `path` as a
single file image after each successful mutation (write to a temp file,
then atomic rename). Reads never touch the disk.

Schema and rules are the service's own: the tables come from the same
model metadata and every operation goes through TenantRepository, so
compare-and-swap, status lattices and stock checks behave identically
offline.

The snapshot is shared by every business that signs in on the device;
one EmbeddedStore instance is bound to exactly one of them.
"""

from __future__ import annotations

import contextlib
import logging
import os
import sqlite3

from sqlalchemy import create_engine, text
from sqlalchemy.exc import DatabaseError as SQLAlchemyDatabaseError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ..errors import PersistenceError, StorageUnavailable
from ..extensions import db
from ..models.registry import TENANT_TABLES, EntityKind
from ..services.tenant_repository import TenantRepository
from .records import SettingsRecord, Snapshot, to_payload, to_record

logger = logging.getLogger(__name__)


class EmbeddedStore:
    def __init__(self, path: str, business_id: str):
        self.path = path
        self.business_id = business_id
        self._engine = None
        self._session = None
        self._repo: TenantRepository | None = None

    @property
    def is_open(self) -> bool:
        return self._repo is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self) -> None:
        """
        Open the snapshot (or create it on first run) and seed this business.

        Idempotent. Raises StorageUnavailable when the file cannot be read,
        is not a database, or cannot take the first snapshot; nothing is
        left half-open in that case.
        """
        if self.is_open:
            return

        engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        try:
            image = self._read_image()
            if image is not None:
                self._load_image(engine, image)
            with engine.begin() as conn:
                # Forces SQLite to parse the header; a corrupt image fails here
                conn.execute(text("SELECT count(*) FROM sqlite_master"))
            db.metadata.create_all(engine, tables=TENANT_TABLES)
        except (sqlite3.DatabaseError, SQLAlchemyDatabaseError) as exc:
            engine.dispose()
            logger.error("Local snapshot %s is unreadable: %s", self.path, exc)
            raise StorageUnavailable(f"Local data file is unreadable: {exc}") from exc
        except StorageUnavailable:
            engine.dispose()
            raise

        self._engine = engine
        self._session = sessionmaker(bind=engine)()
        self._repo = TenantRepository(self._session, self.business_id)

        seeded = self._repo.get_settings() is None
        if seeded:
            self._repo.seed_defaults()
            logger.info("Seeded local data for business %s", self.business_id)
        if image is None or seeded:
            try:
                self._persist()
            except PersistenceError as exc:
                # A medium that cannot take the first snapshot is not usable at all
                self._release()
                raise StorageUnavailable(exc.message) from exc

    def _release(self) -> None:
        self._session.close()
        self._engine.dispose()
        self._session = None
        self._engine = None
        self._repo = None

    def close(self) -> None:
        """Write a final snapshot and release the in-memory database."""
        if not self.is_open:
            return
        try:
            self._persist()
        finally:
            self._release()

    def _read_image(self) -> bytes | None:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "rb") as fh:
                return fh.read()
        except OSError as exc:
            logger.error("Cannot read local snapshot %s: %s", self.path, exc)
            raise StorageUnavailable(f"Local data file cannot be read: {exc}") from exc

    @staticmethod
    def _load_image(engine, image: bytes) -> None:
        raw = engine.raw_connection()
        try:
            raw.driver_connection.deserialize(image)
        finally:
            raw.close()

    def _persist(self) -> None:
        """
        Write the full database image to disk.

        On failure the in-memory change is NOT rolled back: the caller gets
        PersistenceError and the next successful write persists both.
        """
        raw = self._engine.raw_connection()
        try:
            image = raw.driver_connection.serialize()
        finally:
            raw.close()

        tmp_path = f"{self.path}.tmp"
        try:
            directory = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "wb") as fh:
                fh.write(image)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                os.remove(tmp_path)
            logger.error("Failed to write local snapshot %s: %s", self.path, exc)
            raise PersistenceError(f"Local data file could not be written: {exc}") from exc

    @property
    def repo(self) -> TenantRepository:
        if self._repo is None:
            raise StorageUnavailable("Local data store is not open")
        return self._repo

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_records(self, kind) -> list:
        kind = EntityKind.parse(kind)
        return [to_record(kind, row) for row in self.repo.list_records(kind)]

    def get(self, kind, record_id: str):
        kind = EntityKind.parse(kind)
        return to_record(kind, self.repo.get_record(kind, record_id))

    def get_staff(self) -> list:
        return self.list_records(EntityKind.STAFF)

    def get_services(self) -> list:
        return self.list_records(EntityKind.SERVICES)

    def get_products(self) -> list:
        return self.list_records(EntityKind.PRODUCTS)

    def get_customers(self) -> list:
        return self.list_records(EntityKind.CUSTOMERS)

    def get_appointments(self) -> list:
        return self.list_records(EntityKind.APPOINTMENTS)

    def get_transactions(self) -> list:
        return self.list_records(EntityKind.TRANSACTIONS)

    def get_settings(self) -> SettingsRecord | None:
        row = self.repo.get_settings()
        return SettingsRecord.from_dict(row) if row else None

    def pull(self) -> Snapshot:
        return Snapshot.from_dict(self.repo.pull())

    # ------------------------------------------------------------------
    # Writes (each one persists the snapshot once the change is committed)
    # ------------------------------------------------------------------

    def add(self, kind, record):
        kind = EntityKind.parse(kind)
        row = self.repo.add(kind, to_payload(record))
        self._persist()
        return to_record(kind, row)

    def update(self, kind, record):
        kind = EntityKind.parse(kind)
        row = self.repo.update(kind, to_payload(record))
        self._persist()
        return to_record(kind, row)

    def update_versioned(self, kind, record_id: str, mutation: dict, expected_version):
        kind = EntityKind.parse(kind)
        row = self.repo.update_versioned(kind, record_id, mutation, expected_version)
        self._persist()
        return to_record(kind, row)

    def remove(self, kind, record_id: str) -> None:
        """Delete a record; removing one that is already gone is a no-op."""
        if self.repo.remove(kind, record_id):
            self._persist()

    def update_product_stock(self, record_id: str, stock, expected_version):
        row = self.repo.update_product_stock(record_id, stock, expected_version)
        self._persist()
        return to_record(EntityKind.PRODUCTS, row)

    def update_appointment_status(self, record_id: str, status: str, expected_version):
        row = self.repo.update_appointment_status(record_id, status, expected_version)
        self._persist()
        return to_record(EntityKind.APPOINTMENTS, row)

    def update_settings(self, partial: dict, expected_version) -> SettingsRecord:
        row = self.repo.update_settings(partial, expected_version)
        self._persist()
        return SettingsRecord.from_dict(row)

    def upsert_transaction(self, record):
        row = self.repo.upsert_transaction(to_payload(record))
        self._persist()
        return to_record(EntityKind.TRANSACTIONS, row)

    def update_transaction_status(self, record_id: str, status: str, settlement_reference=None):
        row = self.repo.update_transaction_status(record_id, status, settlement_reference)
        self._persist()
        return to_record(EntityKind.TRANSACTIONS, row)
