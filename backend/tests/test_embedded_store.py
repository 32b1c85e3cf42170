# Overview: Pytest coverage for the device-local store: seeding, durability, isolation and failure modes.

"""
Embedded Store Tests

The store needs no Flask application: it builds its own in-memory
database from the model metadata and snapshots it to a file.
"""

import os

import pytest

from barberpro.client.embedded_store import EmbeddedStore
from barberpro.client.records import ProductRecord, SettingsRecord, StaffRecord
from barberpro.errors import (
    ConstraintViolation,
    EntityNotFound,
    PersistenceError,
    StorageUnavailable,
    TenantAccessError,
    VersionConflict,
)


@pytest.fixture
def store(store_path):
    store = EmbeddedStore(store_path, "biz-a")
    store.init()
    yield store
    store.close()


def pomade(**overrides):
    fields = {"id": "P-1", "name": "Pomade", "price_cents": 1500, "stock": 10}
    fields.update(overrides)
    return ProductRecord(**fields)


class TestInit:
    def test_first_run_seeds_settings_and_writes_snapshot(self, store_path):
        store = EmbeddedStore(store_path, "biz-a")
        store.init()
        try:
            assert os.path.exists(store_path)
            settings = store.get_settings()
            assert isinstance(settings, SettingsRecord)
            assert settings.business_id == "biz-a"
            assert "Owner" in settings.role_permissions
        finally:
            store.close()

    def test_init_is_idempotent(self, store):
        store.add("products", pomade())
        store.init()
        assert [p.id for p in store.get_products()] == ["P-1"]

    def test_empty_collections_read_as_empty_lists(self, store):
        assert store.get_staff() == []
        assert store.get_transactions() == []

    def test_corrupt_snapshot_is_storage_unavailable(self, store_path):
        with open(store_path, "wb") as fh:
            fh.write(b"this is not a database" * 100)

        store = EmbeddedStore(store_path, "biz-a")
        with pytest.raises(StorageUnavailable):
            store.init()
        assert not store.is_open

    def test_unwritable_location_is_storage_unavailable(self, tmp_path):
        blocker = tmp_path / "not-a-directory"
        blocker.write_bytes(b"")

        store = EmbeddedStore(str(blocker / "device.db"), "biz-a")
        with pytest.raises(StorageUnavailable):
            store.init()
        assert not store.is_open
        with pytest.raises(StorageUnavailable):
            store.get_products()

    def test_operations_before_init_are_storage_unavailable(self, store_path):
        with pytest.raises(StorageUnavailable):
            EmbeddedStore(store_path, "biz-a").get_products()


class TestDurability:
    def test_acknowledged_writes_survive_reopen(self, store_path):
        first = EmbeddedStore(store_path, "biz-a")
        first.init()
        first.add("products", pomade())
        first.update_product_stock("P-1", 7, 1)
        # Simulate a crash: no close(), the handle is simply dropped
        first = None

        reopened = EmbeddedStore(store_path, "biz-a")
        reopened.init()
        try:
            product = reopened.get_products()[0]
            assert product.stock == 7
            assert product.version == 2
        finally:
            reopened.close()

    def test_write_failure_keeps_in_memory_change(self, store, monkeypatch):
        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("barberpro.client.embedded_store.os.replace", broken_replace)
        with pytest.raises(PersistenceError):
            store.add("products", pomade())

        # Accepted inconsistency window: the row is live until the process dies
        assert [p.id for p in store.get_products()] == ["P-1"]
        assert not os.path.exists(f"{store.path}.tmp")

        monkeypatch.undo()
        store.update_product_stock("P-1", 3, 1)
        reopened = EmbeddedStore(store.path, "biz-a")
        reopened.init()
        try:
            assert reopened.get_products()[0].stock == 3
        finally:
            reopened.close()


class TestOperations:
    def test_add_assigns_version_one(self, store):
        product = store.add("products", pomade())
        assert isinstance(product, ProductRecord)
        assert product.version == 1
        assert product.business_id == "biz-a"

    def test_add_duplicate_id_is_constraint_violation(self, store):
        store.add("products", pomade())
        with pytest.raises(ConstraintViolation):
            store.add("products", pomade(name="Other"))

    def test_update_carries_record_version(self, store):
        product = store.add("products", pomade())
        updated = store.update("products", product.with_changes(name="Clay"))
        assert updated.name == "Clay"
        assert updated.version == 2

        with pytest.raises(VersionConflict):
            store.update("products", product.with_changes(name="Stale"))

    def test_update_versioned(self, store):
        store.add("staff", StaffRecord(id="ST-1", name="Kevo", role="Barber"))
        updated = store.update_versioned("staff", "ST-1", {"commission_rate_bps": 4000}, 1)
        assert updated.commission_rate_bps == 4000
        assert updated.version == 2

    def test_remove_is_idempotent(self, store):
        store.add("products", pomade())
        store.remove("products", "P-1")
        store.remove("products", "P-1")
        assert store.get_products() == []

    def test_update_missing_record_is_not_found(self, store):
        with pytest.raises(EntityNotFound):
            store.update_product_stock("nope", 1, 1)

    def test_settings_update(self, store):
        settings = store.get_settings()
        updated = store.update_settings({"payment": {"accept_card": False}}, settings.version)
        assert updated.payment["accept_card"] is False
        assert updated.version == settings.version + 1

    def test_pull_returns_everything(self, store):
        store.add("products", pomade())
        snapshot = store.pull()
        assert [p.id for p in snapshot.products] == ["P-1"]
        assert snapshot.settings is not None


class TestDeviceSharedByTenants:
    def test_each_business_sees_only_its_rows(self, store_path):
        a = EmbeddedStore(store_path, "biz-a")
        a.init()
        a.add("products", pomade())
        a.close()

        b = EmbeddedStore(store_path, "biz-b")
        b.init()
        try:
            assert b.get_products() == []
            # Same client id, different business: no collision
            b.add("products", pomade(name="B's pomade"))
            assert b.get_settings().business_id == "biz-b"
            with pytest.raises(TenantAccessError):
                b.add("products", pomade(id="P-2", business_id="biz-a"))
        finally:
            b.close()

        a = EmbeddedStore(store_path, "biz-a")
        a.init()
        try:
            assert [p.name for p in a.get_products()] == ["Pomade"]
        finally:
            a.close()
