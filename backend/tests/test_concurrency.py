# Overview: Pytest coverage for compare-and-swap updates in the shared tenant repository.

"""
Optimistic Concurrency Tests

Verifies:
1. Every accepted versioned write yields exactly version + 1
2. A stale expected version is refused with nothing applied
3. A writer that commits between our read and our flush loses at flush time
4. Stock and appointment status move only through their own versioned update
"""

import pytest
from sqlalchemy.orm import Session

from barberpro.errors import InvalidStatusTransition, ValidationError, VersionConflict
from barberpro.extensions import db
from barberpro.models.registry import EntityKind
from barberpro.services.tenant_repository import TenantRepository


@pytest.fixture
def repo(db_session, org_a):
    return TenantRepository(db_session, org_a.id)


@pytest.fixture
def product(repo):
    return repo.add("products", {"id": "P-1", "name": "Pomade", "price_cents": 1500, "stock": 10})


@pytest.fixture
def appointment(repo):
    service = repo.add("services", {"id": "S-1", "name": "Fade", "price_cents": 800, "duration_minutes": 30})
    barber = repo.add("staff", {"id": "ST-1", "name": "Kevo", "role": "Barber"})
    return repo.add("appointments", {
        "id": "A-1",
        "customer_name": "Brian",
        "customer_phone": "0712345678",
        "service_id": service["id"],
        "staff_id": barber["id"],
        "scheduled_at": "2026-10-20T09:00:00Z",
    })


class TestVersionMonotonicity:
    def test_new_records_start_at_version_one(self, product):
        assert product["version"] == 1

    def test_each_accepted_update_bumps_version_by_one(self, repo, product):
        first = repo.update_versioned("products", "P-1", {"price_cents": 1600}, 1)
        second = repo.update_versioned("products", "P-1", {"price_cents": 1700}, 2)
        assert (first["version"], second["version"]) == (2, 3)
        assert second["price_cents"] == 1700

    def test_no_op_mutation_still_bumps_version(self, repo, product):
        """The same values written again are still a write."""
        updated = repo.update_versioned("products", "P-1", {"price_cents": 1500}, 1)
        assert updated["version"] == 2

    def test_full_row_update_uses_record_version(self, repo, product):
        record = dict(product, name="Matte Pomade")
        updated = repo.update("products", record)
        assert updated["name"] == "Matte Pomade"
        assert updated["version"] == 2


class TestCompareAndSwap:
    def test_stale_version_is_refused(self, repo, product):
        repo.update_versioned("products", "P-1", {"price_cents": 1600}, 1)

        with pytest.raises(VersionConflict) as exc_info:
            repo.update_versioned("products", "P-1", {"price_cents": 9999}, 1)

        assert exc_info.value.retryable is True
        assert exc_info.value.expected_version == 1
        assert exc_info.value.current_version == 2
        current = repo.get_record("products", "P-1")
        assert current["price_cents"] == 1600
        assert current["version"] == 2

    def test_missing_expected_version_is_a_conflict(self, repo, product):
        with pytest.raises(VersionConflict):
            repo.update_versioned("products", "P-1", {"price_cents": 1600}, None)

    @pytest.mark.parametrize("expected", ["1", 1.0, True])
    def test_malformed_expected_version_is_a_validation_error(self, repo, product, expected):
        """A non-integer version is a bad request, not a retryable conflict."""
        with pytest.raises(ValidationError, match="must be an integer"):
            repo.update_product_stock("P-1", 9, expected)
        current = repo.get_record("products", "P-1")
        assert (current["stock"], current["version"]) == (10, 1)

    def test_exactly_one_of_two_same_version_writers_wins(self, repo, product):
        """Scenario: two tills both saw version 1."""
        repo.update_product_stock("P-1", 9, 1)
        with pytest.raises(VersionConflict):
            repo.update_product_stock("P-1", 8, 1)
        assert repo.get_record("products", "P-1")["stock"] == 9

    def test_writer_between_read_and_flush_loses(self, app, repo, product):
        """A commit from another connection after our version check fails our flush."""
        other = Session(bind=db.engine)
        try:
            rival = TenantRepository(other, repo.business_id)

            def sneak_in(obj):
                rival.update_versioned("products", "P-1", {"name": "Rival"}, 1)
                obj.price_cents = 2000

            with pytest.raises(VersionConflict):
                repo._apply_versioned(EntityKind.PRODUCTS, "P-1", sneak_in, 1)
        finally:
            other.close()

        db.session.expire_all()
        current = repo.get_record("products", "P-1")
        assert current["name"] == "Rival"
        assert current["price_cents"] == 1500
        assert current["version"] == 2


class TestDedicatedVersionedFields:
    def test_stock_cannot_change_through_generic_update(self, repo, product):
        with pytest.raises(ValidationError):
            repo.update_versioned("products", "P-1", {"stock": 50}, 1)

    def test_full_row_update_leaves_stock_alone(self, repo, product):
        updated = repo.update("products", dict(product, stock=50, name="Wax"))
        assert updated["stock"] == 10
        assert updated["name"] == "Wax"

    def test_negative_stock_is_rejected(self, repo, product):
        with pytest.raises(ValidationError):
            repo.update_product_stock("P-1", -1, 1)

    def test_appointment_status_transition(self, repo, appointment):
        updated = repo.update_appointment_status("A-1", "Completed", 1)
        assert updated["status"] == "Completed"
        assert updated["version"] == 2

    def test_terminal_appointment_status_is_final(self, repo, appointment):
        repo.update_appointment_status("A-1", "Cancelled", 1)
        with pytest.raises(InvalidStatusTransition):
            repo.update_appointment_status("A-1", "Completed", 2)
        assert repo.get_record("appointments", "A-1")["version"] == 2


class TestSettingsVersioning:
    def test_partial_update_merges_one_section(self, repo):
        before = repo.get_settings()
        updated = repo.update_settings({"business": {"phone": "0712345678"}}, before["version"])

        assert updated["version"] == before["version"] + 1
        assert updated["business"]["phone"] == "0712345678"
        assert updated["business"]["name"] == before["business"]["name"]
        assert updated["payment"] == before["payment"]

    def test_stale_settings_version_is_refused(self, repo):
        version = repo.get_settings()["version"]
        repo.update_settings({"bible": {"vision": "Best fades in town"}}, version)
        with pytest.raises(VersionConflict):
            repo.update_settings({"bible": {"vision": "Overwritten"}}, version)

    def test_unknown_permission_code_is_rejected(self, repo):
        version = repo.get_settings()["version"]
        with pytest.raises(ValidationError):
            repo.update_settings({"role_permissions": {"Barber": ["launch_rockets"]}}, version)
