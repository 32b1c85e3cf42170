# Overview: Pytest coverage for tenant settings: defaults, versioned partial updates and the permission catalog.

from barberpro.models import AuditLog
from barberpro.models.settings import settings_id_for
from barberpro.permissions import DEFAULT_ROLE_PERMISSIONS, get_all_permission_codes
from barberpro.services.tenant_repository import TenantRepository


class TestDefaults:
    def test_new_business_gets_default_settings(self, client, org_a, headers_a):
        response = client.get("/api/settings", headers=headers_a)
        assert response.status_code == 200
        settings = response.get_json()
        assert settings["id"] == settings_id_for(org_a.id)
        assert settings["version"] == 1
        assert settings["business"]["name"] == org_a.name
        assert settings["role_permissions"] == DEFAULT_ROLE_PERMISSIONS

    def test_seed_is_idempotent(self, db_session, org_a):
        repo = TenantRepository(db_session, org_a.id)
        before = repo.get_settings()
        assert repo.seed_defaults(business_name="Renamed") == before

    def test_defaults_are_not_shared_between_businesses(self, db_session, org_a, org_b):
        """Editing one business's role list must not leak into another's defaults."""
        repo_a = TenantRepository(db_session, org_a.id)
        version = repo_a.get_settings()["version"]
        repo_a.update_settings({"role_permissions": {"Barber": ["view_dashboard"]}}, version)

        repo_b = TenantRepository(db_session, org_b.id)
        assert repo_b.get_settings()["role_permissions"]["Barber"] == DEFAULT_ROLE_PERMISSIONS["Barber"]


class TestVersionedUpdate:
    def test_partial_update(self, client, db_session, org_a, headers_a):
        response = client.put("/api/settings", json={
            "settings": {"payment": {"accept_split": True}},
            "version": 1,
        }, headers=headers_a)

        assert response.status_code == 200
        updated = response.get_json()
        assert updated["version"] == 2
        assert updated["payment"]["accept_split"] is True
        assert updated["payment"]["accept_cash"] is True
        assert db_session.query(AuditLog).filter_by(business_id=org_a.id, action="UPDATE_SETTINGS").count() == 1

    def test_stale_version_conflicts(self, client, headers_a):
        client.put("/api/settings", json={"settings": {"bible": {"mission": "Clean cuts"}}, "version": 1},
                   headers=headers_a)
        response = client.put("/api/settings", json={"settings": {"bible": {"mission": "Lost"}}, "version": 1},
                              headers=headers_a)

        assert response.status_code == 409
        body = response.get_json()
        assert body["code"] == "version_conflict"
        assert body["current_version"] == 2

    def test_unknown_section_is_rejected(self, client, headers_a):
        response = client.put("/api/settings", json={"settings": {"theme": {"dark": True}}, "version": 1},
                              headers=headers_a)
        assert response.status_code == 400
        assert response.get_json()["code"] == "validation_error"


class TestPermissionCatalog:
    def test_catalog_lists_every_code(self, client, headers_a):
        response = client.get("/api/settings/permissions", headers=headers_a)
        assert response.status_code == 200
        codes = {entry["code"] for entry in response.get_json()["permissions"]}
        assert codes == set(get_all_permission_codes())
