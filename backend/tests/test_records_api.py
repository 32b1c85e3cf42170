# Overview: Pytest coverage for the per-kind record routes (CRUD, CAS on PUT, idempotent delete).

import pytest

from barberpro.models import AuditLog

from conftest import auth_headers, login, make_staff


@pytest.fixture
def service(client, headers_a):
    response = client.post("/api/services", json={
        "name": "Skin Fade", "price_cents": 1000, "duration_minutes": 45, "category": "Haircut",
    }, headers=headers_a)
    assert response.status_code == 201
    return response.get_json()


class TestCreate:
    def test_create_assigns_id_version_and_tenant(self, client, org_a, service):
        assert service["id"]
        assert service["version"] == 1
        assert service["business_id"] == org_a.id

    def test_client_assigned_id_is_kept(self, client, headers_a):
        response = client.post("/api/customers", json={
            "id": "C-42", "name": "Brian", "phone": "0712 345 678", "join_date": "2026-10-01",
        }, headers=headers_a)
        assert response.status_code == 201
        assert response.get_json()["id"] == "C-42"
        assert response.get_json()["join_date"] == "2026-10-01"

    def test_duplicate_id_is_409(self, client, headers_a):
        body = {"id": "P-1", "name": "Gel", "price_cents": 500}
        client.post("/api/products", json=body, headers=headers_a)
        response = client.post("/api/products", json=body, headers=headers_a)
        assert response.status_code == 409
        assert response.get_json()["code"] == "constraint_violation"

    @pytest.mark.parametrize("body,fragment", [
        ({"name": "Gel"}, "Missing required fields"),
        ({"name": "Gel", "price_cents": -1}, "must be >= 0"),
        ({"name": "Gel", "price_cents": 12.5}, "integer"),
        ({"name": "Gel", "price_cents": 100, "category": "Snacks"}, "category"),
        ({"name": "Gel", "price_cents": 100, "sku": "X"}, "Field not allowed"),
    ])
    def test_invalid_product_is_400(self, client, headers_a, body, fragment):
        response = client.post("/api/products", json=body, headers=headers_a)
        assert response.status_code == 400
        assert fragment in response.get_json()["error"]

    def test_invalid_phone_is_400(self, client, headers_a):
        response = client.post("/api/customers", json={"name": "Brian", "phone": "12345"}, headers=headers_a)
        assert response.status_code == 400

    def test_staff_password_is_hashed_and_never_returned(self, client, org_a, headers_a):
        created = make_staff(client, headers_a, name="Kevo", role="Barber", username="kevo")
        assert "password" not in created
        assert "password_hash" not in created
        assert login(client, org_a.slug, "kevo")["role"] == "Barber"

    def test_duplicate_username_in_business_is_409(self, client, headers_a):
        make_staff(client, headers_a, name="Kevo", role="Barber", username="kevo")
        response = client.post("/api/staff", json={"name": "Other", "role": "Barber", "username": "kevo"},
                               headers=headers_a)
        assert response.status_code == 409


class TestVersionedUpdate:
    def test_update_bumps_version(self, client, headers_a, service):
        response = client.put(f"/api/services/{service['id']}", json={
            "price_cents": 1200, "version": 1,
        }, headers=headers_a)
        assert response.status_code == 200
        assert response.get_json()["price_cents"] == 1200
        assert response.get_json()["version"] == 2

    def test_stale_update_is_409_with_current_version(self, client, headers_a, service):
        url = f"/api/services/{service['id']}"
        client.put(url, json={"price_cents": 1200, "version": 1}, headers=headers_a)
        response = client.put(url, json={"price_cents": 1, "version": 1}, headers=headers_a)

        assert response.status_code == 409
        body = response.get_json()
        assert body["code"] == "version_conflict"
        assert body["expected_version"] == 1
        assert body["current_version"] == 2
        assert client.get(url, headers=headers_a).get_json()["price_cents"] == 1200

    def test_missing_version_is_409(self, client, headers_a, service):
        response = client.put(f"/api/services/{service['id']}", json={"price_cents": 5}, headers=headers_a)
        assert response.status_code == 409

    def test_non_integer_version_is_400(self, client, headers_a, service):
        response = client.put(f"/api/services/{service['id']}", json={
            "price_cents": 5, "version": "1",
        }, headers=headers_a)
        assert response.status_code == 400
        assert response.get_json()["code"] == "validation_error"

    def test_foreign_business_on_stock_write_is_403(self, client, org_b, headers_a):
        client.post("/api/products", json={"id": "P-1", "name": "Gel", "price_cents": 500, "stock": 3},
                    headers=headers_a)
        response = client.put("/api/products/P-1/stock", json={
            "stock": 8, "version": 1, "business_id": org_b.id,
        }, headers=headers_a)
        assert response.status_code == 403
        assert client.get("/api/products/P-1", headers=headers_a).get_json()["stock"] == 3

    def test_body_id_must_match_url(self, client, headers_a, service):
        response = client.put(f"/api/services/{service['id']}", json={
            "id": "someone-else", "price_cents": 5, "version": 1,
        }, headers=headers_a)
        assert response.status_code == 400

    def test_stock_moves_only_through_stock_route(self, client, headers_a):
        client.post("/api/products", json={"id": "P-1", "name": "Gel", "price_cents": 500, "stock": 3},
                    headers=headers_a)

        response = client.put("/api/products/P-1", json={"stock": 99, "version": 1}, headers=headers_a)
        assert response.status_code == 400

        response = client.put("/api/products/P-1/stock", json={"stock": 8, "version": 1}, headers=headers_a)
        assert response.status_code == 200
        assert response.get_json()["stock"] == 8
        assert response.get_json()["version"] == 2

    def test_appointment_status_route(self, client, headers_a, service):
        barber = make_staff(client, headers_a, name="Kevo", role="Barber")
        created = client.post("/api/appointments", json={
            "customer_name": "Brian",
            "customer_phone": "0712345678",
            "service_id": service["id"],
            "staff_id": barber["id"],
            "scheduled_at": "2026-10-21T14:00:00Z",
        }, headers=headers_a).get_json()
        assert created["status"] == "Scheduled"

        url = f"/api/appointments/{created['id']}/status"
        done = client.put(url, json={"status": "Completed", "version": 1}, headers=headers_a)
        assert done.status_code == 200

        response = client.put(url, json={"status": "Cancelled", "version": 2}, headers=headers_a)
        assert response.status_code == 422
        assert response.get_json()["code"] == "invalid_transition"


class TestDelete:
    def test_delete_is_idempotent(self, client, headers_a, service):
        url = f"/api/services/{service['id']}"
        assert client.delete(url, headers=headers_a).status_code == 204
        assert client.delete(url, headers=headers_a).status_code == 204
        assert client.get(url, headers=headers_a).status_code == 404

    def test_delete_is_audited_once(self, client, db_session, org_a, headers_a, service):
        url = f"/api/services/{service['id']}"
        client.delete(url, headers=headers_a)
        client.delete(url, headers=headers_a)
        assert db_session.query(AuditLog).filter_by(business_id=org_a.id, action="DELETE_RECORD").count() == 1

    def test_appointments_and_transactions_have_no_delete(self, client, headers_a):
        assert client.delete("/api/appointments/A-1", headers=headers_a).status_code == 405
        assert client.delete("/api/transactions/TX-1", headers=headers_a).status_code == 405

    def test_deleted_staff_member_loses_access(self, client, org_a, headers_a):
        barber = make_staff(client, headers_a, name="Kevo", role="Barber", username="kevo")
        barber_headers = auth_headers(login(client, org_a.slug, "kevo")["token"])
        client.delete(f"/api/staff/{barber['id']}", headers=headers_a)
        assert client.get("/api/products", headers=barber_headers).status_code == 401


class TestHealth:
    def test_health_reports_database(self, client, db_session):
        response = client.get("/api/health")
        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "online"
        assert body["checks"]["database"]["status"] == "healthy"
