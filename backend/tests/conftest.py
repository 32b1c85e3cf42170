"""
Pytest fixtures for BarberPro backend tests.

Provides the application with an in-memory database, two isolated
businesses, authenticated headers, and httpx transports that route the
client gateway either into the Flask test client or into a dead network.
"""

import json

import httpx
import pytest

from barberpro import create_app
from barberpro.extensions import db
from barberpro.services.tenant_service import create_business

PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _provision(name: str, slug: str, username: str):
    business, owner = create_business(
        name=name,
        slug=slug,
        owner_name=f"{name} Owner",
        username=username,
        password=PASSWORD,
    )
    return business, owner


@pytest.fixture(scope='function')
def org_a(db_session):
    """Business A (first tenant) with its Owner account and default settings."""
    business, _ = _provision("Fade Masters", "fade-masters", "owner_a")
    return business


@pytest.fixture(scope='function')
def org_b(db_session):
    """Business B (second tenant)."""
    business, _ = _provision("Sharp Cuts", "sharp-cuts", "owner_b")
    return business


def login(client, slug: str, username: str, password: str = PASSWORD) -> dict:
    """Helper to log in and return the full session payload."""
    response = client.post('/api/auth/login', json={
        'business_slug': slug,
        'username': username,
        'password': password,
    })
    assert response.status_code == 200, response.get_json()
    return response.get_json()


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def owner_a(client, org_a):
    """Session payload for Business A's Owner."""
    return login(client, org_a.slug, "owner_a")


@pytest.fixture(scope='function')
def owner_b(client, org_b):
    """Session payload for Business B's Owner."""
    return login(client, org_b.slug, "owner_b")


@pytest.fixture(scope='function')
def headers_a(owner_a):
    return auth_headers(owner_a['token'])


@pytest.fixture(scope='function')
def headers_b(owner_b):
    return auth_headers(owner_b['token'])


def make_staff(client, headers, *, name, role, username=None, password=PASSWORD) -> dict:
    """Create a staff member through the API (optionally with a login)."""
    body = {'name': name, 'role': role}
    if username:
        body['username'] = username
        body['password'] = password
    response = client.post('/api/staff', json=body, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


class FlaskBridge:
    """
    httpx handler that answers requests with the Flask test client.

    `online` can be flipped mid-test to simulate the network going away;
    an offline request fails the way a refused connection does.
    """

    def __init__(self, client):
        self.client = client
        self.online = True
        self.requests = []
        self.bodies = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if not self.online:
            raise httpx.ConnectError("Connection refused", request=request)
        self.requests.append((request.method, request.url.path))
        if request.content:
            self.bodies.append((request.method, request.url.path, json.loads(request.content)))

        headers = {}
        for name in ('Authorization', 'Content-Type'):
            if name in request.headers:
                headers[name] = request.headers[name]

        response = self.client.open(
            request.url.path,
            method=request.method,
            headers=headers,
            data=request.content,
            query_string=request.url.query.decode(),
        )
        response_headers = {}
        if response.content_type:
            response_headers['Content-Type'] = response.content_type
        return httpx.Response(
            status_code=response.status_code,
            content=response.get_data(),
            headers=response_headers,
        )


@pytest.fixture(scope='function')
def bridge(client):
    return FlaskBridge(client)


@pytest.fixture(scope='function')
def flask_transport(bridge):
    """Transport that sends gateway traffic into the Flask app."""
    return httpx.MockTransport(bridge)


@pytest.fixture(scope='function')
def offline_transport():
    """Transport for a device with no route to the service."""
    def refuse(request):
        raise httpx.ConnectError("Connection refused", request=request)
    return httpx.MockTransport(refuse)


@pytest.fixture(scope='function')
def store_path(tmp_path):
    return str(tmp_path / "device.db")
