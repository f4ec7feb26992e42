"""
Pytest configuration - shared fixtures
"""
import sys
import os
from typing import Any, Dict, List, Tuple

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text

# Add backend directory to sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../backend"))

from arcade_market.config import Settings
from arcade_market.data import create_database
from arcade_market.main import create_app
from arcade_market.services.notification_service import NotificationService

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Embedded backend on a throwaway SQLite file, fast hashing, no rate limits."""
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'marketplace.db'}",
        SUPABASE_PROJECT_URL=None,
        SUPABASE_API_KEY=None,
        SECRET_KEY="test-secret-key",
        PASSWORD_HASH_ROUNDS=4,
        RATE_LIMIT_ENABLED=False,
        DEFAULT_ADMIN_USERNAME=ADMIN_USERNAME,
        DEFAULT_ADMIN_PASSWORD=ADMIN_PASSWORD,
        VAPID_PUBLIC_KEY="test-vapid-public-key",
        ENABLE_FILE_LOGGING=False,
    )


@pytest_asyncio.fixture
async def db(settings):
    """Initialized embedded Database."""
    database = create_database(settings)
    await database.initialize()
    try:
        yield database
    finally:
        await database.close()


@pytest.fixture
def sql(settings):
    """Plain SQLAlchemy access to the same file, for asserting on stored rows."""
    engine = create_engine(settings.DATABASE_URL)

    def run(statement: str, **params) -> List[Tuple[Any, ...]]:
        with engine.connect() as conn:
            return list(conn.execute(text(statement), params))

    yield run
    engine.dispose()


class RecordingSender:
    """Push sender that only remembers what it was asked to send."""

    def __init__(self):
        self.sent: List[Tuple[Dict[str, Any], Dict[str, Any]]] = []

    async def __call__(self, subscription, payload):
        self.sent.append((subscription, payload))


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def client(settings, sender):
    app = create_app(settings, notifier=NotificationService(sender))
    with TestClient(app) as test_client:
        yield test_client


# --- API helpers ---

def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register_shop(client: TestClient, shop_number: str = "A1", email: str = "a@x.com", password: str = "secret1") -> int:
    response = client.post(
        "/api/auth/register",
        json={
            "shop_number": shop_number,
            "shop_name": f"Shop {shop_number}",
            "contact": "0700000000",
            "email": email,
            "password": password,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["shop_id"]


def login_shop(client: TestClient, email: str = "a@x.com", password: str = "secret1") -> Dict[str, str]:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return auth_header(response.json()["token"])


def set_shop_status(client: TestClient, admin_headers: Dict[str, str], shop_id: int, status: str) -> None:
    response = client.put(
        f"/api/admin/shops/{shop_id}/status", json={"status": status}, headers=admin_headers
    )
    assert response.status_code == 200, response.text


def create_product(client: TestClient, headers: Dict[str, str], **overrides) -> int:
    payload = {
        "name": "Canvas sneaker",
        "description": "White canvas low-top",
        "price": 1500,
        "category": "shoes",
        "sizes": [{"size": "8", "in_stock": True, "quantity": 3}],
    }
    payload.update(overrides)
    response = client.post("/api/products", json=payload, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["product_id"]


@pytest.fixture
def admin_headers(client) -> Dict[str, str]:
    response = client.post(
        "/api/admin/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200, response.text
    return auth_header(response.json()["token"])


@pytest.fixture
def active_shop(client, admin_headers) -> Dict[str, Any]:
    """A registered, admin-approved shop and its auth headers."""
    shop_id = register_shop(client)
    set_shop_status(client, admin_headers, shop_id, "active")
    return {"id": shop_id, "headers": login_shop(client)}
