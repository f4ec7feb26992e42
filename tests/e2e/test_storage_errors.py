"""
End-to-end: storage failures reach the client as a generic 500
"""
import logging

import pytest
from fastapi.testclient import TestClient

from arcade_market.data import Database
from arcade_market.data.embedded import EmbeddedExecutor
from arcade_market.data.spec import QueryError, StorageError
from arcade_market.database import build_engine, load_metadata
from arcade_market.main import create_app
from conftest import register_shop

DRIVER_MESSAGE = "disk I/O error while reading /var/lib/arcade/marketplace.db"


class FailingProductsExecutor(EmbeddedExecutor):
    """Embedded executor whose product reads always fail in the driver."""

    async def query(self, spec):
        if spec.collection == "products":
            raise StorageError(QueryError(message=DRIVER_MESSAGE, code="58030"))
        return await super().query(spec)


@pytest.fixture
def failing_client(settings):
    database = Database(FailingProductsExecutor(build_engine(settings), load_metadata()))
    with TestClient(create_app(settings, database=database)) as test_client:
        yield test_client


@pytest.mark.e2e
class TestStorageErrors:
    def test_driver_text_is_logged_not_returned(self, failing_client, caplog):
        register_shop(failing_client)

        with caplog.at_level(logging.WARNING):
            response = failing_client.get("/api/products/search", params={"query": "boot"})

        assert response.status_code == 500
        assert response.json() == {"message": "Database error"}
        assert "disk I/O" not in response.text
        assert DRIVER_MESSAGE in caplog.text
        assert "58030" in caplog.text

    def test_other_endpoints_keep_working(self, failing_client):
        register_shop(failing_client)
        assert failing_client.get("/api/health").json()["status"] == "healthy"
        assert failing_client.get("/api/shops").status_code == 200
