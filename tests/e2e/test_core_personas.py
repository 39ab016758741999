"""
E2E tests against the mock core directory.

These tests require the mock core server to be running on core_api_base:
    uvicorn mock.core_server.main:app --port 8081

Persons in mock/core_stub/clientes.json:
- 4 PERSONA entries, synced into the internal store
- 1 EMPRESA entry, ignored by every operation
"""

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from buro_gateway.api.main import create_app
from buro_gateway.config import settings
from buro_gateway.infrastructure.database.session import get_db


def _core_is_up() -> bool:
    try:
        return httpx.get(f"{settings.core_api_base}/health", timeout=1.0).status_code == 200
    except httpx.HTTPError:
        return False


pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not _core_is_up(), reason="mock core directory not running"),
]


@pytest.fixture
def live_client(db: Session) -> TestClient:
    """Test client wired to the real core client and the test database"""
    app = create_app()

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def test_count_core_personas(live_client: TestClient):
    response = live_client.get("/api/v1/buro/count-core-personas")

    assert response.status_code == 200
    assert response.json() == 4


def test_sync_then_query(live_client: TestClient):
    """
    Full flow: sync core persons, query one, mirror to the external store
    Expected: every PERSONA graded from internal records
    """
    sync = live_client.post("/api/v1/buro/sincronizar-core")
    assert sync.status_code == 200
    assert sync.json()["created"] == 4

    query = live_client.get("/api/v1/buro/consulta-por-cedula/0102030405")
    assert query.status_code == 200
    data = query.json()
    assert data["full_name"] == "MARIA FERNANDA LOPEZ"
    assert data["matched_source"] == "internal"
    assert data["risk_grade"] in {"A+", "A-", "B+", "B", "B-", "C+", "C", "C-", "D+", "D-", "E+", "E-"}

    reconcile = live_client.post("/api/v1/buro/sincronizar-externo")
    assert reconcile.status_code == 200
    assert reconcile.json()["incomes_created"] == 4


def test_company_is_never_synced(live_client: TestClient):
    live_client.post("/api/v1/buro/sincronizar-core")

    response = live_client.get("/api/v1/buro/consulta-por-cedula/1799999999001")
    assert response.status_code == 404
