from fastapi.testclient import TestClient
from sqlmodel import Session, create_engine

from fantasy12.database import get_session
from main import create_app


def test_api_info(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "Fantasy12 API"
    assert "X-Request-Id" in response.headers


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "ok"


def test_health_reports_database_failure(tmp_path):
    broken = create_engine(f"sqlite:///{tmp_path}/missing/dir/fantasy12.db")

    def broken_session():
        with Session(broken) as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_session] = broken_session
    response = TestClient(app).get("/health")

    assert response.status_code == 503
    assert response.json()["database"] == "error"


def test_unknown_route_uses_error_shape(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_cors_allows_configured_origin(client):
    response = client.options(
        "/health",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "GET"},
    )
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"

    response = client.get("/health", headers={"Origin": "https://evil.example"})
    assert "access-control-allow-origin" not in response.headers
