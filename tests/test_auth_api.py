from fastapi.testclient import TestClient

from app.main import app
from app.services.auth import create_access_token, decode_access_token


def test_auth_token_success(monkeypatch):
    def _ok_user(username: str, password: str) -> bool:
        return username == "admin" and password == "secret"

    monkeypatch.setattr("app.services.auth.authenticate_user", _ok_user)
    client = TestClient(app)

    response = client.post(
        "/auth/token",
        data={"username": "admin", "password": "secret"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["token_type"] == "bearer"
    assert decode_access_token(payload["access_token"]) == "admin"
    assert payload["expires_in"] > 0


def test_auth_token_invalid(monkeypatch):
    monkeypatch.setattr("app.services.auth.authenticate_user", lambda u, p: False)
    client = TestClient(app)

    response = client.post(
        "/auth/token",
        data={"username": "admin", "password": "bad"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect username or password"


def test_rule_routes_require_token():
    client = TestClient(app)
    response = client.get("/spaces/my-space/inbound-rules")
    assert response.status_code == 401


def test_rule_routes_accept_issued_token(monkeypatch):
    from app.dependencies.dao import get_rule_repository
    from tests.fakes import InMemoryRuleRepository

    app.dependency_overrides[get_rule_repository] = lambda: InMemoryRuleRepository()
    try:
        client = TestClient(app)
        token = create_access_token("ops")
        response = client.get(
            "/spaces/my-space/inbound-rules",
            headers={"Authorization": f"Bearer {token}"},
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.json() == {"count": 0, "rules": []}


def test_garbage_token_is_rejected():
    assert decode_access_token("not-a-jwt") is None
