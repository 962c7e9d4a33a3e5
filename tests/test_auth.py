from datetime import timedelta

import jwt
import pytest
from fastapi.testclient import TestClient

import auth
import config
from auth import TokenService, cookie_options
from database import get_db
from main import app


class TestTokenService:

    def test_issue_then_verify_returns_claims(self, token_service):
        token = token_service.issue({"email": "u@x.com", "name": "U"})
        claims = token_service.verify(token)
        assert claims["email"] == "u@x.com"
        assert claims["name"] == "U"

    def test_token_expires_after_ten_hours(self, token_service):
        claims = token_service.verify(token_service.issue({"email": "u@x.com"}))
        assert claims["exp"] - claims["iat"] == 10 * 60 * 60

    def test_client_supplied_expiry_is_ignored(self, token_service):
        claims = token_service.verify(token_service.issue({"email": "u@x.com", "exp": 1}))
        assert claims["exp"] > 1

    @pytest.mark.parametrize("token", [None, "", "not-a-jwt", "a.b.c"])
    def test_malformed_tokens_are_invalid(self, token_service, token):
        assert token_service.verify(token) is None

    def test_wrong_signature_is_invalid(self, token_service):
        forged = jwt.encode({"email": "u@x.com"}, "other-secret", algorithm="HS256")
        assert token_service.verify(forged) is None

    def test_expired_token_is_invalid(self):
        expired = TokenService("test-secret", lifetime=timedelta(seconds=-1))
        assert expired.verify(expired.issue({"email": "u@x.com"})) is None

    def test_secret_is_required(self):
        with pytest.raises(ValueError):
            TokenService("")


def test_cookie_options_depend_on_environment():
    assert cookie_options(production=True) == {"httponly": True, "secure": True, "samesite": "none"}
    assert cookie_options(production=False) == {"httponly": True, "secure": False, "samesite": "strict"}


class TestAuthRoutes:

    def test_login_sets_http_only_token_cookie(self, client, token_service):
        response = client.post("/api/v1/auth/jwt", json={"email": "u@x.com"})
        assert response.status_code == 200
        assert response.json() == {"success": True}
        set_cookie = response.headers["set-cookie"].lower()
        assert set_cookie.startswith("token=")
        assert "httponly" in set_cookie
        assert "max-age=36000" in set_cookie
        assert token_service.verify(response.cookies["token"])["email"] == "u@x.com"

    def test_login_requires_email(self, client):
        response = client.post("/api/v1/auth/jwt", json={"name": "no email"})
        assert response.status_code == 422

    def test_gate_rejects_missing_cookie(self, client):
        response = client.get("/api/v1/user/submitted_assignments", params={"status": "pending", "email": "u@x.com"})
        assert response.status_code == 401
        assert response.json() == {"detail": "unauthorized access"}

    def test_gate_rejects_invalid_cookie(self, client):
        client.cookies.set("token", "garbage")
        response = client.get("/api/v1/user/user_submitted_assignments/u@x.com")
        assert response.status_code == 401

    def test_login_then_logout(self, client, login):
        url = "/api/v1/user/submitted_assignments"
        params = {"status": "pending", "email": "u@x.com"}
        login("u@x.com")
        assert client.get(url, params=params).status_code == 200

        response = client.post("/api/v1/auth/logout")
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert 'token=""' in response.headers["set-cookie"] or "token=;" in response.headers["set-cookie"]

        assert client.get(url, params=params).status_code == 401


def test_missing_signing_secret_is_a_server_error(monkeypatch, mongo_db):
    monkeypatch.setattr(config, "ACCESS_TOKEN_SECRET", "")
    auth._default_token_service.cache_clear()
    app.dependency_overrides[get_db] = lambda: mongo_db
    try:
        response = TestClient(app).post("/api/v1/auth/jwt", json={"email": "u@x.com"})
    finally:
        app.dependency_overrides.clear()
        auth._default_token_service.cache_clear()
    assert response.status_code == 500


def test_missing_cookie_is_unauthorized_even_without_signing_secret(monkeypatch, mongo_db):
    monkeypatch.setattr(config, "ACCESS_TOKEN_SECRET", "")
    auth._default_token_service.cache_clear()
    app.dependency_overrides[get_db] = lambda: mongo_db
    try:
        response = TestClient(app).get("/api/v1/user/user_submitted_assignments/u@x.com")
    finally:
        app.dependency_overrides.clear()
        auth._default_token_service.cache_clear()
    assert response.status_code == 401
