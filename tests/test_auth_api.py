"""Tests for the identity endpoints."""
from conftest import TEST_EMAIL, TEST_PASSWORD


class TestSignUp:
    def test_signup_creates_account(self, client):
        resp = client.post("/api/v1/auth/signup", json={"email": "New@Clinic.test", "password": "123456"})
        assert resp.status_code == 201
        body = resp.json()
        assert body["email"] == "new@clinic.test"
        assert body["is_active"] is True
        assert "hashed_password" not in body

    def test_duplicate_signup_rejected(self, client, tokens):
        resp = client.post("/api/v1/auth/signup", json={"email": TEST_EMAIL, "password": TEST_PASSWORD})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Email already registered"

    def test_short_password_rejected(self, client):
        resp = client.post("/api/v1/auth/signup", json={"email": "a@b.test", "password": "123"})
        assert resp.status_code == 422


class TestLogin:
    def test_login_returns_token_pair(self, tokens):
        assert tokens["token_type"] == "bearer"
        assert tokens["access_token"]
        assert tokens["refresh_token"]

    def test_wrong_password(self, client, tokens):
        resp = client.post("/api/v1/auth/login", json={"email": TEST_EMAIL, "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid login credentials"

    def test_unknown_email(self, client):
        resp = client.post("/api/v1/auth/login", json={"email": "ghost@clinic.test", "password": "x"})
        assert resp.status_code == 401

    def test_me_with_token(self, client, auth_headers):
        resp = client.get("/api/v1/auth/me", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["email"] == TEST_EMAIL

    def test_me_without_token(self, client):
        assert client.get("/api/v1/auth/me").status_code == 401

    def test_refresh_token_cannot_be_used_as_access_token(self, client, tokens):
        resp = client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"}
        )
        assert resp.status_code == 401


class TestRefreshAndLogout:
    def test_refresh_rotates_tokens(self, client, tokens):
        resp = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert resp.status_code == 200
        rotated = resp.json()
        assert rotated["refresh_token"] != tokens["refresh_token"]

        # the old refresh token is no longer accepted
        resp = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert resp.status_code == 401

    def test_logout_revokes_refresh_token(self, client, tokens, auth_headers):
        resp = client.post("/api/v1/auth/logout", headers=auth_headers)
        assert resp.status_code == 204
        resp = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert resp.status_code == 401

    def test_garbage_refresh_token(self, client):
        resp = client.post("/api/v1/auth/refresh", json={"refresh_token": "garbage"})
        assert resp.status_code == 401
