"""
Tests for Authentication endpoints.

Tests cover:
- Login (JSON and OAuth2 form)
- Token validation and expiration
- Role checks when creating staff accounts
"""

from datetime import timedelta
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from typing import Dict

from database.models import UserORM
from auth import create_access_token, decode_token


class TestLogin:
    """Tests for login endpoints (POST /auth/token, POST /auth/login)."""

    def test_token_login(self, client: TestClient, receptionist_user: UserORM):
        """Form login returns a bearer token whose subject is the user id."""
        response = client.post(
            "/auth/token",
            data={"username": "testdesk", "password": "password123"}  # form data, not json
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"

        payload = decode_token(data["access_token"])
        assert payload["sub"] == str(receptionist_user.id)
        assert payload["role"] == "receptionist"

    def test_json_login_returns_user(self, client: TestClient, admin_user: UserORM):
        response = client.post("/auth/login", json={"username": "testadmin", "password": "password123"})

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["username"] == "testadmin"
        assert data["user"]["role"] == "admin"
        assert "password_hash" not in data["user"]

    def test_wrong_password(self, client: TestClient, receptionist_user: UserORM):
        response = client.post("/auth/token", data={"username": "testdesk", "password": "wrong-pass"})

        assert response.status_code == 400

    def test_unknown_user(self, client: TestClient):
        response = client.post("/auth/login", json={"username": "nobody", "password": "password123"})

        assert response.status_code == 400


class TestTokenValidation:
    """Tests for protected endpoints with different tokens."""

    def test_valid_token_accepted(self, client: TestClient, auth_headers: Dict[str, str]):
        response = client.get("/appointments/", headers=auth_headers)

        assert response.status_code == 200

    def test_missing_token(self, client: TestClient):
        assert client.get("/appointments/").status_code == 401

    def test_malformed_token(self, client: TestClient):
        response = client.get("/appointments/", headers={"Authorization": "Bearer not.a.token"})

        assert response.status_code == 401

    def test_expired_token(self, client: TestClient, receptionist_user: UserORM):
        token = create_access_token({"sub": receptionist_user.id}, expires_delta=timedelta(minutes=-1))

        response = client.get("/appointments/", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_token_for_deleted_user(self, client: TestClient, db_session: Session, receptionist_user: UserORM):
        token = create_access_token({"sub": receptionist_user.id})
        db_session.delete(receptionist_user)
        db_session.commit()

        response = client.get("/appointments/", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401


class TestCreateUser:
    """Tests for POST /auth/users."""

    USER_DATA = {
        "username": "drcarter",
        "full_name": "James Carter",
        "password": "secret123",
        "role": "vet",
    }

    def test_admin_creates_user(self, client: TestClient, auth_headers_admin: Dict[str, str]):
        response = client.post("/auth/users", json=self.USER_DATA, headers=auth_headers_admin)

        assert response.status_code == 201
        assert response.json()["role"] == "vet"

        login = client.post("/auth/token", data={"username": "drcarter", "password": "secret123"})
        assert login.status_code == 200

    def test_receptionist_cannot_create_user(self, client: TestClient, auth_headers: Dict[str, str]):
        response = client.post("/auth/users", json=self.USER_DATA, headers=auth_headers)

        assert response.status_code == 403

    def test_duplicate_username(self, client: TestClient, auth_headers_admin: Dict[str, str]):
        client.post("/auth/users", json=self.USER_DATA, headers=auth_headers_admin)

        response = client.post("/auth/users", json=self.USER_DATA, headers=auth_headers_admin)

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "conflict"
