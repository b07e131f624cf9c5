"""Tests for the login endpoint."""

import pytest
from httpx import AsyncClient

from app.core.messages import MESSAGES
from app.core.security import decode_access_token

LOGIN_URL = "/api/v1/auth/login"


@pytest.mark.asyncio
class TestUserLoginEndpoint:
    """Attendee form over HTTP."""

    async def test_login_by_medical_id(self, client: AsyncClient, attendee):
        """Test attendee login with a medical ID."""
        response = await client.post(LOGIN_URL, json={"identifier": "1234567"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["user"]["email"] == attendee["email"]
        assert data["user"]["last_login_at"] is not None
        assert "password_hash" not in data["user"]
        assert data["token_type"] == "bearer"
        assert decode_access_token(data["access_token"])["sub"] == str(attendee["id"])

    async def test_unknown_user(self, client: AsyncClient):
        """Test attendee login with an unknown identifier."""
        response = await client.post(LOGIN_URL, json={"identifier": "nobody@example.com"})

        assert response.status_code == 404
        data = response.json()
        assert data["success"] is False
        assert data["user"] is None
        assert data["error"] == MESSAGES["en"]["user_not_found"]

    async def test_missing_identifier(self, client: AsyncClient):
        """An absent identifier is a 400 with a message, not a 422."""
        response = await client.post(LOGIN_URL, json={})

        assert response.status_code == 400
        assert response.json()["error"] == MESSAGES["en"]["identifier_required"]

    async def test_admin_through_user_form(self, client: AsyncClient, admin_account):
        """Test an administrator using the attendee form."""
        response = await client.post(LOGIN_URL, json={"identifier": admin_account["email"]})

        assert response.status_code == 403
        assert response.json()["error"] == MESSAGES["en"]["admin_via_user_form"]

    async def test_spanish_messages(self, client: AsyncClient):
        """Errors follow the Accept-Language header."""
        response = await client.post(
            LOGIN_URL,
            json={"identifier": "9999999"},
            headers={"Accept-Language": "es-CO,es;q=0.9,en;q=0.8"},
        )

        assert response.status_code == 404
        assert response.json()["error"] == MESSAGES["es"]["user_not_found"]


@pytest.mark.asyncio
class TestAdminLoginEndpoint:
    """Administrator form over HTTP."""

    async def test_admin_login(self, client: AsyncClient, admin_account, admin_password):
        """Test admin login with the camelCase form flag."""
        response = await client.post(
            LOGIN_URL,
            json={
                "identifier": "ADMIN@example.com",
                "password": admin_password,
                "isAdmin": True,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["user"]["is_admin"] is True
        assert decode_access_token(data["access_token"])["is_admin"] is True

    async def test_wrong_password(self, client: AsyncClient, admin_account):
        """Test admin login with a wrong password."""
        response = await client.post(
            LOGIN_URL,
            json={"identifier": admin_account["email"], "password": "nope", "is_admin": True},
        )

        assert response.status_code == 401
        assert response.json()["error"] == MESSAGES["en"]["invalid_credentials"]

    async def test_unknown_admin_matches_wrong_password(self, client: AsyncClient, admin_account):
        """An unknown admin email is indistinguishable from a wrong password."""
        unknown = await client.post(
            LOGIN_URL,
            json={"identifier": "ghost@example.com", "password": "nope", "is_admin": True},
        )
        wrong = await client.post(
            LOGIN_URL,
            json={"identifier": admin_account["email"], "password": "nope", "is_admin": True},
        )

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json()

    async def test_missing_password(self, client: AsyncClient, admin_account):
        """Test admin login without a password."""
        response = await client.post(
            LOGIN_URL,
            json={"identifier": admin_account["email"], "is_admin": True},
        )

        assert response.status_code == 400
        assert response.json()["error"] == MESSAGES["en"]["password_required"]

    async def test_attendee_through_admin_form(self, client: AsyncClient, attendee):
        """Test an attendee using the administrator form."""
        response = await client.post(
            LOGIN_URL,
            json={"identifier": attendee["email"], "password": "whatever", "is_admin": True},
        )

        assert response.status_code == 403
        assert response.json()["error"] == MESSAGES["en"]["not_an_admin"]

    async def test_medical_id_rejected(self, client: AsyncClient, attendee):
        """The administrator form does not accept medical IDs."""
        response = await client.post(
            LOGIN_URL,
            json={"identifier": attendee["medical_id"], "password": "whatever", "is_admin": True},
        )

        assert response.status_code == 400
        assert response.json()["error"] == MESSAGES["en"]["admin_email_required"]
