"""
EchoNote Backend — Account Endpoint Tests
===========================================

What:  Signup, login, the dashboard greeting and the auth gate over HTTP.
How:   Real app + SQLite file database through httpx's ASGITransport.

What we test:
    ✅ Signup then login succeeds; responses never expose the hash
    ✅ Duplicate email is a conflict regardless of the other fields
    ✅ Unknown email / wrong password are distinct 400s
    ✅ No token → 401, bad or expired token → 403 (401 on the dashboard)
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from conftest import TEST_PASSWORD, login_headers, register, signup
from echonote.services.token_service import TokenService


class TestSignup:

    @pytest.mark.asyncio
    async def test_signup_returns_user_summary(self, test_client):
        response = await signup(test_client, "carol@echonote.io", name="Carol")

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User created"
        assert body["user"]["name"] == "Carol"
        assert body["user"]["email"] == "carol@echonote.io"
        uuid.UUID(body["user"]["id"])
        assert "password" not in response.text
        assert "password_hash" not in body["user"]

    @pytest.mark.asyncio
    async def test_signup_then_login(self, test_client):
        await signup(test_client, "dave@echonote.io")
        response = await test_client.post(
            "/api/login",
            json={"email": "dave@echonote.io", "password": TEST_PASSWORD},
        )
        assert response.status_code == 200
        assert response.json()["token"]

    @pytest.mark.asyncio
    async def test_email_is_normalized(self, test_client):
        response = await signup(test_client, "Erin@EchoNote.io")
        assert response.status_code == 201
        assert response.json()["user"]["email"] == "erin@echonote.io"

        headers = await login_headers(test_client, "ERIN@echonote.io")
        assert headers["Authorization"].startswith("Bearer ")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email,name,password",
        [
            ("frank@echonote.io", "Frank", TEST_PASSWORD),
            ("frank@echonote.io", "Someone Else", "another password"),
            ("FRANK@echonote.io", "Frank", TEST_PASSWORD),
        ],
    )
    async def test_duplicate_email_conflicts(self, test_client, email, name, password):
        await signup(test_client, "frank@echonote.io", name="Frank")

        response = await signup(test_client, email, name=name, password=password)

        assert response.status_code == 400
        assert response.json()["error"] == "Email already exists"
        assert response.json()["code"] == "conflict"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"email": "gina@echonote.io", "password": "pw"},
            {"name": "   ", "email": "gina@echonote.io", "password": "pw"},
            {"name": "Gina", "email": "not-an-email", "password": "pw"},
            {"name": "Gina", "email": "gina@echonote.io", "password": ""},
            {"name": "Gina", "email": "gina@echonote.io"},
        ],
    )
    async def test_invalid_signup_bodies_are_400(self, test_client, body):
        response = await test_client.post("/api/signup", json=body)

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"
        assert "error" in response.json()


class TestLogin:

    @pytest.mark.asyncio
    async def test_unknown_email(self, test_client):
        response = await test_client.post(
            "/api/login",
            json={"email": "nobody@echonote.io", "password": TEST_PASSWORD},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "User not found"

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client):
        await signup(test_client, "hank@echonote.io")
        response = await test_client.post(
            "/api/login",
            json={"email": "hank@echonote.io", "password": "wrong password"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Wrong password"
        assert response.json()["code"] == "invalid_credentials"


class TestAuthGate:

    @pytest.mark.asyncio
    async def test_dashboard_greets_user(self, test_client):
        headers = await register(test_client, "ivy@echonote.io", name="Ivy")

        response = await test_client.get("/api/dashboard", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Welcome Ivy!"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/dashboard", "/api/user", "/api/notes"])
    async def test_missing_token_is_401(self, test_client, path):
        response = await test_client.get(path)

        assert response.status_code == 401
        assert response.json()["error"] == "No token"

    @pytest.mark.asyncio
    async def test_non_bearer_scheme_is_401(self, test_client):
        response = await test_client.get("/api/dashboard", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/user", "/api/notes"])
    async def test_invalid_token_is_403(self, test_client, path):
        response = await test_client.get(path, headers={"Authorization": "Bearer not.a.token"})

        assert response.status_code == 403
        assert response.json()["error"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_expired_token_is_403(self, test_client, settings):
        await register(test_client, "jack@echonote.io")
        login = await test_client.post(
            "/api/login",
            json={"email": "jack@echonote.io", "password": TEST_PASSWORD},
        )
        user_id = TokenService(secret=settings.jwt_secret).verify(login.json()["token"])

        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        stale = TokenService(secret=settings.jwt_secret, clock=lambda: issued).issue(user_id)

        response = await test_client.get("/api/notes", headers={"Authorization": f"Bearer {stale}"})
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_invalid_token_is_401_on_dashboard(self, test_client):
        response = await test_client.get("/api/dashboard", headers={"Authorization": "Bearer not.a.token"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token"
        assert response.json()["code"] == "unauthenticated"

    @pytest.mark.asyncio
    async def test_expired_token_is_401_on_dashboard(self, test_client, context):
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        stale = TokenService(secret=context.settings.jwt_secret, clock=lambda: issued).issue(uuid.uuid4())

        response = await test_client.get("/api/dashboard", headers={"Authorization": f"Bearer {stale}"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_token_for_vanished_user_is_401_on_dashboard(self, test_client, context):
        token = context.tokens.issue(uuid.uuid4())

        response = await test_client.get("/api/dashboard", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_responses_carry_request_id(self, test_client):
        response = await test_client.get("/api/dashboard", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"
        assert response.json()["request_id"] == "abc123"
