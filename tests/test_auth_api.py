"""Tests for registration and login."""

from tests.conftest import TEST_PASSWORD

AUTH = "/api/v1/auth"


class TestRegister:
    async def test_register_job_seeker(self, client):
        response = await client.post(
            f"{AUTH}/register",
            json={"full_name": "New Seeker", "email": "New.Seeker@Example.com", "password": "secret123"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["access_token"]
        assert body["token_type"] == "bearer"
        assert body["user"]["role"] == "job_seeker"
        assert body["user"]["email"] == "new.seeker@example.com"

    async def test_duplicate_email(self, client, seeker):
        response = await client.post(
            f"{AUTH}/register",
            json={"full_name": "Copy Cat", "email": seeker.email, "password": "secret123"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "email_already_registered"

    async def test_weak_password(self, client):
        response = await client.post(
            f"{AUTH}/register",
            json={"full_name": "Weak Pass", "email": "weak@example.com", "password": "123456"},
        )
        assert response.status_code == 422


class TestLogin:
    async def test_login_and_me(self, client, employer):
        response = await client.post(f"{AUTH}/login", json={"email": employer.email, "password": TEST_PASSWORD})
        assert response.status_code == 200
        token = response.json()["access_token"]

        response = await client.get(f"{AUTH}/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["role"] == "employee"
        assert response.json()["company_name"] == "Acme"

    async def test_wrong_password(self, client, employer):
        response = await client.post(f"{AUTH}/login", json={"email": employer.email, "password": "nope-nope"})
        assert response.status_code == 401

    async def test_unknown_email(self, client):
        response = await client.post(f"{AUTH}/login", json={"email": "ghost@example.com", "password": "secret123"})
        assert response.status_code == 401

    async def test_invalid_token(self, client):
        response = await client.get(f"{AUTH}/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
