from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from skillswap.models.profile import Profile
from skillswap.models.user import User
from skillswap.utils.auth import create_access_token, get_password_hash, verify_password

from conftest import auth_headers, create_user

PASSWORD = "secret-password"


@pytest.mark.asyncio
async def test_create_account(async_session: AsyncSession):
    user = User(name="Test User", email="testuser1@example.com", hashed_password=get_password_hash(PASSWORD))
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)

    assert user.id is not None
    assert user.role == "user"
    assert user.is_admin is False
    assert user.is_blocked is False
    assert user.is_verified is False
    assert verify_password(PASSWORD, user.hashed_password)
    assert not verify_password("wrong-password", user.hashed_password)


@pytest.mark.asyncio
async def test_register_and_verify(client, async_session: AsyncSession, sent_emails):
    response = await client.post(
        "/api/auth/register", data={"name": "Sarah Ahmed", "email": "sarah@example.com", "password": PASSWORD}
    )
    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "sarah@example.com"
    assert body["is_verified"] is False
    assert body["profile"]["reputation_score"] == 0.0

    profile = await async_session.execute(select(Profile).where(Profile.user_id == body["id"]))
    assert profile.scalar_one_or_none() is not None

    assert len(sent_emails) == 1
    assert sent_emails[0]["email_to"] == "sarah@example.com"

    response = await client.post("/api/auth/login", json={"username": "sarah@example.com", "password": PASSWORD})
    assert response.status_code == 400

    token = parse_qs(urlparse(sent_emails[0]["verification_url"]).query)["token"][0]
    response = await client.get("/api/auth/verify-email", params={"token": token})
    assert response.status_code == 200
    assert "Email verified successfully" in response.text

    response = await client.post("/api/auth/login", json={"username": "sarah@example.com", "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"
    assert response.json()["user"]["is_verified"] is True

    # a verification token is not an access token
    response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_register_validation(client, users):
    response = await client.post(
        "/api/auth/register", data={"name": "John Again", "email": "john@example.com", "password": PASSWORD}
    )
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", "email"]

    response = await client.post(
        "/api/auth/register", data={"name": "Short", "email": "short@example.com", "password": "short"}
    )
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", "password"]

    response = await client.post(
        "/api/auth/register", data={"name": "Bad Email", "email": "not-an-email", "password": PASSWORD}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_resend_verification(client, async_session: AsyncSession, sent_emails, users):
    await create_user(async_session, "Carlos Mendez", "carlos@example.com", is_verified=False)

    response = await client.post("/api/auth/resend-verification", data={"email": "carlos@example.com"})
    assert response.status_code == 200
    assert len(sent_emails) == 1

    response = await client.post("/api/auth/resend-verification", data={"email": "john@example.com"})
    assert response.status_code == 400

    response = await client.post("/api/auth/resend-verification", data={"email": "nobody@example.com"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_login(client, async_session: AsyncSession):
    user = await create_user(
        async_session, "Aisha Noor", "aisha@example.com", hashed_password=get_password_hash(PASSWORD)
    )

    response = await client.post("/api/auth/login", json={"username": "aisha@example.com", "password": "nope"})
    assert response.status_code == 401

    response = await client.post("/api/auth/token", data={"username": "aisha@example.com", "password": PASSWORD})
    assert response.status_code == 200
    access_token = response.json()["access_token"]

    response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {access_token}"})
    assert response.status_code == 200
    assert response.json()["id"] == user.id
    assert response.json()["profile"]["user_id"] == user.id


@pytest.mark.asyncio
async def test_blocked_user_is_locked_out(client, async_session: AsyncSession):
    user = await create_user(
        async_session, "Blocked User", "blocked@example.com",
        hashed_password=get_password_hash(PASSWORD), is_blocked=True,
    )

    response = await client.post("/api/auth/login", json={"username": "blocked@example.com", "password": PASSWORD})
    assert response.status_code == 403

    response = await client.get("/api/users/me", headers=auth_headers(user))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_invalid_or_expired_token(client, users):
    response = await client.get("/api/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401

    expired = create_access_token(data={"sub": users[0].email}, expires_delta=timedelta(minutes=-5))
    response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401

    unknown = create_access_token(data={"sub": "ghost@example.com"}, expires_delta=timedelta(minutes=5))
    response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {unknown}"})
    assert response.status_code == 401
