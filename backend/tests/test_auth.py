"""
Tests for authentication endpoints: registration, login and role checks.
"""

import jwt
import pytest
from httpx import AsyncClient

from app.core.config import get_settings


@pytest.mark.asyncio
async def test_register_client(client: AsyncClient):
    """Registration defaults to a client account."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "new@example.com",
        "username": "newuser",
        "password": "securepassword123",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "new@example.com"
    assert data["username"] == "newuser"
    assert data["role"] == "client"
    assert "hashed_password" not in data  # Never expose password hash


@pytest.mark.asyncio
async def test_register_owner(client: AsyncClient):
    response = await client.post("/api/v1/auth/register", json={
        "email": "venue@example.com",
        "username": "venueowner",
        "password": "securepassword123",
        "role": "owner",
    })
    assert response.status_code == 201
    assert response.json()["role"] == "owner"


@pytest.mark.asyncio
async def test_register_admin_rejected(client: AsyncClient):
    """Admins cannot self-register; schema failures are reported as 400 ValidationError."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "admin@example.com",
        "username": "sneaky",
        "password": "securepassword123",
        "role": "admin",
    })
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, test_user):
    """Duplicate email returns 409."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "test@example.com",
        "username": "different",
        "password": "securepassword123",
    })
    assert response.status_code == 409
    assert response.json()["message"] == "Email already registered"


@pytest.mark.asyncio
async def test_register_duplicate_username(client: AsyncClient, test_user):
    """Duplicate username returns 409."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "different@example.com",
        "username": "testuser",
        "password": "securepassword123",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient):
    """Password under 8 chars is rejected."""
    response = await client.post("/api/v1/auth/register", json={
        "email": "weak@example.com",
        "username": "weakuser",
        "password": "short",
    })
    assert response.status_code == 400
    fields = [e["field"] for e in response.json()["details"]["errors"]]
    assert "body.password" in fields


@pytest.mark.asyncio
async def test_login_success_carries_role(client: AsyncClient, owner):
    """Valid credentials return a JWT with the user id and role."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "owner@example.com",
        "password": "testpassword123",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"

    settings = get_settings()
    claims = jwt.decode(data["access_token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert claims["sub"] == str(owner.id)
    assert claims["role"] == "owner"


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user):
    """Wrong password returns 401."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "test@example.com",
        "password": "wrongpassword",
    })
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthenticated"


@pytest.mark.asyncio
async def test_login_nonexistent_email(client: AsyncClient):
    """Non-existent email returns 401."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "nobody@example.com",
        "password": "anypassword123",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_deactivated_account(client: AsyncClient, db_session, test_user):
    test_user.is_active = False
    await db_session.commit()

    response = await client.post("/api/v1/auth/login", json={
        "email": "test@example.com",
        "password": "testpassword123",
    })
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_invalid_token_rejected(client: AsyncClient):
    response = await client.get(
        "/api/v1/bookings/owner",
        headers={"Authorization": "Bearer not-a-real-token"},
    )
    assert response.status_code == 401
