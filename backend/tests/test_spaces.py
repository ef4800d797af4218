"""
Tests for the space catalog endpoints.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_owner_creates_space(client: AsyncClient, owner, owner_headers):
    response = await client.post(
        "/api/v1/spaces/",
        json={
            "name": "Conference Room A",
            "description": "Projector and whiteboard",
            "capacity": 20,
            "price": {"amount": "15000", "unit": "hour"},
        },
        headers=owner_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["owner_id"] == owner.id
    assert data["is_active"] is True
    assert data["price"]["unit"] == "hour"
    assert Decimal(data["price"]["amount"]) == Decimal("15000")


@pytest.mark.asyncio
async def test_client_cannot_create_space(client: AsyncClient, auth_headers):
    """Client accounts get 403 on owner-only endpoints."""
    response = await client.post(
        "/api/v1/spaces/",
        json={"name": "Nope", "price": {"amount": "1", "unit": "day"}},
        headers=auth_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_space_rejects_unknown_price_unit(client: AsyncClient, owner_headers):
    response = await client.post(
        "/api/v1/spaces/",
        json={"name": "Weekly Loft", "price": {"amount": "1", "unit": "week"}},
        headers=owner_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_spaces_only_active(client: AsyncClient, hourly_space, daily_space, inactive_space):
    """Listing returns active spaces, newest first; Redis is disabled in tests."""
    response = await client.get("/api/v1/spaces/")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["cached"] is False
    names = [s["name"] for s in data["spaces"]]
    assert "Closed Studio" not in names
    assert set(names) == {"Board Room", "Garden Hall"}


@pytest.mark.asyncio
async def test_get_space(client: AsyncClient, hourly_space):
    response = await client.get(f"/api/v1/spaces/{hourly_space.id}")
    assert response.status_code == 200
    assert response.json()["name"] == "Board Room"


@pytest.mark.asyncio
async def test_get_missing_space(client: AsyncClient):
    response = await client.get("/api/v1/spaces/99999")
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


@pytest.mark.asyncio
async def test_owner_deactivates_space(client: AsyncClient, hourly_space, owner_headers):
    space_id = hourly_space.id
    response = await client.patch(
        f"/api/v1/spaces/{space_id}/active",
        json={"is_active": False},
        headers=owner_headers,
    )
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    listing = await client.get("/api/v1/spaces/")
    assert listing.json()["total"] == 0


@pytest.mark.asyncio
async def test_other_owner_cannot_deactivate_space(client: AsyncClient, hourly_space, other_owner_headers):
    response = await client.patch(
        f"/api/v1/spaces/{hourly_space.id}/active",
        json={"is_active": False},
        headers=other_owner_headers,
    )
    assert response.status_code == 403
    assert response.json()["error"] == "Unauthorized"
