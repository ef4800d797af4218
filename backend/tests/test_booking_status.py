"""
Tests for owner-driven status changes through the API.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from payloads import single_booking_payload


async def _pending_booking(client: AsyncClient, headers: dict, space_id: int, start="14:00", end="15:00") -> int:
    response = await client.post(
        "/api/v1/bookings/",
        json=single_booking_payload(space_id, start, end),
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["id"]


async def _set_status(client: AsyncClient, headers: dict, booking_id: int, status: str, reason=None):
    body = {"status": status}
    if reason is not None:
        body["reason"] = reason
    return await client.patch(f"/api/v1/bookings/{booking_id}/status", json=body, headers=headers)


@pytest.mark.asyncio
@pytest.mark.parametrize("target", ["confirmed", "declined", "cancelled"])
async def test_pending_transitions(client: AsyncClient, auth_headers, owner_headers, hourly_space, target):
    booking_id = await _pending_booking(client, auth_headers, hourly_space.id)

    response = await _set_status(client, owner_headers, booking_id, target)
    assert response.status_code == 200
    assert response.json()["status"] == target


@pytest.mark.asyncio
@pytest.mark.parametrize("target", ["cancelled", "completed"])
async def test_confirmed_transitions(client: AsyncClient, auth_headers, owner_headers, hourly_space, target):
    booking_id = await _pending_booking(client, auth_headers, hourly_space.id)
    await _set_status(client, owner_headers, booking_id, "confirmed")

    response = await _set_status(client, owner_headers, booking_id, target)
    assert response.status_code == 200
    assert response.json()["status"] == target


@pytest.mark.asyncio
async def test_pending_to_completed_rejected(client: AsyncClient, auth_headers, owner_headers, hourly_space):
    booking_id = await _pending_booking(client, auth_headers, hourly_space.id)

    response = await _set_status(client, owner_headers, booking_id, "completed")
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "InvalidTransition"
    assert body["details"] == {"booking_id": booking_id, "from": "pending", "to": "completed"}


@pytest.mark.asyncio
async def test_decline_records_reason_and_cancels_payment(
    client: AsyncClient, auth_headers, owner_headers, hourly_space
):
    booking_id = await _pending_booking(client, auth_headers, hourly_space.id)

    response = await _set_status(client, owner_headers, booking_id, "declined", reason="Double-booked offline")
    assert response.status_code == 200
    data = response.json()
    assert data["cancellation_reason"] == "Double-booked offline"
    assert data["payment_status"] == "cancelled"


@pytest.mark.asyncio
async def test_confirm_does_not_touch_payment(client: AsyncClient, auth_headers, owner_headers, hourly_space):
    booking_id = await _pending_booking(client, auth_headers, hourly_space.id)

    response = await _set_status(client, owner_headers, booking_id, "confirmed", reason="ignored")
    data = response.json()
    assert data["payment_status"] == "pending"
    assert data["cancellation_reason"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("terminal", ["declined", "cancelled"])
async def test_terminal_states_reject_everything(
    client: AsyncClient, auth_headers, owner_headers, hourly_space, terminal
):
    booking_id = await _pending_booking(client, auth_headers, hourly_space.id)
    await _set_status(client, owner_headers, booking_id, terminal)

    for target in ("confirmed", "declined", "cancelled", "completed"):
        response = await _set_status(client, owner_headers, booking_id, target)
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidTransition"


@pytest.mark.asyncio
async def test_requesting_pending_is_invalid_transition(
    client: AsyncClient, auth_headers, owner_headers, hourly_space
):
    booking_id = await _pending_booking(client, auth_headers, hourly_space.id)

    response = await _set_status(client, owner_headers, booking_id, "pending")
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidTransition"


@pytest.mark.asyncio
async def test_unknown_status_is_validation_error(client: AsyncClient, auth_headers, owner_headers, hourly_space):
    booking_id = await _pending_booking(client, auth_headers, hourly_space.id)

    response = await _set_status(client, owner_headers, booking_id, "archived")
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_other_owner_cannot_change_status(
    client: AsyncClient, auth_headers, other_owner_headers, hourly_space
):
    """Authorization is checked before the requested status is even parsed."""
    booking_id = await _pending_booking(client, auth_headers, hourly_space.id)

    for target in ("confirmed", "pending", "archived"):
        response = await _set_status(client, other_owner_headers, booking_id, target)
        assert response.status_code == 403
        assert response.json()["error"] == "Unauthorized"


@pytest.mark.asyncio
async def test_client_cannot_cancel_own_booking(client: AsyncClient, auth_headers, hourly_space):
    booking_id = await _pending_booking(client, auth_headers, hourly_space.id)

    response = await _set_status(client, auth_headers, booking_id, "cancelled")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_status_change_on_missing_booking(client: AsyncClient, owner_headers):
    response = await _set_status(client, owner_headers, 424242, "confirmed")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_end_to_end_booking_flow(client: AsyncClient, auth_headers, owner_headers, hourly_space):
    """Create, collide, confirm, then try to move back to pending."""
    first = await client.post(
        "/api/v1/bookings/",
        json=single_booking_payload(hourly_space.id, "14:00", "15:00"),
        headers=auth_headers,
    )
    assert first.status_code == 201
    assert first.json()["status"] == "pending"
    assert Decimal(first.json()["total_price"]) == Decimal("5000")
    booking_id = first.json()["id"]

    second = await client.post(
        "/api/v1/bookings/",
        json=single_booking_payload(hourly_space.id, "14:30", "15:30"),
        headers=auth_headers,
    )
    assert second.status_code == 400
    assert second.json()["error"] == "Conflict"

    confirmed = await _set_status(client, owner_headers, booking_id, "confirmed")
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"

    back = await _set_status(client, owner_headers, booking_id, "pending")
    assert back.status_code == 400
    assert back.json()["error"] == "InvalidTransition"
