# tests/test_booking_client.py
"""Tests for the calendar client: local pre-check, day cache, error mapping."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from app.client.booking_client import BookingCalendarClient, parse_clock, raise_for_booking_error
from app.main import app
from app.services.conflict_service import CONFLICT_MESSAGE
from app.services.exceptions import (
    BookingConflictError, BookingServiceError, BookingValidationError,
    InvalidTransitionError, NotFoundError, PermissionDeniedError,
)
from app.utils.auth import sign_token
from conftest import add_booking, at

DAY = date(2026, 3, 2)

VEHICLE = {"id": 1, "name": "Toyota Camry", "plate_number": "1AB-1234", "capacity": 4,
           "status": "active", "created_at": None}


def booking_json(id, start, end, status="pending", vehicle_id=1):
    return {"id": id, "user_id": "user-1", "vehicle_id": vehicle_id, "start_time": start,
            "end_time": end, "purpose": "Site visit", "status": status, "created_at": None}


class FakeApi:
    """Records requests and replays canned timeline/booking responses."""

    def __init__(self, bookings=None, post_status=201, post_detail=None):
        self.bookings = bookings or []
        self.post_status = post_status
        self.post_detail = post_detail
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/api/v1/timeline":
            return httpx.Response(200, json={"day": request.url.params["day"],
                                             "vehicles": [VEHICLE], "bookings": self.bookings})
        if request.method == "POST":
            if self.post_status >= 400:
                return httpx.Response(self.post_status, json={"detail": self.post_detail})
            return httpx.Response(201, json=booking_json(99, "2026-03-02T10:00:00", "2026-03-02T11:00:00"))
        return httpx.Response(200, json=booking_json(5, "2026-03-02T09:00:00", "2026-03-02T10:00:00",
                                                     status="approved"))

    def count(self, method, path):
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)


def make_client(fake: FakeApi) -> BookingCalendarClient:
    return BookingCalendarClient("http://booking.test", "token", transport=httpx.MockTransport(fake))


class TestParseClock:
    def test_valid(self):
        assert parse_clock(DAY, "09:30") == at(9, 30)

    def test_invalid(self):
        with pytest.raises(BookingValidationError):
            parse_clock(DAY, "9.30am")


class TestErrorMapping:
    @pytest.mark.parametrize("status,detail,expected", [
        (409, CONFLICT_MESSAGE, BookingConflictError),
        (409, "Booking is already approved", InvalidTransitionError),
        (401, "Invalid or expired token", PermissionDeniedError),
        (403, "Administrator role required", PermissionDeniedError),
        (404, "Booking not found", NotFoundError),
        (422, "Purpose is required", BookingValidationError),
        (500, "Internal server error", BookingServiceError),
    ])
    def test_status_maps_to_error(self, status, detail, expected):
        response = httpx.Response(status, json={"detail": detail})
        with pytest.raises(expected):
            raise_for_booking_error(response)

    def test_success_passes(self):
        raise_for_booking_error(httpx.Response(200, json={}))

    def test_validation_detail_list_gets_generic_message(self):
        response = httpx.Response(422, json={"detail": [{"loc": ["body"], "msg": "bad"}]})
        with pytest.raises(BookingValidationError, match="HTTP 422"):
            raise_for_booking_error(response)


class TestCreateBooking:
    @pytest.mark.asyncio
    async def test_local_conflict_skips_post(self):
        fake = FakeApi(bookings=[booking_json(1, "2026-03-02T09:00:00", "2026-03-02T11:00:00",
                                              status="approved")])
        async with make_client(fake) as client:
            with pytest.raises(BookingConflictError):
                await client.create_booking(1, DAY, "10:00", "12:00", "Site visit")
        assert fake.count("POST", "/api/v1/bookings") == 0

    @pytest.mark.asyncio
    async def test_rejected_booking_in_cache_does_not_block(self):
        fake = FakeApi(bookings=[booking_json(1, "2026-03-02T09:00:00", "2026-03-02T11:00:00",
                                              status="rejected")])
        async with make_client(fake) as client:
            booking = await client.create_booking(1, DAY, "10:00", "11:00", "Site visit")
        assert booking.id == 99
        assert fake.count("POST", "/api/v1/bookings") == 1

    @pytest.mark.asyncio
    async def test_validation_before_any_request(self):
        fake = FakeApi()
        async with make_client(fake) as client:
            with pytest.raises(BookingValidationError, match="End time must be after start time"):
                await client.create_booking(1, DAY, "11:00", "10:00", "Site visit")
            with pytest.raises(BookingValidationError, match="Purpose is required"):
                await client.create_booking(1, DAY, "10:00", "11:00", "   ")
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_unknown_vehicle_rejected_locally(self):
        fake = FakeApi()
        async with make_client(fake) as client:
            with pytest.raises(BookingValidationError, match="not available"):
                await client.create_booking(42, DAY, "10:00", "11:00", "Site visit")
        assert fake.count("POST", "/api/v1/bookings") == 0

    @pytest.mark.asyncio
    async def test_server_conflict_surfaces_and_drops_cache(self):
        fake = FakeApi(post_status=409, post_detail=CONFLICT_MESSAGE)
        async with make_client(fake) as client:
            with pytest.raises(BookingConflictError):
                await client.create_booking(1, DAY, "10:00", "11:00", "Site visit")
            assert not client.cache.holds(DAY)

    @pytest.mark.asyncio
    async def test_success_drops_cache(self):
        fake = FakeApi()
        async with make_client(fake) as client:
            await client.create_booking(1, DAY, "10:00", "11:00", "Site visit")
            assert not client.cache.holds(DAY)
            await client.load_day(DAY)
        assert fake.count("GET", "/api/v1/timeline") == 2


class TestDayCache:
    @pytest.mark.asyncio
    async def test_same_day_served_from_cache(self):
        fake = FakeApi()
        async with make_client(fake) as client:
            await client.load_day(DAY)
            await client.load_day(DAY)
        assert fake.count("GET", "/api/v1/timeline") == 1

    @pytest.mark.asyncio
    async def test_other_day_refetches(self):
        fake = FakeApi()
        async with make_client(fake) as client:
            await client.load_day(DAY)
            timeline = await client.load_day(date(2026, 3, 3))
        assert timeline.day == date(2026, 3, 3)
        assert fake.count("GET", "/api/v1/timeline") == 2

    @pytest.mark.asyncio
    async def test_force_refetches(self):
        fake = FakeApi()
        async with make_client(fake) as client:
            await client.load_day(DAY)
            await client.load_day(DAY, force=True)
        assert fake.count("GET", "/api/v1/timeline") == 2

    @pytest.mark.asyncio
    async def test_approve_drops_cache(self):
        fake = FakeApi()
        async with make_client(fake) as client:
            await client.load_day(DAY)
            booking = await client.approve(5)
            assert booking.status == "approved"
            assert not client.cache.holds(DAY)


class TestTransportFailure:
    @pytest.mark.asyncio
    async def test_connect_error_is_service_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = BookingCalendarClient("http://booking.test", "token", transport=httpx.MockTransport(handler))
        async with client:
            with pytest.raises(BookingServiceError, match="unavailable"):
                await client.load_day(DAY)


class TestAgainstApp:
    """Client wired straight into the ASGI app over the test database."""

    @pytest.mark.asyncio
    async def test_stale_cache_loses_to_server_check(self, api, db, user_profile, vehicle):
        client = BookingCalendarClient("http://booking.test", sign_token(user_profile.id),
                                       transport=httpx.ASGITransport(app=app))
        async with client:
            await client.load_day(DAY)
            # Someone else books the slot after our snapshot was taken.
            add_booking(db, vehicle.id, at(10), at(11), user_id="user-2")
            assert client.cache.holds(DAY)

            with patch("app.services.booking_service.notify_booking_change", new_callable=AsyncMock):
                with pytest.raises(BookingConflictError):
                    await client.create_booking(vehicle.id, DAY, "10:30", "11:30", "Site visit")
            assert not client.cache.holds(DAY)

            with pytest.raises(BookingConflictError):
                await client.create_booking(vehicle.id, DAY, "10:30", "11:30", "Site visit")

    @pytest.mark.asyncio
    async def test_book_then_cancel(self, api, user_profile, vehicle):
        client = BookingCalendarClient("http://booking.test", sign_token(user_profile.id),
                                       transport=httpx.ASGITransport(app=app))
        async with client:
            with patch("app.services.booking_service.notify_booking_change", new_callable=AsyncMock):
                booking = await client.create_booking(vehicle.id, DAY, "14:00", "15:00", "Airport pickup")
            assert booking.status == "pending"
            await client.cancel(booking.id)
            timeline = await client.load_day(DAY)
        assert timeline.bookings == []
