# app/client/booking_client.py
"""
Async client for the booking API, used by the calendar front-end and scripts.

Keeps a read-through cache of one day's timeline (bookable vehicles + all
bookings of that day). The cache is dropped after every mutation and whenever
another day is requested.

create_booking() runs the conflict check against the cached day first, so an
obviously taken slot fails without a round trip. A clean local check proves
nothing: the server re-checks against live data and may still answer 409.
"""

from datetime import date, datetime
from typing import Optional

import httpx

from app.schemas.booking import BookingOut, TimelineOut
from app.services.booking_service import validate_booking_request
from app.services.conflict_service import CONFLICT_MESSAGE, has_conflict
from app.services.exceptions import (
    BookingConflictError, BookingServiceError, BookingValidationError,
    InvalidTransitionError, NotFoundError, PermissionDeniedError,
)
from app.utils.logger import get_logger

logger = get_logger(__name__)

API_PREFIX = "/api/v1"

_ERRORS_BY_STATUS = {
    403: PermissionDeniedError,
    404: NotFoundError,
    422: BookingValidationError,
}


class DayBookingCache:
    """Snapshot of a single day. Possibly stale; never used as proof of availability."""

    def __init__(self):
        self.day: Optional[date] = None
        self.timeline: Optional[TimelineOut] = None

    def holds(self, day: date) -> bool:
        return self.timeline is not None and self.day == day

    def store(self, timeline: TimelineOut):
        self.day = timeline.day
        self.timeline = timeline

    def invalidate(self):
        self.day = None
        self.timeline = None


def parse_clock(day: date, value: str) -> datetime:
    """'09:30' on `day` → local datetime."""
    try:
        return datetime.combine(day, datetime.strptime(value, "%H:%M").time())
    except ValueError:
        raise BookingValidationError(f"Invalid time '{value}', expected HH:MM")


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        detail = None
    if isinstance(detail, str):
        return detail
    return f"Request failed (HTTP {response.status_code})"


def raise_for_booking_error(response: httpx.Response):
    """Turn an API error response into the matching domain exception."""
    if response.status_code < 400:
        return
    detail = _error_detail(response)
    if response.status_code == 409:
        if detail == CONFLICT_MESSAGE:
            raise BookingConflictError(detail)
        raise InvalidTransitionError(detail)
    if response.status_code == 401:
        raise PermissionDeniedError("Session expired, please sign in again")
    error_cls = _ERRORS_BY_STATUS.get(response.status_code)
    if error_cls is None:
        # 5xx and anything unexpected
        raise BookingServiceError("Something went wrong, please try again")
    raise error_cls(detail)


class BookingCalendarClient:
    def __init__(self, base_url: str, token: str, transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: float = 10.0):
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
            timeout=timeout,
        )
        self.cache = DayBookingCache()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, f"{API_PREFIX}{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[CLIENT] {method} {path} failed: {e}")
            raise BookingServiceError("Booking service unavailable") from e
        raise_for_booking_error(response)
        return response

    async def load_day(self, day: date, force: bool = False) -> TimelineOut:
        """Timeline for `day`, from cache when it already holds that day."""
        if not force and self.cache.holds(day):
            return self.cache.timeline
        response = await self._request("GET", "/timeline", params={"day": day.isoformat()})
        timeline = TimelineOut.model_validate(response.json())
        self.cache.store(timeline)
        return timeline

    async def create_booking(self, vehicle_id: Optional[int], day: date, start_time: str,
                             end_time: str, purpose: str) -> BookingOut:
        start = parse_clock(day, start_time)
        end = parse_clock(day, end_time)
        purpose = validate_booking_request(vehicle_id, start, end, purpose)

        timeline = await self.load_day(day)
        if vehicle_id not in {v.id for v in timeline.vehicles}:
            raise BookingValidationError("Vehicle is not available for booking")
        if has_conflict(timeline.bookings, vehicle_id, start, end):
            logger.info(f"[CLIENT] Local conflict for vehicle {vehicle_id} {start}-{end}")
            raise BookingConflictError(CONFLICT_MESSAGE)

        try:
            response = await self._request("POST", "/bookings", json={
                "vehicle_id": vehicle_id,
                "start_time": start.isoformat(),
                "end_time": end.isoformat(),
                "purpose": purpose,
            })
        finally:
            self.cache.invalidate()
        return BookingOut.model_validate(response.json())

    async def _mutate(self, method: str, path: str) -> httpx.Response:
        try:
            return await self._request(method, path)
        finally:
            self.cache.invalidate()

    async def approve(self, booking_id: int) -> BookingOut:
        response = await self._mutate("PUT", f"/bookings/{booking_id}/approve")
        return BookingOut.model_validate(response.json())

    async def reject(self, booking_id: int) -> BookingOut:
        response = await self._mutate("PUT", f"/bookings/{booking_id}/reject")
        return BookingOut.model_validate(response.json())

    async def cancel(self, booking_id: int):
        await self._mutate("DELETE", f"/bookings/{booking_id}")
