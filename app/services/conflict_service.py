# app/services/conflict_service.py
"""
Booking conflict detection.

Two bookings of the same vehicle conflict when neither is rejected and their
half-open intervals [start, end) overlap. Back-to-back bookings
(09:00-10:00 then 10:00-11:00) do not conflict.

has_conflict() works on an in-memory snapshot (the client's day cache, or any
list of rows) and is the fast, possibly stale first check.
find_conflicting_bookings() asks the database and is the authoritative one.
"""

from datetime import datetime
from typing import Iterable, Optional
from sqlalchemy.orm import Session

from app.models.booking import Booking, STATUS_REJECTED

CONFLICT_MESSAGE = "Vehicle is already booked for this time slot."


def intervals_overlap(a_start: datetime, a_end: datetime,
                      b_start: datetime, b_end: datetime) -> bool:
    """Half-open overlap test. Touching boundaries do not overlap."""
    return a_start < b_end and b_start < a_end


def blocking_bookings(bookings: Iterable, vehicle_id: int,
                      exclude_booking_id: Optional[int] = None) -> list:
    """Bookings of the vehicle that still hold their slot (anything not rejected)."""
    return [
        b for b in bookings
        if b.vehicle_id == vehicle_id
        and b.status != STATUS_REJECTED
        and (exclude_booking_id is None or b.id != exclude_booking_id)
    ]


def has_conflict(bookings: Iterable, vehicle_id: int, start: datetime, end: datetime,
                 exclude_booking_id: Optional[int] = None) -> bool:
    """
    True if [start, end) overlaps any non-rejected booking of vehicle_id in `bookings`.
    The caller guarantees start < end. exclude_booking_id skips the booking being edited.
    """
    return any(
        intervals_overlap(start, end, b.start_time, b.end_time)
        for b in blocking_bookings(bookings, vehicle_id, exclude_booking_id)
    )


def find_conflicting_bookings(db: Session, vehicle_id: int, start: datetime, end: datetime,
                              exclude_booking_id: Optional[int] = None) -> list[Booking]:
    """Live query for non-rejected bookings of vehicle_id overlapping [start, end)."""
    q = db.query(Booking).filter(
        Booking.vehicle_id == vehicle_id,
        Booking.status != STATUS_REJECTED,
        Booking.start_time < end,
        Booking.end_time > start,
    )
    if exclude_booking_id is not None:
        q = q.filter(Booking.id != exclude_booking_id)
    return q.all()
