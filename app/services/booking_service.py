# app/services/booking_service.py
"""
Booking lifecycle.

    (none) ──create──▶ pending ──approve──▶ approved
                          └──────reject───▶ rejected
    any status ──delete──▶ removed (cancellation)

create        any signed-in user, vehicle active, no overlap
approve/reject  admin only, booking must still be pending
delete        admin or the booking's owner
reschedule    admin or owner, pending bookings only, vehicle still active

Every create and status change is committed first, then announced through
notification_service. A failed notification never undoes the change.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.models.booking import (
    Booking, STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED,
)
from app.models.vehicle import Vehicle
from app.schemas.booking import BookingCreate, BookingReschedule
from app.services.conflict_service import CONFLICT_MESSAGE, find_conflicting_bookings
from app.services.exceptions import (
    BookingConflictError, BookingValidationError, InvalidTransitionError,
    NotFoundError, PermissionDeniedError,
)
from app.services.notification_service import (
    EVENT_CREATED, EVENT_UPDATED, notify_booking_change,
)
from app.services.session_context import SessionContext
from app.services.vehicle_service import list_bookable_vehicles
from app.utils.logger import get_logger

logger = get_logger(__name__)

FALLBACK_VEHICLE_NAME = "Vehicle"


def validate_booking_request(vehicle_id: Optional[int], start: datetime, end: datetime,
                             purpose: Optional[str]) -> str:
    """
    Checks that need no data. Raises BookingValidationError, returns the trimmed purpose.
    Runs before any query so a bad form never reaches the database.
    """
    if not vehicle_id:
        raise BookingValidationError("Please select a vehicle")
    if start >= end:
        raise BookingValidationError("End time must be after start time")
    # Same calendar day; ending exactly at the next midnight is allowed
    if end.date() != start.date() and end != day_bounds(start.date())[1]:
        raise BookingValidationError("Booking must start and end on the same day")
    purpose = (purpose or "").strip()
    if not purpose:
        raise BookingValidationError("Purpose is required")
    return purpose


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """[midnight, next midnight) of `day`."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def get_booking(db: Session, booking_id: int) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def list_bookings(db: Session, day: Optional[date] = None, vehicle_id: Optional[int] = None,
                  status: Optional[str] = None) -> list[Booking]:
    """Bookings of every status, oldest start first. `day` keeps those overlapping that day."""
    q = db.query(Booking)
    if day:
        day_start, day_end = day_bounds(day)
        q = q.filter(Booking.start_time < day_end, Booking.end_time > day_start)
    if vehicle_id is not None:
        q = q.filter(Booking.vehicle_id == vehicle_id)
    if status:
        q = q.filter(Booking.status == status)
    return q.order_by(Booking.start_time, Booking.id).all()


def list_day_bookings(db: Session, day: date) -> list[Booking]:
    return list_bookings(db, day=day)


def get_timeline(db: Session, day: date) -> dict:
    """Bookable vehicles plus the whole day's bookings, including ones on retired vehicles."""
    return {
        "day": day,
        "vehicles": list_bookable_vehicles(db),
        "bookings": list_day_bookings(db, day),
    }


def _vehicle_name(db: Session, vehicle_id: int) -> str:
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
    return vehicle.name if vehicle else FALLBACK_VEHICLE_NAME


def _lock_vehicle(db: Session, vehicle_id: int) -> Optional[Vehicle]:
    # Serialises concurrent writers for one vehicle until commit/rollback (no-op on SQLite)
    return db.query(Vehicle).filter(Vehicle.id == vehicle_id).with_for_update().first()


def _ensure_free(db: Session, vehicle_id: int, start: datetime, end: datetime,
                 exclude_booking_id: Optional[int] = None):
    conflicts = find_conflicting_bookings(db, vehicle_id, start, end, exclude_booking_id)
    if conflicts:
        db.rollback()
        logger.info(f"[BOOKING] Conflict on vehicle {vehicle_id} {start}-{end}: "
                    f"{[b.id for b in conflicts]}")
        raise BookingConflictError(CONFLICT_MESSAGE)


def _commit_or_conflict(db: Session):
    """The exclusion constraint may still refuse the write if another request won the race."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[BOOKING] Write refused by database constraint: {e.orig}")
        raise BookingConflictError(CONFLICT_MESSAGE)


async def create_booking(db: Session, session: SessionContext, body: BookingCreate) -> Booking:
    purpose = validate_booking_request(body.vehicle_id, body.start_time, body.end_time, body.purpose)

    vehicle = _lock_vehicle(db, body.vehicle_id)
    if not vehicle:
        db.rollback()
        raise BookingValidationError("Vehicle not found")
    if not vehicle.is_bookable:
        db.rollback()
        raise BookingValidationError("Vehicle is not available for booking")

    _ensure_free(db, vehicle.id, body.start_time, body.end_time)

    booking = Booking(
        user_id=session.user_id,
        vehicle_id=vehicle.id,
        start_time=body.start_time,
        end_time=body.end_time,
        purpose=purpose,
        status=STATUS_PENDING,
    )
    db.add(booking)
    _commit_or_conflict(db)
    db.refresh(booking)
    logger.info(f"[BOOKING] #{booking.id} created by {session.user_id} for "
                f"{vehicle.plate_number} {booking.start_time}-{booking.end_time}")

    await notify_booking_change(booking, vehicle.name, EVENT_CREATED)
    return booking


async def _resolve(db: Session, session: SessionContext, booking_id: int, new_status: str) -> Booking:
    if not session.is_admin:
        logger.warning(f"[BOOKING] {session.user_id} refused: {new_status} requires admin")
        raise PermissionDeniedError("Only administrators can approve or reject bookings")

    booking = get_booking(db, booking_id)
    if booking.status != STATUS_PENDING:
        raise InvalidTransitionError(f"Booking is already {booking.status}")

    booking.status = new_status
    db.commit()
    db.refresh(booking)
    logger.info(f"[BOOKING] #{booking.id} {new_status} by {session.user_id}")

    await notify_booking_change(booking, _vehicle_name(db, booking.vehicle_id), EVENT_UPDATED)
    return booking


async def approve_booking(db: Session, session: SessionContext, booking_id: int) -> Booking:
    return await _resolve(db, session, booking_id, STATUS_APPROVED)


async def reject_booking(db: Session, session: SessionContext, booking_id: int) -> Booking:
    return await _resolve(db, session, booking_id, STATUS_REJECTED)


async def reschedule_booking(db: Session, session: SessionContext, booking_id: int,
                             body: BookingReschedule) -> Booking:
    """Move a pending booking. Its own current slot does not count as a conflict."""
    booking = get_booking(db, booking_id)
    if not (session.is_admin or session.owns(booking)):
        raise PermissionDeniedError("Only the booking owner or an administrator can change a booking")
    if booking.status != STATUS_PENDING:
        raise InvalidTransitionError("Only pending bookings can be rescheduled")

    purpose = validate_booking_request(
        booking.vehicle_id, body.start_time, body.end_time,
        body.purpose if body.purpose is not None else booking.purpose,
    )
    vehicle = _lock_vehicle(db, booking.vehicle_id)
    if not vehicle:
        db.rollback()
        raise BookingValidationError("Vehicle not found")
    if not vehicle.is_bookable:
        db.rollback()
        raise BookingValidationError("Vehicle is not available for booking")

    _ensure_free(db, vehicle.id, body.start_time, body.end_time, exclude_booking_id=booking.id)

    booking.start_time = body.start_time
    booking.end_time = body.end_time
    booking.purpose = purpose
    _commit_or_conflict(db)
    db.refresh(booking)
    logger.info(f"[BOOKING] #{booking.id} moved to {booking.start_time}-{booking.end_time}")

    await notify_booking_change(booking, vehicle.name, EVENT_UPDATED)
    return booking


def delete_booking(db: Session, session: SessionContext, booking_id: int):
    """Cancellation. Allowed in any status for the owner or an admin."""
    booking = get_booking(db, booking_id)
    if not (session.is_admin or session.owns(booking)):
        logger.warning(f"[BOOKING] {session.user_id} refused: cancel #{booking_id} not owned")
        raise PermissionDeniedError("Only the booking owner or an administrator can cancel a booking")
    db.delete(booking)
    db.commit()
    logger.info(f"[BOOKING] #{booking_id} cancelled by {session.user_id}")
