# app/routers/bookings.py
"""
Booking endpoints — day timeline, create, reschedule, approve/reject, cancel.
Role and ownership rules live in booking_service; admin routes also check up front.
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.booking import BookingCreate, BookingOut, BookingReschedule, TimelineOut
from app.services import booking_service
from app.services.session_context import SessionContext
from app.utils.auth import get_session_context, require_admin

router = APIRouter()


@router.get("/timeline", response_model=TimelineOut, summary="One day of the calendar")
def get_timeline(day: Optional[date] = None, db: Session = Depends(get_db),
                 session: SessionContext = Depends(get_session_context)):
    """Active vehicles and every booking that starts and ends on `day` (default today)."""
    return booking_service.get_timeline(db, day or date.today())


@router.get("/bookings", response_model=list[BookingOut], summary="List bookings")
def list_bookings(day: Optional[date] = None, vehicle_id: Optional[int] = None,
                  status: Optional[str] = None, db: Session = Depends(get_db),
                  session: SessionContext = Depends(get_session_context)):
    return booking_service.list_bookings(db, day=day, vehicle_id=vehicle_id, status=status)


@router.get("/bookings/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: int, db: Session = Depends(get_db),
                session: SessionContext = Depends(get_session_context)):
    return booking_service.get_booking(db, booking_id)


@router.post("/bookings", response_model=BookingOut, status_code=201, summary="Request a booking")
async def create_booking(body: BookingCreate, db: Session = Depends(get_db),
                         session: SessionContext = Depends(get_session_context)):
    """New bookings start as pending. 409 if the slot is taken, 422 if the form is invalid."""
    return await booking_service.create_booking(db, session, body)


@router.put("/bookings/{booking_id}", response_model=BookingOut, summary="Reschedule a pending booking")
async def reschedule_booking(booking_id: int, body: BookingReschedule, db: Session = Depends(get_db),
                             session: SessionContext = Depends(get_session_context)):
    return await booking_service.reschedule_booking(db, session, booking_id, body)


@router.put("/bookings/{booking_id}/approve", response_model=BookingOut, summary="Approve (admin)")
async def approve_booking(booking_id: int, db: Session = Depends(get_db),
                          session: SessionContext = Depends(require_admin)):
    return await booking_service.approve_booking(db, session, booking_id)


@router.put("/bookings/{booking_id}/reject", response_model=BookingOut, summary="Reject (admin)")
async def reject_booking(booking_id: int, db: Session = Depends(get_db),
                         session: SessionContext = Depends(require_admin)):
    return await booking_service.reject_booking(db, session, booking_id)


@router.delete("/bookings/{booking_id}", summary="Cancel a booking")
def cancel_booking(booking_id: int, db: Session = Depends(get_db),
                   session: SessionContext = Depends(get_session_context)):
    booking_service.delete_booking(db, session, booking_id)
    return {"id": booking_id, "status": "cancelled"}
