# app/schemas/booking.py
from pydantic import BaseModel, field_validator
from datetime import date, datetime
from typing import Optional

from app.schemas.vehicle import VehicleOut


def _local_time(v: datetime) -> datetime:
    # Bookings are stored and compared as naive local wall-clock times
    if v.tzinfo is not None:
        raise ValueError("Times must be local wall-clock times without a UTC offset")
    return v


class BookingCreate(BaseModel):
    vehicle_id: Optional[int] = None     # None → "Please select a vehicle"
    start_time: datetime
    end_time: datetime
    purpose: str = ""

    @field_validator("start_time", "end_time")
    def naive_times(cls, v):
        return _local_time(v)


class BookingReschedule(BaseModel):
    start_time: datetime
    end_time: datetime
    purpose: Optional[str] = None

    @field_validator("start_time", "end_time")
    def naive_times(cls, v):
        return _local_time(v)


class BookingOut(BaseModel):
    id: int
    user_id: str
    vehicle_id: int
    start_time: datetime
    end_time: datetime
    purpose: str
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TimelineOut(BaseModel):
    """One day of the calendar: bookable vehicles plus every booking of the day."""
    day: date
    vehicles: list[VehicleOut]
    bookings: list[BookingOut]

    class Config:
        from_attributes = True
