# app/models/booking.py
"""
Bookings table.
Times are naive local timestamps; intervals are half-open [start_time, end_time).
vehicle_id is a plain reference (no FK) so removing a vehicle keeps its history.
On PostgreSQL an exclusion constraint forbids two non-rejected bookings of the
same vehicle from overlapping.
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, CheckConstraint, DDL, event, func,
)
from app.database import Base

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
BOOKING_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_bookings_end_after_start"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)   # profiles.id of the owner
    vehicle_id = Column(Integer, nullable=False, index=True)   # vehicles.id, not enforced
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    purpose = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_PENDING)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return (f"<Booking {self.id} vehicle={self.vehicle_id} "
                f"{self.start_time}-{self.end_time} status={self.status}>")


event.listen(
    Booking.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Booking.__table__,
    "after_create",
    DDL(
        "ALTER TABLE bookings ADD CONSTRAINT bookings_no_overlap "
        "EXCLUDE USING gist (vehicle_id WITH =, tsrange(start_time, end_time, '[)') WITH &&) "
        "WHERE (status <> 'rejected')"
    ).execute_if(dialect="postgresql"),
)
