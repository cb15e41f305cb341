# app/models/vehicle.py
"""
Fleet vehicles table.
Only vehicles with status=active are offered for new bookings.
Deleting a vehicle never touches the bookings that reference it.
"""

from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint, func
from app.database import Base

VEHICLE_ACTIVE = "active"
VEHICLE_MAINTENANCE = "maintenance"
VEHICLE_INACTIVE = "inactive"
VEHICLE_STATUSES = (VEHICLE_ACTIVE, VEHICLE_MAINTENANCE, VEHICLE_INACTIVE)


class Vehicle(Base):
    __tablename__ = "vehicles"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_vehicles_capacity_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    plate_number = Column(String(50), unique=True, nullable=False, index=True)
    capacity = Column(Integer, nullable=False, default=4)
    status = Column(String(20), nullable=False, default=VEHICLE_ACTIVE, index=True)
    created_at = Column(DateTime, server_default=func.now())

    @property
    def is_bookable(self) -> bool:
        return self.status == VEHICLE_ACTIVE

    def __repr__(self):
        return f"<Vehicle {self.plate_number} name={self.name} status={self.status}>"
