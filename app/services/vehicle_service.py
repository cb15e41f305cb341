# app/services/vehicle_service.py
"""
Fleet roster — vehicle lookup and admin-only management.
Supplies the "active" predicate used when new bookings are created.
Deleting a vehicle leaves its bookings untouched.
"""

from typing import Optional
from sqlalchemy.orm import Session
from app.models.vehicle import Vehicle, VEHICLE_ACTIVE
from app.schemas.vehicle import VehicleCreate, VehicleUpdate
from app.services.exceptions import BookingValidationError, NotFoundError, PermissionDeniedError
from app.services.session_context import SessionContext
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _require_admin(session: SessionContext, action: str):
    if not session.is_admin:
        logger.warning(f"[FLEET] {session.user_id} refused: {action} requires admin")
        raise PermissionDeniedError("Only administrators can manage vehicles")


def get_vehicle(db: Session, vehicle_id: int) -> Optional[Vehicle]:
    """Find a vehicle by id. Returns None if not found."""
    return db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()


def lookup_vehicle_by_plate(db: Session, plate_number: str) -> Optional[Vehicle]:
    """Find a vehicle by plate number. Returns None if not found."""
    return db.query(Vehicle).filter(Vehicle.plate_number == plate_number).first()


def list_vehicles(db: Session, status: Optional[str] = None) -> list[Vehicle]:
    q = db.query(Vehicle)
    if status:
        q = q.filter(Vehicle.status == status)
    return q.order_by(Vehicle.id).all()


def list_bookable_vehicles(db: Session) -> list[Vehicle]:
    """Vehicles offered for new bookings."""
    return list_vehicles(db, status=VEHICLE_ACTIVE)


def create_vehicle(db: Session, session: SessionContext, body: VehicleCreate) -> Vehicle:
    _require_admin(session, "create vehicle")
    if lookup_vehicle_by_plate(db, body.plate_number):
        raise BookingValidationError(f"Plate {body.plate_number} already registered")
    vehicle = Vehicle(
        name=body.name,
        plate_number=body.plate_number,
        capacity=body.capacity,
        status=body.status,
    )
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    logger.info(f"[FLEET] Added {vehicle.plate_number} ({vehicle.name}) by {session.user_id}")
    return vehicle


def update_vehicle(db: Session, session: SessionContext, vehicle_id: int, body: VehicleUpdate) -> Vehicle:
    """Partial update. Deactivating only hides the vehicle from new bookings."""
    _require_admin(session, "update vehicle")
    vehicle = get_vehicle(db, vehicle_id)
    if not vehicle:
        raise NotFoundError("Vehicle not found")

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    new_plate = changes.get("plate_number")
    if new_plate and new_plate != vehicle.plate_number and lookup_vehicle_by_plate(db, new_plate):
        raise BookingValidationError(f"Plate {new_plate} already registered")

    for field, value in changes.items():
        setattr(vehicle, field, value)
    db.commit()
    db.refresh(vehicle)
    logger.info(f"[FLEET] Updated vehicle {vehicle_id}: {changes}")
    return vehicle


def delete_vehicle(db: Session, session: SessionContext, vehicle_id: int):
    _require_admin(session, "delete vehicle")
    vehicle = get_vehicle(db, vehicle_id)
    if not vehicle:
        raise NotFoundError("Vehicle not found")
    db.delete(vehicle)
    db.commit()
    logger.info(f"[FLEET] Removed vehicle {vehicle_id} ({vehicle.plate_number}); bookings kept")
