# app/routers/vehicles.py
"""Fleet roster — list for everyone, create/update/delete for admins."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.vehicle import VehicleCreate, VehicleOut, VehicleUpdate
from app.services import vehicle_service
from app.services.session_context import SessionContext
from app.utils.auth import get_session_context, require_admin

router = APIRouter()


@router.get("/vehicles", response_model=list[VehicleOut], summary="List vehicles")
def list_vehicles(status: Optional[str] = None, db: Session = Depends(get_db),
                  session: SessionContext = Depends(get_session_context)):
    return vehicle_service.list_vehicles(db, status=status)


@router.post("/vehicles", response_model=VehicleOut, status_code=201, summary="Add a vehicle")
def create_vehicle(body: VehicleCreate, db: Session = Depends(get_db),
                   session: SessionContext = Depends(require_admin)):
    return vehicle_service.create_vehicle(db, session, body)


@router.put("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Edit a vehicle")
def update_vehicle(vehicle_id: int, body: VehicleUpdate, db: Session = Depends(get_db),
                   session: SessionContext = Depends(require_admin)):
    """Set status to maintenance/inactive to stop new bookings; existing ones stay."""
    return vehicle_service.update_vehicle(db, session, vehicle_id, body)


@router.delete("/vehicles/{vehicle_id}", summary="Remove a vehicle")
def delete_vehicle(vehicle_id: int, db: Session = Depends(get_db),
                   session: SessionContext = Depends(require_admin)):
    vehicle_service.delete_vehicle(db, session, vehicle_id)
    return {"id": vehicle_id, "status": "removed"}
