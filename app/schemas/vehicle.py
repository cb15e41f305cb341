# app/schemas/vehicle.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal, Optional

VehicleStatus = Literal["active", "maintenance", "inactive"]


class VehicleCreate(BaseModel):
    name: str = Field(..., min_length=1)
    plate_number: str = Field(..., min_length=1)
    capacity: int = Field(4, gt=0)
    status: VehicleStatus = "active"


class VehicleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    plate_number: Optional[str] = Field(None, min_length=1)
    capacity: Optional[int] = Field(None, gt=0)
    status: Optional[VehicleStatus] = None


class VehicleOut(BaseModel):
    id: int
    name: str
    plate_number: str
    capacity: int
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
