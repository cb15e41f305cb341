# app/schemas/profile.py
from pydantic import BaseModel
from typing import Optional


class ProfileOut(BaseModel):
    id: str
    email: str
    full_name: Optional[str]
    role: str
    department: Optional[str]

    class Config:
        from_attributes = True
