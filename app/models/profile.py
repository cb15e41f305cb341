# app/models/profile.py
"""
User profiles table.
Rows are keyed by the identity provider's user id. The role column is the
only thing permission checks look at.
"""

from sqlalchemy import Column, String, DateTime, func
from app.database import Base

ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLES = (ROLE_ADMIN, ROLE_USER)


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)          # identity provider user id
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(200))
    role = Column(String(20), nullable=False, default=ROLE_USER)  # admin | user
    department = Column(String(100))
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Profile {self.email} role={self.role}>"
