# app/services/session_context.py
"""
Explicit actor passed to every booking and fleet operation.
Built once per request from the verified token and the stored profile.
"""

from dataclasses import dataclass
from typing import Optional

from app.models.profile import ROLE_ADMIN


@dataclass(frozen=True)
class SessionContext:
    user_id: str
    role: str
    email: Optional[str] = None
    full_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def owns(self, booking) -> bool:
        return booking.user_id == self.user_id

    @classmethod
    def from_profile(cls, profile) -> "SessionContext":
        return cls(
            user_id=profile.id,
            role=profile.role,
            email=profile.email,
            full_name=profile.full_name,
        )
