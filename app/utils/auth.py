# app/utils/auth.py
"""
Bearer-token authentication against the external identity provider.

The provider signs a JWT whose `sub` claim is the user id; the matching row
in `profiles` supplies the role. The resulting SessionContext is handed to
services explicitly.
"""

import time
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.profile import Profile
from app.services.session_context import SessionContext
from app.utils.logger import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def normalize_login_email(value: str) -> str:
    """Sign-in shorthand: a bare keyword such as "admin" becomes admin@<default domain>."""
    value = value.strip()
    if "@" not in value:
        return f"{value}@{settings.DEFAULT_EMAIL_DOMAIN}"
    return value


def sign_token(user_id: str, expires_in: int = 3600) -> str:
    """Issue a token the way the identity provider does. Used by scripts and tests."""
    payload = {"sub": user_id, "exp": int(time.time()) + expires_in}
    if settings.JWT_AUDIENCE:
        payload["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[str]:
    """Return the user id from a valid token, or None."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE or None,
            options={"verify_aud": bool(settings.JWT_AUDIENCE)},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        return None
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected invalid token: {e}")
        return None
    return payload.get("sub")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_session_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> SessionContext:
    """FastAPI dependency — resolves the caller once per request."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    user_id = decode_token(credentials.credentials)
    if not user_id:
        raise _unauthorized("Invalid or expired token")

    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        raise _unauthorized("No profile for this account")
    return SessionContext.from_profile(profile)


def require_admin(session: SessionContext = Depends(get_session_context)) -> SessionContext:
    """Dependency for admin-only endpoints. Services repeat the check."""
    if not session.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator role required")
    return session
