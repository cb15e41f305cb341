# app/routers/profile.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.profile import Profile
from app.schemas.profile import ProfileOut
from app.services.session_context import SessionContext
from app.utils.auth import get_session_context

router = APIRouter()


@router.get("/me", response_model=ProfileOut, summary="Current user's profile")
def get_me(db: Session = Depends(get_db), session: SessionContext = Depends(get_session_context)):
    return db.query(Profile).filter(Profile.id == session.user_id).first()
