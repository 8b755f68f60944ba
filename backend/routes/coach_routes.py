from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auth import require_role
from database import get_db
from dependencies import get_now
from models.user import User
from services.coaching_service import CoachingService

router = APIRouter(prefix="/api/v1/coach", tags=["Coach"])

require_coach = require_role("coach")


class CoachingNoteIn(BaseModel):
    user_id: int
    correction: Optional[str] = None
    question: Optional[str] = None


@router.post("/notes")
async def save_note(
    body: CoachingNoteIn,
    coach: User = Depends(require_coach),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    note = CoachingService.save_note(db, coach.id, body.user_id, body.correction, body.question, now)
    return {"id": note.id, "day_key": note.day_key, "correction": note.correction, "question": note.question}


@router.get("/today")
async def today_board(
    coach: User = Depends(require_coach),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return CoachingService.today_board(db, now)
