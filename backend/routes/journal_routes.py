from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from dependencies import get_now, get_window_policies
from models.evening_entry import EveningEntry
from models.morning_entry import MorningEntry
from services.clock import day_key
from services.journal_service import JournalService, evening_to_dict, morning_to_dict
from services.timeline_service import TimelineService

router = APIRouter(prefix="/api/v1", tags=["Journal"])


class MorningEntryIn(BaseModel):
    mood: Literal["chaotic", "flat", "stable", "fire", "recover"]
    value: Optional[str] = None
    action: Optional[str] = None
    let_go: Optional[str] = None
    declaration: str = Field(min_length=1)


class EveningEntryIn(BaseModel):
    proud_choice: Optional[str] = None
    off_choice: Optional[str] = None
    mood_reflection: Optional[str] = None
    learning: Optional[str] = None
    tomorrow_message: Optional[str] = None
    self_score: Optional[int] = None
    is_shared: bool = False


@router.get("/windows")
async def posting_windows(
    user_id: int = Depends(get_current_user),
    now: datetime = Depends(get_now),
    policies: dict = Depends(get_window_policies),
):
    """Today's day key and the state of both posting windows."""
    return {
        "day_key": day_key(now),
        "windows": {kind: policy.to_dict(now) for kind, policy in policies.items()},
    }


@router.get("/today")
async def my_entries_today(
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """My own morning and evening entries for today, or null where not posted yet."""
    today = day_key(now)
    morning = JournalService.get_for_day(db, MorningEntry, user_id, today)
    evening = JournalService.get_for_day(db, EveningEntry, user_id, today)
    return {
        "day_key": today,
        "morning": morning_to_dict(morning) if morning else None,
        "evening": evening_to_dict(evening) if evening else None,
    }


@router.get("/morning")
async def morning_feed(
    day: Optional[str] = Query(None, alias="day_key"),
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return JournalService.morning_feed(db, user_id, day or day_key(now))


@router.post("/morning")
async def save_morning(
    body: MorningEntryIn,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    policies: dict = Depends(get_window_policies),
):
    entry = JournalService.save_morning(db, user_id, body.model_dump(), policies["morning"], now)
    return morning_to_dict(entry)


@router.get("/evening")
async def evening_feed(
    day: Optional[str] = Query(None, alias="day_key"),
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return JournalService.evening_feed(db, user_id, day or day_key(now))


@router.post("/evening")
async def save_evening(
    body: EveningEntryIn,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    policies: dict = Depends(get_window_policies),
):
    entry = JournalService.save_evening(db, user_id, body.model_dump(exclude_unset=True), policies["evening"], now)
    return evening_to_dict(entry)


@router.get("/timeline")
async def timeline(
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return {"timeline": TimelineService.recent(db, now)}
