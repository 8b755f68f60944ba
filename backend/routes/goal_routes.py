from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from dependencies import get_now
from services.goal_service import GoalService, current_period_key, goal_to_dict

router = APIRouter(prefix="/api/v1/goals", tags=["Goals"])


class GoalIn(BaseModel):
    period_type: Literal["weekly", "monthly"]
    period_key: Optional[str] = None
    objective: str = Field(min_length=1)
    key_results: List[str] = []
    key_results_progress: Optional[List[int]] = None
    focus: Optional[str] = None
    identity_focus: Optional[str] = None
    is_shared: bool = False


@router.get("")
async def get_goal(
    period_type: Literal["weekly", "monthly"],
    period_key: Optional[str] = None,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    key = period_key or current_period_key(period_type, now)
    goal = GoalService.get(db, user_id, period_type, key)
    return goal_to_dict(goal) if goal else None


@router.post("")
async def save_goal(
    body: GoalIn,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    goal = GoalService.save(db, user_id, body.model_dump(), now)
    return goal_to_dict(goal)
