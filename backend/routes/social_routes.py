from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Body
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from dependencies import get_now, get_forest_cache
from services.cache_service import TTLCache
from services.cheer_service import CheerService, merge_display_name
from services.clock import start_of_reference_month
from services.forest_view_service import ForestViewService
from services.watering_service import WateringService
from errors import store_errors
from models.user import User

router = APIRouter(prefix="/api/v1", tags=["Social"])


class CheerIn(BaseModel):
    post_id: int
    post_kind: Literal["morning", "evening", "goal"]


@router.get("/forest")
async def get_forest(
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    cache: TTLCache | None = Depends(get_forest_cache),
):
    """This month's forest, the week's MVP and which trees I watered today."""
    return ForestViewService.get_forest(db, user_id, now, cache)


@router.post("/forest/water")
async def water_tree(
    target_user_id: int = Body(..., embed=True),
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    cache: TTLCache | None = Depends(get_forest_cache),
):
    event = WateringService.water(db, user_id, target_user_id, now, cache)
    return {"success": True, "id": event.id, "day_key": event.day_key}


@router.get("/forest/waterings")
async def my_waterings(
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Who watered my tree this month."""
    events = WateringService.received(db, user_id, start_of_reference_month(now))
    with store_errors("resolving names"):
        givers = {u.id: u for u in db.query(User).filter(User.id.in_({e.from_user_id for e in events})).all()} if events else {}
    return [
        {
            "from_user_id": e.from_user_id,
            "from_user_name": merge_display_name(
                e.from_user_name, givers[e.from_user_id].display_name if e.from_user_id in givers else None
            ),
            "day_key": e.day_key,
            "created_at": e.created_at.isoformat(),
        }
        for e in events
    ]


@router.post("/cheers")
async def cheer_post(
    body: CheerIn,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    cheer = CheerService.create(db, user_id, body.post_kind, body.post_id, now)
    return {
        "success": True,
        "cheer": {
            "id": cheer.id,
            "user_id": cheer.user_id,
            "user_name": cheer.user_name,
            "user_avatar": cheer.user_avatar,
        },
    }


@router.get("/cheers")
async def list_cheers(
    post_id: int,
    post_kind: Literal["morning", "evening", "goal"],
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"cheers": CheerService.list_for_post(db, post_kind, post_id)}
