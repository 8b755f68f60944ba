from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from auth import get_current_user, require_role
from database import get_db
from dependencies import get_now
from models.user import User
from services.stats_service import StatsService

router = APIRouter(prefix="/api/v1", tags=["Stats"])


@router.get("/stats")
async def personal_stats(
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return StatsService.personal(db, user_id, now)


@router.get("/admin/users")
async def engagement_dashboard(
    admin: User = Depends(require_role("superadmin")),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Superadmin only: health score and tier for every member."""
    return StatsService.health_dashboard(db, now)
