"""
goal_service.py — Weekly & monthly goals
One objective with up to three key results per user per period, keyed by
the reference-timezone week (YYYY-Www) or month (YYYY-MM).
"""

import json
import re
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import ValidationError, store_errors
from models.goal import Goal
from services.clock import as_utc, monthly_period_key, weekly_period_key

PERIOD_PATTERNS = {
    "weekly": re.compile(r"^\d{4}-W(0[1-9]|[1-4]\d|5[0-3])$"),
    "monthly": re.compile(r"^\d{4}-(0[1-9]|1[0-2])$"),
}
MAX_KEY_RESULTS = 3


def current_period_key(period_type: str, now: datetime) -> str:
    if period_type == "weekly":
        return weekly_period_key(now)
    if period_type == "monthly":
        return monthly_period_key(now)
    raise ValidationError("Period type must be 'weekly' or 'monthly'")


def validate_period(period_type: str, period_key: str):
    pattern = PERIOD_PATTERNS.get(period_type)
    if pattern is None:
        raise ValidationError("Period type must be 'weekly' or 'monthly'")
    if not pattern.match(period_key or ""):
        raise ValidationError(f"Invalid {period_type} period key: {period_key}")


class GoalService:
    @staticmethod
    def get(db: Session, user_id: int, period_type: str, period_key: str) -> Goal | None:
        validate_period(period_type, period_key)
        with store_errors("loading goal"):
            return db.query(Goal).filter_by(user_id=user_id, period_type=period_type, period_key=period_key).first()

    @staticmethod
    def save(db: Session, user_id: int, data: dict, now: datetime) -> Goal:
        now = as_utc(now)
        period_type = data.get("period_type")
        period_key = data.get("period_key") or current_period_key(period_type, now)
        validate_period(period_type, period_key)

        objective = (data.get("objective") or "").strip()
        if not objective:
            raise ValidationError("Please enter an objective")

        key_results = data.get("key_results") or []
        if len(key_results) > MAX_KEY_RESULTS:
            raise ValidationError(f"At most {MAX_KEY_RESULTS} key results are allowed")
        key_results = [kr.strip() for kr in key_results if kr.strip()]

        progress = data.get("key_results_progress") or [0] * MAX_KEY_RESULTS
        if len(progress) > MAX_KEY_RESULTS or any(not 0 <= p <= 100 for p in progress):
            raise ValidationError("Key result progress must be up to three values between 0 and 100")

        def apply(goal):
            goal.objective = objective
            goal.key_results = json.dumps(key_results)
            goal.key_results_progress = json.dumps(list(progress))
            goal.focus = data.get("focus")
            goal.identity_focus = data.get("identity_focus")
            goal.is_shared = bool(data.get("is_shared", False))
            goal.updated_at = now

        period = {"user_id": user_id, "period_type": period_type, "period_key": period_key}
        with store_errors("saving goal", db):
            goal = db.query(Goal).filter_by(**period).first()
            created = goal is None
            if created:
                goal = Goal(**period, created_at=now)
                db.add(goal)
            apply(goal)

            try:
                db.commit()
            except IntegrityError:
                if not created:
                    raise
                # A concurrent save created the period's goal first; overwrite it
                db.rollback()
                goal = db.query(Goal).filter_by(**period).one()
                apply(goal)
                db.commit()
            db.refresh(goal)
            return goal


def goal_to_dict(goal: Goal) -> dict:
    return {
        "id": goal.id,
        "period_type": goal.period_type,
        "period_key": goal.period_key,
        "objective": goal.objective,
        "key_results": json.loads(goal.key_results or "[]"),
        "key_results_progress": json.loads(goal.key_results_progress or "[]"),
        "focus": goal.focus,
        "identity_focus": goal.identity_focus,
        "is_shared": goal.is_shared,
    }
