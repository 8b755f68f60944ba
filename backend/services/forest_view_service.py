"""
forest_view_service.py — Forest read model
Gathers cohort inputs through the aggregation layer, runs the growth rules
and decorates the result for the requesting member.
"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from services.aggregation_service import AggregationService
from services.cache_service import TTLCache
from services.clock import day_key, day_of_month, days_in_month
from services.forest_service import find_mvp, tree_growth, visible_forest

logger = logging.getLogger(__name__)


def forest_cache_key(now: datetime) -> str:
    return f"forest:{day_key(now)}"


class ForestViewService:
    @staticmethod
    def compute(db: Session, now: datetime) -> dict:
        """Cohort forest independent of who is looking at it."""
        members = AggregationService.cohort(db)
        by_id = {u.id: u for u in members}
        user_ids = list(by_id)

        month_days = days_in_month(now)
        today = day_of_month(now)

        growths = [
            tree_growth(inputs, month_days, today, now)
            for inputs in AggregationService.forest_inputs(db, user_ids, now)
        ]

        forest = []
        for growth in visible_forest(growths):
            user = by_id[growth.user_id]
            forest.append({
                **growth.to_dict(),
                "name": user.display_name,
                "avatar": user.avatar,
            })

        mvp = None
        top = find_mvp(AggregationService.waterings_given(db, user_ids, now))
        if top is not None:
            user_id, count = top
            mvp = {"user_id": user_id, "name": by_id[user_id].display_name, "waterings_given": count}

        logger.info(f"Forest computed: {len(forest)}/{len(members)} trees visible")
        return {
            "forest": forest,
            "days_in_month": month_days,
            "current_day": today,
            "mvp": mvp,
        }

    @staticmethod
    def get_forest(db: Session, viewer_id: int, now: datetime, cache: TTLCache | None = None) -> dict:
        if cache is None:
            state = ForestViewService.compute(db, now)
        else:
            state = cache.get_or_compute(forest_cache_key(now), lambda: ForestViewService.compute(db, now))

        watered = AggregationService.watered_today_by(db, viewer_id, now)
        return {
            **state,
            "forest": [
                {**tree, "watered_by_me_today": tree["user_id"] in watered}
                for tree in state["forest"]
            ],
        }
