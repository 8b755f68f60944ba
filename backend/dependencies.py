"""
dependencies.py — Request-scoped collaborators
The clock, posting windows and forest cache are injected so tests can
override them with app.dependency_overrides.
"""

from datetime import datetime

from fastapi import Request

from services.cache_service import TTLCache
from services.clock import WindowPolicy, load_window_policies, utc_now


def get_now() -> datetime:
    return utc_now()


def get_window_policies() -> dict[str, WindowPolicy]:
    return load_window_policies()


def get_forest_cache(request: Request) -> TTLCache | None:
    return getattr(request.app.state, "forest_cache", None)
