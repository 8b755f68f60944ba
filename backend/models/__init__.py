# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.user import User
from models.morning_entry import MorningEntry
from models.evening_entry import EveningEntry
from models.watering_event import WateringEvent
from models.cheer import Cheer
from models.coaching_note import CoachingNote
from models.goal import Goal

__all__ = [
    "User",
    "MorningEntry",
    "EveningEntry",
    "WateringEvent",
    "Cheer",
    "CoachingNote",
    "Goal",
]
