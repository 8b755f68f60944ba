import os
from dotenv import load_dotenv

load_dotenv()

# --- JWT Configuration ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "720"))  # 30 days

# --- Database ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/journal.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Reference clock ---
# All day/week/month keys are computed at this fixed UTC offset.
REFERENCE_UTC_OFFSET_HOURS = int(os.getenv("REFERENCE_UTC_OFFSET_HOURS", "9"))

# --- Posting windows ("HH:MM-HH:MM", open inclusive, close exclusive) ---
MORNING_WINDOW = os.getenv("MORNING_WINDOW", "06:00-09:00")
EVENING_WINDOW = os.getenv("EVENING_WINDOW", "18:00-24:00")

# --- Engagement ---
STREAK_LOOKBACK_DAYS = int(os.getenv("STREAK_LOOKBACK_DAYS", "100"))
FOREST_CACHE_TTL_SECONDS = int(os.getenv("FOREST_CACHE_TTL_SECONDS", "60"))

# Usernames matching this (case-insensitive) are left out of cohort views
COHORT_EXCLUDE_PATTERN = os.getenv("COHORT_EXCLUDE_PATTERN", "sample|test|example|demo")
