"""
clock.py — Reference clock & posting windows
Every stored timestamp is UTC. Day, week and month keys are derived by
converting to the fixed reference offset only at formatting time.
"""

import calendar
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta

from config import REFERENCE_UTC_OFFSET_HOURS, MORNING_WINDOW, EVENING_WINDOW

REFERENCE_TZ = timezone(timedelta(hours=REFERENCE_UTC_OFFSET_HOURS))
MINUTES_PER_DAY = 24 * 60

BEFORE = "before"
OPEN = "open"
AFTER = "after"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(instant: datetime) -> datetime:
    """Naive datetimes (as SQLite hands them back) are taken to be UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_reference(instant: datetime) -> datetime:
    return as_utc(instant).astimezone(REFERENCE_TZ)


def day_key(instant: datetime) -> str:
    return to_reference(instant).strftime("%Y-%m-%d")


def monthly_period_key(instant: datetime) -> str:
    return to_reference(instant).strftime("%Y-%m")


def weekly_period_key(instant: datetime) -> str:
    """ISO week key. The year is the ISO week-numbering year, so a late
    December Monday that opens week 1 reports the following year. Taking the
    calendar year of the week's Monday instead would give 2024-12-30 the key
    2024-W01, the same key as the first week of January 2024."""
    iso_year, iso_week, _ = to_reference(instant).isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def minutes_since_midnight(instant: datetime) -> int:
    local = to_reference(instant)
    return local.hour * 60 + local.minute


def start_of_reference_day(instant: datetime) -> datetime:
    local = to_reference(instant)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc)


def start_of_reference_week(instant: datetime) -> datetime:
    """Monday 00:00 of the instant's reference-timezone week, in UTC."""
    day_start = start_of_reference_day(instant)
    return day_start - timedelta(days=to_reference(instant).weekday())


def start_of_reference_month(instant: datetime) -> datetime:
    local = to_reference(instant)
    first = local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return first.astimezone(timezone.utc)


def days_in_month(instant: datetime) -> int:
    local = to_reference(instant)
    return calendar.monthrange(local.year, local.month)[1]


def day_of_month(instant: datetime) -> int:
    return to_reference(instant).day


def trailing_day_keys(instant: datetime, days: int) -> list[str]:
    """Day keys for today and the days-1 days before it, newest first."""
    return [day_key(instant - timedelta(days=i)) for i in range(days)]


def whole_days_between(earlier: datetime, later: datetime) -> int:
    """Floor of the elapsed days; an earlier value in the future counts as 0."""
    elapsed = (as_utc(later) - as_utc(earlier)).total_seconds()
    return max(0, int(elapsed // 86400))


# ----------------------------------------------------------------------
# Posting windows
# ----------------------------------------------------------------------

def _format_minute(minute: int) -> str:
    return f"{minute // 60:02d}:{minute % 60:02d}"


def parse_clock(value: str) -> int:
    """'HH:MM' → minutes since midnight. '24:00' is accepted as end of day."""
    hours, _, minutes = value.strip().partition(":")
    total = int(hours) * 60 + int(minutes or 0)
    if not 0 <= total <= MINUTES_PER_DAY or int(minutes or 0) >= 60:
        raise ValueError(f"Invalid clock time: {value!r}")
    return total


@dataclass(frozen=True)
class WindowPolicy:
    """[open_minute, close_minute) in minutes since reference midnight."""

    kind: str
    open_minute: int
    close_minute: int

    def __post_init__(self):
        if not 0 <= self.open_minute < self.close_minute <= MINUTES_PER_DAY:
            raise ValueError(
                f"Invalid {self.kind} window: {self.open_minute}-{self.close_minute}"
            )

    @classmethod
    def parse(cls, kind: str, window: str) -> "WindowPolicy":
        opens, sep, closes = window.partition("-")
        if not sep:
            raise ValueError(f"Invalid {kind} window: {window!r}")
        return cls(kind, parse_clock(opens), parse_clock(closes))

    @property
    def opens_at(self) -> str:
        return _format_minute(self.open_minute)

    @property
    def closes_at(self) -> str:
        return _format_minute(self.close_minute)

    def status_at(self, instant: datetime) -> str:
        minute = minutes_since_midnight(instant)
        if minute < self.open_minute:
            return BEFORE
        if minute < self.close_minute:
            return OPEN
        return AFTER

    def to_dict(self, instant: datetime) -> dict:
        return {
            "kind": self.kind,
            "status": self.status_at(instant),
            "opens_at": self.opens_at,
            "closes_at": self.closes_at,
        }


def load_window_policies() -> dict[str, WindowPolicy]:
    return {
        "morning": WindowPolicy.parse("morning", MORNING_WINDOW),
        "evening": WindowPolicy.parse("evening", EVENING_WINDOW),
    }


def window_status(kind: str, instant: datetime, policies: dict[str, WindowPolicy] | None = None) -> str:
    policies = policies or load_window_policies()
    return policies[kind].status_at(instant)
