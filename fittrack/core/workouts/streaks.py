"""
Workout streaks.

A streak is a run of consecutive calendar days with at least one logged
exercise. Days are taken in a single configured timezone (STATS_TIMEZONE),
so a workout at 23:30 local time counts for that local day even though it
is already tomorrow in UTC.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable

from .models import ensure_aware


@dataclass(frozen=True)
class StreakSummary:
    current_streak: int = 0
    longest_streak: int = 0


def to_local_day(moment: datetime, tz: tzinfo) -> date:
    """Calendar day of `moment` in `tz`."""
    return ensure_aware(moment).astimezone(tz).date()


def workout_days(timestamps: Iterable[datetime], tz: tzinfo) -> set[date]:
    """Distinct local days that have at least one workout."""
    return {to_local_day(ts, tz) for ts in timestamps}


def longest_run(days: Iterable[date]) -> int:
    """Length of the longest block of consecutive days."""
    longest = 0
    run = 0
    previous = None
    for day in sorted(set(days)):
        if previous is not None and day - previous == timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day
    return longest


def current_run(days: set[date], today: date) -> int:
    """
    Consecutive days ending today, or ending yesterday if nothing has
    been logged yet today. A streak isn't broken until a full day is missed.
    """
    cursor = today if today in days else today - timedelta(days=1)
    count = 0
    while cursor in days:
        count += 1
        cursor -= timedelta(days=1)
    return count


def compute_streaks(
    timestamps: Iterable[datetime],
    today: date,
    tz: tzinfo,
) -> StreakSummary:
    """Current and longest streak for a user's performed_at timestamps."""
    days = workout_days(timestamps, tz)
    if not days:
        return StreakSummary()

    return StreakSummary(
        current_streak=current_run(days, today),
        longest_streak=longest_run(days),
    )
