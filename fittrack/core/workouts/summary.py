"""Dashboard summary over a user's whole history."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo

from .models import ExerciseEntry
from .streaks import compute_streaks

RECENT_WINDOW = timedelta(days=7)


@dataclass(frozen=True)
class HistorySummary:
    total_workouts: int = 0
    categories: list[str] = field(default_factory=list)
    total_volume: float = 0.0
    recent_workouts: int = 0
    current_streak: int = 0
    longest_streak: int = 0

    @property
    def categories_count(self) -> int:
        return len(self.categories)


def summarize_history(
    entries: list[ExerciseEntry],
    now: datetime,
    tz: tzinfo,
) -> HistorySummary:
    streaks = compute_streaks(
        (e.performed_at for e in entries),
        today=now.astimezone(tz).date(),
        tz=tz,
    )
    cutoff = now - RECENT_WINDOW

    return HistorySummary(
        total_workouts=len(entries),
        categories=sorted({e.category for e in entries}),
        total_volume=sum(e.total_volume for e in entries),
        recent_workouts=sum(1 for e in entries if e.performed_at > cutoff),
        current_streak=streaks.current_streak,
        longest_streak=streaks.longest_streak,
    )
