"""
Side-by-side comparison of one exercise on two dates.

For each date we take the most recently performed entry of that exercise on
that calendar day. Either side may be missing; it then reports zeros rather
than failing, so the client can still show the side that exists.
"""

from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Iterable, Optional

from .models import ExerciseEntry
from .streaks import to_local_day


@dataclass(frozen=True)
class EntryStats:
    found: bool = False
    set_count: int = 0
    total_reps: int = 0
    max_weight: float = 0.0
    total_volume: float = 0.0

    @classmethod
    def from_entry(cls, entry: Optional[ExerciseEntry]) -> "EntryStats":
        if entry is None:
            return cls()
        return cls(
            found=True,
            set_count=entry.set_count,
            total_reps=entry.total_reps,
            max_weight=entry.max_weight or 0.0,
            total_volume=entry.total_volume,
        )


@dataclass(frozen=True)
class StatsDelta:
    set_count: int
    total_reps: int
    max_weight: float
    total_volume: float


@dataclass(frozen=True)
class EntryComparison:
    name: str
    first: Optional[ExerciseEntry]
    second: Optional[ExerciseEntry]
    first_stats: EntryStats
    second_stats: EntryStats

    @property
    def delta(self) -> StatsDelta:
        """Second minus first."""
        return StatsDelta(
            set_count=self.second_stats.set_count - self.first_stats.set_count,
            total_reps=self.second_stats.total_reps - self.first_stats.total_reps,
            max_weight=self.second_stats.max_weight - self.first_stats.max_weight,
            total_volume=self.second_stats.total_volume - self.first_stats.total_volume,
        )


def select_entry_for_day(
    entries: Iterable[ExerciseEntry],
    day: date,
    tz: tzinfo,
) -> Optional[ExerciseEntry]:
    """Latest entry performed on `day` (local), or None."""
    same_day = [e for e in entries if to_local_day(e.performed_at, tz) == day]
    if not same_day:
        return None
    return max(same_day, key=lambda e: e.performed_at)


def compare_entries(
    name: str,
    first: Optional[ExerciseEntry],
    second: Optional[ExerciseEntry],
) -> EntryComparison:
    return EntryComparison(
        name=name,
        first=first,
        second=second,
        first_stats=EntryStats.from_entry(first),
        second_stats=EntryStats.from_entry(second),
    )
