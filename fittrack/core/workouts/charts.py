"""
Progress chart aggregation.

Turns every entry for one exercise into a day-by-day series. The metric is
chosen once for the whole series: if any entry was timed, the chart shows
minutes per day; otherwise it shows volume (weight x reps) per day.
"""

from dataclasses import dataclass, field
from datetime import date, tzinfo
from enum import Enum
from typing import Optional

from .models import ExerciseEntry
from .streaks import to_local_day


class ChartMode(Enum):
    VOLUME = "volume"
    DURATION = "duration"


@dataclass(frozen=True)
class BreakdownItem:
    """One contribution to a day's total, for tooltips."""
    volume: float
    weight: Optional[float] = None
    reps: Optional[int] = None
    duration: Optional[float] = None


@dataclass
class DayAggregate:
    day: date
    total: float = 0.0
    breakdown: list[BreakdownItem] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.day.strftime("%b %d")


@dataclass
class ProgressSeries:
    name: str
    mode: ChartMode
    points: list[DayAggregate] = field(default_factory=list)

    @property
    def peak(self) -> float:
        return max((p.total for p in self.points), default=0.0)


def chart_mode(entries: list[ExerciseEntry]) -> ChartMode:
    if any(e.duration_minutes is not None for e in entries):
        return ChartMode.DURATION
    return ChartMode.VOLUME


def _contributions(entry: ExerciseEntry, mode: ChartMode) -> list[BreakdownItem]:
    if mode == ChartMode.DURATION:
        minutes = entry.duration_minutes or 0.0
        return [BreakdownItem(volume=minutes, duration=entry.duration_minutes)]

    return [
        BreakdownItem(volume=s.volume, weight=s.weight, reps=s.reps)
        for s in entry.sets
    ]


def build_progress_series(
    name: str,
    entries: list[ExerciseEntry],
    tz: tzinfo,
) -> ProgressSeries:
    """Group entries by local day and total each day in the series' metric."""
    relevant = [e for e in entries if e.name == name]
    mode = chart_mode(relevant)

    by_day: dict[date, DayAggregate] = {}
    for entry in relevant:
        day = to_local_day(entry.performed_at, tz)
        aggregate = by_day.setdefault(day, DayAggregate(day=day))
        for item in _contributions(entry, mode):
            aggregate.total += item.volume
            aggregate.breakdown.append(item)

    points = [by_day[day] for day in sorted(by_day)]
    return ProgressSeries(name=name, mode=mode, points=points)
