"""
Personal-record detection.

A record is tracked along two independent dimensions: the heaviest set
(for strength work) and the longest duration (for time-based work).
Weight takes priority: an entry that carries any weighted set is judged
on weight alone, even if it also has a duration.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .models import ExerciseEntry, RecordDimension


@dataclass(frozen=True)
class PersonalRecordCheck:
    """Outcome of checking one new entry against its history."""
    is_new_pr: bool
    dimension: Optional[RecordDimension] = None


@dataclass(frozen=True)
class PersonalRecord:
    """The best-ever value for one exercise name."""
    name: str
    dimension: RecordDimension
    value: float
    reps: Optional[int]
    performed_at: datetime

    @property
    def unit(self) -> str:
        return "kg" if self.dimension == RecordDimension.WEIGHT else "min"


def _best(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    return max(present) if present else None


def detect_personal_record(
    history: Iterable[ExerciseEntry],
    entry: ExerciseEntry,
) -> PersonalRecordCheck:
    """
    Decide whether `entry` sets a new record for its exercise name.

    `history` may contain entries for other names and may include `entry`
    itself; both are ignored. A record needs to strictly beat the best
    prior value, or be the first value in that dimension.
    """
    prior = [
        e for e in history
        if e.name == entry.name and e.id != entry.id
    ]

    weight = entry.max_weight
    if weight is not None:
        best_prior = _best(e.max_weight for e in prior)
        return PersonalRecordCheck(
            is_new_pr=best_prior is None or weight > best_prior,
            dimension=RecordDimension.WEIGHT,
        )

    if entry.duration_minutes is not None:
        best_prior = _best(e.duration_minutes for e in prior)
        return PersonalRecordCheck(
            is_new_pr=best_prior is None or entry.duration_minutes > best_prior,
            dimension=RecordDimension.TIME,
        )

    # Nothing measurable (e.g. bodyweight reps); only a first entry counts.
    return PersonalRecordCheck(is_new_pr=not prior, dimension=None)


def best_records(entries: Iterable[ExerciseEntry]) -> list[PersonalRecord]:
    """
    Best record per exercise name, sorted by name.

    Weight records are preferred; names with no weighted set fall back to
    their longest duration, and names with neither are left out.
    """
    by_name: dict[str, list[ExerciseEntry]] = {}
    for entry in entries:
        by_name.setdefault(entry.name, []).append(entry)

    records = []
    for name, group in by_name.items():
        weighted = [e for e in group if e.max_weight is not None]
        if weighted:
            top = max(weighted, key=lambda e: e.max_weight)
            heaviest = top.heaviest_set
            records.append(PersonalRecord(
                name=name,
                dimension=RecordDimension.WEIGHT,
                value=top.max_weight,
                reps=heaviest.reps if heaviest else None,
                performed_at=top.performed_at,
            ))
            continue

        timed = [e for e in group if e.duration_minutes is not None]
        if timed:
            top = max(timed, key=lambda e: e.duration_minutes)
            records.append(PersonalRecord(
                name=name,
                dimension=RecordDimension.TIME,
                value=top.duration_minutes,
                reps=None,
                performed_at=top.performed_at,
            ))

    return sorted(records, key=lambda r: r.name.lower())
