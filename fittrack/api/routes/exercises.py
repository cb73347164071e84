"""
Exercise logging API endpoints.

Handles the exercise log:
1. Log a workout (new entry, or extra sets for today's entry)
2. List, filter and look up entries
3. Compare an exercise between two days
4. Edit or delete an entry

Every route works on the signed-in user's entries only. Another user's
entry id behaves exactly like an unknown one.
"""

import logging
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel, Field

from ...core.workouts import ExerciseEntry, SortOrder, normalize_sets
from ...core.workouts.comparison import EntryStats
from ...core.workouts.models import utc_now
from ..dependencies import CurrentUser, WorkoutTrackerDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class SetData(BaseModel):
    """One set as sent and returned by the API."""
    reps: int
    weight: Optional[float] = None
    notes: Optional[str] = None


class ExerciseCreateRequest(BaseModel):
    """
    Request to log an exercise.

    Send either sets_data (one item per set) or the older flat form
    (sets, reps, weight) meaning `sets` identical sets. Cardio can be
    logged with just duration_minutes.
    """
    name: str = Field(max_length=200)
    category: str = Field(max_length=100)
    sets_data: Optional[list[SetData]] = None
    sets: Optional[int] = Field(None, description="Number of identical sets (flat form)")
    reps: Optional[int] = Field(None, description="Reps per set (flat form)")
    weight: Optional[float] = Field(None, description="Weight per set in kg (flat form)")
    duration_minutes: Optional[float] = None
    notes: Optional[str] = Field(None, max_length=2000)
    performed_at: Optional[datetime] = Field(None, description="Defaults to now")


class ExerciseUpdateRequest(BaseModel):
    """Partial update. Fields left out are unchanged."""
    name: Optional[str] = Field(None, max_length=200)
    category: Optional[str] = Field(None, max_length=100)
    sets_data: Optional[list[SetData]] = None
    sets: Optional[int] = None
    reps: Optional[int] = None
    weight: Optional[float] = None
    duration_minutes: Optional[float] = None
    notes: Optional[str] = Field(None, max_length=2000)
    performed_at: Optional[datetime] = None


class ExerciseResponse(BaseModel):
    id: str
    name: str
    category: str
    sets_data: list[SetData]
    set_count: int
    total_reps: int
    total_volume: float
    max_weight: Optional[float] = None
    duration_minutes: Optional[float] = None
    notes: Optional[str] = None
    performed_at: datetime
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: ExerciseEntry) -> "ExerciseResponse":
        return cls(
            id=str(entry.id),
            name=entry.name,
            category=entry.category,
            sets_data=[SetData(reps=s.reps, weight=s.weight, notes=s.notes) for s in entry.sets],
            set_count=entry.set_count,
            total_reps=entry.total_reps,
            total_volume=entry.total_volume,
            max_weight=entry.max_weight,
            duration_minutes=entry.duration_minutes,
            notes=entry.notes,
            performed_at=entry.performed_at,
            created_at=entry.created_at,
        )


class LogExerciseResponse(BaseModel):
    entry: ExerciseResponse
    is_new_pr: bool = Field(description="Whether this workout beat every earlier one")
    pr_type: Optional[str] = Field(None, description='"weight" or "time"')
    is_new_entry: bool = Field(description="False when the sets were added to today's entry")


class EntryStatsResponse(BaseModel):
    day: date
    found: bool
    set_count: int
    total_reps: int
    max_weight: float
    total_volume: float

    @classmethod
    def from_stats(cls, day: date, stats: EntryStats) -> "EntryStatsResponse":
        return cls(
            day=day,
            found=stats.found,
            set_count=stats.set_count,
            total_reps=stats.total_reps,
            max_weight=stats.max_weight,
            total_volume=stats.total_volume,
        )


class StatsDeltaResponse(BaseModel):
    set_count: int
    total_reps: int
    max_weight: float
    total_volume: float


class ComparisonResponse(BaseModel):
    name: str
    first: EntryStatsResponse
    second: EntryStatsResponse
    delta: StatsDeltaResponse


def _sets_from(request: BaseModel) -> list:
    sets_data = [s.model_dump() for s in request.sets_data] if request.sets_data else None
    return normalize_sets(
        sets_data=sets_data,
        sets=request.sets,
        reps=request.reps,
        weight=request.weight,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=LogExerciseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log an exercise",
    description=(
        "Record a workout. If the same exercise was already logged that day, "
        "the sets are added to that entry. Reports whether it is a new personal record."
    ),
)
async def log_exercise(
    request: ExerciseCreateRequest,
    user: CurrentUser,
    tracker: WorkoutTrackerDep,
) -> LogExerciseResponse:
    draft = ExerciseEntry(
        user_id=user.id,
        name=request.name,
        category=request.category,
        sets=_sets_from(request),
        duration_minutes=request.duration_minutes,
        notes=request.notes,
        performed_at=request.performed_at or utc_now(),
    )

    result = tracker.log_exercise(draft)

    return LogExerciseResponse(
        entry=ExerciseResponse.from_entry(result.entry),
        is_new_pr=result.is_new_pr,
        pr_type=result.dimension.value if result.dimension else None,
        is_new_entry=result.is_new_entry,
    )


@router.get(
    "",
    response_model=list[ExerciseResponse],
    summary="List my exercises",
    description="All logged entries, most recent first.",
)
async def list_exercises(user: CurrentUser, tracker: WorkoutTrackerDep) -> list[ExerciseResponse]:
    return [ExerciseResponse.from_entry(e) for e in tracker.list_entries(user.id)]


@router.get(
    "/filtered",
    response_model=list[ExerciseResponse],
    summary="Filter and sort my exercises",
)
async def list_filtered(
    user: CurrentUser,
    tracker: WorkoutTrackerDep,
    category: Optional[str] = None,
    start_date: Optional[date] = Query(None, description="First calendar day included"),
    end_date: Optional[date] = Query(None, description="Last calendar day included (the whole day)"),
    sort_by: SortOrder = Query(SortOrder.DATE, description="date, weight (total volume), sets or reps"),
) -> list[ExerciseResponse]:
    entries = tracker.list_filtered(
        user.id,
        category=category,
        start=start_date,
        end=end_date,
        sort_by=sort_by,
    )
    return [ExerciseResponse.from_entry(e) for e in entries]


@router.get(
    "/names",
    response_model=list[str],
    summary="Distinct exercise names I have logged",
)
async def list_names(user: CurrentUser, tracker: WorkoutTrackerDep) -> list[str]:
    return tracker.list_names(user.id)


@router.get(
    "/by-date/{day}",
    response_model=list[ExerciseResponse],
    summary="Exercises on a calendar day",
)
async def list_on_date(day: date, user: CurrentUser, tracker: WorkoutTrackerDep) -> list[ExerciseResponse]:
    return [ExerciseResponse.from_entry(e) for e in tracker.list_on_date(user.id, day)]


@router.get(
    "/by-name",
    response_model=list[ExerciseResponse],
    summary="History of one exercise",
    description="Every entry with this name, oldest first.",
)
async def list_by_name(
    user: CurrentUser,
    tracker: WorkoutTrackerDep,
    name: str = Query(min_length=1),
) -> list[ExerciseResponse]:
    return [ExerciseResponse.from_entry(e) for e in tracker.list_by_name(user.id, name)]


@router.get(
    "/compare",
    response_model=ComparisonResponse,
    summary="Compare an exercise between two days",
    description="Uses the latest entry on each day. A day without one reports zeros.",
)
async def compare(
    user: CurrentUser,
    tracker: WorkoutTrackerDep,
    name: str = Query(min_length=1),
    first_date: date = Query(),
    second_date: date = Query(),
) -> ComparisonResponse:
    comparison = tracker.compare(user.id, name, first_date, second_date)
    delta = comparison.delta

    return ComparisonResponse(
        name=comparison.name,
        first=EntryStatsResponse.from_stats(first_date, comparison.first_stats),
        second=EntryStatsResponse.from_stats(second_date, comparison.second_stats),
        delta=StatsDeltaResponse(
            set_count=delta.set_count,
            total_reps=delta.total_reps,
            max_weight=delta.max_weight,
            total_volume=delta.total_volume,
        ),
    )


@router.get(
    "/{entry_id}",
    response_model=ExerciseResponse,
    summary="Get one exercise entry",
)
async def get_exercise(entry_id: UUID, user: CurrentUser, tracker: WorkoutTrackerDep) -> ExerciseResponse:
    return ExerciseResponse.from_entry(tracker.get_entry(user.id, entry_id))


@router.patch(
    "/{entry_id}",
    response_model=ExerciseResponse,
    summary="Edit an exercise entry",
)
async def update_exercise(
    entry_id: UUID,
    request: ExerciseUpdateRequest,
    user: CurrentUser,
    tracker: WorkoutTrackerDep,
) -> ExerciseResponse:
    provided = request.model_dump(exclude_unset=True)
    changes = {
        field: provided[field]
        for field in ("name", "category", "duration_minutes", "notes", "performed_at")
        if field in provided
    }

    if {"sets_data", "sets", "reps", "weight"} & provided.keys():
        if not request.sets_data and request.reps is None:
            raise ValueError("Provide sets_data, or reps with the flat form, to change sets")
        changes["sets"] = _sets_from(request)

    updated = tracker.update_entry(user.id, entry_id, changes)
    return ExerciseResponse.from_entry(updated)


@router.delete(
    "/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an exercise entry",
)
async def delete_exercise(entry_id: UUID, user: CurrentUser, tracker: WorkoutTrackerDep) -> Response:
    tracker.delete_entry(user.id, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
