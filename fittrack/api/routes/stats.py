"""
Statistics API endpoints.

Dashboard totals and streaks, personal records, and per-day chart data
for a single exercise. Calendar days are taken in the configured
STATS_TIMEZONE.
"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from ...core.workouts.charts import ProgressSeries
from ..dependencies import CurrentUser, WorkoutTrackerDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class SummaryResponse(BaseModel):
    total_workouts: int
    categories: list[str]
    categories_count: int
    total_volume: float = Field(description="Sum of weight x reps over every set")
    recent_workouts: int = Field(description="Entries performed in the last 7 days")
    current_streak: int
    longest_streak: int


class PersonalRecordResponse(BaseModel):
    name: str
    type: str = Field(description='"weight" or "time"')
    value: float
    unit: str
    reps: Optional[int] = None
    performed_at: datetime


class BreakdownItemResponse(BaseModel):
    volume: float
    weight: Optional[float] = None
    reps: Optional[int] = None
    duration: Optional[float] = None


class ChartPointResponse(BaseModel):
    day: date
    label: str = Field(description='Short label such as "Mar 05"')
    total: float
    breakdown: list[BreakdownItemResponse]


class ProgressResponse(BaseModel):
    name: str
    mode: str = Field(description='"volume" (weight x reps) or "duration" (minutes)')
    peak: float
    points: list[ChartPointResponse]

    @classmethod
    def from_series(cls, series: ProgressSeries) -> "ProgressResponse":
        return cls(
            name=series.name,
            mode=series.mode.value,
            peak=series.peak,
            points=[
                ChartPointResponse(
                    day=point.day,
                    label=point.label,
                    total=point.total,
                    breakdown=[
                        BreakdownItemResponse(
                            volume=item.volume,
                            weight=item.weight,
                            reps=item.reps,
                            duration=item.duration,
                        )
                        for item in point.breakdown
                    ],
                )
                for point in series.points
            ],
        )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/summary",
    response_model=SummaryResponse,
    summary="Dashboard totals and streaks",
)
async def get_summary(user: CurrentUser, tracker: WorkoutTrackerDep) -> SummaryResponse:
    summary = tracker.summary(user.id)

    return SummaryResponse(
        total_workouts=summary.total_workouts,
        categories=summary.categories,
        categories_count=summary.categories_count,
        total_volume=summary.total_volume,
        recent_workouts=summary.recent_workouts,
        current_streak=summary.current_streak,
        longest_streak=summary.longest_streak,
    )


@router.get(
    "/records",
    response_model=list[PersonalRecordResponse],
    summary="Best result per exercise",
    description="Heaviest set per exercise, or longest duration where nothing was weighed.",
)
async def get_records(user: CurrentUser, tracker: WorkoutTrackerDep) -> list[PersonalRecordResponse]:
    return [
        PersonalRecordResponse(
            name=record.name,
            type=record.dimension.value,
            value=record.value,
            unit=record.unit,
            reps=record.reps,
            performed_at=record.performed_at,
        )
        for record in tracker.personal_records(user.id)
    ]


@router.get(
    "/progress",
    response_model=ProgressResponse,
    summary="Chart data for one exercise",
)
async def get_progress(
    user: CurrentUser,
    tracker: WorkoutTrackerDep,
    name: str = Query(min_length=1),
) -> ProgressResponse:
    return ProgressResponse.from_series(tracker.progress(user.id, name))
