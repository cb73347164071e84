"""
Workout template API endpoints.

Users build their own templates (free tier: a handful, paid tiers: no
cap) and can browse the pre-built ones. Logging a template writes one
exercise entry per planned exercise.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from ...core.workouts import TemplateExercise, WorkoutTemplate
from ..dependencies import ApiKey, CurrentUser, WorkoutTrackerDep
from .exercises import ExerciseResponse

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class TemplateExerciseData(BaseModel):
    name: str
    category: str
    target_sets: int
    target_reps: str = Field(description='A rep count or range such as "8-10"')
    rest_seconds: int = 90
    target_weight: Optional[float] = None
    notes: Optional[str] = None
    order: int = 0

    def to_domain(self) -> TemplateExercise:
        return TemplateExercise(**self.model_dump())


class TemplateCreateRequest(BaseModel):
    name: str = Field(max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    category: str
    difficulty: str = "Beginner"
    estimated_duration: int = Field(description="Minutes")
    exercises: list[TemplateExerciseData]


class TemplateUpdateRequest(BaseModel):
    """Partial update. Fields left out are unchanged."""
    name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = None
    difficulty: Optional[str] = None
    estimated_duration: Optional[int] = None
    exercises: Optional[list[TemplateExerciseData]] = None


class TemplateResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    category: str
    difficulty: str
    estimated_duration: int
    exercises: list[TemplateExerciseData]
    is_prebuilt: bool
    created_by: Optional[str] = None
    last_used: Optional[datetime] = None
    usage_count: int
    created_at: datetime

    @classmethod
    def from_template(cls, template: WorkoutTemplate) -> "TemplateResponse":
        return cls(
            id=str(template.id),
            name=template.name,
            description=template.description,
            category=template.category,
            difficulty=template.difficulty,
            estimated_duration=template.estimated_duration,
            exercises=[
                TemplateExerciseData(
                    name=e.name,
                    category=e.category,
                    target_sets=e.target_sets,
                    target_reps=e.target_reps,
                    rest_seconds=e.rest_seconds,
                    target_weight=e.target_weight,
                    notes=e.notes,
                    order=e.order,
                )
                for e in template.exercises
            ],
            is_prebuilt=template.is_prebuilt,
            created_by=template.created_by,
            last_used=template.last_used,
            usage_count=template.usage_count,
            created_at=template.created_at,
        )


class TemplateCountResponse(BaseModel):
    count: int


class TemplateStatsResponse(BaseModel):
    total_templates: int
    total_usage: int


class TemplateLogResponse(BaseModel):
    message: str
    template: TemplateResponse
    entries: list[ExerciseResponse]


class SeedResponse(BaseModel):
    added: int


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=list[TemplateResponse],
    summary="List my templates",
)
async def list_templates(
    user: CurrentUser,
    tracker: WorkoutTrackerDep,
    category: Optional[str] = None,
) -> list[TemplateResponse]:
    return [TemplateResponse.from_template(t) for t in tracker.list_templates(user.id, category)]


@router.get(
    "/prebuilt",
    response_model=list[TemplateResponse],
    summary="List pre-built templates",
)
async def list_prebuilt(user: CurrentUser, tracker: WorkoutTrackerDep) -> list[TemplateResponse]:
    return [TemplateResponse.from_template(t) for t in tracker.list_prebuilt_templates()]


@router.post(
    "/prebuilt/seed",
    response_model=SeedResponse,
    summary="Seed the pre-built templates",
    description="Inserts curated templates whose names are not present yet. Safe to repeat.",
)
async def seed_prebuilt(api_key: ApiKey, tracker: WorkoutTrackerDep) -> SeedResponse:
    return SeedResponse(added=tracker.seed_prebuilt_templates())


@router.get(
    "/count",
    response_model=TemplateCountResponse,
    summary="How many templates I own",
)
async def count_templates(user: CurrentUser, tracker: WorkoutTrackerDep) -> TemplateCountResponse:
    return TemplateCountResponse(count=tracker.template_count(user.id))


@router.get(
    "/stats",
    response_model=TemplateStatsResponse,
    summary="Template totals",
)
async def template_stats(user: CurrentUser, tracker: WorkoutTrackerDep) -> TemplateStatsResponse:
    stats = tracker.template_stats(user.id)
    return TemplateStatsResponse(
        total_templates=stats.total_templates,
        total_usage=stats.total_usage,
    )


@router.post(
    "",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a template",
    description="Free accounts can own a limited number of templates.",
)
async def create_template(
    request: TemplateCreateRequest,
    user: CurrentUser,
    tracker: WorkoutTrackerDep,
) -> TemplateResponse:
    template = WorkoutTemplate(
        name=request.name,
        description=request.description,
        category=request.category,
        difficulty=request.difficulty,
        estimated_duration=request.estimated_duration,
        exercises=[e.to_domain() for e in request.exercises],
    )
    return TemplateResponse.from_template(tracker.create_template(user, template))


@router.get(
    "/{template_id}",
    response_model=TemplateResponse,
    summary="Get a template",
)
async def get_template(template_id: UUID, user: CurrentUser, tracker: WorkoutTrackerDep) -> TemplateResponse:
    return TemplateResponse.from_template(tracker.get_template(user.id, template_id))


@router.patch(
    "/{template_id}",
    response_model=TemplateResponse,
    summary="Edit one of my templates",
)
async def update_template(
    template_id: UUID,
    request: TemplateUpdateRequest,
    user: CurrentUser,
    tracker: WorkoutTrackerDep,
) -> TemplateResponse:
    changes = request.model_dump(exclude_unset=True)
    if "exercises" in changes:
        changes["exercises"] = [e.to_domain() for e in request.exercises or []]

    updated = tracker.update_template(user.id, template_id, changes)
    return TemplateResponse.from_template(updated)


@router.delete(
    "/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete one of my templates",
)
async def delete_template(template_id: UUID, user: CurrentUser, tracker: WorkoutTrackerDep) -> Response:
    tracker.delete_template(user.id, template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{template_id}/usage",
    response_model=TemplateResponse,
    summary="Record that I used a template",
)
async def track_usage(template_id: UUID, user: CurrentUser, tracker: WorkoutTrackerDep) -> TemplateResponse:
    return TemplateResponse.from_template(tracker.track_template_usage(user.id, template_id))


@router.post(
    "/{template_id}/log",
    response_model=TemplateLogResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log a whole template as today's workout",
)
async def log_template(template_id: UUID, user: CurrentUser, tracker: WorkoutTrackerDep) -> TemplateLogResponse:
    result = tracker.log_template(user.id, template_id)

    return TemplateLogResponse(
        message=result.message,
        template=TemplateResponse.from_template(result.template),
        entries=[ExerciseResponse.from_entry(e) for e in result.entries],
    )
