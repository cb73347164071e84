"""
Exercise library API endpoints.

The library is shared content: any signed-in user can browse it, and
seeding is an operator task guarded only by the API key.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from ...core.workouts.catalog import library_items
from ...core.workouts.library import plan_library_query
from ...core.workouts.models import LibraryItem
from ..dependencies import ApiKey, CurrentUser, LibraryRepositoryDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class LibraryItemResponse(BaseModel):
    id: str
    name: str
    category: str
    primary_muscle: str
    difficulty: str
    equipment: str
    description: str
    tips: Optional[str] = None
    common_mistakes: Optional[str] = None
    media_url: Optional[str] = None
    popularity: Optional[int] = None

    @classmethod
    def from_item(cls, item: LibraryItem) -> "LibraryItemResponse":
        return cls(
            id=str(item.id),
            name=item.name,
            category=item.category,
            primary_muscle=item.primary_muscle,
            difficulty=item.difficulty,
            equipment=item.equipment,
            description=item.description,
            tips=item.tips,
            common_mistakes=item.common_mistakes,
            media_url=item.media_url,
            popularity=item.popularity,
        )


class SeedResponse(BaseModel):
    added: int


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=list[LibraryItemResponse],
    summary="Browse the exercise library",
    description=(
        "One filter applies per request: search (name prefix) wins over category, "
        "then difficulty, then equipment. Without filters the library is listed "
        "alphabetically."
    ),
)
async def list_library(
    user: CurrentUser,
    library: LibraryRepositoryDep,
    settings: SettingsDep,
    search: Optional[str] = None,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    equipment: Optional[str] = None,
    limit: Optional[int] = Query(None, description="Clamped to 1..200"),
) -> list[LibraryItemResponse]:
    query = plan_library_query(
        search=search,
        category=category,
        difficulty=difficulty,
        equipment=equipment,
        limit=limit,
        default_limit=settings.library_default_limit,
        max_limit=settings.library_max_limit,
    )

    logger.debug(
        "Library query planned",
        extra={"filter": query.filter.value, "limit": query.limit}
    )
    return [LibraryItemResponse.from_item(item) for item in library.search(query)]


@router.post(
    "/seed",
    response_model=SeedResponse,
    summary="Seed the curated exercise library",
    description="Inserts catalog items whose names are not present yet. Safe to repeat.",
)
async def seed_library(api_key: ApiKey, library: LibraryRepositoryDep) -> SeedResponse:
    return SeedResponse(added=library.seed(library_items()))
