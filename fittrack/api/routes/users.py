"""
User-specific API endpoints.

Reading and editing the signed-in user's profile, plus the sync hook the
frontend calls after the identity provider signs someone in.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...core.workouts import User
from ..dependencies import ApiKey, CurrentUser, UserRepositoryDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    """A user account as the frontend sees it."""
    id: str
    email: str
    clerk_user_id: Optional[str] = None
    name: str
    image_url: Optional[str] = None
    role: str
    age: Optional[int] = None
    weight: Optional[float] = None
    subscription_tier: str
    subscription_status: str
    subscription_end: Optional[datetime] = None
    trial_end: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            clerk_user_id=user.clerk_user_id,
            name=user.name,
            image_url=user.image_url,
            role=user.role.value,
            age=user.age,
            weight=user.weight,
            subscription_tier=user.subscription_tier.value,
            subscription_status=user.subscription_status.value,
            subscription_end=user.subscription_end,
            trial_end=user.trial_end,
            created_at=user.created_at,
        )


class ProfileUpdateRequest(BaseModel):
    """Profile form fields. Age and weight are left alone when omitted."""
    first_name: str = Field(max_length=100)
    last_name: str = Field("", max_length=100)
    age: Optional[int] = Field(None, description="Age in years")
    weight: Optional[float] = Field(None, description="Body weight in kg")


class ClerkSyncRequest(BaseModel):
    """Identity details pushed by the frontend after sign-in."""
    clerk_user_id: str = Field(min_length=1)
    email: str = Field(min_length=3)
    name: Optional[str] = None
    image_url: Optional[str] = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get my account",
)
async def get_me(user: CurrentUser) -> UserResponse:
    return UserResponse.from_user(user)


@router.put(
    "/me/profile",
    response_model=UserResponse,
    summary="Update my profile",
    description="Set display name and, optionally, age and body weight.",
)
async def update_profile(
    request: ProfileUpdateRequest,
    user: CurrentUser,
    users: UserRepositoryDep,
) -> UserResponse:
    user.set_profile(
        first_name=request.first_name,
        last_name=request.last_name,
        age=request.age,
        weight=request.weight,
    )
    users.save(user)

    logger.info("Profile updated", extra={"user_id": user.id})
    return UserResponse.from_user(user)


@router.post(
    "/sync",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Sync user from identity provider",
    description="Create the account on first sign-in, otherwise refresh its name and image.",
)
async def sync_user(
    request: ClerkSyncRequest,
    api_key: ApiKey,
    users: UserRepositoryDep,
) -> UserResponse:
    user = users.get_by_email(request.email)

    if user is None:
        user = User(
            email=request.email,
            clerk_user_id=request.clerk_user_id,
            name=request.name or "",
            image_url=request.image_url,
        )
        users.add(user)
        logger.info("User synced (created)", extra={"user_id": user.id})
        return UserResponse.from_user(user)

    user.clerk_user_id = request.clerk_user_id
    if request.name is not None:
        user.name = request.name
    if request.image_url is not None:
        user.image_url = request.image_url
    users.save(user)

    logger.info("User synced (updated)", extra={"user_id": user.id})
    return UserResponse.from_user(user)
