"""
Subscription API endpoints.

No money moves here. The payment provider handles checkout and reports
status changes to the webhook; these endpoints record tier changes and
tell the frontend which features the user has.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ...config.settings import Settings
from ...core.workouts import SubscriptionStatus, SubscriptionTier, User, UserNotFoundError
from ...core.workouts.models import utc_now
from ...core.workouts.subscriptions import (
    apply_status_update,
    cancel,
    feature_limits,
    has_premium_access,
    start_trial,
    tier_breakdown,
    upgrade,
)
from ..dependencies import AdminUser, ApiKey, CurrentUser, SettingsDep, UserRepositoryDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class FeatureLimitsResponse(BaseModel):
    """None means unlimited."""
    exercises_per_day: Optional[int] = None
    templates_count: Optional[int] = None
    export_data: bool
    advanced_stats: bool


class SubscriptionResponse(BaseModel):
    tier: str
    status: str
    has_premium_access: bool
    subscription_start: Optional[datetime] = None
    subscription_end: Optional[datetime] = None
    trial_end: Optional[datetime] = None
    limits: FeatureLimitsResponse


class UpgradeRequest(BaseModel):
    tier: SubscriptionTier = Field(description="premium or pro")
    customer_id: Optional[str] = None
    subscription_id: Optional[str] = None
    subscription_end: Optional[datetime] = None


class TrialRequest(BaseModel):
    days: Optional[int] = Field(None, description="Defaults to the configured trial length")


class WebhookRequest(BaseModel):
    """Status change reported by the payment provider."""
    customer_id: str = Field(min_length=1)
    status: SubscriptionStatus
    subscription_end: Optional[datetime] = None


class TierBreakdownResponse(BaseModel):
    total: int
    free: int
    premium: int
    pro: int
    trial: int
    active: int


def _subscription_response(user: User, settings: Settings) -> SubscriptionResponse:
    limits = feature_limits(user.subscription_tier, settings.free_template_limit)
    grace = settings.subscription_grace_days

    return SubscriptionResponse(
        tier=user.subscription_tier.value,
        status=user.subscription_status.value,
        has_premium_access=has_premium_access(user, utc_now(), timedelta(days=grace)),
        subscription_start=user.subscription_start,
        subscription_end=user.subscription_end,
        trial_end=user.trial_end,
        limits=FeatureLimitsResponse(
            exercises_per_day=limits.exercises_per_day,
            templates_count=limits.templates_count,
            export_data=limits.export_data,
            advanced_stats=limits.advanced_stats,
        ),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/me",
    response_model=SubscriptionResponse,
    summary="My subscription and feature limits",
)
async def get_my_subscription(user: CurrentUser, settings: SettingsDep) -> SubscriptionResponse:
    return _subscription_response(user, settings)


@router.post(
    "/upgrade",
    response_model=SubscriptionResponse,
    summary="Move to a paid tier",
)
async def upgrade_subscription(
    request: UpgradeRequest,
    user: CurrentUser,
    users: UserRepositoryDep,
    settings: SettingsDep,
) -> SubscriptionResponse:
    upgrade(
        user,
        request.tier,
        customer_id=request.customer_id,
        subscription_id=request.subscription_id,
        subscription_end=request.subscription_end,
    )
    users.save(user)

    logger.info(
        "Subscription upgraded",
        extra={"user_id": user.id, "tier": user.subscription_tier.value}
    )
    return _subscription_response(user, settings)


@router.post(
    "/trial",
    response_model=SubscriptionResponse,
    summary="Start a premium trial",
    description="Each account can start one trial.",
)
async def start_subscription_trial(
    user: CurrentUser,
    users: UserRepositoryDep,
    settings: SettingsDep,
    request: Optional[TrialRequest] = None,
) -> SubscriptionResponse:
    days = request.days if request and request.days is not None else settings.default_trial_days
    trial_end = start_trial(user, days)
    users.save(user)

    logger.info(
        "Trial started",
        extra={"user_id": user.id, "trial_end": trial_end.isoformat()}
    )
    return _subscription_response(user, settings)


@router.post(
    "/cancel",
    response_model=SubscriptionResponse,
    summary="Cancel my subscription",
)
async def cancel_subscription(
    user: CurrentUser,
    users: UserRepositoryDep,
    settings: SettingsDep,
) -> SubscriptionResponse:
    cancel(user)
    users.save(user)

    logger.info("Subscription cancelled", extra={"user_id": user.id})
    return _subscription_response(user, settings)


@router.post(
    "/webhook",
    response_model=SubscriptionResponse,
    summary="Payment provider status webhook",
    description="Expired or cancelled subscriptions drop the user to the free tier.",
)
async def subscription_webhook(
    request: WebhookRequest,
    api_key: ApiKey,
    users: UserRepositoryDep,
    settings: SettingsDep,
) -> SubscriptionResponse:
    user = users.get_by_customer_id(request.customer_id)
    if user is None:
        logger.warning(
            "Webhook for unknown customer",
            extra={"customer_id": request.customer_id}
        )
        raise UserNotFoundError("No user for this customer id")

    apply_status_update(user, request.status, request.subscription_end)
    users.save(user)

    logger.info(
        "Subscription status updated",
        extra={
            "user_id": user.id,
            "status": request.status.value,
            "tier": user.subscription_tier.value,
        }
    )
    return _subscription_response(user, settings)


@router.get(
    "/stats",
    response_model=TierBreakdownResponse,
    summary="Users per tier (admin)",
)
async def subscription_stats(admin: AdminUser, users: UserRepositoryDep) -> TierBreakdownResponse:
    return TierBreakdownResponse(**tier_breakdown(users.list_all()))
