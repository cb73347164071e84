"""
Subscription tiers and the features they unlock.

There is no payment logic here. Billing happens at the payment provider,
which reports status changes through a webhook; these functions only
update the user's subscription fields and answer "may this user do X?".
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from .errors import TrialAlreadyUsedError
from .models import SubscriptionStatus, SubscriptionTier, User, ensure_aware, utc_now

PAID_TIERS = (SubscriptionTier.PREMIUM, SubscriptionTier.PRO)
DEFAULT_GRACE_PERIOD = timedelta(days=3)
DEFAULT_FREE_TEMPLATE_LIMIT = 3


@dataclass(frozen=True)
class FeatureLimits:
    """Per-tier allowances. None means unlimited."""
    exercises_per_day: Optional[int]
    templates_count: Optional[int]
    export_data: bool
    advanced_stats: bool


def template_limit(
    tier: SubscriptionTier,
    free_limit: int = DEFAULT_FREE_TEMPLATE_LIMIT,
) -> Optional[int]:
    """Custom templates a user may own; None for unlimited."""
    return free_limit if tier == SubscriptionTier.FREE else None


def feature_limits(
    tier: SubscriptionTier,
    free_template_limit: int = DEFAULT_FREE_TEMPLATE_LIMIT,
) -> FeatureLimits:
    if tier == SubscriptionTier.FREE:
        return FeatureLimits(
            exercises_per_day=5,
            templates_count=template_limit(tier, free_template_limit),
            export_data=False,
            advanced_stats=False,
        )
    if tier == SubscriptionTier.PREMIUM:
        return FeatureLimits(
            exercises_per_day=50,
            templates_count=None,
            export_data=True,
            advanced_stats=True,
        )
    return FeatureLimits(
        exercises_per_day=None,
        templates_count=None,
        export_data=True,
        advanced_stats=True,
    )


def has_premium_access(
    user: User,
    now: datetime,
    grace_period: timedelta = DEFAULT_GRACE_PERIOD,
) -> bool:
    """
    True for premium/pro users whose subscription is usable.

    Usable means active or trialing, or still inside an unexpired trial,
    or within the grace period after subscription_end (past_due users
    keep access while the provider retries the card).
    """
    if user.subscription_tier not in PAID_TIERS:
        return False

    if user.subscription_status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIAL):
        return True

    if user.trial_end is not None and ensure_aware(user.trial_end) > now:
        return True

    if user.subscription_end is not None and ensure_aware(user.subscription_end) + grace_period > now:
        return True

    return False


def upgrade(
    user: User,
    tier: SubscriptionTier,
    customer_id: Optional[str] = None,
    subscription_id: Optional[str] = None,
    subscription_end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> None:
    if tier not in PAID_TIERS:
        raise ValueError("Upgrade tier must be premium or pro")

    now = now or utc_now()
    user.subscription_tier = tier
    user.subscription_status = SubscriptionStatus.ACTIVE
    user.subscription_start = now
    user.subscription_end = ensure_aware(subscription_end) if subscription_end else None
    user.customer_id = customer_id
    user.subscription_id = subscription_id
    user.updated_at = now


def start_trial(user: User, trial_days: int, now: Optional[datetime] = None) -> datetime:
    """Put the user on a premium trial. Each user gets one."""
    if user.trial_end is not None:
        raise TrialAlreadyUsedError("Trial already used")
    if trial_days <= 0:
        raise ValueError("Trial length must be a positive number of days")

    now = now or utc_now()
    user.subscription_tier = SubscriptionTier.PREMIUM
    user.subscription_status = SubscriptionStatus.TRIAL
    user.trial_end = now + timedelta(days=trial_days)
    user.updated_at = now
    return user.trial_end


def cancel(user: User) -> None:
    user.subscription_tier = SubscriptionTier.FREE
    user.subscription_status = SubscriptionStatus.CANCELLED
    user.updated_at = utc_now()


def apply_status_update(
    user: User,
    status: SubscriptionStatus,
    subscription_end: Optional[datetime] = None,
) -> None:
    """Webhook handler: record the provider's status; lapsed plans drop to free."""
    user.subscription_status = status
    if status in (SubscriptionStatus.EXPIRED, SubscriptionStatus.CANCELLED):
        user.subscription_tier = SubscriptionTier.FREE
    if subscription_end is not None:
        user.subscription_end = ensure_aware(subscription_end)
    user.updated_at = utc_now()


def tier_breakdown(users: Iterable[User]) -> dict[str, int]:
    users = list(users)
    return {
        "total": len(users),
        "free": sum(1 for u in users if u.subscription_tier == SubscriptionTier.FREE),
        "premium": sum(1 for u in users if u.subscription_tier == SubscriptionTier.PREMIUM),
        "pro": sum(1 for u in users if u.subscription_tier == SubscriptionTier.PRO),
        "trial": sum(1 for u in users if u.subscription_status == SubscriptionStatus.TRIAL),
        "active": sum(1 for u in users if u.subscription_status == SubscriptionStatus.ACTIVE),
    }
