"""
Domain models for workout tracking.

These models represent the core business concepts. They have no dependencies
on external frameworks, databases, or APIs, and can be read without
knowing how they're stored or transmitted.

A logged exercise always carries a list of per-set records. Older clients
(and older rows) describe a workout with scalar sets/reps/weight fields;
normalize_sets() converts that shape at the boundary so nothing past it has
to care.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional
from uuid import UUID, uuid4


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so comparisons never mix the two."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SubscriptionTier(Enum):
    """Paid tiers. Anything above FREE unlocks premium features."""
    FREE = "free"
    PREMIUM = "premium"
    PRO = "pro"


class SubscriptionStatus(Enum):
    """Billing state of the user's subscription."""
    ACTIVE = "active"
    TRIAL = "trial"
    PAST_DUE = "past_due"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class Role(Enum):
    ADMIN = "admin"
    USER = "user"
    MEMBER = "member"


class RecordDimension(Enum):
    """What a personal record is measured in."""
    WEIGHT = "weight"  # heaviest set
    TIME = "time"      # longest duration


# ---------------------------------------------------------------------------
# Exercise entries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SetRecord:
    """
    One performed set.

    Frozen because a set is a value: two sets of 5 reps at 100kg are
    interchangeable.
    """
    reps: int
    weight: Optional[float] = None  # None (or 0) for bodyweight work
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if self.reps <= 0:
            raise ValueError("Reps must be a positive number")
        if self.weight is not None and self.weight < 0:
            raise ValueError("Weight cannot be negative")

    @property
    def volume(self) -> float:
        return (self.weight or 0) * self.reps


def normalize_sets(
    sets_data: Optional[Iterable[Any]] = None,
    sets: Optional[int] = None,
    reps: Optional[int] = None,
    weight: Optional[float] = None,
) -> list[SetRecord]:
    """
    Collapse either input shape into a list of SetRecords.

    sets_data wins when present (items may be SetRecords or dicts).
    Otherwise the legacy scalars describe `sets` identical sets of
    `reps` at `weight`; a missing set count means one set.
    """
    if sets_data:
        records = []
        for item in sets_data:
            if isinstance(item, SetRecord):
                records.append(item)
            else:
                records.append(SetRecord(
                    reps=item["reps"],
                    weight=item.get("weight"),
                    notes=item.get("notes"),
                ))
        return records

    if reps is None:
        return []

    if sets is not None and sets <= 0:
        raise ValueError("Sets must be a positive number")

    count = sets or 1
    return [SetRecord(reps=reps, weight=weight) for _ in range(count)]


@dataclass
class ExerciseEntry:
    """
    A logged exercise, owned by exactly one user.

    performed_at is when the workout happened, which may be backdated;
    created_at is when it was written.
    """
    user_id: str
    name: str
    category: str
    sets: list[SetRecord] = field(default_factory=list)
    duration_minutes: Optional[float] = None
    notes: Optional[str] = None
    performed_at: datetime = field(default_factory=utc_now)
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.name = (self.name or "").strip()
        self.category = (self.category or "").strip()
        if not self.user_id:
            raise ValueError("Exercise entry must belong to a user")
        if not self.name:
            raise ValueError("Exercise name is required")
        if not self.category:
            raise ValueError("Exercise category is required")
        if self.duration_minutes is not None and self.duration_minutes <= 0:
            raise ValueError("Duration must be a positive number of minutes")
        if not self.sets and self.duration_minutes is None:
            raise ValueError("Log at least one set with positive reps, or a duration")
        if self.performed_at is None:
            raise ValueError("Performed-at time is required")
        self.performed_at = ensure_aware(self.performed_at)
        self.created_at = ensure_aware(self.created_at)

    @property
    def set_count(self) -> int:
        return len(self.sets)

    @property
    def total_reps(self) -> int:
        return sum(s.reps for s in self.sets)

    @property
    def total_volume(self) -> float:
        return sum(s.volume for s in self.sets)

    @property
    def max_weight(self) -> Optional[float]:
        """Heaviest set, ignoring bodyweight (missing or zero) sets."""
        weights = [s.weight for s in self.sets if s.weight]
        return max(weights) if weights else None

    @property
    def heaviest_set(self) -> Optional[SetRecord]:
        weighted = [s for s in self.sets if s.weight]
        if not weighted:
            return None
        return max(weighted, key=lambda s: s.weight)

    def add_sets(self, new_sets: list[SetRecord], notes: Optional[str] = None) -> None:
        """Append sets logged later the same day, joining notes line by line."""
        self.sets = [*self.sets, *new_sets]
        if notes:
            self.notes = f"{self.notes}\n{notes}" if self.notes else notes


# ---------------------------------------------------------------------------
# Exercise library
# ---------------------------------------------------------------------------

@dataclass
class LibraryItem:
    """A curated catalog entry. Shared by everyone, not user-owned."""
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
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Library item name cannot be empty")

    @property
    def name_lower(self) -> str:
        return self.name.strip().lower()


# ---------------------------------------------------------------------------
# Workout templates
# ---------------------------------------------------------------------------

_LEADING_INT = re.compile(r"\s*(\d+)")


@dataclass
class TemplateExercise:
    """A planned exercise inside a template."""
    name: str
    category: str
    target_sets: int
    target_reps: str  # "8-10" or "8"
    rest_seconds: int
    target_weight: Optional[float] = None
    notes: Optional[str] = None
    order: int = 0

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Template exercise name is required")
        if self.target_sets <= 0:
            raise ValueError("Target sets must be a positive number")
        if not str(self.target_reps).strip():
            raise ValueError("Target reps are required")
        if self.rest_seconds < 0:
            raise ValueError("Rest time cannot be negative")
        if self.target_weight is not None and self.target_weight < 0:
            raise ValueError("Target weight cannot be negative")

    @property
    def planned_reps(self) -> int:
        """Lower bound of the rep range; 1 if it can't be read."""
        match = _LEADING_INT.match(str(self.target_reps))
        reps = int(match.group(1)) if match else 0
        return reps or 1


@dataclass
class WorkoutTemplate:
    """
    A named, ordered plan of exercises.

    Pre-built templates have no creator and are read-only for everyone.
    """
    name: str
    category: str
    difficulty: str
    estimated_duration: int  # minutes
    exercises: list[TemplateExercise] = field(default_factory=list)
    description: Optional[str] = None
    is_prebuilt: bool = False
    created_by: Optional[str] = None
    last_used: Optional[datetime] = None
    usage_count: int = 0
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValueError("Template name is required")
        if not (self.category or "").strip():
            raise ValueError("Template category is required")
        if not (self.difficulty or "").strip():
            raise ValueError("Template difficulty is required")
        if self.estimated_duration is None or self.estimated_duration <= 0:
            raise ValueError("Estimated duration must be a positive number of minutes")
        if not self.exercises:
            raise ValueError("Template needs at least one exercise")
        self.exercises = sorted(self.exercises, key=lambda e: e.order)

    def is_owned_by(self, user_id: str) -> bool:
        return not self.is_prebuilt and self.created_by == user_id

    def is_visible_to(self, user_id: str) -> bool:
        return self.is_prebuilt or self.created_by == user_id

    def record_usage(self, when: datetime) -> None:
        self.usage_count += 1
        self.last_used = when


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@dataclass
class User:
    """
    An account, keyed by email.

    Identity itself lives with the auth provider; clerk_user_id links
    the two.
    """
    email: str
    clerk_user_id: Optional[str] = None
    name: str = ""
    image_url: Optional[str] = None
    role: Role = Role.USER
    age: Optional[int] = None
    weight: Optional[float] = None
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    subscription_status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    subscription_start: Optional[datetime] = None
    subscription_end: Optional[datetime] = None
    trial_end: Optional[datetime] = None
    customer_id: Optional[str] = None
    subscription_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.email = (self.email or "").strip().lower()
        if not self.email:
            raise ValueError("User email is required")

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def set_profile(
        self,
        first_name: str,
        last_name: str,
        age: Optional[int] = None,
        weight: Optional[float] = None,
    ) -> None:
        """Update name and, when given, age and body weight."""
        if age is not None and age <= 0:
            raise ValueError("Age must be a positive number")
        if weight is not None and weight <= 0:
            raise ValueError("Weight must be a positive number")

        self.name = f"{first_name} {last_name}".strip()
        if age is not None:
            self.age = age
        if weight is not None:
            self.weight = weight
        self.updated_at = utc_now()
