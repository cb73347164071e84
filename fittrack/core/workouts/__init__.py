"""
Workout tracking logic.

Contains the domain models, the aggregation routines (records, streaks,
charts, comparisons), subscription and library rules, and the tracker
service that ties them to storage.
"""

from .errors import (
    AdminRequiredError,
    EntryNotFoundError,
    FitTrackError,
    TemplateLimitError,
    TemplateNotFoundError,
    TemplatePermissionError,
    TrialAlreadyUsedError,
    UserNotFoundError,
)
from .models import (
    ExerciseEntry,
    LibraryItem,
    RecordDimension,
    Role,
    SetRecord,
    SubscriptionStatus,
    SubscriptionTier,
    TemplateExercise,
    User,
    WorkoutTemplate,
    normalize_sets,
)
from .tracker import LogResult, SortOrder, WorkoutTracker

__all__ = [
    "AdminRequiredError",
    "EntryNotFoundError",
    "FitTrackError",
    "TemplateLimitError",
    "TemplateNotFoundError",
    "TemplatePermissionError",
    "TrialAlreadyUsedError",
    "UserNotFoundError",
    "ExerciseEntry",
    "LibraryItem",
    "RecordDimension",
    "Role",
    "SetRecord",
    "SubscriptionStatus",
    "SubscriptionTier",
    "TemplateExercise",
    "User",
    "WorkoutTemplate",
    "normalize_sets",
    "LogResult",
    "SortOrder",
    "WorkoutTracker",
]
