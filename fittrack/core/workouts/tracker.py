"""
Workout tracking use cases.

WorkoutTracker is the application service behind the exercise, stats and
template endpoints. It is framework-agnostic: it talks to storage through
the protocols below and never sees HTTP or SQL. Every method takes the
acting user's id and only ever touches that user's rows (pre-built
templates excepted, which anyone may read).
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Any, Optional, Protocol
from uuid import UUID

from .catalog import prebuilt_templates
from .charts import ProgressSeries, build_progress_series
from .comparison import EntryComparison, compare_entries, select_entry_for_day
from .errors import (
    EntryNotFoundError,
    TemplateLimitError,
    TemplateNotFoundError,
    TemplatePermissionError,
)
from .models import (
    ExerciseEntry,
    RecordDimension,
    SetRecord,
    User,
    WorkoutTemplate,
    ensure_aware,
    utc_now,
)
from .records import PersonalRecord, best_records, detect_personal_record
from .subscriptions import DEFAULT_FREE_TEMPLATE_LIMIT, template_limit
from .summary import HistorySummary, summarize_history

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class ExerciseStore(Protocol):
    """
    Storage for exercise entries.

    Range arguments are half-open: start <= performed_at < end.
    """

    def add(self, entry: ExerciseEntry) -> None: ...
    def update(self, entry: ExerciseEntry) -> None: ...
    def delete(self, entry_id: UUID) -> None: ...
    def get(self, entry_id: UUID) -> Optional[ExerciseEntry]: ...
    def list_for_user(self, user_id: str) -> list[ExerciseEntry]: ...
    def list_by_category(self, user_id: str, category: str) -> list[ExerciseEntry]: ...
    def list_by_name(
        self,
        user_id: str,
        name: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[ExerciseEntry]: ...
    def list_in_range(self, user_id: str, start: datetime, end: datetime) -> list[ExerciseEntry]: ...
    def list_names(self, user_id: str) -> list[str]: ...


class TemplateStore(Protocol):
    """Storage for workout templates."""

    def add(self, template: WorkoutTemplate) -> None: ...
    def update(self, template: WorkoutTemplate) -> None: ...
    def delete(self, template_id: UUID) -> None: ...
    def get(self, template_id: UUID) -> Optional[WorkoutTemplate]: ...
    def list_for_user(self, user_id: str, category: Optional[str] = None) -> list[WorkoutTemplate]: ...
    def list_prebuilt(self) -> list[WorkoutTemplate]: ...
    def count_for_user(self, user_id: str) -> int: ...


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class SortOrder(Enum):
    DATE = "date"
    WEIGHT = "weight"  # total volume
    SETS = "sets"
    REPS = "reps"


@dataclass(frozen=True)
class LogResult:
    """What happened when an exercise was logged."""
    entry: ExerciseEntry
    is_new_pr: bool
    dimension: Optional[RecordDimension]
    is_new_entry: bool


@dataclass(frozen=True)
class TemplateStats:
    total_templates: int
    total_usage: int


@dataclass(frozen=True)
class TemplateLogResult:
    template: WorkoutTemplate
    entries: list[ExerciseEntry]

    @property
    def message(self) -> str:
        return f'Logged {len(self.entries)} exercises from template "{self.template.name}"'


_ENTRY_FIELDS = {"name", "category", "sets", "duration_minutes", "notes", "performed_at"}
_TEMPLATE_FIELDS = {"name", "description", "category", "difficulty", "estimated_duration", "exercises"}


# ---------------------------------------------------------------------------
# Tracker Service
# ---------------------------------------------------------------------------

class WorkoutTracker:
    """
    Exercise logging, statistics and template management for one store.

    tz fixes where calendar days begin and end. It is used for same-day
    merging, streaks, charts, comparisons and by-date listings alike, so
    they always agree with each other.
    """

    def __init__(
        self,
        exercises: ExerciseStore,
        templates: TemplateStore,
        tz: tzinfo,
        free_template_limit: int = DEFAULT_FREE_TEMPLATE_LIMIT,
    ) -> None:
        self._exercises = exercises
        self._templates = templates
        self._tz = tz
        self._free_template_limit = free_template_limit

    # -----------------------------------------------------------------------
    # Exercise entries
    # -----------------------------------------------------------------------

    def log_exercise(self, draft: ExerciseEntry) -> LogResult:
        """
        Record a workout and report whether it set a personal record.

        Sets logged for an exercise that already has an entry that day are
        appended to that entry instead of creating a second one.
        """
        day_start, day_end = self._day_bounds(self._local_date(draft.performed_at))
        same_day = self._exercises.list_by_name(draft.user_id, draft.name, day_start, day_end)

        if same_day and draft.sets:
            target = same_day[0]
            target.add_sets(draft.sets, draft.notes)
            self._exercises.update(target)
            is_new_entry = False
        else:
            target = draft
            self._exercises.add(target)
            is_new_entry = True

        history = [
            e for e in self._exercises.list_by_name(draft.user_id, draft.name)
            if e.id != target.id
        ]
        check = detect_personal_record(history, draft)

        logger.info(
            "Exercise logged",
            extra={
                "user_id": draft.user_id,
                "entry_id": str(target.id),
                "exercise": draft.name,
                "merged": not is_new_entry,
                "is_new_pr": check.is_new_pr,
            }
        )

        return LogResult(
            entry=target,
            is_new_pr=check.is_new_pr,
            dimension=check.dimension,
            is_new_entry=is_new_entry,
        )

    def get_entry(self, user_id: str, entry_id: UUID) -> ExerciseEntry:
        entry = self._exercises.get(entry_id)
        if entry is None or entry.user_id != user_id:
            logger.warning(
                "Exercise entry not accessible",
                extra={"user_id": user_id, "entry_id": str(entry_id)}
            )
            raise EntryNotFoundError("Exercise not found or unauthorized")
        return entry

    def update_entry(self, user_id: str, entry_id: UUID, changes: dict[str, Any]) -> ExerciseEntry:
        """Apply a partial update; the result is re-validated as a whole."""
        entry = self.get_entry(user_id, entry_id)

        unknown = set(changes) - _ENTRY_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        updated = replace(entry, **changes)
        self._exercises.update(updated)

        logger.info(
            "Exercise updated",
            extra={"user_id": user_id, "entry_id": str(entry_id), "fields": sorted(changes)}
        )
        return updated

    def delete_entry(self, user_id: str, entry_id: UUID) -> None:
        self.get_entry(user_id, entry_id)
        self._exercises.delete(entry_id)
        logger.info("Exercise deleted", extra={"user_id": user_id, "entry_id": str(entry_id)})

    def list_entries(self, user_id: str) -> list[ExerciseEntry]:
        """All entries, most recently performed first."""
        return sorted(
            self._exercises.list_for_user(user_id),
            key=lambda e: e.performed_at,
            reverse=True,
        )

    def list_filtered(
        self,
        user_id: str,
        category: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        sort_by: SortOrder = SortOrder.DATE,
    ) -> list[ExerciseEntry]:
        """Entries from local day `start` through local day `end` (both whole days), largest first."""
        if category:
            rows = self._exercises.list_by_category(user_id, category)
        else:
            rows = self._exercises.list_for_user(user_id)

        rows = [
            e for e in rows
            if (start is None or self._local_date(e.performed_at) >= start)
            and (end is None or self._local_date(e.performed_at) <= end)
        ]

        sort_keys = {
            SortOrder.DATE: lambda e: e.performed_at,
            SortOrder.WEIGHT: lambda e: e.total_volume,
            SortOrder.SETS: lambda e: e.set_count,
            SortOrder.REPS: lambda e: e.total_reps,
        }
        return sorted(rows, key=sort_keys[sort_by], reverse=True)

    def list_names(self, user_id: str) -> list[str]:
        return sorted(set(self._exercises.list_names(user_id)), key=str.lower)

    def list_on_date(self, user_id: str, day: date) -> list[ExerciseEntry]:
        """Everything performed on a local calendar day, earliest first."""
        start, end = self._day_bounds(day)
        rows = self._exercises.list_in_range(user_id, start, end)
        return sorted(rows, key=lambda e: e.performed_at)

    def list_by_name(self, user_id: str, name: str) -> list[ExerciseEntry]:
        """Every entry for one exercise, earliest first."""
        rows = self._exercises.list_by_name(user_id, name)
        return sorted(rows, key=lambda e: e.performed_at)

    # -----------------------------------------------------------------------
    # Statistics
    # -----------------------------------------------------------------------

    def summary(self, user_id: str, now: Optional[datetime] = None) -> HistorySummary:
        return summarize_history(
            self._exercises.list_for_user(user_id),
            now=now or utc_now(),
            tz=self._tz,
        )

    def personal_records(self, user_id: str) -> list[PersonalRecord]:
        return best_records(self._exercises.list_for_user(user_id))

    def progress(self, user_id: str, name: str) -> ProgressSeries:
        return build_progress_series(name, self.list_by_name(user_id, name), self._tz)

    def compare(self, user_id: str, name: str, first_day: date, second_day: date) -> EntryComparison:
        first = self._entry_on(user_id, name, first_day)
        second = self._entry_on(user_id, name, second_day)
        return compare_entries(name, first, second)

    # -----------------------------------------------------------------------
    # Templates
    # -----------------------------------------------------------------------

    def list_templates(self, user_id: str, category: Optional[str] = None) -> list[WorkoutTemplate]:
        """The user's own templates (optionally one category)."""
        return self._templates.list_for_user(user_id, category)

    def list_prebuilt_templates(self) -> list[WorkoutTemplate]:
        return sorted(self._templates.list_prebuilt(), key=lambda t: (t.category, t.name))

    def get_template(self, user_id: str, template_id: UUID) -> WorkoutTemplate:
        template = self._templates.get(template_id)
        if template is None or not template.is_visible_to(user_id):
            raise TemplateNotFoundError("Template not found")
        return template

    def template_count(self, user_id: str) -> int:
        return self._templates.count_for_user(user_id)

    def template_stats(self, user_id: str) -> TemplateStats:
        templates = self._templates.list_for_user(user_id)
        return TemplateStats(
            total_templates=len(templates),
            total_usage=sum(t.usage_count for t in templates),
        )

    def create_template(self, user: User, template: WorkoutTemplate) -> WorkoutTemplate:
        limit = template_limit(user.subscription_tier, self._free_template_limit)
        if limit is not None and self._templates.count_for_user(user.id) >= limit:
            logger.warning(
                "Template limit reached",
                extra={"user_id": user.id, "tier": user.subscription_tier.value, "limit": limit}
            )
            raise TemplateLimitError(
                "Template limit reached. Upgrade to Premium for unlimited templates."
            )

        owned = replace(
            template,
            is_prebuilt=False,
            created_by=user.id,
            usage_count=0,
            last_used=None,
        )
        self._templates.add(owned)

        logger.info(
            "Template created",
            extra={"user_id": user.id, "template_id": str(owned.id), "template_name": owned.name}
        )
        return owned

    def update_template(self, user_id: str, template_id: UUID, changes: dict[str, Any]) -> WorkoutTemplate:
        template = self._owned_template(user_id, template_id, "update")

        unknown = set(changes) - _TEMPLATE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        updated = replace(template, **changes)
        self._templates.update(updated)
        logger.info("Template updated", extra={"user_id": user_id, "template_id": str(template_id)})
        return updated

    def delete_template(self, user_id: str, template_id: UUID) -> None:
        self._owned_template(user_id, template_id, "delete")
        self._templates.delete(template_id)
        logger.info("Template deleted", extra={"user_id": user_id, "template_id": str(template_id)})

    def track_template_usage(
        self,
        user_id: str,
        template_id: UUID,
        now: Optional[datetime] = None,
    ) -> WorkoutTemplate:
        template = self._owned_template(user_id, template_id, "track usage for")
        template.record_usage(now or utc_now())
        self._templates.update(template)
        return template

    def log_template(
        self,
        user_id: str,
        template_id: UUID,
        now: Optional[datetime] = None,
    ) -> TemplateLogResult:
        """
        Log every exercise of a template as performed now.

        Each planned exercise becomes target_sets sets at the bottom of its
        rep range. Usage counters only move on the user's own templates;
        pre-built ones are shared and stay untouched.
        """
        now = now or utc_now()
        template = self.get_template(user_id, template_id)

        entries = []
        for planned in template.exercises:
            entry = ExerciseEntry(
                user_id=user_id,
                name=planned.name,
                category=planned.category,
                sets=[
                    SetRecord(
                        reps=planned.planned_reps,
                        weight=planned.target_weight,
                        notes=planned.notes,
                    )
                    for _ in range(planned.target_sets)
                ],
                notes=planned.notes,
                performed_at=now,
            )
            self._exercises.add(entry)
            entries.append(entry)

        if template.is_owned_by(user_id):
            template.record_usage(now)
            self._templates.update(template)

        logger.info(
            "Template logged",
            extra={
                "user_id": user_id,
                "template_id": str(template_id),
                "exercise_count": len(entries),
            }
        )
        return TemplateLogResult(template=template, entries=entries)

    def seed_prebuilt_templates(self) -> int:
        """Insert curated templates that aren't there yet. Returns how many."""
        existing = {t.name for t in self._templates.list_prebuilt()}
        added = 0
        for template in prebuilt_templates():
            if template.name in existing:
                continue
            self._templates.add(template)
            added += 1

        logger.info("Pre-built templates seeded", extra={"added": added})
        return added

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _local_date(self, moment: datetime) -> date:
        return ensure_aware(moment).astimezone(self._tz).date()

    def _day_bounds(self, day: date) -> tuple[datetime, datetime]:
        start = datetime.combine(day, time.min, tzinfo=self._tz)
        end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=self._tz)
        return start, end

    def _entry_on(self, user_id: str, name: str, day: date) -> Optional[ExerciseEntry]:
        start, end = self._day_bounds(day)
        rows = self._exercises.list_by_name(user_id, name, start, end)
        return select_entry_for_day(rows, day, self._tz)

    def _owned_template(self, user_id: str, template_id: UUID, action: str) -> WorkoutTemplate:
        template = self._templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError("Template not found")
        if not template.is_owned_by(user_id):
            logger.warning(
                "Template ownership check failed",
                extra={"user_id": user_id, "template_id": str(template_id), "action": action}
            )
            raise TemplatePermissionError(f"Not authorized to {action} this template")
        return template
