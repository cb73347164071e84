"""
Snowflake repository for workout templates.

The planned exercises are stored as a JSON array on the template row.
"""

import json
import logging
from typing import Optional
from uuid import UUID

from fittrack.core.workouts.models import TemplateExercise, WorkoutTemplate

from ..config import SnowflakeConnection
from .exercises import _parse_variant_json

logger = logging.getLogger(__name__)


_COLUMNS = (
    "template_id, name, description, category, difficulty, estimated_duration, "
    "exercises, is_prebuilt, created_by, last_used, usage_count, created_at"
)


def _exercises_to_json(exercises: list[TemplateExercise]) -> str:
    return json.dumps([
        {
            "name": e.name,
            "category": e.category,
            "target_sets": e.target_sets,
            "target_reps": e.target_reps,
            "rest_seconds": e.rest_seconds,
            "target_weight": e.target_weight,
            "notes": e.notes,
            "order": e.order,
        }
        for e in exercises
    ])


class TemplateRepository:
    """Repository for custom and pre-built templates."""

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def add(self, template: WorkoutTemplate) -> None:
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO workout_templates ({_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            """, (
                str(template.id),
                template.name,
                template.description,
                template.category,
                template.difficulty,
                template.estimated_duration,
                _exercises_to_json(template.exercises),
                template.is_prebuilt,
                template.created_by,
                template.last_used,
                template.usage_count,
                template.created_at,
            ))
            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to insert template",
                extra={"template_id": str(template.id), "error": str(e)}
            )
            raise
        finally:
            cursor.close()

    def update(self, template: WorkoutTemplate) -> None:
        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                UPDATE workout_templates
                SET name = %s,
                    description = %s,
                    category = %s,
                    difficulty = %s,
                    estimated_duration = %s,
                    exercises = %s,
                    last_used = %s,
                    usage_count = %s
                WHERE template_id = %s
            """, (
                template.name,
                template.description,
                template.category,
                template.difficulty,
                template.estimated_duration,
                _exercises_to_json(template.exercises),
                template.last_used,
                template.usage_count,
                str(template.id),
            ))
            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to update template",
                extra={"template_id": str(template.id), "error": str(e)}
            )
            raise
        finally:
            cursor.close()

    def delete(self, template_id: UUID) -> None:
        cursor = self._conn.cursor()

        try:
            cursor.execute(
                "DELETE FROM workout_templates WHERE template_id = %s",
                (str(template_id),)
            )
            self._conn.commit()
        finally:
            cursor.close()

    def get(self, template_id: UUID) -> Optional[WorkoutTemplate]:
        rows = self._select("template_id = %s", (str(template_id),))
        return rows[0] if rows else None

    def list_for_user(self, user_id: str, category: Optional[str] = None) -> list[WorkoutTemplate]:
        if category:
            return self._select(
                "created_by = %s AND category = %s",
                (user_id, category),
                order="created_at DESC",
            )
        return self._select("created_by = %s", (user_id,), order="created_at DESC")

    def list_prebuilt(self) -> list[WorkoutTemplate]:
        return self._select("is_prebuilt = %s", (True,), order="name")

    def count_for_user(self, user_id: str) -> int:
        cursor = self._conn.cursor()

        try:
            cursor.execute(
                "SELECT COUNT(*) FROM workout_templates WHERE created_by = %s",
                (user_id,)
            )
            row = cursor.fetchone()
            return row[0] if row else 0
        finally:
            cursor.close()

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _select(self, where: str, params: tuple, order: Optional[str] = None) -> list[WorkoutTemplate]:
        cursor = self._conn.cursor()

        try:
            query = f"SELECT {_COLUMNS} FROM workout_templates WHERE {where}"
            if order:
                query += f" ORDER BY {order}"
            cursor.execute(query, params)
            return [self._row_to_template(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def _row_to_template(self, row: tuple) -> WorkoutTemplate:
        (
            template_id, name, description, category, difficulty, estimated_duration,
            exercises, is_prebuilt, created_by, last_used, usage_count, created_at,
        ) = row

        planned = [
            TemplateExercise(
                name=e["name"],
                category=e["category"],
                target_sets=e["target_sets"],
                target_reps=str(e["target_reps"]),
                rest_seconds=e.get("rest_seconds", 0),
                target_weight=e.get("target_weight"),
                notes=e.get("notes"),
                order=e.get("order", 0),
            )
            for e in _parse_variant_json(exercises) or []
        ]

        return WorkoutTemplate(
            id=UUID(template_id),
            name=name,
            description=description,
            category=category,
            difficulty=difficulty,
            estimated_duration=estimated_duration,
            exercises=planned,
            is_prebuilt=bool(is_prebuilt),
            created_by=created_by,
            last_used=last_used,
            usage_count=usage_count or 0,
            created_at=created_at,
        )
