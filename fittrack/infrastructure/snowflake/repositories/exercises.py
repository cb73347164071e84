"""
Snowflake repository for logged exercises.

Sets are stored as a JSON array in sets_data. Rows written before per-set
logging existed carry scalar sets/reps/weight columns instead; those are
converted to set lists as they are read and never written again.
"""

import json
import logging
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from fittrack.core.workouts.models import ExerciseEntry, SetRecord, normalize_sets

from ..config import SnowflakeConnection

logger = logging.getLogger(__name__)


_COLUMNS = (
    "entry_id, user_id, name, category, sets_data, sets, reps, weight, "
    "duration_minutes, notes, performed_at, created_at"
)


def _parse_variant_json(variant_data: Any) -> Any:
    """
    Parse a JSON column that might be a string or already parsed.

    The connector returns VARIANT/VARCHAR JSON as text; other drivers
    may hand back lists directly.
    """
    if variant_data is None or variant_data == "":
        return None
    if isinstance(variant_data, (list, dict)):
        return variant_data
    try:
        return json.loads(variant_data)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(
            "Failed to parse JSON column",
            extra={"error": str(e), "data_preview": str(variant_data)[:100]}
        )
        return None


def _sets_to_json(sets: list[SetRecord]) -> str:
    return json.dumps([
        {"reps": s.reps, "weight": s.weight, "notes": s.notes}
        for s in sets
    ])


class ExerciseRepository:
    """
    Repository for exercise entries.

    Ownership checks are the caller's job; the repository filters by
    user_id wherever a query takes one.
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def add(self, entry: ExerciseEntry) -> None:
        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO exercises (
                    entry_id, user_id, name, category, sets_data,
                    duration_minutes, notes, performed_at, created_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            """, (
                str(entry.id),
                entry.user_id,
                entry.name,
                entry.category,
                _sets_to_json(entry.sets),
                entry.duration_minutes,
                entry.notes,
                entry.performed_at,
                entry.created_at,
            ))
            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to insert exercise",
                extra={"entry_id": str(entry.id), "error": str(e)}
            )
            raise
        finally:
            cursor.close()

    def update(self, entry: ExerciseEntry) -> None:
        """Overwrite an entry; legacy scalar columns are cleared in favour of sets_data."""
        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                UPDATE exercises
                SET name = %s,
                    category = %s,
                    sets_data = %s,
                    sets = %s,
                    reps = %s,
                    weight = %s,
                    duration_minutes = %s,
                    notes = %s,
                    performed_at = %s
                WHERE entry_id = %s
            """, (
                entry.name,
                entry.category,
                _sets_to_json(entry.sets),
                None,
                None,
                None,
                entry.duration_minutes,
                entry.notes,
                entry.performed_at,
                str(entry.id),
            ))
            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to update exercise",
                extra={"entry_id": str(entry.id), "error": str(e)}
            )
            raise
        finally:
            cursor.close()

    def delete(self, entry_id: UUID) -> None:
        cursor = self._conn.cursor()

        try:
            cursor.execute(
                "DELETE FROM exercises WHERE entry_id = %s",
                (str(entry_id),)
            )
            self._conn.commit()
        finally:
            cursor.close()

    def get(self, entry_id: UUID) -> Optional[ExerciseEntry]:
        rows = self._select("entry_id = %s", (str(entry_id),))
        return rows[0] if rows else None

    def list_for_user(self, user_id: str) -> list[ExerciseEntry]:
        return self._select("user_id = %s", (user_id,), order="performed_at DESC")

    def list_by_category(self, user_id: str, category: str) -> list[ExerciseEntry]:
        return self._select(
            "user_id = %s AND category = %s",
            (user_id, category),
            order="performed_at DESC",
        )

    def list_by_name(
        self,
        user_id: str,
        name: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[ExerciseEntry]:
        where = "user_id = %s AND name = %s"
        params: list[Any] = [user_id, name]
        if start is not None:
            where += " AND performed_at >= %s"
            params.append(start)
        if end is not None:
            where += " AND performed_at < %s"
            params.append(end)
        return self._select(where, tuple(params), order="performed_at ASC")

    def list_in_range(self, user_id: str, start: datetime, end: datetime) -> list[ExerciseEntry]:
        return self._select(
            "user_id = %s AND performed_at >= %s AND performed_at < %s",
            (user_id, start, end),
            order="performed_at ASC",
        )

    def list_names(self, user_id: str) -> list[str]:
        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                SELECT DISTINCT name
                FROM exercises
                WHERE user_id = %s
                ORDER BY name
            """, (user_id,))
            return [row[0] for row in cursor.fetchall()]
        finally:
            cursor.close()

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _select(self, where: str, params: tuple, order: Optional[str] = None) -> list[ExerciseEntry]:
        cursor = self._conn.cursor()

        try:
            query = f"SELECT {_COLUMNS} FROM exercises WHERE {where}"
            if order:
                query += f" ORDER BY {order}"
            cursor.execute(query, params)
            return [self._row_to_entry(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def _row_to_entry(self, row: tuple) -> ExerciseEntry:
        (
            entry_id, user_id, name, category, sets_data, sets, reps, weight,
            duration_minutes, notes, performed_at, created_at,
        ) = row

        return ExerciseEntry(
            id=UUID(entry_id),
            user_id=user_id,
            name=name,
            category=category,
            sets=normalize_sets(
                sets_data=_parse_variant_json(sets_data),
                sets=sets,
                reps=reps,
                weight=weight,
            ),
            duration_minutes=duration_minutes,
            notes=notes,
            performed_at=performed_at,
            created_at=created_at,
        )
