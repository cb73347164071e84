"""Snowflake repository for the curated exercise library."""

import logging
from uuid import UUID

from fittrack.core.workouts.library import LibraryFilter, LibraryQuery
from fittrack.core.workouts.models import LibraryItem

from ..config import SnowflakeConnection

logger = logging.getLogger(__name__)


_COLUMNS = (
    "item_id, name, name_lower, category, primary_muscle, difficulty, equipment, "
    "description, tips, common_mistakes, media_url, popularity"
)

_FILTER_COLUMNS = {
    LibraryFilter.CATEGORY: "category",
    LibraryFilter.DIFFICULTY: "difficulty",
    LibraryFilter.EQUIPMENT: "equipment",
}


class LibraryRepository:
    """
    Read access to the library plus the inserts seeding needs.

    Results are always ordered by lowercase name and capped at the
    query's limit.
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def search(self, query: LibraryQuery) -> list[LibraryItem]:
        if query.filter == LibraryFilter.NAME_PREFIX:
            start, end = query.prefix_range
            where = "WHERE name_lower >= %s AND name_lower < %s"
            params: tuple = (start, end, query.limit)
        elif query.filter in _FILTER_COLUMNS:
            where = f"WHERE {_FILTER_COLUMNS[query.filter]} = %s"
            params = (query.value, query.limit)
        else:
            where = ""
            params = (query.limit,)

        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {_COLUMNS}
                FROM exercise_library
                {where}
                ORDER BY name_lower
                LIMIT %s
            """, params)
            return [self._row_to_item(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def list_names(self) -> set[str]:
        cursor = self._conn.cursor()

        try:
            cursor.execute("SELECT name FROM exercise_library")
            return {row[0] for row in cursor.fetchall()}
        finally:
            cursor.close()

    def add(self, item: LibraryItem) -> None:
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO exercise_library ({_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            """, (
                str(item.id),
                item.name,
                item.name_lower,
                item.category,
                item.primary_muscle,
                item.difficulty,
                item.equipment,
                item.description,
                item.tips,
                item.common_mistakes,
                item.media_url,
                item.popularity,
            ))
            self._conn.commit()
        finally:
            cursor.close()

    def seed(self, items: list[LibraryItem]) -> int:
        """Insert items whose names aren't in the library yet. Returns how many."""
        existing = self.list_names()
        added = 0
        for item in items:
            if item.name in existing:
                continue
            self.add(item)
            added += 1

        logger.info("Exercise library seeded", extra={"added": added, "total": len(items)})
        return added

    def _row_to_item(self, row: tuple) -> LibraryItem:
        (
            item_id, name, _name_lower, category, primary_muscle, difficulty,
            equipment, description, tips, common_mistakes, media_url, popularity,
        ) = row

        return LibraryItem(
            id=UUID(item_id),
            name=name,
            category=category,
            primary_muscle=primary_muscle,
            difficulty=difficulty,
            equipment=equipment,
            description=description,
            tips=tips,
            common_mistakes=common_mistakes,
            media_url=media_url,
            popularity=popularity,
        )
