"""
Exercise library search planning.

The store can use one index per query, so a request with several filters
is answered by the most selective one: name search, then category, then
difficulty, then equipment. With no filter the library is listed
alphabetically.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_LIMIT = 100
MAX_LIMIT = 200


class LibraryFilter(Enum):
    NAME_PREFIX = "name_prefix"
    CATEGORY = "category"
    DIFFICULTY = "difficulty"
    EQUIPMENT = "equipment"
    NONE = "none"


@dataclass(frozen=True)
class LibraryQuery:
    filter: LibraryFilter
    value: Optional[str]
    limit: int

    @property
    def prefix_range(self) -> tuple[str, str]:
        """
        [start, end) bounds matching every name_lower with this prefix.

        end is the prefix with its last character bumped by one code point.
        """
        prefix = self.value or ""
        end = prefix[:-1] + chr(ord(prefix[-1]) + 1)
        return prefix, end


def clamp_limit(
    limit: Optional[int],
    default: int = DEFAULT_LIMIT,
    maximum: int = MAX_LIMIT,
) -> int:
    if limit is None:
        limit = default
    return min(max(limit, 1), maximum)


def plan_library_query(
    search: Optional[str] = None,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    equipment: Optional[str] = None,
    limit: Optional[int] = None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> LibraryQuery:
    limit = clamp_limit(limit, default_limit, max_limit)

    if search and search.strip():
        return LibraryQuery(LibraryFilter.NAME_PREFIX, search.strip().lower(), limit)
    if category:
        return LibraryQuery(LibraryFilter.CATEGORY, category, limit)
    if difficulty:
        return LibraryQuery(LibraryFilter.DIFFICULTY, difficulty, limit)
    if equipment:
        return LibraryQuery(LibraryFilter.EQUIPMENT, equipment, limit)
    return LibraryQuery(LibraryFilter.NONE, None, limit)
