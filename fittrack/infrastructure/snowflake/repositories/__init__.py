"""
Repository pattern implementations for Snowflake.

Repositories translate between domain models and database representations.
"""

from .exercises import ExerciseRepository
from .library import LibraryRepository
from .templates import TemplateRepository
from .users import UserRepository

__all__ = [
    "ExerciseRepository",
    "LibraryRepository",
    "TemplateRepository",
    "UserRepository",
]
