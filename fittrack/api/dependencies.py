"""
FastAPI dependency injection.

Dependencies provide instances of services, repositories, and configuration
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be mocked for testing
- Resource lifecycle (connections) is managed properly

A request opens at most one database connection: every repository
dependency asks for get_connection, and FastAPI caches a dependency's
result for the duration of a request.
"""

import logging
from contextlib import contextmanager
from typing import Annotated, Generator, Optional

from fastapi import Depends, Header, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.workouts import AdminRequiredError, User, WorkoutTracker
from ..infrastructure.snowflake.client import MockSnowflakeConnection, create_snowflake_connection
from ..infrastructure.snowflake.config import SnowflakeConfig, SnowflakeConnection
from ..infrastructure.snowflake.repositories import (
    ExerciseRepository,
    LibraryRepository,
    TemplateRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Global mock instance (shared across requests for testing)
_mock_snowflake_connection: Optional[MockSnowflakeConnection] = None


def get_mock_connection() -> MockSnowflakeConnection:
    """The process-wide in-memory connection used in mock mode."""
    global _mock_snowflake_connection

    if _mock_snowflake_connection is None:
        _mock_snowflake_connection = MockSnowflakeConnection()
        logger.info("Created shared mock Snowflake connection")
    return _mock_snowflake_connection


def reset_mock_connection() -> None:
    """Drop the shared mock connection so the next request starts empty."""
    global _mock_snowflake_connection
    _mock_snowflake_connection = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8] if api_key else ""}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Persistence Dependencies
# ---------------------------------------------------------------------------

@contextmanager
def open_connection(settings: Settings) -> Generator[SnowflakeConnection, None, None]:
    """
    Open a connection according to settings.

    In mock mode, we reuse the same connection across requests
    so that data persists during the testing session.
    """
    if settings.snowflake_mock_mode:
        logger.debug("Using shared mock Snowflake connection")
        yield get_mock_connection()
        return

    config = SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )

    with create_snowflake_connection(config=config) as conn:
        yield conn


def get_connection(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[SnowflakeConnection, None, None]:
    """
    Provide a database connection for the current request.

    This is a generator function (yields instead of returns) because
    we need to manage the connection lifecycle:
    1. Create connection
    2. Yield it (repositories are built on top)
    3. Close connection (cleanup after request)
    """
    with open_connection(settings) as conn:
        yield conn


ConnectionDep = Annotated[SnowflakeConnection, Depends(get_connection)]


def get_user_repository(conn: ConnectionDep) -> UserRepository:
    return UserRepository(conn)


def get_exercise_repository(conn: ConnectionDep) -> ExerciseRepository:
    return ExerciseRepository(conn)


def get_library_repository(conn: ConnectionDep) -> LibraryRepository:
    return LibraryRepository(conn)


def get_template_repository(conn: ConnectionDep) -> TemplateRepository:
    return TemplateRepository(conn)


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_workout_tracker(
    settings: Annotated[Settings, Depends(get_settings)],
    exercises: Annotated[ExerciseRepository, Depends(get_exercise_repository)],
    templates: Annotated[TemplateRepository, Depends(get_template_repository)],
) -> WorkoutTracker:
    """
    Provide the tracker service over this request's repositories.

    The tracker is stateless, so we create a new instance per request.
    """
    return WorkoutTracker(
        exercises=exercises,
        templates=templates,
        tz=settings.stats_tz,
        free_template_limit=settings.free_template_limit,
    )


# ---------------------------------------------------------------------------
# Current User
# ---------------------------------------------------------------------------

async def get_current_user(
    api_key: Annotated[str, Depends(verify_api_key)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
    x_user_id: Annotated[Optional[str], Header()] = None,
    x_user_email: Annotated[Optional[str], Header()] = None,
) -> User:
    """
    Resolve the signed-in user from identity headers.

    Tokens are verified by the identity provider before requests reach
    us; we only receive its subject id and the user's email. Users are
    keyed by email and created the first time we see them.

    Raises 401 if either header is missing.
    """
    if not x_user_id or not x_user_email:
        logger.warning("Request missing user identity headers")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated. Provide X-User-Id and X-User-Email headers.",
        )

    user = users.get_by_email(x_user_email)
    if user is None:
        user = User(email=x_user_email, clerk_user_id=x_user_id)
        users.add(user)
        logger.info(
            "Created user on first request",
            extra={"user_id": user.id, "clerk_user_id": x_user_id}
        )
    elif user.clerk_user_id != x_user_id:
        user.clerk_user_id = x_user_id
        users.save(user)

    return user


async def require_admin(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    if not user.is_admin:
        logger.warning("Admin-only endpoint refused", extra={"user_id": user.id})
        raise AdminRequiredError("Admin access required")
    return user


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
ApiKey = Annotated[str, Depends(verify_api_key)]
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
WorkoutTrackerDep = Annotated[WorkoutTracker, Depends(get_workout_tracker)]
UserRepositoryDep = Annotated[UserRepository, Depends(get_user_repository)]
LibraryRepositoryDep = Annotated[LibraryRepository, Depends(get_library_repository)]
