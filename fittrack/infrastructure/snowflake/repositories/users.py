"""
Snowflake repository for user accounts.

Users are looked up by email (the stable key the auth provider hands us),
by id, or by billing customer id when a payment webhook arrives.
"""

import logging
from typing import Optional

from fittrack.core.workouts.models import Role, SubscriptionStatus, SubscriptionTier, User, utc_now

from ..config import SnowflakeConnection

logger = logging.getLogger(__name__)


_COLUMNS = (
    "user_id, clerk_user_id, email, name, image_url, role, age, weight, "
    "subscription_tier, subscription_status, subscription_start, subscription_end, "
    "trial_end, customer_id, subscription_id, created_at, updated_at"
)


class UserRepository:
    """Repository for user persistence."""

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._first("user_id = %s", (user_id,))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._first("email = %s", (email.strip().lower(),))

    def get_by_customer_id(self, customer_id: str) -> Optional[User]:
        return self._first("customer_id = %s", (customer_id,))

    def list_all(self) -> list[User]:
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"SELECT {_COLUMNS} FROM users ORDER BY created_at")
            return [self._row_to_user(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def add(self, user: User) -> None:
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO users ({_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            """, (
                user.id,
                user.clerk_user_id,
                user.email,
                user.name,
                user.image_url,
                user.role.value,
                user.age,
                user.weight,
                user.subscription_tier.value,
                user.subscription_status.value,
                user.subscription_start,
                user.subscription_end,
                user.trial_end,
                user.customer_id,
                user.subscription_id,
                user.created_at,
                user.updated_at,
            ))
            self._conn.commit()

            logger.info("User created", extra={"user_id": user.id})

        except Exception as e:
            logger.error(
                "Failed to create user",
                extra={"user_id": user.id, "error": str(e)}
            )
            raise
        finally:
            cursor.close()

    def save(self, user: User) -> None:
        """Write back every mutable field of an existing user."""
        user.updated_at = utc_now()
        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                UPDATE users
                SET clerk_user_id = %s,
                    name = %s,
                    image_url = %s,
                    role = %s,
                    age = %s,
                    weight = %s,
                    subscription_tier = %s,
                    subscription_status = %s,
                    subscription_start = %s,
                    subscription_end = %s,
                    trial_end = %s,
                    customer_id = %s,
                    subscription_id = %s,
                    updated_at = %s
                WHERE user_id = %s
            """, (
                user.clerk_user_id,
                user.name,
                user.image_url,
                user.role.value,
                user.age,
                user.weight,
                user.subscription_tier.value,
                user.subscription_status.value,
                user.subscription_start,
                user.subscription_end,
                user.trial_end,
                user.customer_id,
                user.subscription_id,
                user.updated_at,
                user.id,
            ))
            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to update user",
                extra={"user_id": user.id, "error": str(e)}
            )
            raise
        finally:
            cursor.close()

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _first(self, where: str, params: tuple) -> Optional[User]:
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"SELECT {_COLUMNS} FROM users WHERE {where} LIMIT %s", (*params, 1))
            row = cursor.fetchone()
            return self._row_to_user(row) if row else None
        finally:
            cursor.close()

    def _row_to_user(self, row: tuple) -> User:
        (
            user_id, clerk_user_id, email, name, image_url, role, age, weight,
            tier, status, subscription_start, subscription_end, trial_end,
            customer_id, subscription_id, created_at, updated_at,
        ) = row

        return User(
            id=user_id,
            clerk_user_id=clerk_user_id,
            email=email,
            name=name or "",
            image_url=image_url,
            role=Role(role) if role else Role.USER,
            age=age,
            weight=weight,
            subscription_tier=SubscriptionTier(tier) if tier else SubscriptionTier.FREE,
            subscription_status=(
                SubscriptionStatus(status) if status else SubscriptionStatus.ACTIVE
            ),
            subscription_start=subscription_start,
            subscription_end=subscription_end,
            trial_end=trial_end,
            customer_id=customer_id,
            subscription_id=subscription_id,
            created_at=created_at,
            updated_at=updated_at,
        )
