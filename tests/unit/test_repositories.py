"""
Tests for the Snowflake repositories, run against the in-memory mock
connection. They check the row <-> model translation and that every query
the repositories issue is one the mock understands.
"""

import json
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from fittrack.core.workouts import (
    ExerciseEntry,
    SetRecord,
    SubscriptionTier,
    TemplateExercise,
    User,
    WorkoutTemplate,
)
from fittrack.core.workouts.catalog import library_items
from fittrack.core.workouts.library import plan_library_query
from fittrack.infrastructure.snowflake.client import MockSnowflakeConnection, SnowflakeQueryError
from fittrack.infrastructure.snowflake.repositories import (
    ExerciseRepository,
    LibraryRepository,
    TemplateRepository,
    UserRepository,
)

START = datetime(2024, 3, 5, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def conn():
    return MockSnowflakeConnection()


def bench(user_id="u1", days=0, weight=100.0):
    return ExerciseEntry(
        user_id=user_id,
        name="Bench Press",
        category="Strength",
        sets=[SetRecord(reps=5, weight=weight, notes="paused")],
        performed_at=START + timedelta(days=days),
    )


# ---------------------------------------------------------------------------
# Mock Connection
# ---------------------------------------------------------------------------

class TestMockConnection:

    def test_select_one(self, conn):
        cursor = conn.cursor()

        assert cursor.execute("SELECT 1").fetchone() == (1,)

    def test_unknown_statement_is_rejected(self, conn):
        with pytest.raises(SnowflakeQueryError):
            conn.cursor().execute("MERGE INTO exercises USING x ON y")

    def test_unknown_table_is_rejected(self, conn):
        with pytest.raises(SnowflakeQueryError, match="Unknown table"):
            conn.cursor().execute("SELECT name FROM sessions WHERE user_id = %s", ("u1",))

    def test_null_comparison_never_matches(self, conn):
        cursor = conn.cursor()
        cursor.execute("INSERT INTO users (user_id, customer_id) VALUES (%s, %s)", ("u1", None))

        cursor.execute("SELECT user_id FROM users WHERE customer_id = %s", (None,))

        assert cursor.fetchall() == []

    def test_update_and_delete_report_rowcount(self, conn):
        cursor = conn.cursor()
        cursor.execute("INSERT INTO users (user_id, name) VALUES (%s, %s)", ("u1", "A"))

        cursor.execute("UPDATE users SET name = %s WHERE user_id = %s", ("B", "u1"))
        assert cursor.rowcount == 1

        cursor.execute("DELETE FROM users WHERE user_id = %s", ("u1",))
        assert cursor.rowcount == 1
        assert conn._rows("users") == []

    def test_clear_empties_every_table(self, conn):
        ExerciseRepository(conn).add(bench())

        conn._clear()

        assert conn._rows("exercises") == []


# ---------------------------------------------------------------------------
# Exercises
# ---------------------------------------------------------------------------

class TestExerciseRepository:

    def test_round_trip_keeps_sets(self, conn):
        repo = ExerciseRepository(conn)
        entry = bench()

        repo.add(entry)
        loaded = repo.get(entry.id)

        assert loaded.id == entry.id
        assert loaded.sets == [SetRecord(reps=5, weight=100.0, notes="paused")]
        assert loaded.performed_at == entry.performed_at

    def test_sets_are_stored_as_json_text(self, conn):
        ExerciseRepository(conn).add(bench())

        stored = conn._rows("exercises")[0]["sets_data"]

        assert json.loads(stored) == [{"reps": 5, "weight": 100.0, "notes": "paused"}]

    def test_legacy_row_is_normalized_on_read(self, conn):
        """Rows from before per-set logging have only sets/reps/weight."""
        entry_id = uuid4()
        conn._rows("exercises").append({
            "entry_id": str(entry_id),
            "user_id": "u1",
            "name": "Squat",
            "category": "Strength",
            "sets_data": None,
            "sets": 3,
            "reps": 5,
            "weight": 120.0,
            "duration_minutes": None,
            "notes": None,
            "performed_at": START,
            "created_at": START,
        })

        loaded = ExerciseRepository(conn).get(entry_id)

        assert loaded.sets == [SetRecord(reps=5, weight=120.0)] * 3

    def test_update_clears_legacy_columns(self, conn):
        repo = ExerciseRepository(conn)
        entry = bench()
        repo.add(entry)

        entry.add_sets([SetRecord(reps=3, weight=105)])
        repo.update(entry)

        assert repo.get(entry.id).set_count == 2
        assert conn._rows("exercises")[0]["reps"] is None

    def test_list_by_name_range_is_half_open(self, conn):
        repo = ExerciseRepository(conn)
        inside = bench(days=0)
        boundary = bench(days=1)
        repo.add(inside)
        repo.add(boundary)

        rows = repo.list_by_name("u1", "Bench Press", START, START + timedelta(days=1))

        assert [r.id for r in rows] == [inside.id]

    def test_queries_are_scoped_to_user(self, conn):
        repo = ExerciseRepository(conn)
        repo.add(bench("u1"))
        repo.add(bench("u2"))

        assert len(repo.list_for_user("u1")) == 1
        assert repo.list_names("u2") == ["Bench Press"]

    def test_delete(self, conn):
        repo = ExerciseRepository(conn)
        entry = bench()
        repo.add(entry)

        repo.delete(entry.id)

        assert repo.get(entry.id) is None


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class TestUserRepository:

    def test_add_and_find_by_email_case_insensitively(self, conn):
        repo = UserRepository(conn)
        user = User(email="Lifter@Example.com", clerk_user_id="user_abc")
        repo.add(user)

        found = repo.get_by_email("LIFTER@example.com")

        assert found.id == user.id
        assert found.clerk_user_id == "user_abc"

    def test_save_persists_subscription_fields(self, conn):
        repo = UserRepository(conn)
        user = User(email="a@b.com")
        repo.add(user)

        user.subscription_tier = SubscriptionTier.PRO
        user.customer_id = "cus_9"
        repo.save(user)

        assert repo.get_by_customer_id("cus_9").subscription_tier == SubscriptionTier.PRO

    def test_missing_user_is_none(self, conn):
        assert UserRepository(conn).get_by_id("nope") is None


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------

class TestLibraryRepository:

    def test_seed_is_idempotent(self, conn):
        repo = LibraryRepository(conn)

        first = repo.seed(library_items())
        second = repo.seed(library_items())

        assert first == len(library_items())
        assert second == 0

    def test_prefix_search_is_case_insensitive(self, conn):
        repo = LibraryRepository(conn)
        repo.seed(library_items())

        results = repo.search(plan_library_query(search="BACK"))

        assert [i.name for i in results] == ["Back Squat"]

    def test_category_filter_and_limit(self, conn):
        repo = LibraryRepository(conn)
        repo.seed(library_items())

        results = repo.search(plan_library_query(category="Strength", limit=3))

        assert len(results) == 3
        assert all(i.category == "Strength" for i in results)
        assert [i.name.lower() for i in results] == sorted(i.name.lower() for i in results)

    def test_unfiltered_listing_is_alphabetical(self, conn):
        repo = LibraryRepository(conn)
        repo.seed(library_items())

        results = repo.search(plan_library_query())

        assert len(results) == len(library_items())
        assert results[0].name == "Back Squat"


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

class TestTemplateRepository:

    def _template(self, created_by="u1", category="Custom"):
        return WorkoutTemplate(
            name="Upper A",
            category=category,
            difficulty="Beginner",
            estimated_duration=40,
            created_by=created_by,
            exercises=[
                TemplateExercise("Row", "Strength", 3, "8-10", 90, target_weight=40, order=2),
                TemplateExercise("Bench", "Strength", 3, "5", 120, order=1),
            ],
        )

    def test_round_trip_keeps_exercise_order(self, conn):
        repo = TemplateRepository(conn)
        template = self._template()
        repo.add(template)

        loaded = repo.get(template.id)

        assert [e.name for e in loaded.exercises] == ["Bench", "Row"]
        assert loaded.exercises[1].target_weight == 40

    def test_count_and_category_filter(self, conn):
        repo = TemplateRepository(conn)
        repo.add(self._template())
        repo.add(self._template(category="Full Body"))
        repo.add(self._template(created_by="u2"))

        assert repo.count_for_user("u1") == 2
        assert len(repo.list_for_user("u1", "Full Body")) == 1

    def test_list_prebuilt_only_returns_shared_templates(self, conn):
        repo = TemplateRepository(conn)
        repo.add(self._template())
        shared = self._template(created_by=None)
        shared.is_prebuilt = True
        repo.add(shared)

        assert [t.id for t in repo.list_prebuilt()] == [shared.id]
