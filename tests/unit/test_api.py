"""
HTTP-level tests for the FastAPI app in mock mode.

Each test gets a fresh app and an empty in-memory database. Requests
authenticate with the API key plus the identity headers the frontend
forwards after sign-in.
"""

import pytest
from fastapi.testclient import TestClient

from fittrack.api.dependencies import get_mock_connection, reset_mock_connection
from fittrack.config.settings import get_settings
from fittrack.core.workouts import Role
from fittrack.infrastructure.snowflake.repositories import UserRepository
from fittrack.main import create_app

API_KEY = "test-key"


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("SNOWFLAKE_MOCK_MODE", "true")
    monkeypatch.setenv("API_KEYS", API_KEY)
    monkeypatch.setenv("STATS_TIMEZONE", "UTC")
    get_settings.cache_clear()
    reset_mock_connection()

    with TestClient(create_app()) as test_client:
        yield test_client

    get_settings.cache_clear()
    reset_mock_connection()


def auth(email="lifter@example.com", user_id="user_lifter"):
    return {"X-API-Key": API_KEY, "X-User-Id": user_id, "X-User-Email": email}


OTHER = auth("other@example.com", "user_other")


def log(client, headers=None, **overrides):
    body = {
        "name": "Bench Press",
        "category": "Strength",
        "sets_data": [{"reps": 5, "weight": 100}],
        "performed_at": "2024-03-05T09:00:00Z",
    }
    body.update(overrides)
    return client.post("/api/v1/exercises", json=body, headers=headers or auth())


def template_body(name="Push A"):
    return {
        "name": name,
        "category": "Custom",
        "estimated_duration": 45,
        "exercises": [
            {"name": "Bench Press", "category": "Strength", "target_sets": 3,
             "target_reps": "8-10", "target_weight": 60, "order": 1},
            {"name": "Dips", "category": "Strength", "target_sets": 2,
             "target_reps": "AMRAP", "order": 2},
        ],
    }


# ---------------------------------------------------------------------------
# Health and Auth
# ---------------------------------------------------------------------------

class TestHealth:

    def test_liveness(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_readiness_in_mock_mode(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"


class TestAuth:

    def test_missing_api_key_is_forbidden(self, client):
        headers = {"X-User-Id": "user_lifter", "X-User-Email": "lifter@example.com"}

        response = client.get("/api/v1/exercises", headers=headers)

        assert response.status_code == 403

    def test_wrong_api_key_is_forbidden(self, client):
        response = client.get("/api/v1/exercises", headers={**auth(), "X-API-Key": "nope"})

        assert response.status_code == 403

    def test_missing_identity_is_unauthorized(self, client):
        response = client.get("/api/v1/exercises", headers={"X-API-Key": API_KEY})

        assert response.status_code == 401

    def test_first_request_creates_user(self, client):
        response = client.get("/api/v1/users/me", headers=auth("New@Example.com"))

        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "new@example.com"
        assert body["subscription_tier"] == "free"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class TestUsers:

    def test_update_profile(self, client):
        response = client.put(
            "/api/v1/users/me/profile",
            json={"first_name": "Sam", "last_name": "Lee", "age": 31, "weight": 72.5},
            headers=auth(),
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Sam Lee"
        assert client.get("/api/v1/users/me", headers=auth()).json()["age"] == 31

    def test_invalid_profile_is_rejected(self, client):
        response = client.put(
            "/api/v1/users/me/profile",
            json={"first_name": "Sam", "age": -1},
            headers=auth(),
        )

        assert response.status_code == 400

    def test_sync_creates_then_updates(self, client):
        body = {"clerk_user_id": "user_9", "email": "sync@example.com", "name": "Sync"}

        created = client.post("/api/v1/users/sync", json=body, headers={"X-API-Key": API_KEY})
        updated = client.post(
            "/api/v1/users/sync",
            json={**body, "name": "Renamed"},
            headers={"X-API-Key": API_KEY},
        )

        assert created.status_code == 200
        assert updated.json()["id"] == created.json()["id"]
        assert updated.json()["name"] == "Renamed"


# ---------------------------------------------------------------------------
# Exercises
# ---------------------------------------------------------------------------

class TestExercises:

    def test_log_reports_first_record(self, client):
        response = log(client)

        assert response.status_code == 201
        body = response.json()
        assert body["is_new_pr"] is True
        assert body["pr_type"] == "weight"
        assert body["is_new_entry"] is True
        assert body["entry"]["total_volume"] == 500

    def test_flat_form_expands_to_sets(self, client):
        response = log(client, sets_data=None, sets=3, reps=5, weight=60)

        entry = response.json()["entry"]
        assert entry["set_count"] == 3
        assert entry["sets_data"][0] == {"reps": 5, "weight": 60.0, "notes": None}

    def test_same_day_log_adds_sets(self, client):
        log(client)

        response = log(client, sets_data=[{"reps": 3, "weight": 110}], performed_at="2024-03-05T18:00:00Z")

        body = response.json()
        assert body["is_new_entry"] is False
        assert body["is_new_pr"] is True
        assert body["entry"]["set_count"] == 2
        assert len(client.get("/api/v1/exercises", headers=auth()).json()) == 1

    def test_lighter_day_is_not_a_record(self, client):
        log(client)

        response = log(client, sets_data=[{"reps": 5, "weight": 90}], performed_at="2024-03-06T09:00:00Z")

        assert response.json()["is_new_pr"] is False

    def test_cardio_with_duration_only(self, client):
        response = log(client, name="Running", category="Cardio", sets_data=None, duration_minutes=30)

        assert response.status_code == 201
        assert response.json()["pr_type"] == "time"

    def test_nothing_to_log_is_rejected(self, client):
        response = log(client, sets_data=None)

        assert response.status_code == 400

    def test_other_users_entry_is_not_found(self, client):
        entry_id = log(client).json()["entry"]["id"]

        response = client.get(f"/api/v1/exercises/{entry_id}", headers=OTHER)

        assert response.status_code == 404
        assert response.json()["detail"] == "Exercise not found or unauthorized"

    def test_edit_and_delete(self, client):
        entry_id = log(client).json()["entry"]["id"]

        patched = client.patch(
            f"/api/v1/exercises/{entry_id}",
            json={"notes": "felt heavy", "sets_data": [{"reps": 4, "weight": 100}]},
            headers=auth(),
        )
        deleted = client.delete(f"/api/v1/exercises/{entry_id}", headers=auth())

        assert patched.status_code == 200
        assert patched.json()["notes"] == "felt heavy"
        assert patched.json()["total_reps"] == 4
        assert deleted.status_code == 204
        assert client.get(f"/api/v1/exercises/{entry_id}", headers=auth()).status_code == 404

    def test_changing_weight_alone_is_rejected(self, client):
        entry_id = log(client).json()["entry"]["id"]

        response = client.patch(f"/api/v1/exercises/{entry_id}", json={"weight": 120}, headers=auth())

        assert response.status_code == 400

    def test_filtered_sorts_by_volume(self, client):
        log(client)
        log(client, name="Squat", sets_data=[{"reps": 5, "weight": 140}], performed_at="2024-03-06T09:00:00Z")
        log(client, name="Running", category="Cardio", sets_data=None, duration_minutes=20)

        response = client.get(
            "/api/v1/exercises/filtered",
            params={"category": "Strength", "sort_by": "weight"},
            headers=auth(),
        )

        assert [e["name"] for e in response.json()] == ["Squat", "Bench Press"]

    def test_names_and_by_date(self, client):
        log(client)
        log(client, name="Squat", performed_at="2024-03-06T09:00:00Z")

        names = client.get("/api/v1/exercises/names", headers=auth()).json()
        on_day = client.get("/api/v1/exercises/by-date/2024-03-06", headers=auth()).json()

        assert names == ["Bench Press", "Squat"]
        assert [e["name"] for e in on_day] == ["Squat"]

    def test_compare_two_days(self, client):
        log(client)
        log(client, sets_data=[{"reps": 5, "weight": 110}], performed_at="2024-03-12T09:00:00Z")

        response = client.get(
            "/api/v1/exercises/compare",
            params={"name": "Bench Press", "first_date": "2024-03-05", "second_date": "2024-03-12"},
            headers=auth(),
        )

        body = response.json()
        assert body["first"]["found"] is True
        assert body["delta"]["max_weight"] == 10
        assert body["delta"]["total_volume"] == 50


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

class TestStats:

    def test_summary_records_and_progress(self, client):
        log(client)
        log(client, sets_data=[{"reps": 5, "weight": 110}], performed_at="2024-03-07T09:00:00Z")

        summary = client.get("/api/v1/stats/summary", headers=auth()).json()
        records = client.get("/api/v1/stats/records", headers=auth()).json()
        progress = client.get("/api/v1/stats/progress", params={"name": "Bench Press"}, headers=auth()).json()

        assert summary["total_workouts"] == 2
        assert summary["total_volume"] == 1050
        assert records[0]["value"] == 110
        assert records[0]["unit"] == "kg"
        assert progress["mode"] == "volume"
        assert [p["label"] for p in progress["points"]] == ["Mar 05", "Mar 07"]

    def test_stats_are_per_user(self, client):
        log(client)

        summary = client.get("/api/v1/stats/summary", headers=OTHER).json()

        assert summary["total_workouts"] == 0


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------

class TestLibrary:

    def test_seed_then_search(self, client):
        seeded = client.post("/api/v1/library/seed", headers={"X-API-Key": API_KEY})

        results = client.get("/api/v1/library", params={"search": "back"}, headers=auth())

        assert seeded.json()["added"] > 0
        assert [i["name"] for i in results.json()] == ["Back Squat"]

    def test_seed_again_adds_nothing(self, client):
        client.post("/api/v1/library/seed", headers={"X-API-Key": API_KEY})

        response = client.post("/api/v1/library/seed", headers={"X-API-Key": API_KEY})

        assert response.json()["added"] == 0

    def test_limit_is_applied(self, client):
        client.post("/api/v1/library/seed", headers={"X-API-Key": API_KEY})

        response = client.get("/api/v1/library", params={"limit": 2}, headers=auth())

        assert len(response.json()) == 2


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

class TestTemplates:

    def test_free_user_limit(self, client):
        for i in range(3):
            assert client.post("/api/v1/templates", json=template_body(f"T{i}"), headers=auth()).status_code == 201

        response = client.post("/api/v1/templates", json=template_body("T3"), headers=auth())

        assert response.status_code == 403
        assert "Upgrade" in response.json()["detail"]
        assert client.get("/api/v1/templates/count", headers=auth()).json()["count"] == 3

    def test_other_user_cannot_see_or_edit(self, client):
        template_id = client.post("/api/v1/templates", json=template_body(), headers=auth()).json()["id"]

        seen = client.get(f"/api/v1/templates/{template_id}", headers=OTHER)
        edited = client.patch(f"/api/v1/templates/{template_id}", json={"name": "Mine"}, headers=OTHER)

        assert seen.status_code == 404
        assert edited.status_code == 403

    def test_update_and_delete(self, client):
        template_id = client.post("/api/v1/templates", json=template_body(), headers=auth()).json()["id"]

        updated = client.patch(f"/api/v1/templates/{template_id}", json={"name": "Push B"}, headers=auth())
        deleted = client.delete(f"/api/v1/templates/{template_id}", headers=auth())

        assert updated.json()["name"] == "Push B"
        assert deleted.status_code == 204
        assert client.get(f"/api/v1/templates/{template_id}", headers=auth()).status_code == 404

    def test_log_template(self, client):
        template_id = client.post("/api/v1/templates", json=template_body(), headers=auth()).json()["id"]

        response = client.post(f"/api/v1/templates/{template_id}/log", headers=auth())

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == 'Logged 2 exercises from template "Push A"'
        assert body["template"]["usage_count"] == 1
        assert body["entries"][0]["sets_data"][0]["reps"] == 8
        assert len(client.get("/api/v1/exercises", headers=auth()).json()) == 2

    def test_usage_tracking_and_stats(self, client):
        template_id = client.post("/api/v1/templates", json=template_body(), headers=auth()).json()["id"]

        client.post(f"/api/v1/templates/{template_id}/usage", headers=auth())
        stats = client.get("/api/v1/templates/stats", headers=auth()).json()

        assert stats == {"total_templates": 1, "total_usage": 1}

    def test_prebuilt_are_shared_and_read_only(self, client):
        client.post("/api/v1/templates/prebuilt/seed", headers={"X-API-Key": API_KEY})
        prebuilt = client.get("/api/v1/templates/prebuilt", headers=auth()).json()
        template_id = prebuilt[0]["id"]

        response = client.delete(f"/api/v1/templates/{template_id}", headers=auth())

        assert prebuilt
        assert all(t["is_prebuilt"] for t in prebuilt)
        assert response.status_code == 403
        assert client.post(f"/api/v1/templates/{template_id}/log", headers=OTHER).status_code == 201


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------

class TestSubscriptions:

    def test_free_user_limits(self, client):
        body = client.get("/api/v1/subscriptions/me", headers=auth()).json()

        assert body["tier"] == "free"
        assert body["has_premium_access"] is False
        assert body["limits"]["templates_count"] == 3

    def test_trial_once(self, client):
        first = client.post("/api/v1/subscriptions/trial", headers=auth())
        second = client.post("/api/v1/subscriptions/trial", headers=auth())

        assert first.status_code == 200
        assert first.json()["status"] == "trial"
        assert first.json()["has_premium_access"] is True
        assert second.status_code == 409

    def test_premium_lifts_template_limit(self, client):
        client.post("/api/v1/subscriptions/upgrade", json={"tier": "premium"}, headers=auth())

        for i in range(4):
            response = client.post("/api/v1/templates", json=template_body(f"T{i}"), headers=auth())
            assert response.status_code == 201

    def test_upgrade_to_free_is_rejected(self, client):
        response = client.post("/api/v1/subscriptions/upgrade", json={"tier": "free"}, headers=auth())

        assert response.status_code == 400

    def test_webhook_expiry_downgrades(self, client):
        client.post(
            "/api/v1/subscriptions/upgrade",
            json={"tier": "pro", "customer_id": "cus_1"},
            headers=auth(),
        )

        response = client.post(
            "/api/v1/subscriptions/webhook",
            json={"customer_id": "cus_1", "status": "expired"},
            headers={"X-API-Key": API_KEY},
        )

        assert response.json()["tier"] == "free"
        assert client.get("/api/v1/subscriptions/me", headers=auth()).json()["status"] == "expired"

    def test_webhook_for_unknown_customer(self, client):
        response = client.post(
            "/api/v1/subscriptions/webhook",
            json={"customer_id": "cus_missing", "status": "active"},
            headers={"X-API-Key": API_KEY},
        )

        assert response.status_code == 404

    def test_stats_require_admin(self, client):
        assert client.get("/api/v1/subscriptions/stats", headers=auth()).status_code == 403

        users = UserRepository(get_mock_connection())
        admin = users.get_by_email("lifter@example.com")
        admin.role = Role.ADMIN
        users.save(admin)

        response = client.get("/api/v1/subscriptions/stats", headers=auth())

        assert response.status_code == 200
        assert response.json()["total"] == 1


# ---------------------------------------------------------------------------
# Partial Updates
# ---------------------------------------------------------------------------

class TestPartialUpdates:
    """Rejected edits answer 400 (or 422) and leave the stored row as it was."""

    @pytest.mark.parametrize("body", [
        {"difficulty": None},
        {"estimated_duration": None},
        {"name": None},
        {"exercises": None},
    ])
    def test_null_template_fields_are_rejected(self, client, body):
        template_id = client.post("/api/v1/templates", json=template_body(), headers=auth()).json()["id"]

        response = client.patch(f"/api/v1/templates/{template_id}", json=body, headers=auth())

        assert response.status_code == 400
        stored = client.get(f"/api/v1/templates/{template_id}", headers=auth())
        assert stored.status_code == 200
        assert stored.json()["difficulty"] == "Beginner"
        assert stored.json()["estimated_duration"] == 45
        assert len(client.get("/api/v1/templates", headers=auth()).json()) == 1

    def test_wrong_type_on_template_is_rejected(self, client):
        template_id = client.post("/api/v1/templates", json=template_body(), headers=auth()).json()["id"]

        response = client.patch(
            f"/api/v1/templates/{template_id}",
            json={"estimated_duration": "long"},
            headers=auth(),
        )

        assert response.status_code == 422
        assert client.get(f"/api/v1/templates/{template_id}", headers=auth()).json()["estimated_duration"] == 45

    def test_description_can_be_cleared(self, client):
        body = {**template_body(), "description": "Chest day"}
        template_id = client.post("/api/v1/templates", json=body, headers=auth()).json()["id"]

        response = client.patch(f"/api/v1/templates/{template_id}", json={"description": None}, headers=auth())

        assert response.status_code == 200
        assert response.json()["description"] is None

    @pytest.mark.parametrize("body", [
        {"performed_at": None},
        {"name": None},
        {"category": None},
    ])
    def test_null_exercise_fields_are_rejected(self, client, body):
        entry_id = log(client).json()["entry"]["id"]

        response = client.patch(f"/api/v1/exercises/{entry_id}", json=body, headers=auth())

        assert response.status_code == 400
        stored = client.get(f"/api/v1/exercises/{entry_id}", headers=auth()).json()
        assert stored["name"] == "Bench Press"
        assert stored["category"] == "Strength"
        assert stored["performed_at"].startswith("2024-03-05T09:00:00")

    def test_wrong_type_on_exercise_is_rejected(self, client):
        entry_id = log(client).json()["entry"]["id"]

        response = client.patch(
            f"/api/v1/exercises/{entry_id}",
            json={"duration_minutes": "forever"},
            headers=auth(),
        )

        assert response.status_code == 422
        assert client.get(f"/api/v1/exercises/{entry_id}", headers=auth()).json()["duration_minutes"] is None

    def test_notes_can_be_cleared(self, client):
        entry_id = log(client, notes="felt heavy").json()["entry"]["id"]

        response = client.patch(f"/api/v1/exercises/{entry_id}", json={"notes": None}, headers=auth())

        assert response.status_code == 200
        assert response.json()["notes"] is None


class TestFilteredDateRange:

    def test_end_date_covers_the_whole_day(self, client):
        log(client)

        response = client.get(
            "/api/v1/exercises/filtered",
            params={"start_date": "2024-03-05", "end_date": "2024-03-05"},
            headers=auth(),
        )

        assert [e["name"] for e in response.json()] == ["Bench Press"]

    def test_entries_after_end_date_are_excluded(self, client):
        log(client, performed_at="2024-03-06T00:30:00Z")

        response = client.get("/api/v1/exercises/filtered", params={"end_date": "2024-03-05"}, headers=auth())

        assert response.json() == []


class TestReadinessFailure:

    def test_unreachable_database_reports_503(self, client, monkeypatch):
        """Without mock mode or credentials, connecting fails inside the check."""
        monkeypatch.setenv("SNOWFLAKE_MOCK_MODE", "false")
        for key in ("SNOWFLAKE_ACCOUNT", "SNOWFLAKE_USER", "SNOWFLAKE_PASSWORD", "SNOWFLAKE_PRIVATE_KEY_PATH"):
            monkeypatch.delenv(key, raising=False)
        get_settings.cache_clear()

        response = client.get("/health/ready")

        assert response.status_code == 503
        checks = {c["name"]: c["status"] for c in response.json()["checks"]}
        assert checks == {"configuration": "error", "database": "error"}
