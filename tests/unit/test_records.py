"""
Unit tests for personal-record detection.

A record is judged on weight first (heaviest set) and on duration only
when nothing was weighed. It must strictly beat the best earlier value.
"""

from datetime import datetime, timedelta, timezone

from fittrack.core.workouts import ExerciseEntry, RecordDimension, SetRecord
from fittrack.core.workouts.records import best_records, detect_personal_record

START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def lift(weight, reps=5, name="Bench Press", days=0, user_id="u1"):
    return ExerciseEntry(
        user_id=user_id,
        name=name,
        category="Strength",
        sets=[SetRecord(reps=reps, weight=weight)],
        performed_at=START + timedelta(days=days),
    )


def timed(minutes, name="Running", days=0, weight=None):
    sets = [SetRecord(reps=1, weight=weight)] if weight is not None else []
    return ExerciseEntry(
        user_id="u1",
        name=name,
        category="Cardio",
        sets=sets,
        duration_minutes=minutes,
        performed_at=START + timedelta(days=days),
    )


class TestDetectPersonalRecord:

    def test_first_entry_is_always_a_record(self):
        """Given no history, when an entry is logged, then it's a weight PR."""
        check = detect_personal_record([], lift(60))

        assert check.is_new_pr
        assert check.dimension == RecordDimension.WEIGHT

    def test_heavier_weight_is_a_record(self):
        history = [lift(100), lift(90, days=1)]

        check = detect_personal_record(history, lift(102.5, days=2))

        assert check.is_new_pr
        assert check.dimension == RecordDimension.WEIGHT

    def test_equal_weight_is_not_a_record(self):
        """Ties don't count; the new value has to be strictly greater."""
        check = detect_personal_record([lift(100)], lift(100, days=1))

        assert not check.is_new_pr
        assert check.dimension == RecordDimension.WEIGHT

    def test_lighter_weight_is_not_a_record(self):
        check = detect_personal_record([lift(100)], lift(80, days=1))

        assert not check.is_new_pr

    def test_heaviest_set_is_what_counts(self):
        """An entry with one heavy set beats history even if other sets are light."""
        entry = ExerciseEntry(
            user_id="u1",
            name="Bench Press",
            category="Strength",
            sets=[SetRecord(reps=10, weight=60), SetRecord(reps=1, weight=105)],
            performed_at=START + timedelta(days=1),
        )

        assert detect_personal_record([lift(100)], entry).is_new_pr

    def test_other_exercises_are_ignored(self):
        history = [lift(200, name="Deadlift")]

        check = detect_personal_record(history, lift(100, days=1))

        assert check.is_new_pr

    def test_entry_itself_in_history_is_ignored(self):
        entry = lift(100)

        assert detect_personal_record([entry], entry).is_new_pr

    def test_longer_duration_is_a_time_record(self):
        check = detect_personal_record([timed(30)], timed(35, days=1))

        assert check.is_new_pr
        assert check.dimension == RecordDimension.TIME

    def test_shorter_duration_is_not_a_record(self):
        check = detect_personal_record([timed(30)], timed(25, days=1))

        assert not check.is_new_pr
        assert check.dimension == RecordDimension.TIME

    def test_weight_takes_priority_over_time(self):
        """A weighted entry with a duration is judged on weight only."""
        history = [timed(60, name="Sled Push", weight=100)]

        check = detect_personal_record(history, timed(90, name="Sled Push", weight=90, days=1))

        assert not check.is_new_pr
        assert check.dimension == RecordDimension.WEIGHT

    def test_first_weight_after_unweighted_history_is_a_record(self):
        """No prior weight at all means any weight is a record."""
        history = [lift(0, name="Pull-Up")]

        check = detect_personal_record(history, lift(10, name="Pull-Up", days=1))

        assert check.is_new_pr

    def test_unmeasurable_first_entry_is_a_record_without_dimension(self):
        entry = ExerciseEntry(
            user_id="u1", name="Push-Up", category="Strength", sets=[SetRecord(reps=20)]
        )

        check = detect_personal_record([], entry)

        assert check.is_new_pr
        assert check.dimension is None

    def test_unmeasurable_repeat_entry_is_not_a_record(self):
        first = ExerciseEntry(user_id="u1", name="Push-Up", category="Strength", sets=[SetRecord(reps=20)])
        second = ExerciseEntry(user_id="u1", name="Push-Up", category="Strength", sets=[SetRecord(reps=30)])

        assert not detect_personal_record([first], second).is_new_pr


class TestBestRecords:

    def test_best_weight_per_exercise(self):
        entries = [lift(100), lift(110, reps=3, days=1), lift(105, days=2)]

        records = best_records(entries)

        assert len(records) == 1
        record = records[0]
        assert record.value == 110
        assert record.reps == 3
        assert record.unit == "kg"
        assert record.performed_at == START + timedelta(days=1)

    def test_duration_used_when_nothing_weighed(self):
        records = best_records([timed(20), timed(45, days=1)])

        assert records[0].dimension == RecordDimension.TIME
        assert records[0].value == 45
        assert records[0].unit == "min"

    def test_unmeasurable_exercises_are_left_out(self):
        push_ups = ExerciseEntry(user_id="u1", name="Push-Up", category="Strength", sets=[SetRecord(reps=20)])

        assert best_records([push_ups]) == []

    def test_sorted_case_insensitively(self):
        entries = [lift(100, name="squat"), lift(50, name="Bench Press"), lift(150, name="Deadlift")]

        assert [r.name for r in best_records(entries)] == ["Bench Press", "Deadlift", "squat"]
