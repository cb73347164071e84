"""
Unit tests for exercise library search planning and the curated catalog.
"""

from fittrack.core.workouts.catalog import DIFFICULTY_LEVELS, library_items, prebuilt_templates
from fittrack.core.workouts.library import LibraryFilter, clamp_limit, plan_library_query


class TestPlanLibraryQuery:

    def test_search_wins_over_other_filters(self):
        query = plan_library_query(search="Bench", category="Strength", equipment="Barbell")

        assert query.filter == LibraryFilter.NAME_PREFIX
        assert query.value == "bench"

    def test_category_beats_difficulty_and_equipment(self):
        query = plan_library_query(category="Cardio", difficulty="Beginner", equipment="None")

        assert query.filter == LibraryFilter.CATEGORY
        assert query.value == "Cardio"

    def test_difficulty_beats_equipment(self):
        query = plan_library_query(difficulty="Advanced", equipment="Barbell")

        assert query.filter == LibraryFilter.DIFFICULTY

    def test_blank_search_is_ignored(self):
        query = plan_library_query(search="   ", equipment="Dumbbell")

        assert query.filter == LibraryFilter.EQUIPMENT

    def test_no_filters_lists_everything(self):
        query = plan_library_query()

        assert query.filter == LibraryFilter.NONE
        assert query.limit == 100

    def test_prefix_range_covers_names_starting_with_prefix(self):
        query = plan_library_query(search="squ")

        start, end = query.prefix_range

        assert start == "squ"
        assert end == "sqv"
        assert start <= "squat" < end
        assert not (start <= "sr" < end)


class TestClampLimit:

    def test_default_when_missing(self):
        assert clamp_limit(None) == 100

    def test_capped_at_maximum(self):
        assert clamp_limit(1000) == 200

    def test_at_least_one(self):
        assert clamp_limit(0) == 1
        assert clamp_limit(-5) == 1

    def test_custom_bounds(self):
        assert clamp_limit(None, default=20, maximum=50) == 20
        assert clamp_limit(60, default=20, maximum=50) == 50


class TestCatalog:

    def test_library_names_are_unique(self):
        names = [item.name for item in library_items()]

        assert len(names) == len(set(names))

    def test_library_difficulties_are_known(self):
        assert {item.difficulty for item in library_items()} <= set(DIFFICULTY_LEVELS)

    def test_prebuilt_templates_are_shared(self):
        templates = prebuilt_templates()

        assert templates
        assert all(t.is_prebuilt and t.created_by is None for t in templates)
