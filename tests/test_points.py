from datetime import datetime, timedelta, timezone

from taskapp.modules.tasks.points import (
    DIFFICULTY_POINTS, elapsed_minutes, format_duration, points_for_difficulty
)

START = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestPointsForDifficulty:
    def test_table(self):
        assert points_for_difficulty("easy") == 25
        assert points_for_difficulty("medium") == 50
        assert points_for_difficulty("hard") == 75

    def test_case_and_whitespace_insensitive(self):
        assert points_for_difficulty(" Hard ") == 75

    def test_unknown_or_missing_is_zero(self):
        assert points_for_difficulty("legendary") == 0
        assert points_for_difficulty(None) == 0
        assert points_for_difficulty("") == 0

    def test_every_difficulty_is_a_positive_multiple_of_25(self):
        assert all(p > 0 and p % 25 == 0 for p in DIFFICULTY_POINTS.values())


class TestDuration:
    def test_whole_minutes_are_floored(self):
        assert elapsed_minutes(START, START + timedelta(minutes=10, seconds=59)) == 10

    def test_never_negative(self):
        assert elapsed_minutes(START, START - timedelta(minutes=5)) == 0

    def test_naive_timestamps_are_treated_as_utc(self):
        naive = START.replace(tzinfo=None)
        assert elapsed_minutes(naive, START + timedelta(minutes=3)) == 3

    def test_format(self):
        assert format_duration(START, START + timedelta(minutes=10)) == "10 minutes"
        assert format_duration(START, START) == "0 minutes"
