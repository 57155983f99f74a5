"""
tests/test_views.py — Week / month / person slices and the current meeting.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from snack_roster.views import (
    current_week,
    filter_by_month,
    filter_by_person,
    filter_by_week,
    month_options,
)


@pytest.fixture
def schedule():
    return [
        {"date": "2026-02-20", "food_team": ["Ana"], "drink_team": ["Bruno"], "free_team": ["Carla"]},
        {"date": "2026-02-27", "food_team": ["Bruno"], "drink_team": ["Carla"], "free_team": ["Ana"]},
        {"date": "2026-03-06", "food_team": ["Carla"], "drink_team": ["Ana"], "free_team": ["Bruno"]},
    ]


class TestFilters:

    def test_by_week(self, schedule):
        assert filter_by_week(schedule, "2026-02-27") == [schedule[1]]
        assert filter_by_week(schedule, "2026-02-28") == []
        assert filter_by_week(schedule, "") == schedule

    def test_by_month(self, schedule):
        assert filter_by_month(schedule, "2026-02") == schedule[:2]
        assert filter_by_month(schedule, "2026-04") == []
        assert filter_by_month(schedule, "") == schedule

    def test_month_options(self, schedule):
        assert month_options(schedule) == [
            {"value": "2026-02", "label": "Fevereiro de 2026"},
            {"value": "2026-03", "label": "Março de 2026"},
        ]

    def test_by_person(self, schedule):
        assert filter_by_person(schedule, "Ana") == [
            {"date": "2026-02-20", "role": "food"},
            {"date": "2026-02-27", "role": "free"},
            {"date": "2026-03-06", "role": "drink"},
        ]
        assert filter_by_person(schedule, "Zé") == []


class TestCurrentWeek:

    def test_on_meeting_day(self, schedule):
        assert current_week(schedule, "2026-02-27") == schedule[1]

    def test_between_meetings(self, schedule):
        assert current_week(schedule, date(2026, 2, 21)) == schedule[1]

    def test_after_last(self, schedule):
        assert current_week(schedule, "2026-12-01") == schedule[2]

    def test_unsorted_input(self, schedule):
        shuffled = [schedule[2], schedule[0], schedule[1]]
        assert current_week(shuffled, "2026-12-01") == schedule[2]
        assert current_week(shuffled, "2026-01-01") == schedule[0]

    def test_empty(self):
        assert current_week([], "2026-02-20") is None
