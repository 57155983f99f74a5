"""
tests/test_constraints.py — Hard and soft constraint checks on schedules.
"""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from snack_roster.constraints import (
    ConstraintChecker,
    ConstraintSeverity,
    ConstraintViolation,
)
from snack_roster.engine import calculate_fairness_metrics, generate_schedule


QUOTAS = {"food": 1, "drink": 1, "free": 1}


@pytest.fixture
def checker():
    return ConstraintChecker(["A", "B", "C"], QUOTAS)


def _record(day, food, drink, free):
    return {"date": day, "food_team": food, "drink_team": drink, "free_team": free}


class TestHardConstraints:

    def test_valid_schedule_clean(self, checker):
        schedule = [
            _record("2026-03-06", ["A"], ["B"], ["C"]),
            _record("2026-03-13", ["B"], ["C"], ["A"]),
        ]
        hard, _ = checker.check_all(schedule)
        assert hard == []

    def test_quota_mismatch(self, checker):
        schedule = [_record("2026-03-06", ["A", "B"], [], ["C"])]
        types = {v.constraint_type for v in checker.check_quotas(schedule)}
        assert types == {"QUOTA_MISMATCH"}
        assert len(checker.check_quotas(schedule)) == 2

    def test_double_booking(self, checker):
        schedule = [_record("2026-03-06", ["A"], ["A"], ["C"])]
        violations = checker.check_double_booking(schedule)
        assert len(violations) == 1
        assert violations[0].person == "A"
        assert violations[0].details["first_role"] == "food"

    def test_missing_and_unknown(self, checker):
        schedule = [_record("2026-03-06", ["A"], ["Z"], ["C"])]
        types = sorted(v.constraint_type for v in checker.check_membership(schedule))
        assert types == ["MISSING_PERSON", "UNKNOWN_PERSON"]

    def test_date_order(self, checker):
        schedule = [
            _record("2026-03-13", ["A"], ["B"], ["C"]),
            _record("2026-03-06", ["B"], ["C"], ["A"]),
        ]
        violations = checker.check_date_order(schedule)
        assert len(violations) == 1
        assert violations[0].date == "2026-03-06"

    def test_roster_dicts(self):
        roster = [{"name": "B", "index": 1}, {"name": "A", "index": 0}, {"name": "C", "index": 2}]
        checker = ConstraintChecker(roster, QUOTAS)
        assert checker.names == ["A", "B", "C"]

    def test_engine_output_clean(self):
        names = [f"P{i}" for i in range(15)]
        schedule, _ = generate_schedule(names, ["2026-03-06", "2026-03-13", "2026-03-20"], seed=1)
        hard, _ = ConstraintChecker(names).check_all(schedule)
        assert hard == []


class TestSoftConstraints:

    def test_role_spread_exceeded(self):
        checker = ConstraintChecker(["A", "B", "C"], QUOTAS, {"max_spread": 0})
        schedule = [_record("2026-03-06", ["A"], ["B"], ["C"])]
        _, soft = checker.check_all(schedule)
        assert {v.constraint_type for v in soft} == {"ROLE_SPREAD_EXCEEDED"}
        assert all(v.severity is ConstraintSeverity.SOFT for v in soft)

    def test_month_starvation(self, checker):
        schedule = [
            _record("2026-03-06", ["A"], ["B"], ["C"]),
            _record("2026-04-03", ["A"], ["C"], ["B"]),
        ]
        metrics = calculate_fairness_metrics(schedule, ["A", "B", "C"], roles=list(QUOTAS))
        violations = checker.check_month_starvation(metrics)
        assert sorted(v.person for v in violations) == ["B", "C"]
        assert violations[0].details["months"] == ["2026-03", "2026-04"]


class TestViolationFormat:

    def test_str(self):
        v = ConstraintViolation(
            severity=ConstraintSeverity.HARD,
            constraint_type="DOUBLE_BOOKING",
            description="A assigned to both food and drink",
            date="2026-03-06",
            person="A",
        )
        text = str(v)
        assert text.startswith("[HARD] DOUBLE_BOOKING")
        assert "date=2026-03-06" in text
        assert "person=A" in text
