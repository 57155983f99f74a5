"""
tests/test_calendar_utils.py — Weekly dates and pt-BR formatting.
"""

import sys
from datetime import date, datetime
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from snack_roster.calendar_utils import (
    days_label,
    days_until,
    format_date_pt,
    format_month_pt,
    get_weekly_dates,
    month_key,
    month_value,
    parse_date,
)


class TestWeeklyDates:

    def test_default_period(self):
        dates = get_weekly_dates("2026-02-20", "2026-07-03")
        assert len(dates) == 20
        assert dates[0] == date(2026, 2, 20)
        assert dates[-1] == date(2026, 7, 3)
        assert all(d.weekday() == 4 for d in dates)

    def test_start_mid_week(self):
        dates = get_weekly_dates(date(2026, 2, 21), date(2026, 3, 6))
        assert dates == [date(2026, 2, 27), date(2026, 3, 6)]

    def test_other_weekday(self):
        dates = get_weekly_dates(date(2026, 2, 20), date(2026, 3, 1), weekday=0)
        assert dates == [date(2026, 2, 23)]

    def test_empty_range(self):
        assert get_weekly_dates(date(2026, 2, 21), date(2026, 2, 26)) == []


class TestParsing:

    def test_parse_variants(self):
        assert parse_date("2026-02-20") == date(2026, 2, 20)
        assert parse_date("2026-02-20T10:00:00") == date(2026, 2, 20)
        assert parse_date(datetime(2026, 2, 20, 9)) == date(2026, 2, 20)

    def test_bad_string(self):
        with pytest.raises(ValueError):
            parse_date("20/02/2026")

    def test_month_helpers(self):
        assert month_key("2026-12-04") == (2026, 12)
        assert month_value(date(2026, 3, 6)) == "2026-03"


class TestFormatting:

    def test_format_date_pt(self):
        assert format_date_pt(date(2026, 2, 20)) == "20 de Fevereiro"
        assert format_date_pt("2026-03-06") == "6 de Março"

    def test_format_month_pt(self):
        assert format_month_pt("2026-07-03") == "Julho de 2026"

    @pytest.mark.parametrize("days,label", [
        (0, "Hoje é o dia! 🎉"),
        (1, "Falta 1 dia"),
        (5, "Faltam 5 dias"),
        (-1, "Foi ontem"),
        (-3, "Há 3 dias"),
    ])
    def test_days_label(self, days, label):
        assert days_label(days) == label

    def test_days_until(self):
        assert days_until("2026-02-20", "2026-02-17") == 3
        assert days_until("2026-02-20", "2026-02-21") == -1
