"""
views.py — Schedule slices for display: by week, by month, by person,
and the meeting that is "current" on a given day.
"""

from typing import Any, Dict, List, Optional

from snack_roster.calendar_utils import (
    DateLike,
    format_month_pt,
    month_value,
    parse_date,
)
from snack_roster.roster_config import ROLE_ORDER, team_key

Schedule = List[Dict[str, Any]]


def filter_by_week(schedule: Schedule, date_str: str) -> Schedule:
    if not date_str:
        return list(schedule)
    target = parse_date(date_str)
    return [r for r in schedule if parse_date(r["date"]) == target]


def filter_by_month(schedule: Schedule, month: str) -> Schedule:
    """month: 'YYYY-MM'."""
    if not month:
        return list(schedule)
    return [r for r in schedule if month_value(r["date"]) == month]


def month_options(schedule: Schedule) -> List[Dict[str, str]]:
    """Distinct months in schedule order: [{"value": "2026-02", "label": "Fevereiro de 2026"}]."""
    seen = set()
    options = []
    for record in schedule:
        value = month_value(record["date"])
        if value in seen:
            continue
        seen.add(value)
        options.append({"value": value, "label": format_month_pt(record["date"])})
    return options


def filter_by_person(
    schedule: Schedule,
    name: str,
    roles: Optional[List[str]] = None,
) -> List[Dict[str, str]]:
    """One entry per date: which role `name` has."""
    roles = roles or ROLE_ORDER
    out = []
    for record in schedule:
        for role in roles:
            if name in record.get(team_key(role), []):
                out.append({"date": record["date"], "role": role})
                break
    return out


def current_week(schedule: Schedule, today: DateLike) -> Optional[Dict[str, Any]]:
    """First record on or after today; the last record once all have passed."""
    if not schedule:
        return None
    today_d = parse_date(today)
    ordered = sorted(schedule, key=lambda r: parse_date(r["date"]))
    for record in ordered:
        if parse_date(record["date"]) >= today_d:
            return record
    return ordered[-1]
