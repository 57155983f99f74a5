"""
calendar_utils.py — Weekly date enumeration and pt-BR date formatting.

The engine only consumes an ordered list of dates; this module produces it
(one meeting per week on a fixed weekday) and formats dates for display.
"""

from datetime import date, datetime, timedelta
from typing import List, Tuple, Union

DateLike = Union[date, datetime, str]

MONTHS_PT = [
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
]


def parse_date(value: DateLike) -> date:
    """Accept a date, a datetime or an ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()


def get_weekly_dates(start: DateLike, end: DateLike, weekday: int = 4) -> List[date]:
    """
    Return every `weekday` (Monday=0 … Sunday=6) in [start, end], inclusive.
    The first date is the first matching weekday on or after start.
    """
    start_d = parse_date(start)
    end_d = parse_date(end)
    out = []
    d = start_d + timedelta(days=(weekday - start_d.weekday()) % 7)
    while d <= end_d:
        out.append(d)
        d += timedelta(days=7)
    return out


def month_key(d: DateLike) -> Tuple[int, int]:
    d = parse_date(d)
    return d.year, d.month


def month_value(d: DateLike) -> str:
    """'YYYY-MM' form used by month filters."""
    year, month = month_key(d)
    return f"{year}-{month:02d}"


def format_date_pt(d: DateLike) -> str:
    """e.g. '20 de Fevereiro'."""
    d = parse_date(d)
    return f"{d.day} de {MONTHS_PT[d.month - 1]}"


def format_month_pt(d: DateLike) -> str:
    """e.g. 'Fevereiro de 2026'."""
    d = parse_date(d)
    return f"{MONTHS_PT[d.month - 1]} de {d.year}"


def days_until(d: DateLike, today: DateLike) -> int:
    return (parse_date(d) - parse_date(today)).days


def days_label(days: int) -> str:
    """Countdown label shown next to the current week's meeting."""
    if days == 0:
        return "Hoje é o dia! 🎉"
    if days == 1:
        return "Falta 1 dia"
    if days > 1:
        return f"Faltam {days} dias"
    if days == -1:
        return "Foi ontem"
    return f"Há {abs(days)} dias"
