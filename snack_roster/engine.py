"""
engine.py — Fairness Engine for the Weekly Snack Roster

Core algorithm: deficit-priority greedy with a monthly reset.
Supports:
  - Hunger score (weeks in a row without the preferred role)
  - Global deficit against the ideal fair share so far
  - Monthly bonus / month-miss penalty (nobody skips 'food' two months running)
  - Bounded random jitter for tie-breaks (seedable, injected RNG)
  - Swappable strategies behind one contract ("priority", "hill_climb")

Algorithm (per date, strictly in input order):
  1. Month changed?  → everyone with 0 preferred this month: hunger += penalty.
                       Reset monthly counters.
  2. Preferred role:   score = hunger×Wh + (ideal − count)×Wd + bonus + jitter.
                       Top quota win.
  3. Middle roles:     score = (ideal − count)×Wd + jitter among the rest.
  4. Last role:        everyone left.
  5. Counters:         preferred → count+1, month+1, hunger=0.
                       others    → count+1, hunger+1.

State lives in a FairnessState value owned by one generate call; each step
takes a state and returns a new one.

See roster_config.py for quotas and tuning constants.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from snack_roster.calendar_utils import DateLike, month_key, month_value, parse_date
from snack_roster.errors import ConfigurationError, InputOrderError
from snack_roster.roster_config import (
    DEFAULT_QUOTAS,
    DEFAULT_STRATEGY,
    ENGINE_TUNING,
    ROLE_ORDER,
    team_key,
)

logger = logging.getLogger(__name__)

# Type aliases
Record = Dict[str, Any]                      # {"date", "food_team", "drink_team", "free_team"}
Schedule = List[Record]
Counters = Dict[str, Dict[str, int]]         # name → {role: count, ...}
RosterLike = Sequence[Union[str, Dict[str, Any]]]


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def _names(roster: RosterLike) -> List[str]:
    """Accept plain names or roster dicts (sorted by 'index' when present)."""
    if roster and isinstance(roster[0], dict):
        people = sorted(roster, key=lambda p: p.get("index", 0))
        return [p["name"] for p in people]
    return list(roster)


def _score_resolution(tuning: Dict[str, Any]) -> Optional[int]:
    """
    Smallest non-zero gap between two achievable scores, or None when the
    weights are not all integers (no exact gap exists).
    """
    parts = [
        tuning["hunger_weight"],
        tuning["deficit_weight"],
        tuning["month_zero_bonus"],
    ]
    if not all(float(p).is_integer() for p in parts):
        return None
    if not float(tuning["month_miss_penalty"]).is_integer():
        return None
    gap = 0
    for p in parts:
        gap = math.gcd(gap, abs(int(p)))
    return gap or None


def validate_inputs(
    roster: RosterLike,
    dates: Iterable[DateLike],
    quotas: Dict[str, int],
    tuning: Optional[Dict[str, Any]] = None,
) -> Tuple[List[str], List[date]]:
    """
    Check roster, quotas, tuning and date order before any state exists.

    Returns:
        (names, parsed_dates)

    Raises:
        ConfigurationError: bad roster / quota / tuning combination.
        InputOrderError:    dates not in non-decreasing order.
    """
    tuning = {**ENGINE_TUNING, **(tuning or {})}
    names = _names(roster)
    size = len(names)

    if size == 0:
        raise ConfigurationError("Roster is empty")

    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise ConfigurationError(f"Duplicate names in roster: {dupes}")

    if len(quotas) < 2:
        raise ConfigurationError(
            f"Need at least 2 roles (preferred + remainder); got {list(quotas)}"
        )

    for role, quota in quotas.items():
        if quota < 0:
            raise ConfigurationError(f"Quota for '{role}' is negative: {quota}")
        if quota > size:
            raise ConfigurationError(
                f"Quota for '{role}' ({quota}) exceeds roster size ({size})"
            )

    total = sum(quotas.values())
    if total != size:
        raise ConfigurationError(
            f"Role quotas sum to {total} but roster has {size} people: {quotas}"
        )

    jitter = tuning["jitter"]
    if jitter < 0:
        raise ConfigurationError(f"jitter must be ≥ 0, got {jitter}")
    resolution = _score_resolution(tuning)
    if resolution is None:
        logger.warning("Non-integer score weights: jitter bound cannot be checked exactly")
    elif jitter > resolution:
        raise ConfigurationError(
            f"jitter={jitter} exceeds score resolution {resolution}; "
            "tie-breaks would reorder distinct scores"
        )

    parsed: List[date] = []
    for i, raw in enumerate(dates):
        d = parse_date(raw)
        if parsed and d < parsed[-1]:
            raise InputOrderError(i, parsed[-1].isoformat(), d.isoformat())
        parsed.append(d)

    return names, parsed


# ---------------------------------------------------------------------------
# Fairness state
# ---------------------------------------------------------------------------

@dataclass
class FairnessState:
    """Running per-person counters for one generate call."""

    names: List[str]
    roles: List[str]
    role_counts: Dict[str, Dict[str, int]] = field(default_factory=dict)
    month_counts: Dict[str, int] = field(default_factory=dict)
    hunger: Dict[str, int] = field(default_factory=dict)
    dates_processed: int = 0
    current_month: Optional[Tuple[int, int]] = None

    @classmethod
    def new(cls, names: Sequence[str], roles: Sequence[str]) -> "FairnessState":
        return cls(
            names=list(names),
            roles=list(roles),
            role_counts={n: {r: 0 for r in roles} for n in names},
            month_counts={n: 0 for n in names},
            hunger={n: 0 for n in names},
        )

    @property
    def preferred_role(self) -> str:
        return self.roles[0]

    def copy(self) -> "FairnessState":
        return FairnessState(
            names=list(self.names),
            roles=list(self.roles),
            role_counts={n: dict(c) for n, c in self.role_counts.items()},
            month_counts=dict(self.month_counts),
            hunger=dict(self.hunger),
            dates_processed=self.dates_processed,
            current_month=self.current_month,
        )

    def snapshot(self) -> Counters:
        """Diagnostics: lifetime role counts plus hunger and monthly counter."""
        out: Counters = {}
        for name in self.names:
            row = dict(self.role_counts[name])
            row["hunger"] = self.hunger[name]
            row[f"month_{self.preferred_role}"] = self.month_counts[name]
            out[name] = row
        return out


# ---------------------------------------------------------------------------
# Per-date steps
# ---------------------------------------------------------------------------

def _roll_month(state: FairnessState, day: date, tuning: Dict[str, Any]) -> None:
    key = month_key(day)
    if key == state.current_month:
        return
    if state.current_month is not None:
        penalty = tuning["month_miss_penalty"]
        missed = [n for n in state.names if state.month_counts[n] == 0]
        for name in missed:
            state.hunger[name] += penalty
        if missed:
            logger.debug(
                f"Month {key[0]}-{key[1]:02d}: {len(missed)} missed "
                f"'{state.preferred_role}' last month, hunger +{penalty}: {missed}"
            )
        state.month_counts = {n: 0 for n in state.names}
    state.current_month = key


def start_month(
    state: FairnessState,
    day: DateLike,
    tuning: Optional[Dict[str, Any]] = None,
) -> FairnessState:
    """Apply the month-boundary rule for `day`; returns a new state."""
    new = state.copy()
    _roll_month(new, parse_date(day), {**ENGINE_TUNING, **(tuning or {})})
    return new


def _ideal(dates_processed: int, quota: int, roster_size: int) -> float:
    return dates_processed * quota / roster_size


def _preferred_scores(
    state: FairnessState,
    candidates: List[str],
    quota: int,
    rng: random.Random,
    tuning: Dict[str, Any],
) -> Dict[str, float]:
    role = state.preferred_role
    ideal = _ideal(state.dates_processed + 1, quota, len(state.names))
    scores: Dict[str, float] = {}
    for name in candidates:
        score = state.hunger[name] * tuning["hunger_weight"]
        score += (ideal - state.role_counts[name][role]) * tuning["deficit_weight"]
        if state.month_counts[name] == 0:
            score += tuning["month_zero_bonus"]
        score += rng.random() * tuning["jitter"]
        scores[name] = score
    return scores


def _deficit_scores(
    state: FairnessState,
    candidates: List[str],
    role: str,
    quota: int,
    rng: random.Random,
    tuning: Dict[str, Any],
) -> Dict[str, float]:
    ideal = _ideal(state.dates_processed + 1, quota, len(state.names))
    return {
        name: (ideal - state.role_counts[name][role]) * tuning["deficit_weight"]
        + rng.random() * tuning["jitter"]
        for name in candidates
    }


def _top(scores: Dict[str, float], k: int) -> List[str]:
    ranked = sorted(scores, key=lambda n: scores[n], reverse=True)
    return ranked[:k]


def assign_date(
    state: FairnessState,
    day: DateLike,
    quotas: Dict[str, int],
    rng: random.Random,
    tuning: Optional[Dict[str, Any]] = None,
) -> Tuple[Record, FairnessState]:
    """
    Assign every person a role for one date.

    Returns:
        (record, new_state)
        record: {"date": "YYYY-MM-DD", "<role>_team": [names in roster order], ...}
    """
    tuning = {**ENGINE_TUNING, **(tuning or {})}
    day = parse_date(day)
    new = state.copy()
    _roll_month(new, day, tuning)

    roles = new.roles
    preferred = roles[0]
    remaining = list(new.names)
    groups: Dict[str, List[str]] = {}

    scores = _preferred_scores(new, remaining, quotas[preferred], rng, tuning)
    groups[preferred] = _top(scores, quotas[preferred])
    chosen = set(groups[preferred])
    remaining = [n for n in remaining if n not in chosen]

    for role in roles[1:-1]:
        scores = _deficit_scores(new, remaining, role, quotas[role], rng, tuning)
        groups[role] = _top(scores, quotas[role])
        chosen = set(groups[role])
        remaining = [n for n in remaining if n not in chosen]

    groups[roles[-1]] = remaining

    new.dates_processed += 1
    for role, members in groups.items():
        for name in members:
            new.role_counts[name][role] += 1
            if role == preferred:
                new.month_counts[name] += 1
                new.hunger[name] = 0
            else:
                new.hunger[name] += 1

    record: Record = {"date": day.isoformat()}
    for role in roles:
        members = set(groups[role])
        record[team_key(role)] = [n for n in new.names if n in members]

    logger.debug(f"{record['date']} → " + ", ".join(
        f"{role}={len(groups[role])}" for role in roles
    ))
    return record, new


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

class PriorityStrategy:
    """Deficit-priority greedy with monthly reset (default strategy)."""

    name = "priority"

    def __init__(self, tuning: Optional[Dict[str, Any]] = None):
        self.tuning = {**ENGINE_TUNING, **(tuning or {})}

    def generate(
        self,
        names: List[str],
        dates: List[date],
        quotas: Dict[str, int],
        rng: random.Random,
    ) -> Tuple[Schedule, Counters]:
        state = FairnessState.new(names, list(quotas))
        schedule: Schedule = []
        for day in dates:
            record, state = assign_date(state, day, quotas, rng, self.tuning)
            schedule.append(record)
        return schedule, state.snapshot()


STRATEGIES: List[str] = ["priority", "hill_climb"]


def get_strategy(name: str, tuning: Optional[Dict[str, Any]] = None):
    """Instantiate a strategy by registry name."""
    if name == "priority":
        return PriorityStrategy(tuning)
    if name == "hill_climb":
        from snack_roster.hill_climb import HillClimbStrategy
        return HillClimbStrategy(tuning=tuning)
    raise ConfigurationError(
        f"Unknown strategy '{name}'. Available: {sorted(STRATEGIES)}"
    )


# ---------------------------------------------------------------------------
# Public contract
# ---------------------------------------------------------------------------

def generate_schedule(
    roster: RosterLike,
    dates: Iterable[DateLike],
    quotas: Optional[Dict[str, int]] = None,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    strategy: Any = DEFAULT_STRATEGY,
    tuning: Optional[Dict[str, Any]] = None,
) -> Tuple[Schedule, Counters]:
    """
    Generate a fair role schedule for every date.

    Args:
        roster:   Names (or roster dicts with 'name'/'index'); order is kept
                  in every team list.
        dates:    Meeting dates in non-decreasing order (date / ISO string).
        quotas:   {role: quota} in role order; first = preferred role,
                  last = remainder role. Defaults to DEFAULT_QUOTAS.
        seed:     Seed for a fresh random.Random (ignored when rng given).
        rng:      Injected random source.
        strategy: Registry name ("priority" / "hill_climb") or an object
                  with generate(names, dates, quotas, rng).
        tuning:   Overrides for ENGINE_TUNING.

    Returns:
        (schedule, counters)
        schedule: [{"date", "food_team", "drink_team", "free_team"}, ...]
        counters: {name: {role: lifetime count, ...}} final diagnostics

    Raises:
        ConfigurationError, InputOrderError — before any date is processed.
    """
    quotas = dict(quotas or DEFAULT_QUOTAS)
    tuning = {**ENGINE_TUNING, **(tuning or {})}
    names, days = validate_inputs(roster, dates, quotas, tuning)

    impl = get_strategy(strategy, tuning) if isinstance(strategy, str) else strategy
    if rng is None:
        rng = random.Random(seed)

    logger.info(
        f"Generating {len(days)} dates for {len(names)} people "
        f"(strategy={getattr(impl, 'name', type(impl).__name__)}, quotas={quotas})"
    )
    schedule, counters = impl.generate(names, days, quotas, rng)
    logger.info(f"Generated {len(schedule)} assignments")
    return schedule, counters


# ---------------------------------------------------------------------------
# Fairness Metrics
# ---------------------------------------------------------------------------

def _next_month(value: str) -> str:
    year, month = (int(p) for p in value.split("-"))
    year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return f"{year}-{month:02d}"


def calculate_fairness_metrics(
    schedule: Schedule,
    roster: RosterLike,
    roles: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Per-role counts and spread, plus monthly preferred-role coverage.

    Returns:
        {
          roles: {role: {counts, mean, std, cv, min, max, spread}},
          counts: {name: {role: int}},
          max_spread, preferred_role, dates, unknown,
          monthly_preferred: {"YYYY-MM": {name: int}},
          starvation: [{"name", "months": [m1, m2]}],
        }
    """
    import numpy as np

    names = _names(roster)
    roles = roles or list(ROLE_ORDER)
    preferred = roles[0]

    counts: Dict[str, Dict[str, int]] = {role: {n: 0 for n in names} for role in roles}
    monthly: Dict[str, Dict[str, int]] = {}
    unknown = 0

    for record in schedule:
        month = month_value(record["date"])
        if month not in monthly:
            monthly[month] = {n: 0 for n in names}
        for role in roles:
            for name in record.get(team_key(role), []):
                if name not in counts[role]:
                    unknown += 1
                    continue
                counts[role][name] += 1
                if role == preferred:
                    monthly[month][name] += 1

    per_role: Dict[str, Dict[str, Any]] = {}
    for role in roles:
        values = np.array(list(counts[role].values()), dtype=float)
        mean = float(np.mean(values)) if values.size else 0.0
        std = float(np.std(values)) if values.size else 0.0
        low = int(values.min()) if values.size else 0
        high = int(values.max()) if values.size else 0
        per_role[role] = {
            "counts": counts[role],
            "mean":   mean,
            "std":    std,
            "cv":     (std / mean * 100) if mean > 0 else 0.0,
            "min":    low,
            "max":    high,
            "spread": high - low,
        }

    starvation: List[Dict[str, Any]] = []
    months = sorted(monthly)
    for prev, cur in zip(months, months[1:]):
        if _next_month(prev) != cur:
            continue
        for name in names:
            if monthly[prev][name] == 0 and monthly[cur][name] == 0:
                starvation.append({"name": name, "months": [prev, cur]})

    return {
        "roles":             per_role,
        "counts":            {n: {role: counts[role][n] for role in roles} for n in names},
        "max_spread":        max((r["spread"] for r in per_role.values()), default=0),
        "preferred_role":    preferred,
        "dates":             len(schedule),
        "unknown":           unknown,
        "monthly_preferred": monthly,
        "starvation":        starvation,
    }
