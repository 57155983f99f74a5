"""
roster_config.py — Role, Quota & Engine Tuning Configuration

Weekly snack roster: every Friday the whole group is split into three teams.

ROLES (ordered)
───────────────
  food   (Comida)  7 people  — preferred role: everybody wants to bring food.
                               Scored with hunger + deficit + monthly bonus.
  drink  (Bebida)  3 people  — scored with deficit only, among people left
                               over after the food team is chosen.
  free   (Folga)   5 people  — remainder; no scoring needed.

  Quotas must sum to the roster size (15 in the default roster).
  The FIRST role is always the preferred role and the LAST role is always
  the remainder role; any roles in between are deficit-scored.

ENGINE TUNING
─────────────
  Score for the preferred role:
      hunger × hunger_weight
    + (ideal − lifetime count) × deficit_weight
    + month_zero_bonus   (only while the monthly counter is still 0)
    + uniform(0, jitter) (tie-break only)

  With integer weights every achievable score difference is a multiple of
  gcd(hunger_weight, deficit_weight, month_zero_bonus), so jitter must stay
  at or below that gcd to never reorder two distinct scores.

  month_miss_penalty is added to HUNGER (not to the score) for everyone who
  went a whole month without the preferred role.
"""

from typing import Any, Dict, List

# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------
ROLE_DEFINITIONS: Dict[str, Dict[str, Any]] = {
    "food":  {"quota": 7, "label": "Comida", "icon": "🍔",
              "description": "Brings food (preferred role)"},
    "drink": {"quota": 3, "label": "Bebida", "icon": "🥤",
              "description": "Brings drinks"},
    "free":  {"quota": 5, "label": "Folga",  "icon": "✨",
              "description": "Week off"},
}

ROLE_ORDER: List[str] = list(ROLE_DEFINITIONS.keys())
PREFERRED_ROLE: str = ROLE_ORDER[0]
REMAINDER_ROLE: str = ROLE_ORDER[-1]

DEFAULT_QUOTAS: Dict[str, int] = {
    role: spec["quota"] for role, spec in ROLE_DEFINITIONS.items()
}

ROLE_LABELS: Dict[str, str] = {
    role: spec["label"] for role, spec in ROLE_DEFINITIONS.items()
}


def team_key(role: str) -> str:
    """Record field holding a role's members, e.g. 'food' → 'food_team'."""
    return f"{role}_team"


# ---------------------------------------------------------------------------
# Engine tuning (override via config/engine_tuning.json)
# ---------------------------------------------------------------------------
ENGINE_TUNING: Dict[str, Any] = {
    "hunger_weight":         10,
    "deficit_weight":        5,
    "month_zero_bonus":      20,
    "month_miss_penalty":    3,
    "jitter":                1.0,
    "hill_climb_iterations": 50000,
}

# ---------------------------------------------------------------------------
# Fairness targets (used by constraints + report)
# ---------------------------------------------------------------------------
FAIRNESS_TARGETS: Dict[str, Any] = {
    "max_spread": 3,
    "cv_target":  0.10,
}

# ---------------------------------------------------------------------------
# Calendar defaults (Friday meetings)
# ---------------------------------------------------------------------------
DEFAULT_START_DATE = "2026-02-20"
DEFAULT_END_DATE   = "2026-07-03"
DEFAULT_WEEKDAY    = 4   # Monday=0 … Friday=4

DEFAULT_STRATEGY = "priority"
