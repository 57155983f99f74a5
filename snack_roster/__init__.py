"""
Fair Weekly Snack Roster

Modules:
- roster_config: Roles, quotas, engine tuning, fairness targets
- config: Roster CSV and tuning loaders
- engine: Fairness engine (deficit-priority greedy with monthly reset)
- hill_climb: Alternative global-variance strategy
- constraints: Hard/soft schedule checks
- exporter: CSV / Excel / fairness report
- store: Schedule store client (insert-if-absent)
- calendar_utils: Weekly dates, pt-BR formatting
- views: Week / month / person filters
- dry_run: CLI orchestrator
"""

from .config import (
    load_roster,
    load_tuning,
    load_quotas,
    roster_names,
    get_config,
    DEFAULT_QUOTAS,
    ENGINE_TUNING,
    FAIRNESS_TARGETS,
    ROLE_DEFINITIONS,
)

from .errors import ConfigurationError, InputOrderError

from .calendar_utils import get_weekly_dates, format_date_pt

from .engine import (
    FairnessState,
    PriorityStrategy,
    assign_date,
    start_month,
    generate_schedule,
    get_strategy,
    validate_inputs,
    calculate_fairness_metrics,
)

from .hill_climb import HillClimbStrategy

from .views import (
    filter_by_week,
    filter_by_month,
    filter_by_person,
    month_options,
    current_week,
)

__all__ = [
    "load_roster",
    "load_tuning",
    "load_quotas",
    "roster_names",
    "get_config",
    "DEFAULT_QUOTAS",
    "ENGINE_TUNING",
    "FAIRNESS_TARGETS",
    "ROLE_DEFINITIONS",
    "ConfigurationError",
    "InputOrderError",
    "get_weekly_dates",
    "format_date_pt",
    "FairnessState",
    "PriorityStrategy",
    "HillClimbStrategy",
    "assign_date",
    "start_month",
    "generate_schedule",
    "get_strategy",
    "validate_inputs",
    "calculate_fairness_metrics",
    "filter_by_week",
    "filter_by_month",
    "filter_by_person",
    "month_options",
    "current_week",
]
