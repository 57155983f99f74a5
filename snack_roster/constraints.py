"""
constraints.py — Constraint System for the Snack Roster

Hard constraints (must NOT violate):
  - QUOTA_MISMATCH: team size differs from the role quota
  - DOUBLE_BOOKING: same person in two teams on one date
  - MISSING_PERSON: roster member left out of every team on a date
  - UNKNOWN_PERSON: name on a team that is not on the roster
  - DATE_ORDER: records not in chronological order

Soft constraints (minimize violations):
  - ROLE_SPREAD_EXCEEDED: max − min lifetime count of a role > max_spread
  - MONTH_STARVATION: preferred role missed two calendar months running

Works on engine output (also on schedules loaded back from the store).

Usage:
  checker = ConstraintChecker(roster, quotas)
  hard, soft = checker.check_all(schedule)
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from snack_roster.calendar_utils import parse_date
from snack_roster.roster_config import DEFAULT_QUOTAS, FAIRNESS_TARGETS, team_key

logger = logging.getLogger(__name__)


class ConstraintSeverity(Enum):
    HARD = "hard"
    SOFT = "soft"


@dataclass
class ConstraintViolation:
    severity: ConstraintSeverity
    constraint_type: str
    description: str
    date: Optional[str] = None
    person: Optional[str] = None
    role: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.severity.value.upper()}] {self.constraint_type}"]
        if self.date:
            parts.append(f"date={self.date}")
        if self.person:
            parts.append(f"person={self.person}")
        if self.role:
            parts.append(f"role={self.role}")
        parts.append(f"→ {self.description}")
        return " | ".join(parts)


Schedule = List[Dict[str, Any]]


class ConstraintChecker:
    """
    Validates schedules against hard and soft constraints.

    Accepts the standard schedule format:
        [{"date": str, "food_team": [...], "drink_team": [...], "free_team": [...]}, ...]
    """

    def __init__(
        self,
        roster: List[Any],
        quotas: Optional[Dict[str, int]] = None,
        fairness_targets: Optional[Dict[str, Any]] = None,
    ):
        if roster and isinstance(roster[0], dict):
            roster = [p["name"] for p in sorted(roster, key=lambda p: p.get("index", 0))]
        self.names: List[str] = list(roster)
        self.quotas = dict(quotas or DEFAULT_QUOTAS)
        self.roles = list(self.quotas)
        self.fairness_targets = fairness_targets or dict(FAIRNESS_TARGETS)
        self._name_set = set(self.names)

    # -----------------------------------------------------------------------
    # HARD: Quota sizes
    # -----------------------------------------------------------------------

    def check_quotas(self, schedule: Schedule) -> List[ConstraintViolation]:
        """Hard: every team has exactly its role quota."""
        violations = []
        for record in schedule:
            for role in self.roles:
                team = record.get(team_key(role), [])
                if len(team) != self.quotas[role]:
                    violations.append(ConstraintViolation(
                        severity=ConstraintSeverity.HARD,
                        constraint_type="QUOTA_MISMATCH",
                        description=(
                            f"{role} team has {len(team)} people, quota is {self.quotas[role]}"
                        ),
                        date=record.get("date"),
                        role=role,
                        details={"size": len(team), "quota": self.quotas[role]},
                    ))
        return violations

    # -----------------------------------------------------------------------
    # HARD: Partition (double booking / missing / unknown)
    # -----------------------------------------------------------------------

    def check_double_booking(self, schedule: Schedule) -> List[ConstraintViolation]:
        """Hard: nobody appears twice on the same date."""
        violations = []
        for record in schedule:
            seen: Dict[str, str] = {}  # name → first role
            for role in self.roles:
                for name in record.get(team_key(role), []):
                    if name in seen:
                        violations.append(ConstraintViolation(
                            severity=ConstraintSeverity.HARD,
                            constraint_type="DOUBLE_BOOKING",
                            description=(
                                f"{name} assigned to both {seen[name]} and {role}"
                            ),
                            date=record.get("date"),
                            person=name,
                            role=role,
                            details={"first_role": seen[name]},
                        ))
                    else:
                        seen[name] = role
        return violations

    def check_membership(self, schedule: Schedule) -> List[ConstraintViolation]:
        """Hard: every roster member is placed, and only roster members."""
        violations = []
        for record in schedule:
            placed = set()
            for role in self.roles:
                for name in record.get(team_key(role), []):
                    placed.add(name)
                    if name not in self._name_set:
                        violations.append(ConstraintViolation(
                            severity=ConstraintSeverity.HARD,
                            constraint_type="UNKNOWN_PERSON",
                            description=f"{name} is not on the roster",
                            date=record.get("date"),
                            person=name,
                            role=role,
                        ))
            for name in self.names:
                if name not in placed:
                    violations.append(ConstraintViolation(
                        severity=ConstraintSeverity.HARD,
                        constraint_type="MISSING_PERSON",
                        description=f"{name} has no role on this date",
                        date=record.get("date"),
                        person=name,
                    ))
        return violations

    def check_date_order(self, schedule: Schedule) -> List[ConstraintViolation]:
        """Hard: records are in non-decreasing date order."""
        violations = []
        previous = None
        for record in schedule:
            current = parse_date(record["date"])
            if previous is not None and current < previous:
                violations.append(ConstraintViolation(
                    severity=ConstraintSeverity.HARD,
                    constraint_type="DATE_ORDER",
                    description=f"{current} comes after {previous}",
                    date=record["date"],
                ))
            previous = current
        return violations

    # -----------------------------------------------------------------------
    # SOFT: Fairness
    # -----------------------------------------------------------------------

    def check_role_spread(self, metrics: Dict[str, Any]) -> List[ConstraintViolation]:
        """Soft: lifetime counts per role stay within max_spread."""
        violations = []
        limit = self.fairness_targets.get("max_spread", 3)
        for role, stats in metrics.get("roles", {}).items():
            if stats["spread"] > limit:
                violations.append(ConstraintViolation(
                    severity=ConstraintSeverity.SOFT,
                    constraint_type="ROLE_SPREAD_EXCEEDED",
                    description=(
                        f"{role} counts range {stats['min']}–{stats['max']} "
                        f"(spread {stats['spread']} > {limit})"
                    ),
                    role=role,
                    details={"spread": stats["spread"], "limit": limit},
                ))
        return violations

    def check_month_starvation(self, metrics: Dict[str, Any]) -> List[ConstraintViolation]:
        """Soft: nobody misses the preferred role two months in a row."""
        role = metrics.get("preferred_role")
        return [
            ConstraintViolation(
                severity=ConstraintSeverity.SOFT,
                constraint_type="MONTH_STARVATION",
                description=f"no {role} in {streak['months'][0]} nor {streak['months'][1]}",
                person=streak["name"],
                role=role,
                details={"months": streak["months"]},
            )
            for streak in metrics.get("starvation", [])
        ]

    # -----------------------------------------------------------------------
    # Run all checks
    # -----------------------------------------------------------------------

    def check_all(
        self,
        schedule: Schedule,
        metrics: Optional[Dict[str, Any]] = None,
    ) -> Tuple[List[ConstraintViolation], List[ConstraintViolation]]:
        """
        Run all hard and soft constraint checks.

        Returns:
            (hard_violations, soft_violations)
        """
        from snack_roster.engine import calculate_fairness_metrics

        hard: List[ConstraintViolation] = []
        soft: List[ConstraintViolation] = []

        hard.extend(self.check_quotas(schedule))
        hard.extend(self.check_double_booking(schedule))
        hard.extend(self.check_membership(schedule))
        hard.extend(self.check_date_order(schedule))

        if metrics is None:
            metrics = calculate_fairness_metrics(schedule, self.names, roles=self.roles)
        soft.extend(self.check_role_spread(metrics))
        soft.extend(self.check_month_starvation(metrics))

        if hard:
            logger.warning(f"{len(hard)} hard violations found")
        return hard, soft
