"""
hill_climb.py — Global-variance hill climbing (alternative strategy).

Starts from a random quota-valid assignment per date, then repeatedly swaps
the roles of two people on one random date, keeping the swap only if the
global cost strictly drops:

    cost = Σ_roles Σ_people (count[person, role] − mean[role])²

No monthly fairness and no hunger: this strategy balances lifetime totals
over the whole horizon at once. Select it with strategy="hill_climb".
"""

import logging
import random
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from snack_roster.roster_config import ENGINE_TUNING, team_key

logger = logging.getLogger(__name__)

COST_EPSILON = 1e-9


def global_cost(counts: np.ndarray) -> float:
    """Sum over roles of squared deviations of per-person counts (people × roles)."""
    if counts.size == 0:
        return 0.0
    centered = counts - counts.mean(axis=0)
    return float((centered ** 2).sum())


class HillClimbStrategy:
    """Random-restart-free hill climbing over role swaps."""

    name = "hill_climb"

    def __init__(
        self,
        iterations: Optional[int] = None,
        tuning: Optional[Dict[str, Any]] = None,
    ):
        tuning = {**ENGINE_TUNING, **(tuning or {})}
        self.iterations = int(
            tuning["hill_climb_iterations"] if iterations is None else iterations
        )

    def _initial(
        self,
        n_people: int,
        n_dates: int,
        slots: List[int],
        rng: random.Random,
    ) -> np.ndarray:
        assignments = np.empty((n_dates, n_people), dtype=int)
        for d in range(n_dates):
            order = list(range(n_people))
            rng.shuffle(order)
            for slot, person in enumerate(order):
                assignments[d, person] = slots[slot]
        return assignments

    def generate(
        self,
        names: List[str],
        dates: List[date],
        quotas: Dict[str, int],
        rng: random.Random,
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Dict[str, int]]]:
        roles = list(quotas)
        n_people = len(names)
        n_dates = len(dates)

        slots: List[int] = []
        for role_idx, role in enumerate(roles):
            slots.extend([role_idx] * quotas[role])

        assignments = self._initial(n_people, n_dates, slots, rng)
        counts = np.zeros((n_people, len(roles)), dtype=int)
        people_idx = np.arange(n_people)
        for d in range(n_dates):
            counts[people_idx, assignments[d]] += 1

        cost = global_cost(counts)
        start_cost = cost
        accepted = 0

        if n_dates:
            for _ in range(self.iterations):
                d = rng.randrange(n_dates)
                a = rng.randrange(n_people)
                b = rng.randrange(n_people)
                if a == b:
                    continue
                ra, rb = assignments[d, a], assignments[d, b]
                if ra == rb:
                    continue

                counts[a, ra] -= 1
                counts[a, rb] += 1
                counts[b, rb] -= 1
                counts[b, ra] += 1
                new_cost = global_cost(counts)

                if new_cost < cost - COST_EPSILON:
                    assignments[d, a], assignments[d, b] = rb, ra
                    cost = new_cost
                    accepted += 1
                else:
                    counts[a, rb] -= 1
                    counts[a, ra] += 1
                    counts[b, ra] -= 1
                    counts[b, rb] += 1

        logger.info(
            f"Hill climbing: {self.iterations} iterations, {accepted} swaps kept, "
            f"cost {start_cost:.2f} → {cost:.2f}"
        )

        schedule: List[Dict[str, Any]] = []
        for d, day in enumerate(dates):
            record: Dict[str, Any] = {"date": day.isoformat()}
            for role_idx, role in enumerate(roles):
                record[team_key(role)] = [
                    names[p] for p in range(n_people) if assignments[d, p] == role_idx
                ]
            schedule.append(record)

        counters = {
            names[p]: {role: int(counts[p, r]) for r, role in enumerate(roles)}
            for p in range(n_people)
        }
        return schedule, counters
