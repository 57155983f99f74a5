"""
config.py — Configuration Module for the Snack Roster

Loads the roster CSV and optional engine-tuning overrides.
Re-exports roster_config constants so callers have one import point.

Roster file (config/roster.csv):
  index, name, active (optional, yes/no), notes (optional)
Only active rows are kept; they are re-numbered 0..N-1.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from snack_roster.errors import ConfigurationError

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_DIR  = PROJECT_ROOT / "config"
DEFAULT_ROSTER_PATH = DEFAULT_CONFIG_DIR / "roster.csv"
DEFAULT_TUNING_PATH = DEFAULT_CONFIG_DIR / "engine_tuning.json"


# ---------------------------------------------------------------------------
# Re-export from roster_config
# ---------------------------------------------------------------------------
from snack_roster.roster_config import (    # noqa: E402
    DEFAULT_QUOTAS,
    ENGINE_TUNING,
    FAIRNESS_TARGETS,
    ROLE_DEFINITIONS,
    ROLE_ORDER,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_yes_no(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("yes", "true", "1", "y", "sim", "s")


# ---------------------------------------------------------------------------
# Roster loader
# ---------------------------------------------------------------------------

def load_roster(
    roster_path: Optional[Path] = None,
) -> List[Dict[str, Any]]:
    """
    Load the group roster from roster.csv.

    Expected columns:
      index, name, active (optional), notes (optional)

    Returns list of dicts sorted by index. Inactive rows are dropped and the
    remaining rows are re-indexed 0..N-1 in index order.
    """
    import pandas as pd

    path = Path(roster_path) if roster_path else DEFAULT_ROSTER_PATH
    if not path.exists():
        raise FileNotFoundError(f"Roster file not found: {path}")

    df = pd.read_csv(path)
    if "name" not in df.columns or "index" not in df.columns:
        raise ConfigurationError(
            f"Roster {path} must have 'index' and 'name' columns. Got: {list(df.columns)}"
        )

    people: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        if "active" in df.columns and pd.notna(row["active"]):
            if not _parse_yes_no(row["active"]):
                logger.debug(f"Skipping inactive member: {row['name']}")
                continue
        notes = row.get("notes", "")
        people.append({
            "index": int(row["index"]),
            "name":  str(row["name"]).strip(),
            "notes": "" if pd.isna(notes) else str(notes),
        })

    people.sort(key=lambda p: p["index"])
    for position, person in enumerate(people):
        person["index"] = position

    names = [p["name"] for p in people]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise ConfigurationError(
            f"Duplicate names in roster {path}: {dupes}. Names identify people and must be unique."
        )

    logger.info(f"Loaded {len(people)} members from {path}")
    return people


def roster_names(roster: List[Dict[str, Any]]) -> List[str]:
    """Names in roster order (the engine's Person identifiers)."""
    return [p["name"] for p in sorted(roster, key=lambda p: p["index"])]


# ---------------------------------------------------------------------------
# Engine tuning
# ---------------------------------------------------------------------------

def load_tuning(
    tuning_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Return ENGINE_TUNING merged with the JSON override file (if present).
    Unknown keys are ignored with a warning.
    """
    tuning = dict(ENGINE_TUNING)
    path = Path(tuning_path) if tuning_path else DEFAULT_TUNING_PATH
    if not path.exists():
        logger.warning(f"Engine tuning not found: {path}. Using defaults.")
        return tuning

    with open(path) as f:
        overrides = json.load(f)

    for key, value in overrides.items():
        if key not in ENGINE_TUNING:
            logger.warning(f"Ignoring unknown tuning key '{key}' in {path}")
            continue
        tuning[key] = value

    logger.info(f"Engine tuning loaded from {path}: {tuning}")
    return tuning


# ---------------------------------------------------------------------------
# Quotas
# ---------------------------------------------------------------------------

def load_quotas(overrides: Optional[Dict[str, int]] = None) -> Dict[str, int]:
    """Default quotas with per-role overrides applied (role order preserved)."""
    quotas = dict(DEFAULT_QUOTAS)
    for role, quota in (overrides or {}).items():
        if role not in quotas:
            raise ConfigurationError(
                f"Unknown role '{role}'. Known roles: {ROLE_ORDER}"
            )
        quotas[role] = int(quota)
    return quotas


# ---------------------------------------------------------------------------
# Full config dict
# ---------------------------------------------------------------------------

def get_config() -> Dict[str, Any]:
    return {
        "role_definitions": {k: dict(v) for k, v in ROLE_DEFINITIONS.items()},
        "quotas":           DEFAULT_QUOTAS.copy(),
        "engine_tuning":    ENGINE_TUNING.copy(),
        "fairness_targets": FAIRNESS_TARGETS.copy(),
    }
