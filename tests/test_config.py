"""
tests/test_config.py — Roster CSV, engine tuning and quota loading.
"""

import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from snack_roster.config import (
    ENGINE_TUNING,
    get_config,
    load_quotas,
    load_roster,
    load_tuning,
    roster_names,
)
from snack_roster.errors import ConfigurationError


class TestLoadRoster:

    def test_default_roster(self):
        roster = load_roster()
        assert len(roster) == 15
        assert [p["index"] for p in roster] == list(range(15))
        assert len(set(roster_names(roster))) == 15

    def test_inactive_rows_skipped_and_reindexed(self, tmp_path):
        path = tmp_path / "roster.csv"
        path.write_text(
            "index,name,active,notes\n"
            "2,Carla,yes,\n"
            "0,Ana,yes,coordena\n"
            "1,Bruno,no,\n"
        )
        roster = load_roster(path)
        assert roster_names(roster) == ["Ana", "Carla"]
        assert [p["index"] for p in roster] == [0, 1]
        assert roster[0]["notes"] == "coordena"
        assert roster[1]["notes"] == ""

    def test_duplicate_names(self, tmp_path):
        path = tmp_path / "roster.csv"
        path.write_text("index,name\n0,Ana\n1,Ana\n")
        with pytest.raises(ConfigurationError, match="Duplicate"):
            load_roster(path)

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "roster.csv"
        path.write_text("person\nAna\n")
        with pytest.raises(ConfigurationError):
            load_roster(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_roster(tmp_path / "nope.csv")


class TestLoadTuning:

    def test_missing_file_defaults(self, tmp_path):
        assert load_tuning(tmp_path / "absent.json") == ENGINE_TUNING

    def test_overrides_and_unknown_keys(self, tmp_path):
        path = tmp_path / "tuning.json"
        path.write_text(json.dumps({"jitter": 0.5, "bogus": 1}))
        tuning = load_tuning(path)
        assert tuning["jitter"] == 0.5
        assert "bogus" not in tuning
        assert tuning["hunger_weight"] == ENGINE_TUNING["hunger_weight"]


class TestQuotas:

    def test_defaults(self):
        assert load_quotas() == {"food": 7, "drink": 3, "free": 5}
        assert list(load_quotas()) == ["food", "drink", "free"]

    def test_override(self):
        assert load_quotas({"drink": 4}) == {"food": 7, "drink": 4, "free": 5}

    def test_unknown_role(self):
        with pytest.raises(ConfigurationError):
            load_quotas({"dessert": 1})

    def test_get_config(self):
        cfg = get_config()
        assert set(cfg) == {"role_definitions", "quotas", "engine_tuning", "fairness_targets"}
        cfg["quotas"]["food"] = 0
        assert load_quotas()["food"] == 7
