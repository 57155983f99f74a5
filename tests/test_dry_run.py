"""
tests/test_dry_run.py — End-to-end orchestration with file outputs.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from snack_roster.dry_run import main, run_dry_run
from snack_roster.errors import ConfigurationError


@pytest.fixture
def small_roster(tmp_path):
    path = tmp_path / "roster.csv"
    rows = "\n".join(f"{i},Membro{i},yes," for i in range(15))
    path.write_text("index,name,active,notes\n" + rows + "\n")
    return path


class TestRunDryRun:

    def test_full_run(self, tmp_path, small_roster):
        result = run_dry_run(
            date(2026, 2, 20), date(2026, 5, 29),
            output_dir=tmp_path / "out",
            seed=7,
            roster_path=small_roster,
            tuning_path=tmp_path / "missing.json",
        )
        assert len(result["schedule"]) == 15
        assert result["generated"] is True
        assert result["hard_violations"] == []
        for key in ("csv", "excel", "report", "json", "violations"):
            assert result["outputs"][key].exists()
        assert result["outputs"]["charts"] == []
        assert set(result["counters"]) == {f"Membro{i}" for i in range(15)}

    def test_same_seed_same_schedule(self, tmp_path, small_roster):
        kwargs = dict(seed=3, roster_path=small_roster, tuning_path=tmp_path / "none.json")
        a = run_dry_run(date(2026, 2, 20), date(2026, 3, 27), output_dir=tmp_path / "a", **kwargs)
        b = run_dry_run(date(2026, 2, 20), date(2026, 3, 27), output_dir=tmp_path / "b", **kwargs)
        assert a["schedule"] == b["schedule"]

    def test_visual(self, tmp_path, small_roster):
        result = run_dry_run(
            date(2026, 2, 20), date(2026, 3, 27),
            output_dir=tmp_path,
            seed=1,
            roster_path=small_roster,
            tuning_path=tmp_path / "none.json",
            visual=True,
        )
        charts = result["outputs"]["charts"]
        assert len(charts) == 2
        assert all(p.exists() for p in charts)

    def test_current_week_summary(self, tmp_path, small_roster):
        kwargs = dict(seed=2, roster_path=small_roster, tuning_path=tmp_path / "none.json")
        result = run_dry_run(
            date(2026, 2, 20), date(2026, 3, 27),
            output_dir=tmp_path, today=date(2026, 3, 1), **kwargs,
        )
        assert result["current_week"]["date"] == "2026-03-06"
        assert result["current_week"] == result["schedule"][2]

        late = run_dry_run(
            date(2026, 2, 20), date(2026, 3, 27),
            output_dir=tmp_path, today=date(2026, 12, 1), **kwargs,
        )
        assert late["current_week"] == late["schedule"][-1]

    def test_roster_size_mismatch(self, tmp_path):
        path = tmp_path / "roster.csv"
        path.write_text("index,name\n0,Ana\n1,Bruno\n")
        with pytest.raises(ConfigurationError):
            run_dry_run(
                date(2026, 2, 20), date(2026, 3, 27),
                output_dir=tmp_path,
                roster_path=path,
                tuning_path=tmp_path / "none.json",
            )


class TestCli:

    def test_bad_range(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["--start", "2026-07-03", "--end", "2026-02-20", "--output-dir", str(tmp_path)])
        assert exc.value.code == 1

    def test_bad_date(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["--start", "20/02/2026", "--output-dir", str(tmp_path)])
        assert exc.value.code == 1

    def test_missing_roster(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["--roster", str(tmp_path / "absent.csv"), "--output-dir", str(tmp_path)])
        assert exc.value.code == 1

    def test_success(self, tmp_path, small_roster):
        main([
            "--start", "2026-02-20", "--end", "2026-03-13", "--seed", "2",
            "--roster", str(small_roster), "--tuning", str(tmp_path / "none.json"),
            "--output-dir", str(tmp_path / "cli"),
        ])
        assert (tmp_path / "cli" / "roster_2026-02-20_2026-03-13_schedule.csv").exists()
