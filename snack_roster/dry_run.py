"""
dry_run.py — Schedule Generation & Validation

Full orchestration:
  1. Load roster and engine tuning
  2. Validate inputs (roster vs quotas, tuning)
  3. Build the weekly (Friday) date list
  4. Generate the schedule (priority or hill_climb strategy)
  5. Check constraints (hard + soft) and fairness metrics
  6. Export CSV, Excel, fairness report, fairness JSON, violations report
  7. Optionally push to the schedule store (insert-if-absent) and draw charts

Usage:
  python -m snack_roster.dry_run --start 2026-02-20 --end 2026-07-03
  python -m snack_roster.dry_run --start 2026-02-20 --end 2026-07-03 --seed 7 --visual
  python -m snack_roster.dry_run --start 2026-02-20 --end 2026-07-03 --push
"""

import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from snack_roster.calendar_utils import days_label, days_until, format_date_pt, get_weekly_dates
from snack_roster.config import PROJECT_ROOT, load_quotas, load_roster, load_tuning, roster_names
from snack_roster.constraints import ConstraintChecker
from snack_roster.engine import (
    STRATEGIES,
    calculate_fairness_metrics,
    generate_schedule,
    validate_inputs,
)
from snack_roster.errors import ConfigurationError, InputOrderError
from snack_roster.exporter import (
    export_fairness_json,
    export_fairness_report,
    export_to_csv,
    export_to_excel,
)
from snack_roster.roster_config import (
    DEFAULT_END_DATE,
    DEFAULT_START_DATE,
    DEFAULT_STRATEGY,
    DEFAULT_WEEKDAY,
    FAIRNESS_TARGETS,
    team_key,
)
from snack_roster.store import fetch_or_generate, store_from_env
from snack_roster.views import current_week

logger = logging.getLogger(__name__)

OUTPUTS_DIR = PROJECT_ROOT / "outputs"


# ---------------------------------------------------------------------------
# Visual analysis (matplotlib)
# ---------------------------------------------------------------------------

def _generate_visual_analysis(
    metrics: Dict[str, Any],
    names: List[str],
    output_dir: Path,
    prefix: str,
) -> List[Path]:
    """Stacked role counts per person + preferred-role deviation from mean."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    out = Path(output_dir)
    roles = list(metrics["roles"])
    preferred = metrics["preferred_role"]
    counts = metrics["counts"]
    x = list(range(len(names)))
    colors = ["#e07a1f", "#4a90d9", "#2e8b57", "#8a8a8a"]
    written: List[Path] = []

    # Chart 1: role counts per person (stacked)
    fig, ax = plt.subplots(figsize=(13, 5))
    bottom = [0] * len(names)
    for i, role in enumerate(roles):
        vals = [counts[n][role] for n in names]
        ax.bar(x, vals, bottom=bottom, color=colors[i % len(colors)], alpha=0.85,
               width=0.65, label=role)
        bottom = [b + v for b, v in zip(bottom, vals)]
    ax.set_xticks(x)
    ax.set_xticklabels(names, rotation=40, ha="right", fontsize=9)
    ax.set_ylabel("Dates")
    ax.set_title(f"Role Distribution by Person\nmax spread = {metrics['max_spread']}",
                 fontsize=13, fontweight="bold")
    ax.legend()
    ax.grid(axis="y", alpha=0.3)
    fig.tight_layout()
    path = out / f"{prefix}_role_distribution.png"
    fig.savefig(path, dpi=150)
    plt.close(fig)
    written.append(path)
    print(f"  ✓ Visual  → {path.name}")

    # Chart 2: preferred-role deviation from mean
    mean_val = metrics["roles"][preferred]["mean"]
    deviations = [counts[n][preferred] - mean_val for n in names]
    fig, ax = plt.subplots(figsize=(13, 4))
    ax.bar(x, deviations, color=["#b22222" if d >= 0 else "#1a3d7c" for d in deviations],
           alpha=0.8, width=0.65)
    ax.axhline(0, color="black", linewidth=1)
    ax.set_xticks(x)
    ax.set_xticklabels(names, rotation=40, ha="right", fontsize=9)
    ax.set_ylabel(f"Δ {preferred} vs mean")
    ax.set_title(f"{preferred.capitalize()} Deviation from Mean", fontsize=13, fontweight="bold")
    ax.grid(axis="y", alpha=0.3)
    fig.tight_layout()
    path = out / f"{prefix}_{preferred}_deviation.png"
    fig.savefig(path, dpi=150)
    plt.close(fig)
    written.append(path)
    print(f"  ✓ Visual  → {path.name}")

    return written


# ---------------------------------------------------------------------------
# Main orchestrator
# ---------------------------------------------------------------------------

def run_dry_run(
    start_date: date,
    end_date: date,
    output_dir: Path = OUTPUTS_DIR,
    seed: Optional[int] = None,
    strategy: str = DEFAULT_STRATEGY,
    roster_path: Optional[Path] = None,
    tuning_path: Optional[Path] = None,
    weekday: int = DEFAULT_WEEKDAY,
    push: bool = False,
    visual: bool = False,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Generate the full schedule, validate it and export it.

    Args:
        start_date:  First date of the range
        end_date:    Last date of the range
        output_dir:  Directory for output files
        seed:        RNG seed (same seed → same schedule)
        strategy:    "priority" (default) or "hill_climb"
        push:        If True, read/seed the schedule store (env-configured)
        visual:      If True, write matplotlib charts
        today:       Reference day for the current-week summary (default: today)

    Returns:
        Dict with schedule, counters, metrics, violations, output paths

    Raises:
        ConfigurationError, InputOrderError — invalid roster/quotas/dates
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    prefix = f"roster_{start_date}_{end_date}"
    sep = "=" * 70

    print(f"\n{sep}")
    print(f"  SNACK ROSTER — {'PUSH' if push else 'DRY RUN'} MODE")
    print(f"  Period: {start_date} → {end_date}  |  strategy={strategy}  seed={seed}")
    print(f"{sep}\n")

    # ── 1. Load configuration ──────────────────────────────────────────────
    print("Step 1/6: Loading configuration...")
    roster = load_roster(roster_path)
    names = roster_names(roster)
    tuning = load_tuning(tuning_path)
    quotas = load_quotas()
    print(f"  ✓ {len(names)} members | quotas: {quotas}")

    # ── 2. Build date list ─────────────────────────────────────────────────
    print("\nStep 2/6: Building date list...")
    dates = get_weekly_dates(start_date, end_date, weekday=weekday)
    if dates:
        print(f"  ✓ {len(dates)} meetings ({format_date_pt(dates[0])} → {format_date_pt(dates[-1])})")
    else:
        print("  ⚠ No meeting dates in range")

    # ── 3. Validate inputs ─────────────────────────────────────────────────
    print("\nStep 3/6: Validating inputs...")
    validate_inputs(names, dates, quotas, tuning)
    print("  ✓ Roster, quotas and tuning valid")

    # ── 4. Generate ────────────────────────────────────────────────────────
    print("\nStep 4/6: Generating schedule...")
    result_counters: Dict[str, Dict[str, int]] = {}

    def _generate() -> List[Dict[str, Any]]:
        schedule, counters = generate_schedule(
            names, dates, quotas=quotas, seed=seed, strategy=strategy, tuning=tuning,
        )
        result_counters.update(counters)
        return schedule

    client = store_from_env() if push else None
    schedule, generated = fetch_or_generate(client, _generate)
    source = "generated" if generated else "loaded from store"
    print(f"  ✓ {len(schedule)} dates {source}")

    # ── 5. Constraint checking ─────────────────────────────────────────────
    print("\nStep 5/6: Checking constraints...")
    metrics = calculate_fairness_metrics(schedule, names, roles=list(quotas))
    checker = ConstraintChecker(names, quotas, FAIRNESS_TARGETS)
    hard_violations, soft_violations = checker.check_all(schedule, metrics=metrics)

    h_count = len(hard_violations)
    s_count = len(soft_violations)
    status = "✓" if h_count == 0 else "✗"
    spread_icon = "✓" if metrics["max_spread"] <= FAIRNESS_TARGETS["max_spread"] else "✗"
    print(f"  {status} Hard violations: {h_count}")
    print(f"    Soft violations: {s_count}")
    print(f"  {spread_icon} Max spread: {metrics['max_spread']} (limit ≤{FAIRNESS_TARGETS['max_spread']})")

    # ── 6. Export ──────────────────────────────────────────────────────────
    print("\nStep 6/6: Exporting outputs...")
    csv_path        = output_dir / f"{prefix}_schedule.csv"
    xlsx_path       = output_dir / f"{prefix}_schedule.xlsx"
    report_path     = output_dir / f"{prefix}_fairness_report.txt"
    json_path       = output_dir / f"{prefix}_fairness_data.json"
    violations_path = output_dir / f"{prefix}_violations.txt"

    export_to_csv(schedule, csv_path, roles=list(quotas))
    export_to_excel(schedule, xlsx_path, pivot=True, roles=list(quotas))
    export_fairness_report(metrics, report_path, pool_label="Escala do Lanche")
    export_fairness_json(metrics, json_path)

    with open(violations_path, "w") as f:
        f.write("=== Constraint Violations ===\n\n")
        f.write(f"HARD ({h_count}):\n")
        for v in hard_violations:
            f.write(f"  {v}\n")
        f.write(f"\nSOFT ({s_count}):\n")
        for v in soft_violations:
            f.write(f"  {v}\n")

    print(f"  ✓ CSV:       {csv_path.name}")
    print(f"  ✓ Excel:     {xlsx_path.name}")
    print(f"  ✓ Report:    {report_path.name}")
    print(f"  ✓ JSON:      {json_path.name}")
    print(f"  ✓ Violations:{violations_path.name}")

    # ── Summary ────────────────────────────────────────────────────────────
    print(f"\n{sep}")
    print("  SUMMARY")
    print(f"{sep}")
    print(f"  Period:          {start_date} → {end_date}")
    print(f"  Meetings:        {len(schedule)}")
    print(f"  Hard violations: {h_count}  {status}")
    print(f"  Soft violations: {s_count}")
    for role, stats in metrics["roles"].items():
        print(f"    {role:<8} min/max={stats['min']}/{stats['max']}  cv={stats['cv']:.2f}%")

    today = today or date.today()
    upcoming = current_week(schedule, today)
    if upcoming:
        countdown = days_label(days_until(upcoming["date"], today))
        print(f"\n  Current week ({format_date_pt(upcoming['date'])}, {countdown}):")
        for role in quotas:
            print(f"    {role:<8} {', '.join(upcoming.get(team_key(role), []))}")

    charts: List[Path] = []
    if visual and schedule:
        charts = _generate_visual_analysis(metrics, names, output_dir, prefix)

    print(f"\n{sep}\n")

    return {
        "schedule":        schedule,
        "current_week":    upcoming,
        "generated":       generated,
        "counters":        result_counters,
        "metrics":         metrics,
        "hard_violations": hard_violations,
        "soft_violations": soft_violations,
        "outputs": {
            "csv":        csv_path,
            "excel":      xlsx_path,
            "report":     report_path,
            "json":       json_path,
            "violations": violations_path,
            "charts":     charts,
        },
    }


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    parser = argparse.ArgumentParser(
        description="Generate a fair weekly snack roster"
    )
    parser.add_argument("--start",      default=DEFAULT_START_DATE, help="Start date YYYY-MM-DD")
    parser.add_argument("--end",        default=DEFAULT_END_DATE,   help="End date YYYY-MM-DD")
    parser.add_argument("--seed",       type=int, default=None,     help="RNG seed for a reproducible schedule")
    parser.add_argument("--strategy",   default=DEFAULT_STRATEGY, choices=STRATEGIES,
                        help="Fairness strategy (default: priority)")
    parser.add_argument("--weekday",    type=int, default=DEFAULT_WEEKDAY,
                        help="Meeting weekday, Monday=0 … Sunday=6 (default: 4, Friday)")
    parser.add_argument("--roster",     default=None, help="Roster CSV (default: config/roster.csv)")
    parser.add_argument("--tuning",     default=None, help="Engine tuning JSON (default: config/engine_tuning.json)")
    parser.add_argument("--output-dir", default=None, help="Output directory (default: outputs/)")
    parser.add_argument("--push",       action="store_true",
                        help="Read the stored schedule, or seed it if empty (SCHEDULE_STORE_URL/KEY)")
    parser.add_argument("--visual",     action="store_true", help="Write matplotlib charts")
    args = parser.parse_args(argv)

    try:
        start = datetime.strptime(args.start, "%Y-%m-%d").date()
        end   = datetime.strptime(args.end,   "%Y-%m-%d").date()
    except ValueError as e:
        print(f"Invalid date format: {e}")
        sys.exit(1)

    if start > end:
        print("Error: start date must be before end date")
        sys.exit(1)

    out_dir = Path(args.output_dir) if args.output_dir else OUTPUTS_DIR
    try:
        run_dry_run(
            start, end,
            output_dir=out_dir,
            seed=args.seed,
            strategy=args.strategy,
            roster_path=Path(args.roster) if args.roster else None,
            tuning_path=Path(args.tuning) if args.tuning else None,
            weekday=args.weekday,
            push=args.push,
            visual=args.visual,
        )
    except (ConfigurationError, InputOrderError, FileNotFoundError) as e:
        print(f"\n  ✗ Cannot proceed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
