"""
exporter.py — Export Layer for the Snack Roster

Outputs:
  - Store records: one dict per date (date + one member list per role)
  - CSV: flat (date, role, person) for programmatic review
  - Excel (.xlsx): formatted date × role grid with member names
  - Fairness audit report (.txt): per-person role counts, spread, CV,
    monthly starvation streaks
  - Fairness JSON: the numbers behind the report

Usage:
  from snack_roster.exporter import export_to_csv, export_to_excel, export_fairness_report
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from snack_roster.calendar_utils import format_date_pt
from snack_roster.roster_config import FAIRNESS_TARGETS, ROLE_LABELS, ROLE_ORDER, team_key

logger = logging.getLogger(__name__)

Schedule = List[Dict[str, Any]]


# ---------------------------------------------------------------------------
# Store records
# ---------------------------------------------------------------------------

def to_records(schedule: Schedule, roles: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    """Copies of each record with only the stored fields (date + teams)."""
    roles = roles or ROLE_ORDER
    return [
        {"date": record["date"], **{team_key(r): list(record.get(team_key(r), [])) for r in roles}}
        for record in schedule
    ]


# ---------------------------------------------------------------------------
# CSV Export
# ---------------------------------------------------------------------------

def export_to_csv(
    schedule: Schedule,
    output_path: Path,
    roles: Optional[List[str]] = None,
) -> None:
    """
    Export schedule to flat CSV: date, role, person.

    Args:
        schedule:    [{"date", "<role>_team": [...]}, ...]
        output_path: .csv file path
    """
    import csv
    roles = roles or ROLE_ORDER
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["date", "role", "person"])
        writer.writeheader()
        for record in schedule:
            for role in roles:
                for name in record.get(team_key(role), []):
                    writer.writerow({"date": record["date"], "role": role, "person": name})

    logger.info(f"CSV exported → {output_path}")


# ---------------------------------------------------------------------------
# Excel Export
# ---------------------------------------------------------------------------

def export_to_excel(
    schedule: Schedule,
    output_path: Path,
    pivot: bool = True,
    roles: Optional[List[str]] = None,
) -> None:
    """
    Export schedule to formatted Excel grid.

    Pivot mode (default): rows=date, columns=role label, cells="; "-joined names.
    Flat mode: rows=(date, role, person).
    """
    import pandas as pd

    roles = roles or ROLE_ORDER
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    rows = []
    for record in schedule:
        for role in roles:
            for name in record.get(team_key(role), []):
                rows.append({
                    "Date":   record["date"],
                    "Day":    format_date_pt(record["date"]),
                    "Role":   ROLE_LABELS.get(role, role),
                    "Person": name,
                })

    df = pd.DataFrame(rows)
    if df.empty:
        df.to_excel(output_path, index=False)
        return

    if pivot:
        grid = df.pivot_table(
            index=["Date", "Day"],
            columns="Role",
            values="Person",
            aggfunc=lambda x: "; ".join(x),
        )
        order = [ROLE_LABELS.get(r, r) for r in roles if ROLE_LABELS.get(r, r) in grid.columns]
        grid = grid[order]

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            grid.to_excel(writer, sheet_name="Escala")
            _format_excel_grid(writer, "Escala")
    else:
        df.to_excel(output_path, index=False)

    logger.info(f"Excel exported → {output_path}")


def _format_excel_grid(writer: Any, sheet_name: str) -> None:
    """Header fill, column widths, alternate row shading."""
    from openpyxl.styles import Alignment, Font, PatternFill

    ws = writer.sheets[sheet_name]
    header_fill = PatternFill("solid", fgColor="1F4E79")
    header_font = Font(bold=True, color="FFFFFF")

    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")

    for col in ws.columns:
        max_len = max((len(str(c.value)) for c in col if c.value), default=8)
        ws.column_dimensions[col[0].column_letter].width = min(max_len + 2, 60)

    alt = PatternFill("solid", fgColor="EBF3FB")
    for i, row in enumerate(ws.iter_rows(min_row=2), start=2):
        if i % 2 == 0:
            for cell in row:
                cell.fill = alt


# ---------------------------------------------------------------------------
# Fairness Report
# ---------------------------------------------------------------------------

def export_fairness_report(
    metrics: Dict[str, Any],
    output_path: Path,
    pool_label: str = "",
    max_spread: Optional[int] = None,
) -> str:
    """
    Export fairness audit report (text format).

    Includes:
      - Per-role mean, std, CV, min/max and spread, pass/fail vs max_spread
      - Per-person counts for every role, with deviation from the mean of
        the preferred role
      - Month starvation streaks

    Args:
        metrics:     Output of engine.calculate_fairness_metrics()
        output_path: .txt file path
        pool_label:  Label printed in the title
        max_spread:  Spread limit (default FAIRNESS_TARGETS['max_spread'])

    Returns:
        The report text.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    limit = FAIRNESS_TARGETS["max_spread"] if max_spread is None else max_spread

    per_role = metrics.get("roles", {})
    counts = metrics.get("counts", {})
    roles = list(per_role)
    preferred = metrics.get("preferred_role", roles[0] if roles else "")
    preferred_mean = per_role.get(preferred, {}).get("mean", 0)

    sep = "=" * 70
    lines = [
        sep,
        f"  FAIRNESS AUDIT REPORT{(' — ' + pool_label) if pool_label else ''}",
        sep,
        "",
        f"  Dates scheduled:       {metrics.get('dates', 0)}",
        f"  Max spread (any role): {metrics.get('max_spread', 0)}  (limit ≤{limit})",
        "",
        "─" * 70,
        "  Per-Role Balance",
        "─" * 70,
    ]
    for role in roles:
        stats = per_role[role]
        status = "✓ PASS" if stats["spread"] <= limit else "✗ FAIL"
        lines.append(
            f"  {role:<8} mean={stats['mean']:6.2f}  std={stats['std']:5.2f}  "
            f"cv={stats['cv']:5.2f}%  min/max={stats['min']}/{stats['max']}  "
            f"spread={stats['spread']}  {status}"
        )

    header = "".join(f"{role:>8}" for role in roles)
    lines += [
        "",
        "─" * 70,
        "  Per-Person Counts",
        "─" * 70,
        f"  {'Name':<24}{header}  {'Δ ' + preferred:>10}",
    ]
    ordered = sorted(counts, key=lambda n: counts[n].get(preferred, 0), reverse=True)
    for name in ordered:
        row = "".join(f"{counts[name].get(role, 0):>8d}" for role in roles)
        delta = counts[name].get(preferred, 0) - preferred_mean
        lines.append(f"  {name:<24}{row}  {delta:>+10.2f}")

    lines += [
        "",
        "─" * 70,
        f"  Month Starvation (no {preferred} two months running)",
        "─" * 70,
    ]
    starvation = metrics.get("starvation", [])
    if starvation:
        for streak in starvation:
            lines.append(f"  {streak['name']:<24} {streak['months'][0]} → {streak['months'][1]}")
    else:
        lines.append("  (none)")

    lines.append("")
    lines.append(sep)

    report_text = "\n".join(lines)
    with open(output_path, "w") as f:
        f.write(report_text)

    logger.info(f"Fairness report exported → {output_path}")
    return report_text


def export_fairness_json(metrics: Dict[str, Any], output_path: Path) -> None:
    """Numbers behind the report, for programmatic checks."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "dates":      metrics.get("dates", 0),
        "max_spread": metrics.get("max_spread", 0),
        "roles": {
            role: {k: (round(v, 4) if isinstance(v, float) else v)
                   for k, v in stats.items() if k != "counts"}
            for role, stats in metrics.get("roles", {}).items()
        },
        "counts":     metrics.get("counts", {}),
        "starvation": metrics.get("starvation", []),
    }
    with open(output_path, "w") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    logger.info(f"Fairness JSON exported → {output_path}")
