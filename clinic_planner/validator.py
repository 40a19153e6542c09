from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .result_types import Assignment
from .services.closure import date_range
from .services.competency import is_eligible
from .timewindow import Period

RolesLookup = Callable[[str], Iterable[Any]]


def validate_batch(
    batch: Iterable[Assignment],
    role_requirements: Optional[Dict[str, str]] = None,
    roles_of: Optional[RolesLookup] = None,
    closure_reports: Optional[Iterable[Any]] = None,
) -> Dict[str, Any]:
    """
    Structural checks on an optimizer batch.

    Returns:
        Dict with:
        - valid: bool
        - errors: List[str]
        - warnings: List[str]
    """
    results: Dict[str, Any] = {"valid": True, "errors": [], "warnings": []}
    items = list(batch)

    # 1. At most one slot per person per date/period
    held: Dict[Tuple[str, date, Period], List[str]] = defaultdict(list)
    for a in items:
        for person_id in a.assigned_person_ids:
            held[(person_id, a.date, a.period)].append(a.need_slot_id)
    for (person_id, on_date, period), slot_ids in held.items():
        if len(slot_ids) > 1:
            results["valid"] = False
            results["errors"].append(
                f"Person {person_id} holds {len(slot_ids)} slots on {on_date} {period.label}: {', '.join(slot_ids)}"
            )

    # 2. Role eligibility for operating-room slots
    if role_requirements and roles_of is not None:
        for a in items:
            required = role_requirements.get(a.need_slot_id)
            if not required:
                continue
            for person_id in a.assigned_person_ids:
                if not is_eligible(roles_of(person_id), required):
                    results["valid"] = False
                    results["errors"].append(
                        f"Person {person_id} is not eligible for role {required} in slot {a.need_slot_id}"
                    )

    # 3. Closure compliance is reported, not enforced
    for report in closure_reports or []:
        for on_date, markers in report.failing_days():
            results["warnings"].append(
                f"Closure issue at {report.site_name or report.site_id} on {on_date}: {', '.join(markers)}"
            )

    # 4. Unfilled slots
    unsatisfied = [a for a in items if a.assigned_count == 0 and a.required_count > 0]
    if unsatisfied:
        results["warnings"].append(f"{len(unsatisfied)} slot(s) left without anyone assigned")

    return results


def assignments_frame(batch: Iterable[Assignment]) -> pd.DataFrame:
    rows = [a.to_dict() for a in batch]
    columns = ["need_slot_id", "date", "period", "site_id", "site_name", "required_count", "assigned_count", "status"]
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows)[columns]


def summarize_assignments(batch: Iterable[Assignment]) -> str:
    df = assignments_frame(batch)
    if df.empty:
        return "No assignments."

    coverage = df.groupby(["date", "period"])[["required_count", "assigned_count"]].sum()
    status = df.groupby(["date", "status"]).size().unstack(fill_value=0)
    per_site = df.groupby("site_name")["assigned_count"].sum().sort_values(ascending=False)

    lines = ["Coverage per day per period (required / assigned):"]
    lines.append(coverage.to_string())
    lines.append("")
    lines.append("Status per day:")
    lines.append(status.to_string())
    lines.append("")
    lines.append("People assigned per site:")
    lines.append(per_site.to_string())
    return "\n".join(lines)


def summarize_closure(reports: Iterable[Any]) -> str:
    lines = []
    for report in reports:
        name = report.site_name or report.site_id
        if report.compliant:
            lines.append(f"[OK] {name}: closing roles covered every day")
            continue
        lines.append(f"[WARN] {name}:")
        for day in report.days:
            if day.compliant:
                continue
            parts = []
            if day.understaffed_markers:
                parts.append(f"missing {', '.join(day.understaffed_markers)}")
            if day.overstaffed_markers:
                parts.append(f"multiple {', '.join(day.overstaffed_markers)}")
            lines.append(f"  {day.date.isoformat()}: {'; '.join(parts)}")
    return "\n".join(lines) if lines else "No sites require closure."


def week_dates(start: date) -> List[date]:
    """Seven consecutive dates starting at start."""
    return date_range(start, start + timedelta(days=6))
