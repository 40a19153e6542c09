"""Closing-role coverage (1R / 2F / 3F) for sites requiring formal closure."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Set, Tuple

from sqlalchemy.orm import Session

from clinic_planner.domain.repositories import SiteRepository, StaffAssignmentRepository

MARKERS = ("1R", "2F", "3F")


@dataclass(frozen=True)
class MarkerRow:
    """Minimal closing-role record: who holds which markers at a site on a date."""

    date: date
    site_id: str
    person_id: str
    is_1r: bool = False
    is_2f: bool = False
    is_3f: bool = False
    status: str = "confirmed"


@dataclass(frozen=True)
class ClosureDayStatus:
    date: date
    has_unique_1r: bool
    has_unique_2f: bool
    multiple_1r: bool
    multiple_2f: bool
    multiple_3f: bool
    has_3f: bool = False

    @property
    def compliant(self) -> bool:
        return (
            self.has_unique_1r
            and self.has_unique_2f
            and not self.multiple_1r
            and not self.multiple_2f
            and not self.multiple_3f
        )

    @property
    def understaffed_markers(self) -> List[str]:
        """Required markers nobody holds."""
        out = []
        if not self.has_unique_1r and not self.multiple_1r:
            out.append("1R")
        if not self.has_unique_2f and not self.multiple_2f:
            out.append("2F")
        return out

    @property
    def overstaffed_markers(self) -> List[str]:
        """Markers held by more than one distinct person."""
        flags = (self.multiple_1r, self.multiple_2f, self.multiple_3f)
        return [m for m, flag in zip(MARKERS, flags) if flag]

    @property
    def failing_markers(self) -> List[str]:
        return self.understaffed_markers + self.overstaffed_markers


@dataclass
class SiteClosureReport:
    site_id: str
    needs_closure: bool
    days: List[ClosureDayStatus] = field(default_factory=list)
    site_name: str = ""

    @property
    def has_issues(self) -> bool:
        return any(not d.compliant for d in self.days)

    @property
    def compliant(self) -> bool:
        return not self.has_issues

    def failing_days(self) -> List[Tuple[date, List[str]]]:
        return [(d.date, d.failing_markers) for d in self.days if not d.compliant]


def date_range(start: date, end: date) -> List[date]:
    """Inclusive list of dates from start to end."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def _is_cancelled(assignment: Any) -> bool:
    return str(getattr(assignment, "status", "") or "").lower() in {"cancelled", "annule"}


def day_status(on_date: date, day_assignments: Iterable[Any]) -> ClosureDayStatus:
    """Compute the closure status of one day from that day's assignments."""
    holders: Dict[str, Set[str]] = {m: set() for m in MARKERS}
    for a in day_assignments:
        if _is_cancelled(a):
            continue
        person = getattr(a, "person_id", None)
        if person is None:
            continue
        if getattr(a, "is_1r", False):
            holders["1R"].add(person)
        if getattr(a, "is_2f", False):
            holders["2F"].add(person)
        if getattr(a, "is_3f", False):
            holders["3F"].add(person)

    return ClosureDayStatus(
        date=on_date,
        has_unique_1r=len(holders["1R"]) == 1,
        has_unique_2f=len(holders["2F"]) == 1,
        multiple_1r=len(holders["1R"]) > 1,
        multiple_2f=len(holders["2F"]) > 1,
        multiple_3f=len(holders["3F"]) > 1,
        has_3f=len(holders["3F"]) > 0,
    )


def evaluate(
    site_id: str,
    dates: Iterable[date],
    assignments_for_site: Iterable[Any],
    needs_closure: bool = True,
    site_name: str = "",
) -> SiteClosureReport:
    """One ClosureDayStatus per date; assignments for other sites are ignored."""
    by_date: Dict[date, List[Any]] = defaultdict(list)
    for a in assignments_for_site:
        if getattr(a, "site_id", site_id) != site_id:
            continue
        by_date[a.date].append(a)

    return SiteClosureReport(
        site_id=site_id,
        needs_closure=needs_closure,
        site_name=site_name,
        days=[day_status(d, by_date.get(d, [])) for d in dates],
    )


def evaluate_closure_sites(session: Session, start: date, end: date) -> List[SiteClosureReport]:
    """Closure reports for every active site requiring closure, over [start, end]."""
    days = date_range(start, end)
    reports = []
    for site in SiteRepository.get_closure_sites(session):
        rows = StaffAssignmentRepository.get_for_site(session, site.id, start, end)
        reports.append(evaluate(site.id, days, rows, needs_closure=True, site_name=site.name))
    return reports
