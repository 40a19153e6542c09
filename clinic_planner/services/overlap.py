"""Pre-commit check that a person does not already hold a requested period.

This is a read-then-decide check, not mutual exclusion: two callers can both
see a period as free and then both try to claim it. The claims table's unique
key on (person_id, date, period) is what rejects the second claim, so callers
must re-validate (or rely on ClaimConflict) immediately before committing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Protocol, Set

from clinic_planner.timewindow import Period


class ClaimsStore(Protocol):
    def claimed_periods(self, person_id: str, on_date: date) -> Set[Period]: ...


@dataclass(frozen=True)
class OverlapResult:
    has_overlap: bool
    conflicting_period: Optional[Period] = None
    conflicting_date: Optional[date] = None


NO_OVERLAP = OverlapResult(has_overlap=False)


class OverlapValidator:
    """Report the first requested period a person already holds on a date."""

    def __init__(self, claims: ClaimsStore):
        self.claims = claims

    def check_overlap(self, person_id: str, on_date: date, candidate_periods: Iterable[Period]) -> OverlapResult:
        wanted = set(candidate_periods)
        if not wanted:
            return NO_OVERLAP
        existing = self.claims.claimed_periods(person_id, on_date)
        for period in Period.ordered():
            if period in wanted and period in existing:
                return OverlapResult(has_overlap=True, conflicting_period=period, conflicting_date=on_date)
        return NO_OVERLAP


def overlap_error_message(result: OverlapResult, person_kind: str) -> str:
    """Human-readable conflict message; empty when there is no overlap."""
    if not result.has_overlap or result.conflicting_period is None or result.conflicting_date is None:
        return ""
    person = "This physician" if person_kind == "physician" else "This staff member"
    when = "in the morning" if result.conflicting_period is Period.MORNING else "in the afternoon"
    return f"{person} already works {when} on {result.conflicting_date.isoformat()}"
