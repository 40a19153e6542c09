"""Fulfillment status and penalty counters for optimizer output."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Collection, Dict, Iterable, List, Set, Tuple

from clinic_planner.config import FlagshipConfig, PenaltyWeights

if TYPE_CHECKING:
    from clinic_planner.result_types import Assignment


class AssignmentStatus(str, Enum):
    SATISFIED = "satisfied"
    ROUNDED_DOWN = "rounded_down"
    UNSATISFIED = "unsatisfied"

    @classmethod
    def parse(cls, value: str | None) -> "AssignmentStatus | None":
        if value is None:
            return None
        aliases = {
            "satisfait": cls.SATISFIED,
            "arrondi_inferieur": cls.ROUNDED_DOWN,
            "partial": cls.ROUNDED_DOWN,
            "partiel": cls.ROUNDED_DOWN,
            "non_satisfait": cls.UNSATISFIED,
        }
        key = str(value).strip().lower()
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            return None


def classify(required_count: int, assigned_count: int) -> AssignmentStatus:
    """Derive the fulfillment status from counts alone."""
    if assigned_count >= required_count:
        return AssignmentStatus.SATISFIED
    if assigned_count > 0:
        return AssignmentStatus.ROUNDED_DOWN
    return AssignmentStatus.UNSATISFIED


@dataclass(frozen=True)
class PenaltyCounters:
    site_change: int = 0
    multiple_closures: int = 0
    overflow: int = 0

    def total(self, weights: PenaltyWeights | None = None) -> float:
        """Weighted sum used to rank optimizer outputs."""
        w = weights or PenaltyWeights()
        return (
            w.site_change * self.site_change
            + w.multiple_closures * self.multiple_closures
            + w.overflow * self.overflow
        )

    def as_dict(self) -> Dict[str, int]:
        return {
            "site_change": self.site_change,
            "multiple_closures": self.multiple_closures,
            "overflow": self.overflow,
        }


@dataclass(frozen=True)
class BatchScore:
    stats: Dict[str, float]
    base_score: float
    penalties: PenaltyCounters
    total_score: float


def count_site_changes(batch: Iterable["Assignment"]) -> int:
    """Assigned people placed away from their known preferred site."""
    count = 0
    for a in batch:
        for person in a.persons:
            if person.preferred_site_id and person.preferred_site_id != a.site_id:
                count += 1
    return count


def count_multiple_closures(batch: Iterable["Assignment"], closure_site_ids: Collection[str] = ()) -> int:
    """
    (closure site, date) pairs where 1R or 2F is held by more than one person.

    A site counts as a closure site when the directory lists it in
    `closure_site_ids` or the optimizer flagged the assignment as such.
    """
    holders: Dict[Tuple[str, object], Dict[str, Set[str]]] = defaultdict(lambda: {"1R": set(), "2F": set()})
    for a in batch:
        if not (a.site_closure or a.site_id in closure_site_ids):
            continue
        day = holders[(a.site_id, a.date)]
        for person in a.persons:
            if person.is_1r:
                day["1R"].add(person.id)
            if person.is_2f:
                day["2F"].add(person.id)
    return sum(1 for day in holders.values() if len(day["1R"]) > 1 or len(day["2F"]) > 1)


def _is_flagship(a: "Assignment", flagship: FlagshipConfig) -> bool:
    if flagship.site_id is not None:
        return a.site_id == flagship.site_id
    return bool(flagship.site_name) and flagship.site_name in (a.site_name or "")


def count_overflow(batch: Iterable["Assignment"], flagship: FlagshipConfig | None = None) -> int:
    """People assigned at the flagship site beyond its capacity, per date/period."""
    flagship = flagship or FlagshipConfig()
    people: Dict[Tuple[object, object], Set[str]] = defaultdict(set)
    for a in batch:
        if _is_flagship(a, flagship):
            people[(a.date, a.period)].update(p.id for p in a.persons)
    return sum(max(0, len(ids) - flagship.capacity) for ids in people.values())


def accumulate_penalties(
    batch: Iterable["Assignment"],
    flagship: FlagshipConfig | None = None,
    closure_site_ids: Collection[str] = (),
) -> PenaltyCounters:
    items = list(batch)
    return PenaltyCounters(
        site_change=count_site_changes(items),
        multiple_closures=count_multiple_closures(items, closure_site_ids),
        overflow=count_overflow(items, flagship),
    )


def batch_stats(batch: Iterable["Assignment"]) -> Dict[str, float]:
    """Counts per recomputed status plus the satisfaction rate in percent."""
    counts = {s: 0 for s in AssignmentStatus}
    for a in batch:
        counts[a.status] += 1
    total = sum(counts.values())
    return {
        "satisfait": counts[AssignmentStatus.SATISFIED],
        "partiel": counts[AssignmentStatus.ROUNDED_DOWN],
        "non_satisfait": counts[AssignmentStatus.UNSATISFIED],
        "satisfaction_rate": round(100.0 * counts[AssignmentStatus.SATISFIED] / total, 1) if total else 0.0,
    }


def base_score(batch: Iterable["Assignment"]) -> float:
    """Sum of min(assigned, required) / required over assignments with a requirement."""
    score = 0.0
    for a in batch:
        if a.required_count > 0:
            score += min(a.assigned_count, a.required_count) / a.required_count
    return score


def status_mismatches(batch: Iterable["Assignment"]) -> List["Assignment"]:
    """Assignments whose solver-reported status disagrees with the recomputed one."""
    return [a for a in batch if a.solver_status is not None and a.solver_status != a.status]


def score_batch(
    batch: Iterable["Assignment"],
    weights: PenaltyWeights | None = None,
    flagship: FlagshipConfig | None = None,
    closure_site_ids: Collection[str] = (),
) -> BatchScore:
    """
    Score a full optimizer batch in one pass.

    Args:
        batch: Assignments returned by the optimizer
        weights: Penalty weights (defaults from PenaltyWeights)
        flagship: Flagship site settings (defaults from FlagshipConfig)
        closure_site_ids: Sites the directory marks as requiring closure

    Returns:
        BatchScore with recomputed stats, base score, counters and total
    """
    items = list(batch)
    penalties = accumulate_penalties(items, flagship, closure_site_ids)
    base = base_score(items)
    return BatchScore(
        stats=batch_stats(items),
        base_score=base,
        penalties=penalties,
        total_score=base - penalties.total(weights),
    )
