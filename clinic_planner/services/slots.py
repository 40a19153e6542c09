"""Decomposition of needs and capacities into canonical half-day slots."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from clinic_planner.errors import ResolutionGap
from clinic_planner.timewindow import DEFAULT_PERIOD_BOUNDS, Period, PeriodBounds, periods_for_window

logger = logging.getLogger(__name__)


class Directory(Protocol):
    """Site/person lookups; None means the record does not exist."""

    def get_site(self, site_id: str) -> Optional[Any]: ...

    def get_secretary(self, secretary_id: str) -> Optional[Any]: ...

    def get_backup(self, backup_id: str) -> Optional[Any]: ...


def slot_id(source_id: str, period: Period) -> str:
    """Deterministic slot identifier: "<source_id>-<period_token>"."""
    return f"{source_id}-{period.value}"


@dataclass(frozen=True)
class NeedSlot:
    id: str
    source_id: str
    date: date
    period: Period
    site_id: str
    site_name: str
    site_closure: bool
    kind: str
    specialty_id: str = ""
    physician_ids: Tuple[str, ...] = ()
    role_requirement: Optional[str] = None
    required_count: int = 1


@dataclass(frozen=True)
class CapacitySlot:
    id: str
    source_id: str
    date: date
    period: Period
    person_id: str
    is_backup: bool
    full_name: str
    specialties: Tuple[str, ...] = ()
    secretary_id: Optional[str] = None
    backup_id: Optional[str] = None
    preferred_site_id: Optional[str] = None
    prefers_alternate_site: bool = False


@dataclass
class DecompositionResult:
    """Slots produced by one decomposition call plus the records it skipped."""

    slots: List[Any] = field(default_factory=list)
    gaps: List[ResolutionGap] = field(default_factory=list)


def decompose(
    start: Optional[time],
    end: Optional[time],
    period_bounds: Dict[Period, PeriodBounds] | None = None,
) -> List[Period]:
    """Periods a [start, end) window produces slots for (zero, one or two)."""
    return periods_for_window(start, end, period_bounds)


def _full_name(person: Any) -> str:
    full = getattr(person, "full_name", None)
    if full:
        return full
    return f"{getattr(person, 'first_name', '') or ''} {getattr(person, 'last_name', '') or ''}".strip()


def _specialties(capacity: Any) -> Tuple[str, ...]:
    values = getattr(capacity, "specialty_list", None)
    if values is None:
        values = getattr(capacity, "specialties", None) or []
        if isinstance(values, str):
            values = [s.strip() for s in values.split(";") if s.strip()]
    return tuple(values)


class SlotDecomposer:
    """
    Expand needs and capacities into per-period slots.

    Site and person references are resolved through the directory on every
    call (no caching). A record whose reference does not resolve is skipped
    and reported as a ResolutionGap.
    """

    def __init__(self, directory: Directory, period_bounds: Dict[Period, PeriodBounds] | None = None):
        self.directory = directory
        self.period_bounds = period_bounds or DEFAULT_PERIOD_BOUNDS

    def need_slots(self, need: Any) -> Tuple[List[NeedSlot], Optional[ResolutionGap]]:
        """Slots for one need, or ([], gap) when its site cannot be resolved."""
        site = self.directory.get_site(need.site_id)
        if site is None:
            gap = ResolutionGap(str(need.id), "need", f"site:{need.site_id}")
            logger.warning("Skipping need %s: unknown site %s", need.id, need.site_id)
            return [], gap

        physician_id = getattr(need, "physician_id", None)
        required = getattr(need, "required_count", None)
        slots = [
            NeedSlot(
                id=slot_id(str(need.id), period),
                source_id=str(need.id),
                date=need.date,
                period=period,
                site_id=need.site_id,
                site_name=site.name,
                site_closure=bool(getattr(site, "needs_closure", False)),
                kind=getattr(need, "kind", None) or "physician",
                specialty_id=getattr(need, "specialty_id", None) or "",
                physician_ids=(physician_id,) if physician_id else (),
                role_requirement=getattr(need, "role_requirement", None),
                required_count=int(math.ceil(required)) if required is not None else 1,
            )
            for period in decompose(need.start_time, need.end_time, self.period_bounds)
        ]
        return slots, None

    def capacity_slots(self, capacity: Any) -> Tuple[List[CapacitySlot], Optional[ResolutionGap]]:
        """Slots for one capacity, or ([], gap) when its person cannot be resolved."""
        backup_id = getattr(capacity, "backup_id", None)
        secretary_id = getattr(capacity, "secretary_id", None)
        is_backup = backup_id is not None
        if is_backup:
            person = self.directory.get_backup(backup_id)
            ref = f"backup:{backup_id}"
        else:
            person = self.directory.get_secretary(secretary_id) if secretary_id is not None else None
            ref = f"secretary:{secretary_id}"
        if person is None:
            logger.warning("Skipping capacity %s: unknown person %s", capacity.id, ref)
            return [], ResolutionGap(str(capacity.id), "capacity", ref)

        full_name = _full_name(person)
        specialties = _specialties(capacity)
        slots = [
            CapacitySlot(
                id=slot_id(str(capacity.id), period),
                source_id=str(capacity.id),
                date=capacity.date,
                period=period,
                person_id=backup_id if is_backup else secretary_id,
                is_backup=is_backup,
                full_name=full_name,
                specialties=specialties,
                secretary_id=secretary_id,
                backup_id=backup_id,
                preferred_site_id=getattr(person, "preferred_site_id", None),
                prefers_alternate_site=bool(getattr(person, "prefers_alternate_site", False)),
            )
            for period in decompose(capacity.start_time, capacity.end_time, self.period_bounds)
        ]
        return slots, None

    def split_needs(self, needs: Iterable[Any]) -> DecompositionResult:
        result = DecompositionResult()
        for need in needs:
            slots, gap = self.need_slots(need)
            result.slots.extend(slots)
            if gap is not None:
                result.gaps.append(gap)
        return result

    def split_capacities(self, capacities: Iterable[Any]) -> DecompositionResult:
        result = DecompositionResult()
        for capacity in capacities:
            slots, gap = self.capacity_slots(capacity)
            result.slots.extend(slots)
            if gap is not None:
                result.gaps.append(gap)
        return result
