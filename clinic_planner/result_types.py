"""Assignment records exchanged with the optimizer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from clinic_planner.services.scoring import AssignmentStatus, classify
from clinic_planner.timewindow import Period


def _get(raw: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


@dataclass(frozen=True)
class AssignedPerson:
    id: str
    name: str = ""
    is_backup: bool = False
    is_1r: bool = False
    is_2f: bool = False
    is_3f: bool = False
    preferred_site_id: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: "Dict[str, Any] | str") -> "AssignedPerson":
        if not isinstance(raw, dict):
            return cls(id=str(raw))
        person_id = _get(raw, "id", "person_id", "secretaire_id", "backup_id")
        if person_id is None:
            raise ValueError(f"Assigned person without id: {raw!r}")
        return cls(
            id=str(person_id),
            name=str(_get(raw, "name", "nom", default="")),
            is_backup=bool(_get(raw, "is_backup", default=False)),
            is_1r=bool(_get(raw, "is_1r", default=False)),
            is_2f=bool(_get(raw, "is_2f", default=False)),
            is_3f=bool(_get(raw, "is_3f", default=False)),
            preferred_site_id=_get(raw, "preferred_site_id"),
        )


@dataclass(frozen=True)
class Assignment:
    """
    One need slot as filled by the optimizer.

    `status` is always recomputed from the counts; the solver's own value is
    kept in `solver_status` only for cross-checking.
    """

    need_slot_id: str
    date: date
    period: Period
    site_id: str
    required_count: int
    persons: List[AssignedPerson] = field(default_factory=list)
    site_name: str = ""
    site_closure: bool = False
    assigned_count_reported: Optional[int] = None
    solver_status: Optional[AssignmentStatus] = None

    @property
    def assigned_person_ids(self) -> List[str]:
        return [p.id for p in self.persons]

    @property
    def assigned_count(self) -> int:
        if self.assigned_count_reported is not None:
            return self.assigned_count_reported
        return len(self.persons)

    @property
    def status(self) -> AssignmentStatus:
        return classify(self.required_count, self.assigned_count)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Assignment":
        """Parse an optimizer record (English or French field names)."""
        persons_raw = _get(raw, "persons", "assigned", "secretaires")
        if persons_raw is None:
            persons_raw = _get(raw, "assigned_person_ids", default=[]) or []
        persons = [AssignedPerson.from_dict(p) for p in persons_raw]
        reported = _get(raw, "assigned_count", "nombre_assigne")
        return cls(
            need_slot_id=str(_get(raw, "need_slot_id", "creneau_besoin_id")),
            date=date.fromisoformat(str(_get(raw, "date"))),
            period=Period(_get(raw, "period", "periode")),
            site_id=str(_get(raw, "site_id")),
            required_count=int(_get(raw, "required_count", "nombre_requis", default=0)),
            persons=persons,
            site_name=str(_get(raw, "site_name", "site_nom", default="")),
            site_closure=bool(_get(raw, "site_closure", "site_fermeture", default=False)),
            assigned_count_reported=int(reported) if reported is not None else None,
            solver_status=AssignmentStatus.parse(_get(raw, "status")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "need_slot_id": self.need_slot_id,
            "date": self.date.isoformat(),
            "period": self.period.value,
            "site_id": self.site_id,
            "site_name": self.site_name,
            "site_closure": self.site_closure,
            "assigned_person_ids": self.assigned_person_ids,
            "required_count": self.required_count,
            "assigned_count": self.assigned_count,
            "status": self.status.value,
        }
