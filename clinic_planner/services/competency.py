"""Operating-room role eligibility."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, List, Optional, Set


class RoleCode(str, Enum):
    INSTRUMENTISTE = "instrumentiste"
    AIDE_SALLE = "aide_salle"
    INSTRUMENTISTE_AIDE_SALLE = "instrumentiste_aide_salle"
    ANESTHESISTE = "anesthesiste"
    ACCUEIL_DERMATO = "accueil_dermato"
    ACCUEIL_OPHTALMO = "accueil_ophtalmo"
    ACCUEIL = "accueil"

    @classmethod
    def parse(cls, value: "str | RoleCode | None") -> Optional["RoleCode"]:
        """Return the RoleCode for value, or None if empty or unrecognized."""
        if value is None or isinstance(value, RoleCode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


ROLE_LABELS = {
    RoleCode.INSTRUMENTISTE: "Scrub nurse",
    RoleCode.AIDE_SALLE: "Room assistant",
    RoleCode.INSTRUMENTISTE_AIDE_SALLE: "Scrub nurse / Room assistant",
    RoleCode.ANESTHESISTE: "Anaesthesia assistant",
    RoleCode.ACCUEIL_DERMATO: "Dermatology reception",
    RoleCode.ACCUEIL_OPHTALMO: "Ophthalmology reception",
    RoleCode.ACCUEIL: "Reception",
}


def is_eligible(granted: Iterable["RoleCode | str"], required: "RoleCode | str | None") -> bool:
    """
    Decide whether a person holding `granted` roles satisfies `required`.

    Umbrella roles (instrumentiste_aide_salle, accueil) accept any of their
    specializations; a specialized role is never satisfied by its umbrella.
    """
    role = RoleCode.parse(required)
    if role is None:
        return False
    held: Set[RoleCode] = {r for r in (RoleCode.parse(g) for g in granted) if r is not None}

    if role is RoleCode.INSTRUMENTISTE:
        return RoleCode.INSTRUMENTISTE in held
    elif role is RoleCode.AIDE_SALLE:
        return RoleCode.AIDE_SALLE in held
    elif role is RoleCode.INSTRUMENTISTE_AIDE_SALLE:
        return bool(
            held & {RoleCode.INSTRUMENTISTE, RoleCode.AIDE_SALLE, RoleCode.INSTRUMENTISTE_AIDE_SALLE}
        )
    elif role is RoleCode.ANESTHESISTE:
        return RoleCode.ANESTHESISTE in held
    elif role is RoleCode.ACCUEIL_DERMATO:
        return RoleCode.ACCUEIL_DERMATO in held
    elif role is RoleCode.ACCUEIL_OPHTALMO:
        return RoleCode.ACCUEIL_OPHTALMO in held
    elif role is RoleCode.ACCUEIL:
        return bool(held & {RoleCode.ACCUEIL, RoleCode.ACCUEIL_DERMATO, RoleCode.ACCUEIL_OPHTALMO})
    return False


def granted_roles(person: Any) -> Set[RoleCode]:
    """Role codes granted by a staff record's competency flags."""
    return {role for role in RoleCode if bool(getattr(person, role.value, False))}


def eligible_people(people: Iterable[Any], required: "RoleCode | str | None") -> List[Any]:
    """People eligible for `required`, sorted by full name (case-insensitive)."""
    eligible = [p for p in people if is_eligible(granted_roles(p), required)]
    return sorted(eligible, key=lambda p: (getattr(p, "full_name", "") or "").lower())


def role_label(role: "RoleCode | str | None") -> str:
    parsed = RoleCode.parse(role)
    if parsed is None:
        return "Unspecified" if not role else str(role)
    return ROLE_LABELS[parsed]
