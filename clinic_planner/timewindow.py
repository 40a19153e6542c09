"""Half-open time interval arithmetic over the two clinic periods."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from enum import Enum
from typing import Dict


class Period(str, Enum):
    """Clinic half-day. Values are the tokens used in slot identifiers."""

    MORNING = "matin"
    AFTERNOON = "apres_midi"

    @classmethod
    def ordered(cls) -> tuple["Period", "Period"]:
        """Fixed iteration order: morning before afternoon."""
        return (cls.MORNING, cls.AFTERNOON)

    @property
    def label(self) -> str:
        return "morning" if self is Period.MORNING else "afternoon"


def parse_time(value: str | time) -> time:
    """Parse "HH:MM" or "HH:MM:SS" into a time."""
    if isinstance(value, time):
        return value
    parts = [int(x) for x in str(value).strip().split(":")]
    if len(parts) == 2:
        parts.append(0)
    if len(parts) != 3:
        raise ValueError(f"Invalid time value: {value!r}")
    return time(parts[0], parts[1], parts[2])


def overlaps(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """
    Half-open overlap test of [start_a, end_a) and [start_b, end_b).

    Touching boundaries do not overlap.
    """
    return start_a < end_b and end_a > start_b


def contains(start: time, end: time, moment: time) -> bool:
    """True if moment lies in [start, end)."""
    return start <= moment < end


@dataclass(frozen=True)
class PeriodBounds:
    start: time
    end: time

    def overlaps(self, start: time, end: time) -> bool:
        return overlaps(start, end, self.start, self.end)

    def contains(self, moment: time) -> bool:
        return contains(self.start, self.end, moment)


DEFAULT_PERIOD_BOUNDS: Dict[Period, PeriodBounds] = {
    Period.MORNING: PeriodBounds(time(7, 30), time(12, 0)),
    Period.AFTERNOON: PeriodBounds(time(13, 0), time(17, 0)),
}


def periods_for_window(
    start: time | None,
    end: time | None,
    period_bounds: Dict[Period, PeriodBounds] | None = None,
) -> list[Period]:
    """Periods overlapped by [start, end), in fixed order. Missing times give none."""
    if start is None or end is None:
        return []
    bounds = period_bounds or DEFAULT_PERIOD_BOUNDS
    return [p for p in Period.ordered() if bounds[p].overlaps(start, end)]
