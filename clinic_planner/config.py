"""Configuration loading for the clinic planner (YAML)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml

from .timewindow import Period, PeriodBounds, parse_time


@dataclass
class PeriodsConfig:
    morning_start: str = "07:30"
    morning_end: str = "12:00"
    afternoon_start: str = "13:00"
    afternoon_end: str = "17:00"

    def bounds(self) -> Dict[Period, PeriodBounds]:
        return {
            Period.MORNING: PeriodBounds(parse_time(self.morning_start), parse_time(self.morning_end)),
            Period.AFTERNOON: PeriodBounds(parse_time(self.afternoon_start), parse_time(self.afternoon_end)),
        }


@dataclass
class DatabaseConfig:
    url: str = "sqlite:///clinic_planner.db"


@dataclass
class OptimizerConfig:
    url: str = "http://localhost:8000/optimize-week"
    api_key_env: str = "PLANNING_API_KEY"
    timeout_sec: float = 120.0
    minimize_changes: bool = True


@dataclass
class PenaltyWeights:
    site_change: float = 0.8
    multiple_closures: float = 0.6
    overflow: float = 0.5


@dataclass
class FlagshipConfig:
    site_name: str = "Centre Esplanade - Ophtalmologie"
    site_id: str | None = None
    capacity: int = 2


@dataclass
class PlannerConfig:
    periods: PeriodsConfig = field(default_factory=PeriodsConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)
    penalties: PenaltyWeights = field(default_factory=PenaltyWeights)
    flagship: FlagshipConfig = field(default_factory=FlagshipConfig)

    def period_bounds(self) -> Dict[Period, PeriodBounds]:
        return self.periods.bounds()

    def validate(self) -> None:
        """
        Validate the configuration before it is used.

        Raises:
            ValueError: If periods are empty or overlap, weights are negative,
                or the optimizer timeout is not positive.
        """
        bounds = self.period_bounds()
        for period, pb in bounds.items():
            if not pb.start < pb.end:
                raise ValueError(f"Period {period.value} must start before it ends: {pb.start}-{pb.end}")
        morning, afternoon = bounds[Period.MORNING], bounds[Period.AFTERNOON]
        if morning.overlaps(afternoon.start, afternoon.end):
            raise ValueError("Morning and afternoon periods must not overlap")

        for name in ("site_change", "multiple_closures", "overflow"):
            if getattr(self.penalties, name) < 0:
                raise ValueError(f"Penalty weight {name} must be non-negative")
        if self.optimizer.timeout_sec <= 0:
            raise ValueError("optimizer.timeout_sec must be > 0")
        if self.flagship.capacity < 0:
            raise ValueError("flagship.capacity must be non-negative")


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a mapping")
    return value


def _pick(cls, values: Dict[str, Any]):
    known = cls.__dataclass_fields__.keys()
    return cls(**{k: v for k, v in values.items() if k in known})


def _periods_from(raw: Dict[str, Any]) -> PeriodsConfig:
    cfg = PeriodsConfig()
    for name in ("morning", "afternoon"):
        section = _section(raw, name)
        if "start" in section:
            setattr(cfg, f"{name}_start", str(section["start"]))
        if "end" in section:
            setattr(cfg, f"{name}_end", str(section["end"]))
    return cfg


def config_from_dict(raw: Dict[str, Any]) -> PlannerConfig:
    """Build a PlannerConfig from a parsed mapping, ignoring unknown keys."""
    cfg = PlannerConfig(
        periods=_periods_from(_section(raw, "periods")),
        database=_pick(DatabaseConfig, _section(raw, "database")),
        optimizer=_pick(OptimizerConfig, _section(raw, "optimizer")),
        penalties=_pick(PenaltyWeights, _section(raw, "penalties")),
        flagship=_pick(FlagshipConfig, _section(raw, "flagship")),
    )
    cfg.validate()
    return cfg


def load_config(path: str | Path) -> PlannerConfig:
    """Load and validate a YAML configuration file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return config_from_dict(raw)
