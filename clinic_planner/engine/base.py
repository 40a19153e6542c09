"""Optimizer interface that every solver backend must implement."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

from clinic_planner.result_types import Assignment


@dataclass
class OptimizerRequest:
    dates: List[date]
    minimize_changes: bool = True
    flexible_overrides: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "dates": [d.isoformat() for d in self.dates],
            "minimize_changes": self.minimize_changes,
            "flexible_overrides": dict(self.flexible_overrides),
        }


@dataclass
class OptimizerResponse:
    assignments: List[Assignment]
    stats: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "OptimizerResponse":
        """
        Parse the optimizer's JSON body.

        Raises:
            ValueError: If the body is not a mapping or an assignment is malformed
        """
        if not isinstance(payload, dict):
            raise ValueError("Optimizer response must be a JSON object")
        records = payload.get("assignments") or []
        return cls(
            assignments=[Assignment.from_dict(r) for r in records],
            stats=dict(payload.get("stats") or {}),
        )


class Optimizer(ABC):
    """
    Abstract base class for the external optimizer.

    Implementations decide who is assigned where; the planner core only
    prepares inputs and checks what comes back.
    """

    name: str = "optimizer"

    @abstractmethod
    def optimize(self, request: OptimizerRequest) -> OptimizerResponse:
        """
        Run the optimizer for the requested dates.

        Args:
            request: Dates to plan and solver options

        Returns:
            OptimizerResponse with assignment-shaped records

        Raises:
            UpstreamFailure: If the optimizer cannot be reached or fails
        """
        pass
