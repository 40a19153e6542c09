"""Optimizer boundary and orchestration."""

from .base import Optimizer, OptimizerRequest, OptimizerResponse
from .orchestrator import OptimizationReport, Orchestrator
from .remote import HttpOptimizer

__all__ = [
    "Optimizer",
    "OptimizerRequest",
    "OptimizerResponse",
    "HttpOptimizer",
    "Orchestrator",
    "OptimizationReport",
]
