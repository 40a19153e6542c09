"""Services for planning logic."""

from .closure import ClosureDayStatus, SiteClosureReport, evaluate
from .competency import RoleCode, is_eligible
from .overlap import OverlapResult, OverlapValidator
from .scoring import AssignmentStatus, classify, score_batch
from .slots import CapacitySlot, NeedSlot, SlotDecomposer

__all__ = [
    "SlotDecomposer",
    "NeedSlot",
    "CapacitySlot",
    "RoleCode",
    "is_eligible",
    "OverlapValidator",
    "OverlapResult",
    "ClosureDayStatus",
    "SiteClosureReport",
    "evaluate",
    "AssignmentStatus",
    "classify",
    "score_batch",
]
