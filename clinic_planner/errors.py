"""Failure kinds surfaced by the planner core."""

from __future__ import annotations

from dataclasses import dataclass


class UpstreamFailure(RuntimeError):
    """An I/O collaborator (store, directory or optimizer) failed or timed out."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


@dataclass(frozen=True)
class ResolutionGap:
    """A record skipped during decomposition because a reference did not resolve."""

    record_id: str
    record_kind: str  # "need" or "capacity"
    missing_ref: str  # e.g. "site:<id>", "secretary:<id>", "backup:<id>"


class ClaimConflict(UpstreamFailure):
    """The store rejected a claim because the person already holds that period."""
