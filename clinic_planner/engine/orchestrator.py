"""Orchestrator - prepares slots, calls the optimizer and checks its output."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Set

from sqlalchemy.orm import Session

from clinic_planner.config import PlannerConfig
from clinic_planner.domain.repositories import (
    CapacityRepository,
    NeedRepository,
    PersonRepository,
    SessionDirectory,
    SiteRepository,
)
from clinic_planner.errors import ResolutionGap
from clinic_planner.result_types import Assignment
from clinic_planner.services.closure import MarkerRow, SiteClosureReport, date_range, evaluate
from clinic_planner.services.competency import RoleCode, granted_roles
from clinic_planner.services.scoring import BatchScore, score_batch, status_mismatches
from clinic_planner.services.slots import CapacitySlot, NeedSlot, SlotDecomposer
from clinic_planner.validator import validate_batch

from .base import Optimizer, OptimizerRequest

logger = logging.getLogger(__name__)


@dataclass
class OptimizationReport:
    need_slots: List[NeedSlot]
    capacity_slots: List[CapacitySlot]
    gaps: List[ResolutionGap]
    assignments: List[Assignment]
    score: BatchScore
    mismatches: List[Assignment]
    closure_reports: List[SiteClosureReport] = field(default_factory=list)
    solver_stats: Dict[str, Any] = field(default_factory=dict)
    validation: Dict[str, Any] = field(default_factory=dict)

    @property
    def closure_compliant(self) -> bool:
        return all(r.compliant for r in self.closure_reports)


def closure_reports_from_batch(
    batch: Iterable[Assignment],
    dates: List[date],
    closure_sites: Dict[str, str] | None = None,
) -> List[SiteClosureReport]:
    """
    Closure reports over `dates` for every closure site.

    `closure_sites` maps the directory's closure site ids to their names; each
    of them is reported even when the batch has no rows for it. Assignments
    the optimizer flags with `site_closure` are included as well.
    """
    closure_sites = closure_sites or {}
    rows: Dict[str, List[MarkerRow]] = {site_id: [] for site_id in closure_sites}
    names: Dict[str, str] = dict(closure_sites)
    for a in batch:
        if not (a.site_closure or a.site_id in closure_sites):
            continue
        names.setdefault(a.site_id, a.site_name)  # directory name wins
        site_rows = rows.setdefault(a.site_id, [])
        for p in a.persons:
            site_rows.append(
                MarkerRow(date=a.date, site_id=a.site_id, person_id=p.id, is_1r=p.is_1r, is_2f=p.is_2f, is_3f=p.is_3f)
            )
    return [
        evaluate(site_id, dates, site_rows, needs_closure=True, site_name=names[site_id])
        for site_id, site_rows in sorted(rows.items())
    ]


class Orchestrator:
    """
    Runs the planning data flow for a date range.

    needs/capacities -> slots -> optimizer -> rescoring + closure checks.
    """

    def __init__(self, cfg: PlannerConfig, optimizer: Optimizer):
        self.cfg = cfg
        self.optimizer = optimizer

    def prepare_slots(self, session: Session, start: date, end: date):
        """Decompose stored needs and capacities for [start, end]."""
        decomposer = SlotDecomposer(SessionDirectory(session), self.cfg.period_bounds())
        needs = decomposer.split_needs(NeedRepository.get_for_range(session, start, end))
        capacities = decomposer.split_capacities(CapacityRepository.get_for_range(session, start, end))
        logger.info(
            "Prepared %d need slot(s) and %d capacity slot(s) for %s..%s",
            len(needs.slots),
            len(capacities.slots),
            start,
            end,
        )
        return needs.slots, capacities.slots, needs.gaps + capacities.gaps

    @staticmethod
    def roles_lookup(session: Session):
        """Role codes granted to a person id; backups and unknown ids hold none."""

        def roles_of(person_id: str) -> Set[RoleCode]:
            secretary = PersonRepository.get_secretary(session, person_id)
            return granted_roles(secretary) if secretary is not None else set()

        return roles_of

    def run(
        self,
        session: Session,
        start: date,
        end: date,
        flexible_overrides: Dict[str, Any] | None = None,
    ) -> OptimizationReport:
        """
        Prepare slots, call the optimizer and check the returned batch.

        Raises:
            UpstreamFailure: If the store or the optimizer fails; nothing is
                synthesized in that case.
        """
        need_slots, capacity_slots, gaps = self.prepare_slots(session, start, end)
        if gaps:
            logger.warning("%d record(s) skipped during decomposition", len(gaps))

        dates = date_range(start, end)
        request = OptimizerRequest(
            dates=dates,
            minimize_changes=self.cfg.optimizer.minimize_changes,
            flexible_overrides=flexible_overrides or {},
        )
        response = self.optimizer.optimize(request)

        closure_sites = {site.id: site.name for site in SiteRepository.get_closure_sites(session)}
        score = score_batch(response.assignments, self.cfg.penalties, self.cfg.flagship, closure_sites.keys())
        mismatches = status_mismatches(response.assignments)
        if mismatches:
            logger.warning("%d assignment(s) carry a solver status that disagrees with their counts", len(mismatches))
        for key in ("satisfait", "partiel", "non_satisfait"):
            if key in response.stats and response.stats[key] != score.stats[key]:
                logger.warning("Solver stat %s=%s differs from recomputed %s", key, response.stats[key], score.stats[key])

        report = OptimizationReport(
            need_slots=need_slots,
            capacity_slots=capacity_slots,
            gaps=gaps,
            assignments=response.assignments,
            score=score,
            mismatches=mismatches,
            closure_reports=closure_reports_from_batch(response.assignments, dates, closure_sites),
            solver_stats=response.stats,
        )
        report.validation = validate_batch(
            response.assignments,
            role_requirements={s.id: s.role_requirement for s in need_slots if s.role_requirement},
            roles_of=self.roles_lookup(session),
            closure_reports=report.closure_reports,
        )
        for error in report.validation["errors"]:
            logger.warning("Batch check: %s", error)
        logger.info(
            "Optimization checked: %s satisfied, %s partial, %s unsatisfied, total score %.2f",
            score.stats["satisfait"],
            score.stats["partiel"],
            score.stats["non_satisfait"],
            score.total_score,
        )
        return report
