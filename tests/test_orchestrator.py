"""Tests for Orchestrator - slot preparation, optimizer call and rescoring."""

from datetime import date, time

import pytest

from clinic_planner.config import PlannerConfig
from clinic_planner.engine.base import Optimizer, OptimizerResponse
from clinic_planner.engine.orchestrator import Orchestrator, closure_reports_from_batch
from clinic_planner.errors import UpstreamFailure
from clinic_planner.result_types import AssignedPerson, Assignment
from clinic_planner.services.scoring import AssignmentStatus
from clinic_planner.timewindow import Period

MON = date(2025, 3, 3)


class StubOptimizer(Optimizer):
    """Returns a fixed batch and records the request it was given."""

    name = "stub"

    def __init__(self, assignments, stats=None):
        self.assignments = assignments
        self.stats = stats or {}
        self.requests = []

    def optimize(self, request):
        self.requests.append(request)
        return OptimizerResponse(assignments=list(self.assignments), stats=dict(self.stats))


class FailingOptimizer(Optimizer):
    def optimize(self, request):
        raise UpstreamFailure("stub", "timed out")


def _batch():
    return [
        Assignment(
            need_slot_id="need-1-matin",
            date=MON,
            period=Period.MORNING,
            site_id="site-esp",
            site_name="Centre Esplanade - Ophtalmologie",
            site_closure=True,
            required_count=2,
            persons=[AssignedPerson("sec-1", is_1r=True), AssignedPerson("bkp-1", is_2f=True)],
        ),
        Assignment(
            need_slot_id="need-1-apres_midi",
            date=MON,
            period=Period.AFTERNOON,
            site_id="site-esp",
            site_name="Centre Esplanade - Ophtalmologie",
            site_closure=True,
            required_count=2,
            persons=[AssignedPerson("sec-2", preferred_site_id="site-ville")],
            solver_status=AssignmentStatus.SATISFIED,
        ),
        Assignment(
            need_slot_id="need-2-matin",
            date=MON,
            period=Period.MORNING,
            site_id="site-ville",
            site_name="Cabinet Vieille Ville",
            required_count=1,
            persons=[],
        ),
    ]


def test_prepare_slots(db_session, sample_week):
    orchestrator = Orchestrator(PlannerConfig(), StubOptimizer([]))
    need_slots, capacity_slots, gaps = orchestrator.prepare_slots(db_session, MON, MON)
    assert len(need_slots) == 3
    assert len(capacity_slots) == 3
    assert gaps == []


def test_run_rescores_batch(db_session, sample_week):
    optimizer = StubOptimizer(_batch(), stats={"satisfait": 2, "partiel": 0, "non_satisfait": 1})
    report = Orchestrator(PlannerConfig(), optimizer).run(db_session, MON, MON, flexible_overrides={"sec-1": 1})

    request = optimizer.requests[0]
    assert request.dates == [MON]
    assert request.flexible_overrides == {"sec-1": 1}
    assert request.minimize_changes is True

    assert report.score.stats == {"satisfait": 1, "partiel": 1, "non_satisfait": 1, "satisfaction_rate": 33.3}
    assert report.score.penalties.site_change == 1
    assert [a.need_slot_id for a in report.mismatches] == ["need-1-apres_midi"]
    assert report.solver_stats["satisfait"] == 2

    assert [r.site_id for r in report.closure_reports] == ["site-esp"]
    assert report.closure_compliant is True


def test_run_reports_gaps_and_keeps_going(db_session, sample_week):
    from clinic_planner.domain.models import Need

    db_session.add(Need(id="need-x", date=MON, site_id="site-gone", start_time=None, end_time=None))
    db_session.commit()

    report = Orchestrator(PlannerConfig(), StubOptimizer([])).run(db_session, MON, MON)
    assert [g.record_id for g in report.gaps] == ["need-x"]
    assert report.assignments == []


def test_optimizer_failure_propagates(db_session, sample_week):
    with pytest.raises(UpstreamFailure):
        Orchestrator(PlannerConfig(), FailingOptimizer()).run(db_session, MON, MON)


def test_closure_reports_from_batch_flags_missing_roles():
    tue = date(2025, 3, 4)
    reports = closure_reports_from_batch(_batch(), [MON, tue])
    assert len(reports) == 1
    assert reports[0].failing_days() == [(tue, ["1R", "2F"])]


def test_run_flags_ineligible_role(db_session, sample_week):
    from clinic_planner.domain.models import Need

    db_session.add(Need(id="need-or", date=MON, site_id="site-ville", kind="operating_room",
                        role_requirement="instrumentiste", start_time=time(8, 0), end_time=time(16, 0)))
    db_session.commit()
    batch = [
        Assignment(need_slot_id="need-or-matin", date=MON, period=Period.MORNING, site_id="site-ville",
                   required_count=1, persons=[AssignedPerson("sec-2")]),
        Assignment(need_slot_id="need-or-apres_midi", date=MON, period=Period.AFTERNOON, site_id="site-ville",
                   required_count=1, persons=[AssignedPerson("sec-1")]),
    ]

    report = Orchestrator(PlannerConfig(), StubOptimizer(batch)).run(db_session, MON, MON)

    assert report.validation["valid"] is False
    assert report.validation["errors"] == [
        "Person sec-2 is not eligible for role instrumentiste in slot need-or-matin"
    ]


def test_closure_sites_come_from_directory(db_session, sample_week):
    # No site_closure flag from the optimizer; site-esp requires closure in the store
    batch = [
        Assignment(need_slot_id="need-1-matin", date=MON, period=Period.MORNING, site_id="site-esp",
                   required_count=2, persons=[AssignedPerson("sec-1", is_1r=True), AssignedPerson("bkp-1", is_2f=True)]),
        Assignment(need_slot_id="need-1-apres_midi", date=MON, period=Period.AFTERNOON, site_id="site-esp",
                   required_count=2, persons=[AssignedPerson("sec-2", is_1r=True)]),
    ]
    report = Orchestrator(PlannerConfig(), StubOptimizer(batch)).run(db_session, MON, MON)

    assert report.score.penalties.multiple_closures == 1
    assert [r.site_id for r in report.closure_reports] == ["site-esp"]
    assert report.closure_reports[0].site_name == "Centre Esplanade - Ophtalmologie"
    assert report.closure_reports[0].failing_days() == [(MON, ["1R"])]
    assert report.closure_compliant is False


def test_closure_site_missing_from_batch_is_reported(db_session, sample_week):
    report = Orchestrator(PlannerConfig(), StubOptimizer([])).run(db_session, MON, MON)
    assert [r.site_id for r in report.closure_reports] == ["site-esp"]
    assert report.closure_reports[0].failing_days() == [(MON, ["1R", "2F"])]
