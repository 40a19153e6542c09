"""Command-line interface for the clinic planner."""

from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path

from clinic_planner.config import PlannerConfig, load_config
from clinic_planner.domain.db import get_session, init_database
from clinic_planner.domain.repositories import SessionClaimsStore
from clinic_planner.engine.orchestrator import Orchestrator
from clinic_planner.engine.remote import HttpOptimizer
from clinic_planner.services.closure import evaluate_closure_sites
from clinic_planner.services.overlap import OverlapValidator, overlap_error_message
from clinic_planner.timewindow import Period
from clinic_planner.validator import summarize_assignments, summarize_closure, week_dates

logger = logging.getLogger("clinic_planner")


def _config(args: argparse.Namespace) -> PlannerConfig:
    cfg = load_config(args.config) if args.config else PlannerConfig()
    if args.db:
        cfg.database.url = args.db
    return cfg


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    cfg = _config(args)
    init_database(cfg.database.url)
    print(f"[OK] Database initialized: {cfg.database.url}")


def _cmd_slots(args: argparse.Namespace) -> None:
    """Decompose stored needs and capacities into half-day slots."""
    cfg = _config(args)
    session = get_session(cfg.database.url)
    try:
        orchestrator = Orchestrator(cfg, optimizer=HttpOptimizer(cfg.optimizer))
        need_slots, capacity_slots, gaps = orchestrator.prepare_slots(session, args.start, args.end)
        print(f"[OK] {len(need_slots)} need slot(s), {len(capacity_slots)} capacity slot(s)")
        for gap in gaps:
            print(f"[WARN] Skipped {gap.record_kind} {gap.record_id}: unresolved {gap.missing_ref}")
    finally:
        session.close()


def _cmd_check_overlap(args: argparse.Namespace) -> None:
    """Check whether a person already holds the requested periods."""
    cfg = _config(args)
    session = get_session(cfg.database.url)
    try:
        periods = {Period(p) for p in args.periods}
        result = OverlapValidator(SessionClaimsStore(session)).check_overlap(args.person, args.date, periods)
        if result.has_overlap:
            print(f"[WARN] {overlap_error_message(result, args.kind)}")
        else:
            print("[OK] No overlap")
    finally:
        session.close()


def _cmd_closure(args: argparse.Namespace) -> None:
    """Report closing-role coverage for closure sites over a week."""
    cfg = _config(args)
    session = get_session(cfg.database.url)
    try:
        days = week_dates(args.start)
        reports = evaluate_closure_sites(session, days[0], days[-1])
        print(summarize_closure(reports))
    finally:
        session.close()


def _cmd_optimize(args: argparse.Namespace) -> None:
    """Call the optimizer for a date range and check its output."""
    cfg = _config(args)
    session = get_session(cfg.database.url)
    try:
        overrides = json.loads(Path(args.overrides).read_text(encoding="utf-8")) if args.overrides else {}
        orchestrator = Orchestrator(cfg, optimizer=HttpOptimizer(cfg.optimizer))
        report = orchestrator.run(session, args.start, args.end, flexible_overrides=overrides)

        print(summarize_assignments(report.assignments))
        print("")
        print(summarize_closure(report.closure_reports))
        for error in report.validation["errors"]:
            print(f"[ERROR] {error}")
        penalties = report.score.penalties.as_dict()
        print(f"[OK] Stats: {report.score.stats} | penalties: {penalties} | total score: {report.score.total_score:.2f}")
    except Exception as e:
        logger.error("Optimization failed: %s", e)
        raise
    finally:
        session.close()


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(prog="clinic-planner", description="Clinic staff rostering checks")
    parser.add_argument("--db", help="Database URL (overrides config)")
    parser.add_argument("--config", help="Path to config YAML")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-db", help="Initialize database")
    init.set_defaults(func=_cmd_init_db)

    sl = sub.add_parser("slots", help="Decompose needs and capacities into slots")
    sl.add_argument("--start", required=True, type=date.fromisoformat)
    sl.add_argument("--end", required=True, type=date.fromisoformat)
    sl.set_defaults(func=_cmd_slots)

    ov = sub.add_parser("check-overlap", help="Check a person's existing half-day claims")
    ov.add_argument("--person", required=True)
    ov.add_argument("--date", required=True, type=date.fromisoformat)
    ov.add_argument("--periods", nargs="+", choices=[p.value for p in Period], default=[p.value for p in Period])
    ov.add_argument("--kind", choices=["physician", "staff"], default="staff")
    ov.set_defaults(func=_cmd_check_overlap)

    cl = sub.add_parser("closure", help="Closing-role coverage for a week")
    cl.add_argument("--start", required=True, type=date.fromisoformat, help="First day of the week")
    cl.set_defaults(func=_cmd_closure)

    op = sub.add_parser("optimize", help="Run the remote optimizer and check its output")
    op.add_argument("--start", required=True, type=date.fromisoformat)
    op.add_argument("--end", required=True, type=date.fromisoformat)
    op.add_argument("--overrides", help="JSON file with flexible overrides")
    op.set_defaults(func=_cmd_optimize)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
