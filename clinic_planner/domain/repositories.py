"""Repository classes for data access."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterable, Iterator, List, Optional, Set

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_planner.errors import ClaimConflict, UpstreamFailure
from clinic_planner.timewindow import Period

from .models import Backup, Capacity, Need, PeriodClaim, Physician, Secretary, Site, StaffAssignment


@contextmanager
def _store_errors(source: str) -> Iterator[None]:
    """Re-raise database errors as UpstreamFailure naming the collaborator."""
    try:
        yield
    except SQLAlchemyError as e:
        raise UpstreamFailure(source, str(e)) from e


class SiteRepository:
    """Site directory lookups."""

    @staticmethod
    def get_by_id(session: Session, site_id: str) -> Optional[Site]:
        """Get site by ID, or None if unknown."""
        with _store_errors("site directory"):
            return session.get(Site, site_id)

    @staticmethod
    def get_closure_sites(session: Session) -> List[Site]:
        """Get active sites that require formal closing."""
        with _store_errors("site directory"):
            return (
                session.query(Site)
                .filter(Site.needs_closure.is_(True), Site.active.is_(True))
                .order_by(Site.name)
                .all()
            )


class PersonRepository:
    """Person directory lookups (secretaries, backups, physicians)."""

    @staticmethod
    def get_secretary(session: Session, secretary_id: str) -> Optional[Secretary]:
        with _store_errors("person directory"):
            return session.get(Secretary, secretary_id)

    @staticmethod
    def get_backup(session: Session, backup_id: str) -> Optional[Backup]:
        with _store_errors("person directory"):
            return session.get(Backup, backup_id)

    @staticmethod
    def get_physician(session: Session, physician_id: str) -> Optional[Physician]:
        with _store_errors("person directory"):
            return session.get(Physician, physician_id)

    @staticmethod
    def get_active_secretaries(session: Session) -> List[Secretary]:
        """Get all active secretaries."""
        with _store_errors("person directory"):
            return session.query(Secretary).filter(Secretary.active.is_(True)).all()


class NeedRepository:
    """Read access to needs keyed by date range and site."""

    @staticmethod
    def get_for_range(
        session: Session, start: date, end: date, site_id: str | None = None
    ) -> List[Need]:
        """Get needs with start <= date <= end, optionally for one site."""
        with _store_errors("need source"):
            query = session.query(Need).filter(Need.date >= start, Need.date <= end)
            if site_id is not None:
                query = query.filter(Need.site_id == site_id)
            return query.order_by(Need.date, Need.id).all()

    @staticmethod
    def bulk_create(session: Session, needs: List[Need]) -> None:
        with _store_errors("need source"):
            session.add_all(needs)
            session.commit()


class CapacityRepository:
    """Read access to capacities keyed by date range."""

    @staticmethod
    def get_for_range(session: Session, start: date, end: date) -> List[Capacity]:
        """Get capacities with start <= date <= end."""
        with _store_errors("capacity source"):
            return (
                session.query(Capacity)
                .filter(Capacity.date >= start, Capacity.date <= end)
                .order_by(Capacity.date, Capacity.id)
                .all()
            )

    @staticmethod
    def bulk_create(session: Session, capacities: List[Capacity]) -> None:
        with _store_errors("capacity source"):
            session.add_all(capacities)
            session.commit()


class ClaimRepository:
    """Claims store: periods already held per (person, date)."""

    @staticmethod
    def get_periods(session: Session, person_id: str, on_date: date) -> Set[Period]:
        """Get the set of periods already claimed by a person on a date."""
        with _store_errors("claims store"):
            rows = (
                session.query(PeriodClaim.period)
                .filter(PeriodClaim.person_id == person_id, PeriodClaim.date == on_date)
                .all()
            )
        return {Period(r.period) for r in rows}

    @staticmethod
    def claim(
        session: Session,
        person_id: str,
        person_kind: str,
        on_date: date,
        periods: Iterable[Period],
    ) -> List[PeriodClaim]:
        """
        Persist claims for the given periods.

        The unique key on (person_id, date, period) is what makes a claim
        exclusive; a concurrent duplicate is rejected here as ClaimConflict.
        """
        wanted = set(periods)
        claims = [
            PeriodClaim(person_id=person_id, person_kind=person_kind, date=on_date, period=p.value)
            for p in Period.ordered()
            if p in wanted
        ]
        try:
            session.add_all(claims)
            session.commit()
        except IntegrityError as e:
            session.rollback()
            raise ClaimConflict("claims store", f"{person_id} already holds a period on {on_date}") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise UpstreamFailure("claims store", str(e)) from e
        return claims


class StaffAssignmentRepository:
    """Generated planning rows carrying closing-role markers."""

    @staticmethod
    def get_for_site(
        session: Session,
        site_id: str,
        start: date,
        end: date,
        include_cancelled: bool = False,
    ) -> List[StaffAssignment]:
        """Get assignments for a site within [start, end], skipping cancelled rows by default."""
        with _store_errors("planning store"):
            query = session.query(StaffAssignment).filter(
                StaffAssignment.site_id == site_id,
                StaffAssignment.date >= start,
                StaffAssignment.date <= end,
            )
            if not include_cancelled:
                query = query.filter(StaffAssignment.status != "cancelled")
            return query.order_by(StaffAssignment.date, StaffAssignment.id).all()

    @staticmethod
    def bulk_create(session: Session, assignments: List[StaffAssignment]) -> None:
        with _store_errors("planning store"):
            session.add_all(assignments)
            session.commit()


class SessionDirectory:
    """Site/person directory bound to one session."""

    def __init__(self, session: Session):
        self.session = session

    def get_site(self, site_id: str) -> Optional[Site]:
        return SiteRepository.get_by_id(self.session, site_id)

    def get_secretary(self, secretary_id: str) -> Optional[Secretary]:
        return PersonRepository.get_secretary(self.session, secretary_id)

    def get_backup(self, backup_id: str) -> Optional[Backup]:
        return PersonRepository.get_backup(self.session, backup_id)


class SessionClaimsStore:
    """Claims lookup bound to one session."""

    def __init__(self, session: Session):
        self.session = session

    def claimed_periods(self, person_id: str, on_date: date) -> Set[Period]:
        return ClaimRepository.get_periods(self.session, person_id, on_date)
