"""SQLAlchemy models for the clinic planning store."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, Float, ForeignKey, Integer, String, Text, Time, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Site(Base):
    """Clinic site; `needs_closure` marks sites requiring formal closing roles."""

    __tablename__ = "sites"

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False)
    needs_closure = Column(Boolean, nullable=False, default=False)
    active = Column(Boolean, nullable=False, default=True)

    needs = relationship("Need", back_populates="site")

    def __repr__(self) -> str:
        return f"<Site(id={self.id}, name='{self.name}', closure={self.needs_closure})>"


class Physician(Base):
    __tablename__ = "physicians"

    id = Column(String(36), primary_key=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class Secretary(Base):
    """Regular staff member with operating-room competency flags."""

    __tablename__ = "secretaries"

    id = Column(String(36), primary_key=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    preferred_site_id = Column(String(36), ForeignKey("sites.id"), nullable=True)
    prefers_alternate_site = Column(Boolean, nullable=False, default=False)

    # Competencies
    instrumentiste = Column(Boolean, nullable=False, default=False)
    aide_salle = Column(Boolean, nullable=False, default=False)
    anesthesiste = Column(Boolean, nullable=False, default=False)
    accueil_dermato = Column(Boolean, nullable=False, default=False)
    accueil_ophtalmo = Column(Boolean, nullable=False, default=False)
    accueil = Column(Boolean, nullable=False, default=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def __repr__(self) -> str:
        return f"<Secretary(id={self.id}, name='{self.full_name}')>"


class Backup(Base):
    """Substitute capacity provider, distinct from regular staff."""

    __tablename__ = "backups"

    id = Column(String(36), primary_key=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    preferred_site_id = Column(String(36), ForeignKey("sites.id"), nullable=True)
    prefers_alternate_site = Column(Boolean, nullable=False, default=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class Need(Base):
    """Coverage demand: a physician consultation or an operating-room role."""

    __tablename__ = "needs"

    id = Column(String(36), primary_key=True)
    date = Column(Date, nullable=False)
    site_id = Column(String(36), ForeignKey("sites.id"), nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    specialty_id = Column(String(36), nullable=True)
    kind = Column(String(20), nullable=False, default="physician")  # physician, operating_room
    physician_id = Column(String(36), ForeignKey("physicians.id"), nullable=True)
    role_requirement = Column(String(40), nullable=True)
    required_count = Column(Float, nullable=False, default=1.0)

    site = relationship("Site", back_populates="needs")

    def __repr__(self) -> str:
        return f"<Need(id={self.id}, date={self.date}, site={self.site_id}, kind={self.kind})>"


class Capacity(Base):
    """Availability window of a secretary or a backup."""

    __tablename__ = "capacities"

    id = Column(String(36), primary_key=True)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    secretary_id = Column(String(36), ForeignKey("secretaries.id"), nullable=True)
    backup_id = Column(String(36), ForeignKey("backups.id"), nullable=True)
    specialties = Column(Text, nullable=True)  # Semicolon-separated specialty ids

    @property
    def is_backup(self) -> bool:
        return self.backup_id is not None

    @property
    def person_id(self) -> str | None:
        return self.backup_id if self.backup_id is not None else self.secretary_id

    @property
    def specialty_list(self) -> list[str]:
        if not self.specialties:
            return []
        return [s.strip() for s in self.specialties.split(";") if s.strip()]

    def __repr__(self) -> str:
        return f"<Capacity(id={self.id}, date={self.date}, person={self.person_id})>"


class PeriodClaim(Base):
    """A half-day already held by a person. One row per (person, date, period)."""

    __tablename__ = "period_claims"
    __table_args__ = (UniqueConstraint("person_id", "date", "period", name="uq_claim_person_date_period"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    person_id = Column(String(36), nullable=False)
    person_kind = Column(String(20), nullable=False)  # physician, staff
    date = Column(Date, nullable=False)
    period = Column(String(20), nullable=False)  # matin, apres_midi

    def __repr__(self) -> str:
        return f"<PeriodClaim(person={self.person_id}, date={self.date}, period={self.period})>"


class StaffAssignment(Base):
    """Generated planning row placing a person at a site, with closing-role markers."""

    __tablename__ = "staff_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False)
    period = Column(String(20), nullable=False)
    site_id = Column(String(36), ForeignKey("sites.id"), nullable=False)
    person_id = Column(String(36), nullable=False)
    is_1r = Column(Boolean, nullable=False, default=False)
    is_2f = Column(Boolean, nullable=False, default=False)
    is_3f = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default="confirmed")  # confirmed, cancelled

    def __repr__(self) -> str:
        return f"<StaffAssignment(id={self.id}, site={self.site_id}, person={self.person_id}, date={self.date})>"
