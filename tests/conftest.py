"""Pytest configuration and shared fixtures."""

from datetime import date, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clinic_planner.domain.models import Backup, Base, Capacity, Need, Secretary, Site


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def db_session():
    """Create in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def sample_sites(db_session):
    """One closure site and one regular site."""
    sites = [
        Site(id="site-esp", name="Centre Esplanade - Ophtalmologie", needs_closure=True),
        Site(id="site-ville", name="Cabinet Vieille Ville", needs_closure=False),
    ]
    db_session.add_all(sites)
    db_session.commit()
    return sites


@pytest.fixture
def sample_people(db_session, sample_sites):
    """Two secretaries and one backup."""
    people = [
        Secretary(id="sec-1", first_name="Anne", last_name="Roux", instrumentiste=True,
                  preferred_site_id="site-esp"),
        Secretary(id="sec-2", first_name="Bruno", last_name="Meier", accueil=True),
        Backup(id="bkp-1", first_name="Chloe", last_name="Favre"),
    ]
    db_session.add_all(people)
    db_session.commit()
    return people


@pytest.fixture
def sample_week(db_session, sample_people):
    """Needs and capacities for Monday 2025-03-03."""
    monday = date(2025, 3, 3)
    records = [
        Need(id="need-1", date=monday, site_id="site-esp", start_time=time(7, 0), end_time=time(13, 30),
             required_count=1.5),
        Need(id="need-2", date=monday, site_id="site-ville", start_time=time(8, 0), end_time=time(11, 0)),
        Need(id="need-3", date=date(2025, 3, 10), site_id="site-ville", start_time=time(8, 0),
             end_time=time(11, 0)),
        Capacity(id="cap-1", date=monday, start_time=time(7, 30), end_time=time(17, 0), secretary_id="sec-1",
                 specialties="ophtalmo;dermato"),
        Capacity(id="cap-2", date=monday, start_time=time(13, 0), end_time=time(17, 0), backup_id="bkp-1"),
    ]
    db_session.add_all(records)
    db_session.commit()
    return monday
