"""Clinic planner core: half-day slots, overlap, eligibility and closure checks.

Modules:
- timewindow: half-open interval arithmetic over the two clinic periods
- config: load and validate configuration (YAML)
- domain: SQLAlchemy models and repositories for the planning store
- services: slot decomposition, role eligibility, overlap, closure coverage, scoring
- engine: optimizer interface, HTTP client and orchestration
- validator: post-hoc batch validation and pandas summaries
- cli: command-line interface entrypoints
"""

__all__ = [
    "timewindow",
    "config",
    "domain",
    "services",
    "engine",
    "validator",
    "cli",
]
