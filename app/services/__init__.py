"""
Services Package

This package contains the service modules of the reviewer service:
- selector: reviewer candidate selection
- assignment: the assignment engine (public operations)
- repository: transactional state store
- database: engine, sessions and schema setup
"""

from app.services.assignment import AssignmentService
from app.services.database import (
    DatabaseUnavailableError,
    create_engine,
    create_schema,
    create_session_factory,
    wait_for_database,
)
from app.services.repository import RecordExists, RecordNotFound, StateStore
from app.services.selector import choose_random, select_candidates

__all__ = [
    "AssignmentService",
    "DatabaseUnavailableError",
    "create_engine",
    "create_schema",
    "create_session_factory",
    "wait_for_database",
    "RecordExists",
    "RecordNotFound",
    "StateStore",
    "choose_random",
    "select_candidates",
]
