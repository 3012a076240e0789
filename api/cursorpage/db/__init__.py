"""Data sources for the cursorpage service."""

from .assignments import (
    AssignmentRepository,
    InMemoryAssignmentRepository,
    PostgresAssignmentRepository
)
from .connection import db_manager, get_db_pool

__all__ = [
    "AssignmentRepository",
    "InMemoryAssignmentRepository",
    "PostgresAssignmentRepository",
    "db_manager",
    "get_db_pool"
]
