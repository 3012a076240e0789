"""Data sources for assignments.

Both repositories answer the same question: "the assignments matching these
filters whose id is greater than ``after_id``, in id order, at most ``limit``
of them". Pagination never sorts or re-queries on its own.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Tuple

import asyncpg
from asyncpg import Pool

from ..errors.problem_details import InternalServerError
from ..models.assignments import BIGINT_MAX, Assignment, AssignmentFilters
from .connection import get_db_pool


logger = logging.getLogger(__name__)


class AssignmentRepository(Protocol):
    """Anything able to fetch an ordered batch of assignments."""

    async def list_assignments(
        self,
        filters: AssignmentFilters,
        after_id: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Assignment]:
        ...


class InMemoryAssignmentRepository:
    """Assignments kept in a list, ordered by id."""

    def __init__(self):
        self._assignments: List[Assignment] = []
        self._next_id = 1

    def add(
        self,
        teacher_id: int,
        course_id: int,
        created_at: Optional[datetime] = None
    ) -> Assignment:
        """Store a new assignment and return it."""
        assignment = Assignment(
            id=self._next_id,
            teacher_id=teacher_id,
            course_id=course_id,
            created_at=created_at or datetime.now(timezone.utc)
        )
        self._assignments.append(assignment)
        self._next_id += 1
        return assignment

    def add_many(self, count: int, teacher_id: int = 1, course_id: int = 2) -> List[Assignment]:
        return [self.add(teacher_id, course_id) for _ in range(count)]

    def clear(self) -> None:
        self._assignments.clear()
        self._next_id = 1

    async def list_assignments(
        self,
        filters: AssignmentFilters,
        after_id: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Assignment]:
        """List matching assignments after ``after_id``."""
        matches = [
            assignment for assignment in self._assignments
            if assignment.teacher_id == filters.teacher_id
            and (filters.course_id is None or assignment.course_id == filters.course_id)
            and (after_id is None or assignment.id > after_id)
        ]
        if limit is not None:
            matches = matches[:limit]
        logger.debug(f"In-memory fetch returned {len(matches)} assignments after {after_id}")
        return matches


def build_where_clause(
    filters: AssignmentFilters,
    after_id: Optional[int] = None
) -> Tuple[str, List[Any]]:
    """Build WHERE clause for a keyset-paginated assignment query.

    Args:
        filters: Teacher and optional course filters
        after_id: Only include assignments with a greater id

    Returns:
        Tuple of (where_clause, parameters)
    """
    conditions = ["teacher_id = $1"]
    params: List[Any] = [filters.teacher_id]

    if filters.course_id is not None:
        params.append(filters.course_id)
        conditions.append(f"course_id = ${len(params)}")

    if after_id is not None:
        params.append(after_id)
        conditions.append(f"id > ${len(params)}")

    return " AND ".join(conditions), params


class PostgresAssignmentRepository:
    """Assignments stored in the ``assignments`` PostgreSQL table."""

    def __init__(self, get_pool: Callable[[], Awaitable[Pool]] = get_db_pool):
        self._get_pool = get_pool

    async def list_assignments(
        self,
        filters: AssignmentFilters,
        after_id: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Assignment]:
        """List matching assignments after ``after_id``.

        Raises:
            InternalServerError: If the database operation fails
        """
        where_clause, params = build_where_clause(filters, after_id)
        query = f"""
            SELECT id, teacher_id, course_id, created_at
            FROM assignments
            WHERE {where_clause}
            ORDER BY id ASC
        """
        if limit is not None:
            # LIMIT is a bigint; anything larger means no limit at all
            params.append(min(limit, BIGINT_MAX))
            query += f" LIMIT ${len(params)}"

        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(query, *params)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error(f"Database error listing assignments: {e}")
            raise InternalServerError(f"Database error: {e}")

        return [Assignment.model_validate(dict(row)) for row in rows]
