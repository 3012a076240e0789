"""Pydantic models for assignments."""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, Field, ConfigDict


BIGINT_MAX = 2 ** 63 - 1

# Identifiers are PostgreSQL bigint columns
AssignmentId = Annotated[int, Field(ge=-BIGINT_MAX - 1, le=BIGINT_MAX)]


class Assignment(BaseModel):
    """An assignment handed out by a teacher for a course."""

    id: int = Field(description="Assignment identifier, also its position in listings")
    teacher_id: int = Field(description="Teacher who owns the assignment")
    course_id: int = Field(description="Course the assignment belongs to")
    created_at: datetime = Field(description="Creation timestamp")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "teacher_id": 1,
                "course_id": 2,
                "created_at": "2024-01-01T12:00:00Z"
            }
        }
    )


class AssignmentFilters(BaseModel):
    """Filters accepted by the assignment listing endpoints.

    Embedded verbatim in cursor tokens, so the field names on the wire match
    the query parameters they are read from.
    """

    teacher_id: AssignmentId = Field(alias="teacherId", description="Only list assignments of this teacher")
    course_id: Optional[AssignmentId] = Field(default=None, alias="courseId", description="Only list assignments of this course")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class AssignmentPage(BaseModel):
    """Response model for a token-paginated assignment listing."""

    data: list[Assignment] = Field(description="Assignments on this page")
    next: Optional[str] = Field(default=None, description="Cursor token for the next page")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "data": [
                    {"id": 1, "teacher_id": 1, "course_id": 2, "created_at": "2024-01-01T12:00:00Z"},
                    {"id": 2, "teacher_id": 1, "course_id": 2, "created_at": "2024-01-01T12:05:00Z"}
                ],
                "next": "eyJwYXJhbXMiOnsidGVhY2hlcklkIjoxLCJjb3Vyc2VJZCI6bnVsbH0sImxhc3RQb3NpdGlvbiI6MiwibGltaXQiOjJ9",
            }
        }
    )


class AssignmentLinkPage(BaseModel):
    """Response model for a link-paginated assignment listing."""

    data: list[Assignment] = Field(description="Assignments on this page")
    first: str = Field(description="URL of the first page")
    next: Optional[str] = Field(default=None, description="URL of the next page")
