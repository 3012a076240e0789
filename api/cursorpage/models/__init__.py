"""Data models for the cursorpage service."""

from .assignments import (
    Assignment,
    AssignmentFilters,
    AssignmentPage,
    AssignmentLinkPage
)

__all__ = [
    "Assignment",
    "AssignmentFilters",
    "AssignmentPage",
    "AssignmentLinkPage"
]
