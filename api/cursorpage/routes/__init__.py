"""API routes for the cursorpage service."""

from .assignments import assignments_router

__all__ = ["assignments_router"]
