"""Cursor-based pagination for list-returning API endpoints."""

__version__ = "1.0.0"
