"""Pytest configuration and shared fixtures for the cursorpage tests."""

import logging
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from cursorpage.config import Settings
from cursorpage.db.assignments import InMemoryAssignmentRepository
from cursorpage.main import create_app


# Disable logging for cleaner test output
logging.getLogger("asyncio").setLevel(logging.WARNING)


@pytest.fixture
def test_settings() -> Settings:
    """Override settings for testing."""
    return Settings(
        host="127.0.0.1",
        port=8001,
        debug=True,
        log_level="ERROR",
        database_url=None,
        max_cursor_size=4096
    )


@pytest.fixture
def repository() -> InMemoryAssignmentRepository:
    """Empty in-memory assignment data source."""
    return InMemoryAssignmentRepository()


@pytest.fixture
def app(test_settings: Settings, repository: InMemoryAssignmentRepository) -> FastAPI:
    """Create FastAPI application instance for testing."""
    return create_app(settings=test_settings, repository=repository)


@pytest.fixture
def test_client(app: FastAPI) -> TestClient:
    """Create test client for API testing."""
    return TestClient(app)


@pytest.fixture
def mock_request():
    """Create mock request."""
    request = Mock(spec=Request)
    request.url.path = "/test/path"
    request.method = "GET"
    return request


@pytest.fixture
def mock_db_pool():
    """Mock asyncpg pool whose acquire() yields a mock connection."""
    mock_conn = AsyncMock()
    mock_pool = MagicMock()
    mock_pool.acquire.return_value.__aenter__ = AsyncMock(return_value=mock_conn)
    mock_pool.acquire.return_value.__aexit__ = AsyncMock(return_value=False)
    return mock_pool, mock_conn


@pytest.fixture
def teacher_params() -> Dict[str, Any]:
    """Query parameters selecting the default teacher's assignments."""
    return {"teacherId": "1"}
