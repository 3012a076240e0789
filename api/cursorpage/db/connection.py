"""Database connection utilities for the PostgreSQL data source."""

import logging
from typing import Optional
import asyncpg
from asyncpg import Pool

from ..config import Settings, get_settings


logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages database connections and pool."""

    def __init__(self, settings: Optional[Settings] = None):
        self.pool: Optional[Pool] = None
        self._settings = settings

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    async def initialize(self) -> None:
        """Initialize the database connection pool."""
        if self.pool is None:
            settings = self.settings
            if not settings.database_url:
                raise RuntimeError("DATABASE_URL is not configured")
            self.pool = await asyncpg.create_pool(
                settings.database_url,
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
                command_timeout=settings.db_command_timeout
            )
            logger.info("Database connection pool initialized")

    async def close(self) -> None:
        """Close the database connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database connections closed")


# Global database manager instance
db_manager = DatabaseManager()


async def get_db_pool() -> Pool:
    """Get the database connection pool."""
    if not db_manager.pool:
        await db_manager.initialize()
    return db_manager.pool
