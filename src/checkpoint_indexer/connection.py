"""DatabaseConnection — async engine and session factory from ``DATABASE_URL``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import ArgumentError, InvalidRequestError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from .exceptions import ConfigurationError
from .schema import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from .config import IndexerConfig

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Own the engine for one store; hand out sessions to pipelines."""

    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        self._url = url
        self._engine_kwargs = engine_kwargs
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_config(
        cls, config: IndexerConfig, **engine_kwargs: Any
    ) -> DatabaseConnection:
        if config.database_url is None:
            raise ConfigurationError(
                "DATABASE_URL must be set to connect to the store"
            )
        return cls(config.database_url, **engine_kwargs)

    def connect(self) -> AsyncEngine:
        """Create and cache the engine. Idempotent."""
        if self._engine is not None:
            return self._engine
        try:
            self._engine = create_async_engine(self._url, **self._engine_kwargs)
        except (ArgumentError, InvalidRequestError) as e:
            raise ConfigurationError(f"Invalid DATABASE_URL: {e}") from e
        self._session_factory = async_sessionmaker(
            self._engine, expire_on_commit=False
        )
        logger.info("connected to %s store", self._engine.dialect.name)
        return self._engine

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise ConfigurationError("Not connected; call connect() first")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise ConfigurationError("Not connected; call connect() first")
        return self._session_factory

    async def create_schema(self) -> None:
        """Create missing tables; migrations remain an operator concern."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None


__all__ = ["DatabaseConnection"]
