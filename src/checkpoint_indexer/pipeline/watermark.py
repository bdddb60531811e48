"""Watermark stores: where each pipeline resumes after a restart."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from ..exceptions import CommitError
from ..schema import WatermarkModel
from .ports import WatermarkStore

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncSession


class InMemoryWatermarkStore(WatermarkStore):
    """In-memory watermark store for testing."""

    def __init__(self) -> None:
        self._watermarks: dict[str, int] = {}

    async def get(
        self, pipeline: str, *, session: AsyncSession | None = None
    ) -> int | None:
        return self._watermarks.get(pipeline)

    async def set(
        self, pipeline: str, checkpoint: int, *, session: AsyncSession | None = None
    ) -> None:
        current = self._watermarks.get(pipeline)
        if current is None or checkpoint > current:
            self._watermarks[pipeline] = checkpoint

    def clear(self) -> None:
        """Reset all watermarks (for tests)."""
        self._watermarks.clear()


class SQLAlchemyWatermarkStore(WatermarkStore):
    """
    Watermarks in the ``watermarks`` table.

    ``set`` never lowers a stored watermark, so re-delivered checkpoints do
    not move a pipeline backwards. Pass the commit session to make the
    watermark part of the same transaction as the rows it covers.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(
        self, pipeline: str, *, session: AsyncSession | None = None
    ) -> int | None:
        stmt = select(WatermarkModel.checkpoint_hi_inclusive).where(
            WatermarkModel.pipeline == pipeline
        )
        if session is not None:
            return (await session.execute(stmt)).scalar_one_or_none()
        async with self._session_factory() as session:
            return (await session.execute(stmt)).scalar_one_or_none()

    async def set(
        self, pipeline: str, checkpoint: int, *, session: AsyncSession | None = None
    ) -> None:
        if session is not None:
            await self._set_impl(session, pipeline, checkpoint)
            return
        async with self._session_factory() as session:
            await self._set_impl(session, pipeline, checkpoint)
            await session.commit()

    async def _set_impl(
        self, session: AsyncSession, pipeline: str, checkpoint: int
    ) -> None:
        now = datetime.now(timezone.utc)
        dialect = session.bind.dialect.name
        if dialect == "postgresql":
            insert = pg_insert(WatermarkModel)
        elif dialect == "sqlite":
            insert = sqlite_insert(WatermarkModel)
        else:
            raise CommitError(f"Watermarks are not supported for dialect {dialect!r}")

        await session.execute(
            insert.values(
                pipeline=pipeline,
                checkpoint_hi_inclusive=checkpoint,
                updated_at=now,
            ).on_conflict_do_nothing(index_elements=["pipeline"])
        )
        await session.execute(
            update(WatermarkModel)
            .where(WatermarkModel.pipeline == pipeline)
            .where(WatermarkModel.checkpoint_hi_inclusive < checkpoint)
            .values(checkpoint_hi_inclusive=checkpoint, updated_at=now)
        )


__all__ = ["InMemoryWatermarkStore", "SQLAlchemyWatermarkStore"]
