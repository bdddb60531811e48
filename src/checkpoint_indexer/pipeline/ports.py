"""Protocols for the pipeline engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from ..types.checkpoint import Checkpoint


@runtime_checkable
class Processor(Protocol):
    """Pure transformation of one checkpoint into rows for one relation."""

    NAME: str

    def process(self, checkpoint: Checkpoint) -> list[Any]:
        """Return the rows derived from *checkpoint*, in order."""
        ...


@runtime_checkable
class Handler(Processor, Protocol):
    """A processor that also knows how to batch and commit its rows."""

    def batch(self, batch: list[Any], values: Iterable[Any]) -> None:
        """Append *values* to *batch*, preserving order."""
        ...

    async def commit(self, batch: list[Any], session: AsyncSession) -> int:
        """Write *batch* using *session*; return the number of new rows."""
        ...


@runtime_checkable
class CheckpointSource(Protocol):
    """Delivers checkpoints in increasing sequence order."""

    def stream(self, start: int, end: int | None = None) -> AsyncIterator[Checkpoint]:
        """Yield checkpoints from *start* to *end* inclusive (unbounded if None)."""
        ...


@runtime_checkable
class WatermarkStore(Protocol):
    """Persists the highest committed checkpoint per pipeline."""

    async def get(
        self, pipeline: str, *, session: AsyncSession | None = None
    ) -> int | None:
        """Return the committed high watermark; None if never committed."""
        ...

    async def set(
        self, pipeline: str, checkpoint: int, *, session: AsyncSession | None = None
    ) -> None:
        """Advance the watermark, inside *session*'s transaction when given."""
        ...
