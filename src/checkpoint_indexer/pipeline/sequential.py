"""SequentialPipeline — transform stage -> bounded buffer -> commit stage.

Each pipeline owns one relation. Checkpoints are transformed in order, handed
to the committer through a bounded queue, and committed in batches together
with the pipeline's watermark, so a batch's rows and its resume point land in
the same transaction.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..exceptions import PipelineError
from ..instrumentation import get_hook_registry

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession

    from ..types.checkpoint import Checkpoint
    from .ports import Handler, WatermarkStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SequentialConfig:
    """Batching and buffering knobs for a sequential pipeline.

    Attributes:
        max_batch_checkpoints: Most checkpoints folded into one commit.
        buffer_size: Processed checkpoints that may wait for the committer
            before the transform stage blocks.
    """

    max_batch_checkpoints: int = 100
    buffer_size: int = 50

    def __post_init__(self) -> None:
        if self.max_batch_checkpoints <= 0:
            raise PipelineError("max_batch_checkpoints must be positive")
        if self.buffer_size <= 0:
            raise PipelineError("buffer_size must be positive")


@dataclass(frozen=True)
class ProcessedCheckpoint:
    sequence_number: int
    rows: list[Any]


class SequentialPipeline:
    """Runs one handler over an ordered checkpoint stream."""

    def __init__(
        self,
        handler: Handler,
        session_factory: Callable[[], AsyncSession],
        watermark_store: WatermarkStore,
        config: SequentialConfig | None = None,
    ) -> None:
        self._handler = handler
        self._session_factory = session_factory
        self._watermark_store = watermark_store
        self._config = config or SequentialConfig()
        self.watermark: int | None = None
        self.committed_rows = 0

    @property
    def name(self) -> str:
        return self._handler.NAME

    async def load_watermark(self) -> int | None:
        """Read the committed watermark; used to skip already-indexed input."""
        self.watermark = await self._watermark_store.get(self.name)
        return self.watermark

    async def run(self, checkpoints: AsyncIterable[Checkpoint]) -> None:
        """Consume *checkpoints* until exhausted; the first failure propagates."""
        await self.load_watermark()
        queue: asyncio.Queue[ProcessedCheckpoint | None] = asyncio.Queue(
            maxsize=self._config.buffer_size
        )
        transform = asyncio.create_task(
            self._transform_stage(checkpoints, queue),
            name=f"{self.name}:transform",
        )
        commit = asyncio.create_task(
            self._commit_stage(queue), name=f"{self.name}:commit"
        )
        try:
            await asyncio.gather(transform, commit)
        finally:
            for task in (transform, commit):
                if not task.done():
                    task.cancel()
            # Surface only the first failure, already raised by gather above.
            await asyncio.gather(transform, commit, return_exceptions=True)

    async def _transform_stage(
        self,
        checkpoints: AsyncIterable[Checkpoint],
        queue: asyncio.Queue[ProcessedCheckpoint | None],
    ) -> None:
        last_seen: int | None = None
        async for checkpoint in checkpoints:
            sequence_number = checkpoint.sequence_number
            if last_seen is not None and sequence_number <= last_seen:
                raise PipelineError(
                    f"Pipeline {self.name} received checkpoint {sequence_number} "
                    f"after {last_seen}"
                )
            last_seen = sequence_number

            if self.watermark is not None and sequence_number <= self.watermark:
                logger.debug(
                    "Pipeline %s skipping checkpoint %d at or below watermark %d",
                    self.name,
                    sequence_number,
                    self.watermark,
                )
                continue

            rows = self._handler.process(checkpoint)
            await queue.put(ProcessedCheckpoint(sequence_number, rows))
        await queue.put(None)

    async def _commit_stage(
        self, queue: asyncio.Queue[ProcessedCheckpoint | None]
    ) -> None:
        exhausted = False
        while not exhausted:
            first = await queue.get()
            if first is None:
                return

            pending = [first]
            while len(pending) < self._config.max_batch_checkpoints:
                try:
                    item = queue.get_nowait()
                except asyncio.QueueEmpty:
                    break
                if item is None:
                    exhausted = True
                    break
                pending.append(item)

            await self._commit(pending)

    async def _commit(self, pending: list[ProcessedCheckpoint]) -> None:
        batch: list[Any] = []
        for processed in pending:
            self._handler.batch(batch, processed.rows)
        checkpoint_lo = pending[0].sequence_number
        checkpoint_hi = pending[-1].sequence_number

        async def _write() -> int:
            async with self._session_factory() as session, session.begin():
                inserted = await self._handler.commit(batch, session)
                await self._watermark_store.set(
                    self.name, checkpoint_hi, session=session
                )
            return inserted

        inserted: int = await get_hook_registry().execute_all(
            f"pipeline.commit.{self.name}",
            {
                "pipeline.name": self.name,
                "pipeline.checkpoint_lo": checkpoint_lo,
                "pipeline.checkpoint_hi": checkpoint_hi,
                "pipeline.rows": len(batch),
            },
            _write,
        )
        self.committed_rows += inserted
        self.watermark = checkpoint_hi
        logger.debug(
            "Pipeline %s committed checkpoints %d..%d: %d of %d rows new",
            self.name,
            checkpoint_lo,
            checkpoint_hi,
            inserted,
            len(batch),
        )


__all__ = ["ProcessedCheckpoint", "SequentialConfig", "SequentialPipeline"]
