"""Indexer — resolves the start checkpoint and fans checkpoints out to pipelines."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .exceptions import PipelineError
from .handlers import ObjectDataHandler, TransactionDigestHandler
from .pipeline.sequential import SequentialConfig, SequentialPipeline
from .pipeline.watermark import SQLAlchemyWatermarkStore
from .start import resolve_and_log

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from sqlalchemy.ext.asyncio import AsyncSession

    from .config import IndexerConfig
    from .pipeline.ports import CheckpointSource, Handler, WatermarkStore
    from .start import FetchLatestFn, StartMode
    from .types.checkpoint import Checkpoint

logger = logging.getLogger(__name__)


class Indexer:
    """
    Owns a set of sequential pipelines fed from one checkpoint source.

    ``run()`` resolves where to start (once), then streams checkpoints from
    the lowest resume point across pipelines. A pipeline with a watermark
    resumes after it; one without starts at the resolved first checkpoint.
    Every pipeline gets its own bounded queue, so a slow committer applies
    backpressure to the source.
    """

    def __init__(
        self,
        config: IndexerConfig,
        session_factory: Callable[[], AsyncSession],
        source: CheckpointSource,
        *,
        watermark_store: WatermarkStore | None = None,
        fetch_latest: FetchLatestFn | None = None,
        ingest_buffer_size: int = 50,
    ) -> None:
        if ingest_buffer_size <= 0:
            raise PipelineError("ingest_buffer_size must be positive")
        self._config = config
        self._session_factory = session_factory
        self._source = source
        self._watermark_store = watermark_store or SQLAlchemyWatermarkStore(
            session_factory
        )
        self._fetch_latest = fetch_latest
        self._ingest_buffer_size = ingest_buffer_size
        self._pipelines: dict[str, SequentialPipeline] = {}
        self.start_mode: StartMode | None = None

    @property
    def pipelines(self) -> dict[str, SequentialPipeline]:
        return dict(self._pipelines)

    def add_sequential_pipeline(
        self, handler: Handler, config: SequentialConfig | None = None
    ) -> SequentialPipeline:
        if handler.NAME in self._pipelines:
            raise PipelineError(f"Pipeline {handler.NAME!r} is already registered")
        pipeline = SequentialPipeline(
            handler, self._session_factory, self._watermark_store, config
        )
        self._pipelines[handler.NAME] = pipeline
        logger.info("registered pipeline %s", handler.NAME)
        return pipeline

    def add_default_pipelines(self, config: SequentialConfig | None = None) -> None:
        """Register the transaction-digest and object-data pipelines."""
        max_bind_parameters = self._config.max_bind_parameters
        self.add_sequential_pipeline(
            TransactionDigestHandler(max_bind_parameters=max_bind_parameters), config
        )
        self.add_sequential_pipeline(
            ObjectDataHandler(max_bind_parameters=max_bind_parameters), config
        )

    async def run(self) -> StartMode:
        """Index until the source is exhausted or ``last_checkpoint`` is reached."""
        if not self._pipelines:
            raise PipelineError("No pipelines registered")

        mode = await resolve_and_log(self._config, self._fetch_latest)
        self.start_mode = mode

        first_checkpoint = self._config.indexer.first_checkpoint or 0
        last_checkpoint = self._config.indexer.last_checkpoint

        starts: dict[str, int] = {}
        for name, pipeline in self._pipelines.items():
            watermark = await pipeline.load_watermark()
            starts[name] = first_checkpoint if watermark is None else watermark + 1
            logger.info("pipeline %s starts at checkpoint %d", name, starts[name])

        stream_from = min(starts.values())
        if last_checkpoint is not None and stream_from > last_checkpoint:
            logger.info(
                "all pipelines are past last_checkpoint %d, nothing to do",
                last_checkpoint,
            )
            return mode

        queues: dict[str, asyncio.Queue[Checkpoint | None]] = {
            name: asyncio.Queue(maxsize=self._ingest_buffer_size)
            for name in self._pipelines
        }
        tasks = [
            asyncio.create_task(
                self._broadcast(stream_from, last_checkpoint, queues, starts),
                name="indexer:broadcast",
            )
        ]
        tasks.extend(
            asyncio.create_task(
                pipeline.run(_drain(queues[name])), name=f"indexer:{name}"
            )
            for name, pipeline in self._pipelines.items()
        )
        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        logger.info("indexer finished")
        return mode

    async def _broadcast(
        self,
        start: int,
        end: int | None,
        queues: dict[str, asyncio.Queue[Checkpoint | None]],
        starts: dict[str, int],
    ) -> None:
        async for checkpoint in self._source.stream(start, end):
            for name, queue in queues.items():
                if checkpoint.sequence_number >= starts[name]:
                    await queue.put(checkpoint)
        for queue in queues.values():
            await queue.put(None)


async def _drain(
    queue: asyncio.Queue[Checkpoint | None],
) -> AsyncIterator[Checkpoint]:
    while True:
        checkpoint = await queue.get()
        if checkpoint is None:
            return
        yield checkpoint


__all__ = ["Indexer"]
