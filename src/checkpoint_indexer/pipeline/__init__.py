"""Pipeline engine — ordered transform and commit per relation."""

from __future__ import annotations

from .ports import CheckpointSource, Handler, Processor, WatermarkStore
from .sequential import ProcessedCheckpoint, SequentialConfig, SequentialPipeline
from .source import InMemoryCheckpointSource
from .watermark import InMemoryWatermarkStore, SQLAlchemyWatermarkStore

__all__ = [
    "CheckpointSource",
    "Handler",
    "InMemoryCheckpointSource",
    "InMemoryWatermarkStore",
    "ProcessedCheckpoint",
    "Processor",
    "SQLAlchemyWatermarkStore",
    "SequentialConfig",
    "SequentialPipeline",
    "WatermarkStore",
]
