"""In-memory checkpoint source for testing and embedding."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..exceptions import PipelineError
from .ports import CheckpointSource

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

    from ..types.checkpoint import Checkpoint


class InMemoryCheckpointSource(CheckpointSource):
    """Serves a fixed set of checkpoints in sequence order."""

    def __init__(self, checkpoints: Iterable[Checkpoint] = ()) -> None:
        self._checkpoints: dict[int, Checkpoint] = {}
        for checkpoint in checkpoints:
            self.add(checkpoint)

    def add(self, checkpoint: Checkpoint) -> None:
        if checkpoint.sequence_number in self._checkpoints:
            raise PipelineError(
                f"Duplicate checkpoint {checkpoint.sequence_number} in source"
            )
        self._checkpoints[checkpoint.sequence_number] = checkpoint

    async def stream(
        self, start: int, end: int | None = None
    ) -> AsyncIterator[Checkpoint]:
        for sequence_number in sorted(self._checkpoints):
            if sequence_number < start:
                continue
            if end is not None and sequence_number > end:
                break
            yield self._checkpoints[sequence_number]
