"""Checkpoint and executed-transaction value types."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

from .object import LedgerObject, ObjectKey, ObjectSet

logger = logging.getLogger(__name__)


class CheckpointSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    sequence_number: int = Field(ge=0)
    epoch: int = 0
    timestamp_ms: int = 0
    digest: str | None = None


class ExecutedTransaction(BaseModel):
    """A transaction together with the keys of the objects it wrote."""

    model_config = ConfigDict(frozen=True)

    digest: str
    output_object_keys: tuple[ObjectKey, ...] = ()

    def output_objects(self, object_set: ObjectSet) -> Iterator[LedgerObject]:
        """Resolve this transaction's outputs against the checkpoint's objects.

        Keys that are not present in ``object_set`` are skipped.
        """
        for key in self.output_object_keys:
            obj = object_set.get(key)
            if obj is None:
                logger.debug(
                    "Output object %s@%s of %s not in object set",
                    key.object_id,
                    key.version,
                    self.digest,
                )
                continue
            yield obj


class Checkpoint(BaseModel):
    """An immutable, ordered unit of ledger history."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    summary: CheckpointSummary
    transactions: tuple[ExecutedTransaction, ...] = ()
    object_set: ObjectSet = Field(default_factory=ObjectSet)

    @property
    def sequence_number(self) -> int:
        return self.summary.sequence_number
