"""Pipeline handlers: checkpoint -> rows, and rows -> committed batch."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from .committer import insert_ignore_conflicts
from .models import StoredObjectData, StoredTransactionDigest
from .schema import ObjectDataModel, TransactionDigestModel
from .serialization import encode_object
from .types.object import owner_columns

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from .types.checkpoint import Checkpoint


class TransactionDigestHandler:
    """Indexes every transaction digest with the checkpoint that carried it."""

    NAME: ClassVar[str] = "transaction_digest_handler"
    CONFLICT_COLUMNS: ClassVar[tuple[str, ...]] = ("tx_digest",)

    def __init__(self, *, max_bind_parameters: int | None = None) -> None:
        self.max_bind_parameters = max_bind_parameters

    def process(self, checkpoint: Checkpoint) -> list[StoredTransactionDigest]:
        sequence_number = checkpoint.sequence_number
        return [
            StoredTransactionDigest(
                tx_digest=tx.digest,
                checkpoint_sequence_number=sequence_number,
            )
            for tx in checkpoint.transactions
        ]

    def batch(
        self,
        batch: list[StoredTransactionDigest],
        values: Iterable[StoredTransactionDigest],
    ) -> None:
        batch.extend(values)

    async def commit(
        self, batch: list[StoredTransactionDigest], session: AsyncSession
    ) -> int:
        return await insert_ignore_conflicts(
            session,
            TransactionDigestModel,
            batch,
            conflict_columns=self.CONFLICT_COLUMNS,
            max_bind_parameters=self.max_bind_parameters,
        )


class ObjectDataHandler:
    """
    Indexes every object version written by a checkpoint's transactions.

    Processing is all-or-nothing: if any object fails to encode the whole
    checkpoint fails with :class:`~checkpoint_indexer.exceptions.SerializationError`.
    """

    NAME: ClassVar[str] = "object_data_handler"
    CONFLICT_COLUMNS: ClassVar[tuple[str, ...]] = ("object_id", "object_version")

    def __init__(self, *, max_bind_parameters: int | None = None) -> None:
        self.max_bind_parameters = max_bind_parameters

    def process(self, checkpoint: Checkpoint) -> list[StoredObjectData]:
        sequence_number = checkpoint.sequence_number
        rows: list[StoredObjectData] = []

        for tx in checkpoint.transactions:
            for obj in tx.output_objects(checkpoint.object_set):
                owner_type, owner_id = owner_columns(obj.owner)
                rows.append(
                    StoredObjectData(
                        object_id=obj.id,
                        object_version=obj.version,
                        object_digest=obj.digest,
                        checkpoint_sequence_number=sequence_number,
                        owner_type=owner_type,
                        owner_id=owner_id,
                        object_type=obj.type_,
                        object_bcs=encode_object(obj, checkpoint=sequence_number),
                    )
                )
        return rows

    def batch(
        self,
        batch: list[StoredObjectData],
        values: Iterable[StoredObjectData],
    ) -> None:
        batch.extend(values)

    async def commit(self, batch: list[StoredObjectData], session: AsyncSession) -> int:
        return await insert_ignore_conflicts(
            session,
            ObjectDataModel,
            batch,
            conflict_columns=self.CONFLICT_COLUMNS,
            max_bind_parameters=self.max_bind_parameters,
        )


__all__ = ["ObjectDataHandler", "TransactionDigestHandler"]
