"""Builders for ledger test data."""

from __future__ import annotations

from collections.abc import Sequence

from checkpoint_indexer.types import (
    AddressOwner,
    Checkpoint,
    CheckpointSummary,
    ExecutedTransaction,
    LedgerObject,
    ObjectSet,
    Owner,
)


def make_object(
    object_id: str = "0x1",
    version: int = 1,
    *,
    owner: Owner | None = None,
    type_: str | None = "0x2::coin::Coin<0x2::sui::SUI>",
    digest: str | None = None,
    contents: bytes = b"\x01\x02",
    storage_rebate: int = 100,
) -> LedgerObject:
    return LedgerObject(
        id=object_id,
        version=version,
        digest=digest or f"digest-{object_id}-{version}",
        type_=type_,
        owner=owner or AddressOwner(address="0xdead"),
        previous_transaction="0xprev",
        storage_rebate=storage_rebate,
        contents=contents,
    )


def make_checkpoint(
    sequence_number: int,
    transactions: Sequence[tuple[str, Sequence[LedgerObject]]] = (),
) -> Checkpoint:
    """Build a checkpoint from ``(digest, output objects)`` pairs."""
    txs = []
    objects: list[LedgerObject] = []
    for digest, outputs in transactions:
        txs.append(
            ExecutedTransaction(
                digest=digest,
                output_object_keys=tuple(obj.key for obj in outputs),
            )
        )
        objects.extend(outputs)
    return Checkpoint(
        summary=CheckpointSummary(sequence_number=sequence_number),
        transactions=tuple(txs),
        object_set=ObjectSet(objects),
    )


def consecutive_checkpoints(
    start: int, count: int, per_checkpoint: int = 2
) -> list[Checkpoint]:
    """Checkpoints ``start..start+count-1``, one new object per transaction."""
    checkpoints = []
    for seq in range(start, start + count):
        txs = [
            (f"0xtx{seq}_{i}", [make_object(f"0x{seq:x}{i:02x}", seq + 1)])
            for i in range(per_checkpoint)
        ]
        checkpoints.append(make_checkpoint(seq, txs))
    return checkpoints
