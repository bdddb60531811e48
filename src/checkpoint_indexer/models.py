"""Row models written by the indexer pipelines."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class StoredRow(BaseModel):
    """Base for insertable rows.

    Every declared field maps one-to-one onto a table column, so the field
    count is also the number of bind parameters a single row needs.
    """

    model_config = ConfigDict(frozen=True)

    @classmethod
    def field_count(cls) -> int:
        return len(cls.model_fields)

    def to_values(self) -> dict[str, Any]:
        return self.model_dump()


class StoredTransactionDigest(StoredRow):
    tx_digest: str
    checkpoint_sequence_number: int


class StoredObjectData(StoredRow):
    object_id: str
    object_version: int
    object_digest: str
    checkpoint_sequence_number: int
    owner_type: str | None = None
    owner_id: str | None = None
    object_type: str | None = None
    object_bcs: bytes | None = None


__all__ = ["StoredObjectData", "StoredRow", "StoredTransactionDigest"]
