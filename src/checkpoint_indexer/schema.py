"""
SQLAlchemy table declarations for the indexer's relations.

Schema migrations are applied outside this package; these models describe
the expected shape and let tests create it with ``Base.metadata.create_all``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, LargeBinary, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all indexer tables."""


class TransactionDigestModel(Base):
    __tablename__ = "transaction_digests"

    tx_digest: Mapped[str] = mapped_column(Text, primary_key=True)
    checkpoint_sequence_number: Mapped[int] = mapped_column(BigInteger)


class ObjectDataModel(Base):
    """One row per object version produced by a transaction."""

    __tablename__ = "sui_objects"

    object_id: Mapped[str] = mapped_column(Text, primary_key=True)
    object_version: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    object_digest: Mapped[str] = mapped_column(Text)
    checkpoint_sequence_number: Mapped[int] = mapped_column(BigInteger)
    owner_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    object_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    object_bcs: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)


class WatermarkModel(Base):
    """Highest checkpoint each pipeline has committed."""

    __tablename__ = "watermarks"

    pipeline: Mapped[str] = mapped_column(String, primary_key=True)
    checkpoint_hi_inclusive: Mapped[int] = mapped_column(BigInteger)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


__all__ = [
    "Base",
    "ObjectDataModel",
    "TransactionDigestModel",
    "WatermarkModel",
]
