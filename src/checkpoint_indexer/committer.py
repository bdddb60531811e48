"""Chunked insert-or-ignore writes bounded by the store's bind-parameter ceiling."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from .exceptions import CommitError
from .models import StoredRow

if TYPE_CHECKING:
    from sqlalchemy import Table
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)

# PostgreSQL's extended query protocol carries the parameter count in 16 bits.
MAX_BIND_PARAMETERS = 65_535
# SQLITE_MAX_VARIABLE_NUMBER compile-time default since SQLite 3.32.
SQLITE_MAX_BIND_PARAMETERS = 32_766

_DIALECT_MAX_BIND_PARAMETERS = {
    "postgresql": MAX_BIND_PARAMETERS,
    "sqlite": SQLITE_MAX_BIND_PARAMETERS,
}

T = TypeVar("T")


def max_rows_per_write(field_count: int, max_bind_parameters: int) -> int:
    """Largest row count whose bound values fit under *max_bind_parameters*."""
    if field_count <= 0:
        raise ValueError(f"field_count must be positive, got {field_count}")
    if field_count > max_bind_parameters:
        raise ValueError(
            f"A single row needs {field_count} parameters, "
            f"more than the ceiling of {max_bind_parameters}"
        )
    return max_bind_parameters // field_count


def chunked(rows: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield contiguous slices of at most *size* items, in order."""
    if size <= 0:
        raise ValueError(f"chunk size must be positive, got {size}")
    for start in range(0, len(rows), size):
        yield rows[start : start + size]


def _insert_for(dialect: str, table: Table) -> Any:
    if dialect == "postgresql":
        return pg_insert(table)
    if dialect == "sqlite":
        return sqlite_insert(table)
    raise CommitError(f"Insert-or-ignore is not supported for dialect {dialect!r}")


def default_max_bind_parameters(dialect: str) -> int:
    """Bind-parameter ceiling used for *dialect* when none is configured."""
    try:
        return _DIALECT_MAX_BIND_PARAMETERS[dialect]
    except KeyError:
        raise CommitError(
            f"Insert-or-ignore is not supported for dialect {dialect!r}"
        ) from None


async def insert_ignore_conflicts(
    session: AsyncSession,
    model: type[DeclarativeBase],
    rows: Sequence[StoredRow],
    *,
    conflict_columns: Sequence[str],
    max_bind_parameters: int | None = None,
) -> int:
    """
    Insert *rows* into *model*'s table, skipping primary-key conflicts.

    Rows are written in contiguous chunks so that
    ``rows_per_chunk * field_count <= max_bind_parameters``; when no ceiling
    is given the session dialect's default applies. Returns the number of rows
    actually inserted. The first failing chunk propagates; no further chunks
    are attempted.
    """
    if not rows:
        return 0

    dialect = session.bind.dialect.name
    if max_bind_parameters is None:
        max_bind_parameters = default_max_bind_parameters(dialect)
    field_count = type(rows[0]).field_count()
    max_rows = max_rows_per_write(field_count, max_bind_parameters)
    table = model.__table__
    total_inserted = 0

    for chunk in chunked(rows, max_rows):
        stmt = (
            _insert_for(dialect, table)
            .values([row.to_values() for row in chunk])
            .on_conflict_do_nothing(index_elements=list(conflict_columns))
        )
        result = await session.execute(stmt)
        total_inserted += result.rowcount

    logger.debug(
        "Inserted %d of %d rows into %s (max %d rows per write)",
        total_inserted,
        len(rows),
        table.name,
        max_rows,
    )
    return total_inserted


__all__ = [
    "MAX_BIND_PARAMETERS",
    "SQLITE_MAX_BIND_PARAMETERS",
    "chunked",
    "default_max_bind_parameters",
    "insert_ignore_conflicts",
    "max_rows_per_write",
]
