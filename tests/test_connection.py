"""Tests for the store connection built from ``DATABASE_URL``."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from checkpoint_indexer.config import IndexerConfig
from checkpoint_indexer.connection import DatabaseConnection
from checkpoint_indexer.exceptions import ConfigurationError
from checkpoint_indexer.indexer import Indexer
from checkpoint_indexer.pipeline import InMemoryCheckpointSource, SequentialConfig
from checkpoint_indexer.schema import ObjectDataModel, TransactionDigestModel
from checkpoint_indexer.start import Genesis
from tests.factories import consecutive_checkpoints


async def _count(session_factory, model) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


def test_missing_database_url_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="DATABASE_URL must be set"):
        DatabaseConnection.from_config(IndexerConfig())


@pytest.mark.parametrize("url", ["not a url", "sqlite:///sync-driver.db"])
def test_invalid_url_fails_on_connect(url) -> None:
    connection = DatabaseConnection(url)

    with pytest.raises(ConfigurationError, match="Invalid DATABASE_URL"):
        connection.connect()


def test_properties_require_connect() -> None:
    connection = DatabaseConnection("sqlite+aiosqlite://")

    with pytest.raises(ConfigurationError, match="Not connected"):
        _ = connection.engine
    with pytest.raises(ConfigurationError, match="Not connected"):
        _ = connection.session_factory


@pytest.mark.asyncio
async def test_connect_is_idempotent_and_close_resets(tmp_path) -> None:
    connection = DatabaseConnection(f"sqlite+aiosqlite:///{tmp_path / 'x.db'}")

    engine = connection.connect()
    assert connection.connect() is engine
    assert connection.engine is engine

    await connection.close()
    with pytest.raises(ConfigurationError, match="Not connected"):
        _ = connection.engine


@pytest.mark.asyncio
async def test_indexer_runs_against_configured_store(tmp_path) -> None:
    config = IndexerConfig(
        from_genesis=True,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'index.db'}",
    )
    connection = DatabaseConnection.from_config(config)
    connection.connect()
    await connection.create_schema()
    try:
        indexer = Indexer(
            config,
            connection.session_factory,
            InMemoryCheckpointSource(consecutive_checkpoints(0, 4)),
        )
        indexer.add_default_pipelines(SequentialConfig(max_batch_checkpoints=2))

        assert await indexer.run() == Genesis()
        assert await _count(connection.session_factory, TransactionDigestModel) == 8
        assert await _count(connection.session_factory, ObjectDataModel) == 8
    finally:
        await connection.close()
