"""Tests for start-checkpoint resolution."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from checkpoint_indexer.config import IndexerArgs, IndexerConfig, IngestionArgs
from checkpoint_indexer.exceptions import ConfigurationError, LatestCheckpointError
from checkpoint_indexer.instrumentation import HookRegistry, set_hook_registry
from checkpoint_indexer.start import (
    Genesis,
    Latest,
    Provided,
    log_start_mode,
    resolve_and_log,
    resolve_start_checkpoint_with,
)


class RecordingFetch:
    """Fake latest-checkpoint fetch that records its calls."""

    def __init__(self, result: int = 0, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[tuple[str, str | None, str | None]] = []

    async def __call__(
        self, url: str, username: str | None, password: str | None
    ) -> int:
        self.calls.append((url, username, password))
        if self.error is not None:
            raise self.error
        return self.result


async def _never_fetch(url: str, username: str | None, password: str | None) -> int:
    raise AssertionError("latest checkpoint must not be fetched")


@pytest.mark.asyncio
async def test_provided_first_checkpoint_wins() -> None:
    config = IndexerConfig(
        indexer=IndexerArgs(first_checkpoint=500),
        from_genesis=True,
        latest_rpc_url="http://latest.test",
    )

    mode = await resolve_start_checkpoint_with(config, _never_fetch)

    assert mode == Provided()
    assert config.indexer.first_checkpoint == 500


@pytest.mark.asyncio
async def test_provided_zero_is_honoured() -> None:
    config = IndexerConfig(indexer=IndexerArgs(first_checkpoint=0))

    assert await resolve_start_checkpoint_with(config, _never_fetch) == Provided()
    assert config.indexer.first_checkpoint == 0


@pytest.mark.asyncio
async def test_genesis_starts_at_zero() -> None:
    config = IndexerConfig(from_genesis=True, latest_rpc_url="http://latest.test")

    mode = await resolve_start_checkpoint_with(config, _never_fetch)

    assert mode == Genesis()
    assert config.indexer.first_checkpoint == 0


@pytest.mark.asyncio
async def test_latest_requires_an_endpoint() -> None:
    config = IndexerConfig()

    with pytest.raises(ConfigurationError) as exc_info:
        await resolve_start_checkpoint_with(config, _never_fetch)

    assert "--latest-rpc-url" in str(exc_info.value)
    assert "--rpc-api-url" in str(exc_info.value)
    assert config.indexer.first_checkpoint is None


@pytest.mark.asyncio
async def test_latest_uses_ingestion_endpoint_and_credentials() -> None:
    config = IndexerConfig(
        ingestion=IngestionArgs(
            rpc_api_url="http://fullnode.test",
            rpc_username="alice",
            rpc_password="s3cret",
        )
    )
    fetch = RecordingFetch(result=12_345)

    mode = await resolve_start_checkpoint_with(config, fetch)

    assert mode == Latest(12_345)
    assert config.indexer.first_checkpoint == 12_345
    assert fetch.calls == [("http://fullnode.test", "alice", "s3cret")]


@pytest.mark.asyncio
async def test_latest_rpc_url_takes_precedence() -> None:
    config = IndexerConfig(
        latest_rpc_url="http://latest.test",
        ingestion=IngestionArgs(rpc_api_url="http://fullnode.test"),
    )
    fetch = RecordingFetch(result=7)

    await resolve_start_checkpoint_with(config, fetch)

    assert fetch.calls == [("http://latest.test", None, None)]


@pytest.mark.asyncio
async def test_fetch_failure_propagates() -> None:
    config = IndexerConfig(latest_rpc_url="http://latest.test")
    error = LatestCheckpointError("unreachable", "http://latest.test")
    fetch = RecordingFetch(error=error)

    with pytest.raises(LatestCheckpointError):
        await resolve_start_checkpoint_with(config, fetch)

    assert len(fetch.calls) == 1
    assert config.indexer.first_checkpoint is None


@pytest.mark.parametrize(
    ("mode", "message"),
    [
        (Provided(), "using provided first_checkpoint"),
        (Genesis(), "from-genesis enabled: starting at checkpoint 0"),
        (Latest(99), "start-latest: using checkpoint 99"),
    ],
)
def test_log_start_mode(mode, message, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="checkpoint_indexer.start"):
        log_start_mode(mode)

    assert message in caplog.text


@pytest.mark.asyncio
async def test_resolve_and_log_runs_inside_hook(caplog) -> None:
    registry = HookRegistry()
    set_hook_registry(registry)
    seen: list[tuple[str, dict[str, Any]]] = []

    async def hook(operation, attributes, next_handler):
        seen.append((operation, dict(attributes)))
        return await next_handler()

    registry.register(hook, operations=["indexer.*"])
    config = IndexerConfig(latest_rpc_url="http://latest.test")

    with caplog.at_level(logging.INFO, logger="checkpoint_indexer.start"):
        mode = await resolve_and_log(config, RecordingFetch(result=3))

    assert mode == Latest(3)
    assert seen == [
        (
            "indexer.resolve_start",
            {"indexer.from_genesis": False, "indexer.first_checkpoint": None},
        )
    ]
    assert "start-latest: using checkpoint 3" in caplog.text
