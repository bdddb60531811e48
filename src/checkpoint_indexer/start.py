"""Decide the first checkpoint the indexer should request."""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias, Union

from .exceptions import ConfigurationError
from .instrumentation import get_hook_registry
from .rpc import fetch_latest_checkpoint_sequence

if TYPE_CHECKING:
    from .config import IndexerConfig

logger = logging.getLogger(__name__)

FetchLatestFn: TypeAlias = Callable[[str, str | None, str | None], Awaitable[int]]

MISSING_LATEST_SOURCE = (
    "default start requires --latest-rpc-url or --rpc-api-url to fetch latest"
)


@dataclass(frozen=True)
class Provided:
    """An explicit first checkpoint was configured."""


@dataclass(frozen=True)
class Genesis:
    """Start from checkpoint 0."""


@dataclass(frozen=True)
class Latest:
    """Start from the ledger's latest checkpoint at boot time."""

    sequence_number: int


StartMode: TypeAlias = Union[Provided, Genesis, Latest]


async def resolve_start_checkpoint_with(
    config: IndexerConfig,
    fetch_latest: FetchLatestFn,
) -> StartMode:
    """
    Resolve the start checkpoint using *fetch_latest* for the latest lookup.

    Precedence: explicit ``first_checkpoint``, then ``from_genesis``, then the
    latest checkpoint from ``latest_rpc_url`` (falling back to the ingestion
    ``rpc_api_url``). The outcome is written back to
    ``config.indexer.first_checkpoint``.
    """
    if config.indexer.first_checkpoint is not None:
        return Provided()

    if config.from_genesis:
        config.indexer.first_checkpoint = 0
        return Genesis()

    rpc_url = config.latest_rpc_url or config.ingestion.rpc_api_url
    if rpc_url is None:
        raise ConfigurationError(MISSING_LATEST_SOURCE)

    latest = await fetch_latest(
        rpc_url,
        config.ingestion.rpc_username,
        config.ingestion.rpc_password,
    )
    config.indexer.first_checkpoint = latest
    return Latest(latest)


async def resolve_start_checkpoint(config: IndexerConfig) -> StartMode:
    """Resolve the start checkpoint, fetching the latest over JSON-RPC if needed."""
    fetch_latest = functools.partial(
        fetch_latest_checkpoint_sequence, timeout=config.rpc_timeout_seconds
    )
    return await resolve_start_checkpoint_with(config, fetch_latest)


def log_start_mode(mode: StartMode) -> None:
    if isinstance(mode, Provided):
        logger.info("using provided first_checkpoint")
    elif isinstance(mode, Genesis):
        logger.info("from-genesis enabled: starting at checkpoint 0")
    else:
        logger.info("start-latest: using checkpoint %d", mode.sequence_number)


async def resolve_and_log(
    config: IndexerConfig,
    fetch_latest: FetchLatestFn | None = None,
) -> StartMode:
    """Resolve the start checkpoint inside the ``indexer.resolve_start`` hook."""

    async def _resolve() -> StartMode:
        if fetch_latest is None:
            return await resolve_start_checkpoint(config)
        return await resolve_start_checkpoint_with(config, fetch_latest)

    mode: StartMode = await get_hook_registry().execute_all(
        "indexer.resolve_start",
        {
            "indexer.from_genesis": config.from_genesis,
            "indexer.first_checkpoint": config.indexer.first_checkpoint,
        },
        _resolve,
    )
    log_start_mode(mode)
    return mode


__all__ = [
    "MISSING_LATEST_SOURCE",
    "FetchLatestFn",
    "Genesis",
    "Latest",
    "Provided",
    "StartMode",
    "log_start_mode",
    "resolve_and_log",
    "resolve_start_checkpoint",
    "resolve_start_checkpoint_with",
]
