"""Fetch the ledger's latest checkpoint sequence number over JSON-RPC."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .exceptions import LatestCheckpointError, RpcClientError

logger = logging.getLogger(__name__)

LATEST_CHECKPOINT_METHOD = "sui_getLatestCheckpointSequenceNumber"


def _build_client(
    url: str,
    username: str | None,
    password: str | None,
    *,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None,
) -> httpx.AsyncClient:
    try:
        # Parsed only to reject malformed endpoints before any I/O.
        httpx.URL(url)
        auth = httpx.BasicAuth(username, password or "") if username else None
        return httpx.AsyncClient(
            auth=auth,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise RpcClientError(f"Failed to create RPC client for {url}: {e}", url) from e


def _parse_sequence_number(body: Any, url: str) -> int:
    if not isinstance(body, dict):
        raise LatestCheckpointError(
            f"Failed to fetch latest checkpoint from {url}: malformed response",
            url,
        )
    if body.get("error") is not None:
        raise LatestCheckpointError(
            f"Failed to fetch latest checkpoint from {url}: {body['error']}", url
        )

    result = body.get("result")
    # Sui returns u64 values as decimal strings.
    if isinstance(result, bool) or not isinstance(result, (str, int)):
        raise LatestCheckpointError(
            f"Failed to fetch latest checkpoint from {url}: "
            f"unexpected result {result!r}",
            url,
        )
    try:
        sequence_number = int(result)
    except ValueError as e:
        raise LatestCheckpointError(
            f"Failed to fetch latest checkpoint from {url}: "
            f"unexpected result {result!r}",
            url,
        ) from e
    if sequence_number < 0:
        raise LatestCheckpointError(
            f"Failed to fetch latest checkpoint from {url}: "
            f"negative sequence number {sequence_number}",
            url,
        )
    return sequence_number


async def fetch_latest_checkpoint_sequence(
    url: str,
    username: str | None = None,
    password: str | None = None,
    *,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """
    Ask *url* for the latest checkpoint sequence number.

    A fresh client is built for every call and closed afterwards. Basic auth
    is attached only when *username* is given. Errors are not retried.
    """
    client = _build_client(
        url, username, password, timeout=timeout, transport=transport
    )
    payload = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": LATEST_CHECKPOINT_METHOD,
        "params": [],
    }

    async with client:
        try:
            response = await client.post(url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise LatestCheckpointError(
                f"Failed to fetch latest checkpoint from {url}: "
                f"HTTP {e.response.status_code}",
                url,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise LatestCheckpointError(
                f"Failed to fetch latest checkpoint from {url}: {e}", url
            ) from e

    sequence_number = _parse_sequence_number(body, url)
    logger.debug("Latest checkpoint at %s is %d", url, sequence_number)
    return sequence_number


__all__ = ["LATEST_CHECKPOINT_METHOD", "fetch_latest_checkpoint_sequence"]
