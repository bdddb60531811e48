"""Exceptions for checkpoint-indexer."""

from __future__ import annotations


class IndexerError(Exception):
    """Root exception for the checkpoint indexer."""


class ConfigurationError(IndexerError):
    """Raised when configuration is missing or invalid."""


# ── RPC ──────────────────────────────────────────────────────────────


class RpcError(IndexerError):
    """Base class for errors talking to the latest-checkpoint endpoint.

    Always carries the endpoint that was being contacted.
    """

    def __init__(self, message: str, url: str) -> None:
        self.url = url
        super().__init__(message)


class RpcClientError(RpcError):
    """Raised when the RPC client cannot be constructed for an endpoint."""


class LatestCheckpointError(RpcError):
    """Raised when the latest checkpoint cannot be fetched or is unusable."""


# ── Transform / commit ───────────────────────────────────────────────


class SerializationError(IndexerError):
    """Raised when an object cannot be encoded to its canonical form."""

    def __init__(
        self,
        object_id: str,
        version: int,
        reason: str,
        *,
        checkpoint: int | None = None,
    ) -> None:
        self.object_id = object_id
        self.version = version
        self.checkpoint = checkpoint
        self.reason = reason

        msg = f"Failed to serialize object {object_id} (version {version})"
        if checkpoint is not None:
            msg += f" in checkpoint {checkpoint}"
        super().__init__(f"{msg}: {reason}")


class PipelineError(IndexerError):
    """Raised when a pipeline is misconfigured or fed out-of-order input."""


class CommitError(IndexerError):
    """Raised when a batch cannot be written for reasons other than the driver."""


__all__: list[str] = [
    "CommitError",
    "ConfigurationError",
    "IndexerError",
    "LatestCheckpointError",
    "PipelineError",
    "RpcClientError",
    "RpcError",
    "SerializationError",
]
