"""
Configuration for the checkpoint indexer.

Environment variables are read by :class:`IndexerSettings` (pydantic-settings)
under their flat operator-facing names, then shaped into
:class:`IndexerConfig`. The start-checkpoint resolver writes its decision back
into ``IndexerArgs.first_checkpoint``, so the config models are mutable.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class IndexerArgs(BaseModel):
    """Checkpoint range to index.

    Attributes:
        first_checkpoint: Explicit first checkpoint; overrides every other
            start signal when set.
        last_checkpoint: Inclusive upper bound; ``None`` streams indefinitely.
    """

    model_config = ConfigDict(validate_assignment=True)

    first_checkpoint: int | None = Field(default=None, ge=0)
    last_checkpoint: int | None = Field(default=None, ge=0)


class IngestionArgs(BaseModel):
    """Full-node RPC settings shared with ingestion."""

    model_config = ConfigDict(validate_assignment=True)

    rpc_api_url: str | None = None
    rpc_username: str | None = None
    rpc_password: str | None = Field(default=None, repr=False)


class IndexerConfig(BaseModel):
    """Top-level configuration consumed by the indexer core.

    ``max_bind_parameters`` of ``None`` means the store dialect's own ceiling
    (see :mod:`checkpoint_indexer.committer`).
    """

    model_config = ConfigDict(validate_assignment=True)

    indexer: IndexerArgs = Field(default_factory=IndexerArgs)
    ingestion: IngestionArgs = Field(default_factory=IngestionArgs)
    from_genesis: bool = False
    latest_rpc_url: str | None = None
    database_url: str | None = Field(default=None, repr=False)
    max_bind_parameters: int | None = Field(default=None, gt=0)
    rpc_timeout_seconds: float = Field(default=30.0, gt=0)

    @classmethod
    def from_env(cls) -> IndexerConfig:
        """Load configuration from environment variables."""
        try:
            settings = IndexerSettings()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid indexer configuration: {e}") from e

        if settings.rpc_password and not settings.rpc_username:
            logger.warning("RPC_PASSWORD is set without RPC_USERNAME and is ignored")
        return settings.to_config()


class IndexerSettings(BaseSettings):
    """Environment variables, one field per variable (case-insensitive)."""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        str_strip_whitespace=True,
    )

    first_checkpoint: int | None = Field(default=None, ge=0)
    last_checkpoint: int | None = Field(default=None, ge=0)
    rpc_api_url: str | None = None
    rpc_username: str | None = None
    rpc_password: str | None = Field(default=None, repr=False)
    from_genesis: bool = False
    latest_rpc_url: str | None = None
    database_url: str | None = Field(default=None, repr=False)
    max_bind_parameters: int | None = Field(default=None, gt=0)
    rpc_timeout_seconds: float = Field(default=30.0, gt=0)

    def to_config(self) -> IndexerConfig:
        return IndexerConfig(
            indexer=IndexerArgs(
                first_checkpoint=self.first_checkpoint,
                last_checkpoint=self.last_checkpoint,
            ),
            ingestion=IngestionArgs(
                rpc_api_url=self.rpc_api_url,
                rpc_username=self.rpc_username,
                rpc_password=self.rpc_password,
            ),
            from_genesis=self.from_genesis,
            latest_rpc_url=self.latest_rpc_url,
            database_url=self.database_url,
            max_bind_parameters=self.max_bind_parameters,
            rpc_timeout_seconds=self.rpc_timeout_seconds,
        )


__all__ = ["IndexerArgs", "IndexerConfig", "IndexerSettings", "IngestionArgs"]
