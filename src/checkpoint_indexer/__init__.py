"""Transaction-digest and object-version indexes built from ledger checkpoints."""

from __future__ import annotations

from .committer import (
    MAX_BIND_PARAMETERS,
    SQLITE_MAX_BIND_PARAMETERS,
    chunked,
    default_max_bind_parameters,
    insert_ignore_conflicts,
    max_rows_per_write,
)
from .config import IndexerArgs, IndexerConfig, IndexerSettings, IngestionArgs
from .connection import DatabaseConnection
from .exceptions import (
    CommitError,
    ConfigurationError,
    IndexerError,
    LatestCheckpointError,
    PipelineError,
    RpcClientError,
    RpcError,
    SerializationError,
)
from .handlers import ObjectDataHandler, TransactionDigestHandler
from .indexer import Indexer
from .models import StoredObjectData, StoredRow, StoredTransactionDigest
from .pipeline import (
    InMemoryCheckpointSource,
    InMemoryWatermarkStore,
    SequentialConfig,
    SequentialPipeline,
    SQLAlchemyWatermarkStore,
)
from .rpc import fetch_latest_checkpoint_sequence
from .schema import Base, ObjectDataModel, TransactionDigestModel, WatermarkModel
from .serialization import decode_object, encode_object
from .start import (
    Genesis,
    Latest,
    Provided,
    StartMode,
    resolve_start_checkpoint,
    resolve_start_checkpoint_with,
)

__all__ = [
    "MAX_BIND_PARAMETERS",
    "SQLITE_MAX_BIND_PARAMETERS",
    "Base",
    "CommitError",
    "ConfigurationError",
    "DatabaseConnection",
    "Genesis",
    "InMemoryCheckpointSource",
    "InMemoryWatermarkStore",
    "Indexer",
    "IndexerArgs",
    "IndexerConfig",
    "IndexerError",
    "IndexerSettings",
    "IngestionArgs",
    "Latest",
    "LatestCheckpointError",
    "ObjectDataHandler",
    "ObjectDataModel",
    "PipelineError",
    "Provided",
    "RpcClientError",
    "RpcError",
    "SQLAlchemyWatermarkStore",
    "SequentialConfig",
    "SequentialPipeline",
    "SerializationError",
    "StartMode",
    "StoredObjectData",
    "StoredRow",
    "StoredTransactionDigest",
    "TransactionDigestHandler",
    "TransactionDigestModel",
    "WatermarkModel",
    "chunked",
    "decode_object",
    "default_max_bind_parameters",
    "encode_object",
    "fetch_latest_checkpoint_sequence",
    "insert_ignore_conflicts",
    "max_rows_per_write",
    "resolve_start_checkpoint",
    "resolve_start_checkpoint_with",
]
