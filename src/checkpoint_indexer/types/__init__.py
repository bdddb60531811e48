"""Ledger value types consumed by the indexer."""

from __future__ import annotations

from .checkpoint import Checkpoint, CheckpointSummary, ExecutedTransaction
from .object import (
    AddressOwner,
    ConsensusAddressOwner,
    ImmutableOwner,
    LedgerObject,
    ObjectKey,
    ObjectOwner,
    ObjectSet,
    Owner,
    SharedOwner,
    owner_columns,
)

__all__ = [
    "AddressOwner",
    "Checkpoint",
    "CheckpointSummary",
    "ConsensusAddressOwner",
    "ExecutedTransaction",
    "ImmutableOwner",
    "LedgerObject",
    "ObjectKey",
    "ObjectOwner",
    "ObjectSet",
    "Owner",
    "SharedOwner",
    "owner_columns",
]
