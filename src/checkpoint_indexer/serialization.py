"""Canonical BSON encoding of ledger objects.

The document layout is fixed (see ``_FIELD_ORDER``) so the same object always
encodes to the same bytes.
"""

from __future__ import annotations

from typing import Any

import bson
from bson.errors import BSONError

from .exceptions import SerializationError
from .types.object import LedgerObject

_FIELD_ORDER = (
    "id",
    "version",
    "digest",
    "type",
    "owner",
    "previous_transaction",
    "storage_rebate",
    "contents",
)


def _object_to_doc(obj: LedgerObject) -> dict[str, Any]:
    values: dict[str, Any] = {
        "id": obj.id,
        "version": obj.version,
        "digest": obj.digest,
        "type": obj.type_,
        "owner": obj.owner.model_dump(),
        "previous_transaction": obj.previous_transaction,
        "storage_rebate": obj.storage_rebate,
        "contents": obj.contents,
    }
    return {name: values[name] for name in _FIELD_ORDER}


def encode_object(obj: LedgerObject, *, checkpoint: int | None = None) -> bytes:
    """Encode the full state of *obj* as a BSON document."""
    try:
        return bson.encode(_object_to_doc(obj))
    except (BSONError, OverflowError, TypeError, ValueError) as e:
        raise SerializationError(
            obj.id, obj.version, str(e), checkpoint=checkpoint
        ) from e


def decode_object(data: bytes) -> dict[str, Any]:
    """Decode bytes produced by :func:`encode_object` back into a document."""
    return bson.decode(data)


__all__ = ["decode_object", "encode_object"]
