"""Ledger objects and their ownership variants."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Annotated, Literal, NamedTuple, Union

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import assert_never


class AddressOwner(BaseModel):
    """Owned by a single account address."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["address_owner"] = "address_owner"
    address: str


class ObjectOwner(BaseModel):
    """Owned by another object (dynamic fields, wrapped children)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["object_owner"] = "object_owner"
    address: str


class SharedOwner(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["shared"] = "shared"
    initial_shared_version: int


class ImmutableOwner(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["immutable"] = "immutable"


class ConsensusAddressOwner(BaseModel):
    """Address-owned, but sequenced through consensus from ``start_version``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["consensus_address_owner"] = "consensus_address_owner"
    start_version: int
    owner: str


Owner = Annotated[
    Union[
        AddressOwner,
        ObjectOwner,
        SharedOwner,
        ImmutableOwner,
        ConsensusAddressOwner,
    ],
    Field(discriminator="kind"),
]


def owner_columns(owner: Owner) -> tuple[str, str | None]:
    """Map an owner to its ``(owner_type, owner_id)`` column pair."""
    match owner:
        case AddressOwner(address=address):
            return "address", address
        case ObjectOwner(address=address):
            return "object", address
        case SharedOwner():
            return "shared", None
        case ImmutableOwner():
            return "immutable", None
        case ConsensusAddressOwner(owner=address):
            return "consensus_address", address
        case _:
            assert_never(owner)


class ObjectKey(NamedTuple):
    object_id: str
    version: int


class LedgerObject(BaseModel):
    """A single version of an on-chain object, as carried in a checkpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    version: int = Field(ge=0)
    digest: str
    type_: str | None = Field(default=None, alias="type")
    owner: Owner
    previous_transaction: str
    storage_rebate: int = 0
    contents: bytes = b""

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(self.id, self.version)


class ObjectSet:
    """Every object version touched by a checkpoint, indexed by ``ObjectKey``."""

    def __init__(self, objects: Iterable[LedgerObject] = ()) -> None:
        self._objects: dict[ObjectKey, LedgerObject] = {}
        for obj in objects:
            self._objects[obj.key] = obj

    def get(self, key: ObjectKey) -> LedgerObject | None:
        return self._objects.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._objects

    def __iter__(self) -> Iterator[LedgerObject]:
        return iter(self._objects.values())

    def __len__(self) -> int:
        return len(self._objects)

    def __repr__(self) -> str:
        return f"ObjectSet({len(self._objects)} objects)"
