"""WMS Terminal — Inventory Schemas.

Pydantic models for the remote inventory service payloads and for the
terminal's local state files (cache envelopes and the pending commit queue).
"""

from __future__ import annotations

import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class Commit(BaseModel):
    """One inventory adjustment. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    device_id: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    delta: int
    item_id: int


class Item(BaseModel):
    """Catalog item, owned by the remote service."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def null_name_as_empty(cls, v: Optional[str]) -> str:
        return "" if v is None else v


class Location(BaseModel):
    """Storage location and the item ids stocked there.

    The service names the fields ``location`` and ``items``.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(..., alias="location")
    item_ids: list[int] = Field(default_factory=list, alias="items")

    @field_validator("item_ids", mode="before")
    @classmethod
    def null_items_as_empty(cls, v: Optional[list[int]]) -> list[int]:
        return [] if v is None else v


class ItemCache(BaseModel):
    """Timestamped snapshot of the last successful non-empty items fetch."""
    model_config = ConfigDict(populate_by_name=True)

    captured_at: int = Field(default_factory=lambda: int(time.time()), alias="timestamp")
    items: list[Item]

    @property
    def payload(self) -> list[Item]:
        return self.items


class LocationCache(BaseModel):
    """Timestamped snapshot of the last successful non-empty locations fetch."""
    model_config = ConfigDict(populate_by_name=True)

    captured_at: int = Field(default_factory=lambda: int(time.time()), alias="timestamp")
    locations: list[Location]

    @property
    def payload(self) -> list[Location]:
        return self.locations


ItemList = TypeAdapter(list[Item])
LocationList = TypeAdapter(list[Location])
CommitList = TypeAdapter(list[Commit])


def dump_envelope(envelope: ItemCache | LocationCache) -> str:
    """Render a cache envelope the way it is stored on disk."""
    return envelope.model_dump_json(by_alias=True, indent=2)


def dump_queue(commits: list[Commit]) -> bytes:
    """Render the pending queue as a JSON array, in FIFO order."""
    return CommitList.dump_json(commits, indent=2)


def parse_queue(data: bytes | str) -> list[Commit]:
    """Parse a queue file body. An empty body or ``null`` is an empty queue."""
    text = data.decode("utf-8") if isinstance(data, bytes) else data
    if text.strip() in ("", "null"):
        return []
    return CommitList.validate_json(text)
