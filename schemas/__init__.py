"""Pydantic schemas for the WMS terminal."""

from .inventory import (
    Commit,
    CommitList,
    Item,
    ItemCache,
    ItemList,
    Location,
    LocationCache,
    LocationList,
    dump_envelope,
    dump_queue,
    parse_queue,
)

__all__ = [
    "Commit",
    "CommitList",
    "Item",
    "ItemCache",
    "ItemList",
    "Location",
    "LocationCache",
    "LocationList",
    "dump_envelope",
    "dump_queue",
    "parse_queue",
]
