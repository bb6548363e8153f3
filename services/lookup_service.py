"""
WMS Terminal — Scan-flow lookups.

Helpers behind the operator workflow: resolve a scanned location code to
the items stocked there, map item ids to display names, and turn an
ADD/SUB quantity into a signed commit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Literal, Optional

from schemas.inventory import Commit, Location
from services.inventory_gateway import InventoryGateway

Mode = Literal["ADD", "SUB"]


@dataclass(frozen=True)
class LocationMatch:
    """Outcome of a location scan."""
    code: str
    found: bool
    item_ids: list[int] = field(default_factory=list)

    @property
    def auto_item_id(self) -> Optional[int]:
        """The only item at this location, when there is exactly one."""
        return self.item_ids[0] if len(self.item_ids) == 1 else None


def index_locations(locations: Iterable[Location]) -> dict[str, list[int]]:
    """Map location name to its item ids. Later duplicates win."""
    return {loc.name: list(loc.item_ids) for loc in locations}


def resolve_location(gateway: InventoryGateway, scanned: str) -> LocationMatch:
    """Look up a scanned code against the (possibly cached) location list."""
    code = scanned.strip()
    index = index_locations(gateway.fetch_locations())
    if code in index:
        return LocationMatch(code=code, found=True, item_ids=index[code])
    return LocationMatch(code=code, found=False)


def item_names(gateway: InventoryGateway) -> dict[int, str]:
    return {item.id: item.name for item in gateway.fetch_items()}


def build_commit(
    device_id: str,
    location: str,
    quantity: int,
    item_id: int,
    mode: Mode = "ADD",
) -> Commit:
    """Build the commit for an operator action; SUB negates the quantity."""
    location = location.strip()
    if not location or item_id == 0:
        raise ValueError("No location or item selected")
    if quantity <= 0:
        raise ValueError("Quantity must be a positive number")
    if mode not in ("ADD", "SUB"):
        raise ValueError(f"Unknown mode: {mode}")
    delta = -quantity if mode == "SUB" else quantity
    return Commit(device_id=device_id, location=location, delta=delta, item_id=item_id)
