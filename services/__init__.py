"""WMS Terminal — Service Layer.

Services:
    - InventoryGateway: REST client with read-through cache fallback
    - lookup_service: scan-flow helpers built on the gateway

Usage:
    from services import InventoryGateway

    with InventoryGateway(url, key, Path("data")) as gateway:
        locations = gateway.fetch_locations()
"""

from services.inventory_gateway import InventoryGateway
from services.lookup_service import LocationMatch, build_commit, item_names, resolve_location

__all__ = [
    "InventoryGateway",
    "LocationMatch",
    "build_commit",
    "item_names",
    "resolve_location",
]
