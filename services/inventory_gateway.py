"""WMS Terminal — Inventory service gateway with read-through cache.

Every read goes to the network first. A successful non-empty result is
written to a local cache envelope before it is returned; any read failure
(transport error, non-2xx status, undecodable body) falls back to the last
cached snapshot. Writes (commits) never touch the cache and always
propagate their errors to the caller.

Usage:
    gateway = InventoryGateway("https://inventory.example.com", key, Path("data"))
    items = gateway.fetch_items()
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from core.exceptions import CacheMiss, MalformedResponse, RemoteError, StorageError, TransportError
from core.storage import atomic_write_text, read_text
from logger import get_logger
from schemas.inventory import (
    Commit,
    Item,
    ItemCache,
    ItemList,
    Location,
    LocationCache,
    LocationList,
    dump_envelope,
)

logger = get_logger(__name__)

ITEMS_PATH = "/rest/v1/items?select=*"
LOCATIONS_PATH = "/rest/v1/locations?select=*"
COMMITS_PATH = "/rest/v1/commits"

ITEMS_CACHE_FILE = "items.cache.json"
LOCATIONS_CACHE_FILE = "locations.cache.json"

_CACHE_FILES = {"items": ITEMS_CACHE_FILE, "locations": LOCATIONS_CACHE_FILE}
_ENVELOPES: dict[str, type[ItemCache] | type[LocationCache]] = {
    "items": ItemCache,
    "locations": LocationCache,
}


class InventoryGateway:
    """REST client for the remote inventory service.

    The underlying httpx.Client is shared by the read and write paths and
    must be released with close() (or by using the gateway as a context
    manager).

    Args:
        base_url: Service base URL; a trailing slash is ignored.
        api_key: Sent as bearer token and as the ``apikey`` header.
        cache_dir: Directory owning the cache envelope files.
        timeout_seconds: Client-side timeout for every request.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        cache_dir: Path,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.strip().rstrip("/")
        self.cache_dir = Path(cache_dir)
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "apikey": api_key,
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "InventoryGateway":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def fetch_items(self) -> list[Item]:
        """Return the freshest item list available.

        Raises:
            CacheMiss: The network read failed and no cache file exists.
            StorageError: The network read failed and the cache is unreadable.
        """
        return self._fetch_collection("items", ITEMS_PATH, ItemList)

    def fetch_locations(self) -> list[Location]:
        """Return the freshest location list available. Same contract as fetch_items."""
        return self._fetch_collection("locations", LOCATIONS_PATH, LocationList)

    def check_credentials(self) -> bool:
        """Bounded read probe validating the URL and key. Never raises."""
        try:
            response = self._client.get(f"{ITEMS_PATH}&limit=1")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.info("Credential check failed", base_url=self.base_url, error=str(e))
            return False
        logger.info("Credential check", base_url=self.base_url, status_code=response.status_code)
        return response.is_success

    def cached_at(self, kind: str) -> int | None:
        """Capture time of the current cache envelope for ``kind``, if any."""
        try:
            return self._load_cache(kind).captured_at
        except (CacheMiss, StorageError):
            return None

    def _fetch_collection(self, kind: str, path: str, adapter: TypeAdapter) -> list[Any]:
        try:
            records = self._read_remote(kind, path, adapter)
        except (TransportError, RemoteError, MalformedResponse) as e:
            logger.warning("Fetch failed, trying cache", kind=kind, error=e.message)
            return list(self._load_cache(kind).payload)

        if records:
            self._save_cache(kind, records)
        else:
            logger.info("Empty result, cache left untouched", kind=kind)
        logger.info("Fetched from service", kind=kind, count=len(records))
        return records

    def _read_remote(self, kind: str, path: str, adapter: TypeAdapter) -> list[Any]:
        response = self._request("GET", path)
        if not response.is_success:
            raise RemoteError(response.status_code, response.text[:200])
        try:
            return adapter.validate_json(response.content)
        except ValidationError as e:
            raise MalformedResponse(kind, f"{e.error_count()} validation error(s)") from e

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def send_commit(self, commit: Commit) -> dict[str, Any]:
        """POST one commit and return the server's representation of it.

        Raises:
            RemoteError: The service answered with status >= 400.
            TransportError: The service could not be reached.
            MalformedResponse: The response body could not be decoded.
        """
        response = self._request(
            "POST",
            COMMITS_PATH,
            json=commit.model_dump(),
            headers={"Prefer": "return=representation"},
        )
        if response.status_code >= 400:
            raise RemoteError(response.status_code, response.text[:200])
        return _result_map(response)

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Issue one request; every httpx failure maps onto the terminal taxonomy."""
        endpoint = path.split("?")[0]
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.DecodingError as e:
            raise MalformedResponse(endpoint, str(e) or "undecodable body") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"{self.base_url}{endpoint}", str(e) or type(e).__name__) from e

    # -------------------------------------------------------------------------
    # Cache envelopes
    # -------------------------------------------------------------------------

    def _cache_path(self, kind: str) -> Path:
        return self.cache_dir / _CACHE_FILES[kind]

    def _save_cache(self, kind: str, records: list[BaseModel]) -> None:
        path = self._cache_path(kind)
        envelope = _ENVELOPES[kind].model_validate({kind: records})
        try:
            atomic_write_text(path, dump_envelope(envelope))
        except StorageError as e:
            logger.warning("Could not write cache", kind=kind, path=str(path), error=e.reason)
            return
        logger.debug("Cache saved", kind=kind, path=str(path), count=len(records))

    def _load_cache(self, kind: str) -> ItemCache | LocationCache:
        path = self._cache_path(kind)
        text = read_text(path)
        if text is None:
            logger.warning("Cache not found", kind=kind, path=str(path))
            raise CacheMiss(kind)
        try:
            envelope = _ENVELOPES[kind].model_validate_json(text)
        except ValidationError as e:
            logger.warning("Cache unreadable", kind=kind, path=str(path))
            raise StorageError(str(path), f"corrupt cache envelope: {e.error_count()} error(s)") from e
        logger.info(
            "Loaded from cache",
            kind=kind,
            count=len(envelope.payload),
            captured_at=envelope.captured_at,
        )
        return envelope


def _result_map(response: httpx.Response) -> dict[str, Any]:
    """Server representation of a created commit; opaque beyond being a dict."""
    try:
        body = response.json()
    except ValueError:
        return {}
    if isinstance(body, list) and len(body) == 1 and isinstance(body[0], dict):
        return body[0]
    if isinstance(body, dict):
        return body
    return {}
