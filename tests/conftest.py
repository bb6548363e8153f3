"""WMS Terminal — Pytest Configuration & Fixtures.

Provides an in-process fake of the inventory REST service (served through
httpx.MockTransport, so no sockets are opened), a gateway wired to it, a
controllable reachability probe and a recording commit sender.

Usage:
    def test_fallback(service, gateway):
        gateway.fetch_items()
        service.online = False
        assert gateway.fetch_items()
"""

import json
import threading
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest

from config import get_settings
from core.exceptions import RemoteError, TransportError
from schemas.inventory import Commit
from services.inventory_gateway import InventoryGateway

BASE_URL = "https://inventory.test"
API_KEY = "test-key-123"


class FakeInventoryService:
    """Routes the three REST endpoints the terminal uses."""

    def __init__(self) -> None:
        self.items: list[dict[str, Any]] = [
            {"id": 1, "name": "Hex bolt M8"},
            {"id": 2, "name": "Washer 8mm"},
            {"id": 42, "name": "Pallet wrap"},
        ]
        self.locations: list[dict[str, Any]] = [
            {"location": "A1", "items": [42]},
            {"location": "B2", "items": [1, 2]},
            {"location": "C3", "items": []},
        ]
        self.online = True
        self.status = 200
        self.raw_body: Optional[bytes] = None
        self.failing_item_ids: set[int] = set()
        self.garbled_item_ids: set[int] = set()
        self.garbled_reads = False
        self.commits: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.online:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        if request.method == "GET" and path == "/rest/v1/items":
            return self._collection(self.items)
        if request.method == "GET" and path == "/rest/v1/locations":
            return self._collection(self.locations)
        if request.method == "POST" and path == "/rest/v1/commits":
            body = json.loads(request.content)
            if body["item_id"] in self.failing_item_ids:
                return httpx.Response(500, json={"message": "insert failed"})
            if body["item_id"] in self.garbled_item_ids:
                return _garbled(201)
            self.commits.append(body)
            return httpx.Response(201, json=[{"id": len(self.commits), **body}])
        return httpx.Response(404, json={"message": "not found"})

    def _collection(self, data: list[dict[str, Any]]) -> httpx.Response:
        if self.garbled_reads:
            return _garbled(self.status)
        if self.raw_body is not None:
            return httpx.Response(self.status, content=self.raw_body)
        return httpx.Response(self.status, json=data)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def _garbled(status: int) -> httpx.Response:
    """A response whose declared gzip encoding does not match its body."""
    return httpx.Response(status, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(b"not gzip"))


class FakeProbe:
    """Reachability switch that records how often it was asked."""

    def __init__(self, reachable: bool = True) -> None:
        self.reachable = reachable
        self.calls = 0
        self.called = threading.Event()

    def is_reachable(self) -> bool:
        self.calls += 1
        self.called.set()
        return self.reachable


class FakeSender:
    """Commit sender failing for chosen item ids."""

    def __init__(
        self,
        failing: tuple[int, ...] = (),
        transport_down: bool = False,
        crashing: tuple[int, ...] = (),
    ) -> None:
        self.failing = set(failing)
        self.crashing = set(crashing)
        self.transport_down = transport_down
        self.attempts: list[Commit] = []
        self.sent: list[Commit] = []

    def send_commit(self, commit: Commit) -> dict:
        self.attempts.append(commit)
        if self.transport_down:
            raise TransportError(f"{BASE_URL}/rest/v1/commits", "timed out")
        if commit.item_id in self.failing:
            raise RemoteError(500)
        if commit.item_id in self.crashing:
            raise RuntimeError("unexpected client failure")
        self.sent.append(commit)
        return {"id": len(self.sent)}


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    path = tmp_path / "state"
    path.mkdir()
    return path


@pytest.fixture
def service() -> FakeInventoryService:
    return FakeInventoryService()


@pytest.fixture
def gateway(service: FakeInventoryService, data_dir: Path):
    gw = InventoryGateway(BASE_URL, API_KEY, data_dir, transport=service.transport())
    yield gw
    gw.close()


@pytest.fixture
def probe() -> FakeProbe:
    return FakeProbe()


def make_commit(item_id: int, location: str = "A1", delta: int = 1, device_id: str = "D1") -> Commit:
    return Commit(device_id=device_id, location=location, delta=delta, item_id=item_id)
