"""End-to-end: commits queued offline are delivered once the network returns."""

import json
import time

from conftest import FakeProbe
from edge.commit_queue import QUEUE_FILE, CommitQueue
from schemas.inventory import Commit


def _wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_offline_submit_then_online_delivery(gateway, service, data_dir):
    service.online = False
    probe = FakeProbe(reachable=False)
    queue = CommitQueue(gateway, data_dir, probe, interval_seconds=0.01)
    queue.start()
    try:
        queue.submit(Commit(device_id="D1", location="A1", delta=-3, item_id=42))
        assert _wait_for(lambda: probe.calls >= 2)
        assert len(json.loads((data_dir / QUEUE_FILE).read_text(encoding="utf-8"))) == 1

        service.online = True
        probe.reachable = True
        assert _wait_for(lambda: queue.pending_count() == 0)
    finally:
        queue.stop()

    assert service.commits == [{"device_id": "D1", "location": "A1", "delta": -3, "item_id": 42}]
    assert json.loads((data_dir / QUEUE_FILE).read_text(encoding="utf-8")) == []


def test_backend_down_while_network_up_keeps_commit(gateway, service, data_dir):
    service.failing_item_ids = {42}
    queue = CommitQueue(gateway, data_dir, FakeProbe())
    queue.submit(Commit(device_id="D1", location="A1", delta=5, item_id=42))
    queue.submit(Commit(device_id="D1", location="B2", delta=1, item_id=1))

    assert queue.process_queue() == 1
    assert [c.item_id for c in queue.pending()] == [42]
    assert [c["item_id"] for c in service.commits] == [1]


def test_undecodable_commit_response_does_not_resend_others(gateway, service, data_dir):
    service.garbled_item_ids = {2}
    queue = CommitQueue(gateway, data_dir, FakeProbe())
    for item_id in (1, 2, 3):
        queue.submit(Commit(device_id="D1", location="B2", delta=1, item_id=item_id))

    assert queue.process_queue() == 2
    queue.process_queue()

    assert [c["item_id"] for c in service.commits] == [1, 3]
    assert [c.item_id for c in queue.pending()] == [2]
