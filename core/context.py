"""WMS Terminal — Application context.

One explicit object holding the gateway, probe and commit queue, built
once at startup and handed to whatever needs them.

Usage:
    with build_context() as ctx:
        ctx.start()
        ctx.queue.submit(commit)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from config import Settings, get_settings
from core.exceptions import TerminalError
from edge.commit_queue import CommitQueue
from edge.connectivity import ConnectivityProbe
from logger import bind_device, get_logger
from services.inventory_gateway import InventoryGateway

logger = get_logger(__name__)


@dataclass
class TerminalContext:
    settings: Settings
    gateway: InventoryGateway
    probe: ConnectivityProbe
    queue: CommitQueue

    @property
    def device_id(self) -> str:
        return self.settings.terminal.device_id

    def start(self) -> None:
        self.queue.start()

    def close(self) -> None:
        """Stop the queue (after its current pass) then release the HTTP client."""
        self.queue.stop()
        self.gateway.close()

    def __enter__(self) -> "TerminalContext":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def build_context(settings: Settings | None = None, **gateway_kwargs: Any) -> TerminalContext:
    """Construct the terminal's components from settings.

    Extra keyword arguments go to InventoryGateway (e.g. ``transport``).

    Raises:
        TerminalError: If the service URL or API key is missing.
    """
    settings = settings or get_settings()
    terminal = settings.terminal
    if not terminal.is_configured:
        raise TerminalError(
            "Terminal is not configured: set TERMINAL_API_URL and TERMINAL_API_KEY",
            {"api_url_set": bool(terminal.api_url)},
        )

    data_dir = settings.sync.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)
    bind_device(terminal.device_id)

    gateway = InventoryGateway(
        terminal.api_url,
        terminal.api_key.get_secret_value(),
        data_dir,
        timeout_seconds=terminal.request_timeout_seconds,
        **gateway_kwargs,
    )
    probe = ConnectivityProbe(
        settings.sync.probe_host,
        settings.sync.probe_port,
        timeout_seconds=settings.sync.probe_timeout_seconds,
    )
    queue = CommitQueue(gateway, data_dir, probe, interval_seconds=settings.sync.interval_seconds)
    logger.info("Terminal context ready", base_url=terminal.api_url, data_dir=str(data_dir))
    return TerminalContext(settings=settings, gateway=gateway, probe=probe, queue=queue)
