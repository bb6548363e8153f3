"""WMS Terminal — Core Exceptions.

Error taxonomy for the sync core. Read paths swallow the network-side
errors and fall back to the local cache; only CacheMiss and StorageError
ever reach a read caller. Write paths propagate TransportError and
RemoteError to the commit queue, which keeps the commit for the next tick.

Usage:
    from core.exceptions import CacheMiss, StorageError

    try:
        items = gateway.fetch_items()
    except (CacheMiss, StorageError) as exc:
        show_error(exc.message)
"""

from __future__ import annotations

from typing import Any


class TerminalError(Exception):
    """Base exception for all terminal sync errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for logs and UI messages."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class TransportError(TerminalError):
    """Raised when the remote service cannot be reached.

    Covers connection refusal, DNS failure and timeouts.
    """

    def __init__(self, url: str, original_error: str):
        self.url = url
        self.original_error = original_error
        super().__init__(
            f"Request to {url} failed: {original_error}",
            {"url": url, "error": original_error},
        )


class RemoteError(TerminalError):
    """Raised when the remote service answers with a non-2xx status.

    Attributes:
        status: HTTP status code returned by the service.
    """

    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"API error: {status}", {"status": status})


class MalformedResponse(TerminalError):
    """Raised when a response body does not decode to the expected shape."""

    def __init__(self, what: str, reason: str):
        self.what = what
        self.reason = reason
        super().__init__(f"Malformed {what} response: {reason}", {"what": what, "reason": reason})


class CacheMiss(TerminalError):
    """Raised when a read fell back to the cache and no cache file exists.

    Attributes:
        kind: Entity kind ("items" or "locations").
    """

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"No cached {kind} available", {"kind": kind})


class StorageError(TerminalError):
    """Raised when a local state file cannot be read, parsed or written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Local storage error at {path}: {reason}", {"path": path, "reason": reason})
