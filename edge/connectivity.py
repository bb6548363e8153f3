"""
Network reachability probe for the terminal.
A coarse TCP connect to a well-known host; says nothing about backend health.
"""

import socket

from logger import get_logger

logger = get_logger(__name__)

DEFAULT_PROBE_HOST = "8.8.8.8"
DEFAULT_PROBE_PORT = 443


class ConnectivityProbe:
    """
    Answers "is the network reachable right now?". Stateless, no retries;
    callers decide the cadence.
    """

    def __init__(
        self,
        host: str = DEFAULT_PROBE_HOST,
        port: int = DEFAULT_PROBE_PORT,
        timeout_seconds: float = 2.0,
    ) -> None:
        self._address = (host, port)
        self._timeout = timeout_seconds

    def is_reachable(self) -> bool:
        """True only if a TCP connection to the probe host is established."""
        try:
            conn = socket.create_connection(self._address, timeout=self._timeout)
        except (OSError, UnicodeError) as e:
            logger.debug("Network unreachable", host=self._address[0], error=str(e))
            return False
        conn.close()
        return True
