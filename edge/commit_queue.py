"""
Durable commit queue for the terminal.
File-backed FIFO of pending commits; a background thread drains it through
the gateway whenever the connectivity probe reports the network reachable.
"""

import contextvars
import threading
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError

from core.exceptions import MalformedResponse, RemoteError, StorageError, TransportError
from core.storage import atomic_write_text, read_text
from logger import get_logger
from schemas.inventory import Commit, dump_queue, parse_queue

logger = get_logger(__name__)

QUEUE_FILE = "pending_commits.json"


class CommitSender(Protocol):
    def send_commit(self, commit: Commit) -> dict: ...


class ReachabilityCheck(Protocol):
    def is_reachable(self) -> bool: ...


class CommitQueue:
    """
    Pending commits persisted to a single JSON file, rewritten on every
    mutation. submit() and process_queue() each run as one critical section
    under the instance lock, so the file always mirrors the in-memory order.
    """

    def __init__(
        self,
        sender: CommitSender,
        data_dir: Path,
        probe: ReachabilityCheck,
        interval_seconds: float = 5.0,
    ) -> None:
        self._sender = sender
        self._probe = probe
        self._path = Path(data_dir) / QUEUE_FILE
        self._interval = interval_seconds
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._thread_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def submit(self, commit: Commit) -> None:
        """Append one commit and persist. Never touches the network.

        A local storage failure is logged and the commit is lost.
        """
        with self._lock:
            queue = self._load()
            queue.append(commit)
            try:
                self._save(queue)
            except StorageError as e:
                logger.error(
                    "Commit could not be queued",
                    location=commit.location,
                    item_id=commit.item_id,
                    delta=commit.delta,
                    error=e.reason,
                )
                return
        logger.info(
            "Commit queued",
            location=commit.location,
            item_id=commit.item_id,
            delta=commit.delta,
            pending=len(queue),
        )

    def pending(self) -> list[Commit]:
        """Snapshot of the persisted queue in retry order."""
        with self._lock:
            return self._load()

    def pending_count(self) -> int:
        return len(self.pending())

    def process_queue(self) -> int:
        """
        Send every pending commit in FIFO order. Successes are dropped, failures
        kept in their original relative order, and the rebuilt queue persisted.
        A failure never stops the pass. Returns the number of commits sent.
        """
        with self._lock:
            queue = self._load()
            if not queue:
                return 0

            logger.info("Processing pending commits", pending=len(queue))
            remaining: list[Commit] = []
            for commit in queue:
                try:
                    self._sender.send_commit(commit)
                except (TransportError, RemoteError, MalformedResponse) as e:
                    logger.warning(
                        "Failed to send commit",
                        location=commit.location,
                        item_id=commit.item_id,
                        error=e.message,
                    )
                    remaining.append(commit)
                except Exception as e:
                    # Any other failure is still scoped to this one commit
                    logger.warning(
                        "Unexpected error sending commit",
                        location=commit.location,
                        item_id=commit.item_id,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                    remaining.append(commit)
                else:
                    logger.info(
                        "Committed",
                        location=commit.location,
                        item_id=commit.item_id,
                        delta=commit.delta,
                    )

            try:
                self._save(remaining)
            except StorageError as e:
                logger.error("Could not persist drained queue", error=e.reason)
            return len(queue) - len(remaining)

    def _tick(self) -> None:
        if not self._probe.is_reachable():
            logger.debug("Offline, skipping drain")
            return
        self.process_queue()

    def _loop(self) -> None:
        while not self._stop_event.wait(timeout=self._interval):
            try:
                self._tick()
            except Exception as e:
                logger.warning("Queue loop error", error=str(e))

    def start(self) -> None:
        """Start the background drain thread. Idempotent."""
        with self._thread_lock:
            if self._thread is not None:
                return
            self._stop_event.clear()
            # Carry bound log context (device id) into the drain thread
            context = contextvars.copy_context()
            self._thread = threading.Thread(
                target=context.run, args=(self._loop,), name="commit-queue", daemon=True
            )
            self._thread.start()
        logger.info("Commit queue started", path=str(self._path), interval_seconds=self._interval)

    def stop(self) -> None:
        """Signal the drain thread to exit and wait for its current pass to finish."""
        self._stop_event.set()
        with self._thread_lock:
            thread, self._thread = self._thread, None
        if thread is not None:
            thread.join()
            logger.info("Commit queue stopped")

    def _load(self) -> list[Commit]:
        try:
            text = read_text(self._path)
            return parse_queue(text) if text is not None else []
        except (StorageError, ValidationError, ValueError) as e:
            logger.error("Queue file unreadable, starting empty", path=str(self._path), error=str(e))
            return []

    def _save(self, commits: list[Commit]) -> None:
        atomic_write_text(self._path, dump_queue(commits).decode("utf-8"))
