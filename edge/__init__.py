"""Edge sync layer: durable commit queue and connectivity probe."""

from edge.commit_queue import CommitQueue
from edge.connectivity import ConnectivityProbe

__all__ = ["CommitQueue", "ConnectivityProbe"]
