"""In-memory queue implementation using collections.deque."""

import threading
from collections import deque

from elastic_logger.queues.base import Queue
from elastic_logger.records import QueuedEntry


class InMemoryQueue(Queue):
    """Thread-safe, unbounded in-memory FIFO queue.

    Uses `collections.deque` guarded by a lock. `put` only holds the lock
    long enough to append, so log producers never wait on a flush that is
    shipping a previous snapshot.

    Note:
        Entries in this queue are lost if the process crashes. The queue has
        no upper bound; growth is limited only by the flush rate.

    Example:
        queue = InMemoryQueue()
        queue.put(entry)
        entries = queue.drain_all()
    """

    def __init__(self) -> None:
        self._deque: deque[QueuedEntry] = deque()
        self._lock = threading.Lock()
        self._closed = False

    def put(self, entry: QueuedEntry) -> None:
        """Append an entry. Ignored once the queue is closed."""
        with self._lock:
            if self._closed:
                return
            self._deque.append(entry)

    def drain_all(self) -> list[QueuedEntry]:
        """Swap out the current contents and return them as a list."""
        with self._lock:
            if not self._deque:
                return []
            drained = self._deque
            self._deque = deque()
        return list(drained)

    def close(self) -> None:
        """Mark the queue as closed."""
        with self._lock:
            self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def size(self) -> int:
        """Return the current number of entries in the queue."""
        with self._lock:
            return len(self._deque)
