"""Base queue interface for elastic-logger."""

from abc import ABC, abstractmethod

from elastic_logger.records import QueuedEntry


class Queue(ABC):
    """Abstract base class for queue implementations.

    Queue implementations must be thread-safe. The `put` method must never
    block on I/O, since it runs on the caller's logging path.

    To implement a custom queue backend:
        1. Subclass this class
        2. Implement `put`, `drain_all`, `close`, and `size`
        3. Ensure `drain_all` is atomic with respect to concurrent `put` calls

    Example:
        class MyCustomQueue(Queue):
            def put(self, entry: QueuedEntry) -> None:
                ...

            def drain_all(self) -> list[QueuedEntry]:
                ...

            def close(self) -> None:
                ...

            @property
            def size(self) -> int:
                ...
    """

    @abstractmethod
    def put(self, entry: QueuedEntry) -> None:
        """Append an entry to the queue.

        Args:
            entry: Formatted log entry.
        """

    @abstractmethod
    def drain_all(self) -> list[QueuedEntry]:
        """Remove and return every queued entry in insertion order.

        Entries put after the snapshot is taken stay queued for the next
        call.
        """

    @abstractmethod
    def close(self) -> None:
        """Stop accepting new entries.

        Entries already queued can still be drained after closing.
        """

    @property
    @abstractmethod
    def size(self) -> int:
        """Return the number of queued entries."""
