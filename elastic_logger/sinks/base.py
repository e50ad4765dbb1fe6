"""Base sink interface for elastic-logger."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from elastic_logger.records import QueuedEntry


@dataclass
class WriteResult:
    """Result of a write_batch operation.

    Failed entries are reported, never handed back: shipping is best effort
    and nothing is retried or re-queued.

    Attributes:
        shipped: Number of entries submitted in the request.
        failed: Number of entries the destination rejected or never received.
        errors: Error messages for logging/debugging.
    """

    shipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Return True if all entries were written successfully."""
        return self.failed == 0 and not self.errors

    @classmethod
    def ok(cls, shipped: int = 0) -> "WriteResult":
        """Create a successful result with no failures."""
        return cls(shipped=shipped)

    @classmethod
    def failure(cls, count: int, error: str | None = None) -> "WriteResult":
        """Create a result where the whole batch of `count` entries was lost."""
        errors = [error] if error else []
        return cls(shipped=0, failed=count, errors=errors)


class Sink(ABC):
    """Abstract base class for sink implementations.

    Sinks are responsible for writing batches of queued entries to their
    destination.

    To implement a custom sink:
        1. Subclass this class
        2. Implement `write_batch` method (required)
        3. Optionally override `setup` and `close` methods

    Example:
        class PrintSink(Sink):
            def write_batch(self, entries: list[QueuedEntry]) -> WriteResult:
                for entry in entries:
                    print(entry.level, entry.message)
                return WriteResult.ok(len(entries))
    """

    def setup(self) -> None:
        """Initialize the sink and create any required resources.

        Called once before any entries are written. Errors raised here are
        configuration errors and are propagated to the caller.

        The default implementation does nothing.
        """

    @abstractmethod
    def write_batch(self, entries: list[QueuedEntry]) -> WriteResult:
        """Write a batch of entries to the destination.

        Implementations make a single attempt and must not raise for
        destination failures; they report them in the returned WriteResult.

        Args:
            entries: Entries drained from the queue, in insertion order.

        Returns:
            WriteResult describing what was shipped and what failed.
        """

    def close(self) -> None:
        """Close the sink and release resources.

        The default implementation does nothing.
        """
