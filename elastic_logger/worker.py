"""Flush scheduler draining the queue into the sink."""

from __future__ import annotations

import enum
import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from elastic_logger.queues.base import Queue
    from elastic_logger.records import QueuedEntry
    from elastic_logger.sinks.base import Sink

_logger = logging.getLogger("elastic_logger")


class SchedulerState(enum.Enum):
    IDLE = "idle"
    ARMED = "armed"
    STOPPED = "stopped"


class Worker:
    """Periodically drains the queue and hands each snapshot to the sink.

    With a positive interval the worker runs a daemon thread that flushes
    every `interval` seconds; being a daemon, it never keeps the process
    alive on its own. With an interval of 0 no thread is started and the
    owner calls `flush()` after every append.

    Only one flush runs at a time. Entries appended while a flush is
    shipping stay in the queue for the next one.

    Shipping is best effort: partial item errors and transport failures are
    logged as warnings and the affected entries are dropped.

    Args:
        queue: Queue instance to drain.
        sink: Sink instance to write snapshots to.
        interval: Seconds between flushes. 0 disables the timer.

    Example:
        queue = InMemoryQueue()
        sink = ElasticsearchSink()
        worker = Worker(queue=queue, sink=sink, interval=5.0)
        worker.start()
        # ... put entries on the queue ...
        worker.stop()
    """

    def __init__(self, queue: Queue, sink: Sink, interval: float = 5.0) -> None:
        self._queue = queue
        self._sink = sink
        self._interval = interval
        self._stop_event = threading.Event()
        self._flush_lock = threading.Lock()
        self._local = threading.local()
        self._thread: threading.Thread | None = None
        self._state = SchedulerState.IDLE

    def start(self) -> None:
        """Arm the flush timer if the interval is positive.

        Calling start on an armed or stopped worker does nothing.
        """
        if self._state is not SchedulerState.IDLE or self._interval <= 0:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, daemon=True, name="elastic-logger-worker"
        )
        self._thread.start()
        self._state = SchedulerState.ARMED

    def stop(self, timeout: float = 10.0) -> None:
        """Cancel the timer and flush whatever is still queued.

        The final flush happens once, after the timer thread has exited, so
        no timer-driven flush can follow it.

        Args:
            timeout: Maximum seconds to wait for the timer thread to exit.
        """
        if self._state is SchedulerState.STOPPED:
            return

        self._stop_event.set()

        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                _logger.warning("elastic-logger: Worker thread did not stop within timeout")

        self._thread = None
        self._state = SchedulerState.STOPPED
        self.flush()

    def _run(self) -> None:
        """Timer loop: flush every interval until stopped."""
        while not self._stop_event.wait(self._interval):
            try:
                self.flush()
            except Exception as e:
                _logger.error("elastic-logger: Worker error: %s", e)

    def flush(self) -> int:
        """Drain the queue and ship the snapshot.

        A flush requested from inside a running flush on the same thread
        (a library logging while the sink ships) returns 0 immediately.

        Returns:
            Number of entries handed to the sink. 0 means the queue was empty
            and no request was made.
        """
        if self.flushing:
            return 0

        with self._flush_lock:
            entries = self._queue.drain_all()
            if not entries:
                return 0

            self._local.flushing = True
            try:
                self._write_batch(entries)
            finally:
                self._local.flushing = False
            return len(entries)

    def _write_batch(self, entries: list[QueuedEntry]) -> None:
        """Write a batch of entries to the sink, reporting failures."""
        try:
            result = self._sink.write_batch(entries)
        except Exception as e:
            _logger.warning(
                "elastic-logger: Unable to upload %d log entries to Elasticsearch: %s",
                len(entries),
                e,
            )
            return

        if result.success:
            _logger.debug("elastic-logger: Uploaded %d log entries", result.shipped)
        elif result.shipped:
            _logger.warning(
                "elastic-logger: Logs were uploaded to Elasticsearch, but %d of %d "
                "entries have errors: %s",
                result.failed,
                result.shipped,
                "; ".join(result.errors),
            )
        else:
            _logger.warning(
                "elastic-logger: Unable to upload %d log entries to Elasticsearch: %s",
                result.failed,
                "; ".join(result.errors),
            )

    @property
    def flushing(self) -> bool:
        """Return True if the calling thread is inside a flush."""
        return getattr(self._local, "flushing", False)

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_alive(self) -> bool:
        """Return True if the timer thread is running."""
        return self._thread is not None and self._thread.is_alive()
