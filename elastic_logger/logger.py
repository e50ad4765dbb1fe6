"""Elasticsearch logger adapter for microservice frameworks."""

from __future__ import annotations

import dataclasses
import fnmatch
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from elastic_logger.config import ElasticLoggerOptions
from elastic_logger.formatter import create_event, format_event
from elastic_logger.levels import is_enabled
from elastic_logger.queues.memory import InMemoryQueue
from elastic_logger.sinks.elasticsearch_sink import ElasticsearchSink
from elastic_logger.worker import SchedulerState, Worker

if TYPE_CHECKING:
    from elastic_logger.queues.base import Queue
    from elastic_logger.records import Bindings
    from elastic_logger.sinks.base import Sink

_logger = logging.getLogger("elastic_logger")

LogHandler = Callable[[str, Sequence[Any]], None]

FALLBACK_PATTERN = "*"


@runtime_checkable
class LogAdapter(Protocol):
    """Capability interface a host framework expects from a logger adapter."""

    def init(self, factory: Any = None) -> None: ...

    def stop(self) -> None: ...

    def get_log_handler(self, bindings: Bindings | None) -> LogHandler | None: ...

    def get_log_level(self, module: str | None) -> str | None: ...


class ElasticLogger:
    """Logger adapter that batches framework log events into Elasticsearch.

    Components ask for a handler with their bindings and call it with a level
    and the raw log arguments. Each call is formatted, queued, and shipped by
    the next flush as part of a single bulk request.

    Args:
        options: Logger configuration. Keyword arguments are applied on top
            of it (or on top of the defaults when `options` is None).
        queue: Queue instance for buffering entries. Defaults to a new
            InMemoryQueue.
        sink: Sink instance to ship entries to. Defaults to an
            ElasticsearchSink built from the options.

    Raises:
        ConfigurationError: If the options are invalid.

    Note:
        Delivery is best effort. Entries from a failed bulk request are lost;
        nothing is retried. Call `stop()` during shutdown to flush what is
        still queued.

    Example:
        from elastic_logger import Bindings, ElasticLogger

        logger = ElasticLogger(
            client_options={"hosts": ["http://localhost:9200"]},
            interval=5000,
            exclude_modules={"registry"},
        )
        logger.init(broker_logger_factory)

        log = logger.get_log_handler(Bindings(node_id="node-1", module="posts"))
        if log:
            log("info", ["Post created", {"id": 5}])

        logger.stop()
    """

    def __init__(
        self,
        options: ElasticLoggerOptions | None = None,
        *,
        queue: Queue | None = None,
        sink: Sink | None = None,
        **kwargs: Any,
    ) -> None:
        if options is None:
            options = ElasticLoggerOptions(**kwargs)
        elif kwargs:
            options = dataclasses.replace(options, **kwargs)

        self.options = options
        self.factory: Any = None
        self._queue = queue or InMemoryQueue()
        self._sink = sink or ElasticsearchSink(
            client=options.client,
            client_options=options.client_options,
            index=options.index,
            index_prefix=options.index_prefix,
            pipeline=options.pipeline,
            request_timeout=options.request_timeout,
        )
        self._worker = Worker(
            queue=self._queue,
            sink=self._sink,
            interval=options.interval_seconds,
        )
        self._initialized = False
        self._stopped = False

    def init(self, factory: Any = None) -> None:
        """Connect to Elasticsearch and arm the flush timer.

        Args:
            factory: The host framework's logger factory. Kept as a reference
                for the host; the logger itself does not call it.

        Raises:
            ConfigurationError: If the Elasticsearch client cannot be created.
        """
        if self._initialized or self._stopped:
            return

        self.factory = factory
        self._sink.setup()
        self._worker.start()
        self._initialized = True
        _logger.debug(
            "elastic-logger: Initialized (interval=%dms, index=%s)",
            self.options.interval,
            self.options.index or f"{self.options.index_prefix}-<date>",
        )

    def stop(self) -> None:
        """Stop accepting entries, cancel the timer and flush what is left.

        Entries queued before `init()` was ever called are flushed too.
        """
        if self._stopped:
            return

        try:
            self._queue.close()
            self._worker.stop()
        finally:
            self._sink.close()
            self._stopped = True

    def flush(self) -> int:
        """Ship everything queued right now.

        Returns:
            Number of entries handed to the sink.
        """
        return self._worker.flush()

    def get_log_level(self, module: str | None) -> str | None:
        """Resolve the level threshold of a module.

        A level name applies to every module. A mapping is looked up by exact
        module name first, then by glob pattern, then by the "*" fallback.

        Returns:
            The level name, or None when logging is disabled for the module.
        """
        level = self.options.level
        if not isinstance(level, Mapping):
            return level or None

        if module is not None:
            if module in level:
                return level[module] or None
            for pattern, value in level.items():
                if pattern != FALLBACK_PATTERN and fnmatch.fnmatchcase(module, pattern):
                    return value or None

        return level.get(FALLBACK_PATTERN) or None

    def get_log_handler(self, bindings: Bindings | None) -> LogHandler | None:
        """Create a log handler for a component.

        The level threshold is resolved once here, not on every call.

        Args:
            bindings: Bindings of the component asking for a handler.

        Returns:
            A callable taking `(level, args)`, or None when the module is
            excluded or has logging disabled.
        """
        if bindings is None:
            return None
        if bindings.module in self.options.exclude_modules:
            return None

        threshold = self.get_log_level(bindings.module)
        if not threshold:
            return None

        options = self.options

        def handler(level: str, args: Sequence[Any]) -> None:
            # Logged by the sink or its client while shipping on this thread
            if self._worker.flushing:
                return
            if not is_enabled(level, threshold):
                return

            event = create_event(level, args, bindings, options.object_printer)
            self._queue.put(format_event(event, options.source, options.hostname, options.tags))
            if not options.interval:
                self._worker.flush()

        return handler

    @property
    def queue_size(self) -> int:
        """Return the current number of entries in the queue."""
        return self._queue.size

    @property
    def state(self) -> SchedulerState:
        """Return the state of the flush scheduler."""
        return self._worker.state

    @property
    def worker_alive(self) -> bool:
        """Return True if the flush timer thread is running."""
        return self._worker.is_alive
