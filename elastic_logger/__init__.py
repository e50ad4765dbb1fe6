"""elastic-logger: Batch framework logs into Elasticsearch.

elastic-logger is a logger adapter for microservice frameworks. Components
ask it for a log handler, the handler formats and queues every log call, and
a background timer ships the queue to Elasticsearch with one bulk request
per flush.

Key Features:
    - Non-blocking: Log calls only append to an in-memory queue
    - Batched: One bulk request per flush interval, refreshed on write
    - Daily indices: `moleculer-YYYYMMDD` unless a static index is set
    - Best effort: Failed batches are reported as warnings and dropped

Basic Usage:
    from elastic_logger import Bindings, ElasticLogger

    logger = ElasticLogger(
        client_options={"hosts": ["http://localhost:9200"]},
        pipeline="logs-enrich",
        interval=5000,
        exclude_modules={"registry"},
    )
    logger.init()

    log = logger.get_log_handler(Bindings(node_id="node-1", service="posts", module="posts"))
    if log:
        log("info", ["Post created", {"id": 5}])

    # Clean shutdown, flushes what is still queued
    logger.stop()

With the standard logging module:
    import logging
    from elastic_logger import Bindings, ElasticHandler, ElasticLogger

    es_logger = ElasticLogger()
    es_logger.init()
    logging.getLogger("myapp").addHandler(
        ElasticHandler(es_logger, Bindings(node_id="node-1"))
    )
"""

from elastic_logger.config import ConfigurationError, ElasticLoggerOptions
from elastic_logger.formatter import format_event, print_args
from elastic_logger.handler import ElasticHandler
from elastic_logger.index import format_date_yyyymmdd, resolve_index
from elastic_logger.levels import LEVELS
from elastic_logger.logger import ElasticLogger, LogAdapter, LogHandler
from elastic_logger.queues import InMemoryQueue, Queue
from elastic_logger.records import Bindings, LogEvent, QueuedEntry
from elastic_logger.sinks import ElasticsearchSink, Sink, WriteResult
from elastic_logger.worker import SchedulerState, Worker

__version__ = "0.1.0"

__all__ = [
    # Main logger
    "ElasticLogger",
    "ElasticLoggerOptions",
    "ConfigurationError",
    "LogAdapter",
    "LogHandler",
    "ElasticHandler",
    # Records
    "Bindings",
    "LogEvent",
    "QueuedEntry",
    "LEVELS",
    # Queue interface and implementations
    "Queue",
    "InMemoryQueue",
    # Sink interface and implementations
    "Sink",
    "WriteResult",
    "ElasticsearchSink",
    # Utilities
    "Worker",
    "SchedulerState",
    "format_event",
    "print_args",
    "format_date_yyyymmdd",
    "resolve_index",
    # Version
    "__version__",
]
