"""Queue implementations for elastic-logger."""

from elastic_logger.queues.base import Queue
from elastic_logger.queues.memory import InMemoryQueue

__all__ = ["Queue", "InMemoryQueue"]
