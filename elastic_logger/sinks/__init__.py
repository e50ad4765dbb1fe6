"""Sink implementations for elastic-logger."""

from elastic_logger.sinks.base import Sink, WriteResult
from elastic_logger.sinks.elasticsearch_sink import ElasticsearchSink, build_document

__all__ = [
    "Sink",
    "WriteResult",
    "ElasticsearchSink",
    "build_document",
]
