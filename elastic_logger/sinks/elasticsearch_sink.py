"""Elasticsearch sink implementation for elastic-logger."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from elastic_logger.config import DEFAULT_REQUEST_TIMEOUT, ConfigurationError
from elastic_logger.index import DEFAULT_INDEX_PREFIX, resolve_index
from elastic_logger.sinks.base import Sink, WriteResult

if TYPE_CHECKING:
    from elasticsearch import Elasticsearch

    from elastic_logger.records import QueuedEntry

_logger = logging.getLogger("elastic_logger")

# Item error summaries kept per failed bulk request
MAX_REPORTED_ERRORS = 5


def _create_es_client(client_options: Mapping[str, Any]) -> Elasticsearch:
    """Create an Elasticsearch client from connection options."""
    from elasticsearch import Elasticsearch

    try:
        return Elasticsearch(**client_options)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid Elasticsearch client options: {e}") from e


def build_document(entry: QueuedEntry) -> dict[str, Any]:
    """Build the document body shipped for a queued entry."""
    bindings = entry.bindings
    return {
        "timestamp": int(entry.timestamp.timestamp() * 1000),
        "level": entry.level,
        "message": entry.message,
        "nodeID": bindings.node_id,
        "namespace": bindings.namespace,
        "service": bindings.service,
        "version": bindings.version,
        "module": bindings.module,
        "source": entry.source,
        "tags": list(entry.tags),
        "hostname": entry.hostname,
    }


class ElasticsearchSink(Sink):
    """Elasticsearch sink shipping entries through the bulk API.

    Every flush becomes one bulk request with `refresh=true`, so documents
    are searchable as soon as the request returns. Each entry is written to
    its own daily index (`<prefix>-YYYYMMDD`, keyed on the entry timestamp)
    unless a static index is configured.

    Delivery is best effort. Rejected items and transport failures are
    reported in the WriteResult and the affected entries are dropped.

    Args:
        client: Elasticsearch client instance. If not provided, one is
            created in `setup()` from `client_options`.
        client_options: Keyword arguments for `elasticsearch.Elasticsearch`.
        index: Static index name. Disables daily rotation.
        index_prefix: Prefix for daily index names. Defaults to "moleculer".
        pipeline: Ingest pipeline name added to every index action.
        request_timeout: Seconds before a bulk request is abandoned. None
            uses the client's own timeout.

    Example:
        sink = ElasticsearchSink(
            client_options={"hosts": ["http://localhost:9200"]},
            pipeline="logs-enrich",
        )
        sink.setup()
        result = sink.write_batch(entries)
    """

    def __init__(
        self,
        client: Elasticsearch | None = None,
        client_options: Mapping[str, Any] | None = None,
        index: str | None = None,
        index_prefix: str = DEFAULT_INDEX_PREFIX,
        pipeline: str | None = None,
        request_timeout: float | None = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._client_options = dict(client_options or {})
        self._index = index
        self._index_prefix = index_prefix
        self._pipeline = pipeline
        self._request_timeout = request_timeout

    def setup(self) -> None:
        """Create the Elasticsearch client if one was not provided.

        Raises:
            ConfigurationError: If the client options are rejected.
        """
        self._get_client()

    def _get_client(self) -> Elasticsearch:
        """Get or create the Elasticsearch client."""
        if self._client is None:
            self._client = _create_es_client(self._client_options)
        return self._client

    def build_operations(self, entries: list[QueuedEntry]) -> list[dict[str, Any]]:
        """Build the alternating action/document list of a bulk request."""
        operations: list[dict[str, Any]] = []
        for entry in entries:
            action: dict[str, Any] = {
                "_index": resolve_index(entry.timestamp, self._index, self._index_prefix)
            }
            if self._pipeline:
                action["pipeline"] = self._pipeline

            operations.append({"index": action})
            operations.append(build_document(entry))
        return operations

    def write_batch(self, entries: list[QueuedEntry]) -> WriteResult:
        """Write a batch of entries to Elasticsearch using the bulk API.

        Makes a single attempt. An empty batch sends nothing.
        """
        if not entries:
            return WriteResult.ok()

        operations = self.build_operations(entries)

        try:
            client = self._get_client()
            if self._request_timeout is not None:
                client = client.options(request_timeout=self._request_timeout)
            response = client.bulk(operations=operations, refresh=True)
        except Exception as e:
            return WriteResult.failure(len(entries), str(e))

        if not response.get("errors"):
            return WriteResult.ok(len(entries))

        failed = 0
        errors: list[str] = []
        for item in response.get("items", []):
            index_result = item.get("index", {})
            if "error" in index_result:
                failed += 1
                if len(errors) < MAX_REPORTED_ERRORS:
                    errors.append(str(index_result["error"]))

        if not errors:
            errors.append("bulk response reported errors without item details")

        return WriteResult(shipped=len(entries), failed=failed, errors=errors)

    def close(self) -> None:
        """Close the Elasticsearch client if we own it."""
        if self._owns_client and self._client is not None:
            try:
                self._client.close()
            except Exception as e:
                _logger.debug("elastic-logger: Error closing Elasticsearch client: %s", e)
            self._client = None
