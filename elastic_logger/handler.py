"""Standard library logging handler for elastic-logger."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from elastic_logger.levels import from_stdlib
from elastic_logger.records import Bindings

if TYPE_CHECKING:
    from elastic_logger.logger import ElasticLogger, LogHandler

_MISSING = object()
_SKIPPED_LOGGERS = ("elastic_logger", "elastic_transport", "elasticsearch")
_default_formatter = logging.Formatter()


def _is_skipped(name: str) -> bool:
    return any(name == prefix or name.startswith(prefix + ".") for prefix in _SKIPPED_LOGGERS)


class ElasticHandler(logging.Handler):
    """Logging handler that feeds standard library records to an ElasticLogger.

    Each record is mapped to a level name (CRITICAL -> fatal, WARNING -> warn,
    and so on) and routed through the log handler of its module. The module is
    the record's logger name unless the call passes
    `extra={"module_name": ...}`. Records of the elastic_logger, elastic_transport
    and elasticsearch loggers are skipped, and so is anything logged while a
    flush is running on the same thread, so shipping never feeds itself.
    Log handlers are created once per module and cached, so module exclusion
    and per-module thresholds of the ElasticLogger apply as usual.

    Args:
        elastic_logger: Initialized ElasticLogger to route records through.
        bindings: Bindings shared by every record (node id, namespace, ...).
            The module field is filled in per record.
        level: Minimum stdlib log level to handle. Defaults to NOTSET.

    Example:
        import logging
        from elastic_logger import Bindings, ElasticHandler, ElasticLogger

        es_logger = ElasticLogger(interval=5000)
        es_logger.init()

        handler = ElasticHandler(es_logger, Bindings(node_id="node-1"))
        logger = logging.getLogger("posts")
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

        logger.info("Post created", extra={"module_name": "posts"})

        handler.close()
    """

    def __init__(
        self,
        elastic_logger: ElasticLogger,
        bindings: Bindings | None = None,
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level=level)

        self._elastic_logger = elastic_logger
        self._bindings = bindings or Bindings()
        self._handlers: dict[str, LogHandler | None] = {}
        self._handlers_lock = threading.Lock()

    def _get_handler(self, module: str) -> LogHandler | None:
        handler = self._handlers.get(module, _MISSING)
        if handler is _MISSING:
            with self._handlers_lock:
                handler = self._handlers.get(module, _MISSING)
                if handler is not _MISSING:
                    return handler  # type: ignore[return-value]
                bindings = Bindings(
                    node_id=self._bindings.node_id,
                    namespace=self._bindings.namespace,
                    service=self._bindings.service,
                    version=self._bindings.version,
                    module=module,
                )
                handler = self._elastic_logger.get_log_handler(bindings)
                self._handlers[module] = handler
        return handler  # type: ignore[return-value]

    def emit(self, record: logging.LogRecord) -> None:
        """Queue the record's message under its module's log handler.

        Args:
            record: The log record to handle.
        """
        if _is_skipped(record.name):
            return

        try:
            module = getattr(record, "module_name", None) or record.name
            handler = self._get_handler(module)
            if handler is None:
                return

            args: list[object] = [record.getMessage()]
            if record.exc_info:
                formatter = self.formatter or _default_formatter
                args.append(formatter.formatException(record.exc_info))
            handler(from_stdlib(record.levelno), args)
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Stop the ElasticLogger, flushing what is still queued."""
        try:
            self._elastic_logger.stop()
        finally:
            super().close()

    def flush(self) -> None:
        """Ship everything queued right now."""
        self._elastic_logger.flush()
