"""Configuration for elastic-logger."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from elastic_logger.formatter import ObjectPrinter, get_hostname
from elastic_logger.index import DEFAULT_INDEX_PREFIX
from elastic_logger.levels import LEVELS

if TYPE_CHECKING:
    from elasticsearch import Elasticsearch

ENV_ES_HOSTS = "ELASTIC_LOGGER_ES_HOSTS"
ENV_ES_USERNAME = "ELASTIC_LOGGER_ES_USERNAME"
ENV_ES_PASSWORD = "ELASTIC_LOGGER_ES_PASSWORD"
ENV_ES_API_KEY = "ELASTIC_LOGGER_ES_API_KEY"
ENV_ES_VERIFY_CERTS = "ELASTIC_LOGGER_ES_VERIFY_CERTS"
ENV_ENVIRONMENT = "ELASTIC_LOGGER_ENV"
ENV_NODE_NAME = "MOL_NODE_NAME"

DEFAULT_ES_HOST = "http://localhost:9200"
DEFAULT_SOURCE = "moleculer"
DEFAULT_INTERVAL_MS = 5000
DEFAULT_REQUEST_TIMEOUT = 30.0

LevelSetting = str | Mapping[str, str | None] | None


class ConfigurationError(ValueError):
    """Raised when the logger is configured with invalid options."""


def default_client_options() -> dict[str, Any]:
    """Build Elasticsearch client options from environment variables or defaults.

    Environment Variables:
        ELASTIC_LOGGER_ES_HOSTS: Comma-separated list of hosts (default: http://localhost:9200)
        ELASTIC_LOGGER_ES_USERNAME: Basic auth username
        ELASTIC_LOGGER_ES_PASSWORD: Basic auth password
        ELASTIC_LOGGER_ES_API_KEY: API key for authentication
        ELASTIC_LOGGER_ES_VERIFY_CERTS: Verify SSL certificates (default: true)
    """
    hosts_str = os.environ.get(ENV_ES_HOSTS, DEFAULT_ES_HOST)
    options: dict[str, Any] = {
        "hosts": [h.strip() for h in hosts_str.split(",") if h.strip()],
        "verify_certs": os.environ.get(ENV_ES_VERIFY_CERTS, "true").lower() == "true",
    }

    api_key = os.environ.get(ENV_ES_API_KEY)
    if api_key:
        options["api_key"] = api_key
        return options

    username = os.environ.get(ENV_ES_USERNAME)
    password = os.environ.get(ENV_ES_PASSWORD)
    if username and password:
        options["basic_auth"] = (username, password)

    return options


def _default_source() -> str:
    return os.environ.get(ENV_NODE_NAME) or DEFAULT_SOURCE


def _default_environment() -> str | None:
    return os.environ.get(ENV_ENVIRONMENT) or None


def _check_level(level: str | None) -> None:
    if level and level not in LEVELS:
        raise ConfigurationError(
            f"Unknown log level {level!r}, expected one of: {', '.join(LEVELS)}"
        )


@dataclass(frozen=True)
class ElasticLoggerOptions:
    """Immutable configuration of an ElasticLogger.

    Attributes:
        client_options: Keyword arguments for `elasticsearch.Elasticsearch`.
            Defaults are read from ELASTIC_LOGGER_ES_* environment variables.
        client: Pre-built Elasticsearch client. Takes precedence over
            `client_options` and is not closed on stop.
        index: Static index name. When None, indices rotate daily.
        index_prefix: Prefix of daily indices. Defaults to "moleculer".
        pipeline: Name of an ingest pipeline applied to every document.
        source: Label attached to every document. Defaults to $MOL_NODE_NAME
            or "moleculer".
        hostname: Label attached to every document. Defaults to the
            machine hostname.
        environment: Deployment environment, shipped as the only tag.
            Defaults to $ELASTIC_LOGGER_ENV.
        object_printer: Callable converting structured arguments to text.
            Defaults to JSON serialization.
        interval: Milliseconds between flushes. 0 flushes after every log call.
        exclude_modules: Modules that never get a log handler.
        level: Level threshold. Either a level name, or a mapping of module
            glob patterns to level names where "*" is the fallback. A falsy
            level disables logging for the module.
        request_timeout: Seconds before a bulk request is abandoned.

    Raises:
        ConfigurationError: If any option is invalid.

    Example:
        options = ElasticLoggerOptions(
            client_options={"hosts": ["https://es.example.com:9200"], "api_key": "..."},
            pipeline="logs-enrich",
            interval=10_000,
            exclude_modules={"registry"},
            level={"broker": "warn", "*": "info"},
        )
    """

    client_options: Mapping[str, Any] = field(default_factory=default_client_options)
    client: Elasticsearch | None = None
    index: str | None = None
    index_prefix: str = DEFAULT_INDEX_PREFIX
    pipeline: str | None = None
    source: str = field(default_factory=_default_source)
    hostname: str = field(default_factory=get_hostname)
    environment: str | None = field(default_factory=_default_environment)
    object_printer: ObjectPrinter | None = None
    interval: int = DEFAULT_INTERVAL_MS
    exclude_modules: Iterable[str] = frozenset()
    level: LevelSetting = "info"
    request_timeout: float | None = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if self.interval is None or self.interval < 0:
            raise ConfigurationError(f"interval must be >= 0, got {self.interval!r}")
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ConfigurationError(
                f"request_timeout must be positive, got {self.request_timeout!r}"
            )
        if not self.index and not self.index_prefix:
            raise ConfigurationError("index_prefix is required when no static index is set")

        if isinstance(self.level, Mapping):
            for level in self.level.values():
                _check_level(level)
        else:
            _check_level(self.level)

        # Frozen dataclass: normalize containers through object.__setattr__
        object.__setattr__(self, "exclude_modules", frozenset(self.exclude_modules))
        object.__setattr__(self, "client_options", dict(self.client_options))

    @property
    def interval_seconds(self) -> float:
        return self.interval / 1000

    @property
    def tags(self) -> tuple[str, ...]:
        return (self.environment,) if self.environment else ()
