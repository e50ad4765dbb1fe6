"""Record types flowing through elastic-logger."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Bindings:
    """Contextual bindings of the component emitting a log line.

    Attributes:
        node_id: Identifier of the node the component runs on.
        namespace: Namespace of the node.
        service: Service name, if the emitter is a service.
        version: Service version.
        module: Module name used for level resolution and exclusion
            (e.g. "broker", "registry", "posts").
    """

    node_id: str | None = None
    namespace: str | None = None
    service: str | None = None
    version: str | int | None = None
    module: str | None = None


@dataclass(frozen=True)
class LogEvent:
    """A single log line as emitted by a caller."""

    timestamp: datetime
    level: str
    message: str
    bindings: Bindings


@dataclass(frozen=True)
class QueuedEntry:
    """A formatted log event waiting in the queue to be shipped.

    Attributes:
        event: The original log event.
        source: Static source label.
        hostname: Static hostname label.
        tags: Static tags, e.g. the deployment environment.
    """

    event: LogEvent
    source: str
    hostname: str
    tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def timestamp(self) -> datetime:
        return self.event.timestamp

    @property
    def level(self) -> str:
        return self.event.level

    @property
    def message(self) -> str:
        return self.event.message

    @property
    def bindings(self) -> Bindings:
        return self.event.bindings
