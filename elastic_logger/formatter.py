"""Log event formatting for elastic-logger."""

import json
import socket
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from elastic_logger.records import Bindings, LogEvent, QueuedEntry

ObjectPrinter = Callable[[Any], str]

_hostname: str | None = None


def get_hostname() -> str:
    """Get the hostname, cached for performance."""
    global _hostname
    if _hostname is None:
        try:
            _hostname = socket.gethostname()
        except Exception:
            _hostname = "unknown"
    return _hostname


def default_object_printer(obj: Any) -> str:
    """Serialize a structured argument to JSON text."""
    return json.dumps(obj, default=str)


def _is_structured(arg: Any) -> bool:
    if isinstance(arg, str | int | float | bool | type(None)):
        return False
    return True


def print_args(args: Sequence[Any], object_printer: ObjectPrinter | None = None) -> str:
    """Render log call arguments as a single message string.

    Structured arguments (dicts, lists and other objects) go through the
    object printer, strings and UTF-8 decoded bytes are stripped of
    surrounding whitespace, and other scalars are kept as they are. The results are joined with single spaces.

    Args:
        args: Positional arguments of the log call.
        object_printer: Callable converting structured arguments to text.
            Defaults to JSON serialization.

    Returns:
        The message string.

    Example:
        print_args(["  user logged in ", {"id": 5}, 42])
        # 'user logged in {"id": 5} 42'
    """
    printer = object_printer or default_object_printer
    parts: list[str] = []
    for arg in args:
        if isinstance(arg, str):
            parts.append(arg.strip())
        elif isinstance(arg, bytes | bytearray):
            parts.append(bytes(arg).decode("utf-8", errors="replace").strip())
        elif _is_structured(arg):
            parts.append(printer(arg))
        else:
            parts.append(str(arg))
    return " ".join(parts)


def create_event(
    level: str,
    args: Sequence[Any],
    bindings: Bindings,
    object_printer: ObjectPrinter | None = None,
    timestamp: datetime | None = None,
) -> LogEvent:
    """Build a LogEvent stamped with the current local time."""
    return LogEvent(
        timestamp=timestamp or datetime.now().astimezone(),
        level=level,
        message=print_args(args, object_printer),
        bindings=bindings,
    )


def format_event(
    event: LogEvent,
    source: str,
    hostname: str | None = None,
    tags: Sequence[str] = (),
) -> QueuedEntry:
    """Attach the static labels to an event, producing a queue entry."""
    return QueuedEntry(
        event=event,
        source=source,
        hostname=hostname or get_hostname(),
        tags=tuple(tags),
    )
