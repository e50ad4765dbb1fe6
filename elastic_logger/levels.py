"""Log level names and severity ordering for elastic-logger."""

import logging

# Ordered from most to least severe
LEVELS: tuple[str, ...] = ("fatal", "error", "warn", "info", "debug", "trace")

_STDLIB_LEVELS: tuple[tuple[int, str], ...] = (
    (logging.CRITICAL, "fatal"),
    (logging.ERROR, "error"),
    (logging.WARNING, "warn"),
    (logging.INFO, "info"),
    (logging.DEBUG, "debug"),
)


def level_index(level: str) -> int:
    """Return the position of a level in LEVELS (0 is most severe).

    Raises:
        ValueError: If the level name is unknown.
    """
    try:
        return LEVELS.index(level)
    except ValueError:
        raise ValueError(f"Unknown log level: {level!r}") from None


def is_enabled(level: str, threshold: str) -> bool:
    """Return True if `level` is at least as severe as `threshold`.

    Unknown level names are never enabled.
    """
    if level not in LEVELS:
        return False
    return LEVELS.index(level) <= level_index(threshold)


def from_stdlib(levelno: int) -> str:
    """Map a standard library levelno to a level name."""
    for stdlib_level, name in _STDLIB_LEVELS:
        if levelno >= stdlib_level:
            return name
    return "trace"
