"""Daily index name resolution for elastic-logger."""

from datetime import date, datetime

DEFAULT_INDEX_PREFIX = "moleculer"


def format_date_yyyymmdd(value: date) -> str:
    """Format a date as YYYYMMDD using the local calendar date.

    Timezone-aware datetimes are converted to the local timezone first;
    naive datetimes and plain dates are taken as already local.
    """
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone()
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"


def resolve_index(
    timestamp: date,
    index: str | None = None,
    prefix: str = DEFAULT_INDEX_PREFIX,
) -> str:
    """Return the index a record should be written to.

    A static index name always wins. Otherwise the index rotates daily,
    keyed on the record's own timestamp rather than the flush time.

    Example:
        resolve_index(datetime(2024, 3, 5))  # 'moleculer-20240305'
        resolve_index(datetime(2024, 3, 5), index="logs-prod")  # 'logs-prod'
    """
    if index:
        return index
    return f"{prefix}-{format_date_yyyymmdd(timestamp)}"
