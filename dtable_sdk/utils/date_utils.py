"""
Date rendering for date columns.

The row projector hands every present date cell to format_date along
with the column's configured format. Rendering never raises: a value
that can't be parsed is returned as-is.
"""

import logging
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Optional

from ..schema.types import DateFormat

log = logging.getLogger(__name__)


def parse_date_value(value: Any) -> Optional[datetime]:
    """
    Parse a raw date cell into a datetime.

    Accepts:
    - ISO 8601 strings ('2021-03-04', '2021-03-04 10:20',
      '2021-03-04T10:20:30.123+08:00', trailing 'Z' for UTC)
    - datetime and date objects
    - numbers, read as Unix epoch seconds in UTC

    Args:
        value: Raw cell value

    Returns:
        datetime, or None if the value isn't a recognizable date
    """
    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    # fromisoformat only accepts 'Z' from 3.11 on
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_date(
    value: Any,
    date_format: Any = None,
    tz: Optional[tzinfo] = None,
    default_format: DateFormat = DateFormat.DATE
) -> Any:
    """
    Render a date cell in one of the supported display patterns.

    Args:
        value: Raw date/timestamp value
        date_format: Column's configured format ('YYYY-MM-DD',
            'YYYY-MM-DD HH:mm', 'YYYY-MM-DD HH:mm:ss'); unknown or
            missing formats use default_format
        tz: Timezone to convert timezone-aware values into before
            rendering. Naive values are rendered as given.
        default_format: Fallback format

    Returns:
        Rendered string, or the original value if it couldn't be parsed

    Example:
        format_date('2021-03-04T10:20:30Z', 'YYYY-MM-DD HH:mm') -> '2021-03-04 10:20'
    """
    parsed = parse_date_value(value)
    if parsed is None:
        log.debug("Leaving unparseable date value as-is: %r", value)
        return value

    if tz is not None and parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz)

    pattern = DateFormat.from_string(date_format, default=default_format)
    return parsed.strftime(pattern.strftime_pattern)
