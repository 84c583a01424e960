"""
Column type definitions for query results.

ColumnType mirrors the type tags the table service puts on column
metadata. DateFormat enumerates the display patterns a date column can
be configured with.
"""

from typing import Optional
from enum import Enum


class ColumnType(Enum):
    """Supported column type tags."""
    NUMBER = "number"
    TEXT = "text"
    LONG_TEXT = "long-text"
    CHECKBOX = "checkbox"
    DATE = "date"
    SINGLE_SELECT = "single-select"
    MULTIPLE_SELECT = "multiple-select"
    IMAGE = "image"
    FILE = "file"
    COLLABORATOR = "collaborator"
    LINK = "link"
    LINK_FORMULA = "link-formula"
    FORMULA = "formula"
    CREATOR = "creator"
    CTIME = "ctime"
    LAST_MODIFIER = "last-modifier"
    MTIME = "mtime"
    GEOLOCATION = "geolocation"
    AUTO_NUMBER = "auto-number"
    URL = "url"

    @classmethod
    def from_string(cls, type_str) -> Optional['ColumnType']:
        """
        Convert a raw type tag to a ColumnType.

        Returns None for tags this SDK doesn't know about, so newer
        server-side column types are treated as plain pass-through values.
        """
        if not isinstance(type_str, str):
            return None
        try:
            return cls(type_str.strip().lower())
        except ValueError:
            return None

    @property
    def is_select(self) -> bool:
        """Check if values of this type are option ids."""
        return self in SELECT_TYPES

    @property
    def is_link(self) -> bool:
        """Check if values of this type are arrays of linked display values."""
        return self in LINK_TYPES


SELECT_TYPES = frozenset({ColumnType.SINGLE_SELECT, ColumnType.MULTIPLE_SELECT})
LINK_TYPES = frozenset({ColumnType.LINK, ColumnType.LINK_FORMULA})


class DateFormat(Enum):
    """Display patterns for date columns, mapped to strftime patterns."""
    DATE = "YYYY-MM-DD"
    DATE_MINUTE = "YYYY-MM-DD HH:mm"
    DATE_SECOND = "YYYY-MM-DD HH:mm:ss"

    @property
    def strftime_pattern(self) -> str:
        return _STRFTIME_PATTERNS[self]

    @classmethod
    def from_string(cls, format_str, default: 'DateFormat' = None) -> 'DateFormat':
        """
        Convert a column's configured format to a DateFormat.

        Unknown or missing formats fall back to `default` (date only
        when not given).
        """
        if default is None:
            default = cls.DATE
        if not isinstance(format_str, str):
            return default
        try:
            return cls(format_str.strip())
        except ValueError:
            return default


_STRFTIME_PATTERNS = {
    DateFormat.DATE: "%Y-%m-%d",
    DateFormat.DATE_MINUTE: "%Y-%m-%d %H:%M",
    DateFormat.DATE_SECOND: "%Y-%m-%d %H:%M:%S",
}
