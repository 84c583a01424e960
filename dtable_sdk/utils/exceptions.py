"""
Centralized exception hierarchy for the dtable SDK.

All custom exceptions inherit from DTableError to provide a single base
for catching SDK-specific errors. The formatting engine itself never lets
one of these escape; they surface only from the query client, the
transports and the command-line/web entry points.
"""


class DTableError(Exception):
    """Base exception for all dtable SDK errors."""
    pass


class SchemaMismatchError(DTableError):
    """
    Raised when a cell value doesn't have the shape its column type implies.

    The row projector catches this and falls back to passing the raw value
    through, so it is never seen by callers of the formatting engine.
    """

    def __init__(self, column_key: str, value, reason: str):
        self.column_key = column_key
        self.value = value
        self.reason = reason
        super().__init__(
            f"Schema mismatch for column '{column_key}': {reason} "
            f"(got {type(value).__name__})"
        )


class InvalidQueryError(DTableError):
    """Raised when a query can't be sent (e.g., empty SQL)."""

    def __init__(self, sql: str, reason: str):
        self.sql = sql
        self.reason = reason
        super().__init__(f"Invalid query: {reason}")


class QueryNotFoundError(DTableError):
    """Raised when a transport has no recorded response for a query."""

    def __init__(self, sql: str):
        self.sql = sql
        super().__init__(f"No response recorded for query: {sql}")


class ResponseFormatError(DTableError):
    """Raised when a saved query response can't be read."""

    def __init__(self, reason: str, source: str = None):
        self.reason = reason
        self.source = source
        msg = f"Malformed query response: {reason}"
        if source:
            msg += f" ({source})"
        super().__init__(msg)
