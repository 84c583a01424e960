"""
Reusable validation functions for query responses.

These validators are the single source of truth for what shape the
formatting engine accepts, so the formatter, the query client and the
command-line loader all agree on it. They normalize rather than reject:
missing parts become empty lists.
"""

import logging
from typing import Any, List, Mapping, Tuple

from .row_utils import is_sequence

log = logging.getLogger(__name__)

# (columns key, rows key) pairs, in lookup order
RESPONSE_KEYS = (
    ('columns', 'rows'),
    ('metadata', 'results'),
)


def is_column_metadata(column: Any) -> bool:
    """
    Check if a value looks like a column metadata entry.

    A column must be a mapping with a string key and a name usable as a
    row key. Everything else about it (type, data) is optional.

    Args:
        column: Entry from a response's column list

    Returns:
        True if the entry can be indexed
    """
    if not isinstance(column, Mapping):
        return False
    key = column.get('key')
    if not isinstance(key, str) or not key:
        return False
    try:
        hash(column.get('name'))
    except TypeError:
        return False
    return True


def column_data(column: Mapping) -> Mapping:
    """Get a column's type-specific payload, or {} if it's missing or malformed."""
    data = column.get('data')
    if isinstance(data, Mapping):
        return data
    return {}


def normalize_query_response(response: Any) -> Tuple[List[Any], List[Any]]:
    """
    Extract the column list and row list from a query response.

    Accepts the {'columns': [...], 'rows': [...]} shape as well as the
    {'metadata': [...], 'results': [...]} shape the SQL endpoints use.
    Missing or non-list parts become empty lists.

    Args:
        response: Raw query response

    Returns:
        (columns, rows) tuple of new lists

    Example:
        normalize_query_response({'metadata': [col], 'results': [row]})
        -> ([col], [row])
    """
    if not isinstance(response, Mapping):
        log.debug("Query response is not a mapping: %s", type(response).__name__)
        return [], []

    for columns_key, rows_key in RESPONSE_KEYS:
        if columns_key in response or rows_key in response:
            columns = response.get(columns_key)
            rows = response.get(rows_key)
            return _as_list(columns, columns_key), _as_list(rows, rows_key)

    return [], []


def _as_list(value: Any, field: str) -> List[Any]:
    if value is None:
        return []
    if not is_sequence(value):
        log.debug("Ignoring non-list '%s' in query response", field)
        return []
    return list(value)
