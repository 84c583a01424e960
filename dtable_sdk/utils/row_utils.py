"""
Cell-level helpers shared by the row projector and the display helpers.

Single source of truth for deciding what counts as a multi-valued cell
and how linked records expose their display value.
"""

from typing import Any, Dict, List, Mapping, Optional


DISPLAY_VALUE_KEY = 'display_value'


def is_sequence(value: Any) -> bool:
    """
    Check if a cell value is a multi-valued array.

    Only lists and tuples count. Strings, bytes and mappings are
    iterable but are single values as far as a cell is concerned.

    Example:
        is_sequence(['o1', 'o2']) -> True
        is_sequence('o1') -> False
    """
    return isinstance(value, (list, tuple))


def display_value_of(element: Any) -> Any:
    """
    Get the display value of one linked-record entry.

    Linked records arrive as {'row_id': ..., 'display_value': ...}
    objects. A bare value (anything that isn't a mapping) is its own
    display value.

    Example:
        display_value_of({'row_id': 'r9', 'display_value': 'Alice'}) -> 'Alice'
        display_value_of('Alice') -> 'Alice'
    """
    if isinstance(element, Mapping):
        return element.get(DISPLAY_VALUE_KEY)
    return element


def lookup_labels(values: List[Any], options: Dict[str, str]) -> List[Optional[str]]:
    """
    Map option ids to their labels, preserving order and duplicates.

    Unknown ids (and unhashable values) map to None.

    Args:
        values: Option ids in cell order
        options: Options map (id -> label)

    Returns:
        New list of labels
    """
    return [lookup_label(value, options) for value in values]


def lookup_label(value: Any, options: Dict[str, str]) -> Optional[str]:
    """Map a single option id to its label, or None if it's unknown."""
    try:
        return options.get(value)
    except TypeError:
        # unhashable
        return None


def cell_to_text(value: Any) -> str:
    """
    Render a decoded cell for plain-text output (tables, CSV).

    Lists are joined with ", ", None becomes an empty string.
    """
    if value is None:
        return ''
    if is_sequence(value):
        return ', '.join(cell_to_text(item) for item in value)
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def collect_headers(rows: List[Dict[str, Any]]) -> List[str]:
    """
    Get the union of row keys in first-seen order.

    Formatted rows don't all carry the same keys (a raw row only has
    the cells the server returned), so headers can't be taken from the
    first row alone.
    """
    headers: Dict[str, None] = {}
    for row in rows:
        for key in row:
            headers.setdefault(key, None)
    return list(headers)
