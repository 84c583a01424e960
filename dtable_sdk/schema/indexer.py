"""
Schema indexer for query responses.

Turns the column metadata list of a query response into a lookup keyed
by column key, with option id -> label maps pre-computed for every
column whose values are option ids (directly, or nested inside link
and link-formula arrays).
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

from .types import ColumnType, DateFormat
from ..utils.row_utils import is_sequence
from ..utils.validators import is_column_metadata, column_data

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnDescriptor:
    """
    Indexed column metadata.

    Attributes:
        key: Opaque column key used in raw rows
        name: Display name used in formatted rows
        type: Raw type tag as sent by the server
        data: Raw type-specific payload ({} if missing)
        options: Options map (id -> label) for select columns and for
            link columns with a select element type, else None
        column_type: Parsed type tag, None for unknown tags
        array_type: Parsed element type of link/link-formula arrays
    """
    key: str
    name: Any
    type: Any
    data: Mapping
    options: Optional[Dict[Any, Any]] = None
    column_type: Optional[ColumnType] = field(init=False, repr=False)
    array_type: Optional[ColumnType] = field(init=False, repr=False)

    def __post_init__(self):
        # parsed once here so per-cell dispatch doesn't re-parse tags
        object.__setattr__(self, 'column_type', ColumnType.from_string(self.type))
        object.__setattr__(self, 'array_type', ColumnType.from_string(self.data.get('array_type')))

    @property
    def date_format(self) -> Any:
        """Raw configured format of a date column."""
        return self.data.get('format')

    def has_nested_select(self) -> bool:
        """Check if this is a link column whose elements are option ids."""
        if self.column_type is None or not self.column_type.is_link:
            return False
        return self.array_type is not None and self.array_type.is_select


def build_options_map(data: Mapping) -> Dict[Any, Any]:
    """
    Build an option id -> label map from a select payload.

    Args:
        data: Payload carrying an 'options' list of {'id', 'name'} entries

    Returns:
        Options map; empty if options are missing or malformed

    Example:
        build_options_map({'options': [{'id': 'o1', 'name': 'Done'}]})
        -> {'o1': 'Done'}
    """
    options = data.get('options') if isinstance(data, Mapping) else None
    if not is_sequence(options):
        return {}

    options_map = {}
    for option in options:
        if not isinstance(option, Mapping):
            continue
        option_id = option.get('id')
        if option_id is None:
            continue
        try:
            options_map[option_id] = option.get('name')
        except TypeError:
            # unhashable id
            continue
    return options_map


def index_column(column: Mapping) -> ColumnDescriptor:
    """
    Build the descriptor for one column.

    Args:
        column: Column metadata entry (must have a key)

    Returns:
        ColumnDescriptor with its options map filled in when needed
    """
    descriptor = ColumnDescriptor(
        key=column['key'],
        name=column.get('name'),
        type=column.get('type'),
        data=column_data(column)
    )

    column_type = descriptor.column_type
    if column_type is not None and column_type.is_select:
        return replace(descriptor, options=build_options_map(descriptor.data))
    if descriptor.has_nested_select():
        array_data = descriptor.data.get('array_data')
        return replace(descriptor, options=build_options_map(array_data if isinstance(array_data, Mapping) else {}))
    return descriptor


def index_columns(columns: List[Any]) -> Dict[str, ColumnDescriptor]:
    """
    Index a response's column metadata by column key.

    Never raises. Entries that aren't mappings, have no key, or have a
    name that can't key a row are skipped; duplicate keys resolve
    last-write-wins.

    Args:
        columns: Column metadata list from a query response

    Returns:
        Dict of column key -> ColumnDescriptor
    """
    schema: Dict[str, ColumnDescriptor] = {}
    if not is_sequence(columns):
        return schema

    for column in columns:
        if not is_column_metadata(column):
            log.debug("Skipping malformed column metadata: %r", column)
            continue
        schema[column['key']] = index_column(column)

    return schema


def describe_column(descriptor: ColumnDescriptor) -> str:
    """
    One-line human description of a column, used by the shell's .columns.

    Example:
        'Status: single-select [Done, Todo]'
    """
    type_str = descriptor.type or 'unknown'
    column_type = descriptor.column_type
    if column_type is not None and column_type.is_link and descriptor.array_type:
        type_str += f"<{descriptor.array_type.value}>"
    if column_type is ColumnType.DATE:
        type_str += f" ({DateFormat.from_string(descriptor.date_format).value})"
    line = f"{descriptor.name}: {type_str}"
    if descriptor.options:
        labels = ', '.join(str(label) for label in descriptor.options.values())
        line += f" [{labels}]"
    return line
