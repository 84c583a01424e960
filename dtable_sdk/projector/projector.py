"""
Row projector - decodes raw query rows against an indexed schema.

Separates decoding from:
- Schema indexing (schema layer)
- Response normalization (validators)
- Presentation (formatter)
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..config import FormatterConfig
from ..schema.indexer import ColumnDescriptor
from ..schema.types import ColumnType
from ..utils.date_utils import format_date
from ..utils.exceptions import SchemaMismatchError
from ..utils.row_utils import is_sequence, display_value_of, lookup_label, lookup_labels

log = logging.getLogger(__name__)


# Result types
FormattedRow = Dict[Any, Any]


class RowProjector:
    """
    Projects raw rows (keyed by column key) into display rows (keyed by
    column name), decoding each cell by its column type.

    The projector never raises on malformed data. A decoder that finds a
    cell of the wrong shape raises SchemaMismatchError, which project_row
    absorbs by passing the raw value through.
    """

    def __init__(self, schema: Dict[str, ColumnDescriptor], config: FormatterConfig = None):
        """
        Initialize projector for one query response.

        Args:
            schema: Indexed schema from index_columns()
            config: Formatter settings (defaults apply when None)
        """
        self.schema = schema
        self.config = config or FormatterConfig()
        self._tz = self.config.tzinfo
        self._decoders = {
            ColumnType.SINGLE_SELECT: self._decode_single_select,
            ColumnType.MULTIPLE_SELECT: self._decode_multiple_select,
            ColumnType.LINK: self._decode_link,
            ColumnType.LINK_FORMULA: self._decode_link,
            ColumnType.DATE: self._decode_date,
        }

    def project(self, rows: List[Any]) -> List[FormattedRow]:
        """
        Project every row, preserving order.

        Args:
            rows: Raw rows from the query response

        Returns:
            List of formatted rows, one per raw row
        """
        return [self.project_row(row) for row in rows]

    def project_row(self, row: Any) -> FormattedRow:
        """
        Project a single raw row.

        The row-identity field is copied verbatim; keys that aren't in
        the schema are dropped.

        Args:
            row: Raw row dict

        Returns:
            New dict keyed by column display name
        """
        if not isinstance(row, Mapping):
            log.debug("Skipping malformed row: %s", type(row).__name__)
            return {}

        row_id_field = self.config.row_id_field
        formatted: FormattedRow = {}
        if row_id_field in row:
            formatted[row_id_field] = row[row_id_field]

        for key, value in row.items():
            column = self.schema.get(key)
            if column is None:
                continue

            try:
                formatted[column.name] = self.decode(column, value)
            except SchemaMismatchError as e:
                log.debug("%s; passing value through", e)
                formatted[column.name] = value

        return formatted

    def decode(self, column: ColumnDescriptor, value: Any) -> Any:
        """
        Decode one cell according to its column's type.

        Dispatches to the type's decoder; types without one pass through.

        Raises:
            SchemaMismatchError: If the value's shape doesn't fit the type
        """
        decoder = self._decoders.get(column.column_type)
        if decoder is None:
            return value
        return decoder(column, value)

    # ----- Select Columns -----

    def _decode_single_select(self, column: ColumnDescriptor, value: Any) -> Optional[str]:
        """Option id -> label (None for unknown ids)."""
        if is_sequence(value) or isinstance(value, Mapping):
            raise SchemaMismatchError(column.key, value, "expected a single option id")
        return lookup_label(value, column.options or {})

    def _decode_multiple_select(self, column: ColumnDescriptor, value: Any) -> List[Optional[str]]:
        """
        Option ids -> labels, preserving order and duplicates.

        A value that isn't a list (including a missing one) decodes to
        an empty list and the rest of the row is still processed.
        """
        if not is_sequence(value):
            return []
        return lookup_labels(list(value), column.options or {})

    # ----- Link Columns -----

    def _decode_link(self, column: ColumnDescriptor, value: Any) -> List[Any]:
        """
        Linked records -> display values.

        When the link's element type is a select type, each display value
        is an option id (or a list of them, for multiple-select elements)
        and is mapped to its label.
        """
        if not is_sequence(value):
            return []

        display_values = [display_value_of(element) for element in value]
        if column.has_nested_select():
            options = column.options or {}
            return [
                lookup_labels(list(item), options) if is_sequence(item) else lookup_label(item, options)
                for item in display_values
            ]
        return display_values

    # ----- Date Columns -----

    def _decode_date(self, column: ColumnDescriptor, value: Any) -> Any:
        """Render present dates in the column's format; pass absent ones through."""
        if value is None or value == '':
            return value
        return format_date(
            value,
            column.date_format,
            tz=self._tz,
            default_format=self.config.date_format
        )
