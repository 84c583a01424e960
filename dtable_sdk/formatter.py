"""
Result formatter for query responses.

format_query_result is the engine entry point: it indexes the response's
columns and projects its rows into display rows. The render_* helpers
turn formatted rows into text for terminals and exports, keeping
presentation separate from decoding.
"""

import csv
import io
from typing import List, Dict, Any

from tabulate import tabulate

from .config import FormatterConfig
from .projector.projector import RowProjector
from .schema.indexer import index_columns
from .utils.row_utils import cell_to_text, collect_headers
from .utils.validators import normalize_query_response


def format_query_result(response: Any, config: FormatterConfig = None) -> List[Dict[Any, Any]]:
    """
    Format a raw query response into display rows.

    Pure function of its inputs: the response is not modified and every
    call builds its own schema index.

    Args:
        response: Query response with 'columns' and 'rows' (or 'metadata'
            and 'results')
        config: Formatter settings

    Returns:
        Formatted rows keyed by column display name, in input order

    Example:
        response = {
            'columns': [{'key': 'c1', 'name': 'Status', 'type': 'single-select',
                         'data': {'options': [{'id': 'o1', 'name': 'Done'}]}}],
            'rows': [{'_id': 'r1', 'c1': 'o1'}],
        }
        format_query_result(response) -> [{'_id': 'r1', 'Status': 'Done'}]
    """
    columns, rows = normalize_query_response(response)
    return format_rows(columns, rows, config)


def format_rows(
    columns: List[Any],
    rows: List[Any],
    config: FormatterConfig = None
) -> List[Dict[Any, Any]]:
    """
    Format rows given the column metadata list directly.

    Args:
        columns: Column metadata list
        rows: Raw rows
        config: Formatter settings

    Returns:
        Formatted rows
    """
    schema = index_columns(columns)
    return RowProjector(schema, config).project(list(rows or []))


def render_table(rows: List[Dict[Any, Any]], tablefmt: str = 'grid') -> str:
    """
    Format rows as an ASCII table.

    Args:
        rows: Formatted rows
        tablefmt: Any tabulate table format

    Returns:
        Formatted string with table and row count
    """
    if not rows:
        return "(0 rows)"

    columns = collect_headers(rows)

    # Extract values in column order
    values = []
    for row in rows:
        values.append([cell_to_text(row.get(col)) for col in columns])

    table = tabulate(values, headers=[str(col) for col in columns], tablefmt=tablefmt)
    return table + "\n" + format_row_count(len(rows))


def render_csv(rows: List[Dict[Any, Any]]) -> str:
    """
    Export rows as CSV text.

    Header is the union of row keys in first-seen order. Missing cells
    and None are written as empty strings.

    Args:
        rows: Formatted rows

    Returns:
        CSV text (empty string for no rows)
    """
    if not rows:
        return ""

    columns = collect_headers(rows)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([str(col) for col in columns])
    for row in rows:
        writer.writerow([cell_to_text(row.get(col)) for col in columns])
    return buffer.getvalue()


def format_row_count(count: int) -> str:
    """
    Format a row count line.

    Example:
        format_row_count(1) -> '(1 row)'
    """
    return f"({count} row{'s' if count != 1 else ''})"
