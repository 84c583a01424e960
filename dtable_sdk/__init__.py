"""
Client SDK for a remote table database: query-result formatting.

format_query_result turns a raw query response into display rows keyed
by column name; QueryClient runs queries through an explicit transport
and formats what comes back.
"""

import logging

from .config import FormatterConfig, load_config
from .formatter import format_query_result, format_rows, render_table, render_csv
from .client.query_client import QueryClient

logging.getLogger("dtable_sdk").addHandler(logging.NullHandler())

__all__ = [
    "FormatterConfig",
    "load_config",
    "format_query_result",
    "format_rows",
    "render_table",
    "render_csv",
    "QueryClient",
]
