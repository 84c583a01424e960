"""
Query client - runs SQL read queries and formats their results.

The client is an explicit value: there is no process-wide default
instance. Its transport and route are fixed when it is constructed.
"""

import logging
from typing import Any, Dict, List

from .operations import DTABLE_DB_ROUTE, QueryRoute
from .transport import Transport
from ..config import FormatterConfig
from ..formatter import format_query_result
from ..utils.exceptions import InvalidQueryError

log = logging.getLogger(__name__)


class QueryClient:
    """
    Sends SQL queries through a transport and formats the results.

    Uses composition:
    - QueryRoute for request paths and response unwrapping
    - Transport for delivery
    - format_query_result for decoding
    """

    def __init__(
        self,
        transport: Transport,
        dtable_uuid: str,
        route: QueryRoute = DTABLE_DB_ROUTE,
        config: FormatterConfig = None
    ):
        """
        Initialize client for one base.

        Args:
            transport: Transport that delivers requests
            dtable_uuid: Base identifier
            route: Query route (direct database or API gateway)
            config: Formatter settings
        """
        self.transport = transport
        self.dtable_uuid = dtable_uuid
        self.route = route
        self.config = config or FormatterConfig()

    def query_raw(self, sql: str) -> Dict[str, list]:
        """
        Run a query and return the unwrapped response.

        Args:
            sql: SQL text

        Returns:
            {'columns': [...], 'rows': [...]}

        Raises:
            InvalidQueryError: If sql is empty
            DTableError: If the transport can't answer
        """
        if not isinstance(sql, str) or not sql.strip():
            raise InvalidQueryError(sql, "SQL must be a non-empty string")

        request = self.route.build(self.dtable_uuid, sql)
        body = self.transport.send(request)
        return request.unwrap_response(body)

    def query(self, sql: str) -> List[Dict[Any, Any]]:
        """
        Run a query and return formatted rows.

        Args:
            sql: SQL text

        Returns:
            Rows keyed by column display name
        """
        response = self.query_raw(sql)
        rows = format_query_result(response, self.config)
        log.info("Query via %s returned %d rows", self.route.name, len(rows))
        return rows

    def __repr__(self) -> str:
        return f"QueryClient({self.dtable_uuid}, {self.route.name}, {self.transport!r})"
