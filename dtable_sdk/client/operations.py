"""
Request definitions for query operations.

Each operation is described by a RequestDefinition that carries its own
unwrap function, so how a response body is turned into a result is a
static property of the operation rather than something inferred from
the request URL.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping

from ..utils.validators import normalize_query_response


@dataclass(frozen=True)
class RequestDefinition:
    """A single request to the table service."""
    method: str
    path: str
    payload: Dict[str, Any] = field(default_factory=dict)
    unwrap: Callable[[Any], Any] = None

    def unwrap_response(self, body: Any) -> Any:
        """Apply this operation's unwrap function to a raw response body."""
        if self.unwrap is None:
            return body
        return self.unwrap(body)


def unwrap_query_response(body: Any) -> Dict[str, list]:
    """
    Unwrap a SQL query response into the {'columns', 'rows'} shape.

    Example:
        unwrap_query_response({'success': True, 'metadata': [...], 'results': [...]})
        -> {'columns': [...], 'rows': [...]}
    """
    columns, rows = normalize_query_response(body)
    return {'columns': columns, 'rows': rows}


def unwrap_gateway_query_response(body: Any) -> Dict[str, list]:
    """
    Unwrap an API gateway SQL response.

    The gateway may nest the query result under 'data'; otherwise the
    body has the same shape as a direct database response.
    """
    if isinstance(body, Mapping) and isinstance(body.get('data'), Mapping):
        body = body['data']
    return unwrap_query_response(body)


@dataclass(frozen=True)
class QueryRoute:
    """
    Where SQL queries are sent and how their responses are unwrapped.

    Routes are picked once, when a QueryClient is constructed.
    """
    name: str
    path_template: str
    unwrap: Callable[[Any], Any]

    def build(self, dtable_uuid: str, sql: str) -> RequestDefinition:
        """
        Build the request definition for a SQL query.

        Args:
            dtable_uuid: Base identifier
            sql: SQL text

        Returns:
            RequestDefinition with this route's unwrap function attached
        """
        return RequestDefinition(
            method='POST',
            path=self.path_template.format(dtable_uuid=dtable_uuid),
            payload={'sql': sql},
            unwrap=self.unwrap
        )


DTABLE_DB_ROUTE = QueryRoute(
    name='dtable-db',
    path_template='api/v1/query/{dtable_uuid}/',
    unwrap=unwrap_query_response
)

API_GATEWAY_ROUTE = QueryRoute(
    name='api-gateway',
    path_template='/api/v2/dtables/{dtable_uuid}/sql/',
    unwrap=unwrap_gateway_query_response
)

ROUTES = {route.name: route for route in (DTABLE_DB_ROUTE, API_GATEWAY_ROUTE)}
