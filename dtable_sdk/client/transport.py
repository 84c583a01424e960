"""
Transport implementations for sending query requests.

Uses abstract base class pattern for extensibility:
- QueryClient doesn't depend on a specific transport
- Clear contract for what a transport must provide
- Transports are chosen once, at client construction

The transports here are in-process: they answer from recorded
responses, which is how saved query results are re-formatted offline.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .operations import RequestDefinition
from ..utils.exceptions import QueryNotFoundError, ResponseFormatError

log = logging.getLogger(__name__)

INDEX_FILE_NAME = 'index.json'


def normalize_sql(sql: str) -> str:
    """Collapse whitespace so recorded queries match regardless of layout."""
    return ' '.join(sql.split())


def load_response_file(path: Union[str, Path]) -> Any:
    """
    Read a saved query response from a JSON file.

    Args:
        path: Path to the JSON file

    Returns:
        Parsed JSON body

    Raises:
        ResponseFormatError: If the file can't be read or isn't valid JSON
    """
    path = Path(path)
    try:
        with path.open(encoding='utf-8') as f:
            return json.load(f)
    except OSError as e:
        raise ResponseFormatError(f"cannot read file: {e.strerror or e}", str(path))
    except json.JSONDecodeError as e:
        raise ResponseFormatError(f"invalid JSON at line {e.lineno}", str(path))


class Transport(ABC):
    """
    Abstract base class for all transports.

    A transport takes a RequestDefinition and returns the raw response
    body. Unwrapping is left to the request's own unwrap function.
    """

    @abstractmethod
    def send(self, request: RequestDefinition) -> Any:
        """
        Send a request and return the raw response body.

        Args:
            request: Request to send

        Returns:
            Raw response body

        Raises:
            DTableError: If no response can be produced
        """
        pass


class ReplayTransport(Transport):
    """
    Answers SQL queries from an in-memory map of recorded responses.

    Also keeps the list of requests it was sent, in order.
    """

    def __init__(self, responses: Mapping[str, Any]):
        """
        Args:
            responses: Dict of SQL text -> raw response body
        """
        self._responses: Dict[str, Any] = {
            normalize_sql(sql): body for sql, body in responses.items()
        }
        self.requests = []

    def send(self, request: RequestDefinition) -> Any:
        self.requests.append(request)
        sql = normalize_sql(request.payload.get('sql', ''))
        if sql not in self._responses:
            raise QueryNotFoundError(sql)
        return self._responses[sql]

    def __repr__(self) -> str:
        return f"ReplayTransport({len(self._responses)} responses)"


class FileTransport(Transport):
    """
    Answers SQL queries from saved JSON response files.

    `path` is either:
    - a single JSON file, returned for every query, or
    - a directory with an index.json mapping SQL text to file names
      (relative to the directory)
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._index: Optional[Dict[str, str]] = None

    def _load_index(self) -> Dict[str, str]:
        if self._index is None:
            raw_index = load_response_file(self.path / INDEX_FILE_NAME)
            if not isinstance(raw_index, Mapping):
                raise ResponseFormatError("index must map SQL to file names", str(self.path))
            self._index = {normalize_sql(sql): name for sql, name in raw_index.items()}
        return self._index

    def send(self, request: RequestDefinition) -> Any:
        if not self.path.is_dir():
            log.debug("Answering %s %s from %s", request.method, request.path, self.path)
            return load_response_file(self.path)

        sql = normalize_sql(request.payload.get('sql', ''))
        file_name = self._load_index().get(sql)
        if file_name is None:
            raise QueryNotFoundError(sql)
        log.debug("Answering %s %s from %s", request.method, request.path, file_name)
        return load_response_file(self.path / file_name)

    def __repr__(self) -> str:
        return f"FileTransport({self.path})"
