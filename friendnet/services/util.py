"""Plumbing shared by the service clients."""

from typing import Any, Dict, NamedTuple, Optional
from urllib.parse import quote, urljoin

import requests

from ..logging import getLogger
from .exceptions import ConnectionFailed

logger = getLogger(__name__)


class Reply(NamedTuple):
    """Status code and decoded JSON body of a response from a service."""

    status_code: int
    data: Any

    @property
    def ok(self) -> bool:
        """Whether the service answered 200 OK."""
        return self.status_code == requests.codes.ok


class ServiceSession(object):
    """Base for an HTTP session with one of the friendnet services."""

    def __init__(self, endpoint: str, timeout: float = 30.0) -> None:
        """Create a new HTTP session."""
        self._endpoint = endpoint if endpoint.endswith('/') else endpoint + '/'
        self._timeout = timeout
        self._session = requests.Session()
        logger.debug('New %s for %s', type(self).__name__, self._endpoint)

    def _path(self, *segments: str) -> str:
        return urljoin(self._endpoint,
                       '/'.join(quote(segment, safe='')
                                for segment in segments))

    def request(self, method: str, *segments: str,
                body: Optional[Dict[str, str]] = None) -> Reply:
        """
        Issue a request and decode the response.

        Parameters
        ----------
        method : str
        segments : str
            Path segments, starting with the operation name. Each segment is
            URL-quoted.
        body : dict or None
            Sent as a JSON object if given.

        Returns
        -------
        :class:`.Reply`

        Raises
        ------
        :class:`.ConnectionFailed`
            If the service cannot be reached. The request is not retried.
        """
        url = self._path(*segments)
        try:
            response = self._session.request(method, url, json=body,
                                             timeout=self._timeout)
        except (requests.exceptions.ConnectionError,
                requests.exceptions.Timeout) as e:
            logger.error('Could not reach %s: %s', url, e)
            raise ConnectionFailed(f'Could not reach {self._endpoint}') from e
        logger.debug('%s %s -> %i', method, url, response.status_code)
        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}
        return Reply(response.status_code, data)
