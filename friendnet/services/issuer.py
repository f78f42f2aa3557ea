"""Client for the Token Issuer service."""

from functools import wraps
from typing import Optional

from flask import Flask

from ..context import get_application_config, get_application_global
from ..domain import PASSWORD
from .util import Reply, ServiceSession


class IssuerServiceSession(ServiceSession):
    """An HTTP session with the Token Issuer."""

    def get_update_data(self, userid: str, password: str) -> Reply:
        """
        Get a read+update token along with the user's data coordinate.

        A successful reply carries ``token``, ``DataPartition`` and
        ``DataRow``.
        """
        return self.request('GET', 'GetUpdateData', userid,
                            body={PASSWORD: password})


def init_app(app: Optional[Flask] = None) -> None:
    """Set required configuration defaults for the application."""
    if app is not None:
        app.config.setdefault('ISSUER_ENDPOINT', 'http://localhost:34570/')
        app.config.setdefault('SERVICE_TIMEOUT', '30')


def get_session(app: Optional[Flask] = None) -> IssuerServiceSession:
    """Create a new issuer session."""
    config = get_application_config(app)
    endpoint = config.get('ISSUER_ENDPOINT', 'http://localhost:34570/')
    timeout = float(config.get('SERVICE_TIMEOUT', '30'))
    return IssuerServiceSession(endpoint, timeout)


def current_session(app: Optional[Flask] = None) -> IssuerServiceSession:
    """Get the issuer session for this context (if there is one)."""
    g = get_application_global()
    if g:
        if 'issuer' not in g:
            g.issuer = get_session(app)
        return g.issuer     # type: ignore
    return get_session(app)


@wraps(IssuerServiceSession.get_update_data)
def get_update_data(userid: str, password: str) -> Reply:
    """Get a read+update token along with the user's data coordinate."""
    return current_session().get_update_data(userid, password)
