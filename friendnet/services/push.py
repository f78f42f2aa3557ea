"""Client for the Fanout Dispatcher service."""

from functools import wraps
from typing import Optional

from flask import Flask

from ..context import get_application_config, get_application_global
from ..domain import FRIENDS
from .util import Reply, ServiceSession


class PushServiceSession(ServiceSession):
    """An HTTP session with the Fanout Dispatcher."""

    def push_status(self, partition: str, row: str, status: str,
                    friends: str) -> Reply:
        """
        Ask the dispatcher to append ``status`` to each friend's updates.

        Parameters
        ----------
        partition : str
        row : str
            Data coordinate of the user who posted the status.
        status : str
        friends : str
            The poster's serialized friend list.
        """
        return self.request('POST', 'PushStatus', partition, row, status,
                            body={FRIENDS: friends})


def init_app(app: Optional[Flask] = None) -> None:
    """Set required configuration defaults for the application."""
    if app is not None:
        app.config.setdefault('PUSH_ENDPOINT', 'http://localhost:34574/')
        app.config.setdefault('SERVICE_TIMEOUT', '30')


def get_session(app: Optional[Flask] = None) -> PushServiceSession:
    """Create a new dispatcher session."""
    config = get_application_config(app)
    endpoint = config.get('PUSH_ENDPOINT', 'http://localhost:34574/')
    timeout = float(config.get('SERVICE_TIMEOUT', '30'))
    return PushServiceSession(endpoint, timeout)


def current_session(app: Optional[Flask] = None) -> PushServiceSession:
    """Get the dispatcher session for this context (if there is one)."""
    g = get_application_global()
    if g:
        if 'push' not in g:
            g.push = get_session(app)
        return g.push       # type: ignore
    return get_session(app)


@wraps(PushServiceSession.push_status)
def push_status(partition: str, row: str, status: str, friends: str) -> Reply:
    """Ask the dispatcher to append ``status`` to each friend's updates."""
    return current_session().push_status(partition, row, status, friends)
