"""Client for the Data Gateway service."""

from functools import wraps
from typing import Dict, Optional

from flask import Flask

from ..context import get_application_config, get_application_global
from ..logging import getLogger
from .util import Reply, ServiceSession

logger = getLogger(__name__)


class GatewayServiceSession(ServiceSession):
    """An HTTP session with the Data Gateway."""

    def read_entity_admin(self, table: str, partition: str, row: str) -> Reply:
        """Read an entity with the gateway's own authority."""
        return self.request('GET', 'ReadEntityAdmin', table, partition, row)

    def update_entity_admin(self, table: str, partition: str, row: str,
                            properties: Dict[str, str]) -> Reply:
        """Insert or merge an entity with the gateway's own authority."""
        return self.request('PUT', 'UpdateEntityAdmin', table, partition, row,
                            body=properties)

    def read_entity_auth(self, table: str, token: str, partition: str,
                         row: str) -> Reply:
        """Read an entity using ``token`` as the credential."""
        return self.request('GET', 'ReadEntityAuth', table, token, partition,
                            row)

    def update_entity_auth(self, table: str, token: str, partition: str,
                           row: str, properties: Dict[str, str]) -> Reply:
        """Merge properties into an entity using ``token`` as the credential."""
        return self.request('PUT', 'UpdateEntityAuth', table, token, partition,
                            row, body=properties)


def init_app(app: Optional[Flask] = None) -> None:
    """Set required configuration defaults for the application."""
    if app is not None:
        app.config.setdefault('GATEWAY_ENDPOINT', 'http://localhost:34568/')
        app.config.setdefault('SERVICE_TIMEOUT', '30')


def get_session(app: Optional[Flask] = None) -> GatewayServiceSession:
    """Create a new gateway session."""
    config = get_application_config(app)
    endpoint = config.get('GATEWAY_ENDPOINT', 'http://localhost:34568/')
    timeout = float(config.get('SERVICE_TIMEOUT', '30'))
    return GatewayServiceSession(endpoint, timeout)


def current_session(app: Optional[Flask] = None) -> GatewayServiceSession:
    """Get the gateway session for this context (if there is one)."""
    g = get_application_global()
    if g:
        if 'gateway' not in g:
            g.gateway = get_session(app)
        return g.gateway    # type: ignore
    return get_session(app)


@wraps(GatewayServiceSession.read_entity_admin)
def read_entity_admin(table: str, partition: str, row: str) -> Reply:
    """Read an entity with the gateway's own authority."""
    return current_session().read_entity_admin(table, partition, row)


@wraps(GatewayServiceSession.update_entity_admin)
def update_entity_admin(table: str, partition: str, row: str,
                        properties: Dict[str, str]) -> Reply:
    """Insert or merge an entity with the gateway's own authority."""
    return current_session().update_entity_admin(table, partition, row,
                                                 properties)


@wraps(GatewayServiceSession.read_entity_auth)
def read_entity_auth(table: str, token: str, partition: str,
                     row: str) -> Reply:
    """Read an entity using ``token`` as the credential."""
    return current_session().read_entity_auth(table, token, partition, row)


@wraps(GatewayServiceSession.update_entity_auth)
def update_entity_auth(table: str, token: str, partition: str, row: str,
                       properties: Dict[str, str]) -> Reply:
    """Merge properties into an entity using ``token`` as the credential."""
    return current_session().update_entity_auth(table, token, partition, row,
                                                properties)
