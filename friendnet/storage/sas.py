"""
Shared access signatures for table storage.

A shared access signature is a bearer token that grants a fixed set of
permissions on a single entity until it expires. It is an HS256 JWT signed
with the storage account key, so only the storage layer can mint or check it;
the services that pass it around must treat it as opaque.
"""

from datetime import datetime, timedelta
from typing import NamedTuple

import jwt
from pytz import UTC

from .exceptions import AuthorizationFailure

READ = 'r'
UPDATE = 'u'
READ_UPDATE = READ + UPDATE


class AccessPolicy(NamedTuple):
    """What a shared access signature grants."""

    table: str
    partition: str
    row: str
    permissions: str
    expires: datetime

    def allows(self, permission: str) -> bool:
        """Determine whether this policy grants ``permission``."""
        return all(p in self.permissions for p in permission)


def make_policy(table: str, partition: str, row: str, permissions: str,
                duration: int) -> AccessPolicy:
    """Build a policy that expires ``duration`` seconds from now."""
    if not permissions or set(permissions) - set(READ_UPDATE):
        raise ValueError(f'Unsupported permissions: {permissions!r}')
    expires = datetime.now(tz=UTC) + timedelta(seconds=duration)
    return AccessPolicy(table, partition, row, permissions, expires)


def encode(policy: AccessPolicy, secret: str) -> str:
    """Sign a policy, producing an access token."""
    claims = {
        'tn': policy.table,
        'pk': policy.partition,
        'rk': policy.row,
        'sp': policy.permissions,
        'exp': policy.expires
    }
    token: str = jwt.encode(claims, secret, algorithm='HS256')
    return token


def decode(token: str, secret: str) -> AccessPolicy:
    """
    Verify the signature and expiry of a token and recover its policy.

    Raises
    ------
    :class:`AuthorizationFailure`
        If the token is malformed, forged, or expired.
    """
    try:
        claims = jwt.decode(token, secret, algorithms=['HS256'])
        return AccessPolicy(
            table=claims['tn'],
            partition=claims['pk'],
            row=claims['rk'],
            permissions=claims['sp'],
            expires=datetime.fromtimestamp(claims['exp'], tz=UTC)
        )
    except jwt.exceptions.ExpiredSignatureError as e:
        raise AuthorizationFailure('Access token has expired') from e
    except (KeyError, TypeError, jwt.exceptions.InvalidTokenError) as e:
        raise AuthorizationFailure('Access token is not valid') from e


def authorize(token: str, secret: str, table: str, partition: str, row: str,
              permission: str) -> AccessPolicy:
    """
    Check that ``token`` grants ``permission`` on exactly this entity.

    Raises
    ------
    :class:`AuthorizationFailure`
    """
    policy = decode(token, secret)
    if (policy.table, policy.partition, policy.row) != (table, partition, row):
        raise AuthorizationFailure('Access token is for another resource')
    if not policy.allows(permission):
        raise AuthorizationFailure(f'Access token lacks {permission!r}')
    return policy
