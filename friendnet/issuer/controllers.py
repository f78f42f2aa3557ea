"""
Request handling for the Token Issuer.

A request names an operation and a userid in its path and carries the
user's password as the only property of its JSON body. Requests are checked
in a fixed order, and nothing is read from storage until the request itself
is well-formed:

1. The operation must be one of :data:`OPERATIONS` and the path must have
   exactly two segments (:class:`BadRequest`).
2. The body must hold exactly one property, a non-empty ASCII ``Password``
   (:class:`BadRequest`).
3. The credential and data tables must exist, and the credential record must
   exist, be complete and match the password (:class:`NotFound`).
"""

import hmac
from http import HTTPStatus
from typing import Dict, List

from werkzeug.exceptions import BadRequest, InternalServerError, NotFound

from .. import storage
from ..domain import AUTH_PARTITION, AUTH_TABLE, DATA_PARTITION, DATA_ROW, \
    DATA_TABLE, PASSWORD, Coordinate, Credential
from ..logging import getLogger
from ..storage import sas
from ..web import ResponseData, is_ascii

logger = getLogger(__name__)

GET_READ_TOKEN = 'GetReadToken'
GET_UPDATE_TOKEN = 'GetUpdateToken'
GET_UPDATE_DATA = 'GetUpdateData'

OPERATIONS = {
    GET_READ_TOKEN: sas.READ,
    GET_UPDATE_TOKEN: sas.READ_UPDATE,
    GET_UPDATE_DATA: sas.READ_UPDATE,
}
"""Supported operations and the permissions their tokens carry."""


def issue(paths: List[str], body: Dict[str, str]) -> ResponseData:
    """
    Issue a token for the user named in the path.

    Parameters
    ----------
    paths : list
        ``[operation, userid]``.
    body : dict
        Must be ``{"Password": ...}``.

    Returns
    -------
    dict
        ``{"token": ...}``; :const:`GET_UPDATE_DATA` also returns the
        ``DataPartition`` and ``DataRow`` of the user's data entity.
    int
        HTTP status code.
    dict
        Headers to add to the response.
    """
    if not paths or paths[0] not in OPERATIONS:
        raise BadRequest('Unsupported operation')
    if len(paths) != 2:
        raise BadRequest('Expected an operation and a userid')
    operation, userid = paths
    password = _get_password(body)

    credential = authenticate(userid, password)
    try:
        token = storage.get_shared_access_signature(
            DATA_TABLE,
            credential.data.partition,
            credential.data.row,
            OPERATIONS[operation]
        )
    except (storage.StorageError, ValueError) as e:
        logger.error('Could not mint token for %s: %s', userid, e)
        raise InternalServerError('Could not issue token') from e
    logger.debug('Issued %s token for %s', OPERATIONS[operation], userid)

    if operation == GET_UPDATE_DATA:
        return {
            'token': token,
            DATA_PARTITION: credential.data.partition,
            DATA_ROW: credential.data.row
        }, HTTPStatus.OK, {}
    return {'token': token}, HTTPStatus.OK, {}


def authenticate(userid: str, password: str) -> Credential:
    """
    Load the credential for ``userid`` and check ``password`` against it.

    Every way of failing looks the same to the caller.

    Raises
    ------
    :class:`NotFound`
    """
    if not storage.table_exists(AUTH_TABLE) \
            or not storage.table_exists(DATA_TABLE):
        logger.error('Credential or data table is missing')
        raise NotFound('Unknown user or bad password')
    try:
        record = storage.retrieve_entity(AUTH_TABLE, AUTH_PARTITION, userid)
    except storage.NoSuchEntity as e:
        raise NotFound('Unknown user or bad password') from e

    if set(record) != {PASSWORD, DATA_PARTITION, DATA_ROW}:
        logger.error('Credential record for %s is malformed', userid)
        raise NotFound('Unknown user or bad password')
    if not hmac.compare_digest(record[PASSWORD].encode('utf-8'),
                               password.encode('utf-8')):
        logger.debug('Bad password for %s', userid)
        raise NotFound('Unknown user or bad password')
    return Credential(userid, record[PASSWORD],
                      Coordinate(record[DATA_PARTITION], record[DATA_ROW]))


def _get_password(body: Dict[str, str]) -> str:
    if len(body) != 1 or PASSWORD not in body:
        raise BadRequest('Body must hold only the password')
    password = body[PASSWORD]
    if not password or not is_ascii(password):
        raise BadRequest('Password must be non-empty ASCII')
    return password
