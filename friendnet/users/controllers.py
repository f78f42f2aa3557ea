"""
Request handling for the Session Manager.

Every handler takes the application's :class:`.SessionStore` as its first
argument. Handlers that act on a user's data resolve the user's session to a
token and data coordinate, and then go through the Data Gateway with that
token; the Session Manager never reads or writes storage directly.
"""

import re
from contextlib import contextmanager
from http import HTTPStatus
from typing import Dict, Generator, List

from flask import abort
from werkzeug.exceptions import BadRequest, Forbidden, InternalServerError, \
    NotFound, ServiceUnavailable

from .. import friends
from ..domain import DATA_PARTITION, DATA_ROW, DATA_TABLE, FRIENDS, STATUS, \
    UPDATES, Coordinate, Friend, UserSession
from ..logging import getLogger
from ..services import ConnectionFailed, Reply, gateway, issuer, push
from ..web import ResponseData, is_ascii
from .sessions import SessionStore, UnknownSession

logger = getLogger(__name__)

SIGN_ON = 'SignOn'
SIGN_OFF = 'SignOff'
ADD_FRIEND = 'AddFriend'
UNFRIEND = 'UnFriend'
UPDATE_STATUS = 'UpdateStatus'
READ_FRIEND_LIST = 'ReadFriendList'

USERID = re.compile(r'^[A-Za-z]+$')


def post(sessions: SessionStore, paths: List[str],
         body: Dict[str, str]) -> ResponseData:
    """Handle ``SignOn/<userid>`` and ``SignOff/<userid>``."""
    operation, userid = _operation_and_user(paths)
    if operation == SIGN_ON:
        return sign_on(sessions, userid, body)
    if operation == SIGN_OFF:
        return sign_off(sessions, userid)
    raise BadRequest(f'Unsupported operation: {operation}')


def put(sessions: SessionStore, paths: List[str]) -> ResponseData:
    """
    Handle the friend list and status operations.

    ``AddFriend/<userid>/<country>/<name>``,
    ``UnFriend/<userid>/<country>/<name>`` and
    ``UpdateStatus/<userid>/<status>``.
    """
    operation, userid = _operation_and_user(paths)
    if operation in (ADD_FRIEND, UNFRIEND):
        if len(paths) != 4:
            raise BadRequest('Need exactly a userid, country and name')
        friend = Friend(paths[2], paths[3])
        if operation == ADD_FRIEND:
            return add_friend(sessions, userid, friend)
        return unfriend(sessions, userid, friend)
    if operation == UPDATE_STATUS:
        if len(paths) < 3:
            raise BadRequest('Need a userid and status')
        # An unquoted slash in the status splits it over several segments.
        return update_status(sessions, userid, '/'.join(paths[2:]))
    raise BadRequest(f'Unsupported operation: {operation}')


def get(sessions: SessionStore, paths: List[str]) -> ResponseData:
    """Handle ``ReadFriendList/<userid>``."""
    operation, userid = _operation_and_user(paths)
    if operation == READ_FRIEND_LIST:
        return read_friend_list(sessions, userid)
    raise BadRequest(f'Unsupported operation: {operation}')


def sign_on(sessions: SessionStore, userid: str,
            body: Dict[str, str]) -> ResponseData:
    """
    Start a session for ``userid``, or refresh the one it already has.

    Nothing is recorded unless every step succeeds: the credential is
    well-formed, the userid is alphabetic, the Token Issuer accepts the
    credential, and the user's data entity can be read with the new token.
    Every failure is reported as :class:`NotFound`.
    """
    if len(body) != 1:
        raise NotFound('Credential must have exactly one property')
    password = next(iter(body.values()))
    if not password or not is_ascii(password):
        raise NotFound('Credential must be non-empty ASCII')
    if not USERID.match(userid):
        raise NotFound('Userid must be letters only')

    with sessions.lock(userid):
        with _reachable('Token Issuer'):
            reply = issuer.get_update_data(userid, password)
        if not reply.ok:
            logger.debug('Issuer refused %s: %i', userid, reply.status_code)
            raise NotFound('Unknown user or bad password')
        try:
            session = UserSession(
                userid,
                reply.data['token'],
                Coordinate(reply.data[DATA_PARTITION], reply.data[DATA_ROW])
            )
        except (KeyError, TypeError) as e:
            logger.error('Issuer reply for %s is incomplete', userid)
            raise NotFound('Unknown user or bad password') from e

        with _reachable('Data Gateway'):
            reply = gateway.read_entity_auth(DATA_TABLE, session.token,
                                             session.partition, session.row)
        if not reply.ok:
            logger.debug('No data entity for %s: %i', userid,
                         reply.status_code)
            raise NotFound('No data for user')

        sessions.put(session)
    logger.info('%s signed on', userid)
    return {}, HTTPStatus.OK, {}


def sign_off(sessions: SessionStore, userid: str) -> ResponseData:
    """End the session for ``userid``."""
    with sessions.lock(userid):
        try:
            sessions.remove(userid)
        except UnknownSession as e:
            raise NotFound(f'{userid} is not signed on') from e
    logger.info('%s signed off', userid)
    return {}, HTTPStatus.OK, {}


def require_session(sessions: SessionStore, userid: str) -> UserSession:
    """
    Get the active session for ``userid``.

    Raises
    ------
    :class:`Forbidden`
        If ``userid`` is not signed on.
    """
    try:
        return sessions.require(userid)
    except UnknownSession as e:
        raise Forbidden(f'{userid} is not signed on') from e


def add_friend(sessions: SessionStore, userid: str,
               friend: Friend) -> ResponseData:
    """Append ``friend`` to the user's friend list unless already there."""
    _check_encodable(friend)
    with sessions.lock(userid):
        session = require_session(sessions, userid)
        friend_list = _load_friends(session)
        if not friends.add_friend(friend_list, friend):
            return {}, HTTPStatus.OK, {}
        return _store_friends(session, friend_list)


def unfriend(sessions: SessionStore, userid: str,
             friend: Friend) -> ResponseData:
    """Remove the first occurrence of ``friend`` from the user's list."""
    _check_encodable(friend)
    with sessions.lock(userid):
        session = require_session(sessions, userid)
        friend_list = _load_friends(session)
        if not friends.remove_friend(friend_list, friend):
            return {}, HTTPStatus.OK, {}
        return _store_friends(session, friend_list)


def update_status(sessions: SessionStore, userid: str,
                  status: str) -> ResponseData:
    """
    Set the user's status and push it to every friend.

    The status is recorded on the user's own entity, and appended to the
    user's own updates, before the Fanout Dispatcher is called. If the local
    write fails the dispatcher is not called.

    Returns
    -------
    dict
        The dispatcher's delivery report.
    int
    dict
    """
    with sessions.lock(userid):
        session = require_session(sessions, userid)
        data = _read_own(session)
        friend_list = data.get(FRIENDS, '')
        updates = data.get(UPDATES, '') + status + '\n'

        with _reachable('Data Gateway'):
            reply = gateway.update_entity_auth(
                DATA_TABLE, session.token, session.partition, session.row,
                {STATUS: status, UPDATES: updates}
            )
        if not reply.ok:
            _propagate(reply, 'Could not record status')

        with _reachable('Fanout Dispatcher'):
            reply = push.push_status(session.partition, session.row, status,
                                     friend_list)
        if not reply.ok:
            _propagate(reply, 'Could not push status')
    logger.debug('Status of %s pushed: %s', userid, reply.data)
    return reply.data, HTTPStatus.OK, {}


def read_friend_list(sessions: SessionStore, userid: str) -> ResponseData:
    """Get the user's friend list, still encoded."""
    with sessions.lock(userid):
        session = require_session(sessions, userid)
    data = _read_own(session)
    return {FRIENDS: data.get(FRIENDS, '')}, HTTPStatus.OK, {}


def active_users(sessions: SessionStore) -> ResponseData:
    """List the userids that are signed on."""
    return {'users': sessions.active_users()}, HTTPStatus.OK, {}


@contextmanager
def _reachable(service: str) -> Generator[None, None, None]:
    try:
        yield
    except ConnectionFailed as e:
        raise ServiceUnavailable(f'{service} is unavailable') from e


def _propagate(reply: Reply, message: str) -> None:
    """Fail with the same status code as a downstream service did."""
    logger.debug('%s: %i', message, reply.status_code)
    if reply.status_code >= 400:
        abort(reply.status_code, message)
    raise InternalServerError(message)


def _operation_and_user(paths: List[str]) -> List[str]:
    if len(paths) < 2:
        raise BadRequest('Need an operation and a userid')
    return paths[:2]


def _check_encodable(friend: Friend) -> None:
    try:
        friends.check_encodable(friend.country, friend.name)
    except friends.UnencodableFriend as e:
        raise BadRequest(str(e)) from e


def _read_own(session: UserSession) -> Dict[str, str]:
    with _reachable('Data Gateway'):
        reply = gateway.read_entity_auth(DATA_TABLE, session.token,
                                         session.partition, session.row)
    if not reply.ok:
        _propagate(reply, 'Could not read user data')
    data: Dict[str, str] = reply.data
    return data


def _load_friends(session: UserSession) -> List[Friend]:
    encoded = _read_own(session).get(FRIENDS, '')
    try:
        return friends.parse_friends_list(encoded)
    except friends.MalformedFriendList as e:
        logger.error('Stored friend list of %s is corrupt: %s',
                     session.userid, e)
        raise InternalServerError('Stored friend list is corrupt') from e


def _store_friends(session: UserSession,
                   friend_list: List[Friend]) -> ResponseData:
    with _reachable('Data Gateway'):
        reply = gateway.update_entity_auth(
            DATA_TABLE, session.token, session.partition, session.row,
            {FRIENDS: friends.friends_list_to_string(friend_list)}
        )
    if not reply.ok:
        _propagate(reply, 'Could not store friend list')
    return {}, reply.status_code, {}
