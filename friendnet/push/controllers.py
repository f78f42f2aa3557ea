"""
Request handling for the Fanout Dispatcher.

Friends' tokens are not available to the poster, so each friend's entity is
read and written through the Data Gateway's administrative operations. The
friend's (country, name) pair is its data coordinate.
"""

from http import HTTPStatus
from typing import Dict, List

from werkzeug.exceptions import BadRequest

from ..domain import DATA_TABLE, FRIENDS, UPDATES, FanoutReport, Friend
from ..friends import MalformedFriendList, parse_friends_list
from ..logging import getLogger
from ..services import ConnectionFailed, gateway
from ..web import ResponseData

logger = getLogger(__name__)

PUSH_STATUS = 'PushStatus'


def push(paths: List[str], body: Dict[str, str]) -> ResponseData:
    """
    Handle ``PushStatus/<partition>/<row>/<status>``.

    The body carries the poster's encoded friend list as ``Friends``.
    Always answers 200 once every friend has been tried; the delivery report
    in the response names the friends that could not be updated.
    """
    if len(paths) < 4:
        raise BadRequest('Need a partition, row and status')
    if paths[0] != PUSH_STATUS:
        raise BadRequest(f'Unsupported operation: {paths[0]}')
    partition, row = paths[1:3]
    # An unquoted slash in the status splits it over several segments.
    status = '/'.join(paths[3:])
    try:
        friend_list = parse_friends_list(body.get(FRIENDS, ''))
    except MalformedFriendList as e:
        raise BadRequest(str(e)) from e

    report = push_status(status, friend_list)
    logger.info('Status from %s/%s delivered to %i of %i friends',
                partition, row, report.delivered, report.attempted)
    return report.to_dict(), HTTPStatus.OK, {}


def push_status(status: str, friend_list: List[Friend]) -> FanoutReport:
    """
    Append ``status`` to the updates of each friend, in order.

    A friend whose entity is missing, or whose read or write fails, is
    skipped and reported. Nothing is rolled back.
    """
    failed = []
    for friend in friend_list:
        if not _deliver(status, friend):
            failed.append(friend)
    return FanoutReport(attempted=len(friend_list),
                        delivered=len(friend_list) - len(failed),
                        failed=failed)


def _deliver(status: str, friend: Friend) -> bool:
    try:
        reply = gateway.read_entity_admin(DATA_TABLE, friend.country,
                                          friend.name)
        if not reply.ok:
            logger.debug('Could not read %s: %i', friend, reply.status_code)
            return False
        # A row of ``*`` reads as a listing of the whole partition.
        if not isinstance(reply.data, dict) \
                or not isinstance(reply.data.get(UPDATES, ''), str):
            logger.debug('%s is not a single entity', friend)
            return False
        updates = reply.data.get(UPDATES, '') + status + '\n'
        reply = gateway.update_entity_admin(DATA_TABLE, friend.country,
                                            friend.name, {UPDATES: updates})
    except ConnectionFailed as e:
        logger.error('Gateway unreachable while pushing to %s: %s', friend, e)
        return False
    if not reply.ok:
        logger.debug('Could not update %s: %i', friend, reply.status_code)
        return False
    return True
