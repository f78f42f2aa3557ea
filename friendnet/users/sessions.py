"""
In-memory store for active user sessions.

The store is the only shared mutable state in the Session Manager. It is
owned by the application (see :func:`init_app`) and handed to each
controller explicitly. A store-level mutex guards the session table itself;
each userid also gets its own lock, so that a whole read-modify-write on one
user's data runs alone while other users proceed.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Generator, List, Optional

from flask import Flask, current_app

from ..domain import UserSession
from ..logging import getLogger

logger = getLogger(__name__)


class UnknownSession(KeyError):
    """There is no active session for a userid."""


class _UserLock(object):
    """A user's lock, and how many threads hold or wait for it."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class SessionStore(object):
    """Maps userids to their active :class:`.UserSession`."""

    def __init__(self) -> None:
        """Start with no sessions."""
        self._mutex = threading.Lock()
        self._sessions: Dict[str, UserSession] = {}
        self._user_locks: Dict[str, _UserLock] = {}

    @contextmanager
    def lock(self, userid: str) -> Generator[None, None, None]:
        """
        Hold the per-user lock for ``userid``.

        The lock exists only while someone holds or waits for it.
        """
        with self._mutex:
            user_lock = self._user_locks.get(userid)
            if user_lock is None:
                user_lock = self._user_locks[userid] = _UserLock()
            user_lock.holders += 1
        try:
            with user_lock.lock:
                yield
        finally:
            with self._mutex:
                user_lock.holders -= 1
                if not user_lock.holders:
                    del self._user_locks[userid]

    def locked_users(self) -> List[str]:
        """Userids whose lock is held or awaited, in sorted order."""
        with self._mutex:
            return sorted(self._user_locks)

    def get(self, userid: str) -> Optional[UserSession]:
        """Get the active session for ``userid``, if there is one."""
        with self._mutex:
            return self._sessions.get(userid)

    def require(self, userid: str) -> UserSession:
        """
        Get the active session for ``userid``.

        Raises
        ------
        :class:`UnknownSession`
        """
        session = self.get(userid)
        if session is None:
            raise UnknownSession(userid)
        return session

    def put(self, session: UserSession) -> None:
        """Record ``session``, replacing any earlier one for the same user."""
        with self._mutex:
            self._sessions[session.userid] = session
        logger.debug('Stored session for %s', session.userid)

    def remove(self, userid: str) -> UserSession:
        """
        Drop the active session for ``userid``.

        Raises
        ------
        :class:`UnknownSession`
        """
        with self._mutex:
            try:
                session = self._sessions.pop(userid)
            except KeyError as e:
                raise UnknownSession(userid) from e
        logger.debug('Removed session for %s', userid)
        return session

    def active_users(self) -> List[str]:
        """Userids with an active session, in sorted order."""
        with self._mutex:
            return sorted(self._sessions)


def init_app(app: Flask) -> None:
    """Give the application its own session store."""
    app.extensions['friendnet.sessions'] = SessionStore()


def current_store() -> SessionStore:
    """Get the session store of the current application."""
    store: SessionStore = current_app.extensions['friendnet.sessions']
    return store
