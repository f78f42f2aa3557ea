"""Core data structures shared by the friendnet services."""

from typing import List, NamedTuple

AUTH_TABLE = 'AuthTable'
"""Table holding credential records."""

AUTH_PARTITION = 'Userid'
"""Every credential record lives in this partition, keyed by userid."""

PASSWORD = 'Password'
DATA_PARTITION = 'DataPartition'
DATA_ROW = 'DataRow'

DATA_TABLE = 'DataTable'
"""Table holding the per-user data entities."""

FRIENDS = 'Friends'
STATUS = 'Status'
UPDATES = 'Updates'


class Coordinate(NamedTuple):
    """Locates one entity within a table."""

    partition: str
    row: str


class Credential(NamedTuple):
    """A credential record from the auth table."""

    userid: str
    password: str
    data: Coordinate


class UserSession(NamedTuple):
    """An active session held by the Session Manager."""

    userid: str
    token: str
    data: Coordinate

    @property
    def partition(self) -> str:
        """Partition of the user's data entity."""
        return self.data.partition

    @property
    def row(self) -> str:
        """Row of the user's data entity."""
        return self.data.row


class Friend(NamedTuple):
    """One entry in a friend list; also the friend's data coordinate."""

    country: str
    name: str


class FanoutReport(NamedTuple):
    """Outcome of pushing a status to a friend list."""

    attempted: int
    delivered: int
    failed: List[Friend]

    def to_dict(self) -> dict:
        """Render as a JSON-friendly dict."""
        return {
            'attempted': self.attempted,
            'delivered': self.delivered,
            'failed': [f'{f.country};{f.name}' for f in self.failed]
        }
