"""
Encoding and decoding of friend lists.

A friend list is stored in a single string property. Each friend is a
``country;name`` pair and pairs are joined with ``|``; the empty string is the
empty list. The list is an ordered multiset: order is insertion order and
duplicates are kept.
"""

from typing import Iterable, List, Tuple

from .domain import Friend

PAIR_SEPARATOR = '|'
FIELD_SEPARATOR = ';'


class MalformedFriendList(ValueError):
    """A friend list string does not follow the ``country;name|...`` grammar."""


class UnencodableFriend(ValueError):
    """A friend's country or name contains one of the separators."""


def parse_friends_list(friends: str) -> List[Friend]:
    """
    Decode a serialized friend list.

    Parameters
    ----------
    friends : str

    Returns
    -------
    list
        Items are :class:`.Friend`, in the order they were stored.

    Raises
    ------
    :class:`MalformedFriendList`
        If any pair lacks the ``;`` field separator.
    """
    if not friends:
        return []
    parsed = []
    for pair in friends.split(PAIR_SEPARATOR):
        country, sep, name = pair.partition(FIELD_SEPARATOR)
        if not sep or FIELD_SEPARATOR in name:
            raise MalformedFriendList(f'Not a country;name pair: {pair!r}')
        parsed.append(Friend(country, name))
    return parsed


def friends_list_to_string(friends: Iterable[Tuple[str, str]]) -> str:
    """
    Encode a friend list.

    Raises
    ------
    :class:`UnencodableFriend`
        If a country or name contains ``;`` or ``|``.
    """
    pairs = []
    for country, name in friends:
        check_encodable(country, name)
        pairs.append(f'{country}{FIELD_SEPARATOR}{name}')
    return PAIR_SEPARATOR.join(pairs)


def check_encodable(country: str, name: str) -> None:
    """Make sure that a friend can be stored without breaking the grammar."""
    for value in (country, name):
        if PAIR_SEPARATOR in value or FIELD_SEPARATOR in value:
            raise UnencodableFriend(f'Separator in friend field: {value!r}')


def add_friend(friends: List[Friend], friend: Friend) -> bool:
    """
    Append ``friend`` unless an exact match is already present.

    Returns
    -------
    bool
        True if the list was changed.
    """
    if friend in friends:
        return False
    friends.append(friend)
    return True


def remove_friend(friends: List[Friend], friend: Friend) -> bool:
    """
    Remove the first exact match of ``friend``.

    Returns
    -------
    bool
        True if the list was changed.
    """
    try:
        friends.remove(friend)
    except ValueError:
        return False
    return True
