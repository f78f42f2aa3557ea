"""
Request handling for the Data Gateway.

Each handler receives the request path as a list of segments, starting with
the operation name, and returns ``(data, status code, headers)``. Checks run
in a fixed order: at least an operation and a table must be given
(:class:`BadRequest`), then the table must exist (:class:`NotFound`), then
the operation must be known and have all of its segments
(:class:`BadRequest`).
"""

from http import HTTPStatus
from typing import Dict, List

from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from .. import storage
from ..logging import getLogger
from ..web import ResponseData

logger = getLogger(__name__)

CREATE_TABLE = 'CreateTableAdmin'
DELETE_TABLE = 'DeleteTableAdmin'
READ_ENTITY = 'ReadEntityAdmin'
UPDATE_ENTITY = 'UpdateEntityAdmin'
DELETE_ENTITY = 'DeleteEntityAdmin'
ADD_PROPERTY = 'AddPropertyAdmin'
UPDATE_PROPERTY = 'UpdatePropertyAdmin'
READ_ENTITY_AUTH = 'ReadEntityAuth'
UPDATE_ENTITY_AUTH = 'UpdateEntityAuth'

ALL_ROWS = '*'
"""Row wildcard: read every entity in a partition."""

ANY_VALUE = '*'
"""Body value that marks a property as required when listing entities."""


def read(paths: List[str], body: Dict[str, str]) -> ResponseData:
    """
    Handle a GET request.

    Supported forms::

        ReadEntityAuth/<table>/<token>/<partition>/<row>
        ReadEntityAdmin/<table>/<partition>/<row>
        ReadEntityAdmin/<table>/<partition>/*
        ReadEntityAdmin/<table>            (optionally with a property body)
    """
    operation, table = _operation_and_table(paths)

    if operation == READ_ENTITY_AUTH:
        if len(paths) < 5:
            raise BadRequest('Need a table, token, partition and row')
        token, partition, row = paths[2:5]
        return read_entity_with_token(table, token, partition, row)

    if operation != READ_ENTITY:
        raise BadRequest(f'Unsupported operation: {operation}')

    if len(paths) == 2:
        if body:
            required = [name for name, value in body.items()
                        if value == ANY_VALUE]
            return _list_entities(table, required=required), HTTPStatus.OK, {}
        return _list_entities(table), HTTPStatus.OK, {}

    if len(paths) == 4 and paths[3] == ALL_ROWS:
        return _list_entities(table, partition=paths[2]), HTTPStatus.OK, {}

    if len(paths) != 4:
        raise BadRequest('Need a table, partition and row')
    partition, row = paths[2:4]
    try:
        properties = storage.retrieve_entity(table, partition, row)
    except storage.NoSuchEntity as e:
        raise NotFound(f'No entity {partition}/{row}') from e
    return properties, HTTPStatus.OK, {}


def read_entity_with_token(table: str, token: str, partition: str,
                           row: str) -> ResponseData:
    """Read an entity on the authority of ``token`` alone."""
    try:
        properties = storage.retrieve_entity_with_token(token, table,
                                                        partition, row)
    except storage.AuthorizationFailure as e:
        logger.debug('Token refused for read of %s/%s: %s', partition, row, e)
        raise Forbidden('Token does not grant read on this entity') from e
    except storage.NoSuchEntity as e:
        raise NotFound(f'No entity {partition}/{row}') from e
    return properties, HTTPStatus.OK, {}


def create(paths: List[str]) -> ResponseData:
    """
    Handle a POST request: ``CreateTableAdmin/<table>``.

    Creating a table that already exists is not an error.
    """
    if len(paths) < 2:
        raise BadRequest('Need at least an operation and a table')
    operation, table = paths[0], paths[1]
    if operation != CREATE_TABLE:
        raise BadRequest(f'Unsupported operation: {operation}')
    if storage.create_table(table):
        logger.info('Created table %s', table)
        return {}, HTTPStatus.CREATED, {}
    return {}, HTTPStatus.ACCEPTED, {}


def update(paths: List[str], body: Dict[str, str]) -> ResponseData:
    """
    Handle a PUT request.

    Supported forms::

        UpdateEntityAuth/<table>/<token>/<partition>/<row>
        UpdateEntityAdmin/<table>/<partition>/<row>
        AddPropertyAdmin/<table>
        UpdatePropertyAdmin/<table>

    Entity updates merge the body's properties into the entity.
    """
    operation, table = _operation_and_table(paths)

    if operation == UPDATE_ENTITY_AUTH:
        if len(paths) < 5:
            raise BadRequest('Need a table, token, partition and row')
        token, partition, row = paths[2:5]
        return update_entity_with_token(table, token, partition, row, body)

    if operation in (ADD_PROPERTY, UPDATE_PROPERTY) and len(paths) == 2:
        if not body:
            raise BadRequest('Need a property to set')
        existing_only = operation == UPDATE_PROPERTY
        for name, value in body.items():
            changed = storage.set_property(table, name, value,
                                           existing_only=existing_only)
            logger.debug('Set %s on %i entities of %s', name, changed, table)
        return {}, HTTPStatus.OK, {}

    if operation != UPDATE_ENTITY:
        raise BadRequest(f'Unsupported operation: {operation}')
    if len(paths) < 4:
        raise BadRequest('Need a table, partition and row')
    partition, row = paths[2:4]
    storage.insert_or_merge_entity(table, partition, row, body)
    logger.debug('Updated %s/%s in %s', partition, row, table)
    return {}, HTTPStatus.OK, {}


def update_entity_with_token(table: str, token: str, partition: str,
                             row: str, properties: Dict[str, str]) \
        -> ResponseData:
    """Merge properties into an entity on the authority of ``token`` alone."""
    try:
        storage.merge_entity_with_token(token, table, partition, row,
                                        properties)
    except storage.AuthorizationFailure as e:
        logger.debug('Token refused for update of %s/%s: %s',
                     partition, row, e)
        raise Forbidden('Token does not grant update on this entity') from e
    except storage.NoSuchEntity as e:
        raise NotFound(f'No entity {partition}/{row}') from e
    return {}, HTTPStatus.OK, {}


def delete(paths: List[str]) -> ResponseData:
    """
    Handle a DELETE request.

    Supported forms::

        DeleteTableAdmin/<table>
        DeleteEntityAdmin/<table>/<partition>/<row>
    """
    operation, table = _operation_and_table(paths)

    if operation == DELETE_TABLE:
        storage.delete_table(table)
        logger.info('Deleted table %s', table)
        return {}, HTTPStatus.OK, {}

    if operation != DELETE_ENTITY:
        raise BadRequest(f'Unsupported operation: {operation}')
    if len(paths) < 4:
        raise BadRequest('Need a table, partition and row')
    partition, row = paths[2:4]
    try:
        storage.delete_entity(table, partition, row)
    except storage.NoSuchEntity as e:
        raise NotFound(f'No entity {partition}/{row}') from e
    return {}, HTTPStatus.OK, {}


def _operation_and_table(paths: List[str]) -> List[str]:
    if len(paths) < 2:
        raise BadRequest('Need at least an operation and a table')
    operation, table = paths[0], paths[1]
    if not storage.table_exists(table):
        raise NotFound(f'Table {table} does not exist')
    return [operation, table]


def _list_entities(table: str, partition: str = None,
                   required: List[str] = None) -> List[dict]:
    if required is not None and not required:
        # A body that names no required property matches nothing.
        return []
    entities = storage.query_entities(table, partition=partition,
                                      required=required or ())
    return [{'Partition': e.partition, 'Row': e.row, **e.properties}
            for e in entities]
