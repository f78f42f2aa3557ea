"""
Key-partitioned table storage.

Entities live in named tables and are keyed by a partition and a row. Each
entity holds a flat map of string properties. Administrative operations act
with the storage account's own authority; the ``*_with_token`` operations act
only with the authority of a shared access signature (see :mod:`.sas`), which
is how storage checks a capability token on behalf of the services.
"""

from typing import Dict, Iterable, List, NamedTuple, Optional

from ..context import get_application_config
from ..logging import getLogger
from . import models, sas, util
from .exceptions import AuthorizationFailure, NoSuchEntity, NoSuchTable, \
    StorageError

logger = getLogger(__name__)

init_app = util.init_app
create_all = util.create_all
drop_all = util.drop_all


class Entity(NamedTuple):
    """An entity and its properties."""

    partition: str
    row: str
    properties: Dict[str, str]


def table_exists(table: str) -> bool:
    """Determine whether a table exists."""
    with util.transaction() as dbsession:
        return _load_dbtable(table, dbsession, strict=False) is not None


def create_table(table: str) -> bool:
    """
    Create a table if it does not already exist.

    Returns
    -------
    bool
        True if the table was created, False if it was already there.
    """
    with util.transaction() as dbsession:
        if _load_dbtable(table, dbsession, strict=False) is not None:
            return False
        dbsession.add(models.DBTable(name=table))
    logger.debug('Created table %s', table)
    return True


def delete_table(table: str) -> None:
    """Delete a table and every entity in it."""
    with util.transaction() as dbsession:
        dbsession.delete(_load_dbtable(table, dbsession))
    logger.debug('Deleted table %s', table)


def retrieve_entity(table: str, partition: str, row: str) -> Dict[str, str]:
    """Get the properties of an entity."""
    with util.transaction() as dbsession:
        db_entity = _load_dbentity(table, partition, row, dbsession)
        return dict(db_entity.properties)


def query_entities(table: str, partition: Optional[str] = None,
                   required: Iterable[str] = ()) -> List[Entity]:
    """
    List entities in a table.

    Parameters
    ----------
    table : str
    partition : str or None
        If given, only entities in this partition are returned.
    required : iterable
        Names of properties that an entity must have to be returned.
    """
    required = list(required)
    with util.transaction() as dbsession:
        _load_dbtable(table, dbsession)
        query = dbsession.query(models.DBEntity) \
            .filter(models.DBEntity.table_name == table)
        if partition is not None:
            query = query.filter(models.DBEntity.partition_key == partition)
        query = query.order_by(models.DBEntity.partition_key,
                               models.DBEntity.row_key)
        return [
            Entity(e.partition_key, e.row_key, dict(e.properties))
            for e in query.all()
            if all(name in e.properties for name in required)
        ]


def insert_or_merge_entity(table: str, partition: str, row: str,
                           properties: Dict[str, str]) -> None:
    """
    Merge properties into an entity, creating it if necessary.

    Properties not named in ``properties`` are preserved.
    """
    with util.transaction() as dbsession:
        db_entity = _load_dbentity(table, partition, row, dbsession,
                                   strict=False)
        if db_entity is None:
            _load_dbtable(table, dbsession)
            db_entity = models.DBEntity(table_name=table,
                                        partition_key=partition,
                                        row_key=row, properties={})
        db_entity.properties = {**db_entity.properties, **properties}
        dbsession.add(db_entity)


def merge_entity(table: str, partition: str, row: str,
                 properties: Dict[str, str]) -> None:
    """Merge properties into an entity that must already exist."""
    with util.transaction() as dbsession:
        db_entity = _load_dbentity(table, partition, row, dbsession)
        db_entity.properties = {**db_entity.properties, **properties}
        dbsession.add(db_entity)


def delete_entity(table: str, partition: str, row: str) -> None:
    """Delete an entity."""
    with util.transaction() as dbsession:
        dbsession.delete(_load_dbentity(table, partition, row, dbsession))


def set_property(table: str, name: str, value: str,
                 existing_only: bool = False) -> int:
    """
    Set a property on every entity in a table.

    Parameters
    ----------
    existing_only : bool
        If True, only entities that already have the property are changed.

    Returns
    -------
    int
        The number of entities changed.
    """
    changed = 0
    with util.transaction() as dbsession:
        _load_dbtable(table, dbsession)
        db_entities = dbsession.query(models.DBEntity) \
            .filter(models.DBEntity.table_name == table) \
            .all()
        for db_entity in db_entities:
            if existing_only and name not in db_entity.properties:
                continue
            db_entity.properties = {**db_entity.properties, name: value}
            dbsession.add(db_entity)
            changed += 1
    return changed


def get_shared_access_signature(table: str, partition: str, row: str,
                                permissions: str) -> str:
    """
    Mint an access token for a single entity.

    The token grants ``permissions`` (see :mod:`.sas`) on the entity at
    ``partition``/``row`` of ``table``, and expires after the configured
    ``TOKEN_DURATION`` (24 hours by default).
    """
    config = get_application_config()
    duration = int(config.get('TOKEN_DURATION', '86400'))
    policy = sas.make_policy(table, partition, row, permissions, duration)
    return sas.encode(policy, _get_secret())


def retrieve_entity_with_token(token: str, table: str, partition: str,
                               row: str) -> Dict[str, str]:
    """Get the properties of an entity, using an access token as credential."""
    sas.authorize(token, _get_secret(), table, partition, row, sas.READ)
    return retrieve_entity(table, partition, row)


def merge_entity_with_token(token: str, table: str, partition: str, row: str,
                            properties: Dict[str, str]) -> None:
    """Merge properties into an entity, using an access token as credential."""
    sas.authorize(token, _get_secret(), table, partition, row, sas.UPDATE)
    merge_entity(table, partition, row, properties)


def _get_secret() -> str:
    try:
        secret: str = get_application_config()['STORAGE_ACCOUNT_KEY']
    except KeyError as e:
        raise StorageError('Missing required config parameter') from e
    return secret


def _load_dbtable(table: str, dbsession: util.Session,
                  strict: bool = True) -> Optional[models.DBTable]:
    db_table: Optional[models.DBTable] = dbsession.query(models.DBTable) \
        .filter(models.DBTable.name == table) \
        .first()
    if db_table is None and strict:
        raise NoSuchTable(f'Table {table} does not exist')
    return db_table


def _load_dbentity(table: str, partition: str, row: str,
                   dbsession: util.Session,
                   strict: bool = True) -> Optional[models.DBEntity]:
    db_entity: Optional[models.DBEntity] = dbsession.query(models.DBEntity) \
        .filter(models.DBEntity.table_name == table) \
        .filter(models.DBEntity.partition_key == partition) \
        .filter(models.DBEntity.row_key == row) \
        .first()
    if db_entity is None and strict:
        raise NoSuchEntity(f'No entity {partition}/{row} in {table}')
    return db_entity
