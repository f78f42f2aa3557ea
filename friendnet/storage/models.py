"""SQLAlchemy models for table storage."""

from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import JSON, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

db: SQLAlchemy = SQLAlchemy()


class DBTable(db.Model):
    """A named table; entities can only be stored in a table that exists."""

    __tablename__ = 'storage_table'

    name = Column(String(255), primary_key=True)
    created = Column(DateTime, default=datetime.now)

    entities = relationship('DBEntity', back_populates='table',
                            cascade='all, delete-orphan')


class DBEntity(db.Model):
    """An entity, keyed by partition and row within its table."""

    __tablename__ = 'storage_entity'

    table_name = Column(ForeignKey('storage_table.name'), primary_key=True)
    partition_key = Column(String(255), primary_key=True)
    row_key = Column(String(255), primary_key=True)

    properties = Column(JSON, nullable=False, default=dict)
    """Flat map of property name to string value."""

    updated = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    table = relationship('DBTable', back_populates='entities')
