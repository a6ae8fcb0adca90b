"""
Base configurations and mixins for database models.

Provides the declarative base with dictionary serialization plus the UUID
primary key and timestamp mixins shared by every table. Column types are
portable so the same models run on SQLite and PostgreSQL.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Uuid, inspect
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql.functions import now as db_now


class CustomBase:
    """
    Custom base class for SQLAlchemy models with enhanced serialization.

    `to_dict` converts UUID and datetime column values to strings so the
    result is JSON ready. Columns listed in `__private_columns__` are left out.
    """

    __private_columns__: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        d = {}
        for column in inspect(self).mapper.column_attrs:
            if column.key in self.__private_columns__:
                continue
            value = getattr(self, column.key)
            if isinstance(value, uuid.UUID):
                d[column.key] = str(value)
            elif isinstance(value, datetime):
                d[column.key] = value.isoformat()
            else:
                d[column.key] = value
        return d


Base = declarative_base(cls=CustomBase)


class TimestampMixin:
    """
    Adds created_at / updated_at columns managed by the database.
    """

    created_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        nullable=False,
        comment="Timestamp when the record was created",
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        onupdate=db_now(),
        nullable=False,
        comment="Timestamp when the record was last updated",
    )


class UUIDMixin:
    """
    Adds a UUID4 primary key generated client side on insert.
    """

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Primary key using UUID4 format",
    )


__all__ = ["Base", "TimestampMixin", "UUIDMixin"]
