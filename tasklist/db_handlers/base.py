from __future__ import annotations

import asyncio
from functools import wraps
from typing import Any, Generic, TypeVar

from asyncpg.exceptions import ConnectionDoesNotExistError
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasklist.errors import ServiceError
from tasklist.models.base import Base
from tasklist.utils.logger import setup_logger

logger = setup_logger("db_handlers")

ModelType = TypeVar("ModelType", bound=Base)

MAX_CONNECTION_ATTEMPTS = 3


def _is_dropped_connection(error: DBAPIError) -> bool:
    if error.connection_invalidated:
        return True
    # asyncpg errors arrive wrapped by the SQLAlchemy adapter
    return isinstance(error.orig, ConnectionDoesNotExistError) or isinstance(
        getattr(error.orig, "__cause__", None), ConnectionDoesNotExistError
    )


def check_local_db(func):
    """Session decorator with transaction management and retry logic.

    Without a `db` keyword the call gets its own session from the handler's
    session factory and is committed on success, rolled back on failure.
    With a `db` keyword the caller owns the transaction.
    """

    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        if kwargs.get("db"):
            return await func(self, *args, **kwargs)

        last_exception = None
        for attempt in range(MAX_CONNECTION_ATTEMPTS):
            async with self.session_factory() as db:
                kwargs["db"] = db
                try:
                    result = await func(self, *args, **kwargs)
                    await db.commit()
                    return result
                except ServiceError:
                    # Expected outcome, reported to the client
                    await db.rollback()
                    raise
                except DBAPIError as e:
                    await db.rollback()
                    if _is_dropped_connection(e):
                        last_exception = e
                        logger.warning(
                            f"Connection error in {func.__name__} "
                            f"(attempt {attempt + 1}/{MAX_CONNECTION_ATTEMPTS}): {e}. Retrying..."
                        )
                        await asyncio.sleep(1 + attempt)
                        continue
                    logger.error(
                        f"DBAPIError in {func.__name__} (attempt {attempt + 1}/{MAX_CONNECTION_ATTEMPTS}): {e}",
                        exc_info=True,
                    )
                    raise
                except Exception as e:
                    await db.rollback()
                    logger.error(
                        f"Transaction failed in {func.__name__}: {e}",
                        exc_info=True,
                    )
                    raise

        logger.error(
            f"All retries failed for {func.__name__}. Last error: {last_exception}"
        )
        raise last_exception

    return wrapper


class BaseDBHandler(Generic[ModelType]):
    """Generic handler for database operations with basic CRUD methods."""

    def __init__(
        self, model: type[ModelType], session_factory: async_sessionmaker[AsyncSession]
    ):
        self.model = model
        self.session_factory = session_factory

    @check_local_db
    async def create(
        self, obj_dict: dict[str, Any], *, db: AsyncSession = None
    ) -> ModelType:
        """Insert a record and load its server-generated columns."""
        db_obj = self.model(**obj_dict)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    @check_local_db
    async def get(self, id: Any, *, db: AsyncSession = None) -> ModelType | None:
        """Get a single record by its primary key."""
        stmt = select(self.model).where(self.model.id == id)
        result = await db.execute(stmt)
        return result.scalars().first()

    @check_local_db
    async def get_by_attributes(
        self, *, db: AsyncSession = None, **kwargs
    ) -> ModelType | None:
        """Get a single record by a set of attributes."""
        stmt = select(self.model).filter_by(**kwargs)
        result = await db.execute(stmt)
        return result.scalars().first()

    @check_local_db
    async def get_multi_by_attributes(
        self,
        *,
        db: AsyncSession = None,
        skip: int = 0,
        limit: int | None = None,
        order_by: Any = None,
        **kwargs,
    ) -> list[ModelType]:
        """Get records matching a set of attributes; `limit=None` returns all of them."""
        stmt = select(self.model).filter_by(**kwargs)

        if order_by is not None:
            if isinstance(order_by, list):
                stmt = stmt.order_by(*order_by)
            else:
                stmt = stmt.order_by(order_by)

        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @check_local_db
    async def update_where(
        self,
        filters: dict[str, Any],
        update_data: dict[str, Any],
        *,
        db: AsyncSession = None,
    ) -> int:
        """Update every record matching `filters`. Returns the matched row count."""
        if not filters:
            raise ValueError("update_where requires at least one filter")

        if not update_data:
            stmt = select(func.count()).select_from(self.model).filter_by(**filters)
            return (await db.execute(stmt)).scalar_one()

        stmt = (
            update(self.model)
            .filter_by(**filters)
            .values(**update_data)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
            return result.rowcount
        except SQLAlchemyError as e:
            logger.warning(f"Error updating {self.model.__name__} rows: {e}")
            raise

    @check_local_db
    async def delete_where(self, filters: dict[str, Any], *, db: AsyncSession = None) -> int:
        """Delete every record matching `filters`. Returns the deleted row count."""
        if not filters:
            raise ValueError("delete_where requires at least one filter")

        stmt = (
            delete(self.model)
            .filter_by(**filters)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount
