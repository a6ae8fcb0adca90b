"""
Identity-scoped data access for todos.

Every method takes the authenticated owner's id as its first argument and
adds it to the WHERE clause. There is no method that reaches a todo by id
alone, so a caller cannot read or change another user's rows. A todo that
exists under another owner is indistinguishable from one that does not exist.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasklist.db_handlers.base import BaseDBHandler, check_local_db
from tasklist.models.todo import DEFAULT_TODO_STATUS, Todo
from tasklist.utils.logger import setup_logger

logger = setup_logger("db_handlers.todo")

MUTABLE_FIELDS = ("text", "status")


class TodoDBHandler(BaseDBHandler[Todo]):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(Todo, session_factory)

    @check_local_db
    async def create_todo(
        self,
        owner_id: uuid.UUID,
        text: str,
        status: str | None = None,
        *,
        db: AsyncSession = None,
    ) -> Todo:
        """Create a todo owned by `owner_id`."""
        todo = await self.create(
            {
                "id": uuid.uuid4(),
                "owner_id": owner_id,
                "text": text,
                "status": status or DEFAULT_TODO_STATUS,
            },
            db=db,
        )
        logger.debug(f"Created todo {todo.id} for user {owner_id}")
        return todo

    @check_local_db
    async def list_todos(
        self,
        owner_id: uuid.UUID,
        *,
        status: str | None = None,
        skip: int = 0,
        limit: int | None = None,
        db: AsyncSession = None,
    ) -> list[Todo]:
        """
        Todos of `owner_id`, oldest first, optionally filtered by status.

        Without a `limit` every matching todo is returned.
        """
        filters: dict[str, Any] = {"owner_id": owner_id}
        if status is not None:
            filters["status"] = status
        return await self.get_multi_by_attributes(
            db=db,
            skip=skip,
            limit=limit,
            order_by=[Todo.created_at, Todo.id],
            **filters,
        )

    @check_local_db
    async def get_owned_todo(
        self, owner_id: uuid.UUID, todo_id: uuid.UUID, *, db: AsyncSession = None
    ) -> Todo | None:
        return await self.get_by_attributes(db=db, id=todo_id, owner_id=owner_id)

    @check_local_db
    async def update_todo(
        self,
        owner_id: uuid.UUID,
        todo_id: uuid.UUID,
        update_data: dict[str, Any],
        *,
        db: AsyncSession = None,
    ) -> int:
        """
        Update the supplied fields of an owned todo.

        Matches on `id = todo_id AND owner_id = owner_id`; returns the number of
        rows matched, which is 0 for a missing or foreign todo.
        """
        changes = {
            field: value
            for field, value in update_data.items()
            if field in MUTABLE_FIELDS and value is not None
        }
        matched = await self.update_where(
            {"id": todo_id, "owner_id": owner_id}, changes, db=db
        )
        if not matched:
            logger.debug(f"Update of todo {todo_id} by user {owner_id} matched no rows")
        return matched

    @check_local_db
    async def delete_todo(
        self, owner_id: uuid.UUID, todo_id: uuid.UUID, *, db: AsyncSession = None
    ) -> int:
        """Delete an owned todo. Returns rows deleted (0 or 1)."""
        deleted = await self.delete_where({"id": todo_id, "owner_id": owner_id}, db=db)
        if not deleted:
            logger.debug(f"Delete of todo {todo_id} by user {owner_id} matched no rows")
        return deleted
