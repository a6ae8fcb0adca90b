"""
Todo API routes.

Each handler passes the gate-verified user id to TodoDBHandler, which uses
it as a filter on every statement. A todo id that is missing and one that
belongs to someone else both answer 404 with the same message.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from tasklist.db_handlers import TodoDBHandler
from tasklist.dependencies import get_current_identity, get_todo_db_handler
from tasklist.errors import InternalError, TodoNotFoundError
from tasklist.schemas import (
    MessageResponse,
    TodoCreate,
    TodoCreated,
    TodoResponse,
    TodoUpdate,
)
from tasklist.services import TokenClaims
from tasklist.utils.logger import setup_logger

logger = setup_logger("api.todos")

router = APIRouter(prefix="/todos", tags=["Todos"])


@router.post("", response_model=TodoCreated, status_code=status.HTTP_201_CREATED)
async def create_todo(
    todo_data: TodoCreate,
    identity: TokenClaims = Depends(get_current_identity),
    todo_db_handler: TodoDBHandler = Depends(get_todo_db_handler),
):
    try:
        todo = await todo_db_handler.create_todo(
            identity.user_id, todo_data.text, todo_data.status
        )
    except Exception as e:
        logger.error(f"Todo creation error: {e}", exc_info=True)
        raise InternalError("Internal server error during todo creation") from e

    logger.info(f"Created todo {todo.id} for user {identity.user_id}")
    return TodoCreated(message="Todo Successfully Added", id=todo.id)


@router.get("", response_model=list[TodoResponse])
async def list_todos(
    identity: TokenClaims = Depends(get_current_identity),
    todo_db_handler: TodoDBHandler = Depends(get_todo_db_handler),
    status_filter: str | None = Query(
        None, alias="status", description="Only todos with this status"
    ),
    limit: int | None = Query(
        None, ge=1, description="Maximum number of todos; all when omitted"
    ),
    offset: int = Query(0, ge=0, description="Number of todos to skip"),
):
    """List the current user's todos, oldest first."""
    try:
        todos = await todo_db_handler.list_todos(
            identity.user_id, status=status_filter, skip=offset, limit=limit
        )
    except Exception as e:
        logger.error(f"Todos retrieval error: {e}", exc_info=True)
        raise InternalError("Internal server error during todos retrieval") from e

    return [TodoResponse.model_validate(todo) for todo in todos]


@router.get("/{todo_id}", response_model=TodoResponse)
async def get_todo(
    todo_id: UUID,
    identity: TokenClaims = Depends(get_current_identity),
    todo_db_handler: TodoDBHandler = Depends(get_todo_db_handler),
):
    try:
        todo = await todo_db_handler.get_owned_todo(identity.user_id, todo_id)
    except Exception as e:
        logger.error(f"Todo retrieval error: {e}", exc_info=True)
        raise InternalError("Internal server error during todo retrieval") from e

    if todo is None:
        raise TodoNotFoundError()
    return TodoResponse.model_validate(todo)


@router.put("/{todo_id}", response_model=MessageResponse)
async def update_todo(
    todo_id: UUID,
    todo_data: TodoUpdate,
    identity: TokenClaims = Depends(get_current_identity),
    todo_db_handler: TodoDBHandler = Depends(get_todo_db_handler),
):
    """Update the supplied fields of one of the current user's todos."""
    try:
        matched = await todo_db_handler.update_todo(
            identity.user_id, todo_id, todo_data.model_dump(exclude_none=True)
        )
    except Exception as e:
        logger.error(f"Todo update error: {e}", exc_info=True)
        raise InternalError("Internal server error during todo update") from e

    if not matched:
        raise TodoNotFoundError()
    return MessageResponse(message="Todo Updated Successfully")


@router.delete("/{todo_id}", response_model=MessageResponse)
async def delete_todo(
    todo_id: UUID,
    identity: TokenClaims = Depends(get_current_identity),
    todo_db_handler: TodoDBHandler = Depends(get_todo_db_handler),
):
    try:
        deleted = await todo_db_handler.delete_todo(identity.user_id, todo_id)
    except Exception as e:
        logger.error(f"Todo deletion error: {e}", exc_info=True)
        raise InternalError("Internal server error during todo deletion") from e

    if not deleted:
        raise TodoNotFoundError()
    return MessageResponse(message="Todo Deleted")
