from tasklist.dependencies.auth import get_current_identity
from tasklist.dependencies.services import (
    get_account_service,
    get_database,
    get_password_hasher,
    get_todo_db_handler,
    get_token_service,
    get_user_db_handler,
)

__all__ = [
    "get_current_identity",
    "get_account_service",
    "get_database",
    "get_password_hasher",
    "get_todo_db_handler",
    "get_token_service",
    "get_user_db_handler",
]
