"""
Providers for the components built by the application factory.

Everything lives on `app.state`; route handlers receive it through
`Depends` instead of importing module-level singletons.
"""

from fastapi import Depends, Request

from tasklist.db import Database
from tasklist.db_handlers import TodoDBHandler, UserDBHandler
from tasklist.services import AccountService, PasswordHasher, TokenService


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_user_db_handler(database: Database = Depends(get_database)) -> UserDBHandler:
    return UserDBHandler(database.session_factory)


def get_todo_db_handler(database: Database = Depends(get_database)) -> TodoDBHandler:
    return TodoDBHandler(database.session_factory)


def get_account_service(
    user_db_handler: UserDBHandler = Depends(get_user_db_handler),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
    token_service: TokenService = Depends(get_token_service),
) -> AccountService:
    return AccountService(user_db_handler, password_hasher, token_service)
