#!/usr/bin/env python3

"""
Main application entry point for the task-list service.

Architecture: FastAPI application with an async SQL store, bcrypt password
hashing and stateless JWT session tokens.
Key Features: Lifecycle management, database health checks, error mapping,
CORS configuration.
"""

import asyncio
import sys

# Add this block to switch asyncio event loop policy on Windows
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from contextlib import asynccontextmanager
from datetime import timedelta

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tasklist.api import auth_router, profile_router, todos_router
from tasklist.config import Settings, get_settings
from tasklist.db import Database
from tasklist.errors import ServiceError, UnauthorizedError
from tasklist.services import PasswordHasher, TokenService
from tasklist.utils.logger import setup_logger

logger = setup_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database

    logger.info("Application startup...")
    try:
        logger.info("Initializing database...")
        await database.init_db()
        logger.info("Database initialization complete.")

        logger.info("Checking database connectivity...")
        await database.check_connection()
        logger.info("Database connectivity confirmed.")
    except Exception as e:
        logger.critical(f"Startup error: {e}")
        raise SystemExit(f"Startup failed: {e}") from e

    logger.info("Task-list API startup successful.")
    yield

    logger.info("Task-list API shutdown...")
    await database.close()
    logger.info("Shutdown complete.")


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    headers = None
    if isinstance(exc, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code, content=exc.to_dict(), headers=headers
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    if settings.secret_key is None:
        raise ValueError("SECRET_KEY must be set to sign session tokens")

    app = FastAPI(title="Task-List API", lifespan=lifespan)

    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.token_service = TokenService(
        secret_key=settings.secret_key.get_secret_value(),
        algorithm=settings.jwt_algorithm,
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )

    app.add_exception_handler(ServiceError, service_error_handler)

    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(todos_router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    return app


def main():
    settings = get_settings()
    host = settings.server_host
    port = int(settings.server_port)

    logger.info(f"Starting task-list API server on {host}:{port}")

    try:
        uvicorn.run(
            "main:create_app",
            factory=True,
            host=host,
            port=port,
            workers=settings.server_workers,
        )
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
