import argparse
import asyncio

from sqlalchemy import event, inspect, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tasklist import models  # noqa: F401
from tasklist.config import Settings, get_settings
from tasklist.models.base import Base
from tasklist.utils.logger import setup_logger

logger = setup_logger("db")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured backend."""
    if settings.is_sqlite:
        engine = create_async_engine(
            settings.database_url,
            echo=settings.database_echo,
            connect_args={"timeout": 30},
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_size=20,
        max_overflow=30,
        pool_timeout=60,
        pool_recycle=300,
        echo=settings.database_echo,
        connect_args={"timeout": 30},
    )


class Database:
    """
    Owns the engine and session factory of the application database.

    One instance is created per application and handed to every DB handler,
    so nothing reads connection state from module globals.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = build_engine(settings)
        self.session_factory = async_sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def init_db(self):
        """Create missing tables."""
        if not Base.metadata.tables:
            logger.warning("Base.metadata.tables is EMPTY! No tables will be created.")
        else:
            logger.debug(
                f"Tables registered in Base.metadata: {list(Base.metadata.tables.keys())}"
            )

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema initialized.")

    async def reset_db(self):
        """Drop every table and recreate the schema. Destroys all data."""
        logger.warning("Resetting the application database. All data will be lost.")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await self.init_db()
        logger.info("Application database has been reset and re-initialized.")

    async def list_tables(self) -> list[str]:
        async with self.engine.connect() as conn:
            table_names = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )
        logger.debug(f"Tables in application DB: {table_names}")
        return sorted(table_names)

    async def check_connection(self) -> bool:
        """Performs a simple query to check actual DB connectivity."""
        async with self.session_factory() as session:
            try:
                result = await session.execute(text("SELECT 1"))
                if result.scalar_one() == 1:
                    logger.info("Successfully connected to the application DB.")
                    return True
                raise RuntimeError("Test query returned an unexpected result.")
            except Exception as e:
                logger.error(f"Failed to execute test query: {e}", exc_info=True)
                raise RuntimeError("Database connectivity check failed.") from e

    async def close(self):
        logger.info("Closing database connections.")
        await self.engine.dispose()
        logger.info("Database connections closed.")


async def _run_action(action: str):
    database = Database(get_settings())
    try:
        if action == "init":
            await database.init_db()
        elif action == "reset":
            await database.reset_db()
        elif action == "list-tables":
            for table_name in await database.list_tables():
                print(table_name)
    finally:
        await database.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Application database maintenance utility"
    )
    parser.add_argument(
        "action",
        choices=["init", "reset", "list-tables"],
        help="'init' to create missing tables, "
        "'reset' to drop and recreate every table, "
        "'list-tables' to show the tables present in the database.",
    )
    args = parser.parse_args()

    if args.action == "reset":
        confirm = input(
            "WARNING: This will delete all users and todos. Are you sure? (yes/no): "
        )
        if confirm.lower() != "yes":
            logger.info("Database reset cancelled by user.")
            raise SystemExit(0)

    asyncio.run(_run_action(args.action))
    logger.info("Database utility script finished.")
