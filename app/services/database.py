"""
Database Module

This module owns the SQLAlchemy async engine and session factory.

Design Decisions:
- One engine per application, created in the FastAPI lifespan
- Each engine operation opens its own session (its own connection and transaction)
- SQLite transactions start with BEGIN IMMEDIATE so that the locking read
  used for pull request mutation is serialized the way FOR UPDATE serializes
  it on PostgreSQL
- Startup waits for the database with bounded exponential backoff
"""

from sqlalchemy import event, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.config import Settings
from app.logging_config import get_logger
from app.services.schema import Base

logger = get_logger(__name__)


class DatabaseUnavailableError(Exception):
    """Raised when the database cannot be reached at startup."""
    pass


def _enable_sqlite_locking(engine: AsyncEngine) -> None:
    """
    Take over transaction control from the SQLite driver.

    The driver's own implicit BEGIN is disabled and replaced with
    BEGIN IMMEDIATE, which acquires the write lock up front. Foreign keys
    are switched on for every connection.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine described by settings.

    Args:
        settings: Application settings

    Returns:
        Configured AsyncEngine
    """
    if settings.is_sqlite:
        engine = create_async_engine(
            settings.database_url,
            echo=settings.database_echo,
            connect_args={"timeout": 30},
        )
        _enable_sqlite_locking(engine)
    else:
        engine = create_async_engine(
            settings.database_url,
            echo=settings.database_echo,
            pool_size=settings.database_pool_size,
            pool_pre_ping=True,
        )

    logger.info(
        "Database engine created",
        url=settings.database_url,
        dialect=engine.dialect.name
    )
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory whose objects stay readable after commit."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def ping(engine: AsyncEngine) -> None:
    """Run a trivial query; raises if the database is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def wait_for_database(engine: AsyncEngine, settings: Settings) -> None:
    """
    Wait until the database answers, retrying with exponential backoff.

    Raises:
        DatabaseUnavailableError: If all attempts fail
    """
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(settings.database_connect_attempts),
            wait=wait_exponential(
                multiplier=settings.database_connect_wait,
                max=30,
            ),
            retry=retry_if_exception_type((OperationalError, OSError)),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "Retrying database connection",
                        attempt=attempt.retry_state.attempt_number
                    )
                await ping(engine)
    except (OperationalError, OSError) as e:
        logger.error("Database unreachable", error=str(e))
        raise DatabaseUnavailableError(f"Database unreachable: {e}") from e

    logger.info("Database connected successfully")


async def create_schema(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")
