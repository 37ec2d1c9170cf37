"""Database Module with Monadic Error Handling

Provides the async engine, session factory and the small set of insert /
lookup helpers the migration needs, with Result-based error propagation.
"""
from typing import Iterable, TypeVar

from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from core.config import settings
from core.errors import (
    AppError,
    Ok,
    Err,
    Result,
    DatabaseErrorMapper,
)
from core.logging import db_logger

T = TypeVar("T")

log = db_logger()


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy, not the sqlite3 driver, emit BEGIN.

    The driver's own transaction handling breaks SAVEPOINT; with this in
    place ``session.begin_nested()`` works on SQLite.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``url``, SAVEPOINT-capable on SQLite."""
    engine_kwargs = {"echo": echo}

    if "sqlite" not in url:
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_size": 5,
            "max_overflow": 10,
        })

    new_engine = create_async_engine(url, **engine_kwargs)
    if new_engine.dialect.name == "sqlite":
        enable_sqlite_savepoints(new_engine)
    return new_engine


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.LOG_SQL)

AsyncSessionLocal = build_session_factory(engine)

Base = declarative_base()

# Error mapper for database operations
_db_mapper = DatabaseErrorMapper("database")


async def create_tables(bind: AsyncEngine) -> None:
    """Create every sink table that does not exist yet."""
    # Registers the model classes on Base.metadata
    import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("tables_created", tables=sorted(Base.metadata.tables))


async def insert_entity(
    session: AsyncSession,
    entity: T,
) -> Result[T, AppError]:
    """Insert one row inside a SAVEPOINT.

    Any failure, including driver errors SQLAlchemy does not wrap, rolls
    back the savepoint only; the enclosing transaction and
    the rows already flushed in it stay intact.

    Returns:
        Ok(entity) with its generated primary key populated
        Err(AppError) on failure
    """
    return await _insert(session, [entity], entity)


async def insert_entities(
    session: AsyncSession,
    entities: Iterable[T],
) -> Result[list[T], AppError]:
    """Insert several rows atomically inside one SAVEPOINT."""
    rows = list(entities)
    return await _insert(session, rows, rows)


async def _insert(session: AsyncSession, rows: list, value: T) -> Result[T, AppError]:
    try:
        async with session.begin_nested():
            session.add_all(rows)
            await session.flush()
        return Ok(value)
    except Exception as e:
        error = _db_mapper.map_exception(e)
        log.debug("insert_rolled_back", code=error.code.name, message=error.message)
        return Err(error)


async def fetch_id_by(
    session: AsyncSession,
    model: type,
    **filters,
) -> int | None:
    """Return the primary key of the first row matching ``filters``.

    Runs inside a SAVEPOINT so a failed lookup leaves the enclosing
    transaction usable.
    """
    query = select(model.id)
    for key, value in filters.items():
        query = query.where(getattr(model, key) == value)
    async with session.begin_nested():
        result = await session.execute(query.limit(1))
        return result.scalar_one_or_none()
