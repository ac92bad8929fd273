"""Database engine, session factory and declarative base."""
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import get_settings

settings = get_settings()

# Connection execution option marking a transaction that will write.
BEGIN_IMMEDIATE = "sqlite_begin_immediate"


class Base(DeclarativeBase):
    pass


def build_engine(database_url: str) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    sqlite_engine = create_engine(database_url, connect_args={"check_same_thread": False})

    # WAL lets readers run beside the single writer. pysqlite's own BEGIN
    # handling is switched off so the listener below decides the lock mode.
    @event.listens_for(sqlite_engine, "connect")
    def _configure_connection(dbapi_connection, _connection_record):  # type: ignore[no-untyped-def]
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    # Only write units take the write lock at BEGIN; reads stay deferred.
    @event.listens_for(sqlite_engine, "begin")
    def _begin(connection):  # type: ignore[no-untyped-def]
        if connection.get_execution_options().get(BEGIN_IMMEDIATE):
            connection.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            connection.exec_driver_sql("BEGIN")

    return sqlite_engine


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def dispose_engine() -> None:
    """Release pooled connections at process shutdown."""

    engine.dispose()
