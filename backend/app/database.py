from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from .config import settings

# Execution option marking connections that only read
READ_ONLY = "salon_read_only"


def configure_sqlite(engine: Engine) -> Engine:
    """
    SQLite tuning for booking writes.

    - foreign keys ON
    - write transactions start with BEGIN IMMEDIATE, so two sessions cannot
      both pass the conflict check before one of them writes
    - connections carrying the READ_ONLY option use a plain (deferred) BEGIN
      and never take the write lock
    """
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _):
        # pysqlite's own BEGIN handling is disabled, we emit ours below
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(READ_ONLY):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def _create_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        db_path = url.replace("sqlite:///", "", 1)
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        # check_same_thread=False is required for SQLite under FastAPI threads
        return configure_sqlite(
            create_engine(url, connect_args={"check_same_thread": False})
        )
    return create_engine(url, pool_pre_ping=True)


engine = _create_engine(settings.resolved_database_url)
read_engine = engine.execution_options(**{READ_ONLY: True})

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

ReadSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=read_engine
)


# FastAPI dependencies
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_read_db():
    """Session for endpoints that never write, e.g. slot listing."""
    db = ReadSessionLocal()
    try:
        yield db
    finally:
        db.close()
