"""
Database engine and session management.
"""
import logging
import math
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from app.core.config import settings
from app.core.errors import InternalError, ServiceError
from app.db.base import Base

logger = logging.getLogger(__name__)


def driver_timeout_args(url: str, timeout: float) -> dict:
    """
    connect_args that make the driver abandon a stalled query after timeout
    seconds. Deadline checks only run between round trips, so this bounds
    the round trip itself. A timeout of 0 disables it.
    """
    if not timeout or timeout <= 0:
        return {}
    if url.startswith("mysql+pymysql"):
        seconds = max(1, math.ceil(timeout))
        return {"read_timeout": seconds, "write_timeout": seconds}
    if url.startswith("postgresql"):
        return {"options": f"-c statement_timeout={int(timeout * 1000)}"}
    return {}


def create_db_engine(url: str, echo: bool = False, timeout: float = 0) -> Engine:
    """Create an engine; SQLite gets explicit BEGIN so reads share one snapshot."""
    if url.startswith("sqlite"):
        engine = create_engine(url, echo=echo, connect_args={"check_same_thread": False})

        @event.listens_for(engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

        return engine

    return create_engine(
        url,
        echo=echo,
        connect_args=driver_timeout_args(url, timeout),
        pool_pre_ping=True,
        pool_recycle=3600
    )


engine = create_db_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    timeout=settings.REQUEST_TIMEOUT_SECONDS
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def snapshot_isolation_level(db: Session) -> str:
    # SQLite only knows SERIALIZABLE / READ UNCOMMITTED
    if db.get_bind().dialect.name == "sqlite":
        return "SERIALIZABLE"
    return settings.SNAPSHOT_ISOLATION_LEVEL


@contextmanager
def read_snapshot(db: Session) -> Iterator[Session]:
    """
    Run the enclosed reads in one transaction at the snapshot isolation level.

    Any read-only transaction already open on the session is ended first so
    the isolation level applies from the first statement. The snapshot is
    always rolled back on exit.
    """
    if db.in_transaction():
        if db.new or db.dirty or db.deleted:
            raise RuntimeError("read_snapshot() called with unflushed changes")
        db.rollback()
    db.connection(execution_options={"isolation_level": snapshot_isolation_level(db)})
    try:
        yield db
    finally:
        db.rollback()


def init_db(bind: Engine = None):
    """Initialize database tables."""
    import app.models  # noqa: F401  (register mappers)
    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def persistence_errors(db: Session, reason: str) -> Iterator[None]:
    """
    Roll back on any failure inside the block.

    SQLAlchemy errors are logged and re-raised as InternalError(reason);
    ServiceErrors pass through unchanged.
    """
    try:
        yield
    except ServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        logger.error(f"Database error ({reason}): {exc}")
        db.rollback()
        raise InternalError(reason) from exc
