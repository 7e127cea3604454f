import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from bookstore.core.config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(settings: Settings) -> Engine:
    """Create the process-wide connection pool.

    Orders rely on the store to serialize writers touching the same books:
    PostgreSQL does it with row locks taken by the stock snapshot read,
    SQLite has no row locks so every transaction takes the write lock at BEGIN.
    """
    url = settings.DATABASE_URL

    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=settings.DB_ECHO,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.DB_LOCK_TIMEOUT_MS / 1000,
            },
        )
        _use_immediate_transactions(engine)
    else:
        engine = create_engine(
            url,
            echo=settings.DB_ECHO,
            pool_size=settings.DB_POOL_SIZE,
            pool_pre_ping=True,
            connect_args={"options": f"-c lock_timeout={settings.DB_LOCK_TIMEOUT_MS}"},
        )

    logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine


def _use_immediate_transactions(engine: Engine) -> None:
    # pysqlite's own transaction handling emits a deferred BEGIN lazily,
    # which lets two readers race to upgrade their locks.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db(request: Request) -> Iterator[Session]:
    """Yield a request-scoped session from the app's session factory."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
