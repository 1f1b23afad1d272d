"""Database connection and session management."""

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from core.config import settings


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def create_db_engine(url: str | None = None, **kwargs) -> Engine:
    """Create an engine, applying SQLite pragmas when the URL is SQLite."""
    url = url or settings.DATABASE_URL
    if _is_sqlite(url):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("timeout", 30)  # Wait up to 30s for database locks
        connect_args.setdefault("check_same_thread", False)  # Sync API routes run in a threadpool
        kwargs["connect_args"] = connect_args

    db_engine = create_engine(url, echo=False, **kwargs)

    if _is_sqlite(url):
        @event.listens_for(db_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")  # Enable foreign key constraints
            cursor.execute("PRAGMA busy_timeout=30000")  # 30s timeout at SQLite level
            cursor.close()

    return db_engine


engine = create_db_engine()

SessionLocal = sessionmaker(engine, class_=Session, expire_on_commit=False)


def init_db(bind: Engine | None = None) -> None:
    """Create database tables."""
    from .models import Base

    Base.metadata.create_all(bind or engine)
