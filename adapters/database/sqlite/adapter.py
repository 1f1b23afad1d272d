"""SQLite metadata store implementing IMetadataStore.

Any SQLAlchemy-supported database works; SQLite is the default.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from core.interfaces import IMetadataStore, MetadataRepositories

from .repositories import (
    SQLiteDriveRepository,
    SQLiteEntityFolderRepository,
    SQLiteFolderRepository,
    SQLiteIntegrationRepository,
)

logger = logging.getLogger(__name__)


class SQLiteMetadataStore(IMetadataStore):
    """SQLAlchemy implementation of the metadata store.

    Holds no per-request state: every transaction gets its own session and
    its own repository instances, so one store can be shared across threads.

    Usage:
        store = SQLiteMetadataStore(SessionLocal)

        with store.transaction() as repos:
            drive = repos.drives.get("123")
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    @classmethod
    def from_engine(cls, engine: Engine) -> "SQLiteMetadataStore":
        return cls(sessionmaker(engine, class_=Session, expire_on_commit=False))

    @contextmanager
    def transaction(self) -> Iterator[MetadataRepositories]:
        """Context manager for one metadata transaction.

        Commits on normal exit, rolls back and re-raises on error.
        """
        with self._session_factory() as session:
            try:
                yield MetadataRepositories(
                    drives=SQLiteDriveRepository(session),
                    folders=SQLiteFolderRepository(session),
                    entity_folders=SQLiteEntityFolderRepository(session),
                    integrations=SQLiteIntegrationRepository(session),
                )
                session.commit()
            except Exception:
                session.rollback()
                raise

    def health_check(self) -> bool:
        """Check if database is accessible."""
        try:
            with self._session_factory() as session:
                session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Metadata store health check failed: {e}")
            return False
