"""SQLite metadata store.

Uses SQLAlchemy with the synchronous SQLite driver.
"""

from .adapter import SQLiteMetadataStore

__all__ = ["SQLiteMetadataStore"]
