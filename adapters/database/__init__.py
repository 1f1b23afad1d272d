"""Metadata store implementations."""

from .sqlite import SQLiteMetadataStore

__all__ = ["SQLiteMetadataStore"]
