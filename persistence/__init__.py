"""Database persistence layer."""

from .database import SessionLocal, create_db_engine, init_db
from .models import (
    AwsIntegration,
    Base,
    EntityStorageFolder,
    StorageDrive,
    StorageDriveFolder,
)

__all__ = [
    "SessionLocal",
    "create_db_engine",
    "init_db",
    "AwsIntegration",
    "Base",
    "EntityStorageFolder",
    "StorageDrive",
    "StorageDriveFolder",
]
