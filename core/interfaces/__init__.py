"""Core interfaces for the storage metadata store.

These interfaces define the contracts the storage core consumes, so the
surrounding application can supply its own persistence.
"""

from .database import (
    AwsIntegrationEntity,
    DriveDetails,
    DriveEntity,
    DriveType,
    EntityFolderEntity,
    EntityKind,
    EntityRef,
    FolderDetails,
    FolderEntity,
    IDriveRepository,
    IEntityFolderRepository,
    IFolderRepository,
    IIntegrationRepository,
    IMetadataStore,
    LocalDriveDetails,
    LocalFolderDetails,
    MetadataRepositories,
    NewFolder,
    S3BucketDetails,
    S3FolderDetails,
)

__all__ = [
    # Repository interfaces
    "IDriveRepository",
    "IFolderRepository",
    "IEntityFolderRepository",
    "IIntegrationRepository",
    "IMetadataStore",
    "MetadataRepositories",
    # Entities
    "AwsIntegrationEntity",
    "DriveEntity",
    "DriveType",
    "EntityFolderEntity",
    "EntityKind",
    "EntityRef",
    "FolderEntity",
    "NewFolder",
    # Details variants
    "DriveDetails",
    "FolderDetails",
    "LocalDriveDetails",
    "LocalFolderDetails",
    "S3BucketDetails",
    "S3FolderDetails",
]
