"""Metadata store interface definitions.

This module defines the domain entities for drives, folder records and
entity associations, and the repository contracts the storage core uses to
read and write them. The surrounding application owns the persistence; any
implementation of these interfaces can be swapped in.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal


class DriveType(str, Enum):
    """Kinds of storage backend a drive can point at."""

    S3 = "s3"
    LOCAL = "local"
    NETWORK = "network"


class EntityKind(str, Enum):
    """Business entities that own storage folders."""

    PROGRAM = "program"
    STUDY = "study"
    ASSAY = "assay"


# Backend-specific details. Each variant carries its drive type as a tag so
# adapters can match on their own variant.


@dataclass(frozen=True)
class S3BucketDetails:
    """Drive details for an S3 bucket."""

    bucket_name: str
    integration_id: str
    type: Literal["s3"] = "s3"


@dataclass(frozen=True)
class LocalDriveDetails:
    """Drive details for a local or mounted network filesystem."""

    mount_path: str
    type: Literal["local"] = "local"


@dataclass(frozen=True)
class S3FolderDetails:
    """Folder details for an S3 folder marker."""

    key: str | None = None
    etag: str | None = None
    type: Literal["s3"] = "s3"


@dataclass(frozen=True)
class LocalFolderDetails:
    """Folder details for a filesystem directory."""

    type: Literal["local"] = "local"


DriveDetails = S3BucketDetails | LocalDriveDetails
FolderDetails = S3FolderDetails | LocalFolderDetails


@dataclass
class DriveEntity:
    """Storage drive domain entity."""

    id: str
    drive_type: DriveType
    display_name: str
    root_path: str
    details: DriveDetails
    active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class FolderEntity:
    """Storage drive folder record."""

    id: str | None
    storage_drive_id: str
    path: str
    name: str
    browser_root: bool = False
    study_root: bool = False
    write_enabled: bool = False
    delete_enabled: bool = False
    details: FolderDetails | None = None
    active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class AwsIntegrationEntity:
    """AWS account integration used to build S3 clients."""

    id: str
    name: str
    region: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    endpoint_url: str | None = None
    use_iam: bool = False
    active: bool = True


@dataclass
class EntityRef:
    """Reference to a business entity owned by the surrounding application.

    ``parent`` is the entity's logical owner: a study's program or an
    assay's study. Programs have no parent.
    """

    kind: EntityKind
    id: str
    code: str
    name: str
    parent: "EntityRef | None" = None


@dataclass
class EntityFolderEntity:
    """Association between a business entity and one of its folders."""

    entity_kind: EntityKind
    entity_id: str
    folder_id: str
    primary: bool = False
    id: str | None = None


@dataclass
class NewFolder:
    """Policy options for a folder record about to be created."""

    name: str | None = None
    browser_root: bool = False
    study_root: bool = False
    write_enabled: bool = False
    delete_enabled: bool = False


class IDriveRepository(ABC):
    """Interface for storage drive data operations."""

    @abstractmethod
    def get(self, drive_id: str) -> DriveEntity | None:
        """Get a drive by ID."""
        ...

    @abstractmethod
    def list(self, active_only: bool = True) -> list[DriveEntity]:
        """List drives."""
        ...

    @abstractmethod
    def create(self, entity: DriveEntity) -> DriveEntity:
        """Create a new drive."""
        ...

    @abstractmethod
    def set_active(self, drive_id: str, active: bool) -> DriveEntity | None:
        """Toggle the activation flag, the only mutable drive field."""
        ...


class IFolderRepository(ABC):
    """Interface for folder record data operations."""

    @abstractmethod
    def get(self, folder_id: str) -> FolderEntity | None:
        """Get a folder record by ID."""
        ...

    @abstractmethod
    def find_by_path(self, drive_id: str, path: str) -> FolderEntity | None:
        """Get the folder record registered at a path on a drive."""
        ...

    @abstractmethod
    def list_by_drive(self, drive_id: str, active_only: bool = True) -> list[FolderEntity]:
        """List folder records on a drive."""
        ...

    @abstractmethod
    def create(self, entity: FolderEntity) -> FolderEntity:
        """Create a new folder record.

        Raises:
            FolderAlreadyRegisteredError: If the drive already has a record at
                the same path.
        """
        ...

    @abstractmethod
    def update(self, entity: FolderEntity) -> FolderEntity:
        """Update a folder record. The drive reference is never changed."""
        ...


class IEntityFolderRepository(ABC):
    """Interface for business entity folder associations."""

    @abstractmethod
    def list_for_entity(self, kind: EntityKind, entity_id: str) -> list[EntityFolderEntity]:
        """List all folder associations of an entity."""
        ...

    @abstractmethod
    def find_primary(self, kind: EntityKind, entity_id: str) -> EntityFolderEntity | None:
        """Get the primary folder association of an entity."""
        ...

    @abstractmethod
    def add(self, entity: EntityFolderEntity) -> EntityFolderEntity:
        """Associate a folder with an entity, clearing any other primary if needed."""
        ...

    @abstractmethod
    def set_primary(self, kind: EntityKind, entity_id: str, folder_id: str) -> EntityFolderEntity | None:
        """Mark one existing association primary and clear the others."""
        ...


class IIntegrationRepository(ABC):
    """Interface for AWS integration lookups."""

    @abstractmethod
    def get(self, integration_id: str) -> AwsIntegrationEntity | None:
        """Get an integration by ID."""
        ...

    @abstractmethod
    def create(self, entity: AwsIntegrationEntity) -> AwsIntegrationEntity:
        """Create a new integration, storing its secret encrypted."""
        ...


@dataclass
class MetadataRepositories:
    """Repositories bound to one transaction."""

    drives: IDriveRepository
    folders: IFolderRepository
    entity_folders: IEntityFolderRepository
    integrations: IIntegrationRepository


class IMetadataStore(ABC):
    """Interface for the drive and folder metadata store.

    Each ``transaction()`` block is one local transaction: it commits when
    the block exits normally and rolls back on any exception.
    """

    @abstractmethod
    def transaction(self) -> AbstractContextManager[MetadataRepositories]:
        """Open a transaction and yield repositories bound to it."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the store is accessible."""
        ...
