"""Storage folder service.

Entry point for business services that need storage folders for programs,
studies and assays. Resolves drives and adapters, enforces folder policy,
records folder metadata and repairs drift between the recorded folders and
what actually exists on the backends.

Physical backend calls and metadata writes are not jointly transactional.
If the process dies between the two, ``repair`` brings them back in line.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path

from core.interfaces import (
    AwsIntegrationEntity,
    DriveEntity,
    EntityFolderEntity,
    EntityRef,
    FolderEntity,
    IMetadataStore,
    MetadataRepositories,
    NewFolder,
)
from services.integrations import AwsClientResolver
from services.naming import FolderNamer, default_folder_name
from storage.base import StorageAdapter, StorageFile, StorageFolder, StorageTarget
from storage.exceptions import (
    FolderAlreadyRegisteredError,
    InsufficientPrivilegesError,
    StorageError,
    StorageNotFoundError,
    StorageRepairError,
)
from storage.paths import base_name, normalize_folder_path, parent_path
from storage.registry import AdapterRegistry, create_registry

logger = logging.getLogger(__name__)


class RepairOutcome(str, Enum):
    """What ``repair`` found and did."""

    PRESENT = "present"  # Recorded folder exists, nothing done
    RECREATED = "recreated"  # Recorded folder was missing and was recreated
    CREATED = "created"  # No primary record existed, a new folder was created


@dataclass
class RepairResult:
    outcome: RepairOutcome
    folder: FolderEntity


class StorageFolderService:
    """Creates, registers, looks up and repairs storage folders."""

    def __init__(
        self,
        registry: AdapterRegistry,
        store: IMetadataStore,
        naming: FolderNamer = default_folder_name,
    ):
        """Initialize the service.

        Args:
            registry: Adapter registry used to reach the backends.
            store: Metadata store holding drives, folders and associations.
            naming: Maps an entity to the name of its folder.
        """
        self.registry = registry
        self.store = store
        self.naming = naming

    # Drive configuration

    def create_drive(self, drive: DriveEntity) -> DriveEntity:
        """Configure a new drive. Its type must have a registered adapter."""
        self.registry.lookup(drive.drive_type)
        with self.store.transaction() as repos:
            created = repos.drives.create(drive)
        logger.info(f"Created {created.drive_type.value} storage drive '{created.display_name}'")
        return created

    def set_drive_active(self, drive_id: str, active: bool) -> DriveEntity:
        with self.store.transaction() as repos:
            drive = repos.drives.set_active(drive_id, active)
        if drive is None:
            raise StorageNotFoundError(f"Could not find storage drive with ID: {drive_id}")
        return drive

    def create_integration(self, integration: AwsIntegrationEntity) -> AwsIntegrationEntity:
        """Store an AWS integration. The secret key is encrypted at rest."""
        with self.store.transaction() as repos:
            created = repos.integrations.create(integration)
        logger.info(f"Created AWS integration '{created.name}'")
        return created

    # Lookups

    def find_drive(self, drive_id: str) -> DriveEntity:
        with self.store.transaction() as repos:
            drive = repos.drives.get(drive_id)
        if drive is None:
            raise StorageNotFoundError(f"Could not find storage drive with ID: {drive_id}")
        return drive

    def find_drives(self, active_only: bool = True) -> list[DriveEntity]:
        with self.store.transaction() as repos:
            return repos.drives.list(active_only=active_only)

    def find_folder(self, folder_id: str) -> FolderEntity:
        with self.store.transaction() as repos:
            folder = repos.folders.get(folder_id)
        if folder is None:
            raise StorageNotFoundError(f"Could not find storage folder with ID: {folder_id}")
        return folder

    def find_drive_folders(self, drive_id: str) -> list[FolderEntity]:
        with self.store.transaction() as repos:
            return repos.folders.list_by_drive(drive_id)

    def find_drive_by_folder(self, folder: FolderEntity) -> DriveEntity:
        return self.find_drive(folder.storage_drive_id)

    def lookup_adapter(self, target: StorageTarget) -> StorageAdapter:
        """Get the adapter serving a drive or a folder record's drive."""
        drive = target if isinstance(target, DriveEntity) else self.find_drive_by_folder(target)
        return self.registry.lookup(drive.drive_type)

    def find_folders(self, entity: EntityRef) -> list[FolderEntity]:
        """All folder records of an entity, primary first."""
        with self.store.transaction() as repos:
            links = repos.entity_folders.list_for_entity(entity.kind, entity.id)
            return [f for f in (repos.folders.get(link.folder_id) for link in links) if f]

    def find_primary_folder(self, entity: EntityRef) -> FolderEntity:
        """Get the primary folder record of an entity."""
        with self.store.transaction() as repos:
            link = repos.entity_folders.find_primary(entity.kind, entity.id)
            folder = repos.folders.get(link.folder_id) if link else None
        if folder is None:
            raise StorageNotFoundError(
                f"No primary storage folder found for {entity.kind.value}: {entity.code}"
            )
        return folder

    # Folder creation and registration

    def create_folder_for(
        self,
        entity: EntityRef,
        parent_folder: FolderEntity,
        primary: bool = True,
        required: bool = True,
    ) -> FolderEntity | None:
        """Create the storage folder of an entity under a parent folder.

        Args:
            entity: Program, study or assay that will own the folder.
            parent_folder: Registered folder to create the new folder in. Must
                be write enabled.
            primary: Whether the new folder becomes the entity's primary folder.
            required: When False, storage failures are logged and None is
                returned instead of raising.

        Returns:
            The new folder record, or None on a tolerated failure.
        """
        try:
            return self._create_folder_for(entity, parent_folder, primary)
        except StorageError as e:
            if required:
                raise
            logger.warning(
                f"Failed to create storage folder for {entity.kind.value}: {entity.code}: {e}"
            )
            return None

    def _create_folder_for(
        self, entity: EntityRef, parent_folder: FolderEntity, primary: bool
    ) -> FolderEntity:
        drive = self.find_drive_by_folder(parent_folder)
        adapter = self.registry.lookup(drive.drive_type)
        name = self.naming(entity)
        logger.info(
            f"Creating {entity.kind.value} folder: '{entity.name}' in folder '{parent_folder.name}'"
        )

        storage_folder = adapter.create_folder(parent_folder, parent_folder.path, name)

        try:
            return self._record_and_link(entity, drive, storage_folder, primary)
        except FolderAlreadyRegisteredError:
            # Recorded by another writer between our lookup and insert
            logger.info(f"Folder '{storage_folder.path}' was recorded concurrently, linking that record")
            return self._record_and_link(entity, drive, storage_folder, primary)

    def _record_and_link(
        self,
        entity: EntityRef,
        drive: DriveEntity,
        storage_folder: StorageFolder,
        primary: bool,
    ) -> FolderEntity:
        """Reuse, reactivate or create the record at the folder's path and link it."""
        with self.store.transaction() as repos:
            folder = repos.folders.find_by_path(drive.id, storage_folder.path)
            if folder is None:
                folder = self._save_folder_record(
                    repos, drive, storage_folder, NewFolder(write_enabled=True)
                )
            elif not folder.active:
                logger.info(f"Reactivating folder record {folder.id} at path: {folder.path}")
                folder.active = True
                folder = repos.folders.update(folder)
            self._link(repos, entity, folder, primary)
        return folder

    @staticmethod
    def _save_folder_record(
        repos: MetadataRepositories,
        drive: DriveEntity,
        storage_folder: StorageFolder,
        options: NewFolder,
    ) -> FolderEntity:
        return repos.folders.create(FolderEntity(
            id=None,
            storage_drive_id=drive.id,
            path=storage_folder.path,
            name=options.name or storage_folder.name,
            browser_root=options.browser_root,
            study_root=options.study_root,
            write_enabled=options.write_enabled,
            delete_enabled=options.delete_enabled,
            details=storage_folder.details,
        ))

    @staticmethod
    def _link(repos: MetadataRepositories, entity: EntityRef, folder: FolderEntity, primary: bool) -> None:
        existing = repos.entity_folders.list_for_entity(entity.kind, entity.id)
        if any(link.folder_id == folder.id for link in existing):
            if primary:
                repos.entity_folders.set_primary(entity.kind, entity.id, folder.id)
            return
        repos.entity_folders.add(EntityFolderEntity(
            entity_kind=entity.kind,
            entity_id=entity.id,
            folder_id=folder.id,
            primary=primary,
        ))

    def register_folder(self, draft: FolderEntity, drive: DriveEntity) -> FolderEntity:
        """Record an existing physical folder without creating it.

        Args:
            draft: Path, name and policy flags for the new record.
            drive: Drive the folder lives on.

        A deactivated record at the same path is reactivated with the draft's
        name and flags instead of adding a second record.

        Raises:
            StorageNotFoundError: If the folder does not exist on the drive.
            FolderAlreadyRegisteredError: If an active record has the path.
        """
        adapter = self.registry.lookup(drive.drive_type)
        storage_folder = adapter.find_folder_by_path(drive, draft.path)
        logger.info(f"Registering folder '{storage_folder.path}' on drive '{drive.display_name}'")

        with self.store.transaction() as repos:
            existing = repos.folders.find_by_path(drive.id, storage_folder.path)
            if existing is not None and existing.active:
                raise FolderAlreadyRegisteredError(
                    f"Folder already registered on drive {drive.display_name}: {storage_folder.path}"
                )
            if existing is not None:
                logger.info(f"Reactivating folder record {existing.id} at path: {existing.path}")
                existing.name = draft.name or existing.name
                existing.browser_root = draft.browser_root
                existing.study_root = draft.study_root
                existing.write_enabled = draft.write_enabled
                existing.delete_enabled = draft.delete_enabled
                existing.details = storage_folder.details
                existing.active = True
                return repos.folders.update(existing)
            return self._save_folder_record(repos, drive, storage_folder, NewFolder(
                name=draft.name,
                browser_root=draft.browser_root,
                study_root=draft.study_root,
                write_enabled=draft.write_enabled,
                delete_enabled=draft.delete_enabled,
            ))

    def attach_folder(self, entity: EntityRef, folder: FolderEntity, primary: bool = False) -> None:
        """Associate an already registered folder with an entity."""
        with self.store.transaction() as repos:
            self._link(repos, entity, folder, primary)

    def set_primary(self, entity: EntityRef, folder_id: str) -> FolderEntity:
        """Make one of an entity's folders its primary folder."""
        with self.store.transaction() as repos:
            link = repos.entity_folders.set_primary(entity.kind, entity.id, folder_id)
            if link is None:
                raise StorageNotFoundError(
                    f"Folder {folder_id} is not associated with {entity.kind.value}: {entity.code}"
                )
            return repos.folders.get(folder_id)

    def deactivate_folder(self, folder_id: str) -> FolderEntity:
        """Deactivate a folder record. The physical folder is left alone."""
        with self.store.transaction() as repos:
            folder = repos.folders.get(folder_id)
            if folder is None:
                raise StorageNotFoundError(f"Could not find storage folder with ID: {folder_id}")
            if not folder.delete_enabled:
                raise InsufficientPrivilegesError(
                    f"Insufficient privileges to remove folder: {folder.path}"
                )
            folder.active = False
            return repos.folders.update(folder)

    # Browsing and files

    @staticmethod
    def _path_in_folder(folder: FolderEntity, path: str | None) -> str:
        """Default to the folder's own path and refuse paths outside it."""
        if path is None or not path.strip():
            return folder.path
        if ".." in path.split("/"):
            raise InsufficientPrivilegesError(f"Path traversal not allowed: {path}")
        root = normalize_folder_path(folder.path)
        if root and not (path.startswith(root) or normalize_folder_path(path) == root):
            raise InsufficientPrivilegesError(f"Path {path} is outside folder {folder.path}")
        return path

    def browse(self, folder_id: str, path: str | None = None) -> StorageFolder:
        """List a folder, or a sub-path of it."""
        folder = self.find_folder(folder_id)
        target_path = self._path_in_folder(folder, path)
        return self.lookup_adapter(folder).find_folder_by_path(folder, target_path)

    def browse_drive(self, drive_id: str, path: str = "") -> StorageFolder:
        """List any path on a drive."""
        drive = self.find_drive(drive_id)
        return self.registry.lookup(drive.drive_type).find_folder_by_path(drive, path)

    def save_file(
        self,
        folder_id: str,
        path: str | None,
        local_file: Path,
        file_name: str | None = None,
    ) -> StorageFile:
        """Upload a file into a folder. The folder must be write enabled."""
        folder = self.find_folder(folder_id)
        target_path = self._path_in_folder(folder, path)
        return self.lookup_adapter(folder).save_file(folder, target_path, local_file, file_name)

    def fetch_file(self, folder_id: str, path: str) -> bytes:
        folder = self.find_folder(folder_id)
        target_path = self._path_in_folder(folder, path)
        return self.lookup_adapter(folder).fetch_file(folder, target_path)

    # Reconciliation

    def repair(self, entity: EntityRef) -> RepairResult:
        """Make sure an entity has a primary folder that physically exists.

        If the primary record's folder is missing on the backend it is
        recreated at the recorded path. If there is no primary record, a new
        folder is created under the parent entity's primary folder. Safe to
        run repeatedly.

        Raises:
            StorageRepairError: If a backend call fails while repairing.
            StorageNotFoundError: If the drive or the parent's primary folder
                cannot be found.
            InsufficientPrivilegesError: If the parent's primary folder is not
                write enabled.
        """
        logger.info(f"Attempting to repair primary storage folder for {entity.kind.value}: {entity.code}")

        with self.store.transaction() as repos:
            link = repos.entity_folders.find_primary(entity.kind, entity.id)
            folder = repos.folders.get(link.folder_id) if link else None

        if folder is not None:
            return self._repair_existing(entity, folder)
        return self._repair_missing(entity)

    def _repair_existing(self, entity: EntityRef, folder: FolderEntity) -> RepairResult:
        drive = self.find_drive_by_folder(folder)
        adapter = self.registry.lookup(drive.drive_type)

        if adapter.folder_exists(drive, folder.path):
            logger.info(
                f"Primary storage folder for {entity.kind.value}: {entity.code} "
                "already exists and is valid. No action taken."
            )
            return RepairResult(RepairOutcome.PRESENT, folder)

        folder_parent = parent_path(folder.path)
        try:
            created = adapter.create_folder(drive, folder_parent, base_name(folder.path))
        except StorageError as e:
            logger.error(
                f"Could not recreate storage folder for {entity.kind.value}: {entity.code} "
                f"at path: {folder.path}: {e}"
            )
            raise StorageRepairError(
                f"Could not create storage folder for {entity.kind.value}: {entity.code} "
                f"at path: {folder.path}"
            ) from e
        logger.info(
            f"Recreated primary storage folder for {entity.kind.value}: {entity.code} "
            f"at path: {created.path}"
        )
        return RepairResult(RepairOutcome.RECREATED, folder)

    def _repair_missing(self, entity: EntityRef) -> RepairResult:
        if entity.parent is None:
            raise StorageNotFoundError(
                f"No primary storage folder or parent entity for {entity.kind.value}: {entity.code}"
            )
        parent_folder = self.find_primary_folder(entity.parent)
        try:
            folder = self._create_folder_for(entity, parent_folder, primary=True)
        except InsufficientPrivilegesError:
            raise
        except StorageError as e:
            logger.error(f"Could not create storage folder for {entity.kind.value}: {entity.code}: {e}")
            raise StorageRepairError(
                f"Could not create storage folder for {entity.kind.value}: {entity.code} "
                f"in folder: {parent_folder.path}"
            ) from e
        logger.info(
            f"Created primary storage folder for {entity.kind.value}: {entity.code} at path: {folder.path}"
        )
        return RepairResult(RepairOutcome.CREATED, folder)


def create_storage_service(
    store: IMetadataStore,
    client_resolver=None,
    naming: FolderNamer = default_folder_name,
) -> StorageFolderService:
    """Wire a service, its registry and the AWS client resolver to one store."""

    def drive_lookup(drive_id: str) -> DriveEntity | None:
        with store.transaction() as repos:
            return repos.drives.get(drive_id)

    resolver = client_resolver or AwsClientResolver(store)
    return StorageFolderService(create_registry(resolver, drive_lookup), store, naming)


@lru_cache
def get_storage_service() -> StorageFolderService:
    """Process-wide storage service backed by the application database."""
    from adapters.database.sqlite import SQLiteMetadataStore
    from persistence.database import SessionLocal

    return create_storage_service(SQLiteMetadataStore(SessionLocal))
