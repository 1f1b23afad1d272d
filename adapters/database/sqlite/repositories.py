"""SQLAlchemy repository implementations."""

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.interfaces import (
    AwsIntegrationEntity,
    DriveEntity,
    EntityFolderEntity,
    EntityKind,
    FolderEntity,
    IDriveRepository,
    IEntityFolderRepository,
    IFolderRepository,
    IIntegrationRepository,
)
from persistence.models import AwsIntegration, EntityStorageFolder, StorageDrive, StorageDriveFolder
from services.encryption import encrypt_config
from storage.exceptions import FolderAlreadyRegisteredError

from .mappers import (
    drive_to_entity,
    entity_folder_to_entity,
    entity_to_drive,
    entity_to_folder,
    folder_to_entity,
    integration_to_entity,
)


class SQLiteDriveRepository(IDriveRepository):
    """SQLite implementation of storage drive repository."""

    def __init__(self, session: Session):
        self._session = session

    def get(self, drive_id: str) -> DriveEntity | None:
        result = self._session.get(StorageDrive, drive_id)
        return drive_to_entity(result) if result else None

    def list(self, active_only: bool = True) -> list[DriveEntity]:
        query = select(StorageDrive)
        if active_only:
            query = query.where(StorageDrive.active == True)
        query = query.order_by(StorageDrive.display_name)
        result = self._session.execute(query)
        return [drive_to_entity(d) for d in result.scalars().all()]

    def create(self, entity: DriveEntity) -> DriveEntity:
        model = entity_to_drive(entity)
        self._session.add(model)
        self._session.flush()
        self._session.refresh(model)
        return drive_to_entity(model)

    def set_active(self, drive_id: str, active: bool) -> DriveEntity | None:
        model = self._session.get(StorageDrive, drive_id)
        if not model:
            return None
        model.active = active
        self._session.flush()
        self._session.refresh(model)
        return drive_to_entity(model)


class SQLiteFolderRepository(IFolderRepository):
    """SQLite implementation of folder record repository."""

    def __init__(self, session: Session):
        self._session = session

    def get(self, folder_id: str) -> FolderEntity | None:
        result = self._session.get(StorageDriveFolder, folder_id)
        return folder_to_entity(result) if result else None

    def find_by_path(self, drive_id: str, path: str) -> FolderEntity | None:
        query = select(StorageDriveFolder).where(
            StorageDriveFolder.storage_drive_id == drive_id,
            StorageDriveFolder.path == path,
        )
        model = self._session.execute(query).scalar_one_or_none()
        return folder_to_entity(model) if model else None

    def list_by_drive(self, drive_id: str, active_only: bool = True) -> list[FolderEntity]:
        query = select(StorageDriveFolder).where(StorageDriveFolder.storage_drive_id == drive_id)
        if active_only:
            query = query.where(StorageDriveFolder.active == True)
        query = query.order_by(StorageDriveFolder.path)
        result = self._session.execute(query)
        return [folder_to_entity(f) for f in result.scalars().all()]

    def create(self, entity: FolderEntity) -> FolderEntity:
        model = entity_to_folder(entity)
        self._session.add(model)
        try:
            self._session.flush()
        except IntegrityError as e:
            # Unique on (drive, path); a concurrent writer got there first
            raise FolderAlreadyRegisteredError(
                f"Folder already registered on drive {entity.storage_drive_id}: {entity.path}"
            ) from e
        self._session.refresh(model)
        return folder_to_entity(model)

    def update(self, entity: FolderEntity) -> FolderEntity:
        model = self._session.get(StorageDriveFolder, entity.id)
        if not model:
            raise ValueError(f"Storage folder {entity.id} not found")
        if entity.storage_drive_id != model.storage_drive_id:
            raise ValueError(f"Storage folder {entity.id} cannot be moved to another drive")
        entity_to_folder(entity, model)
        self._session.flush()
        self._session.refresh(model)
        return folder_to_entity(model)


class SQLiteEntityFolderRepository(IEntityFolderRepository):
    """SQLite implementation of entity folder association repository."""

    def __init__(self, session: Session):
        self._session = session

    def list_for_entity(self, kind: EntityKind, entity_id: str) -> list[EntityFolderEntity]:
        query = (
            select(EntityStorageFolder)
            .where(
                EntityStorageFolder.entity_kind == EntityKind(kind).value,
                EntityStorageFolder.entity_id == entity_id,
            )
            .order_by(EntityStorageFolder.is_primary.desc(), EntityStorageFolder.created_at)
        )
        result = self._session.execute(query)
        return [entity_folder_to_entity(m) for m in result.scalars().all()]

    def find_primary(self, kind: EntityKind, entity_id: str) -> EntityFolderEntity | None:
        query = select(EntityStorageFolder).where(
            EntityStorageFolder.entity_kind == EntityKind(kind).value,
            EntityStorageFolder.entity_id == entity_id,
            EntityStorageFolder.is_primary == True,
        )
        model = self._session.execute(query).scalars().first()
        return entity_folder_to_entity(model) if model else None

    def _clear_primary(self, kind: EntityKind, entity_id: str) -> None:
        self._session.execute(
            update(EntityStorageFolder)
            .where(
                EntityStorageFolder.entity_kind == EntityKind(kind).value,
                EntityStorageFolder.entity_id == entity_id,
            )
            .values(is_primary=False)
        )

    def add(self, entity: EntityFolderEntity) -> EntityFolderEntity:
        if entity.primary:
            self._clear_primary(entity.entity_kind, entity.entity_id)
        model = EntityStorageFolder(
            entity_kind=EntityKind(entity.entity_kind).value,
            entity_id=entity.entity_id,
            storage_drive_folder_id=entity.folder_id,
            is_primary=entity.primary,
        )
        self._session.add(model)
        self._session.flush()
        self._session.refresh(model)
        return entity_folder_to_entity(model)

    def set_primary(self, kind: EntityKind, entity_id: str, folder_id: str) -> EntityFolderEntity | None:
        query = select(EntityStorageFolder).where(
            EntityStorageFolder.entity_kind == EntityKind(kind).value,
            EntityStorageFolder.entity_id == entity_id,
            EntityStorageFolder.storage_drive_folder_id == folder_id,
        )
        model = self._session.execute(query).scalar_one_or_none()
        if not model:
            return None
        self._clear_primary(kind, entity_id)
        model.is_primary = True
        self._session.flush()
        self._session.refresh(model)
        return entity_folder_to_entity(model)


class SQLiteIntegrationRepository(IIntegrationRepository):
    """SQLite implementation of AWS integration repository."""

    def __init__(self, session: Session):
        self._session = session

    def get(self, integration_id: str) -> AwsIntegrationEntity | None:
        result = self._session.get(AwsIntegration, integration_id)
        return integration_to_entity(result) if result else None

    def create(self, entity: AwsIntegrationEntity) -> AwsIntegrationEntity:
        model = AwsIntegration(
            name=entity.name,
            region=entity.region,
            access_key_id=entity.access_key_id,
            credentials=encrypt_config({"secret_key": entity.secret_access_key}),
            endpoint_url=entity.endpoint_url,
            use_iam=entity.use_iam,
            active=entity.active,
        )
        if entity.id:
            model.id = entity.id
        self._session.add(model)
        self._session.flush()
        self._session.refresh(model)
        return integration_to_entity(model)
