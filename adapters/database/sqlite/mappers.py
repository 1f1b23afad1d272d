"""Entity mappers between SQLAlchemy models and domain entities."""

from dataclasses import asdict

from core.interfaces import (
    AwsIntegrationEntity,
    DriveDetails,
    DriveEntity,
    DriveType,
    EntityFolderEntity,
    EntityKind,
    FolderDetails,
    FolderEntity,
    LocalDriveDetails,
    LocalFolderDetails,
    S3BucketDetails,
    S3FolderDetails,
)
from persistence.models import AwsIntegration, EntityStorageFolder, StorageDrive, StorageDriveFolder
from services.encryption import decrypt_config


def details_to_dict(details: DriveDetails | FolderDetails | None) -> dict:
    """Serialize a details variant, keeping its type tag."""
    return asdict(details) if details is not None else {}


def drive_details_from_dict(data: dict) -> DriveDetails:
    """Rebuild a drive details variant from its tagged dict."""
    fields = {k: v for k, v in (data or {}).items() if k != "type"}
    match (data or {}).get("type"):
        case "s3":
            return S3BucketDetails(**fields)
        case "local":
            return LocalDriveDetails(**fields)
        case other:
            raise ValueError(f"Unknown drive details type: {other}")


def folder_details_from_dict(data: dict) -> FolderDetails | None:
    """Rebuild a folder details variant from its tagged dict."""
    fields = {k: v for k, v in (data or {}).items() if k != "type"}
    match (data or {}).get("type"):
        case "s3":
            return S3FolderDetails(**fields)
        case "local":
            return LocalFolderDetails()
        case None:
            return None
        case other:
            raise ValueError(f"Unknown folder details type: {other}")


def drive_to_entity(model: StorageDrive) -> DriveEntity:
    """Convert StorageDrive model to DriveEntity."""
    return DriveEntity(
        id=model.id,
        drive_type=DriveType(model.drive_type),
        display_name=model.display_name,
        root_path=model.root_path,
        details=drive_details_from_dict(model.details),
        active=model.active,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_drive(entity: DriveEntity) -> StorageDrive:
    """Convert DriveEntity to a new StorageDrive model."""
    model = StorageDrive(
        drive_type=DriveType(entity.drive_type).value,
        display_name=entity.display_name,
        root_path=entity.root_path,
        details=details_to_dict(entity.details),
        active=entity.active,
    )
    if entity.id:
        model.id = entity.id
    return model


def folder_to_entity(model: StorageDriveFolder) -> FolderEntity:
    """Convert StorageDriveFolder model to FolderEntity."""
    return FolderEntity(
        id=model.id,
        storage_drive_id=model.storage_drive_id,
        path=model.path,
        name=model.name,
        browser_root=model.browser_root,
        study_root=model.study_root,
        write_enabled=model.write_enabled,
        delete_enabled=model.delete_enabled,
        details=folder_details_from_dict(model.details),
        active=model.active,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_folder(entity: FolderEntity, model: StorageDriveFolder | None = None) -> StorageDriveFolder:
    """Convert FolderEntity to StorageDriveFolder model.

    The drive reference is only set on new models.
    """
    if model is None:
        model = StorageDriveFolder(storage_drive_id=entity.storage_drive_id)
        if entity.id:
            model.id = entity.id
    model.path = entity.path
    model.name = entity.name
    model.browser_root = entity.browser_root
    model.study_root = entity.study_root
    model.write_enabled = entity.write_enabled
    model.delete_enabled = entity.delete_enabled
    model.details = details_to_dict(entity.details)
    model.active = entity.active
    return model


def entity_folder_to_entity(model: EntityStorageFolder) -> EntityFolderEntity:
    """Convert EntityStorageFolder model to EntityFolderEntity."""
    return EntityFolderEntity(
        id=model.id,
        entity_kind=EntityKind(model.entity_kind),
        entity_id=model.entity_id,
        folder_id=model.storage_drive_folder_id,
        primary=model.is_primary,
    )


def integration_to_entity(model: AwsIntegration) -> AwsIntegrationEntity:
    """Convert AwsIntegration model to AwsIntegrationEntity, decrypting the secret."""
    credentials = decrypt_config(model.credentials or {})
    return AwsIntegrationEntity(
        id=model.id,
        name=model.name,
        region=model.region,
        access_key_id=model.access_key_id,
        secret_access_key=credentials.get("secret_key"),
        endpoint_url=model.endpoint_url,
        use_iam=model.use_iam,
        active=model.active,
    )
