"""Response models shared by the storage routes."""

from dataclasses import asdict

from pydantic import BaseModel

from core.interfaces import DriveEntity, FolderEntity
from storage.base import StorageFile, StorageFolder


class DriveResponse(BaseModel):
    """Storage drive response model."""

    id: str
    drive_type: str
    display_name: str
    root_path: str
    details: dict
    active: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, drive: DriveEntity) -> "DriveResponse":
        return cls(
            id=drive.id,
            drive_type=drive.drive_type.value,
            display_name=drive.display_name,
            root_path=drive.root_path,
            details=asdict(drive.details),
            active=drive.active,
            created_at=drive.created_at.isoformat() if drive.created_at else "",
            updated_at=drive.updated_at.isoformat() if drive.updated_at else "",
        )


class DriveListResponse(BaseModel):
    """List of storage drives."""

    items: list[DriveResponse]
    total: int


class FolderResponse(BaseModel):
    """Registered storage folder response model."""

    id: str
    storage_drive_id: str
    path: str
    name: str
    browser_root: bool
    study_root: bool
    write_enabled: bool
    delete_enabled: bool
    details: dict
    active: bool

    @classmethod
    def from_entity(cls, folder: FolderEntity) -> "FolderResponse":
        return cls(
            id=folder.id,
            storage_drive_id=folder.storage_drive_id,
            path=folder.path,
            name=folder.name,
            browser_root=folder.browser_root,
            study_root=folder.study_root,
            write_enabled=folder.write_enabled,
            delete_enabled=folder.delete_enabled,
            details=asdict(folder.details) if folder.details else {},
            active=folder.active,
        )


class FolderListResponse(BaseModel):
    """List of registered storage folders."""

    items: list[FolderResponse]
    total: int


class FileResponse(BaseModel):
    """A file on a storage drive."""

    name: str
    path: str
    size: int
    last_modified: str | None = None
    mime_type: str | None = None

    @classmethod
    def from_file(cls, f: StorageFile) -> "FileResponse":
        return cls(
            name=f.name,
            path=f.path,
            size=f.size,
            last_modified=f.last_modified.isoformat() if f.last_modified else None,
            mime_type=f.mime_type,
        )


class SubfolderResponse(BaseModel):
    name: str
    path: str


class FolderListingResponse(BaseModel):
    """Live contents of a folder on a storage drive."""

    name: str
    path: str
    folders: list[SubfolderResponse]
    files: list[FileResponse]

    @classmethod
    def from_folder(cls, folder: StorageFolder) -> "FolderListingResponse":
        return cls(
            name=folder.name,
            path=folder.path,
            folders=[SubfolderResponse(name=f.name, path=f.path) for f in folder.folders],
            files=[FileResponse.from_file(f) for f in folder.files],
        )
