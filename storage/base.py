"""Base storage adapter interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator

from core.interfaces import DriveEntity, FolderDetails, FolderEntity
from storage.exceptions import InsufficientPrivilegesError, StorageNotFoundError

DriveLookup = Callable[[str], DriveEntity | None]
StorageTarget = DriveEntity | FolderEntity


@dataclass
class StorageFile:
    """Information about a file on a drive."""

    name: str
    path: str
    size: int
    last_modified: datetime | None = None
    mime_type: str | None = None


@dataclass
class StorageFolder:
    """A folder and its immediate contents, read fresh from the backend."""

    name: str
    path: str
    folders: list["StorageFolder"] = field(default_factory=list)
    files: list[StorageFile] = field(default_factory=list)
    details: FolderDetails | None = None


class StorageAdapter(ABC):
    """Abstract base class for storage adapters.

    One adapter instance serves every drive of its drive type. Operations
    accept either a drive or a folder record as their target; folder records
    are resolved to their drive through ``drive_lookup``.
    """

    def __init__(self, drive_lookup: DriveLookup):
        self._drive_lookup = drive_lookup

    def _drive_for(self, target: StorageTarget) -> DriveEntity:
        """Resolve the drive a target lives on."""
        if isinstance(target, DriveEntity):
            return target
        drive = self._drive_lookup(target.storage_drive_id)
        if drive is None:
            raise StorageNotFoundError(
                f"Storage folder {target.id} not associated with a known drive: "
                f"{target.storage_drive_id}"
            )
        return drive

    @staticmethod
    def _require_write(target: StorageTarget, action: str) -> None:
        """Refuse writes into folder records that are not write enabled."""
        if isinstance(target, FolderEntity) and not target.write_enabled:
            raise InsufficientPrivilegesError(
                f"Insufficient privileges to {action} in folder: {target.path}"
            )

    @abstractmethod
    def test_connection(self, drive: DriveEntity) -> bool:
        """Verify connectivity and credentials."""
        ...

    @abstractmethod
    def create_folder(self, target: StorageTarget, path: str, name: str) -> StorageFolder:
        """Create folder ``name`` under ``path``, or return it if it already exists."""
        ...

    @abstractmethod
    def find_folder_by_path(self, target: StorageTarget, path: str) -> StorageFolder:
        """Get the listing of the folder at path."""
        ...

    @abstractmethod
    def find_file_by_path(self, target: StorageTarget, path: str) -> StorageFile:
        """Get metadata for a single file. Folders never match."""
        ...

    @abstractmethod
    def save_file(
        self,
        folder: FolderEntity,
        path: str,
        local_file: Path,
        file_name: str | None = None,
    ) -> StorageFile:
        """Upload a local file into ``path`` and return its stored descriptor."""
        ...

    @abstractmethod
    def fetch_file(self, folder: FolderEntity, path: str) -> bytes:
        """Read file contents."""
        ...

    @abstractmethod
    def file_exists(self, target: StorageTarget, path: str) -> bool:
        """Check if a file exists. Backend errors report False."""
        ...

    @abstractmethod
    def folder_exists(self, target: StorageTarget, path: str) -> bool:
        """Check if a folder exists. Backend errors report False."""
        ...

    def stream_file(self, folder: FolderEntity, path: str, chunk_size: int = 8192) -> Iterator[bytes]:
        """Stream file contents in chunks. Default reads entire file."""
        data = self.fetch_file(folder, path)
        for i in range(0, len(data), chunk_size):
            yield data[i:i + chunk_size]
