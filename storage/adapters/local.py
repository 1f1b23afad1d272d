"""Local filesystem storage adapter.

Serves both local drives and network shares mounted into the filesystem.
"""

import logging
import mimetypes
import shutil
from datetime import datetime
from pathlib import Path

from core.interfaces import DriveEntity, FolderEntity, LocalDriveDetails, LocalFolderDetails
from storage.base import StorageAdapter, StorageFile, StorageFolder, StorageTarget
from storage.exceptions import (
    InsufficientPrivilegesError,
    StorageBackendError,
    StorageError,
    StorageNotFoundError,
    StorageUnavailableError,
    UnsupportedDriveTypeError,
)
from storage.paths import base_name, folder_path, is_folder_key, join_path, normalize_folder_path

logger = logging.getLogger(__name__)


class LocalAdapter(StorageAdapter):
    """Storage adapter for local and mounted filesystems."""

    def _base_path(self, drive: DriveEntity) -> Path:
        match drive.details:
            case LocalDriveDetails(mount_path=mount_path):
                return Path(mount_path)
            case _:
                raise UnsupportedDriveTypeError(
                    f"Drive {drive.id} ({drive.drive_type}) is not a filesystem drive"
                )

    def _resolve_path(self, drive: DriveEntity, path: str) -> Path:
        """Resolve relative path to absolute, preventing traversal."""
        base_path = self._base_path(drive)
        if not path or not path.strip("/"):
            return base_path
        resolved = (base_path / path.strip("/")).resolve()
        if not resolved.is_relative_to(base_path.resolve()):
            raise InsufficientPrivilegesError(f"Path traversal not allowed: {path}")
        return resolved

    def _listing(self, dir_path: Path, path: str) -> StorageFolder:
        folder = StorageFolder(
            name=base_name(path) if path else dir_path.name,
            path=path,
            details=LocalFolderDetails(),
        )
        try:
            for item in sorted(dir_path.iterdir(), key=lambda p: p.name):
                if item.is_dir():
                    folder.folders.append(
                        StorageFolder(name=item.name, path=folder_path(path, item.name))
                    )
                else:
                    folder.files.append(self._to_file(item, join_path(path, item.name)))
        except OSError as e:
            raise StorageBackendError(f"Cannot access folder at path: {path}") from e
        return folder

    @staticmethod
    def _to_file(item: Path, path: str) -> StorageFile:
        stat = item.stat()
        mime_type, _ = mimetypes.guess_type(str(item))
        return StorageFile(
            name=item.name,
            path=path,
            size=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime),
            mime_type=mime_type,
        )

    def test_connection(self, drive: DriveEntity) -> bool:
        """Verify the mount path exists and is a directory."""
        base_path = self._base_path(drive)
        if not base_path.exists():
            raise StorageUnavailableError(f"Path does not exist: {base_path}")
        if not base_path.is_dir():
            raise StorageUnavailableError(f"Path is not a directory: {base_path}")
        return True

    def create_folder(self, target: StorageTarget, path: str, name: str) -> StorageFolder:
        """Create directory and parents if they don't exist."""
        self._require_write(target, "create folders")
        drive = self._drive_for(target)
        relative = folder_path(path, name)
        dir_path = self._resolve_path(drive, relative)
        logger.info(f"Creating folder: '{name}' in path: '{path}' on drive '{drive.display_name}'")
        try:
            dir_path.mkdir(parents=True, exist_ok=True)
        except FileExistsError as e:
            raise StorageBackendError(f"A file already exists at folder path: {relative}") from e
        except OSError as e:
            raise StorageBackendError(f"Failed to create folder: {relative}") from e
        return self._listing(dir_path, relative)

    def find_folder_by_path(self, target: StorageTarget, path: str) -> StorageFolder:
        """List the directory at path."""
        drive = self._drive_for(target)
        relative = normalize_folder_path(path)
        dir_path = self._resolve_path(drive, relative)
        logger.debug(f"Looking up folder by path: {relative!r}")
        if not dir_path.is_dir():
            raise StorageNotFoundError(f"Folder not found: {relative}")
        return self._listing(dir_path, relative)

    def find_file_by_path(self, target: StorageTarget, path: str) -> StorageFile:
        """Get file metadata. Directories are reported as not found."""
        drive = self._drive_for(target)
        if not path or is_folder_key(path):
            raise StorageNotFoundError(f"Object at path is a folder: {path}")
        file_path = self._resolve_path(drive, path)
        if not file_path.is_file():
            raise StorageNotFoundError(f"File not found: {path}")
        try:
            return self._to_file(file_path, path.strip("/"))
        except OSError as e:
            raise StorageBackendError(f"Cannot access file at path: {path}") from e

    def save_file(
        self,
        folder: FolderEntity,
        path: str,
        local_file: Path,
        file_name: str | None = None,
    ) -> StorageFile:
        """Copy a local file into the drive."""
        self._require_write(folder, "upload files")
        drive = self._drive_for(folder)
        relative = join_path(path, file_name or local_file.name)
        file_path = self._resolve_path(drive, relative)
        logger.info(f"Uploading file: {local_file.name} to path: {relative} on drive: {drive.display_name}")
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(local_file, file_path)
        except OSError as e:
            raise StorageBackendError(f"Failed to upload file: {relative}") from e
        return self.find_file_by_path(drive, relative)

    def fetch_file(self, folder: FolderEntity, path: str) -> bytes:
        """Read file contents."""
        drive = self._drive_for(folder)
        file_path = self._resolve_path(drive, path)
        if not file_path.is_file():
            raise StorageNotFoundError(f"File not found: {path}")
        try:
            return file_path.read_bytes()
        except OSError as e:
            raise StorageBackendError(f"Failed to read file: {path}") from e

    def file_exists(self, target: StorageTarget, path: str) -> bool:
        try:
            self.find_file_by_path(target, path)
            return True
        except (StorageError, OSError) as e:
            logger.debug(f"File existence check for {path!r} is negative: {e}")
            return False

    def folder_exists(self, target: StorageTarget, path: str) -> bool:
        try:
            drive = self._drive_for(target)
            return self._resolve_path(drive, normalize_folder_path(path)).is_dir()
        except (StorageError, OSError) as e:
            logger.debug(f"Folder existence check for {path!r} is negative: {e}")
            return False
