"""S3 object storage adapter.

S3 has no real directories. A folder is a zero-byte marker object whose key
ends with the path delimiter, and a folder listing is a delimited
``list_objects_v2`` over that prefix.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Any, Callable

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    ReadTimeoutError,
)

from core.interfaces import DriveEntity, FolderEntity, S3BucketDetails, S3FolderDetails
from storage.base import DriveLookup, StorageAdapter, StorageFile, StorageFolder, StorageTarget
from storage.exceptions import (
    StorageAuthError,
    StorageBackendError,
    StorageError,
    StorageNotFoundError,
    StorageUnavailableError,
    UnsupportedDriveTypeError,
)
from storage.paths import (
    DELIMITER,
    base_name,
    folder_path,
    is_folder_key,
    join_path,
    normalize_folder_path,
)

logger = logging.getLogger(__name__)

ClientResolver = Callable[[DriveEntity], Any]

# Error codes S3 uses for a missing key or bucket
_MISSING_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}
_AUTH_CODES = {
    "403",
    "AccessDenied",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "ExpiredToken",
    "InvalidToken",
}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def translate_error(error: Exception, message: str) -> StorageError:
    """Map a botocore exception onto the storage error taxonomy."""
    if isinstance(error, ClientError):
        code = _error_code(error)
        if code in _MISSING_CODES:
            return StorageNotFoundError(message)
        if code in _AUTH_CODES:
            return StorageAuthError(f"{message}: access denied ({code})")
        return StorageBackendError(f"{message}: {code or error}")
    if isinstance(error, NoCredentialsError):
        return StorageAuthError(f"{message}: no AWS credentials available")
    if isinstance(error, (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError)):
        return StorageUnavailableError(f"{message}: {error}")
    return StorageBackendError(f"{message}: {error}")


class S3Adapter(StorageAdapter):
    """Storage adapter for S3 buckets."""

    def __init__(self, client_resolver: ClientResolver, drive_lookup: DriveLookup):
        """
        Initialize S3 adapter.

        Args:
            client_resolver: Returns a configured boto3 S3 client for a drive.
            drive_lookup: Resolves a drive ID to a drive entity.
        """
        super().__init__(drive_lookup)
        self._client_resolver = client_resolver

    def _bucket(self, drive: DriveEntity) -> tuple[Any, str]:
        """Return the S3 client and bucket name for a drive."""
        match drive.details:
            case S3BucketDetails(bucket_name=bucket_name):
                try:
                    client = self._client_resolver(drive)
                except (BotoCoreError, ValueError) as e:
                    raise translate_error(e, f"Cannot build S3 client for drive {drive.id}") from e
                return client, bucket_name
            case _:
                raise UnsupportedDriveTypeError(
                    f"Drive {drive.id} ({drive.drive_type}) is not an S3 bucket"
                )

    def _head(self, client, bucket: str, key: str) -> dict | None:
        """Return object metadata, or None if the key does not exist."""
        try:
            return client.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                return None
            raise translate_error(e, f"Failed to look up object: {key}") from e
        except BotoCoreError as e:
            raise translate_error(e, f"Failed to look up object: {key}") from e

    def _scan(self, client, bucket: str, prefix: str, name: str) -> tuple[StorageFolder, bool]:
        """List one level under prefix.

        Returns the folder listing and whether the prefix's own marker
        object was present.
        """
        folder = StorageFolder(name=name, path=prefix)
        marker_found = False
        marker_etag = None
        try:
            paginator = client.get_paginator("list_objects_v2")
            pages = paginator.paginate(Bucket=bucket, Prefix=prefix, Delimiter=DELIMITER)
            for page in pages:
                for common in page.get("CommonPrefixes", []):
                    child = common["Prefix"]
                    folder.folders.append(StorageFolder(name=base_name(child), path=child))
                for obj in page.get("Contents", []):
                    key = obj["Key"]
                    if key == prefix:
                        marker_found = True
                        marker_etag = obj.get("ETag")
                        continue
                    if is_folder_key(key):
                        continue
                    folder.files.append(self._to_file(key, obj.get("Size", 0), obj.get("LastModified")))
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"Cannot access folder at path: {prefix}") from e

        folder.folders.sort(key=lambda f: f.name)
        folder.files.sort(key=lambda f: f.name)
        folder.details = S3FolderDetails(key=prefix, etag=marker_etag)
        logger.debug(
            f"Found {len(folder.files)} files and {len(folder.folders)} folders in path {prefix!r}"
        )
        return folder, marker_found

    @staticmethod
    def _to_file(key: str, size: int, last_modified, content_type: str | None = None) -> StorageFile:
        name = base_name(key)
        if content_type is None:
            content_type, _ = mimetypes.guess_type(name)
        return StorageFile(
            name=name,
            path=key,
            size=int(size or 0),
            last_modified=last_modified,
            mime_type=content_type,
        )

    def test_connection(self, drive: DriveEntity) -> bool:
        """Verify the bucket is reachable with the drive's credentials."""
        client, bucket = self._bucket(drive)
        try:
            client.head_bucket(Bucket=bucket)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 connection test failed for bucket {bucket}: {e}")
            raise translate_error(e, f"Cannot connect to bucket: {bucket}") from e
        return True

    def create_folder(self, target: StorageTarget, path: str, name: str) -> StorageFolder:
        """Write a folder marker if it is missing and return the folder listing."""
        self._require_write(target, "create folders")
        drive = self._drive_for(target)
        client, bucket = self._bucket(drive)
        key = folder_path(path, name)
        logger.info(f"Creating folder: '{name}' in path: '{path}' in bucket '{bucket}'")

        if self._head(client, bucket, key) is None:
            try:
                client.put_object(Bucket=bucket, Key=key, Body=b"")
            except (ClientError, BotoCoreError) as e:
                raise translate_error(e, f"Failed to create folder: {key}") from e
        else:
            logger.debug(f"Folder marker already exists: {key}")

        folder, _ = self._scan(client, bucket, key, base_name(key))
        return folder

    def find_folder_by_path(self, target: StorageTarget, path: str) -> StorageFolder:
        """Get the folder listing at path.

        A prefix with no marker object and nothing under it does not exist.
        """
        drive = self._drive_for(target)
        client, bucket = self._bucket(drive)
        prefix = normalize_folder_path(path)
        logger.debug(f"Looking up folder by path: {prefix!r}")

        name = base_name(prefix) if prefix else bucket
        folder, marker_found = self._scan(client, bucket, prefix, name)
        if prefix and not marker_found and not folder.folders and not folder.files:
            raise StorageNotFoundError(f"Folder not found: {prefix}")
        return folder

    def find_file_by_path(self, target: StorageTarget, path: str) -> StorageFile:
        """Get file metadata. Folder marker keys are reported as not found."""
        drive = self._drive_for(target)
        client, bucket = self._bucket(drive)
        logger.debug(f"Looking up file by path: {path}")

        if not path or is_folder_key(path):
            raise StorageNotFoundError(f"Object at path is a folder: {path}")
        head = self._head(client, bucket, path)
        if head is None:
            raise StorageNotFoundError(f"File not found: {path}")
        return self._to_file(
            path,
            head.get("ContentLength", 0),
            head.get("LastModified"),
            head.get("ContentType"),
        )

    def save_file(
        self,
        folder: FolderEntity,
        path: str,
        local_file: Path,
        file_name: str | None = None,
    ) -> StorageFile:
        """Upload a local file and return the descriptor S3 reports for it."""
        self._require_write(folder, "upload files")
        drive = self._drive_for(folder)
        client, bucket = self._bucket(drive)
        key = join_path(path, file_name or local_file.name)
        logger.info(f"Uploading file: {local_file.name} to path: {key} in bucket: {bucket}")

        try:
            client.upload_file(str(local_file), bucket, key)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"Failed to upload file: {key}") from e

        return self.find_file_by_path(drive, key)

    def fetch_file(self, folder: FolderEntity, path: str) -> bytes:
        """Download file contents."""
        drive = self._drive_for(folder)
        client, bucket = self._bucket(drive)
        logger.debug(f"Fetching file: {path} from bucket: {bucket}")

        if is_folder_key(path):
            raise StorageNotFoundError(f"Object at path is a folder: {path}")
        try:
            response = client.get_object(Bucket=bucket, Key=path)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"Failed to download file: {path}") from e

    def file_exists(self, target: StorageTarget, path: str) -> bool:
        """Check if a file exists. Any failure counts as missing."""
        try:
            self.find_file_by_path(target, path)
            return True
        except (StorageError, BotoCoreError) as e:
            logger.debug(f"File existence check for {path!r} is negative: {e}")
            return False

    def folder_exists(self, target: StorageTarget, path: str) -> bool:
        """Check if anything exists under the folder prefix. Any failure counts as missing."""
        prefix = normalize_folder_path(path)
        try:
            drive = self._drive_for(target)
            client, bucket = self._bucket(drive)
            logger.debug(f"Checking if folder exists: {prefix!r} in bucket: {bucket}")
            if not prefix:
                client.head_bucket(Bucket=bucket)
                return True
            response = client.list_objects_v2(Bucket=bucket, Prefix=prefix, MaxKeys=1)
            return response.get("KeyCount", 0) > 0
        except (StorageError, ClientError, BotoCoreError) as e:
            logger.debug(f"Folder existence check for {prefix!r} is negative: {e}")
            return False
