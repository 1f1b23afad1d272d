"""Storage adapter registry.

Maps each drive type to the adapter instance that serves it. The table is
built once at process start and is read-only afterwards.
"""

from collections.abc import Mapping
from types import MappingProxyType

from core.interfaces import DriveType
from storage.adapters.local import LocalAdapter
from storage.adapters.s3 import ClientResolver, S3Adapter
from storage.base import DriveLookup, StorageAdapter
from storage.exceptions import UnsupportedDriveTypeError


class AdapterRegistry:
    """Read-only lookup table of adapters by drive type."""

    def __init__(self, adapters: Mapping[DriveType, StorageAdapter]):
        self._adapters: Mapping[DriveType, StorageAdapter] = MappingProxyType(
            {DriveType(drive_type): adapter for drive_type, adapter in adapters.items()}
        )

    def lookup(self, drive_type: DriveType | str) -> StorageAdapter:
        """Get the adapter for a drive type.

        Raises:
            UnsupportedDriveTypeError: If no adapter is registered for the type.
        """
        try:
            key = DriveType(drive_type)
        except ValueError:
            raise UnsupportedDriveTypeError(f"Unknown storage drive type: {drive_type}") from None

        adapter = self._adapters.get(key)
        if adapter is None:
            raise UnsupportedDriveTypeError(
                f"No storage adapter registered for drive type: {key.value}"
            )
        return adapter

    def registered_types(self) -> list[DriveType]:
        return list(self._adapters)

    def __contains__(self, drive_type: object) -> bool:
        try:
            return DriveType(drive_type) in self._adapters
        except ValueError:
            return False


def create_registry(client_resolver: ClientResolver, drive_lookup: DriveLookup) -> AdapterRegistry:
    """Build the registry with the built-in adapters.

    Args:
        client_resolver: Returns a boto3 S3 client for an S3 drive.
        drive_lookup: Resolves drive IDs for folder-record targets.

    Returns:
        AdapterRegistry covering S3, local and network drives.
    """
    filesystem = LocalAdapter(drive_lookup)
    return AdapterRegistry({
        DriveType.S3: S3Adapter(client_resolver, drive_lookup),
        DriveType.LOCAL: filesystem,
        DriveType.NETWORK: filesystem,
    })
