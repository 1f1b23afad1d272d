"""Storage adapter exceptions."""


class StorageError(Exception):
    """Base storage error."""
    pass


class StorageNotFoundError(StorageError):
    """Drive, folder or file not found."""
    pass


class InsufficientPrivilegesError(StorageError):
    """Folder policy flags do not allow the requested operation."""
    pass


class StorageBackendError(StorageError):
    """The storage backend failed. The original error is kept as __cause__."""
    pass


class StorageUnavailableError(StorageBackendError):
    """Storage location is unreachable."""
    pass


class StorageAuthError(StorageBackendError):
    """Authentication failed or expired."""
    pass


class UnsupportedDriveTypeError(StorageError):
    """No adapter is registered for the drive type."""
    pass


class FolderAlreadyRegisteredError(StorageError):
    """A folder record already exists for this path on the drive."""
    pass


class StorageRepairError(StorageBackendError):
    """Storage folder repair could not produce a verified folder."""
    pass
