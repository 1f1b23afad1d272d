"""Services layer.

The storage folder service is the entry point business code uses to create,
find and repair storage folders:
    from services.storage_folders import get_storage_service
"""

from .naming import default_folder_name, sanitize_name
from .storage_folders import (
    RepairOutcome,
    RepairResult,
    StorageFolderService,
    create_storage_service,
    get_storage_service,
)

__all__ = [
    "RepairOutcome",
    "RepairResult",
    "StorageFolderService",
    "create_storage_service",
    "get_storage_service",
    "default_folder_name",
    "sanitize_name",
]
