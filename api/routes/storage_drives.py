"""Storage drive endpoints."""

import logging
import time
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from api.routes.schemas import (
    DriveListResponse,
    DriveResponse,
    FolderListingResponse,
    FolderListResponse,
    FolderResponse,
)
from core.interfaces import (
    DriveDetails,
    DriveEntity,
    DriveType,
    FolderEntity,
    LocalDriveDetails,
    S3BucketDetails,
)
from services.storage_folders import StorageFolderService, get_storage_service
from storage import StorageAuthError, StorageError, StorageUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage-drives", tags=["storage-drives"])

StorageService = Annotated[StorageFolderService, Depends(get_storage_service)]


class DriveCreateRequest(BaseModel):
    """Configure a new storage drive.

    S3 drives need a bucket name and an AWS integration ID. Local and
    network drives need the path the share is mounted at.
    """

    drive_type: DriveType
    display_name: str
    root_path: str = ""
    bucket_name: str | None = None
    integration_id: str | None = None
    mount_path: str | None = None

    def details(self) -> DriveDetails:
        if self.drive_type == DriveType.S3:
            if not self.bucket_name or not self.integration_id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="S3 drives require bucket_name and integration_id",
                )
            return S3BucketDetails(bucket_name=self.bucket_name, integration_id=self.integration_id)
        if not self.mount_path:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Filesystem drives require mount_path",
            )
        return LocalDriveDetails(mount_path=self.mount_path)


class DriveActiveRequest(BaseModel):
    active: bool


class FolderRegisterRequest(BaseModel):
    """Register an existing folder on a drive."""

    path: str
    name: str | None = None
    browser_root: bool = False
    study_root: bool = False
    write_enabled: bool = False
    delete_enabled: bool = False


class TestConnectionResponse(BaseModel):
    """Response from testing a storage drive connection."""

    success: bool
    error: str | None = None
    latency_ms: float | None = None


@router.get("", response_model=DriveListResponse)
def list_drives(service: StorageService, include_inactive: bool = False) -> DriveListResponse:
    """List storage drives."""
    drives = service.find_drives(active_only=not include_inactive)
    return DriveListResponse(
        items=[DriveResponse.from_entity(d) for d in drives],
        total=len(drives),
    )


@router.post("", response_model=DriveResponse, status_code=status.HTTP_201_CREATED)
def create_drive(body: DriveCreateRequest, service: StorageService) -> DriveResponse:
    """Configure a new storage drive."""
    drive = DriveEntity(
        id="",
        drive_type=body.drive_type,
        display_name=body.display_name,
        root_path=body.root_path,
        details=body.details(),
    )
    return DriveResponse.from_entity(service.create_drive(drive))


@router.get("/{drive_id}", response_model=DriveResponse)
def get_drive(drive_id: str, service: StorageService) -> DriveResponse:
    """Get a storage drive."""
    return DriveResponse.from_entity(service.find_drive(drive_id))


@router.patch("/{drive_id}", response_model=DriveResponse)
def set_drive_active(drive_id: str, body: DriveActiveRequest, service: StorageService) -> DriveResponse:
    """Activate or deactivate a drive."""
    return DriveResponse.from_entity(service.set_drive_active(drive_id, body.active))


@router.post("/{drive_id}/test", response_model=TestConnectionResponse)
def test_drive_connection(drive_id: str, service: StorageService) -> TestConnectionResponse:
    """Check that a drive's backend is reachable."""
    drive = service.find_drive(drive_id)
    try:
        start = time.monotonic()
        service.lookup_adapter(drive).test_connection(drive)
        elapsed = (time.monotonic() - start) * 1000
        return TestConnectionResponse(success=True, latency_ms=elapsed)
    except StorageAuthError as e:
        return TestConnectionResponse(success=False, error=f"Authentication failed: {e}")
    except StorageUnavailableError as e:
        return TestConnectionResponse(success=False, error=f"Cannot connect: {e}")
    except StorageError as e:
        return TestConnectionResponse(success=False, error=str(e))


@router.get("/{drive_id}/folders", response_model=FolderListResponse)
def list_drive_folders(drive_id: str, service: StorageService) -> FolderListResponse:
    """List the folders registered on a drive."""
    service.find_drive(drive_id)
    folders = service.find_drive_folders(drive_id)
    return FolderListResponse(
        items=[FolderResponse.from_entity(f) for f in folders],
        total=len(folders),
    )


@router.post(
    "/{drive_id}/folders",
    response_model=FolderResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_drive_folder(
    drive_id: str,
    body: FolderRegisterRequest,
    service: StorageService,
) -> FolderResponse:
    """Register a folder that already exists on the drive."""
    drive = service.find_drive(drive_id)
    draft = FolderEntity(
        id=None,
        storage_drive_id=drive.id,
        path=body.path,
        name=body.name or "",
        browser_root=body.browser_root,
        study_root=body.study_root,
        write_enabled=body.write_enabled,
        delete_enabled=body.delete_enabled,
    )
    return FolderResponse.from_entity(service.register_folder(draft, drive))


@router.get("/{drive_id}/browse", response_model=FolderListingResponse)
def browse_drive(
    drive_id: str,
    service: StorageService,
    path: Annotated[str, Query(description="Drive-relative folder path")] = "",
) -> FolderListingResponse:
    """List the live contents of a path on a drive."""
    return FolderListingResponse.from_folder(service.browse_drive(drive_id, path))
