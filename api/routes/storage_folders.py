"""Storage folder browsing and file transfer endpoints."""

import logging
import mimetypes
import shutil
import tempfile
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile, status

from api.routes.schemas import FileResponse, FolderListingResponse, FolderResponse
from core.config import settings
from services.storage_folders import StorageFolderService, get_storage_service
from storage.paths import base_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage-folders", tags=["storage-folders"])

StorageService = Annotated[StorageFolderService, Depends(get_storage_service)]


@router.get("/{folder_id}", response_model=FolderResponse)
def get_folder(folder_id: str, service: StorageService) -> FolderResponse:
    """Get a registered storage folder."""
    return FolderResponse.from_entity(service.find_folder(folder_id))


@router.get("/{folder_id}/browse", response_model=FolderListingResponse)
def browse_folder(
    folder_id: str,
    service: StorageService,
    path: Annotated[str | None, Query(description="Sub-path inside the folder")] = None,
) -> FolderListingResponse:
    """List the live contents of a folder or one of its sub-folders."""
    return FolderListingResponse.from_folder(service.browse(folder_id, path))


@router.get("/{folder_id}/files")
def download_file(
    folder_id: str,
    service: StorageService,
    path: Annotated[str, Query(description="Drive-relative file path")],
) -> Response:
    """Download a file from a folder."""
    data = service.fetch_file(folder_id, path)
    name = base_name(path)
    media_type, _ = mimetypes.guess_type(name)
    return Response(
        content=data,
        media_type=media_type or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{name}"'},
    )


@router.post(
    "/{folder_id}/files",
    response_model=FileResponse,
    status_code=status.HTTP_201_CREATED,
)
def upload_file(
    folder_id: str,
    service: StorageService,
    file: Annotated[UploadFile, File(description="File to upload")],
    path: Annotated[str | None, Form(description="Target sub-path inside the folder")] = None,
) -> FileResponse:
    """Upload a file into a folder."""
    if file.size is not None and file.size > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {settings.MAX_UPLOAD_BYTES} byte upload limit",
        )
    file_name = Path(file.filename or "upload").name

    with tempfile.TemporaryDirectory() as tmp:
        local_file = Path(tmp) / file_name
        with open(local_file, "wb") as out:
            shutil.copyfileobj(file.file, out)
        stored = service.save_file(folder_id, path, local_file, file_name)

    logger.info(f"Uploaded {file_name} to folder {folder_id} at {stored.path}")
    return FileResponse.from_file(stored)
