"""Endpoints for the storage folders of programs, studies and assays."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.routes.schemas import FolderListResponse, FolderResponse
from core.interfaces import EntityKind, EntityRef
from services.storage_folders import StorageFolderService, get_storage_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/entity-folders", tags=["entity-folders"])

StorageService = Annotated[StorageFolderService, Depends(get_storage_service)]


class EntityRefRequest(BaseModel):
    """A program, study or assay and, except for programs, its parent."""

    kind: EntityKind
    id: str
    code: str
    name: str
    parent: "EntityRefRequest | None" = None

    def to_entity(self) -> EntityRef:
        return EntityRef(
            kind=self.kind,
            id=self.id,
            code=self.code,
            name=self.name,
            parent=self.parent.to_entity() if self.parent else None,
        )


class RepairResponse(BaseModel):
    outcome: str
    folder: FolderResponse


def _ref(kind: EntityKind, entity_id: str) -> EntityRef:
    return EntityRef(kind=kind, id=entity_id, code=entity_id, name=entity_id)


@router.get("/{kind}/{entity_id}", response_model=FolderListResponse)
def list_entity_folders(kind: EntityKind, entity_id: str, service: StorageService) -> FolderListResponse:
    """List the folders of an entity, primary first."""
    folders = service.find_folders(_ref(kind, entity_id))
    return FolderListResponse(
        items=[FolderResponse.from_entity(f) for f in folders],
        total=len(folders),
    )


@router.get("/{kind}/{entity_id}/primary", response_model=FolderResponse)
def get_primary_folder(kind: EntityKind, entity_id: str, service: StorageService) -> FolderResponse:
    """Get the primary folder of an entity."""
    return FolderResponse.from_entity(service.find_primary_folder(_ref(kind, entity_id)))


@router.post("/repair", response_model=RepairResponse)
def repair_entity_folder(body: EntityRefRequest, service: StorageService) -> RepairResponse:
    """Make sure an entity's primary folder exists, creating it if needed."""
    result = service.repair(body.to_entity())
    logger.info(f"Repair of {body.kind.value} {body.code} finished: {result.outcome.value}")
    return RepairResponse(outcome=result.outcome.value, folder=FolderResponse.from_entity(result.folder))
