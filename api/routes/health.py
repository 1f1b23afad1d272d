"""Health check endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from services.storage_folders import StorageFolderService, get_storage_service

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> dict:
    """Basic health check."""
    return {"status": "healthy"}


@router.get("/health/ready")
def readiness_check(
    service: Annotated[StorageFolderService, Depends(get_storage_service)],
) -> dict:
    """Readiness check including the metadata store and registered drive types."""
    database_ok = service.store.health_check()
    return {
        "status": "ready" if database_ok else "degraded",
        "services": {
            "database": "healthy" if database_ok else "unavailable",
        },
        "drive_types": sorted(t.value for t in service.registry.registered_types()),
    }
