"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from api.routes import health
from api.routes.aws_integrations import router as aws_integrations_router
from api.routes.entity_folders import router as entity_folders_router
from api.routes.storage_drives import router as storage_drives_router
from api.routes.storage_folders import router as storage_folders_router
from core.config import settings
from persistence import init_db
from storage.exceptions import (
    FolderAlreadyRegisteredError,
    InsufficientPrivilegesError,
    StorageBackendError,
    StorageError,
    StorageNotFoundError,
    UnsupportedDriveTypeError,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"

# Most specific first: the handler lookup below walks this in order
ERROR_STATUS: list[tuple[type[StorageError], int]] = [
    (StorageNotFoundError, status.HTTP_404_NOT_FOUND),
    (InsufficientPrivilegesError, status.HTTP_403_FORBIDDEN),
    (UnsupportedDriveTypeError, status.HTTP_400_BAD_REQUEST),
    (FolderAlreadyRegisteredError, status.HTTP_409_CONFLICT),
    (StorageBackendError, status.HTTP_502_BAD_GATEWAY),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    init_db()
    yield


app = FastAPI(
    title="Study Storage API",
    description="Storage drives and folders for programs, studies and assays",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"name": "Study Storage API", "version": APP_VERSION}


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Translate storage errors into HTTP responses."""
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if status_code >= 500:
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# Routes
app.include_router(health.router)
app.include_router(storage_drives_router, prefix="/api")
app.include_router(storage_folders_router, prefix="/api")
app.include_router(aws_integrations_router, prefix="/api")
app.include_router(entity_folders_router, prefix="/api")
