"""AWS integration endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from core.interfaces import AwsIntegrationEntity
from services.storage_folders import StorageFolderService, get_storage_service

router = APIRouter(prefix="/aws-integrations", tags=["aws-integrations"])

StorageService = Annotated[StorageFolderService, Depends(get_storage_service)]


class IntegrationCreateRequest(BaseModel):
    """Register AWS credentials for S3 drives.

    With ``use_iam`` the ambient IAM role is used and no keys are stored.
    """

    name: str
    region: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    endpoint_url: str | None = None
    use_iam: bool = False


class IntegrationResponse(BaseModel):
    """AWS integration response model. The secret key is never returned."""

    id: str
    name: str
    region: str | None
    access_key_id: str | None
    endpoint_url: str | None
    use_iam: bool
    active: bool
    has_secret: bool

    @classmethod
    def from_entity(cls, integration: AwsIntegrationEntity) -> "IntegrationResponse":
        return cls(
            id=integration.id,
            name=integration.name,
            region=integration.region,
            access_key_id=integration.access_key_id,
            endpoint_url=integration.endpoint_url,
            use_iam=integration.use_iam,
            active=integration.active,
            has_secret=bool(integration.secret_access_key),
        )


@router.post("", response_model=IntegrationResponse, status_code=status.HTTP_201_CREATED)
def create_integration(body: IntegrationCreateRequest, service: StorageService) -> IntegrationResponse:
    """Store an AWS integration. The secret key is encrypted at rest."""
    integration = service.create_integration(AwsIntegrationEntity(
        id="",
        name=body.name,
        region=body.region,
        access_key_id=body.access_key_id,
        secret_access_key=body.secret_access_key,
        endpoint_url=body.endpoint_url,
        use_iam=body.use_iam,
    ))
    return IntegrationResponse.from_entity(integration)
