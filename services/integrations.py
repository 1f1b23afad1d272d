"""AWS integration lookup for S3 drives.

Resolves an S3 drive to a boto3 client configured from the AWS integration
the drive's bucket details point at.
"""

import logging
from typing import Any, Callable

import boto3
from botocore.config import Config

from core.config import settings
from core.interfaces import AwsIntegrationEntity, DriveEntity, IMetadataStore, S3BucketDetails
from storage.exceptions import StorageAuthError, StorageNotFoundError, UnsupportedDriveTypeError

logger = logging.getLogger(__name__)


def client_config() -> Config:
    """botocore config with the configured timeouts and retry settings."""
    return Config(
        connect_timeout=settings.S3_CONNECT_TIMEOUT,
        read_timeout=settings.S3_READ_TIMEOUT,
        retries={"max_attempts": settings.S3_MAX_ATTEMPTS, "mode": "standard"},
    )


class AwsClientResolver:
    """Builds S3 clients for drives from their AWS integration records."""

    def __init__(self, store: IMetadataStore, client_factory: Callable[..., Any] = boto3.client):
        """
        Args:
            store: Metadata store holding the AWS integrations.
            client_factory: Called as ``client_factory("s3", **kwargs)``.
        """
        self._store = store
        self._client_factory = client_factory

    def integration_for(self, drive: DriveEntity) -> AwsIntegrationEntity:
        """Look up the active integration bound to an S3 drive."""
        match drive.details:
            case S3BucketDetails(integration_id=integration_id):
                pass
            case _:
                raise UnsupportedDriveTypeError(f"Drive {drive.id} is not an S3 bucket")

        with self._store.transaction() as repos:
            integration = repos.integrations.get(integration_id)
        if integration is None or not integration.active:
            raise StorageNotFoundError(
                f"Storage drive {drive.id} not associated with an active AWS integration"
            )
        return integration

    def client_for(self, drive: DriveEntity) -> Any:
        """Create an S3 client for a drive."""
        integration = self.integration_for(drive)
        kwargs: dict[str, Any] = {
            "region_name": integration.region or settings.AWS_DEFAULT_REGION,
            "config": client_config(),
        }
        if integration.endpoint_url:
            kwargs["endpoint_url"] = integration.endpoint_url
        if not integration.use_iam:
            if not integration.access_key_id or not integration.secret_access_key:
                raise StorageAuthError(
                    f"AWS integration '{integration.name}' has no usable access keys"
                )
            kwargs["aws_access_key_id"] = integration.access_key_id
            kwargs["aws_secret_access_key"] = integration.secret_access_key

        logger.debug(f"Creating S3 client for drive {drive.id} using integration '{integration.name}'")
        return self._client_factory("s3", **kwargs)

    __call__ = client_for
