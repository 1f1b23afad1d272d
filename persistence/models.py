"""SQLAlchemy models."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid.uuid4())


class AwsIntegration(Base):
    """AWS account credentials used by S3 drives."""

    __tablename__ = "aws_integrations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    region: Mapped[str | None] = mapped_column(String(50))
    access_key_id: Mapped[str | None] = mapped_column(String(128))
    # Encrypted {"secret_key": {"_encrypted": ...}} payload
    credentials: Mapped[dict] = mapped_column(JSON, default=dict)
    endpoint_url: Mapped[str | None] = mapped_column(String(512))
    use_iam: Mapped[bool] = mapped_column(Boolean, default=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(default=func.now())
    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now())


class StorageDrive(Base):
    """A configured storage backend: an S3 bucket or a filesystem mount."""

    __tablename__ = "storage_drives"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    drive_type: Mapped[str] = mapped_column(String(20), nullable=False)  # s3, local, network
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    root_path: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    # Tagged details: {"type": "s3", "bucket_name": ..., "integration_id": ...}
    details: Mapped[dict] = mapped_column(JSON, default=dict)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(default=func.now())
    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now())


class StorageDriveFolder(Base):
    """A registered folder on a storage drive."""

    __tablename__ = "storage_drive_folders"
    __table_args__ = (
        UniqueConstraint("storage_drive_id", "path", name="uq_storage_drive_folder_path"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    storage_drive_id: Mapped[str] = mapped_column(
        ForeignKey("storage_drives.id", ondelete="RESTRICT"), nullable=False
    )
    path: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    browser_root: Mapped[bool] = mapped_column(Boolean, default=False)
    study_root: Mapped[bool] = mapped_column(Boolean, default=False)
    write_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    delete_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    details: Mapped[dict] = mapped_column(JSON, default=dict)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(default=func.now())
    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now())


class EntityStorageFolder(Base):
    """Folder owned by a program, study or assay.

    The business entity side owns the link; folders only know their drive.
    """

    __tablename__ = "entity_storage_folders"
    __table_args__ = (
        UniqueConstraint(
            "entity_kind", "entity_id", "storage_drive_folder_id",
            name="uq_entity_storage_folder",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    entity_kind: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    storage_drive_folder_id: Mapped[str] = mapped_column(
        ForeignKey("storage_drive_folders.id", ondelete="CASCADE"), nullable=False
    )
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(default=func.now())
