"""Application configuration."""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Database
    DATABASE_URL: str = "sqlite:///./study_storage.db"

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # S3 client settings
    AWS_DEFAULT_REGION: str = "us-east-1"
    S3_CONNECT_TIMEOUT: float = 10.0  # Seconds
    S3_READ_TIMEOUT: float = 60.0  # Seconds
    S3_MAX_ATTEMPTS: int = 3  # Includes the first attempt

    # Credential encryption
    KEYRING_SERVICE: str = "study-storage"
    KEYFILE_PATH: Path = Path.home() / ".study-storage" / ".keyfile"

    # Uploads
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024 * 1024  # 5 GB, S3 single PUT limit

    model_config = {"env_prefix": "STUDY_STORAGE_", "env_file": ".env"}


settings = Settings()
