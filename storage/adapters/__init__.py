"""Storage adapter implementations."""

from storage.adapters.local import LocalAdapter
from storage.adapters.s3 import S3Adapter

__all__ = ["LocalAdapter", "S3Adapter"]
