from article_common.config import MinioConfig
from article_common.exceptions import (
    StorageDeleteError,
    StorageDownloadError,
    StorageSigningError,
)
from article_common.logging import setup_logging
from article_common.minio import get_minio_client

__all__ = [
    "setup_logging",
    "get_minio_client",
    "StorageDownloadError",
    "StorageDeleteError",
    "StorageSigningError",
    "MinioConfig",
]
