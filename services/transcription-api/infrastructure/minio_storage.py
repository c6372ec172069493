"""MinIO implementation of the StorageClient interface."""

from datetime import timedelta

from article_common import (
    StorageDeleteError,
    StorageDownloadError,
    StorageSigningError,
    setup_logging,
)
from article_common.infrastructure import StorageClient
from minio import Minio

logger = setup_logging()


class MinioStorageClient(StorageClient):
    """Handles file storage operations using MinIO."""

    def __init__(self, client: Minio):
        self._client = client

    def download_to_file(
        self, bucket_name: str, object_name: str, file_path: str
    ) -> None:
        try:
            self._client.fget_object(
                bucket_name=bucket_name, object_name=object_name, file_path=file_path
            )
            logger.info(
                "File downloaded from MinIO",
                extra={"bucket_name": bucket_name, "object_name": object_name},
            )
        except Exception as e:
            logger.exception(
                "MinIO download failed",
                extra={"bucket_name": bucket_name, "object_name": object_name},
            )
            raise StorageDownloadError(object_name, e) from e

    def delete(self, bucket_name: str, object_name: str) -> None:
        try:
            self._client.remove_object(
                bucket_name=bucket_name, object_name=object_name
            )
            logger.info(
                "File deleted from MinIO",
                extra={"bucket_name": bucket_name, "object_name": object_name},
            )
        except Exception as e:
            logger.exception(
                "MinIO delete failed",
                extra={"bucket_name": bucket_name, "object_name": object_name},
            )
            raise StorageDeleteError(object_name, e) from e

    def presigned_upload_url(
        self, bucket_name: str, object_name: str, expires: timedelta
    ) -> str:
        try:
            return self._client.presigned_put_object(
                bucket_name=bucket_name, object_name=object_name, expires=expires
            )
        except Exception as e:
            logger.exception(
                "MinIO URL signing failed",
                extra={"bucket_name": bucket_name, "object_name": object_name},
            )
            raise StorageSigningError(object_name, e) from e

    def ensure_bucket_exists(self, bucket_name: str) -> None:
        if not self._client.bucket_exists(bucket_name=bucket_name):
            self._client.make_bucket(bucket_name=bucket_name)
            logger.info("Bucket created", extra={"bucket_name": bucket_name})
        else:
            logger.info("Bucket already exists", extra={"bucket_name": bucket_name})
