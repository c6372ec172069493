"""Abstract interface for object storage operations."""

from abc import ABC, abstractmethod
from datetime import timedelta


class StorageClient(ABC):
    """Abstract base class for object storage backends."""

    @abstractmethod
    def download_to_file(
        self, bucket_name: str, object_name: str, file_path: str
    ) -> None:
        """
        Downloads an object from storage into a local file.

        Args:
            bucket_name: The storage bucket name.
            object_name: The object path/name in storage.
            file_path: Local destination path.

        Raises:
            StorageDownloadError: If the download fails.
        """

    @abstractmethod
    def delete(self, bucket_name: str, object_name: str) -> None:
        """
        Deletes an object from storage.

        Args:
            bucket_name: The storage bucket name.
            object_name: The object path/name in storage.

        Raises:
            StorageDeleteError: If the deletion fails.
        """

    @abstractmethod
    def presigned_upload_url(
        self, bucket_name: str, object_name: str, expires: timedelta
    ) -> str:
        """
        Issues a URL the client can PUT the object to without credentials.

        Args:
            bucket_name: The storage bucket name.
            object_name: The destination path/name in storage.
            expires: How long the URL stays valid.

        Returns:
            The pre-signed URL.

        Raises:
            StorageSigningError: If the URL cannot be issued.
        """

    @abstractmethod
    def ensure_bucket_exists(self, bucket_name: str) -> None:
        """
        Ensures a bucket exists, creating it if necessary.

        Args:
            bucket_name: The bucket name to ensure exists.
        """
