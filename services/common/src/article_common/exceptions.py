"""Shared exceptions for infrastructure components."""


class StorageDownloadError(Exception):
    """Raised when downloading a file from storage fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        self.cause = cause
        super().__init__(f"Failed to download '{object_name}' from storage")


class StorageDeleteError(Exception):
    """Raised when deleting a file from storage fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        self.cause = cause
        super().__init__(f"Failed to delete '{object_name}' from storage")


class StorageSigningError(Exception):
    """Raised when a pre-signed upload URL cannot be issued."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        self.cause = cause
        super().__init__(f"Failed to sign an upload URL for '{object_name}'")
