"""Abstract interface for downloading a video's audio stream."""

from abc import ABC, abstractmethod


class AudioDownloader(ABC):
    """Retrieves the audio-only stream of a video."""

    @abstractmethod
    def download(self, video_id: str, directory: str, timeout: float | None = None) -> str:
        """
        Downloads the best available audio-only stream.

        Args:
            video_id: Validated video identifier.
            directory: Workspace directory to write into.
            timeout: Upper bound in seconds for network operations.

        Returns:
            Absolute path of the downloaded file.

        Raises:
            SourceUnavailableError: If the download fails.
        """
