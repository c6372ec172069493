"""Abstract interface for the media inspection and transcoding capability."""

from abc import ABC, abstractmethod


class MediaToolkit(ABC):
    """Duration queries and segmented transcoding of media files."""

    @abstractmethod
    def probe_duration(self, path: str, timeout: float | None = None) -> float:
        """
        Returns the container's declared duration in seconds.

        Args:
            path: Absolute path of the media file.
            timeout: Upper bound in seconds for the query.

        Returns:
            A positive duration.

        Raises:
            ProbeUnavailableError: If the duration cannot be determined.
        """

    @abstractmethod
    def transcode_segment(
        self,
        input_path: str,
        output_path: str,
        start_seconds: float,
        duration_seconds: float | None,
        bitrate: str,
        sample_rate: int,
        channels: int,
        timeout: float | None = None,
    ) -> None:
        """
        Extracts one time window of the input as compressed speech audio.

        Args:
            input_path: Absolute path of the source media.
            output_path: Absolute path of the MP3 file to write.
            start_seconds: Offset of the window.
            duration_seconds: Length of the window, or None to read to the
                end of the input.
            bitrate: Target audio bitrate, e.g. ``"64k"``.
            sample_rate: Target sample rate in Hz.
            channels: Target channel count.
            timeout: Upper bound in seconds for the transcode.

        Raises:
            MediaToolError: If the transcode fails or the timeout is reached.
        """
