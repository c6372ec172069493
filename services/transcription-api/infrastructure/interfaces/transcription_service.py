"""Abstract interface for transcription service operations."""

from abc import ABC, abstractmethod


class TranscriptionService(ABC):
    """Abstract base class for speech-to-text backends."""

    @abstractmethod
    def transcribe(
        self,
        audio_data: bytes,
        file_name: str,
        language: str,
        timeout: float | None = None,
    ) -> str:
        """
        Transcribes one audio payload and returns its text.

        Args:
            audio_data: Encoded audio bytes, within the backend's size limit.
            file_name: Name whose extension tells the backend the format.
            language: Spoken language hint (ISO 639-1).
            timeout: Upper bound in seconds for the request.

        Returns:
            The transcribed text.

        Raises:
            TranscriptionBackendError: If the backend call fails.
        """
        pass
