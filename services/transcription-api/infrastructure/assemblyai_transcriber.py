"""AssemblyAI implementation of the TranscriptionService interface."""

import os
import tempfile

import assemblyai as aai
from article_common.logging import setup_logging

from exceptions import TranscriptionBackendError

from .interfaces import TranscriptionService

logger = setup_logging()


class AssemblyAITranscriber(TranscriptionService):
    """Handles audio transcription using AssemblyAI."""

    def __init__(self, transcriber: aai.Transcriber):
        self._transcriber = transcriber

    def transcribe(
        self,
        audio_data: bytes,
        file_name: str,
        language: str,
        timeout: float | None = None,
    ) -> str:
        """
        Transcribes audio data using AssemblyAI.

        Writes audio to a temp file (required by AssemblyAI SDK) and
        transcribes it with the language fixed instead of auto-detected.
        The SDK polls until the job finishes, so ``timeout`` is not applied
        per request.
        """
        suffix = os.path.splitext(file_name)[1] or ".mp3"
        config = aai.TranscriptionConfig(language_code=language)
        try:
            with tempfile.NamedTemporaryFile(suffix=suffix, delete=True) as temp_file:
                temp_file.write(audio_data)
                temp_file.flush()

                transcription = self._transcriber.transcribe(
                    temp_file.name, config=config
                )

            if transcription.status == aai.TranscriptStatus.error:
                raise TranscriptionBackendError(
                    file_name, Exception(transcription.error)
                )

            if transcription.text is None:
                raise TranscriptionBackendError(
                    file_name, Exception("Transcription returned no text")
                )

            logger.info(
                "Audio transcription successful",
                extra={"file_name": file_name, "characters": len(transcription.text)},
            )
            return transcription.text

        except TranscriptionBackendError:
            logger.error("AssemblyAI returned an error", extra={"file_name": file_name})
            raise
        except Exception as e:
            logger.exception(
                "AssemblyAI transcription failed", extra={"file_name": file_name}
            )
            raise TranscriptionBackendError(file_name, e) from e
