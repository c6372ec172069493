"""OpenAI Whisper implementation of the TranscriptionService interface."""

import openai
from article_common.logging import setup_logging

from domain.validation import mime_type_for
from exceptions import TranscriptionBackendError

from .interfaces import TranscriptionService

logger = setup_logging()


class OpenAITranscriber(TranscriptionService):
    """Handles audio transcription using the OpenAI audio API."""

    def __init__(self, client: openai.OpenAI, model_name: str):
        self._client = client
        self._model_name = model_name

    def transcribe(
        self,
        audio_data: bytes,
        file_name: str,
        language: str,
        timeout: float | None = None,
    ) -> str:
        """
        Sends one payload to the transcription endpoint.

        The upload is named after ``file_name`` and typed by its extension,
        which is how the API recognises the format.
        """
        options = {}
        if timeout is not None:
            options["timeout"] = timeout
        try:
            transcription = self._client.audio.transcriptions.create(
                model=self._model_name,
                file=(file_name, audio_data, mime_type_for(file_name)),
                language=language,
                **options,
            )
        except openai.OpenAIError as e:
            logger.exception(
                "OpenAI transcription failed",
                extra={"file_name": file_name, "size": len(audio_data)},
            )
            raise TranscriptionBackendError(file_name, e) from e

        text = getattr(transcription, "text", None)
        if text is None:
            raise TranscriptionBackendError(
                file_name, Exception("Transcription returned no text")
            )

        logger.info(
            "Audio transcription successful",
            extra={"file_name": file_name, "characters": len(text)},
        )
        return text
