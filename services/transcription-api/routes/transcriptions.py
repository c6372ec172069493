"""Transcription endpoints."""

import threading
from collections.abc import Callable
from typing import Annotated

from article_common.logging import setup_logging
from fastapi import APIRouter, Depends, HTTPException, UploadFile
from fastapi.responses import StreamingResponse

from dependencies import get_pipeline
from domain.models import MediaSource, StagedObject
from exceptions import (
    AudioExtractionError,
    InvalidInputError,
    PayloadTooLargeError,
    PipelineError,
    PipelineTimeoutError,
    SourceUnavailableError,
    SplitFailedError,
    TranscriptionBackendError,
)
from handlers import PreparedRun, TranscriptionPipeline
from infrastructure import LoggingProgressSink, QueueProgressChannel
from response_models import (
    StagedTranscriptionRequest,
    TranscriptionResponse,
    YouTubeTranscriptionRequest,
)

logger = setup_logging()

router = APIRouter(prefix="/transcriptions", tags=["transcriptions"])

PipelineDep = Annotated[TranscriptionPipeline, Depends(get_pipeline)]


def to_http_exception(error: PipelineError) -> HTTPException:
    """Maps a pipeline error to the HTTP status the client sees."""
    if isinstance(error, PayloadTooLargeError):
        status_code = 413
    elif isinstance(error, InvalidInputError):
        status_code = 400
    elif isinstance(error, SourceUnavailableError):
        status_code = 422
    elif isinstance(
        error, (AudioExtractionError, SplitFailedError, TranscriptionBackendError)
    ):
        status_code = 502
    elif isinstance(error, PipelineTimeoutError):
        status_code = 504
    else:
        status_code = 500
    return HTTPException(status_code=status_code, detail=error.user_message)


def _respond(
    pipeline: TranscriptionPipeline,
    prepare: Callable[[], PreparedRun],
    stream: bool,
):
    try:
        run = prepare()
    except PipelineError as e:
        logger.warning("Transcription request rejected", extra={"error": str(e)})
        raise to_http_exception(e) from e

    if stream:
        return _stream(pipeline, run)

    try:
        result = pipeline.execute(run, LoggingProgressSink(run.run_id))
    except PipelineError as e:
        raise to_http_exception(e) from e
    return TranscriptionResponse.from_result(result)


def start_worker(
    pipeline: TranscriptionPipeline, run: PreparedRun, channel: QueueProgressChannel
) -> threading.Thread:
    """
    Executes the run on a daemon thread that publishes into ``channel``.

    The thread runs to completion and releases the run's resources even if
    nobody reads the channel any more.
    """

    def work() -> None:
        try:
            result = pipeline.execute(run, channel)
        except Exception:
            # execute has logged the failure and published the error message
            if not channel.terminated:
                channel.fail("Transcription failed")
            return
        channel.finish(result)

    worker = threading.Thread(
        target=work, name=f"transcription-{run.run_id}", daemon=True
    )
    worker.start()
    return worker


def _stream(pipeline: TranscriptionPipeline, run: PreparedRun) -> StreamingResponse:
    channel = QueueProgressChannel()
    start_worker(pipeline, run, channel)
    return StreamingResponse(channel.stream(), media_type="text/event-stream")


@router.post(
    "", response_model=TranscriptionResponse, response_model_exclude_none=True
)
def transcribe_upload(
    file: UploadFile,
    pipeline: PipelineDep,
    stream: bool = False,
):
    """
    Transcribes an uploaded audio or video file.

    With ``stream=true`` the response is an event stream of progress messages
    ending in the result or an error.
    """
    source = MediaSource(
        file_name=file.filename or "", size=file.size or 0, stream=file.file
    )
    logger.info(
        "Received transcription upload",
        extra={"file_name": source.file_name, "size": source.size, "stream": stream},
    )
    return _respond(pipeline, lambda: pipeline.prepare_upload(source), stream)


@router.post(
    "/staged", response_model=TranscriptionResponse, response_model_exclude_none=True
)
def transcribe_staged(
    request: StagedTranscriptionRequest,
    pipeline: PipelineDep,
    stream: bool = False,
):
    """Transcribes a file previously uploaded through ``POST /uploads``."""
    staged = StagedObject(
        object_name=request.object_name,
        file_name=request.file_name,
        size=request.size,
    )
    logger.info(
        "Received staged transcription",
        extra={"object_name": staged.object_name, "size": staged.size, "stream": stream},
    )
    return _respond(pipeline, lambda: pipeline.prepare_staged(staged), stream)


@router.post(
    "/youtube", response_model=TranscriptionResponse, response_model_exclude_none=True
)
def transcribe_youtube(
    request: YouTubeTranscriptionRequest,
    pipeline: PipelineDep,
    stream: bool = False,
):
    """Transcribes a YouTube video, preferring its caption track."""
    logger.info("Received YouTube transcription", extra={"url": request.url})
    return _respond(pipeline, lambda: pipeline.prepare_video(request.url), stream)
