"""Handler orchestrating a transcription run from input to final transcript."""

import os
import time
import uuid
from contextlib import ExitStack
from typing import Literal

from article_common.exceptions import StorageDeleteError, StorageDownloadError
from article_common.logging import setup_logging

from config import PipelineConfig
from domain.chunk_planner import plan_chunks
from domain.deadline import Deadline
from domain.media_probe import MediaProbe
from domain.media_splitter import MediaSplitter
from domain.models import (
    CaptionTranscript,
    MediaSource,
    Phase,
    StagedObject,
    TranscriptionResult,
)
from domain.progress import ProgressReporter
from domain.transcript_builder import TranscriptBuilder
from domain.validation import (
    DIRECT_EXTENSIONS,
    extract_video_id,
    file_extension,
    is_staged_object_name,
    validate_media_file,
)
from exceptions import (
    AudioExtractionError,
    InvalidInputError,
    MediaToolError,
    PayloadTooLargeError,
    PipelineError,
    SourceUnavailableError,
    WorkspaceError,
)
from infrastructure.interfaces import (
    MediaToolkit,
    ProgressSink,
    StorageClient,
    TranscriptionService,
)
from infrastructure.workspace import TemporaryWorkspace

from .source_acquirer import SourceAcquirer

logger = setup_logging()

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred during transcription"
STAGED_DOWNLOAD_MESSAGE = "The uploaded file could not be retrieved from storage"

RunKind = Literal["upload", "staged", "youtube"]


class PreparedRun:
    """
    A validated run together with every resource it holds.

    Closing the run removes its workspace and deletes the staged object, if
    any. Resources are released in reverse order of acquisition.
    """

    def __init__(
        self,
        kind: RunKind,
        label: str,
        resources: ExitStack,
        workspace: TemporaryWorkspace,
        deadline: Deadline,
        input_path: str | None = None,
        staged: StagedObject | None = None,
        video_id: str | None = None,
    ):
        self.run_id = uuid.uuid4().hex[:12]
        self.kind = kind
        self.label = label
        self.workspace = workspace
        self.deadline = deadline
        self.input_path = input_path
        self.staged = staged
        self.video_id = video_id
        self._resources = resources

    def __enter__(self) -> "PreparedRun":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._resources.close()


class TranscriptionPipeline:
    """Orchestrates validation, splitting, transcription and cleanup."""

    def __init__(
        self,
        transcription_service: TranscriptionService,
        toolkit: MediaToolkit,
        storage: StorageClient,
        acquirer: SourceAcquirer,
        config: PipelineConfig,
        bucket_name: str,
        clock=time.monotonic,
    ):
        self._transcription_service = transcription_service
        self._storage = storage
        self._acquirer = acquirer
        self._config = config
        self._bucket_name = bucket_name
        self._clock = clock
        self._toolkit = toolkit
        self._probe = MediaProbe(toolkit)
        self._splitter = MediaSplitter(toolkit, config)
        self._transcript_builder = TranscriptBuilder()

    def prepare_upload(self, source: MediaSource) -> PreparedRun:
        """
        Validates a direct upload and copies it into a fresh workspace.

        Raises:
            UnsupportedFormatError: If the extension is not allowed.
            PayloadTooLargeError: If the file exceeds the upload ceiling.
            WorkspaceError: If the workspace cannot be prepared.
        """
        extension = validate_media_file(
            source.file_name, source.size, self._config.max_upload_bytes
        )
        deadline = self._new_deadline()
        resources = ExitStack()
        try:
            workspace = resources.enter_context(self._new_workspace())
            input_path = workspace.write_stream(
                f"input{extension}", source.stream, self._config.max_upload_bytes
            )
        except BaseException:
            resources.close()
            raise

        return PreparedRun(
            kind="upload",
            label=source.file_name,
            resources=resources,
            workspace=workspace,
            deadline=deadline,
            input_path=input_path,
        )

    def prepare_staged(self, staged: StagedObject) -> PreparedRun:
        """
        Validates a reference to a pre-uploaded object.

        The object is deleted from storage when the run closes, whatever its
        outcome, and also when the request is rejected here. Names this
        service never issued are rejected without touching storage.

        Raises:
            UnsupportedFormatError: If the extension is not allowed.
            PayloadTooLargeError: If the declared size exceeds the ceiling.
            InvalidInputError: If the object name was not issued by this service.
            WorkspaceError: If the workspace cannot be prepared.
        """
        if not is_staged_object_name(staged.object_name):
            raise InvalidInputError(f"Unknown staged object {staged.object_name!r}")

        resources = ExitStack()
        try:
            resources.callback(self._discard_staged, staged.object_name)
            validate_media_file(
                staged.file_name, staged.size, self._config.max_upload_bytes
            )
            deadline = self._new_deadline()
            workspace = resources.enter_context(self._new_workspace())
        except BaseException:
            resources.close()
            raise

        return PreparedRun(
            kind="staged",
            label=staged.file_name,
            resources=resources,
            workspace=workspace,
            deadline=deadline,
            staged=staged,
        )

    def prepare_video(self, url: str) -> PreparedRun:
        """
        Validates a video URL.

        Raises:
            InvalidSourceURLError: If the URL is rejected.
            WorkspaceError: If the workspace cannot be prepared.
        """
        video_id = extract_video_id(url)
        deadline = self._new_deadline()
        resources = ExitStack()
        try:
            workspace = resources.enter_context(self._new_workspace())
        except BaseException:
            resources.close()
            raise

        return PreparedRun(
            kind="youtube",
            label=video_id,
            resources=resources,
            workspace=workspace,
            deadline=deadline,
            video_id=video_id,
        )

    def execute(self, run: PreparedRun, sink: ProgressSink) -> TranscriptionResult:
        """
        Runs a prepared transcription to completion.

        The run's resources are released before the terminal progress event
        is emitted and before any error propagates.

        Args:
            run: A run returned by one of the ``prepare_*`` methods.
            sink: Receives the progress events of the run.

        Returns:
            The final transcript.

        Raises:
            PipelineError: If any stage fails or the run exceeds its budget.
        """
        reporter = ProgressReporter(sink)
        logger.info(
            "Transcription run started",
            extra={"run_id": run.run_id, "kind": run.kind, "input": run.label},
        )
        try:
            with run:
                result = self._run(run, reporter)
        except PipelineError as e:
            logger.error(
                "Transcription run failed",
                extra={"run_id": run.run_id, "error": str(e), "cause": repr(e.cause)},
            )
            reporter.fail(e.user_message)
            raise
        except Exception:
            logger.exception(
                "Transcription run failed unexpectedly", extra={"run_id": run.run_id}
            )
            reporter.fail(UNEXPECTED_ERROR_MESSAGE)
            raise

        reporter.complete(
            "Transcription complete",
            {"chunk_count": result.chunk_count, "characters": len(result.text)},
        )
        logger.info(
            "Transcription run completed",
            extra={
                "run_id": run.run_id,
                "source": result.source,
                "chunk_count": result.chunk_count,
                "duration_seconds": result.duration_seconds,
            },
        )
        return result

    def transcribe_upload(
        self, source: MediaSource, sink: ProgressSink
    ) -> TranscriptionResult:
        return self.execute(self.prepare_upload(source), sink)

    def transcribe_staged(
        self, staged: StagedObject, sink: ProgressSink
    ) -> TranscriptionResult:
        return self.execute(self.prepare_staged(staged), sink)

    def transcribe_video(self, url: str, sink: ProgressSink) -> TranscriptionResult:
        return self.execute(self.prepare_video(url), sink)

    def _run(self, run: PreparedRun, reporter: ProgressReporter) -> TranscriptionResult:
        if run.kind == "upload":
            reporter.update(Phase.UPLOAD, 10, "Upload received")
            return self._transcribe_media(run, reporter, run.input_path, "upload")

        if run.kind == "staged":
            reporter.update(Phase.UPLOAD, 2, "Fetching uploaded file")
            input_path = self._fetch_staged(run)
            reporter.update(Phase.UPLOAD, 10, "Upload received")
            return self._transcribe_media(run, reporter, input_path, "staged")

        reporter.update(Phase.UPLOAD, 2, "Checking captions")
        outcome = self._acquirer.acquire_video(run.video_id)
        run.deadline.check("fetching captions")
        if isinstance(outcome, CaptionTranscript):
            return TranscriptionResult(
                text=outcome.text,
                chunk_texts=[outcome.text],
                source="youtube-captions",
            )

        reporter.update(Phase.UPLOAD, 5, "Downloading audio")
        input_path = self._acquirer.download_audio(
            outcome, run.workspace.path, run.deadline.remaining("downloading")
        )
        reporter.update(Phase.UPLOAD, 10, "Audio downloaded")
        return self._transcribe_media(run, reporter, input_path, "youtube-audio")

    def _fetch_staged(self, run: PreparedRun) -> str:
        staged = run.staged
        _, extension = os.path.splitext(staged.file_name)
        input_path = run.workspace.file_path(f"input{extension.lower()}")
        try:
            self._storage.download_to_file(
                self._bucket_name, staged.object_name, input_path
            )
        except StorageDownloadError as e:
            raise SourceUnavailableError(
                f"Staged object {staged.object_name} could not be downloaded",
                STAGED_DOWNLOAD_MESSAGE,
                e,
            ) from e

        size = self._file_size(input_path)
        if size > self._config.max_upload_bytes:
            raise PayloadTooLargeError(size, self._config.max_upload_bytes)
        return input_path

    def _transcribe_media(
        self,
        run: PreparedRun,
        reporter: ProgressReporter,
        input_path: str,
        source: str,
    ) -> TranscriptionResult:
        deadline = run.deadline
        size = self._file_size(input_path)

        if (
            size <= self._config.direct_limit_bytes
            and file_extension(input_path) not in DIRECT_EXTENSIONS
        ):
            input_path = self._extract_audio(run, reporter, input_path)
            size = self._file_size(input_path)

        if size <= self._config.direct_limit_bytes:
            logger.info(
                "Transcribing without splitting",
                extra={"run_id": run.run_id, "size": size},
            )
            reporter.update(Phase.TRANSCRIBE, 20, "Transcribing audio")
            text = self._transcribe_file(input_path, deadline)
            return TranscriptionResult(text=text, chunk_texts=[text], source=source)

        reporter.update(Phase.ANALYZE, 12, "Analyzing media")
        duration = self._probe.probe_duration(
            input_path, size, deadline.remaining("analyzing")
        )
        plan = plan_chunks(duration, self._config.chunk_window_seconds)
        reporter.update(
            Phase.ANALYZE,
            15,
            f"Splitting into {len(plan)} parts",
            {"chunk_count": len(plan), "duration_seconds": round(duration, 3)},
        )

        def on_chunk(done: int, total: int) -> None:
            reporter.update(
                Phase.SPLIT,
                reporter.band(15, 40, done, total),
                f"Split part {done}/{total}",
            )

        chunks = self._splitter.split(
            input_path, run.workspace.path, plan, deadline, on_chunk
        )

        total = len(chunks)
        reporter.update(Phase.TRANSCRIBE, 40, f"Transcribing {total} parts")
        segments = []
        for done, chunk in enumerate(chunks, start=1):
            deadline.check("transcribing")
            segments.append((chunk.index, self._transcribe_file(chunk.path, deadline)))
            reporter.update(
                Phase.TRANSCRIBE,
                reporter.band(40, 99, done, total),
                f"Transcribed part {done}/{total}",
                {"chunk_index": chunk.index},
            )

        text, chunk_texts = self._transcript_builder.build(segments)
        return TranscriptionResult(
            text=text,
            chunk_texts=chunk_texts,
            chunk_count=total,
            duration_seconds=duration,
            source=source,
        )

    def _extract_audio(
        self, run: PreparedRun, reporter: ProgressReporter, input_path: str
    ) -> str:
        """Re-encodes the whole input as MP3 speech audio in the workspace."""
        reporter.update(Phase.ANALYZE, 12, "Extracting audio track")
        output_path = run.workspace.file_path("audio.mp3")
        try:
            self._toolkit.transcode_segment(
                input_path=input_path,
                output_path=output_path,
                start_seconds=0.0,
                duration_seconds=None,
                bitrate=self._config.chunk_bitrate,
                sample_rate=self._config.chunk_sample_rate,
                channels=self._config.chunk_channels,
                timeout=run.deadline.remaining("extracting audio"),
            )
        except (MediaToolError, ValueError) as e:
            run.deadline.check("extracting audio")
            raise AudioExtractionError(input_path, e) from e

        logger.info(
            "Audio track extracted",
            extra={"run_id": run.run_id, "input_path": input_path},
        )
        return output_path

    def _transcribe_file(self, path: str, deadline: Deadline) -> str:
        try:
            with open(path, "rb") as f:
                audio_data = f.read()
        except OSError as e:
            raise WorkspaceError(path, e) from e

        text = self._transcription_service.transcribe(
            audio_data,
            os.path.basename(path),
            self._config.language,
            deadline.remaining("transcribing"),
        )
        # Some backends poll without honoring the timeout.
        deadline.check("transcribing")
        return text

    def _file_size(self, path: str) -> int:
        try:
            return os.path.getsize(path)
        except OSError as e:
            raise WorkspaceError(path, e) from e

    def _discard_staged(self, object_name: str) -> None:
        try:
            self._storage.delete(self._bucket_name, object_name)
        except StorageDeleteError:
            logger.warning(
                "Staged object left in storage", extra={"object_name": object_name}
            )

    def _new_deadline(self) -> Deadline:
        return Deadline(self._config.run_timeout_seconds, self._clock)

    def _new_workspace(self) -> TemporaryWorkspace:
        return TemporaryWorkspace(self._config.workspace_root)
