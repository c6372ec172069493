"""Shared fakes and fixtures for the transcription service tests."""

import io
import os
from datetime import timedelta

import pytest
from article_common.exceptions import (
    StorageDeleteError,
    StorageDownloadError,
    StorageSigningError,
)

from config import MB, PipelineConfig, YouTubeConfig
from domain.models import CaptionTranscript, MediaSource, ProgressEvent
from exceptions import CaptionsNotFoundError, MediaToolError
from handlers import SourceAcquirer, TranscriptionPipeline
from infrastructure.interfaces import (
    AudioDownloader,
    CaptionProvider,
    CaptionTracks,
    MediaToolkit,
    ProgressSink,
    StorageClient,
    TranscriptionService,
)

BUCKET = "uploads"
VIDEO_ID = "dQw4w9WgXcQ"
STAGED_OBJECT = "uploads/" + "a" * 32 + ".mp3"


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTranscriber(TranscriptionService):
    """Returns ``text of <file name>`` and records every call."""

    def __init__(self):
        self.calls = []
        self.error: Exception | None = None
        self.fail_on: int | None = None
        self.on_call = None

    def transcribe(self, audio_data, file_name, language, timeout=None):
        call_index = len(self.calls)
        self.calls.append(
            {
                "file_name": file_name,
                "size": len(audio_data),
                "language": language,
                "timeout": timeout,
            }
        )
        if self.on_call:
            self.on_call(call_index)
        if self.error and (self.fail_on is None or self.fail_on == call_index):
            raise self.error
        return f"text of {file_name}"

    @property
    def file_names(self) -> list[str]:
        return [call["file_name"] for call in self.calls]


class FakeToolkit(MediaToolkit):
    """Reports a fixed duration and writes small chunk files."""

    def __init__(self):
        self.duration = 5400.0
        self.chunk_bytes = 2048
        self.probe_error: Exception | None = None
        self.fail_at: int | None = None
        self.probe_calls = []
        self.transcode_calls = []

    def probe_duration(self, path, timeout=None):
        self.probe_calls.append({"path": path, "timeout": timeout})
        if self.probe_error:
            raise self.probe_error
        return self.duration

    def transcode_segment(
        self,
        input_path,
        output_path,
        start_seconds,
        duration_seconds,
        bitrate,
        sample_rate,
        channels,
        timeout=None,
    ):
        call_index = len(self.transcode_calls)
        self.transcode_calls.append(
            {
                "input_path": input_path,
                "output_path": output_path,
                "start_seconds": start_seconds,
                "duration_seconds": duration_seconds,
                "bitrate": bitrate,
                "sample_rate": sample_rate,
                "channels": channels,
                "timeout": timeout,
            }
        )
        if self.fail_at == call_index:
            raise MediaToolError("ffmpeg", "exit code 1")
        with open(output_path, "wb") as f:
            f.write(b"\xff" * self.chunk_bytes)


class FakeCaptionTracks(CaptionTracks):
    def __init__(self, provider: "FakeCaptions", video_id: str):
        self._provider = provider
        self._video_id = video_id

    def fetch(self, language=None):
        provider = self._provider
        provider.calls.append(language)
        if provider.error:
            raise provider.error
        key = language if language is not None else "*"
        if key not in provider.languages:
            raise CaptionsNotFoundError(self._video_id, language)
        return CaptionTranscript(
            video_id=self._video_id,
            language=language or "de",
            text=provider.languages[key],
        )


class FakeCaptions(CaptionProvider):
    """Serves caption tracks keyed by language; ``"*"`` is any track."""

    def __init__(self):
        self.languages: dict[str, str] = {}
        self.calls = []
        self.opened = []
        self.error: Exception | None = None

    def tracks(self, video_id):
        self.opened.append(video_id)
        return FakeCaptionTracks(self, video_id)


class FakeDownloader(AudioDownloader):
    def __init__(self):
        self.size = 4096
        self.error: Exception | None = None
        self.calls = []

    def download(self, video_id, directory, timeout=None):
        self.calls.append({"video_id": video_id, "directory": directory, "timeout": timeout})
        if self.error:
            raise self.error
        path = os.path.join(directory, "audio.m4a")
        with open(path, "wb") as f:
            f.write(b"\x00" * self.size)
        return path


class FakeStorage(StorageClient):
    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.deleted = []
        self.downloads = []
        self.delete_error = False
        self.signing_error = False
        self.buckets = set()

    def download_to_file(self, bucket_name, object_name, file_path):
        self.downloads.append(object_name)
        if object_name not in self.objects:
            raise StorageDownloadError(object_name)
        with open(file_path, "wb") as f:
            f.write(self.objects[object_name])

    def delete(self, bucket_name, object_name):
        self.deleted.append(object_name)
        if self.delete_error:
            raise StorageDeleteError(object_name)
        self.objects.pop(object_name, None)

    def presigned_upload_url(self, bucket_name, object_name, expires: timedelta):
        if self.signing_error:
            raise StorageSigningError(object_name)
        return f"http://minio:9000/{bucket_name}/{object_name}?X-Amz-Expires={int(expires.total_seconds())}"

    def ensure_bucket_exists(self, bucket_name):
        self.buckets.add(bucket_name)


class RecordingSink(ProgressSink):
    """Keeps every event and what the workspace root held at the terminal one."""

    def __init__(self, workspace_root: str):
        self._workspace_root = workspace_root
        self.events: list[ProgressEvent] = []
        self.workspaces_at_terminal: list[str] | None = None

    def emit(self, event: ProgressEvent) -> None:
        self.events.append(event)
        if event.is_terminal:
            self.workspaces_at_terminal = os.listdir(self._workspace_root)

    @property
    def percents(self) -> list[int]:
        return [event.percent for event in self.events]

    @property
    def last(self) -> ProgressEvent:
        return self.events[-1]


def media_source(file_name: str, data: bytes) -> MediaSource:
    return MediaSource(file_name=file_name, size=len(data), stream=io.BytesIO(data))


@pytest.fixture
def workspace_root(tmp_path):
    root = tmp_path / "workspaces"
    root.mkdir()
    return root


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transcriber():
    return FakeTranscriber()


@pytest.fixture
def toolkit():
    return FakeToolkit()


@pytest.fixture
def captions():
    return FakeCaptions()


@pytest.fixture
def downloader():
    return FakeDownloader()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def sink(workspace_root):
    return RecordingSink(str(workspace_root))


@pytest.fixture
def acquirer(captions, downloader):
    return SourceAcquirer(captions, downloader, YouTubeConfig())


@pytest.fixture
def make_pipeline(workspace_root, transcriber, toolkit, storage, acquirer, clock):
    def factory(**overrides) -> TranscriptionPipeline:
        config = PipelineConfig(workspace_root=str(workspace_root), **overrides)
        return TranscriptionPipeline(
            transcription_service=transcriber,
            toolkit=toolkit,
            storage=storage,
            acquirer=acquirer,
            config=config,
            bucket_name=BUCKET,
            clock=clock,
        )

    return factory


@pytest.fixture
def pipeline(make_pipeline):
    return make_pipeline()


@pytest.fixture
def large_input():
    """40MB of payload; the fake toolkit reports it as 90 minutes long."""
    return bytes(40 * MB)
