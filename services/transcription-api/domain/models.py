"""Domain models for the transcription pipeline."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, computed_field


class MediaSource(BaseModel, frozen=True):
    """
    A media file received directly in the request.

    ``stream`` is any readable binary file object, such as the spooled file
    of an upload. It is not validated.
    """

    file_name: str
    size: int = Field(ge=0)
    stream: Any


class StagedObject(BaseModel, frozen=True):
    """A media file uploaded to object storage ahead of the request."""

    object_name: str
    file_name: str
    size: int = Field(ge=0)


class ChunkPlan(BaseModel, frozen=True):
    """One planned time window of the source media."""

    index: int = Field(ge=0)
    start_seconds: float = Field(ge=0)
    duration_seconds: float = Field(gt=0)

    @property
    def end_seconds(self) -> float:
        return self.start_seconds + self.duration_seconds


class Chunk(BaseModel, frozen=True):
    """A re-encoded audio segment written to the workspace."""

    index: int = Field(ge=0)
    start_seconds: float
    duration_seconds: float
    path: str
    size_bytes: int


class TranscriptionResult(BaseModel, frozen=True):
    """Outcome of a completed run."""

    text: str
    chunk_texts: list[str]
    chunk_count: int | None = None
    duration_seconds: float | None = None
    source: Literal["upload", "staged", "youtube-captions", "youtube-audio"]

    @computed_field
    @property
    def duration_minutes(self) -> int | None:
        if self.duration_seconds is None:
            return None
        return int(self.duration_seconds // 60)


class Phase(str, Enum):
    """Coarse pipeline phase reported to progress observers."""

    UPLOAD = "upload"
    ANALYZE = "analyze"
    SPLIT = "split"
    TRANSCRIBE = "transcribe"
    COMPLETE = "complete"
    ERROR = "error"


TERMINAL_PHASES = frozenset({Phase.COMPLETE, Phase.ERROR})


class ProgressEvent(BaseModel, frozen=True):
    """A status update emitted while a run is in flight."""

    phase: Phase
    percent: int = Field(ge=0, le=100)
    message: str
    detail: dict[str, Any] | None = None

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES


class CaptionTranscript(BaseModel, frozen=True):
    """A platform-hosted caption track, usable without transcription."""

    source: Literal["captions"] = "captions"
    video_id: str
    language: str
    text: str


class AudioRequired(BaseModel, frozen=True):
    """No captions exist; the audio stream must be downloaded and transcribed."""

    source: Literal["needs-audio"] = "needs-audio"
    video_id: str
