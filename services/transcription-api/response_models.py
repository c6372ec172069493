"""Request and response models for the transcription API."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from domain.models import Phase, TranscriptionResult


class StagedTranscriptionRequest(BaseModel):
    """A file previously uploaded through a pre-signed URL."""

    object_name: str = Field(min_length=1)
    file_name: str = Field(min_length=1)
    size: int = Field(ge=0)


class YouTubeTranscriptionRequest(BaseModel):
    """A YouTube video to transcribe."""

    url: str = Field(min_length=1, max_length=2048)


class UploadTicketRequest(BaseModel):
    """A file the client wants to upload before transcription."""

    file_name: str = Field(min_length=1)
    size: int = Field(ge=0)


class UploadTicketResponse(BaseModel):
    """Where and under which name the client uploads its file."""

    object_name: str
    upload_url: str
    expires_in_seconds: int


class TranscriptionResponse(BaseModel):
    """Final transcript returned to the caller."""

    model_config = ConfigDict(populate_by_name=True)

    text: str
    chunk_count: int | None = Field(default=None, alias="chunkCount")
    duration_minutes: int | None = Field(default=None, alias="durationMinutes")
    source: str

    @classmethod
    def from_result(cls, result: TranscriptionResult) -> "TranscriptionResponse":
        return cls(
            text=result.text,
            chunk_count=result.chunk_count,
            duration_minutes=result.duration_minutes,
            source=result.source,
        )


class ProgressMessage(BaseModel):
    """Stream message carrying one progress event."""

    type: Literal["progress"] = "progress"
    phase: Phase
    percent: int
    message: str
    detail: dict[str, Any] | None = None


class ResultMessage(BaseModel):
    """Terminal stream message carrying the transcript."""

    type: Literal["result"] = "result"
    result: TranscriptionResponse


class ErrorMessage(BaseModel):
    """Terminal stream message describing why the run failed."""

    type: Literal["error"] = "error"
    message: str


StreamMessage = Annotated[
    Union[ProgressMessage, ResultMessage, ErrorMessage], Field(discriminator="type")
]
