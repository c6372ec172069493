"""Custom exceptions for the transcription-api service."""


class PipelineError(Exception):
    """Base class for errors that end a transcription run."""

    user_message = "Transcription failed"

    def __init__(self, message: str | None = None, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message or self.user_message)


class InvalidInputError(PipelineError):
    """Raised when a request is rejected before any processing starts."""

    user_message = "The request is invalid"


class UnsupportedFormatError(InvalidInputError):
    """Raised when the file extension is not in the allow-list."""

    def __init__(self, file_name: str):
        self.file_name = file_name
        self.user_message = (
            "Unsupported file format. Upload an audio file (mp3, m4a, wav, ...) "
            "or a video file (mp4, mov, ...)"
        )
        super().__init__(f"Unsupported file format for '{file_name}'")


class PayloadTooLargeError(InvalidInputError):
    """Raised when the input exceeds the accepted size ceiling."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        self.user_message = (
            f"File is too large. The maximum size is {limit // (1024 * 1024)}MB"
        )
        super().__init__(f"Input of {size} bytes exceeds the {limit} byte limit")


class InvalidSourceURLError(InvalidInputError):
    """Raised when a video URL does not match any accepted shape."""

    user_message = "Enter a valid YouTube URL"

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Rejected video URL {url!r}")


class ProbeUnavailableError(PipelineError):
    """Raised when the media duration cannot be queried."""

    def __init__(self, path: str, cause: Exception | None = None):
        self.path = path
        super().__init__(f"Could not probe duration of '{path}'", cause)


class SplitFailedError(PipelineError):
    """Raised when the source media cannot be cut into chunks."""

    user_message = "Splitting the audio into parts failed"

    def __init__(self, reason: str, cause: Exception | None = None):
        self.reason = reason
        super().__init__(f"Failed to split media: {reason}", cause)


class TranscriptionBackendError(PipelineError):
    """Raised when the speech-to-text backend rejects or fails a request."""

    user_message = "The transcription service failed to process the audio"

    def __init__(self, file_name: str, cause: Exception | None = None):
        self.file_name = file_name
        super().__init__(f"Failed to transcribe audio file '{file_name}'", cause)


class AudioExtractionError(PipelineError):
    """Raised when the audio track of a small upload cannot be extracted."""

    user_message = "The audio track could not be extracted from the file"

    def __init__(self, path: str, cause: Exception | None = None):
        self.path = path
        super().__init__(f"Failed to extract audio from '{path}'", cause)


class SourceUnavailableError(PipelineError):
    """Raised when the input media cannot be retrieved."""

    def __init__(self, reason: str, user_message: str, cause: Exception | None = None):
        self.reason = reason
        self.user_message = user_message
        super().__init__(reason, cause)


class WorkspaceError(PipelineError):
    """Raised when the temporary workspace cannot be created or written."""

    user_message = "Temporary storage for the transcription could not be prepared"

    def __init__(self, path: str, cause: Exception | None = None):
        self.path = path
        super().__init__(f"Workspace operation failed at '{path}'", cause)


class PipelineTimeoutError(PipelineError):
    """Raised when a run exceeds its wall-clock budget."""

    def __init__(self, limit_seconds: float, stage: str):
        self.limit_seconds = limit_seconds
        self.stage = stage
        self.user_message = (
            f"Transcription took longer than {int(limit_seconds // 60)} minutes "
            "and was stopped"
        )
        super().__init__(f"Run exceeded {limit_seconds}s during {stage}")


class MediaToolError(Exception):
    """Raised when an ffmpeg/ffprobe invocation fails."""

    def __init__(self, tool: str, detail: str, cause: Exception | None = None):
        self.tool = tool
        self.detail = detail
        self.cause = cause
        super().__init__(f"{tool} failed: {detail}")


class CaptionsNotFoundError(Exception):
    """Raised when no caption track exists for the requested language."""

    def __init__(self, video_id: str, language: str | None):
        self.video_id = video_id
        self.language = language
        wanted = language or "any language"
        super().__init__(f"No captions in {wanted} for video '{video_id}'")
