"""Infrastructure layer exports."""

from .assemblyai_transcriber import AssemblyAITranscriber
from .ffmpeg_toolkit import FFmpegToolkit
from .minio_storage import MinioStorageClient
from .openai_transcriber import OpenAITranscriber
from .progress_channel import LoggingProgressSink, QueueProgressChannel, encode_event
from .workspace import TemporaryWorkspace
from .youtube_captions import YouTubeCaptionProvider
from .ytdlp_downloader import YtDlpAudioDownloader

__all__ = [
    "AssemblyAITranscriber",
    "FFmpegToolkit",
    "LoggingProgressSink",
    "MinioStorageClient",
    "OpenAITranscriber",
    "QueueProgressChannel",
    "TemporaryWorkspace",
    "YouTubeCaptionProvider",
    "YtDlpAudioDownloader",
    "encode_event",
]
