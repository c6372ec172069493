"""Infrastructure interface exports."""

from article_common.infrastructure.interfaces import StorageClient

from .audio_downloader import AudioDownloader
from .caption_provider import CaptionProvider, CaptionTracks
from .media_toolkit import MediaToolkit
from .progress_sink import ProgressSink
from .transcription_service import TranscriptionService

__all__ = [
    "AudioDownloader",
    "CaptionProvider",
    "CaptionTracks",
    "MediaToolkit",
    "ProgressSink",
    "StorageClient",
    "TranscriptionService",
]
