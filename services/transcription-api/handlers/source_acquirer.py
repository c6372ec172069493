"""Resolving a video URL to captions or to downloadable audio."""

from article_common.logging import setup_logging

from config import YouTubeConfig
from domain.fallback import StrategiesExhaustedError, Strategy, first_successful
from domain.models import AudioRequired, CaptionTranscript
from domain.validation import extract_video_id
from exceptions import CaptionsNotFoundError
from infrastructure.interfaces import AudioDownloader, CaptionProvider

logger = setup_logging()


class SourceAcquirer:
    """Prefers existing caption tracks and falls back to the audio stream."""

    def __init__(
        self,
        captions: CaptionProvider,
        downloader: AudioDownloader,
        config: YouTubeConfig,
    ):
        self._captions = captions
        self._downloader = downloader
        self._config = config

    def acquire(self, url: str) -> CaptionTranscript | AudioRequired:
        """
        Resolves a video URL.

        Args:
            url: A YouTube URL in one of the accepted shapes.

        Returns:
            The caption transcript when one exists, otherwise AudioRequired.

        Raises:
            InvalidSourceURLError: If the URL is rejected.
        """
        return self.acquire_video(extract_video_id(url))

    def acquire_video(self, video_id: str) -> CaptionTranscript | AudioRequired:
        """Tries the caption cascade for an already validated video id."""
        languages = [self._config.preferred_language]
        if self._config.secondary_language not in languages:
            languages.append(self._config.secondary_language)

        tracks = self._captions.tracks(video_id)
        strategies = [
            Strategy(f"captions:{lang}", lambda lang=lang: tracks.fetch(lang))
            for lang in languages
        ]
        strategies.append(Strategy("captions:any", tracks.fetch))

        try:
            captions = first_successful(
                "caption track", strategies, recoverable=(CaptionsNotFoundError,)
            )
        except StrategiesExhaustedError:
            logger.info("No captions found, audio required", extra={"video_id": video_id})
            return AudioRequired(video_id=video_id)

        logger.info(
            "Using caption track",
            extra={"video_id": video_id, "language": captions.language},
        )
        return captions

    def download_audio(
        self, required: AudioRequired, directory: str, timeout: float | None = None
    ) -> str:
        """
        Downloads the audio stream into the run's workspace.

        Raises:
            SourceUnavailableError: If the download fails.
        """
        return self._downloader.download(required.video_id, directory, timeout)
