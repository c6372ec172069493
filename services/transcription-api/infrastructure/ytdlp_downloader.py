"""yt-dlp implementation of the AudioDownloader interface."""

import os

import yt_dlp
from article_common.logging import setup_logging
from yt_dlp.utils import YoutubeDLError

from domain.validation import ALLOWED_EXTENSIONS, file_extension, validate_video_id
from exceptions import SourceUnavailableError

from .interfaces import AudioDownloader

logger = setup_logging()

DOWNLOAD_BLOCKED_MESSAGE = (
    "No captions are available for this video and the audio download was "
    "blocked. Try another video or upload the audio file directly"
)


class YtDlpAudioDownloader(AudioDownloader):
    """Downloads audio-only streams from YouTube with yt-dlp."""

    def __init__(self, socket_timeout_seconds: int = 30):
        self._socket_timeout = socket_timeout_seconds

    def download(self, video_id: str, directory: str, timeout: float | None = None) -> str:
        # The URL is rebuilt from the validated id; user input never reaches yt-dlp.
        url = f"https://www.youtube.com/watch?v={validate_video_id(video_id)}"
        socket_timeout = self._socket_timeout
        if timeout is not None:
            socket_timeout = max(1, min(socket_timeout, int(timeout)))
        options = {
            "format": "bestaudio[ext=m4a]/bestaudio[ext=webm]/bestaudio",
            "outtmpl": os.path.join(directory, "audio.%(ext)s"),
            "noplaylist": True,
            "quiet": True,
            "no_warnings": True,
            "retries": 3,
            "fragment_retries": 3,
            "socket_timeout": socket_timeout,
        }
        try:
            with yt_dlp.YoutubeDL(options) as ydl:
                info = ydl.extract_info(url, download=True)
                downloads = info.get("requested_downloads") or []
                path = downloads[0].get("filepath") if downloads else None
                path = path or ydl.prepare_filename(info)
        except (YoutubeDLError, OSError) as e:
            logger.exception("Audio download failed", extra={"video_id": video_id})
            raise SourceUnavailableError(
                f"Audio download failed for video '{video_id}'",
                DOWNLOAD_BLOCKED_MESSAGE,
                e,
            ) from e

        if not path or not os.path.exists(path):
            raise SourceUnavailableError(
                f"Downloaded audio for video '{video_id}' is missing",
                DOWNLOAD_BLOCKED_MESSAGE,
            )
        if file_extension(path) not in ALLOWED_EXTENSIONS:
            raise SourceUnavailableError(
                f"Downloaded audio for video '{video_id}' has an unsupported format",
                "The video's audio is in a format that cannot be transcribed",
            )

        logger.info(
            "Audio downloaded",
            extra={"video_id": video_id, "path": path, "size": os.path.getsize(path)},
        )
        return path
