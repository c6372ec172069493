"""Input validation for requests and for values passed to external processes."""

import math
import os
import re
from urllib.parse import parse_qs, urlparse

from exceptions import (
    InvalidSourceURLError,
    PayloadTooLargeError,
    UnsupportedFormatError,
)

AUDIO_EXTENSIONS = frozenset(
    {".mp3", ".m4a", ".wav", ".webm", ".ogg", ".flac", ".aac", ".caf"}
)
VIDEO_EXTENSIONS = frozenset({".mp4", ".mov", ".avi", ".mkv", ".m4v"})
ALLOWED_EXTENSIONS = AUDIO_EXTENSIONS | VIDEO_EXTENSIONS
# Containers the transcription backends read as they are.
DIRECT_EXTENSIONS = frozenset({".mp3", ".m4a", ".wav", ".webm", ".ogg", ".flac", ".mp4"})

MIME_TYPES = {
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".wav": "audio/wav",
    ".webm": "audio/webm",
    ".ogg": "audio/ogg",
    ".flac": "audio/flac",
    ".aac": "audio/aac",
    ".caf": "audio/x-caf",
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".mkv": "video/x-matroska",
    ".m4v": "video/mp4",
}

VIDEO_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{11}")
_URL_CHARSET = re.compile(r"[A-Za-z0-9:/?&=._~%#+-]+")
_WATCH_HOSTS = frozenset({"youtube.com", "www.youtube.com", "m.youtube.com"})
_SHORT_HOSTS = frozenset({"youtu.be", "www.youtu.be"})
_PATH_PREFIXES = ("/shorts/", "/embed/", "/live/")

_SECONDS_PATTERN = re.compile(r"\d{1,7}\.\d{3}")
_SAFE_FILE_NAME = re.compile(r"[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}")
_STAGED_OBJECT_NAME = re.compile(r"uploads/[0-9a-f]{32}\.[a-z0-9]{2,4}")


def file_extension(file_name: str) -> str:
    """Returns the lower-cased extension including the dot."""
    return os.path.splitext(file_name)[1].lower()


def validate_media_file(file_name: str, size: int, max_bytes: int) -> str:
    """
    Checks a media file against the extension allow-list and size ceiling.

    Returns:
        The normalized extension.

    Raises:
        UnsupportedFormatError: If the extension is not allowed.
        PayloadTooLargeError: If the size exceeds ``max_bytes``.
    """
    extension = file_extension(file_name)
    if extension not in ALLOWED_EXTENSIONS:
        raise UnsupportedFormatError(file_name)
    if size > max_bytes:
        raise PayloadTooLargeError(size, max_bytes)
    return extension


def mime_type_for(file_name: str) -> str:
    return MIME_TYPES.get(file_extension(file_name), "application/octet-stream")


def is_staged_object_name(object_name: str) -> bool:
    """True for object names issued by the upload endpoint."""
    return _STAGED_OBJECT_NAME.fullmatch(object_name) is not None


def extract_video_id(url: str) -> str:
    """
    Extracts the 11-character video id from a YouTube URL.

    Accepted shapes are ``youtube.com/watch?v=<id>``, ``youtu.be/<id>`` and
    ``youtube.com/{shorts,embed,live}/<id>``, with or without scheme.

    Raises:
        InvalidSourceURLError: For anything else, including any character
            outside the URL allow-list.
    """
    candidate = url.strip() if isinstance(url, str) else ""
    if not candidate or _URL_CHARSET.fullmatch(candidate) is None:
        raise InvalidSourceURLError(str(url))
    if "://" not in candidate:
        candidate = f"https://{candidate}"

    parsed = urlparse(candidate)
    try:
        port = parsed.port
    except ValueError:
        raise InvalidSourceURLError(url) from None
    if parsed.scheme not in ("http", "https") or port is not None:
        raise InvalidSourceURLError(url)
    host = (parsed.hostname or "").lower()

    video_id = None
    if host in _SHORT_HOSTS:
        video_id = parsed.path.lstrip("/")
    elif host in _WATCH_HOSTS:
        if parsed.path == "/watch":
            values = parse_qs(parsed.query).get("v", [])
            video_id = values[0] if len(values) == 1 else None
        else:
            for prefix in _PATH_PREFIXES:
                if parsed.path.startswith(prefix):
                    video_id = parsed.path[len(prefix) :].rstrip("/")
                    break

    if video_id is None or VIDEO_ID_PATTERN.fullmatch(video_id) is None:
        raise InvalidSourceURLError(url)
    return video_id


def validate_video_id(video_id: str) -> str:
    if VIDEO_ID_PATTERN.fullmatch(video_id) is None:
        raise InvalidSourceURLError(video_id)
    return video_id


def seconds_argument(value: float) -> str:
    """
    Formats a time value for a command line as ``<seconds>.<millis>``.

    Raises:
        ValueError: If the value is negative, not finite or too large.
    """
    if not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
        raise ValueError(f"Invalid seconds value {value!r}")
    formatted = f"{value:.3f}"
    if _SECONDS_PATTERN.fullmatch(formatted) is None:
        raise ValueError(f"Invalid seconds value {value!r}")
    return formatted


def path_argument(path: str) -> str:
    """
    Validates a file path before it is handed to an external process.

    The path must be absolute and its file name must consist of safe
    characters, so it can never be read as an option or expand in a shell.

    Raises:
        ValueError: If the path does not satisfy those rules.
    """
    if not os.path.isabs(path):
        raise ValueError(f"Path must be absolute: {path!r}")
    if _SAFE_FILE_NAME.fullmatch(os.path.basename(path)) is None:
        raise ValueError(f"Unsafe file name in path {path!r}")
    if any(ch in path for ch in ("\n", "\r", "\x00")):
        raise ValueError(f"Control character in path {path!r}")
    return path
