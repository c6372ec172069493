"""ffmpeg/ffprobe implementation of the MediaToolkit interface."""

import os
import re
import shutil
import subprocess

import imageio_ffmpeg
from article_common.logging import setup_logging

from config import MediaToolkitConfig
from domain.fallback import StrategiesExhaustedError, Strategy, first_successful
from domain.validation import path_argument, seconds_argument
from exceptions import MediaToolError, ProbeUnavailableError

from .interfaces import MediaToolkit

logger = setup_logging()

_DURATION_BANNER = re.compile(r"Duration:\s*(\d+):(\d{2}):(\d{2}(?:\.\d+)?)")
_BITRATE = re.compile(r"\d{1,4}k")


def _configured_binary(path: str | None, tool: str) -> str:
    if not path:
        raise LookupError(f"No {tool} path configured")
    if not (os.path.isfile(path) and os.access(path, os.X_OK)):
        raise LookupError(f"Configured {tool} is not an executable: {path}")
    return path


def _system_binary(tool: str) -> str:
    found = shutil.which(tool)
    if not found:
        raise LookupError(f"{tool} not found on PATH")
    return found


def resolve_ffmpeg(configured: str | None = None) -> str:
    """
    Locates an ffmpeg executable.

    Tries the configured path, then the system PATH, then the binary bundled
    with imageio-ffmpeg.

    Raises:
        MediaToolError: If none of them is usable.
    """
    try:
        return first_successful(
            "ffmpeg binary",
            [
                Strategy("configured", lambda: _configured_binary(configured, "ffmpeg")),
                Strategy("system", lambda: _system_binary("ffmpeg")),
                Strategy("bundled", imageio_ffmpeg.get_ffmpeg_exe),
            ],
            recoverable=(LookupError, RuntimeError, OSError),
        )
    except StrategiesExhaustedError as e:
        raise MediaToolError("ffmpeg", "no usable ffmpeg binary", e) from e


def resolve_ffprobe(configured: str | None = None) -> str | None:
    """Locates an ffprobe executable; None when there is none."""
    try:
        return first_successful(
            "ffprobe binary",
            [
                Strategy("configured", lambda: _configured_binary(configured, "ffprobe")),
                Strategy("system", lambda: _system_binary("ffprobe")),
            ],
            recoverable=(LookupError,),
        )
    except StrategiesExhaustedError:
        return None


def parse_duration_banner(output: str) -> float:
    """
    Reads the ``Duration: HH:MM:SS.ss`` line ffmpeg prints for its input.

    Raises:
        ValueError: If the output carries no duration.
    """
    match = _DURATION_BANNER.search(output)
    if not match:
        raise ValueError("No duration in ffmpeg output")
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


class FFmpegToolkit(MediaToolkit):
    """Runs ffmpeg and ffprobe as child processes, never through a shell."""

    def __init__(self, ffmpeg_path: str | None = None, ffprobe_path: str | None = None):
        self._configured_ffmpeg = ffmpeg_path
        self._configured_ffprobe = ffprobe_path
        self._ffmpeg: str | None = None
        self._ffprobe: str | None = None
        self._ffprobe_resolved = False

    @classmethod
    def from_config(cls, config: MediaToolkitConfig) -> "FFmpegToolkit":
        return cls(config.ffmpeg_path, config.ffprobe_path)

    @property
    def ffmpeg(self) -> str:
        if self._ffmpeg is None:
            self._ffmpeg = resolve_ffmpeg(self._configured_ffmpeg)
            logger.info("Using ffmpeg binary", extra={"path": self._ffmpeg})
        return self._ffmpeg

    @property
    def ffprobe(self) -> str | None:
        if not self._ffprobe_resolved:
            self._ffprobe = resolve_ffprobe(self._configured_ffprobe)
            self._ffprobe_resolved = True
        return self._ffprobe

    def probe_duration(self, path: str, timeout: float | None = None) -> float:
        try:
            path = path_argument(path)
        except ValueError as e:
            raise ProbeUnavailableError(path, e) from e
        strategies = []
        if self.ffprobe:
            strategies.append(Strategy("ffprobe", lambda: self._ffprobe_duration(path, timeout)))
        strategies.append(Strategy("ffmpeg banner", lambda: self._banner_duration(path, timeout)))
        try:
            duration = first_successful(
                "media duration",
                strategies,
                recoverable=(MediaToolError, ValueError),
            )
        except StrategiesExhaustedError as e:
            raise ProbeUnavailableError(path, e) from e
        if duration <= 0:
            raise ProbeUnavailableError(path)
        return duration

    def transcode_segment(
        self,
        input_path: str,
        output_path: str,
        start_seconds: float,
        duration_seconds: float | None,
        bitrate: str,
        sample_rate: int,
        channels: int,
        timeout: float | None = None,
    ) -> None:
        if _BITRATE.fullmatch(bitrate) is None:
            raise ValueError(f"Invalid bitrate {bitrate!r}")
        args = [
            self.ffmpeg,
            "-nostdin",
            "-hide_banner",
            "-loglevel", "error",
            "-y",
            "-ss", seconds_argument(start_seconds),
        ]
        if duration_seconds is not None:
            args += ["-t", seconds_argument(duration_seconds)]
        args += [
            "-i", path_argument(input_path),
            "-vn",
            "-acodec", "libmp3lame",
            "-ar", str(int(sample_rate)),
            "-ac", str(int(channels)),
            "-b:a", bitrate,
            path_argument(output_path),
        ]
        self._run("ffmpeg", args, timeout)
        if not os.path.exists(output_path) or os.path.getsize(output_path) == 0:
            raise MediaToolError("ffmpeg", f"no audio written to {output_path}")

    def _ffprobe_duration(self, path: str, timeout: float | None) -> float:
        result = self._run(
            "ffprobe",
            [
                self.ffprobe,
                "-v", "error",
                "-show_entries", "format=duration",
                "-of", "default=noprint_wrappers=1:nokey=1",
                path,
            ],
            timeout,
        )
        return float(result.stdout.strip())

    def _banner_duration(self, path: str, timeout: float | None) -> float:
        # Without an output file ffmpeg exits non-zero after printing the
        # input banner, so the return code is ignored here.
        result = self._run(
            "ffmpeg", [self.ffmpeg, "-nostdin", "-hide_banner", "-i", path],
            timeout, check=False,
        )
        return parse_duration_banner(result.stderr)

    def _run(
        self, tool: str, args: list[str], timeout: float | None, check: bool = True
    ) -> subprocess.CompletedProcess:
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise MediaToolError(tool, f"timed out after {timeout:.0f}s", e) from e
        except OSError as e:
            raise MediaToolError(tool, str(e), e) from e

        if check and result.returncode != 0:
            logger.error(
                "Media tool exited with an error",
                extra={
                    "tool": tool,
                    "returncode": result.returncode,
                    "stderr": result.stderr[-500:],
                },
            )
            raise MediaToolError(tool, f"exit code {result.returncode}")
        return result
