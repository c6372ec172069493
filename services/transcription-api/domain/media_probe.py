"""Media duration probing with a size-based fallback."""

import math

from article_common.logging import setup_logging

from exceptions import ProbeUnavailableError
from infrastructure.interfaces import MediaToolkit

from .fallback import Strategy, first_successful

logger = setup_logging()

# ~128kbps; only a rough guess for when no probe is available.
NOMINAL_BYTES_PER_SECOND = 16 * 1024
MIN_ESTIMATED_SECONDS = 1.0


def estimate_duration(size_bytes: int) -> float:
    """
    Estimates a duration from the byte size at a nominal bitrate.

    This is lossy: variable-bitrate and video sources can be far off. The
    result is always at least one second.
    """
    return max(size_bytes / NOMINAL_BYTES_PER_SECOND, MIN_ESTIMATED_SECONDS)


class MediaProbe:
    """Determines how long a media file plays."""

    def __init__(self, toolkit: MediaToolkit, timeout_seconds: float = 30.0):
        self._toolkit = toolkit
        self._timeout = timeout_seconds

    def probe_duration(
        self, path: str, fallback_size_bytes: int, timeout: float | None = None
    ) -> float:
        """
        Returns the media duration in seconds.

        Asks the media toolkit first and falls back to a size-based estimate
        when the toolkit cannot answer. Never fails.

        Args:
            path: Absolute path of the media file.
            fallback_size_bytes: Byte size used for the estimate.
            timeout: Upper bound for the toolkit query.

        Returns:
            A positive duration.
        """
        limit = self._timeout if timeout is None else min(timeout, self._timeout)

        def query_toolkit() -> float:
            seconds = self._toolkit.probe_duration(path, limit)
            if not math.isfinite(seconds) or seconds <= 0:
                raise ProbeUnavailableError(path)
            return seconds

        duration = first_successful(
            "duration probe",
            [
                Strategy("toolkit", query_toolkit),
                Strategy("size estimate", lambda: estimate_duration(fallback_size_bytes)),
            ],
            recoverable=(ProbeUnavailableError,),
        )
        logger.info(
            "Media duration determined",
            extra={"path": path, "duration_seconds": round(duration, 3)},
        )
        return duration
