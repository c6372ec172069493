"""Abstract interface for platform-hosted caption tracks."""

from abc import ABC, abstractmethod

from domain.models import CaptionTranscript


class CaptionTracks(ABC):
    """The caption tracks of one video."""

    @abstractmethod
    def fetch(self, language: str | None = None) -> CaptionTranscript:
        """
        Fetches a caption track.

        Args:
            language: Wanted language code, or None for any available track.

        Returns:
            The caption text of the first matching track.

        Raises:
            CaptionsNotFoundError: If no matching track can be retrieved.
        """


class CaptionProvider(ABC):
    """Looks up existing caption tracks of a video."""

    @abstractmethod
    def tracks(self, video_id: str) -> CaptionTracks:
        """
        Returns the caption tracks of a video.

        The track list is requested at most once per returned object, on
        its first ``fetch``.

        Args:
            video_id: Validated video identifier.
        """
