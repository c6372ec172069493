"""youtube-transcript-api implementation of the CaptionProvider interface."""

import requests
from article_common.logging import setup_logging
from youtube_transcript_api import (
    CouldNotRetrieveTranscript,
    TranscriptList,
    YouTubeTranscriptApi,
)

from domain.models import CaptionTranscript
from exceptions import CaptionsNotFoundError

from .interfaces import CaptionProvider, CaptionTracks

logger = setup_logging()

RETRIEVAL_ERRORS = (CouldNotRetrieveTranscript, requests.RequestException)


class YouTubeCaptionTracks(CaptionTracks):
    """Caption tracks of one video, listed on first use and then reused."""

    def __init__(self, api: YouTubeTranscriptApi, video_id: str):
        self._api = api
        self._video_id = video_id
        self._listing: TranscriptList | None = None
        self._listing_error: Exception | None = None

    def fetch(self, language: str | None = None) -> CaptionTranscript:
        video_id = self._video_id
        try:
            transcripts = self._list()
            if language is not None:
                transcript = transcripts.find_transcript([language])
            else:
                transcript = next(iter(transcripts), None)
                if transcript is None:
                    raise CaptionsNotFoundError(video_id, language)
            fetched = transcript.fetch()
        except RETRIEVAL_ERRORS as e:
            logger.info(
                "Caption track unavailable",
                extra={"video_id": video_id, "language": language, "reason": type(e).__name__},
            )
            raise CaptionsNotFoundError(video_id, language) from e

        text = "\n".join(
            snippet.text.strip() for snippet in fetched if snippet.text.strip()
        )
        if not text:
            raise CaptionsNotFoundError(video_id, language)

        logger.info(
            "Caption track retrieved",
            extra={
                "video_id": video_id,
                "language": transcript.language_code,
                "generated": transcript.is_generated,
            },
        )
        return CaptionTranscript(
            video_id=video_id, language=transcript.language_code, text=text
        )

    def _list(self) -> TranscriptList:
        if self._listing_error is not None:
            raise self._listing_error
        if self._listing is None:
            try:
                self._listing = self._api.list(self._video_id)
            except RETRIEVAL_ERRORS as e:
                self._listing_error = e
                raise
        return self._listing


class YouTubeCaptionProvider(CaptionProvider):
    """Reads caption tracks that YouTube already hosts for a video."""

    def __init__(self, api: YouTubeTranscriptApi):
        self._api = api

    def tracks(self, video_id: str) -> YouTubeCaptionTracks:
        return YouTubeCaptionTracks(self._api, video_id)
