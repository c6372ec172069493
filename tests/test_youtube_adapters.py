"""Tests for the caption provider and the audio downloader."""

import os
from types import SimpleNamespace

import pytest
import requests
from youtube_transcript_api import TranscriptsDisabled
from yt_dlp.utils import DownloadError

from exceptions import CaptionsNotFoundError, InvalidSourceURLError, SourceUnavailableError
from infrastructure import ytdlp_downloader
from infrastructure.youtube_captions import YouTubeCaptionProvider
from infrastructure.ytdlp_downloader import DOWNLOAD_BLOCKED_MESSAGE, YtDlpAudioDownloader

VIDEO_ID = "dQw4w9WgXcQ"


class FakeTranscript:
    def __init__(self, language_code, lines, is_generated=False):
        self.language_code = language_code
        self.is_generated = is_generated
        self._lines = lines

    def fetch(self):
        return [SimpleNamespace(text=line, start=0.0, duration=1.0) for line in self._lines]


class FakeTranscriptList:
    def __init__(self, transcripts):
        self._transcripts = transcripts

    def __iter__(self):
        return iter(self._transcripts)

    def find_transcript(self, language_codes):
        for transcript in self._transcripts:
            if transcript.language_code in language_codes:
                return transcript
        raise TranscriptsDisabled(VIDEO_ID)


class FakeTranscriptApi:
    def __init__(self, transcripts=None, error=None):
        self._transcripts = transcripts or []
        self._error = error
        self.listed = []

    def list(self, video_id):
        self.listed.append(video_id)
        if self._error:
            raise self._error
        return FakeTranscriptList(self._transcripts)


class TestYouTubeCaptionProvider:
    def test_fetches_requested_language(self):
        api = FakeTranscriptApi(
            [FakeTranscript("en", ["hello"]), FakeTranscript("ja", [" こんにちは ", "", "世界"])]
        )

        captions = YouTubeCaptionProvider(api).tracks(VIDEO_ID).fetch("ja")

        assert captions.text == "こんにちは\n世界"
        assert captions.language == "ja"
        assert captions.video_id == VIDEO_ID

    def test_any_language_takes_the_first_track(self):
        api = FakeTranscriptApi([FakeTranscript("de", ["hallo"], is_generated=True)])

        captions = YouTubeCaptionProvider(api).tracks(VIDEO_ID).fetch()

        assert captions.language == "de"

    def test_missing_language(self):
        api = FakeTranscriptApi([FakeTranscript("en", ["hello"])])

        with pytest.raises(CaptionsNotFoundError):
            YouTubeCaptionProvider(api).tracks(VIDEO_ID).fetch("ja")

    def test_no_tracks(self):
        with pytest.raises(CaptionsNotFoundError):
            YouTubeCaptionProvider(FakeTranscriptApi([])).tracks(VIDEO_ID).fetch()

    def test_blank_track(self):
        api = FakeTranscriptApi([FakeTranscript("ja", ["  ", ""])])

        with pytest.raises(CaptionsNotFoundError):
            YouTubeCaptionProvider(api).tracks(VIDEO_ID).fetch("ja")

    @pytest.mark.parametrize(
        "error", [TranscriptsDisabled(VIDEO_ID), requests.ConnectionError("offline")]
    )
    def test_retrieval_errors(self, error):
        with pytest.raises(CaptionsNotFoundError):
            YouTubeCaptionProvider(FakeTranscriptApi(error=error)).tracks(VIDEO_ID).fetch("ja")

    def test_track_list_is_requested_once(self):
        api = FakeTranscriptApi([FakeTranscript("de", ["hallo"])])
        tracks = YouTubeCaptionProvider(api).tracks(VIDEO_ID)

        for language in ("ja", "en"):
            with pytest.raises(CaptionsNotFoundError):
                tracks.fetch(language)
        captions = tracks.fetch()

        assert captions.language == "de"
        assert api.listed == [VIDEO_ID]

    def test_listing_failure_is_not_retried(self):
        api = FakeTranscriptApi(error=TranscriptsDisabled(VIDEO_ID))
        tracks = YouTubeCaptionProvider(api).tracks(VIDEO_ID)

        for language in ("ja", "en", None):
            with pytest.raises(CaptionsNotFoundError):
                tracks.fetch(language)

        assert api.listed == [VIDEO_ID]


class FakeYoutubeDL:
    instances = []
    extension = "m4a"
    error = None

    def __init__(self, options):
        self.options = options
        self.urls = []
        FakeYoutubeDL.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def extract_info(self, url, download=True):
        self.urls.append(url)
        if FakeYoutubeDL.error:
            raise FakeYoutubeDL.error
        path = self.options["outtmpl"].replace("%(ext)s", FakeYoutubeDL.extension)
        with open(path, "wb") as f:
            f.write(b"\x00" * 128)
        return {"id": VIDEO_ID, "requested_downloads": [{"filepath": path}]}

    def prepare_filename(self, info):
        raise AssertionError("filepath is reported by requested_downloads")


@pytest.fixture
def fake_ydl(monkeypatch):
    FakeYoutubeDL.instances = []
    FakeYoutubeDL.extension = "m4a"
    FakeYoutubeDL.error = None
    monkeypatch.setattr(ytdlp_downloader.yt_dlp, "YoutubeDL", FakeYoutubeDL)
    return FakeYoutubeDL


class TestYtDlpAudioDownloader:
    def test_downloads_best_audio_from_canonical_url(self, fake_ydl, tmp_path):
        path = YtDlpAudioDownloader(socket_timeout_seconds=30).download(VIDEO_ID, str(tmp_path), timeout=12.7)

        assert path == str(tmp_path / "audio.m4a")
        assert os.path.getsize(path) == 128
        ydl = fake_ydl.instances[0]
        assert ydl.urls == [f"https://www.youtube.com/watch?v={VIDEO_ID}"]
        assert ydl.options["format"].startswith("bestaudio")
        assert ydl.options["noplaylist"] is True
        assert ydl.options["socket_timeout"] == 12

    def test_invalid_id_never_reaches_yt_dlp(self, fake_ydl, tmp_path):
        with pytest.raises(InvalidSourceURLError):
            YtDlpAudioDownloader().download("--exec rm", str(tmp_path))

        assert fake_ydl.instances == []

    def test_blocked_download(self, fake_ydl, tmp_path):
        fake_ydl.error = DownloadError("Sign in to confirm you're not a bot")

        with pytest.raises(SourceUnavailableError) as exc_info:
            YtDlpAudioDownloader().download(VIDEO_ID, str(tmp_path))

        assert exc_info.value.user_message == DOWNLOAD_BLOCKED_MESSAGE

    def test_unexpected_container(self, fake_ydl, tmp_path):
        fake_ydl.extension = "mhtml"

        with pytest.raises(SourceUnavailableError):
            YtDlpAudioDownloader().download(VIDEO_ID, str(tmp_path))
