"""Tests for media_splitter.py."""

import os

import pytest

from config import PipelineConfig
from conftest import FakeClock, FakeToolkit
from domain.chunk_planner import plan_chunks
from domain.deadline import Deadline
from domain.media_splitter import MediaSplitter
from exceptions import PipelineTimeoutError, SplitFailedError


@pytest.fixture
def input_path(tmp_path):
    path = tmp_path / "input.mp4"
    path.write_bytes(b"\x00" * 10)
    return str(path)


class TestMediaSplitter:
    def test_writes_one_numbered_chunk_per_window(self, tmp_path, input_path):
        toolkit = FakeToolkit()
        progress = []

        chunks = MediaSplitter(toolkit, PipelineConfig()).split(
            input_path,
            str(tmp_path),
            plan_chunks(1500.0),
            on_chunk=lambda done, total: progress.append((done, total)),
        )

        assert [os.path.basename(chunk.path) for chunk in chunks] == [
            "chunk_000.mp3",
            "chunk_001.mp3",
            "chunk_002.mp3",
        ]
        assert [chunk.duration_seconds for chunk in chunks] == [600.0, 600.0, 300.0]
        assert all(chunk.size_bytes == toolkit.chunk_bytes for chunk in chunks)
        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_reencodes_to_speech_settings(self, tmp_path, input_path):
        toolkit = FakeToolkit()

        MediaSplitter(toolkit, PipelineConfig()).split(input_path, str(tmp_path), plan_chunks(60.0))

        call = toolkit.transcode_calls[0]
        assert (call["bitrate"], call["sample_rate"], call["channels"]) == ("64k", 16000, 1)
        assert call["input_path"] == input_path

    def test_empty_plan_fails(self, tmp_path, input_path):
        with pytest.raises(SplitFailedError):
            MediaSplitter(FakeToolkit(), PipelineConfig()).split(input_path, str(tmp_path), [])

    def test_tool_failure_fails_the_split(self, tmp_path, input_path):
        toolkit = FakeToolkit()
        toolkit.fail_at = 1

        with pytest.raises(SplitFailedError) as exc_info:
            MediaSplitter(toolkit, PipelineConfig()).split(input_path, str(tmp_path), plan_chunks(1500.0))

        assert "chunk 1" in str(exc_info.value)

    def test_oversized_chunk_fails_the_split(self, tmp_path, input_path):
        toolkit = FakeToolkit()
        toolkit.chunk_bytes = 2000

        with pytest.raises(SplitFailedError):
            MediaSplitter(toolkit, PipelineConfig(max_chunk_bytes=1000)).split(
                input_path, str(tmp_path), plan_chunks(60.0)
            )

    def test_transcodes_are_bounded_by_the_deadline(self, tmp_path, input_path):
        toolkit = FakeToolkit()
        clock = FakeClock()
        deadline = Deadline(100.0, clock)
        clock.advance(40)

        MediaSplitter(toolkit, PipelineConfig()).split(
            input_path, str(tmp_path), plan_chunks(60.0), deadline
        )

        assert toolkit.transcode_calls[0]["timeout"] == pytest.approx(60.0)

    def test_expired_deadline_is_a_timeout(self, tmp_path, input_path):
        toolkit = FakeToolkit()
        clock = FakeClock()
        deadline = Deadline(100.0, clock)
        clock.advance(100)

        with pytest.raises(PipelineTimeoutError):
            MediaSplitter(toolkit, PipelineConfig()).split(
                input_path, str(tmp_path), plan_chunks(60.0), deadline
            )

        assert toolkit.transcode_calls == []

    def test_tool_timeout_at_expiry_is_a_timeout(self, tmp_path, input_path):
        toolkit = FakeToolkit()
        toolkit.fail_at = 0
        clock = FakeClock()
        deadline = Deadline(100.0, clock)
        original = toolkit.transcode_segment

        def slow_transcode(*args, **kwargs):
            clock.advance(100)
            return original(*args, **kwargs)

        toolkit.transcode_segment = slow_transcode

        with pytest.raises(PipelineTimeoutError):
            MediaSplitter(toolkit, PipelineConfig()).split(
                input_path, str(tmp_path), plan_chunks(60.0), deadline
            )
