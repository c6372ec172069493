"""Tests for media_probe.py."""

import pytest

from conftest import FakeToolkit
from domain.media_probe import (
    MIN_ESTIMATED_SECONDS,
    NOMINAL_BYTES_PER_SECOND,
    MediaProbe,
    estimate_duration,
)
from exceptions import ProbeUnavailableError

PATH = "/tmp/work/input.mp3"


class TestEstimateDuration:
    def test_uses_nominal_bitrate(self):
        assert estimate_duration(NOMINAL_BYTES_PER_SECOND * 90) == pytest.approx(90.0)

    def test_is_linear_in_size(self):
        assert estimate_duration(40_000_000) == pytest.approx(2 * estimate_duration(20_000_000))

    @pytest.mark.parametrize("size", [0, 1, NOMINAL_BYTES_PER_SECOND // 2])
    def test_never_below_one_second(self, size):
        assert estimate_duration(size) == MIN_ESTIMATED_SECONDS


class TestMediaProbe:
    def test_returns_toolkit_duration(self):
        toolkit = FakeToolkit()
        toolkit.duration = 1234.5

        assert MediaProbe(toolkit).probe_duration(PATH, 10) == 1234.5

    def test_falls_back_when_toolkit_is_unavailable(self):
        toolkit = FakeToolkit()
        toolkit.probe_error = ProbeUnavailableError(PATH)

        duration = MediaProbe(toolkit).probe_duration(PATH, NOMINAL_BYTES_PER_SECOND * 60)

        assert duration == pytest.approx(60.0)

    @pytest.mark.parametrize("reported", [0.0, -3.0, float("nan")])
    def test_falls_back_on_nonsense_durations(self, reported):
        toolkit = FakeToolkit()
        toolkit.duration = reported

        duration = MediaProbe(toolkit).probe_duration(PATH, NOMINAL_BYTES_PER_SECOND * 60)

        assert duration == pytest.approx(60.0)

    def test_timeout_is_the_smaller_bound(self):
        toolkit = FakeToolkit()
        probe = MediaProbe(toolkit, timeout_seconds=30.0)

        probe.probe_duration(PATH, 100, timeout=5.0)
        probe.probe_duration(PATH, 100)

        assert [call["timeout"] for call in toolkit.probe_calls] == [5.0, 30.0]

    def test_unexpected_errors_propagate(self):
        toolkit = FakeToolkit()
        toolkit.probe_error = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            MediaProbe(toolkit).probe_duration(PATH, 100)
