"""Unit tests for WPM arithmetic and RollingStatistics."""

import pytest

from typepace.models.metrics import Metric
from typepace.tracking.rolling import RollingStatistics, RollingWindow
from typepace.tracking.wpm import calculate_wpm, rounded_mean


@pytest.mark.unit
class TestCalculateWpm:
    """Test cases for the WPM formula."""

    @pytest.mark.parametrize("chars,seconds", [(95, 12.3), (185, 12.3), (1, 0.5), (300, 60), (7, 3.3)])
    def test_formula(self, chars, seconds):
        """Test WPM equals rounded (chars / 5) per minute."""
        expected = int((chars / 5) / (seconds / 60) + 0.5)
        assert calculate_wpm(chars, seconds) == expected

    def test_scenario_values(self):
        """Test the manual/assisted example session."""
        assert calculate_wpm(95, 12.3) == 93
        assert calculate_wpm(185, 12.3) == 180

    def test_non_positive_duration(self):
        """Test that zero or negative duration yields zero."""
        assert calculate_wpm(100, 0) == 0
        assert calculate_wpm(100, -3) == 0

    def test_half_rounds_up(self):
        """Test that exact halves round up."""
        # 5 chars in 24 s = 2.5 wpm
        assert calculate_wpm(5, 24) == 3

    def test_rounded_mean(self):
        assert rounded_mean([]) == 0
        assert rounded_mean([1, 2]) == 2
        assert rounded_mean([70, 70, 70]) == 70


@pytest.mark.unit
class TestRollingStatistics:
    """Test cases for RollingStatistics class."""

    def test_initialization(self):
        stats = RollingStatistics(capacity=4)

        assert stats.capacity == 4
        for metric in Metric:
            assert stats.average(metric) == 0
            assert stats.size(metric) == 0

    def test_push_updates_average(self):
        """Test the cached average after pushes."""
        stats = RollingStatistics(capacity=10)

        stats.push(Metric.MANUAL, 60)
        stats.push(Metric.MANUAL, 71)

        assert stats.average(Metric.MANUAL) == 66  # 65.5 rounds up
        assert stats.average(Metric.ASSISTED) == 0

    def test_capacity_never_exceeded(self):
        """Test that the oldest value is evicted on overflow."""
        stats = RollingStatistics(capacity=3)

        for value in [10, 20, 30, 40, 50]:
            stats.push(Metric.ASSISTED, value)
            assert stats.size(Metric.ASSISTED) <= 3

        assert stats.values(Metric.ASSISTED) == [30, 40, 50]
        assert stats.average(Metric.ASSISTED) == 40

    def test_identical_values_average_exactly(self):
        stats = RollingStatistics(capacity=5)
        for _ in range(8):
            stats.push(Metric.MANUAL, 87)

        assert stats.average(Metric.MANUAL) == 87

    def test_reload_replaces_windows(self, make_record):
        """Test that reload supersedes pushed values."""
        stats = RollingStatistics(capacity=10)
        stats.push(Metric.MANUAL, 500)

        stats.reload([make_record(manual_wpm=40, assisted_wpm=50), make_record(manual_wpm=61, assisted_wpm=70)])

        assert stats.values(Metric.MANUAL) == [40, 61]
        assert stats.average(Metric.MANUAL) == 51  # 50.5 rounds up
        assert stats.average(Metric.ASSISTED) == 60

    def test_reload_keeps_most_recent(self, make_record):
        """Test reload with more records than capacity."""
        stats = RollingStatistics(capacity=3)

        stats.reload([make_record(manual_wpm=v) for v in [1, 2, 3, 4, 5]])

        assert stats.values(Metric.MANUAL) == [3, 4, 5]
        assert stats.average(Metric.MANUAL) == 4

    def test_reload_empty(self, make_record):
        stats = RollingStatistics(capacity=3)
        stats.push(Metric.MANUAL, 10)

        stats.reload([])

        assert stats.size(Metric.MANUAL) == 0
        assert stats.average(Metric.MANUAL) == 0

    def test_clear(self):
        stats = RollingStatistics(capacity=3)
        stats.push(Metric.MANUAL, 10)
        stats.push(Metric.ASSISTED, 20)

        stats.clear()

        assert stats.average(Metric.MANUAL) == 0
        assert stats.average(Metric.ASSISTED) == 0

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            RollingWindow(0)
