"""Series preparation for WPM charts: selection, outlier rejection, smoothing, resampling."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from ..models.metrics import Metric, MetricRecord

logger = logging.getLogger(__name__)

LEFT_MARGIN = 4  # Room for y-axis labels like " 80│"
MIN_WIDTH = 30
MAX_WIDTH = 120
SMOOTHING_WINDOW = 5
OUTLIER_SIGMA = 3.0


@dataclass
class ChartSeries:
    """One metric's values at every preparation stage."""
    metric: Metric
    records: List[MetricRecord]
    width: int
    raw: np.ndarray
    filtered: np.ndarray
    smoothed: np.ndarray
    resampled: np.ndarray
    mean: float
    outlier_count: int
    smoothing_window: int

    @property
    def timestamps(self) -> List[str]:
        return [record.timestamp for record in self.records]

    def __len__(self) -> int:
        return len(self.records)


def chart_width(columns: int) -> int:
    """Character width of the plot area for a display of the given width."""
    return max(MIN_WIDTH, min(MAX_WIDTH, columns - (LEFT_MARGIN + 2)))


def select_points(records: List[MetricRecord], max_points: Optional[int], width: int) -> List[MetricRecord]:
    """Keep the most recent records, at most max_points and at most width of them."""
    points = records
    if max_points is not None and len(points) > max_points:
        points = points[-max_points:]
    if len(points) > width:
        points = points[-width:]
    return points


def reject_outliers(values: np.ndarray, sigma: float = OUTLIER_SIGMA) -> Tuple[np.ndarray, float, int]:
    """Replace values outside mean ± sigma·std with the mean.

    Returns:
        Tuple of (filtered values, mean, number of replaced values)
    """
    if values.size == 0:
        return values.astype(float), 0.0, 0

    mean = float(np.mean(values))
    std = float(np.std(values))  # Population standard deviation
    outside = (values < mean - sigma * std) | (values > mean + sigma * std)
    filtered = np.where(outside, mean, values).astype(float)
    return filtered, mean, int(np.count_nonzero(outside))


def smooth(values: np.ndarray, window: int = SMOOTHING_WINDOW) -> np.ndarray:
    """Centered moving average; windows are clipped at both ends."""
    n = values.size
    if n == 0:
        return values.astype(float)

    half = max(1, min(window, n)) // 2
    cumulative = np.concatenate(([0.0], np.cumsum(values, dtype=float)))
    index = np.arange(n)
    lo = np.maximum(0, index - half)
    hi = np.minimum(n, index + half + 1)
    return (cumulative[hi] - cumulative[lo]) / (hi - lo)


def resample(values: np.ndarray, target_len: int) -> np.ndarray:
    """Bucket-average values down to target_len samples. Never upsamples."""
    n = values.size
    if n <= target_len:
        return values

    ratio = n / target_len
    index = np.arange(target_len)
    lo = np.floor(index * ratio).astype(int)
    hi = np.floor((index + 1) * ratio).astype(int)
    hi = np.maximum(hi, lo + 1)
    cumulative = np.concatenate(([0.0], np.cumsum(values, dtype=float)))
    return (cumulative[hi] - cumulative[lo]) / (hi - lo)


def build_series(records: List[MetricRecord],
                 metric: Metric,
                 max_points: Optional[int] = None,
                 columns: int = 80) -> ChartSeries:
    """Run the full preparation pipeline for one metric."""
    points = select_points(records, max_points, chart_width(columns))
    # The plot is as wide as the number of points, up to the display limit
    width = len(points)

    raw = np.array([record.wpm(metric) for record in points], dtype=float)
    filtered, mean, outlier_count = reject_outliers(raw)
    window = min(SMOOTHING_WINDOW, raw.size)
    smoothed = smooth(filtered, window)
    resampled = resample(smoothed, width * 2)

    if outlier_count:
        logger.debug(f"{metric.value}: replaced {outlier_count} outliers with mean {mean:.1f}")

    return ChartSeries(
        metric=metric,
        records=points,
        width=width,
        raw=raw,
        filtered=filtered,
        smoothed=smoothed,
        resampled=resampled,
        mean=mean,
        outlier_count=outlier_count,
        smoothing_window=window,
    )
