"""Rolling WPM windows used for the idle-time display average."""

import logging
from collections import deque
from typing import Dict, Iterable, List

from ..models.metrics import Metric, MetricRecord
from .wpm import rounded_mean

logger = logging.getLogger(__name__)


class RollingWindow:
    """Fixed-capacity window of recent values with a cached rounded mean."""

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"Window capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.values = deque(maxlen=capacity)
        self.average = 0

    def push(self, value: int) -> None:
        # deque(maxlen) evicts the oldest entry on overflow
        self.values.append(value)
        self.average = rounded_mean(self.values)

    def replace(self, values: Iterable[int]) -> None:
        self.values = deque(values, maxlen=self.capacity)
        self.average = rounded_mean(self.values)

    def __len__(self) -> int:
        return len(self.values)


class RollingStatistics:
    """Maintains one rolling window per metric."""

    def __init__(self, capacity: int = 10):
        """Initialize rolling statistics.

        Args:
            capacity: How many recent sessions each window keeps
        """
        self.capacity = capacity
        self.windows: Dict[Metric, RollingWindow] = {metric: RollingWindow(capacity) for metric in Metric}
        logger.info(f"RollingStatistics initialized: {capacity} sessions per window")

    def push(self, metric: Metric, value: int) -> None:
        """Add a value to a metric's window and refresh its average."""
        self.windows[metric].push(value)
        logger.debug(f"Pushed {metric.value} wpm {value}, average now {self.windows[metric].average}")

    def reload(self, records: List[MetricRecord]) -> None:
        """Replace both windows from records ordered oldest to newest."""
        recent = records[-self.capacity:]
        for metric, window in self.windows.items():
            window.replace(record.wpm(metric) for record in recent)
        logger.debug(f"Reloaded rolling windows from {len(recent)} records")

    def average(self, metric: Metric) -> int:
        return self.windows[metric].average

    def size(self, metric: Metric) -> int:
        return len(self.windows[metric])

    def values(self, metric: Metric) -> List[int]:
        return list(self.windows[metric].values)

    def clear(self) -> None:
        for window in self.windows.values():
            window.replace([])
