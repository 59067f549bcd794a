"""Metric-related data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class Metric(Enum):
    """The two throughput metrics tracked per session."""
    MANUAL = "manual"
    ASSISTED = "assisted"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class MetricRecord:
    """One completed typing session as stored in the metric log."""
    timestamp: str  # Local time, TIMESTAMP_FORMAT
    manual_wpm: int
    assisted_wpm: int
    duration: float  # Seconds
    manual_chars: int
    total_chars: int

    def wpm(self, metric: Metric) -> int:
        """Return the WPM value for the given metric."""
        if metric is Metric.MANUAL:
            return self.manual_wpm
        return self.assisted_wpm

    @property
    def moment(self) -> Optional[datetime]:
        """Parsed timestamp, or None when the stored text is malformed."""
        try:
            return datetime.strptime(self.timestamp, TIMESTAMP_FORMAT)
        except ValueError:
            return None
