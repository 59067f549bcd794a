"""Session-related data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class TrackerState(Enum):
    """Lifecycle state of the session state machine."""
    IDLE = "idle"
    TRACKING = "tracking"


@dataclass
class TypingSession:
    """Live counters for the session currently being tracked."""
    started: float  # Scheduler clock, seconds
    started_at: datetime
    last_activity: float
    last_buffer_size: int = 0
    manual_chars: int = 0
    total_chars: int = 0

    def elapsed(self, now: float) -> float:
        return now - self.started


@dataclass
class TrackerStats:
    """Snapshot of live and rolling statistics for display."""
    current_avg_manual: int
    current_avg_assisted: int
    current_session_manual: int
    current_session_assisted: int
    is_tracking: bool
    manual_history_size: int
    assisted_history_size: int
    manual_chars: int
    total_chars: int
    last_session: Optional[str] = None  # Timestamp of the most recent record
