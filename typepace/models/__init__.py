"""Data models for the TypePace application."""

from .metrics import Metric, MetricRecord, TIMESTAMP_FORMAT
from .events import SignalKind, EditorSignal
from .session import TrackerState, TypingSession, TrackerStats

__all__ = [
    "Metric",
    "MetricRecord",
    "TIMESTAMP_FORMAT",
    "SignalKind",
    "EditorSignal",
    "TrackerState",
    "TypingSession",
    "TrackerStats",
]
