"""Services layer for TypePace application logic."""

from .tracker_service import TrackerService

__all__ = [
    "TrackerService",
]
