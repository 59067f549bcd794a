"""Terminal UI components."""

from .chart_view import ChartView

__all__ = [
    "ChartView",
]
