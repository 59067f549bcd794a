"""Text charts of WPM history."""

from .series import ChartSeries, build_series, reject_outliers, smooth, resample, chart_width
from .axis import AxisPlan, nice_step
from .braille import BrailleCanvas
from .renderer import ChartRenderer, NO_DATA

__all__ = [
    "ChartSeries",
    "build_series",
    "reject_outliers",
    "smooth",
    "resample",
    "chart_width",
    "AxisPlan",
    "nice_step",
    "BrailleCanvas",
    "ChartRenderer",
    "NO_DATA",
]
