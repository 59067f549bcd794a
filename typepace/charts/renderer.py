"""Text rendering of WPM history charts."""

import logging
import math
from typing import List, Optional

from ..models.metrics import Metric, MetricRecord
from ..tracking.wpm import round_half_up
from .axis import AxisPlan
from .braille import BrailleCanvas
from .series import ChartSeries, LEFT_MARGIN, build_series

logger = logging.getLogger(__name__)

NO_DATA = "No data available for plotting"
REPORT_TITLE = "WPM Charts (raw + smoothed):"
AXIS_CHAR = "│"
RULE_CHAR = "─"
TICK_CHAR = "┬"


def short_date(timestamp: str) -> str:
    return timestamp[:10] if len(timestamp) >= 10 else timestamp


def short_time(timestamp: str) -> str:
    return timestamp[11:16] if len(timestamp) >= 16 else timestamp


def _place(cells: List[str], pos: int, text: str) -> None:
    """Write text into cells at pos, clamped so it ends inside the row when possible."""
    pos = max(0, min(len(cells) - len(text), pos))
    end = pos + len(text)
    if end > len(cells):
        cells.extend(" " * (end - len(cells)))
    cells[pos:end] = list(text)


class ChartRenderer:
    """Renders manual and assisted WPM panels as braille line charts."""

    def __init__(self, height: int = 15, columns: int = 80):
        """Initialize chart renderer.

        Args:
            height: Plot height in text rows
            columns: Display width available for each chart line
        """
        self.height = height
        self.columns = columns

    def render(self, records: List[MetricRecord], metric: Metric, max_points: Optional[int] = None) -> str:
        """Render one metric's chart, or a "no data" message."""
        if not records:
            return NO_DATA

        series = build_series(records, metric, max_points=max_points, columns=self.columns)
        return "\n".join(self.render_lines(series))

    def render_lines(self, series: ChartSeries) -> List[str]:
        axis = AxisPlan.for_values(series.resampled)
        canvas = BrailleCanvas(series.width, self.height)
        canvas.plot_line([axis.row_for(value, canvas.pixel_height) for value in series.resampled])

        lines = [self._title(series), ""]

        grid = axis.grid_rows(self.height)
        for row, glyphs in enumerate(canvas.rows()):
            tick = grid.get(row)
            label = f"{tick:3.0f}{AXIS_CHAR}" if tick is not None else f"   {AXIS_CHAR}"
            lines.append(label + glyphs)

        lines.append(" " * LEFT_MARGIN + self._x_rule(series.width))
        lines.append(" " * LEFT_MARGIN + self._x_labels(series))
        lines.append("")
        return lines

    def _title(self, series: ChartSeries) -> str:
        title = (f"{series.metric.label} WPM (n={len(series)}, avg={round_half_up(series.mean)}, "
                 f"smooth={series.smoothing_window})")
        if series.outlier_count > 0:
            title += f"  [{series.outlier_count} outliers excluded]"
        return title

    @staticmethod
    def _x_rule(width: int) -> str:
        rule = [RULE_CHAR] * width
        tick_every = max(10, width // 6)
        for i in range(0, width, tick_every):
            rule[i] = TICK_CHAR
        return "".join(rule)

    @staticmethod
    def _x_labels(series: ChartSeries) -> str:
        timestamps = series.timestamps
        first = timestamps[0]
        # Element just before the halfway point; a single point has no middle label
        middle_index = len(timestamps) // 2 - 1
        middle = timestamps[middle_index] if middle_index >= 0 else ""
        last = timestamps[-1]

        shorten = short_date if short_date(first) != short_date(last) else short_time
        first_label, middle_label, last_label = shorten(first), shorten(middle), shorten(last)

        cells = [" "] * series.width
        _place(cells, 0, first_label)
        _place(cells, math.floor(series.width / 2 - len(middle_label) / 2) - 1, middle_label)
        _place(cells, series.width - len(last_label), last_label)
        return "".join(cells)

    def render_report(self, records: List[MetricRecord], max_points: Optional[int] = None) -> str:
        """Both charts with a header and the total session count."""
        lines = [
            REPORT_TITLE,
            "=" * 60,
            "",
            self.render(records, Metric.MANUAL, max_points),
            "",
            self.render(records, Metric.ASSISTED, max_points),
            "",
            f"Total sessions: {len(records)}",
        ]
        return "\n".join(lines)
