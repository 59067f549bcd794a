"""Terminal presentation of statistics, charts and the metric log using rich."""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table
from rich.text import Text

from ..charts.renderer import AXIS_CHAR, RULE_CHAR
from ..models.session import TrackerStats

logger = logging.getLogger(__name__)

CLEAR_PROMPT = "Are you sure you want to clear all WPM history? This action cannot be undone."

STYLE_GRID = "grey50"
STYLE_LINE = "green"
STYLE_TITLE = "bold"


class ChartView:
    """Renders TypePace output to a rich console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    @property
    def width(self) -> int:
        return self.console.width

    def show_stats(self, stats: TrackerStats) -> None:
        """Print the statistics snapshot as a table."""
        table = Table(title="WPM Stats", show_header=True, header_style="bold")
        table.add_column("Metric")
        table.add_column("Session", justify="right")
        table.add_column("Average", justify="right")
        table.add_column("Chars", justify="right")
        table.add_column("History", justify="right")

        table.add_row("Manual", str(stats.current_session_manual), str(stats.current_avg_manual),
                      str(stats.manual_chars), str(stats.manual_history_size))
        table.add_row("Assisted", str(stats.current_session_assisted), str(stats.current_avg_assisted),
                      str(stats.total_chars), str(stats.assisted_history_size))

        self.console.print(table)
        self.console.print(f"Tracking: {'yes' if stats.is_tracking else 'no'}", highlight=False)
        if stats.last_session:
            self.console.print(f"Last session: {stats.last_session}", highlight=False)

    def show_charts(self, report: str) -> None:
        """Print the chart report as plain text."""
        self.console.print(Text(report), highlight=False)

    def page_charts(self, report: str) -> None:
        """Show the chart report in a scrollable pager with colored plot lines."""
        with self.console.pager(styles=True):
            self.console.print(self.style_report(report), highlight=False)

    def page_log(self, log_file: str) -> bool:
        """Show the raw metric log in a pager.

        Returns:
            False if the log could not be read
        """
        try:
            content = Path(log_file).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Could not open metric log {log_file}: {e}")
            self.error(f"Could not open WPM log file at {log_file}")
            return False

        with self.console.pager():
            self.console.print(Panel(Text(content or "(empty)"), title=log_file))
        return True

    def confirm_clear(self) -> bool:
        return Confirm.ask(CLEAR_PROMPT, console=self.console, default=False)

    def message(self, text: str) -> None:
        self.console.print(text, highlight=False)

    def error(self, text: str) -> None:
        self.console.print(f"Error: {text}", style="red", highlight=False)

    @staticmethod
    def style_report(report: str) -> Text:
        """Color plot rows, axes and titles of a rendered chart report."""
        styled = Text()
        for line in report.split("\n"):
            axis = line.find(AXIS_CHAR)
            if axis >= 0:
                styled.append(line[:axis + 1], style=STYLE_GRID)
                styled.append(line[axis + 1:], style=STYLE_LINE)
            elif RULE_CHAR in line:
                styled.append(line, style=STYLE_GRID)
            elif " WPM (" in line:
                styled.append(line, style=STYLE_TITLE)
            else:
                styled.append(line)
            styled.append("\n")
        styled.rstrip()
        return styled
