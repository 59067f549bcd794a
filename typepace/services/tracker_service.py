"""Tracker service: the engine instance behind the status line and commands."""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from pubsub import pub

from ..charts.renderer import ChartRenderer
from ..config import TypePaceConfig
from ..models.events import EditorSignal, SignalKind
from ..models.metrics import Metric, MetricRecord
from ..models.session import TrackerStats
from ..storage.metric_log import MetricLogStore
from ..tracking.rolling import RollingStatistics
from ..tracking.scheduler import AsyncioScheduler, Scheduler
from ..tracking.session_machine import SessionStateMachine
from ..tracking.signals import DEFAULT_TOPIC_PREFIX, topic_for

logger = logging.getLogger(__name__)

DISPLAY_GLYPH = "⚡"


class TrackerService:
    """Wires the metric log, rolling statistics and session state machine.

    Lifecycle:
    1. Construct from configuration (nothing is read or subscribed yet)
    2. start() seeds the rolling averages from the log and subscribes to
       the editor signal topics
    3. close() cancels timers, drops any open session and unsubscribes

    Each instance owns its own state, so several can coexist (one per
    topic prefix).
    """

    def __init__(self,
                 config: TypePaceConfig,
                 scheduler: Optional[Scheduler] = None,
                 topic_prefix: Optional[str] = None,
                 wall_clock: Callable[[], datetime] = datetime.now,
                 on_update: Optional[Callable[[], None]] = None):
        """Initialize tracker service.

        Args:
            config: Application configuration
            scheduler: Clock and timers; defaults to the running asyncio loop
            topic_prefix: Pub/sub prefix of the editor signal topics
            wall_clock: Source of record timestamps
            on_update: Called whenever the displayed values may have changed
        """
        self.config = config
        self.scheduler = scheduler or AsyncioScheduler()
        self.topic_prefix = topic_prefix or DEFAULT_TOPIC_PREFIX
        self.on_update = on_update

        self.store = MetricLogStore(config.get_log_file())
        self.rolling = RollingStatistics(config.get_average_window())
        self.machine = SessionStateMachine(
            scheduler=self.scheduler,
            rolling=self.rolling,
            store=self.store,
            min_session_seconds=config.get_min_session_seconds(),
            update_interval=config.get_update_interval_seconds(),
            idle_timeout=config.get_idle_timeout_seconds(),
            wall_clock=wall_clock,
            on_update=self._notify,
        )
        self.renderer = ChartRenderer(height=config.get_chart_height())

        self.history_reload_seconds = config.get_history_reload_seconds()
        self.last_file_size = 0
        self.last_history_reload: Optional[float] = None
        self.last_loaded: Optional[MetricRecord] = None
        self.subscribed = False

        logger.info(f"TrackerService initialized (log: {self.store.path}, topics: {self.topic_prefix}.*)")

    # Lifecycle

    def start(self) -> None:
        """Load history and start listening for editor signals."""
        self.load_history()
        if self.subscribed:
            return
        for kind in SignalKind:
            pub.subscribe(self._on_signal, topic_for(self.topic_prefix, kind))
        self.subscribed = True
        logger.info("TrackerService started")

    def close(self) -> None:
        """Cancel timers, discard the open session and stop listening."""
        self.machine.abort()
        if self.subscribed:
            for kind in SignalKind:
                pub.unsubscribe(self._on_signal, topic_for(self.topic_prefix, kind))
            self.subscribed = False
        logger.info("TrackerService closed")

    def _on_signal(self, signal: EditorSignal) -> None:
        """Handle one editor signal delivered over pub/sub."""
        try:
            if signal.kind is SignalKind.FOCUS_GAINED:
                if self.sync_history():
                    self._notify()
            else:
                self.machine.handle(signal)
        except Exception as e:
            logger.error(f"Error handling {signal.kind.value} signal: {e}", exc_info=True)

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update()

    # History

    def load_history(self) -> None:
        """Replace the rolling averages with the most recent logged sessions."""
        records = self.store.read_tail(self.rolling.capacity)
        self.rolling.reload(records)
        self.last_loaded = records[-1] if records else None
        self.last_file_size = self.store.size() or 0
        self.last_history_reload = self.scheduler.now()
        logger.debug(f"Loaded {len(records)} sessions into rolling averages")

    def should_reload_history(self) -> bool:
        """True when another instance may have written to the log.

        Compares the log size with the last seen size, and also reports
        True once history_reload_seconds have passed since the last reload.
        A missing log never triggers a reload, so the in-memory averages
        survive until the file comes back.
        """
        current_size = self.store.size()
        if current_size is None:
            return False
        now = self.scheduler.now()
        size_changed = current_size != self.last_file_size
        stale = (self.last_history_reload is None
                 or now - self.last_history_reload > self.history_reload_seconds)
        return size_changed or stale

    def sync_history(self) -> bool:
        """Reload the rolling averages if the log changed.

        Returns:
            True if a reload happened
        """
        if not self.should_reload_history():
            return False
        self.load_history()
        logger.info("Rolling averages reloaded from metric log")
        return True

    def read_history(self) -> List[MetricRecord]:
        """Every recorded session, oldest first."""
        return self.store.read_all()

    def clear_history(self) -> bool:
        """Drop the open session, reset the averages and truncate the log.

        Returns:
            True if the log file was truncated
        """
        self.machine.abort()
        self.rolling.clear()
        self.last_loaded = None
        self.machine.last_record = None
        cleared = self.store.clear()
        self.last_file_size = 0
        self._notify()
        return cleared

    # Read-outs

    def get_current_wpm_for(self, metric: Metric) -> int:
        """Live session WPM while typing, otherwise the rolling average."""
        session_wpm = self.machine.session_wpm[metric]
        if self.machine.is_tracking and session_wpm > 0:
            return session_wpm
        return self.rolling.average(metric)

    def get_current_manual_wpm(self) -> int:
        return self.get_current_wpm_for(Metric.MANUAL)

    def get_current_assisted_wpm(self) -> int:
        return self.get_current_wpm_for(Metric.ASSISTED)

    def get_current_wpm(self) -> int:
        return self.get_current_assisted_wpm()

    def get_wpm_display(self) -> str:
        """Short status-line text, empty when there is nothing to show."""
        wpm = self.get_current_wpm()
        if wpm == 0:
            return ""
        return f"{DISPLAY_GLYPH}{wpm} wpm"

    def is_tracking(self) -> bool:
        return self.machine.is_tracking

    def get_stats(self) -> TrackerStats:
        session = self.machine.session
        last_record = self.machine.last_record or self.last_loaded
        return TrackerStats(
            current_avg_manual=self.rolling.average(Metric.MANUAL),
            current_avg_assisted=self.rolling.average(Metric.ASSISTED),
            current_session_manual=self.machine.session_wpm[Metric.MANUAL],
            current_session_assisted=self.machine.session_wpm[Metric.ASSISTED],
            is_tracking=self.machine.is_tracking,
            manual_history_size=self.rolling.size(Metric.MANUAL),
            assisted_history_size=self.rolling.size(Metric.ASSISTED),
            manual_chars=session.manual_chars if session else 0,
            total_chars=session.total_chars if session else 0,
            last_session=last_record.timestamp if last_record else None,
        )

    # Charts

    def render_charts(self, max_points: Optional[int] = None, columns: Optional[int] = None) -> str:
        """Render both history charts as text."""
        if columns is not None:
            self.renderer.columns = columns
        return self.renderer.render_report(self.read_history(), max_points)
