"""Typing session lifecycle: counters, timers and session commit."""

import logging
from datetime import datetime
from enum import Enum
from functools import partial
from typing import Callable, Dict, Optional, Union

from ..models.events import EditorSignal, SignalKind
from ..models.metrics import Metric, MetricRecord, TIMESTAMP_FORMAT
from ..models.session import TrackerState, TypingSession
from ..storage.metric_log import MetricLogStore
from .rolling import RollingStatistics
from .scheduler import Scheduler, TimerHandle
from .wpm import calculate_wpm

logger = logging.getLogger(__name__)


class TimerKind(Enum):
    """Transitions requested by the machine's own timers."""
    IDLE_EXPIRED = "idle_expired"
    REFRESH_DUE = "refresh_due"


Trigger = Union[SignalKind, TimerKind]


class SessionStateMachine:
    """Decides what counts as a typing session and commits finished ones.

    State changes only happen in handle() and in timer requests, both of
    which go through the same (state, trigger) transition table. Timers
    carry a token; cancelling a timer invalidates its token so a callback
    that was already queued cannot touch a later session.
    """

    def __init__(self,
                 scheduler: Scheduler,
                 rolling: RollingStatistics,
                 store: MetricLogStore,
                 min_session_seconds: float = 5.0,
                 update_interval: float = 1.0,
                 idle_timeout: float = 5.0,
                 wall_clock: Callable[[], datetime] = datetime.now,
                 on_update: Optional[Callable[[], None]] = None):
        """Initialize session state machine.

        Args:
            scheduler: Clock and timer source
            rolling: Rolling statistics updated when a session is recorded
            store: Metric log that receives recorded sessions
            min_session_seconds: Shorter sessions are discarded
            update_interval: Seconds between live WPM refreshes
            idle_timeout: Seconds of inactivity that end a session with no input
            wall_clock: Source of record timestamps
            on_update: Called after live values or the state change
        """
        self.scheduler = scheduler
        self.rolling = rolling
        self.store = store
        self.min_session_seconds = min_session_seconds
        self.update_interval = update_interval
        self.idle_timeout = idle_timeout
        self.wall_clock = wall_clock
        self.on_update = on_update

        self.state = TrackerState.IDLE
        self.session: Optional[TypingSession] = None
        self.session_wpm: Dict[Metric, int] = {metric: 0 for metric in Metric}
        self.last_record: Optional[MetricRecord] = None

        self._timers: Dict[TimerKind, Optional[TimerHandle]] = {kind: None for kind in TimerKind}
        self._tokens: Dict[TimerKind, int] = {kind: 0 for kind in TimerKind}

        self._transitions: Dict[tuple, Callable[[Optional[EditorSignal]], None]] = {
            (TrackerState.IDLE, SignalKind.TYPING_STARTED): self._start_session,
            (TrackerState.TRACKING, SignalKind.CHAR_TYPED): self._count_char,
            (TrackerState.TRACKING, SignalKind.CONTENT_CHANGED): self._measure_content,
            (TrackerState.TRACKING, SignalKind.TYPING_ENDED): self._end_session,
            (TrackerState.TRACKING, SignalKind.SHUTDOWN): self._end_session,
            (TrackerState.TRACKING, TimerKind.IDLE_EXPIRED): self._idle_expired,
            (TrackerState.TRACKING, TimerKind.REFRESH_DUE): self._refresh,
        }

    @property
    def is_tracking(self) -> bool:
        return self.state is TrackerState.TRACKING

    def handle(self, signal: EditorSignal) -> TrackerState:
        """Apply an editor signal and return the resulting state."""
        return self._dispatch(signal.kind, signal)

    def _dispatch(self, trigger: Trigger, signal: Optional[EditorSignal] = None) -> TrackerState:
        handler = self._transitions.get((self.state, trigger))
        if handler is None:
            logger.debug(f"Ignoring {trigger.value} while {self.state.value}")
            return self.state
        handler(signal)
        return self.state

    # Timers

    def _arm_timer(self, kind: TimerKind, delay: float) -> None:
        self._cancel_timer(kind)
        token = self._tokens[kind]
        self._timers[kind] = self.scheduler.call_later(delay, partial(self._request, kind, token))

    def _cancel_timer(self, kind: TimerKind) -> None:
        handle = self._timers[kind]
        if handle is not None:
            handle.cancel()
        self._timers[kind] = None
        self._tokens[kind] += 1

    def _cancel_timers(self) -> None:
        for kind in TimerKind:
            self._cancel_timer(kind)

    def _request(self, kind: TimerKind, token: int) -> None:
        if token != self._tokens[kind]:
            logger.debug(f"Discarding stale {kind.value} timer")
            return
        self._timers[kind] = None
        self._dispatch(kind)

    # Transitions

    def _start_session(self, signal: Optional[EditorSignal]) -> None:
        now = self.scheduler.now()
        buffer_size = signal.buffer_size if signal and signal.buffer_size is not None else 0
        self.session = TypingSession(
            started=now,
            started_at=self.wall_clock(),
            last_activity=now,
            last_buffer_size=buffer_size,
        )
        self.session_wpm = {metric: 0 for metric in Metric}
        self.state = TrackerState.TRACKING

        self._arm_timer(TimerKind.IDLE_EXPIRED, self.idle_timeout)
        # First refresh runs right away, then every update_interval
        self._arm_timer(TimerKind.REFRESH_DUE, 0)
        logger.debug(f"Typing session started (buffer size {buffer_size})")
        self._notify()

    def _touch(self) -> None:
        self.session.last_activity = self.scheduler.now()
        self._arm_timer(TimerKind.IDLE_EXPIRED, self.idle_timeout)

    def _count_char(self, signal: Optional[EditorSignal]) -> None:
        self.session.manual_chars += 1
        self._touch()

    def _measure_content(self, signal: Optional[EditorSignal]) -> None:
        if signal is None or signal.buffer_size is None:
            logger.debug("Content change without buffer size, ignoring")
            return

        growth = signal.buffer_size - self.session.last_buffer_size
        if growth > 0:
            # All growth counts, including completions and pastes
            self.session.total_chars += growth
            self._touch()
        self.session.last_buffer_size = signal.buffer_size

    def _refresh(self, signal: Optional[EditorSignal]) -> None:
        self._update_session_wpm()
        self._notify()
        self._arm_timer(TimerKind.REFRESH_DUE, self.update_interval)

    def _idle_expired(self, signal: Optional[EditorSignal]) -> None:
        """End the session only if nothing was typed; otherwise keep it open until typing ends."""
        if self.session.manual_chars == 0 and self.session.total_chars == 0:
            logger.debug("Idle without input, ending session")
            self._end_session(signal)
            return
        logger.debug(f"Idle for {self.idle_timeout:.1f}s, session stays open")

    def _end_session(self, signal: Optional[EditorSignal]) -> None:
        self._cancel_timers()
        record = self._finalize(self.session)
        if record is not None:
            self.last_record = record

        self.session = None
        self.session_wpm = {metric: 0 for metric in Metric}
        self.state = TrackerState.IDLE
        self._notify()

    def abort(self) -> None:
        """Discard the open session, if any, without recording it."""
        self._cancel_timers()
        if self.session is not None:
            logger.debug("Typing session discarded")
        self.session = None
        self.session_wpm = {metric: 0 for metric in Metric}
        self.state = TrackerState.IDLE

    # Helpers

    def _update_session_wpm(self) -> None:
        duration = self.session.elapsed(self.scheduler.now())
        self.session_wpm = {
            Metric.MANUAL: calculate_wpm(self.session.manual_chars, duration),
            Metric.ASSISTED: calculate_wpm(self.session.total_chars, duration),
        }

    def _finalize(self, session: TypingSession) -> Optional[MetricRecord]:
        """Record the session if it is long enough and saw any input."""
        duration = session.elapsed(self.scheduler.now())

        if duration < self.min_session_seconds:
            logger.debug(f"Session too short to record: {duration:.1f}s")
            return None
        if session.manual_chars == 0 and session.total_chars == 0:
            logger.debug(f"Session without input not recorded: {duration:.1f}s")
            return None

        record = MetricRecord(
            timestamp=self.wall_clock().strftime(TIMESTAMP_FORMAT),
            manual_wpm=calculate_wpm(session.manual_chars, duration),
            assisted_wpm=calculate_wpm(session.total_chars, duration),
            duration=duration,
            manual_chars=session.manual_chars,
            total_chars=session.total_chars,
        )
        self.rolling.push(Metric.MANUAL, record.manual_wpm)
        self.rolling.push(Metric.ASSISTED, record.assisted_wpm)
        self.store.append(record)

        logger.info(f"Recorded session: {record.manual_wpm} manual / {record.assisted_wpm} assisted wpm "
                    f"over {duration:.1f}s")
        return record

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update()
