"""Typing session tracking: timers, counters and rolling averages."""

from .wpm import calculate_wpm, rounded_mean
from .rolling import RollingStatistics, RollingWindow
from .scheduler import Scheduler, TimerHandle, AsyncioScheduler, ManualScheduler
from .signals import SignalSource, EditorSignalPublisher, topic_for
from .session_machine import SessionStateMachine, TimerKind

__all__ = [
    'calculate_wpm',
    'rounded_mean',
    'RollingStatistics',
    'RollingWindow',
    'Scheduler',
    'TimerHandle',
    'AsyncioScheduler',
    'ManualScheduler',
    'SignalSource',
    'EditorSignalPublisher',
    'topic_for',
    'SessionStateMachine',
    'TimerKind',
]
