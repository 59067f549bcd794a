"""Editor signal source publishing occurrences over pubsub topics."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from pubsub import pub

from ..models.events import EditorSignal, SignalKind

logger = logging.getLogger(__name__)

DEFAULT_TOPIC_PREFIX = "editor"


def topic_for(prefix: str, kind: SignalKind) -> str:
    """Pub/sub topic name carrying signals of the given kind."""
    return f"{prefix}.{kind.value}"


class SignalSource(ABC):
    """Anything a host editor uses to report what the user is doing."""

    @abstractmethod
    def emit(self, signal: EditorSignal) -> None:
        """Deliver one signal to the tracker."""

    def typing_started(self, buffer_size: int = 0) -> None:
        self.emit(EditorSignal(SignalKind.TYPING_STARTED, buffer_size=buffer_size))

    def char_typed(self) -> None:
        self.emit(EditorSignal(SignalKind.CHAR_TYPED))

    def content_changed(self, buffer_size: int) -> None:
        self.emit(EditorSignal(SignalKind.CONTENT_CHANGED, buffer_size=buffer_size))

    def typing_ended(self) -> None:
        self.emit(EditorSignal(SignalKind.TYPING_ENDED))

    def focus_gained(self) -> None:
        self.emit(EditorSignal(SignalKind.FOCUS_GAINED))

    def shutdown(self) -> None:
        self.emit(EditorSignal(SignalKind.SHUTDOWN))


class EditorSignalPublisher(SignalSource):
    """Publishes editor signals using pubsub.pub, one topic per signal kind."""

    def __init__(self, topic_prefix: Optional[str] = None):
        """Initialize editor signal publisher.

        Args:
            topic_prefix: Parent topic name; subscribers must use the same prefix
        """
        self.topic_prefix = topic_prefix or DEFAULT_TOPIC_PREFIX
        logger.info(f"EditorSignalPublisher initialized with topic prefix: {self.topic_prefix}")

    def emit(self, signal: EditorSignal) -> None:
        """Publish a signal to the topic for its kind."""
        pub.sendMessage(topic_for(self.topic_prefix, signal.kind), signal=signal)
