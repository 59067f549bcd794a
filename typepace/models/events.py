"""Event models for the editor signal pub/sub layer."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SignalKind(Enum):
    """Editor occurrences the tracker reacts to."""
    TYPING_STARTED = "typing_started"    # Entered edit mode
    CHAR_TYPED = "char_typed"            # One character typed by hand
    CONTENT_CHANGED = "content_changed"  # Buffer text changed while editing
    TYPING_ENDED = "typing_ended"        # Left edit mode
    FOCUS_GAINED = "focus_gained"        # Window regained focus
    SHUTDOWN = "shutdown"                # Host is exiting


@dataclass
class EditorSignal:
    """A single editor occurrence with optional buffer size."""
    kind: SignalKind
    buffer_size: Optional[int] = None  # Characters in the buffer, when known
    timestamp: float = field(default_factory=time.time)
