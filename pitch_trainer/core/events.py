"""Event system for Pitch Trainer components."""

from typing import Dict, List, Callable, Any
from enum import Enum, auto

from ..logger import get_logger

logger = get_logger(__name__)


class DetectionEventType(Enum):
    """Event types published by an analysis session."""

    RESULT = auto()
    ERROR = auto()


class EventEmitter:
    """Event emitter for Pitch Trainer components."""

    def __init__(self):
        self._listeners: Dict[Any, List[Callable]] = {}

    def on(self, event_type: Any, callback: Callable) -> None:
        """Register a callback for an event type.

        Args:
            event_type: Event type to listen for
            callback: Function to call when the event occurs
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []

        if callback not in self._listeners[event_type]:
            self._listeners[event_type].append(callback)
            logger.debug(f"Added listener for event {event_type}")

    def off(self, event_type: Any, callback: Callable) -> None:
        """Remove a previously registered callback, if present."""
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def emit(self, event_type: Any, *args, **kwargs) -> None:
        """Emit an event.

        A listener that raises is logged and the remaining listeners still run.
        """
        for callback in list(self._listeners.get(event_type, [])):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error in event listener for {event_type}: {e}", exc_info=True
                )

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners = {}
        logger.debug("Cleared all event listeners")


class DetectionEvents:
    """Output sink for detection results and user-facing errors."""

    def __init__(self):
        self._emitter = EventEmitter()

    def on_result(self, callback: Callable) -> None:
        """Register a callback receiving every DetectionResult."""
        self._emitter.on(DetectionEventType.RESULT, callback)

    def on_error(self, callback: Callable) -> None:
        """Register a callback receiving user-facing error messages."""
        self._emitter.on(DetectionEventType.ERROR, callback)

    def emit_result(self, result) -> None:
        self._emitter.emit(DetectionEventType.RESULT, result)

    def emit_error(self, message: str) -> None:
        self._emitter.emit(DetectionEventType.ERROR, message)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._emitter.clear()
