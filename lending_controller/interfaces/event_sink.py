"""Event sink protocol — observability channel abstraction."""
from typing import Any, Protocol


class EventSink(Protocol):
    """Abstract interface for receiving admin events."""

    def emit(self, event: Any) -> None: ...
