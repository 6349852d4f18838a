"""
Vesting lifecycle events.

Operations deposit events while they run; `Blockchain` publishes them here
only after the state changes have been committed, so listeners never see
events of a rolled back operation.
"""
from typing import Any, Callable, Dict, Iterable, List, Tuple, Union
import logging
from ...protocol.types.common import EventType
from ..observability.metrics import events_total

logger = logging.getLogger(__name__)

Listener = Callable[..., None]


class EventBus:
    """
    Delivers `vesting_updated`, `vesting_completed` and
    `merged_schedule_added` events to their listeners.

    Delivery is synchronous. A failing listener is logged and skipped.
    """

    def __init__(self):
        self.listeners: Dict[EventType, List[Listener]] = {event_type: [] for event_type in EventType}

    def subscribe(self, event_type: Union[EventType, str], callback: Listener):
        """
        Call `callback(**data)` for every published event of `event_type`.

        Raises:
            ValueError: `event_type` is not a vesting event
        """
        event_type = EventType(event_type)
        self.listeners[event_type].append(callback)
        logger.debug(f"Subscribed to {event_type.value}")

    def publish(self, events: Iterable[Tuple[EventType, Dict[str, Any]]]):
        for event_type, data in events:
            self.emit(event_type, **data)

    def emit(self, event_type: Union[EventType, str], **data: Any):
        event_type = EventType(event_type)
        events_total.labels(event=event_type.value).inc()

        for callback in self.listeners[event_type]:
            try:
                callback(**data)
            except Exception as e:
                logger.error(f"Listener for {event_type.value} failed: {e}", exc_info=True)


# Default bus for nodes that do not bring their own
event_bus = EventBus()
