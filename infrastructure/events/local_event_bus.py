import logging
from typing import Callable, Dict, List, Optional

from django.utils import timezone

from .event_bus_interface import EventBus


logger = logging.getLogger(__name__)


class LocalEventBus(EventBus):
    """
    Synchronous in-process event bus.

    Handlers run inside ``publish`` in subscription order and receive the
    full envelope: ``{"event_type", "occurred_at", "payload"}``.
    """

    def __init__(self, clock: Optional[Callable] = None):
        self._clock = clock or timezone.now
        self._subscribers: Dict[str, List[Callable]] = {}

    def publish(self, event_type: str, payload: dict):
        message = {"event_type": event_type, "occurred_at": self._clock().isoformat(), "payload": payload}
        handlers = self._subscribers.get(event_type, [])
        logger.info(f"Published event: {event_type} ({len(handlers)} handlers)")

        for handler in handlers:
            try:
                handler(message)
            except Exception:
                # Listener failures never reach the publisher
                logger.exception(f"Handler error for {event_type}")

    def subscribe(self, event_type: str, handler: Callable):
        self._subscribers.setdefault(event_type, []).append(handler)
        logger.debug(f"Registered handler for event: {event_type}")

    def handlers(self, event_type: str) -> List[Callable]:
        return list(self._subscribers.get(event_type, []))
