from .event_bus_interface import EventBus
from .local_event_bus import LocalEventBus


__all__ = ["EventBus", "LocalEventBus"]
