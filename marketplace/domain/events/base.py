from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class DomainEvent:
    """
    Base class for all domain events.

    Events carry no timestamp of their own; the event bus stamps each
    envelope with the acting context's clock when it is published.
    """

    event_type: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def publish(self, event_bus) -> None:
        event_bus.publish(self.event_type, self.payload)
