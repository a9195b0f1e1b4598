"""
Dependency Injection Container
================================

Builds MarketplaceContexts and the MarketplaceApi on top of one shared store
and one event bus. Every context made by a container shares the store and
the activity-log listeners; contexts differ by profile (session and cart).

Usage:
    from infrastructure.container import container

    api = container.api("browser-1")
    api.login("admin@savebite.com", "admin123")
"""

import logging
from typing import Callable, Optional

from django.utils import timezone

from .context import DEFAULT_PROFILE, MarketplaceContext
from .events import EventBus, LocalEventBus
from .storage import StoreFactory, StoreInterface

logger = logging.getLogger(__name__)

SYSTEM_PROFILE = "system"


class ServiceContainer:
    """
    Service container for the marketplace.

    Implements lazy initialization and caching of the shared store and event
    bus. Services themselves are cheap and built per context.
    """

    def __init__(
        self,
        store: Optional[StoreInterface] = None,
        clock: Optional[Callable] = None,
        password_hasher=None,
    ):
        self._store = store
        self._clock = clock or timezone.now
        self._password_hasher = password_hasher
        self._event_bus: Optional[EventBus] = None
        logger.info("Service container initialized")

    def store(self) -> StoreInterface:
        """
        Get the shared store (memory or Django cache, per settings).

        Returns:
            StoreInterface implementation (cached)
        """
        if self._store is None:
            self._store = StoreFactory.create()
            logger.debug(f"Created store: {type(self._store).__name__}")
        return self._store

    def event_bus(self) -> EventBus:
        """Get the shared event bus, with the marketplace listeners registered (cached)."""
        if self._event_bus is None:
            from activity.services import ActivityLogService
            from marketplace.infra.events.listeners import register_marketplace_listeners

            self._event_bus = LocalEventBus(clock=self._clock)
            system_context = self._build_context(SYSTEM_PROFILE, self._event_bus)
            register_marketplace_listeners(self._event_bus, ActivityLogService(system_context))
            logger.debug("Created event bus")
        return self._event_bus

    def context(self, profile_id: str = DEFAULT_PROFILE) -> MarketplaceContext:
        """Context for one profile (one browser-profile equivalent)."""
        return self._build_context(profile_id, self.event_bus())

    def api(self, profile_id: str = DEFAULT_PROFILE):
        """Get a MarketplaceApi acting for ``profile_id``."""
        from marketplace.api import MarketplaceApi

        return MarketplaceApi(self.context(profile_id))

    def _build_context(self, profile_id: str, event_bus: EventBus) -> MarketplaceContext:
        kwargs = {"store": self.store(), "profile_id": profile_id, "clock": self._clock, "event_bus": event_bus}
        if self._password_hasher is not None:
            kwargs["password_hasher"] = self._password_hasher
        return MarketplaceContext(**kwargs)

    def reset(self):
        """
        Drop the cached store and event bus.

        Useful for testing or when switching between environments.
        """
        self._store = None
        self._event_bus = None
        logger.info("Service container reset")


# Global instance for scripts and management commands
container = ServiceContainer()
