"""
Marketplace Context
===================

Everything a service needs to act on behalf of one profile (one
browser-profile equivalent): the shared store, the profile id that scopes the
session and the cart, the clock, the event bus and the password hasher.

Contexts are cheap; several contexts may share one store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from django.utils import timezone

from .events import EventBus, LocalEventBus
from .storage import StoreInterface
from .storage.keys import cart_key, session_key

DEFAULT_PROFILE = "default"


def _default_hasher():
    from authentication.infra.security.password_hasher import DjangoPasswordHasher

    return DjangoPasswordHasher()


@dataclass
class MarketplaceContext:
    store: StoreInterface
    profile_id: str = DEFAULT_PROFILE
    clock: Callable[[], datetime] = timezone.now
    event_bus: EventBus = field(default_factory=LocalEventBus)
    password_hasher: object = field(default_factory=_default_hasher)

    def now(self) -> datetime:
        return self.clock()

    @property
    def session_key(self) -> str:
        return session_key(self.profile_id)

    @property
    def cart_key(self) -> str:
        return cart_key(self.profile_id)
