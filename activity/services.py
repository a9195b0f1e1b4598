"""
ActivityLogService - append-only record of marketplace mutations.

Entries are written by the marketplace event listeners and read by the
dashboards (stats) as "recent activity".
"""

import logging
import uuid
from typing import Iterable, List, Optional

from infrastructure.context import MarketplaceContext
from infrastructure.storage.keys import ACTIVITY_KEY
from utils.datetime_utils import to_iso
from utils.service_base import BaseService

logger = logging.getLogger(__name__)

ACTIVITY_TYPES = (
    "listing-created",
    "listing-updated",
    "listing-deleted",
    "listing-expired",
    "order-placed",
    "order-completed",
    "order-cancelled",
)


class ActivityLogService(BaseService):
    def __init__(self, context: MarketplaceContext):
        super().__init__()
        self.context = context

    def record(
        self,
        entry_type: str,
        message: str,
        item: dict,
        business_ids: Iterable[str] = (),
        actor_id: Optional[str] = None,
    ) -> dict:
        """Append one entry and return it."""
        if entry_type not in ACTIVITY_TYPES:
            raise ValueError(f"Unknown activity type: {entry_type}")

        entry = {
            "id": str(uuid.uuid4()),
            "type": entry_type,
            "message": message,
            "timestamp": to_iso(self.context.now()),
            "actor_id": actor_id,
            "business_ids": sorted(set(business_ids)),
            "item": {"id": item.get("id"), "name": item.get("name")},
        }
        with self.context.store.transaction():
            entries = self.context.store.get(ACTIVITY_KEY, [])
            entries.append(entry)
            self.context.store.set(ACTIVITY_KEY, entries)

        self.logger.debug(f"Activity recorded: {entry_type} {entry['item']['id']}")
        return entry

    def recent(self, limit: int = 10, business_id: Optional[str] = None) -> List[dict]:
        """Newest entries first, optionally only those touching ``business_id``."""
        entries = self.context.store.get(ACTIVITY_KEY, [])
        if business_id:
            entries = [e for e in entries if business_id in e["business_ids"]]
        # Appended in order, so reversing keeps same-timestamp entries newest first
        entries = list(reversed(entries))
        entries.sort(key=lambda e: e["timestamp"], reverse=True)
        return entries[:limit] if limit else entries
