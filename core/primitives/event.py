"""
EventDesk Event Primitive - Attendees and Allocation Ledger
=============================================================
An Event aggregates two relationship collections:

    attendee_ids         set of Attendee ids (no duplicates)
    allocated_inventory  item_id -> reserved quantity

ALLOCATION PROTOCOL:
- The ledger records intent only. The matching InventoryItem
  holds the reservation itself.
- allocate: the caller reserves on the item FIRST and records the
  ledger entry only when the item accepted.
- deallocate: the ledger returns the amount it actually released
  (never more than it held) and the caller releases exactly that
  amount on the item.
- Ledger entries never hold zero or negative quantities.

Cross-event attendee uniqueness is the repository's job.

This file contains NO persistence logic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Set

logger = logging.getLogger("eventdesk.primitives")


class EventStatus(Enum):
    """Lifecycle status. Values are the persisted status codes."""
    UPCOMING = 0
    ONGOING = 1
    COMPLETED = 2
    CANCELED = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def accepts_registrations(self) -> bool:
        return self not in (EventStatus.COMPLETED, EventStatus.CANCELED)


@dataclass
class Event:
    event_id: int
    name: str
    date: str
    time: str
    location: str = ""
    description: str = ""
    category: str = ""
    status: EventStatus = EventStatus.UPCOMING
    attendee_ids: Set[int] = field(default_factory=set)
    allocated_inventory: Dict[int, int] = field(default_factory=dict)

    # ── Attendees ─────────────────────────────────────────────

    def add_attendee(self, attendee_id: int) -> bool:
        """Add an attendee id. Returns False (no-op) if already present."""
        if attendee_id in self.attendee_ids:
            logger.info(
                "Attendee %s already registered for event '%s'.",
                attendee_id, self.name,
            )
            return False
        self.attendee_ids.add(attendee_id)
        return True

    def remove_attendee(self, attendee_id: int) -> bool:
        if attendee_id not in self.attendee_ids:
            return False
        self.attendee_ids.discard(attendee_id)
        return True

    # ── Allocation ledger ─────────────────────────────────────

    def allocate_inventory_item(self, item_id: int, quantity: int) -> None:
        """Additively record `quantity` units of `item_id`. Ignores quantity <= 0."""
        if quantity > 0:
            self.allocated_inventory[item_id] = (
                self.allocated_inventory.get(item_id, 0) + quantity
            )

    def deallocate_inventory_item(self, item_id: int, quantity: int) -> int:
        """
        Release up to `quantity` units of `item_id` from the ledger.

        Returns the amount actually released: min(held, quantity),
        or 0 when quantity <= 0 or nothing is held. The entry is
        removed once it reaches zero.
        """
        if quantity <= 0:
            return 0
        held = self.allocated_inventory.get(item_id)
        if held is None:
            return 0
        released = min(held, quantity)
        remaining = held - released
        if remaining <= 0:
            del self.allocated_inventory[item_id]
        else:
            self.allocated_inventory[item_id] = remaining
        return released

    def allocated_quantity_of(self, item_id: int) -> int:
        return self.allocated_inventory.get(item_id, 0)

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "name": self.name,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "description": self.description,
            "category": self.category,
            "status": self.status.label,
            "attendee_ids": sorted(self.attendee_ids),
            "allocated_inventory": dict(sorted(self.allocated_inventory.items())),
        }
