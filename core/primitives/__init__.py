"""
EventDesk Core Primitives - Domain Records
============================================
Pure Python records with their local invariants:

    inventory   - InventoryItem: total vs. allocated stock
    attendee    - Attendee: registration or generic contact profile
    event       - Event: attendee id set and allocation ledger
    user        - User: operator account tagged with a Role

Cross-record consistency (allocation totals, attendee uniqueness
across events, id counters) belongs to the catalog repository.
"""

from core.primitives.attendee import GENERIC_PROFILE, Attendee
from core.primitives.event import Event, EventStatus
from core.primitives.inventory import InventoryItem
from core.primitives.user import MIN_PASSWORD_LENGTH, Role, User

__all__ = [
    "Attendee",
    "GENERIC_PROFILE",
    "Event",
    "EventStatus",
    "InventoryItem",
    "MIN_PASSWORD_LENGTH",
    "Role",
    "User",
]
