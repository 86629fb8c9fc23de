"""
EventDesk Attendee Primitive - Registration Record
====================================================
Links a person to at most one event.

event_id == GENERIC_PROFILE (0) marks a generic profile: a contact
record not tied to any event. Any other value is a lookup key into
the event collection, not an ownership link.

Check-in is monotonic: False -> True, never back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger("eventdesk.primitives")

GENERIC_PROFILE = 0


@dataclass
class Attendee:
    attendee_id: int
    name: str
    contact_info: str
    event_id: int = GENERIC_PROFILE
    is_checked_in: bool = False

    @property
    def is_generic_profile(self) -> bool:
        return self.event_id == GENERIC_PROFILE

    def check_in(self) -> bool:
        """Mark as checked in. Returns False if already checked in."""
        if self.is_checked_in:
            logger.info(
                "Attendee %s already checked in for event %s.",
                self.attendee_id, self.event_id,
            )
            return False
        self.is_checked_in = True
        return True

    def to_dict(self) -> dict:
        return {
            "attendee_id": self.attendee_id,
            "name": self.name,
            "contact_info": self.contact_info,
            "event_id": self.event_id,
            "is_checked_in": self.is_checked_in,
        }
