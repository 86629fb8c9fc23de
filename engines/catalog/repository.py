"""
EventDesk Catalog Engine - Repository
=======================================
Owns the four collections and their id counters.

One EventCatalog is constructed per process and passed to whoever
needs it; there are no module-level collections or counters.

LOAD:
1. Decode every record kind (malformed lines are skipped)
2. Drop duplicate ids, keeping the first occurrence
3. Advance each id counter to max(existing ids) + 1
4. Recompute every item's allocated quantity from the event ledgers
5. Make sure each attendee id is claimed by at most one event

SAVE:
Each kind is encoded with the configured encoder and written as a
whole document. Collection mutators here never save; the service
decides when a mutation is durable.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.config.settings import DEFAULT_FILE_NAMES
from core.primitives.attendee import Attendee
from core.primitives.event import Event
from core.primitives.inventory import InventoryItem
from core.primitives.user import User
from core.records.backend import RecordBackend
from core.records.codec import (
    DecodeReport,
    Encoder,
    RecordKind,
    decode_lines,
    encode_all,
)

logger = logging.getLogger("eventdesk.catalog")

_ID_ATTRIBUTES: Dict[RecordKind, str] = {
    RecordKind.USERS: "user_id",
    RecordKind.EVENTS: "event_id",
    RecordKind.ATTENDEES: "attendee_id",
    RecordKind.INVENTORY: "item_id",
}


class EventCatalog:
    """
    In-memory collections backed by a RecordBackend.

    Collections are insertion-ordered dicts keyed by id, so listings
    follow file order and new records append at the end.
    """

    def __init__(
        self,
        backend: RecordBackend,
        file_names: Optional[Mapping[RecordKind, str]] = None,
        encoder: Encoder = encode_all,
    ) -> None:
        self._backend = backend
        self._file_names: Dict[RecordKind, str] = dict(file_names or DEFAULT_FILE_NAMES)
        self._encoder = encoder
        self._users: Dict[int, User] = {}
        self._events: Dict[int, Event] = {}
        self._attendees: Dict[int, Attendee] = {}
        self._items: Dict[int, InventoryItem] = {}
        self._next_ids: Dict[RecordKind, int] = {kind: 1 for kind in RecordKind}

    @property
    def backend(self) -> RecordBackend:
        return self._backend

    def _collection(self, kind: RecordKind) -> Dict[int, Any]:
        return {
            RecordKind.USERS: self._users,
            RecordKind.EVENTS: self._events,
            RecordKind.ATTENDEES: self._attendees,
            RecordKind.INVENTORY: self._items,
        }[kind]

    # ══════════════════════════════════════════════════════════
    # ID COUNTERS
    # ══════════════════════════════════════════════════════════

    def next_id(self, kind: RecordKind) -> int:
        """Hand out the next id for `kind`. Ids are never reused."""
        value = self._next_ids[kind]
        self._next_ids[kind] = value + 1
        return value

    def peek_next_id(self, kind: RecordKind) -> int:
        return self._next_ids[kind]

    def _advance_counter(self, kind: RecordKind, used_id: int) -> None:
        if used_id >= self._next_ids[kind]:
            self._next_ids[kind] = used_id + 1

    # ══════════════════════════════════════════════════════════
    # LOAD / SAVE
    # ══════════════════════════════════════════════════════════

    def load(self) -> Dict[RecordKind, DecodeReport]:
        """Replace all collections with what the backend holds."""
        reports: Dict[RecordKind, DecodeReport] = {}
        for kind in RecordKind:
            lines = self._backend.read_lines(self._file_names[kind])
            report = decode_lines(kind, lines)
            reports[kind] = report

            collection = self._collection(kind)
            collection.clear()
            attribute = _ID_ATTRIBUTES[kind]
            for record in report.records:
                record_id = getattr(record, attribute)
                if record_id in collection:
                    logger.warning(
                        "Duplicate %s id %s; keeping the first record.",
                        kind.value, record_id,
                    )
                    continue
                collection[record_id] = record

            # Counters only move forward; ids freed since the last load stay retired.
            self._next_ids[kind] = max(
                self._next_ids[kind], max(collection, default=0) + 1,
            )

        self.recompute_allocations()
        self._reconcile_event_membership()
        logger.info(
            "Loaded %d users, %d events, %d attendees, %d items.",
            len(self._users), len(self._events),
            len(self._attendees), len(self._items),
        )
        return reports

    def recompute_allocations(self) -> None:
        """Rebuild every item's allocated quantity from the event ledgers."""
        for item in self._items.values():
            item.allocated_quantity = 0
        for event in self._events.values():
            for item_id, quantity in list(event.allocated_inventory.items()):
                item = self._items.get(item_id)
                if item is None:
                    logger.debug(
                        "Event %s allocates unknown item %s; entry dropped.",
                        event.event_id, item_id,
                    )
                    del event.allocated_inventory[item_id]
                    continue
                item.allocated_quantity += quantity
        for item in self._items.values():
            if item.allocated_quantity > item.total_quantity:
                logger.warning(
                    "Item '%s' is over-allocated: %d allocated, %d total.",
                    item.name, item.allocated_quantity, item.total_quantity,
                )

    def _reconcile_event_membership(self) -> None:
        claims: Dict[int, List[int]] = {}
        for event in self._events.values():
            for attendee_id in event.attendee_ids:
                claims.setdefault(attendee_id, []).append(event.event_id)

        for attendee_id, event_ids in claims.items():
            if len(event_ids) < 2:
                continue
            attendee = self._attendees.get(attendee_id)
            if attendee is not None and attendee.event_id in event_ids:
                keeper = attendee.event_id
            else:
                keeper = min(event_ids)
            for event_id in event_ids:
                if event_id != keeper:
                    self._events[event_id].remove_attendee(attendee_id)
            logger.warning(
                "Attendee %s was listed by events %s; kept in event %s.",
                attendee_id, sorted(event_ids), keeper,
            )

    def save(self, *kinds: RecordKind) -> None:
        """Write the given kinds (all kinds when none are given)."""
        for kind in kinds or tuple(RecordKind):
            self._write(kind, self._file_names[kind], self._encoder)
            logger.info("Saved %s.", kind.value)

    def export(
        self,
        names: Mapping[RecordKind, str],
        encoder: Encoder,
        kinds: Iterable[RecordKind] = tuple(RecordKind),
    ) -> None:
        """Write `kinds` under `names` with `encoder`; the data files are untouched."""
        for kind in kinds:
            self._write(kind, names[kind], encoder)

    def _write(self, kind: RecordKind, name: str, encoder: Encoder) -> None:
        records = list(self._collection(kind).values())
        self._backend.write_text(name, encoder(kind, records))

    # ══════════════════════════════════════════════════════════
    # USERS
    # ══════════════════════════════════════════════════════════

    def list_users(self) -> List[User]:
        return list(self._users.values())

    def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    def find_user(self, username: str) -> Optional[User]:
        wanted = username.lower()
        for user in self._users.values():
            if user.username.lower() == wanted:
                return user
        return None

    def add_user(self, user: User) -> None:
        self._users[user.user_id] = user
        self._advance_counter(RecordKind.USERS, user.user_id)

    def replace_user(self, user: User) -> None:
        if user.user_id not in self._users:
            raise KeyError(user.user_id)
        self._users[user.user_id] = user

    def remove_user(self, user_id: int) -> Optional[User]:
        return self._users.pop(user_id, None)

    # ══════════════════════════════════════════════════════════
    # EVENTS
    # ══════════════════════════════════════════════════════════

    def list_events(self) -> List[Event]:
        return list(self._events.values())

    def get_event(self, event_id: int) -> Optional[Event]:
        return self._events.get(event_id)

    def add_event(self, event: Event) -> None:
        self._events[event.event_id] = event
        self._advance_counter(RecordKind.EVENTS, event.event_id)

    def remove_event(self, event_id: int) -> Optional[Event]:
        return self._events.pop(event_id, None)

    def event_holding_attendee(self, attendee_id: int) -> Optional[Event]:
        for event in self._events.values():
            if attendee_id in event.attendee_ids:
                return event
        return None

    # ══════════════════════════════════════════════════════════
    # ATTENDEES
    # ══════════════════════════════════════════════════════════

    def list_attendees(self) -> List[Attendee]:
        return list(self._attendees.values())

    def get_attendee(self, attendee_id: int) -> Optional[Attendee]:
        return self._attendees.get(attendee_id)

    def attendees_named(self, name: str) -> List[Attendee]:
        wanted = name.lower()
        return [a for a in self._attendees.values() if a.name.lower() == wanted]

    def add_attendee(self, attendee: Attendee) -> None:
        self._attendees[attendee.attendee_id] = attendee
        self._advance_counter(RecordKind.ATTENDEES, attendee.attendee_id)

    def remove_attendee(self, attendee_id: int) -> Optional[Attendee]:
        return self._attendees.pop(attendee_id, None)

    def remove_attendees_for_event(self, event_id: int) -> List[int]:
        """Drop every attendee record pointing at `event_id`; return their ids."""
        removed = [
            attendee_id
            for attendee_id, attendee in self._attendees.items()
            if attendee.event_id == event_id
        ]
        for attendee_id in removed:
            del self._attendees[attendee_id]
        return removed

    # ══════════════════════════════════════════════════════════
    # INVENTORY
    # ══════════════════════════════════════════════════════════

    def list_items(self) -> List[InventoryItem]:
        return list(self._items.values())

    def get_item(self, item_id: int) -> Optional[InventoryItem]:
        return self._items.get(item_id)

    def find_item_by_name(self, name: str) -> Optional[InventoryItem]:
        wanted = name.lower()
        for item in self._items.values():
            if item.name.lower() == wanted:
                return item
        return None

    def add_item(self, item: InventoryItem) -> None:
        self._items[item.item_id] = item
        self._advance_counter(RecordKind.INVENTORY, item.item_id)

    # ══════════════════════════════════════════════════════════
    # STATE
    # ══════════════════════════════════════════════════════════

    def is_empty(self, kind: RecordKind) -> bool:
        return not self._collection(kind)

    def counts(self) -> Dict[str, int]:
        return {kind.value: len(self._collection(kind)) for kind in RecordKind}


def iter_ledger(events: Iterable[Event]):
    """Yield (event, item_id, quantity) for every ledger entry."""
    for event in events:
        for item_id, quantity in sorted(event.allocated_inventory.items()):
            yield event, item_id, quantity
