"""
EventDesk Records - Line Codec
================================
Converts each record to and from exactly one line of comma-separated
fields in a fixed order:

    users      id,username,password,roleCode
    events     id,name,date,time,location,description,category,statusCode,attendeeIds,allocations
    attendees  id,name,contactInfo,eventId,checkedIn(0|1)
    inventory  id,name,totalQuantity,allocatedQuantity,description

Nested collections inside one event line:

    attendeeIds  ';'-joined ints               "3;7;12"
    allocations  ';'-joined itemId:qty pairs   "2:5;9:1"

DECODING RULES:
- Absent trailing collection fields decode as empty collections
- Present but empty fields decode as empty collections
- Malformed sub-entries are logged and skipped, never fatal
- A structurally malformed line raises MalformedRecord; decode_lines
  turns that into a skip diagnostic and keeps going
- The inventory description consumes the remainder of the line
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Set

from core.errors import MalformedRecord, ValidationError
from core.primitives.attendee import Attendee
from core.primitives.event import Event, EventStatus
from core.primitives.inventory import InventoryItem
from core.primitives.user import Role, User

logger = logging.getLogger("eventdesk.records")

FIELD_SEP = ","
LIST_SEP = ";"
PAIR_SEP = ":"


class RecordKind(Enum):
    USERS = "users"
    EVENTS = "events"
    ATTENDEES = "attendees"
    INVENTORY = "inventory"


# ══════════════════════════════════════════════════════════════
# FIELD HELPERS
# ══════════════════════════════════════════════════════════════

def _parse_int(kind: RecordKind, line: str, field_name: str, text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise MalformedRecord(
            kind.value, line, f"{field_name} is not an integer: {text!r}."
        ) from None


def _split(kind: RecordKind, line: str, minimum: int, maximum: int) -> List[str]:
    parts = line.split(FIELD_SEP)
    if len(parts) < minimum:
        raise MalformedRecord(
            kind.value, line,
            f"expected at least {minimum} fields, found {len(parts)}.",
        )
    if len(parts) > maximum:
        raise MalformedRecord(
            kind.value, line,
            f"expected at most {maximum} fields, found {len(parts)}.",
        )
    return parts


def require_safe_text(field_name: str, value: str, allow_commas: bool = False) -> str:
    """
    Reject free text that would break line framing.

    Newlines always break a record; commas break every field except
    the trailing inventory description.
    """
    if not isinstance(value, str):
        raise ValidationError(field_name, value, "must be a string.")
    if "\n" in value or "\r" in value:
        raise ValidationError(field_name, value, "must not contain line breaks.")
    if not allow_commas and FIELD_SEP in value:
        raise ValidationError(field_name, value, "must not contain commas.")
    return value


# ══════════════════════════════════════════════════════════════
# NESTED COLLECTIONS
# ══════════════════════════════════════════════════════════════

def encode_attendee_ids(attendee_ids: Iterable[int]) -> str:
    return LIST_SEP.join(str(attendee_id) for attendee_id in sorted(attendee_ids))


def decode_attendee_ids(text: str) -> Set[int]:
    result: Set[int] = set()
    for entry in text.split(LIST_SEP):
        entry = entry.strip()
        if not entry:
            continue
        try:
            result.add(int(entry))
        except ValueError:
            logger.warning("Skipping malformed attendee id %r.", entry)
    return result


def encode_allocations(allocations: Dict[int, int]) -> str:
    return LIST_SEP.join(
        f"{item_id}{PAIR_SEP}{quantity}"
        for item_id, quantity in sorted(allocations.items())
        if quantity > 0
    )


def decode_allocations(text: str) -> Dict[int, int]:
    result: Dict[int, int] = {}
    for entry in text.split(LIST_SEP):
        entry = entry.strip()
        if not entry:
            continue
        item_text, sep, quantity_text = entry.partition(PAIR_SEP)
        if not sep:
            logger.warning("Skipping allocation without '%s': %r.", PAIR_SEP, entry)
            continue
        try:
            item_id = int(item_text)
            quantity = int(quantity_text)
        except ValueError:
            logger.warning("Skipping malformed allocation %r.", entry)
            continue
        if quantity <= 0:
            logger.warning("Skipping non-positive allocation %r.", entry)
            continue
        if item_id in result:
            logger.warning("Duplicate allocation for item %s; keeping last.", item_id)
        result[item_id] = quantity
    return result


# ══════════════════════════════════════════════════════════════
# USERS
# ══════════════════════════════════════════════════════════════

def encode_user(user: User) -> str:
    return FIELD_SEP.join([
        str(user.user_id), user.username, user.password, str(user.role.value),
    ])


def decode_user(line: str) -> User:
    kind = RecordKind.USERS
    parts = _split(kind, line, 4, 4)
    user_id = _parse_int(kind, line, "id", parts[0])
    role_code = _parse_int(kind, line, "role", parts[3])
    try:
        role = Role(role_code)
    except ValueError:
        raise MalformedRecord(kind.value, line, f"unknown role code {role_code}.") from None
    if not parts[1]:
        raise MalformedRecord(kind.value, line, "username is empty.")
    return User(user_id=user_id, username=parts[1], password=parts[2], role=role)


# ══════════════════════════════════════════════════════════════
# EVENTS
# ══════════════════════════════════════════════════════════════

def encode_event(event: Event) -> str:
    return FIELD_SEP.join([
        str(event.event_id),
        event.name,
        event.date,
        event.time,
        event.location,
        event.description,
        event.category,
        str(event.status.value),
        encode_attendee_ids(event.attendee_ids),
        encode_allocations(event.allocated_inventory),
    ])


def decode_event(line: str) -> Event:
    kind = RecordKind.EVENTS
    parts = _split(kind, line, 8, 10)
    event_id = _parse_int(kind, line, "id", parts[0])
    status_code = _parse_int(kind, line, "status", parts[7])
    try:
        status = EventStatus(status_code)
    except ValueError:
        raise MalformedRecord(kind.value, line, f"unknown status code {status_code}.") from None

    attendees_text = parts[8] if len(parts) > 8 else ""
    allocations_text = parts[9] if len(parts) > 9 else ""

    return Event(
        event_id=event_id,
        name=parts[1],
        date=parts[2],
        time=parts[3],
        location=parts[4],
        description=parts[5],
        category=parts[6],
        status=status,
        attendee_ids=decode_attendee_ids(attendees_text),
        allocated_inventory=decode_allocations(allocations_text),
    )


# ══════════════════════════════════════════════════════════════
# ATTENDEES
# ══════════════════════════════════════════════════════════════

def encode_attendee(attendee: Attendee) -> str:
    return FIELD_SEP.join([
        str(attendee.attendee_id),
        attendee.name,
        attendee.contact_info,
        str(attendee.event_id),
        "1" if attendee.is_checked_in else "0",
    ])


def decode_attendee(line: str) -> Attendee:
    kind = RecordKind.ATTENDEES
    parts = _split(kind, line, 4, 5)
    attendee_id = _parse_int(kind, line, "id", parts[0])
    event_id = _parse_int(kind, line, "event id", parts[3])
    flag = parts[4].strip() if len(parts) > 4 else ""
    if flag not in ("", "0", "1"):
        raise MalformedRecord(kind.value, line, f"checked-in flag must be 0 or 1, got {flag!r}.")
    return Attendee(
        attendee_id=attendee_id,
        name=parts[1],
        contact_info=parts[2],
        event_id=event_id,
        is_checked_in=flag == "1",
    )


# ══════════════════════════════════════════════════════════════
# INVENTORY
# ══════════════════════════════════════════════════════════════

def encode_inventory_item(item: InventoryItem) -> str:
    return FIELD_SEP.join([
        str(item.item_id),
        item.name,
        str(item.total_quantity),
        str(item.allocated_quantity),
        item.description,
    ])


def decode_inventory_item(line: str) -> InventoryItem:
    kind = RecordKind.INVENTORY
    # maxsplit keeps commas inside the description
    parts = line.split(FIELD_SEP, 4)
    if len(parts) < 4:
        raise MalformedRecord(
            kind.value, line, f"expected at least 4 fields, found {len(parts)}.",
        )
    item_id = _parse_int(kind, line, "id", parts[0])
    total = _parse_int(kind, line, "total quantity", parts[2])
    allocated = _parse_int(kind, line, "allocated quantity", parts[3])
    if total < 0:
        raise MalformedRecord(kind.value, line, f"negative total quantity {total}.")
    return InventoryItem(
        item_id=item_id,
        name=parts[1],
        total_quantity=total,
        allocated_quantity=allocated,
        description=parts[4] if len(parts) > 4 else "",
    )


# ══════════════════════════════════════════════════════════════
# CODEC REGISTRY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RecordCodec:
    kind: RecordKind
    encode: Callable[[Any], str]
    decode: Callable[[str], Any]


CODECS: Dict[RecordKind, RecordCodec] = {
    RecordKind.USERS: RecordCodec(RecordKind.USERS, encode_user, decode_user),
    RecordKind.EVENTS: RecordCodec(RecordKind.EVENTS, encode_event, decode_event),
    RecordKind.ATTENDEES: RecordCodec(RecordKind.ATTENDEES, encode_attendee, decode_attendee),
    RecordKind.INVENTORY: RecordCodec(
        RecordKind.INVENTORY, encode_inventory_item, decode_inventory_item,
    ),
}


@dataclass(frozen=True)
class SkippedRecord:
    """Diagnostic for one line that could not be decoded."""
    line_number: int
    line: str
    reason: str


@dataclass
class DecodeReport:
    kind: RecordKind
    records: List[Any] = field(default_factory=list)
    skipped: List[SkippedRecord] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.skipped


def decode_lines(kind: RecordKind, lines: Iterable[str]) -> DecodeReport:
    """Decode every non-blank line; malformed lines are skipped with a diagnostic."""
    codec = CODECS[kind]
    report = DecodeReport(kind=kind)
    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        try:
            report.records.append(codec.decode(line))
        except MalformedRecord as exc:
            logger.warning(
                "Skipping %s line %d: %s", kind.value, line_number, exc.detail,
            )
            report.skipped.append(
                SkippedRecord(line_number=line_number, line=line, reason=exc.detail)
            )
    return report


def encode_all(kind: RecordKind, records: Iterable[Any]) -> str:
    """Default encoder: one line per record, each newline-terminated."""
    codec = CODECS[kind]
    return "".join(codec.encode(record) + "\n" for record in records)


Encoder = Callable[[RecordKind, Iterable[Any]], str]
