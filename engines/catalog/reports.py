"""
EventDesk Catalog Engine - Reports
====================================
Read-only views over the catalog.

    AttendanceReport  - per-event registrations and check-in rate
    InventoryReport   - per-item quantities plus per-event allocations

Builders take the catalog and return frozen snapshots; rendering to
text lives alongside so the shell and the exporter print the same thing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from core.primitives.event import Event
from engines.catalog.repository import EventCatalog, iter_ledger


# ══════════════════════════════════════════════════════════════
# ATTENDANCE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AttendanceRow:
    attendee_id: int
    name: str
    contact_info: str
    is_checked_in: bool
    is_known: bool = True


@dataclass(frozen=True)
class AttendanceReport:
    event_id: int
    event_name: str
    rows: Tuple[AttendanceRow, ...] = ()

    @property
    def registered_count(self) -> int:
        """Every id the event lists, including ids with no attendee record."""
        return len(self.rows)

    @property
    def checked_in_count(self) -> int:
        return sum(1 for row in self.rows if row.is_known and row.is_checked_in)

    @property
    def unknown_ids(self) -> List[int]:
        return [row.attendee_id for row in self.rows if not row.is_known]

    @property
    def attendance_percentage(self) -> float:
        if not self.rows:
            return 0.0
        return self.checked_in_count / self.registered_count * 100.0


def build_attendance_report(catalog: EventCatalog, event: Event) -> AttendanceReport:
    rows = []
    for attendee_id in sorted(event.attendee_ids):
        attendee = catalog.get_attendee(attendee_id)
        if attendee is None:
            rows.append(AttendanceRow(
                attendee_id=attendee_id, name="Unknown Attendee",
                contact_info="", is_checked_in=False, is_known=False,
            ))
            continue
        rows.append(AttendanceRow(
            attendee_id=attendee.attendee_id,
            name=attendee.name,
            contact_info=attendee.contact_info,
            is_checked_in=attendee.is_checked_in,
        ))
    return AttendanceReport(
        event_id=event.event_id, event_name=event.name, rows=tuple(rows),
    )


def render_attendance_report(report: AttendanceReport) -> str:
    lines = [
        f"--- Attendance Report for Event: {report.event_name} "
        f"(ID: {report.event_id}) ---",
    ]
    if not report.rows:
        lines.append("No attendees registered for this event.")
        return "\n".join(lines) + "\n"
    lines.append("Registered Attendees:")
    for row in report.rows:
        if row.is_known:
            lines.append(
                f"  - Name: {row.name}, Contact: {row.contact_info}, "
                f"Checked-in: {'Yes' if row.is_checked_in else 'No'}"
            )
        else:
            lines.append(f"  - Unknown Attendee (ID: {row.attendee_id})")
    lines.append("-" * 38)
    lines.append(f"Total Registered: {report.registered_count}")
    lines.append(f"Total Checked-in: {report.checked_in_count}")
    lines.append(f"Attendance Percentage: {report.attendance_percentage:.1f}%")
    return "\n".join(lines) + "\n"


def render_attendee_list(catalog: EventCatalog, event: Event) -> str:
    """Body of the per-event attendee export. Unknown ids are left out."""
    lines = [
        f"Attendee List for Event: {event.name} (ID: {event.event_id})",
        f"Date: {event.date} Time: {event.time}",
        "-" * 57,
    ]
    if not event.attendee_ids:
        lines.append("No attendees registered for this event.")
        return "\n".join(lines) + "\n"
    lines.append("ID,Name,ContactInfo,CheckedInStatus")
    for attendee_id in sorted(event.attendee_ids):
        attendee = catalog.get_attendee(attendee_id)
        if attendee is None:
            continue
        status = "Checked In" if attendee.is_checked_in else "Not Checked In"
        lines.append(
            f"{attendee.attendee_id},{attendee.name},{attendee.contact_info},{status}"
        )
    return "\n".join(lines) + "\n"


# ══════════════════════════════════════════════════════════════
# INVENTORY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class InventoryRow:
    item_id: int
    name: str
    total_quantity: int
    allocated_quantity: int
    available_quantity: int
    description: str


@dataclass(frozen=True)
class EventAllocation:
    event_id: int
    event_name: str
    item_id: int
    item_name: str
    quantity: int


@dataclass(frozen=True)
class InventoryReport:
    rows: Tuple[InventoryRow, ...] = ()
    allocations: Tuple[EventAllocation, ...] = ()

    @property
    def total_quantity(self) -> int:
        return sum(row.total_quantity for row in self.rows)

    @property
    def total_allocated(self) -> int:
        return sum(row.allocated_quantity for row in self.rows)

    @property
    def total_available(self) -> int:
        return sum(row.available_quantity for row in self.rows)


def build_inventory_report(catalog: EventCatalog) -> InventoryReport:
    rows = tuple(
        InventoryRow(
            item_id=item.item_id,
            name=item.name,
            total_quantity=item.total_quantity,
            allocated_quantity=item.allocated_quantity,
            available_quantity=item.available_quantity,
            description=item.description,
        )
        for item in catalog.list_items()
    )
    allocations = []
    for event, item_id, quantity in iter_ledger(catalog.list_events()):
        item = catalog.get_item(item_id)
        if item is None:
            continue
        allocations.append(EventAllocation(
            event_id=event.event_id,
            event_name=event.name,
            item_id=item_id,
            item_name=item.name,
            quantity=quantity,
        ))
    return InventoryReport(rows=rows, allocations=tuple(allocations))


def render_inventory_report(report: InventoryReport) -> str:
    rule = "-" * 71
    lines = ["--- Full Inventory Report ---"]
    if not report.rows:
        lines.append("No inventory items to report.")
        return "\n".join(lines) + "\n"
    lines.append("Item ID | Name              | Total | Allocated | Available | Description")
    lines.append(rule)
    for row in report.rows:
        lines.append(
            f"{row.item_id:<8}| {row.name:<17}| {row.total_quantity:>5} | "
            f"{row.allocated_quantity:>9} | {row.available_quantity:>9} | "
            f"{row.description}"
        )
    lines.append(rule)
    lines.append(
        f"Overall Totals: Total: {report.total_quantity}, "
        f"Allocated: {report.total_allocated}, "
        f"Available: {report.total_available}"
    )
    lines.append("")
    lines.append("Allocation per Event:")
    if not report.allocations:
        lines.append("  No inventory currently allocated to any event.")
    current_event = None
    for allocation in report.allocations:
        if allocation.event_id != current_event:
            current_event = allocation.event_id
            lines.append(
                f"  Event: {allocation.event_name} (ID: {allocation.event_id})"
            )
        lines.append(f"    - {allocation.item_name}: {allocation.quantity} units")
    lines.append(rule)
    return "\n".join(lines) + "\n"
