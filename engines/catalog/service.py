"""
EventDesk Catalog Engine - Application Service
================================================
Every user-facing operation on events, attendees, inventory and
accounts goes through CatalogService.

CONTRACT:
- Expected business conditions return a REJECTED OperationOutcome
  and leave state unchanged
- Malformed input (bad date/time, framing characters in free text)
  raises ValidationError before anything is touched
- Privileged operations take the acting User and are REJECTED with
  PERMISSION_DENIED for non-admins
- Every accepted durable mutation saves the affected collections
  before returning

ALLOCATION ORDER:
    allocate:    item.allocate(qty) -> ledger.allocate   (item first)
    deallocate:  ledger.release(qty) -> item.deallocate(released)
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from core.commands.outcomes import OperationOutcome
from core.commands.rejection import ReasonCode
from core.config.settings import DEFAULT_EXPORT_NAMES
from core.errors import ValidationError
from core.primitives.attendee import GENERIC_PROFILE, Attendee
from core.primitives.event import Event, EventStatus
from core.primitives.inventory import InventoryItem
from core.primitives.user import Role, User
from core.records.codec import Encoder, RecordKind, encode_all, require_safe_text
from core.time.temporal import require_valid_date, require_valid_time
from engines.catalog.policies import (
    admin_only_policy,
    check_in_policy,
    password_length_policy,
    registration_open_policy,
    regular_user_policy,
    self_deletion_policy,
    unique_username_policy,
)
from engines.catalog.reports import (
    AttendanceReport,
    InventoryReport,
    build_attendance_report,
    build_inventory_report,
    render_attendee_list,
)
from engines.catalog.repository import EventCatalog

logger = logging.getLogger("eventdesk.catalog")

EDITABLE_EVENT_FIELDS = ("name", "date", "time", "location", "description", "category")


@dataclass(frozen=True)
class CascadeResult:
    """What delete_event released and removed."""
    event_id: int
    released: Tuple[Tuple[int, int], ...] = ()
    removed_attendee_ids: Tuple[int, ...] = ()


def _not_found(what: str, key: Any, policy_name: str) -> OperationOutcome:
    return OperationOutcome.reject(
        ReasonCode.NOT_FOUND, f"{what} {key} not found.", policy_name,
    )


class CatalogService:
    """
    Operations over one EventCatalog.

    The catalog is passed in; the service keeps no state of its own.
    """

    def __init__(
        self,
        catalog: EventCatalog,
        export_names: Optional[Mapping[RecordKind, str]] = None,
    ) -> None:
        self._catalog = catalog
        self._export_names = dict(export_names or DEFAULT_EXPORT_NAMES)

    @property
    def catalog(self) -> EventCatalog:
        return self._catalog

    # ══════════════════════════════════════════════════════════
    # SEEDING
    # ══════════════════════════════════════════════════════════

    def seed_initial_data(self) -> List[RecordKind]:
        """Populate empty collections with demo data. Returns the seeded kinds."""
        catalog = self._catalog
        seeded: List[RecordKind] = []

        if catalog.is_empty(RecordKind.USERS):
            for username, password, role in (
                ("admin", "adminpass", Role.ADMIN),
                ("user1", "user1pass", Role.REGULAR_USER),
                ("user2", "user2pass", Role.REGULAR_USER),
            ):
                catalog.add_user(User(
                    user_id=catalog.next_id(RecordKind.USERS),
                    username=username, password=password, role=role,
                ))
            seeded.append(RecordKind.USERS)

        if catalog.is_empty(RecordKind.EVENTS):
            for name, date, time, location, description, category in (
                ("Tech Conference 2025", "2025-10-20", "09:00", "Grand Hall",
                 "Annual tech conference", "Conference"),
                ("Summer Music Festival", "2025-07-15", "14:00", "City Park",
                 "Outdoor music event", "Social"),
            ):
                catalog.add_event(Event(
                    event_id=catalog.next_id(RecordKind.EVENTS),
                    name=name, date=date, time=time, location=location,
                    description=description, category=category,
                ))
            seeded.append(RecordKind.EVENTS)

        if catalog.is_empty(RecordKind.INVENTORY):
            for name, quantity, description in (
                ("Projector", 5, "HD Projector"),
                ("Chairs", 100, "Standard chairs"),
            ):
                catalog.add_item(InventoryItem(
                    item_id=catalog.next_id(RecordKind.INVENTORY),
                    name=name, total_quantity=quantity, description=description,
                ))
            seeded.append(RecordKind.INVENTORY)

        if seeded:
            catalog.save(*seeded)
            logger.info("Seeded %s.", ", ".join(kind.value for kind in seeded))
        return seeded

    # ══════════════════════════════════════════════════════════
    # ACCOUNTS
    # ══════════════════════════════════════════════════════════

    def authenticate(self, username: str, password: str) -> OperationOutcome:
        user = self._catalog.find_user(username)
        if user is None or user.password != password:
            logger.info("Failed login for '%s'.", username)
            return OperationOutcome.reject(
                ReasonCode.INVALID_CREDENTIALS,
                "Invalid username or password.",
                "authenticate",
            )
        return OperationOutcome.accept(user)

    def create_user(
        self, username: str, password: str, role: Role, *, actor: User,
    ) -> OperationOutcome:
        """Admins create accounts of either role."""
        reason = admin_only_policy(actor, "create user accounts")
        if reason:
            return OperationOutcome.from_reason(reason)
        return self._create_user(username, password, role)

    def register_account(self, username: str, password: str) -> OperationOutcome:
        """Self-service sign-up. Always creates a regular user."""
        return self._create_user(username, password, Role.REGULAR_USER)

    def _create_user(self, username: str, password: str, role: Role) -> OperationOutcome:
        require_safe_text("username", username)
        require_safe_text("password", password)
        if not username.strip():
            raise ValidationError("username", username, "must not be empty.")
        if not isinstance(role, Role):
            raise ValidationError("role", role, "must be a Role.")

        reason = (
            unique_username_policy(username, self._catalog.list_users())
            or password_length_policy(password)
        )
        if reason:
            return OperationOutcome.from_reason(reason)

        user = User(
            user_id=self._catalog.next_id(RecordKind.USERS),
            username=username, password=password, role=role,
        )
        self._catalog.add_user(user)
        self._catalog.save(RecordKind.USERS)
        logger.info("Created %s '%s' (ID: %s).", role.label, username, user.user_id)
        return OperationOutcome.accept(user)

    def delete_user(self, username: str, *, actor: User) -> OperationOutcome:
        reason = admin_only_policy(actor, "delete user accounts")
        if reason:
            return OperationOutcome.from_reason(reason)
        target = self._catalog.find_user(username)
        if target is None:
            return _not_found("User", repr(username), "delete_user")
        reason = self_deletion_policy(actor, target)
        if reason:
            return OperationOutcome.from_reason(reason)

        catalog = self._catalog
        catalog.remove_user(target.user_id)
        # Attendees link to users by name; a reused username must start clean.
        released = catalog.attendees_named(target.username)
        for attendee in released:
            event = catalog.event_holding_attendee(attendee.attendee_id)
            if event is not None:
                event.remove_attendee(attendee.attendee_id)
            catalog.remove_attendee(attendee.attendee_id)
        if released:
            catalog.save(RecordKind.USERS, RecordKind.EVENTS, RecordKind.ATTENDEES)
        else:
            catalog.save(RecordKind.USERS)
        logger.info(
            "Deleted user '%s' and %d attendee record(s).",
            target.username, len(released),
        )
        return OperationOutcome.accept(target)

    def change_password(
        self, user: User, current_password: str, new_password: str,
    ) -> OperationOutcome:
        require_safe_text("password", new_password)
        stored = self._catalog.get_user(user.user_id)
        if stored is None:
            return _not_found("User", user.user_id, "change_password")
        if stored.password != current_password:
            return OperationOutcome.reject(
                ReasonCode.INVALID_CREDENTIALS,
                "Current password is incorrect.",
                "change_password",
            )
        reason = password_length_policy(new_password)
        if reason:
            return OperationOutcome.from_reason(reason)

        updated = dataclasses.replace(stored, password=new_password)
        self._catalog.replace_user(updated)
        self._catalog.save(RecordKind.USERS)
        return OperationOutcome.accept(updated)

    # ══════════════════════════════════════════════════════════
    # EVENTS
    # ══════════════════════════════════════════════════════════

    def create_event(
        self,
        name: str,
        date: str,
        time: str,
        location: str = "",
        description: str = "",
        category: str = "",
        *,
        actor: User,
    ) -> OperationOutcome:
        reason = admin_only_policy(actor, "create events")
        if reason:
            return OperationOutcome.from_reason(reason)
        fields = self._validate_event_fields({
            "name": name, "date": date, "time": time, "location": location,
            "description": description, "category": category,
        })

        event = Event(event_id=self._catalog.next_id(RecordKind.EVENTS), **fields)
        self._catalog.add_event(event)
        self._catalog.save(RecordKind.EVENTS)
        logger.info("Created event '%s' (ID: %s).", event.name, event.event_id)
        return OperationOutcome.accept(event)

    def edit_event(self, event_id: int, *, actor: User, **changes: str) -> OperationOutcome:
        """Change any of name, date, time, location, description, category."""
        reason = admin_only_policy(actor, "edit events")
        if reason:
            return OperationOutcome.from_reason(reason)
        unknown = sorted(set(changes) - set(EDITABLE_EVENT_FIELDS))
        if unknown:
            raise ValidationError("event field", ", ".join(unknown), "is not editable.")
        event = self._catalog.get_event(event_id)
        if event is None:
            return _not_found("Event", event_id, "edit_event")

        validated = self._validate_event_fields(changes)
        for name, value in validated.items():
            setattr(event, name, value)
        self._catalog.save(RecordKind.EVENTS)
        return OperationOutcome.accept(event)

    def update_event_status(
        self, event_id: int, status: Union[EventStatus, int], *, actor: User,
    ) -> OperationOutcome:
        reason = admin_only_policy(actor, "change event status")
        if reason:
            return OperationOutcome.from_reason(reason)
        try:
            status = EventStatus(status)
        except ValueError:
            raise ValidationError("status", status, "is not a known event status.") from None
        event = self._catalog.get_event(event_id)
        if event is None:
            return _not_found("Event", event_id, "update_event_status")

        event.status = status
        self._catalog.save(RecordKind.EVENTS)
        return OperationOutcome.accept(event)

    def search_events(self, term: str) -> List[Event]:
        """Case-insensitive name substring or date substring."""
        needle = term.strip().lower()
        return [
            event for event in self._catalog.list_events()
            if needle in event.name.lower() or needle in event.date
        ]

    def delete_event(self, event_id: int, *, actor: User) -> OperationOutcome:
        """
        Delete an event and everything hanging off it.

        1. Release each ledger entry back to its item
        2. Remove every attendee registered for the event
        3. Remove the event

        Sub-step failures are logged and never stop later steps.
        """
        reason = admin_only_policy(actor, "delete events")
        if reason:
            return OperationOutcome.from_reason(reason)
        catalog = self._catalog
        event = catalog.get_event(event_id)
        if event is None:
            return _not_found("Event", event_id, "delete_event")

        released = []
        for item_id, quantity in sorted(event.allocated_inventory.items()):
            item = catalog.get_item(item_id)
            if item is None:
                logger.debug(
                    "Event %s ledger names unknown item %s; skipped.", event_id, item_id,
                )
                continue
            outcome = item.deallocate(quantity)
            if outcome.is_rejected:
                logger.warning(
                    "Releasing %d of '%s' failed (%s); flooring allocation at 0.",
                    quantity, item.name, outcome.reason.message,
                )
                quantity = item.allocated_quantity
                item.allocated_quantity = 0
            released.append((item_id, quantity))

        removed = catalog.remove_attendees_for_event(event_id)
        catalog.remove_event(event_id)
        catalog.save(RecordKind.EVENTS, RecordKind.ATTENDEES, RecordKind.INVENTORY)
        logger.info(
            "Deleted event '%s' (ID: %s): released %d allocations, removed %d attendees.",
            event.name, event_id, len(released), len(removed),
        )
        return OperationOutcome.accept(CascadeResult(
            event_id=event_id,
            released=tuple(released),
            removed_attendee_ids=tuple(removed),
        ))

    @staticmethod
    def _validate_event_fields(fields: Dict[str, str]) -> Dict[str, str]:
        validated = {}
        for name, value in fields.items():
            require_safe_text(name, value)
            if name == "date":
                require_valid_date(value)
            elif name == "time":
                require_valid_time(value)
            elif name == "name" and not value.strip():
                raise ValidationError("name", value, "must not be empty.")
            validated[name] = value
        return validated

    # ══════════════════════════════════════════════════════════
    # INVENTORY
    # ══════════════════════════════════════════════════════════

    def add_inventory_item(
        self, name: str, total_quantity: int, description: str = "", *, actor: User,
    ) -> OperationOutcome:
        reason = admin_only_policy(actor, "add inventory items")
        if reason:
            return OperationOutcome.from_reason(reason)
        require_safe_text("name", name)
        require_safe_text("description", description, allow_commas=True)
        if total_quantity < 0:
            return OperationOutcome.reject(
                ReasonCode.NEGATIVE_QUANTITY,
                f"Total quantity cannot be negative, got {total_quantity}.",
                "add_inventory_item",
            )

        item = InventoryItem(
            item_id=self._catalog.next_id(RecordKind.INVENTORY),
            name=name, total_quantity=total_quantity, description=description,
        )
        self._catalog.add_item(item)
        self._catalog.save(RecordKind.INVENTORY)
        logger.info("Added inventory item '%s' (ID: %s).", name, item.item_id)
        return OperationOutcome.accept(item)

    def update_inventory_item(
        self,
        item_id: int,
        *,
        actor: User,
        name: Optional[str] = None,
        total_quantity: Optional[int] = None,
        description: Optional[str] = None,
    ) -> OperationOutcome:
        reason = admin_only_policy(actor, "update inventory items")
        if reason:
            return OperationOutcome.from_reason(reason)
        if name is not None:
            require_safe_text("name", name)
        if description is not None:
            require_safe_text("description", description, allow_commas=True)
        item = self._catalog.get_item(item_id)
        if item is None:
            return _not_found("Inventory item", item_id, "update_inventory_item")

        # quantity first so a rejection leaves every field untouched
        if total_quantity is not None:
            outcome = item.set_total_quantity(total_quantity)
            if outcome.is_rejected:
                return outcome
        if name is not None:
            item.name = name
        if description is not None:
            item.description = description
        self._catalog.save(RecordKind.INVENTORY)
        return OperationOutcome.accept(item)

    def allocate_to_event(
        self, event_id: int, item_id: int, quantity: int, *, actor: User,
    ) -> OperationOutcome:
        reason = admin_only_policy(actor, "allocate inventory")
        if reason:
            return OperationOutcome.from_reason(reason)
        event = self._catalog.get_event(event_id)
        if event is None:
            return _not_found("Event", event_id, "allocate_to_event")
        item = self._catalog.get_item(item_id)
        if item is None:
            return _not_found("Inventory item", item_id, "allocate_to_event")

        outcome = item.allocate(quantity)
        if outcome.is_rejected:
            return outcome
        event.allocate_inventory_item(item_id, quantity)
        self._catalog.save(RecordKind.INVENTORY, RecordKind.EVENTS)
        logger.info(
            "Allocated %d of '%s' to event '%s'.", quantity, item.name, event.name,
        )
        return outcome

    def deallocate_from_event(
        self, event_id: int, item_id: int, quantity: int, *, actor: User,
    ) -> OperationOutcome:
        """
        Release up to `quantity` units. The accepted value is the amount
        actually released, which is capped at what the event holds.
        """
        reason = admin_only_policy(actor, "deallocate inventory")
        if reason:
            return OperationOutcome.from_reason(reason)
        event = self._catalog.get_event(event_id)
        if event is None:
            return _not_found("Event", event_id, "deallocate_from_event")
        item = self._catalog.get_item(item_id)
        if item is None:
            return _not_found("Inventory item", item_id, "deallocate_from_event")
        if quantity <= 0:
            return OperationOutcome.reject(
                ReasonCode.INVALID_QUANTITY,
                f"Deallocation quantity must be positive, got {quantity}.",
                "deallocate_from_event",
            )
        if event.allocated_quantity_of(item_id) == 0:
            return OperationOutcome.reject(
                ReasonCode.NOTHING_ALLOCATED,
                f"'{item.name}' is not allocated to event '{event.name}'.",
                "deallocate_from_event",
            )

        released = event.deallocate_inventory_item(item_id, quantity)
        outcome = item.deallocate(released)
        if outcome.is_rejected:
            logger.warning(
                "Item '%s' held less than the ledger released (%s); flooring at 0.",
                item.name, outcome.reason.message,
            )
            item.allocated_quantity = 0
        self._catalog.save(RecordKind.INVENTORY, RecordKind.EVENTS)
        logger.info(
            "Deallocated %d of '%s' from event '%s'.", released, item.name, event.name,
        )
        return OperationOutcome.accept(released)

    # ══════════════════════════════════════════════════════════
    # REGISTRATION
    # ══════════════════════════════════════════════════════════

    def _registration_of(self, user: User, event_id: int) -> Optional[Attendee]:
        for attendee in self._catalog.attendees_named(user.username):
            if attendee.event_id == event_id:
                return attendee
        return None

    def _generic_profile_of(self, user: User) -> Optional[Attendee]:
        return self._registration_of(user, GENERIC_PROFILE)

    def register_for_event(
        self, user: User, event_id: int, contact_info: str,
    ) -> OperationOutcome:
        """
        Register `user` for an event.

        A fresh attendee record is created per registration. An existing
        registration for the same event is REJECTED as a duplicate after
        its contact info is refreshed.
        """
        reason = regular_user_policy(user, "register for events")
        if reason:
            return OperationOutcome.from_reason(reason)
        require_safe_text("contact info", contact_info)
        catalog = self._catalog
        event = catalog.get_event(event_id)
        if event is None:
            return _not_found("Event", event_id, "register_for_event")
        reason = registration_open_policy(event)
        if reason:
            return OperationOutcome.from_reason(reason)

        profile = self._generic_profile_of(user)
        if profile is not None:
            profile.contact_info = contact_info

        existing = self._registration_of(user, event_id)
        if existing is not None:
            existing.contact_info = contact_info
            catalog.save(RecordKind.ATTENDEES)
            return OperationOutcome.reject(
                ReasonCode.DUPLICATE_REGISTRATION,
                f"{user.username} is already registered for event '{event.name}'.",
                "register_for_event",
            )

        attendee = Attendee(
            attendee_id=catalog.next_id(RecordKind.ATTENDEES),
            name=user.username,
            contact_info=contact_info,
            event_id=event_id,
        )
        catalog.add_attendee(attendee)
        event.add_attendee(attendee.attendee_id)
        catalog.save(RecordKind.EVENTS, RecordKind.ATTENDEES)
        logger.info(
            "Registered '%s' as attendee %s for event '%s'.",
            user.username, attendee.attendee_id, event.name,
        )
        return OperationOutcome.accept(attendee)

    def cancel_registration(self, user: User, event_id: int) -> OperationOutcome:
        reason = regular_user_policy(user, "cancel registrations")
        if reason:
            return OperationOutcome.from_reason(reason)
        catalog = self._catalog
        event = catalog.get_event(event_id)
        if event is None:
            return _not_found("Event", event_id, "cancel_registration")
        attendee = self._registration_of(user, event_id)
        if attendee is None:
            return OperationOutcome.reject(
                ReasonCode.NOT_REGISTERED,
                f"{user.username} is not registered for event '{event.name}'.",
                "cancel_registration",
            )

        event.remove_attendee(attendee.attendee_id)
        catalog.remove_attendee(attendee.attendee_id)
        catalog.save(RecordKind.EVENTS, RecordKind.ATTENDEES)
        return OperationOutcome.accept(attendee)

    def update_contact_info(self, user: User, contact_info: str) -> OperationOutcome:
        """
        Refresh the user's contact everywhere it is stored.

        The generic profile is created when missing. Accepted value is
        the generic profile.
        """
        reason = regular_user_policy(user, "update attendee contact info")
        if reason:
            return OperationOutcome.from_reason(reason)
        require_safe_text("contact info", contact_info)
        catalog = self._catalog

        for attendee in catalog.attendees_named(user.username):
            attendee.contact_info = contact_info
        profile = self._generic_profile_of(user)
        if profile is None:
            profile = Attendee(
                attendee_id=catalog.next_id(RecordKind.ATTENDEES),
                name=user.username,
                contact_info=contact_info,
                event_id=GENERIC_PROFILE,
            )
            catalog.add_attendee(profile)
            logger.info("Created generic profile %s for '%s'.", profile.attendee_id, user.username)
        catalog.save(RecordKind.ATTENDEES)
        return OperationOutcome.accept(profile)

    def check_in(self, event_id: int, attendee_id: int, *, actor: User) -> OperationOutcome:
        reason = admin_only_policy(actor, "check in attendees")
        if reason:
            return OperationOutcome.from_reason(reason)
        event = self._catalog.get_event(event_id)
        if event is None:
            return _not_found("Event", event_id, "check_in")
        attendee = self._catalog.get_attendee(attendee_id)
        if attendee is None:
            return _not_found("Attendee", attendee_id, "check_in")
        reason = check_in_policy(event, attendee)
        if reason:
            return OperationOutcome.from_reason(reason)

        attendee.check_in()
        self._catalog.save(RecordKind.ATTENDEES)
        return OperationOutcome.accept(attendee)

    # ══════════════════════════════════════════════════════════
    # REPORTS & EXPORTS
    # ══════════════════════════════════════════════════════════

    def attendance_report(self, event_id: int) -> OperationOutcome:
        event = self._catalog.get_event(event_id)
        if event is None:
            return _not_found("Event", event_id, "attendance_report")
        report: AttendanceReport = build_attendance_report(self._catalog, event)
        if report.unknown_ids:
            logger.warning(
                "Event %s lists attendee ids with no record: %s.",
                event_id, report.unknown_ids,
            )
        return OperationOutcome.accept(report)

    def inventory_report(self) -> InventoryReport:
        return build_inventory_report(self._catalog)

    def export_all(self, encoder: Encoder = encode_all) -> List[str]:
        """Write every collection to its export name. Returns the names written."""
        self._catalog.export(self._export_names, encoder)
        names = [self._export_names[kind] for kind in RecordKind]
        logger.info("Exported %s.", ", ".join(names))
        return names

    def export_kind(self, kind: RecordKind, encoder: Encoder = encode_all) -> str:
        name = self._export_names[kind]
        self._catalog.export({kind: name}, encoder, kinds=(kind,))
        logger.info("Exported %s.", name)
        return name

    def export_attendee_list(self, event_id: int) -> OperationOutcome:
        event = self._catalog.get_event(event_id)
        if event is None:
            return _not_found("Event", event_id, "export_attendee_list")
        name = f"attendees_event_{event_id}.txt"
        self._catalog.backend.write_text(name, render_attendee_list(self._catalog, event))
        logger.info("Exported attendee list for event '%s' to %s.", event.name, name)
        return OperationOutcome.accept(name)
