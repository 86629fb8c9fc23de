"""
EventDesk CLI Shell
===================
Menu-driven terminal front end.

The shell only prompts, calls CatalogService and prints results.
Rejections are printed with their message; ValidationError is
printed and the shell returns to the current menu.

Usage:
    eventdesk
    eventdesk --data-dir ./data --log-level INFO --no-seed
"""

from __future__ import annotations

import argparse
import dataclasses
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from core.commands.outcomes import OperationOutcome
from core.config.settings import StorageSettings
from core.errors import ValidationError
from core.primitives.event import Event, EventStatus
from core.primitives.user import Role, User
from core.records.codec import RecordKind
from engines.catalog.reports import render_attendance_report, render_inventory_report
from engines.catalog.service import CatalogService
from adapters.cli.wiring import build_service, configure_logging


class _EndOfInput(Exception):
    """Input stream closed; leave every menu."""


class Shell:
    def __init__(
        self,
        service: CatalogService,
        input_fn: Optional[Callable[[str], str]] = None,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self._service = service
        self._input = input_fn or input
        self._out = output_fn
        self._user: Optional[User] = None

    # ══════════════════════════════════════════════════════════
    # PROMPTS
    # ══════════════════════════════════════════════════════════

    def _ask(self, prompt: str) -> str:
        try:
            return self._input(prompt).strip()
        except EOFError:
            raise _EndOfInput() from None

    def _ask_int(self, prompt: str, minimum: Optional[int] = None) -> int:
        while True:
            raw = self._ask(prompt)
            try:
                value = int(raw)
            except ValueError:
                self._out("Invalid input. Please enter a number.")
                continue
            if minimum is not None and value < minimum:
                self._out(f"Please enter a number of at least {minimum}.")
                continue
            return value

    def _report(self, outcome: OperationOutcome, success: str) -> None:
        if outcome.is_accepted:
            self._out(success)
        else:
            self._out(f"Error: {outcome.reason.message}")

    def _menu(self, title: str, options: Sequence[str]) -> int:
        self._out(f"\n--- {title} ---")
        for number, label in enumerate(options, start=1):
            self._out(f"{number}. {label}")
        self._out("0. Back")
        return self._ask_int("Enter your choice: ")

    # ══════════════════════════════════════════════════════════
    # MAIN LOOP
    # ══════════════════════════════════════════════════════════

    def run(self) -> None:
        self._out("Welcome to EventDesk!")
        try:
            while True:
                choice = self._menu("Main Menu", ["Login", "Register New User"])
                if choice == 1:
                    self._login()
                elif choice == 2:
                    self._register_account()
                elif choice == 0:
                    break
                else:
                    self._out("Invalid choice. Please try again.")
        except _EndOfInput:
            pass
        self._out("Goodbye!")

    def _guarded(self, action: Callable[[], None]) -> None:
        try:
            action()
        except ValidationError as exc:
            self._out(f"Error: {exc.message}")

    def _login(self) -> None:
        outcome = self._service.authenticate(self._ask("Username: "), self._ask("Password: "))
        if outcome.is_rejected:
            self._out(f"Login failed. {outcome.reason.message}")
            return
        self._user = outcome.value
        self._out(f"Login successful. Welcome, {self._user.username}!")
        if self._user.is_admin:
            self._admin_menu()
        else:
            self._user_menu()
        self._out(f"Logging out {self._user.username}.")
        self._user = None

    def _register_account(self) -> None:
        def action():
            outcome = self._service.register_account(
                self._ask("Username: "), self._ask("Password (min 6 chars): "),
            )
            if outcome.is_accepted:
                self._out(f"User '{outcome.value.username}' created (ID: {outcome.value.user_id}).")
            else:
                self._out(f"Error: {outcome.reason.message}")
        self._guarded(action)

    # ══════════════════════════════════════════════════════════
    # ADMIN MENUS
    # ══════════════════════════════════════════════════════════

    def _admin_menu(self) -> None:
        handlers = [
            self._user_management,
            self._event_management,
            self._attendee_management,
            self._inventory_management,
            self._data_export,
            self._show_profile,
        ]
        self._dispatch("Admin Menu", [
            "User Management", "Event Management", "Attendee Management",
            "Inventory Management", "Data Export Options", "View My Profile",
        ], handlers)

    def _dispatch(self, title: str, options: List[str], handlers: List[Callable[[], None]]) -> None:
        while True:
            choice = self._menu(title, options)
            if choice == 0:
                return
            if 1 <= choice <= len(handlers):
                self._guarded(handlers[choice - 1])
            else:
                self._out("Invalid choice. Please try again.")

    def _show_profile(self) -> None:
        user = self._user
        self._out(f"User ID: {user.user_id}, Username: {user.username}, Role: {user.role.label}")

    def _user_management(self) -> None:
        self._dispatch("User Management", [
            "Create New User Account", "Delete User Account", "List All Users",
            "Change My Password",
        ], [self._create_user, self._delete_user, self._list_users, self._change_password])

    def _create_user(self) -> None:
        username = self._ask("Username: ")
        password = self._ask("Password (min 6 chars): ")
        role_choice = self._ask_int("Account type: 1. Admin 2. Regular User: ")
        if role_choice not in (1, 2):
            self._out("Invalid role. Account not created.")
            return
        role = Role.ADMIN if role_choice == 1 else Role.REGULAR_USER
        outcome = self._service.create_user(username, password, role, actor=self._user)
        self._report(outcome, f"{role.label} '{username}' created.")

    def _delete_user(self) -> None:
        username = self._ask("Enter username to delete: ")
        outcome = self._service.delete_user(username, actor=self._user)
        self._report(outcome, f"User '{username}' deleted.")

    def _list_users(self) -> None:
        for user in self._service.catalog.list_users():
            self._out(f"ID: {user.user_id}, Username: {user.username}, Role: {user.role.label}")

    def _change_password(self) -> None:
        outcome = self._service.change_password(
            self._user, self._ask("Current password: "), self._ask("New password: "),
        )
        if outcome.is_accepted:
            self._user = outcome.value
        self._report(outcome, "Password updated successfully.")

    def _event_management(self) -> None:
        self._dispatch("Event Management", [
            "Create New Event", "View All Events", "Edit Event Details",
            "Update Event Status", "Delete Event", "Allocate Inventory to Event",
            "Deallocate Inventory from Event",
        ], [
            self._create_event, self._list_events, self._edit_event,
            self._update_status, self._delete_event, self._allocate, self._deallocate,
        ])

    def _create_event(self) -> None:
        outcome = self._service.create_event(
            self._ask("Name: "),
            self._ask("Date (YYYY-MM-DD): "),
            self._ask("Time (HH:MM): "),
            self._ask("Location: "),
            self._ask("Description: "),
            self._ask("Category: "),
            actor=self._user,
        )
        if outcome.is_accepted:
            self._out(f"Event '{outcome.value.name}' created (ID: {outcome.value.event_id}).")
        else:
            self._out(f"Error: {outcome.reason.message}")

    def _print_event(self, event: Event) -> None:
        self._out(
            f"ID: {event.event_id} | {event.name} | {event.date} {event.time} | "
            f"{event.location} | {event.category} | {event.status.label}"
        )
        if event.description:
            self._out(f"  {event.description}")
        self._out(f"  Attendees: {len(event.attendee_ids)}")
        for item_id, quantity in sorted(event.allocated_inventory.items()):
            item = self._service.catalog.get_item(item_id)
            label = item.name if item else f"Unknown item {item_id}"
            self._out(f"  - {label}: {quantity}")

    def _list_events(self) -> None:
        events = self._service.catalog.list_events()
        if not events:
            self._out("No events.")
        for event in events:
            self._print_event(event)

    def _edit_event(self) -> None:
        event_id = self._ask_int("Enter Event ID to edit: ", minimum=1)
        field_name = self._ask("Field (name/date/time/location/description/category): ").lower()
        value = self._ask(f"New {field_name}: ")
        outcome = self._service.edit_event(event_id, actor=self._user, **{field_name: value})
        self._report(outcome, "Event updated.")

    def _update_status(self) -> None:
        event_id = self._ask_int("Enter Event ID: ", minimum=1)
        for status in EventStatus:
            self._out(f"{status.value}. {status.label}")
        code = self._ask_int("New status: ")
        outcome = self._service.update_event_status(event_id, code, actor=self._user)
        self._report(outcome, "Event status updated.")

    def _delete_event(self) -> None:
        event_id = self._ask_int("Enter Event ID to delete: ", minimum=1)
        outcome = self._service.delete_event(event_id, actor=self._user)
        self._report(outcome, f"Event {event_id} deleted.")

    def _allocate(self) -> None:
        event_id = self._ask_int("Enter Event ID: ", minimum=1)
        item_id = self._ask_int("Enter Inventory Item ID to allocate: ", minimum=1)
        quantity = self._ask_int("Enter quantity to allocate: ", minimum=1)
        outcome = self._service.allocate_to_event(event_id, item_id, quantity, actor=self._user)
        self._report(outcome, f"{quantity} allocated.")

    def _deallocate(self) -> None:
        event_id = self._ask_int("Enter Event ID: ", minimum=1)
        item_id = self._ask_int("Enter Inventory Item ID to deallocate: ", minimum=1)
        quantity = self._ask_int("Enter quantity to deallocate: ", minimum=1)
        outcome = self._service.deallocate_from_event(event_id, item_id, quantity, actor=self._user)
        self._report(outcome, f"{outcome.value} deallocated.")

    def _attendee_management(self) -> None:
        self._dispatch("Attendee Management", [
            "View Attendee Lists per Event", "Check-in Attendee for Event",
            "Generate Attendance Report for Event", "Export Attendee List for Event to File",
        ], [self._attendee_lists, self._check_in, self._attendance_report, self._export_attendees])

    def _attendee_lists(self) -> None:
        catalog = self._service.catalog
        for event in catalog.list_events():
            self._out(f"Event: {event.name} (ID: {event.event_id})")
            if not event.attendee_ids:
                self._out("  No attendees registered.")
            for attendee_id in sorted(event.attendee_ids):
                attendee = catalog.get_attendee(attendee_id)
                if attendee is None:
                    self._out(f"    - Unknown Attendee (ID: {attendee_id})")
                    continue
                self._out(
                    f"    - {attendee.name} (ID: {attendee.attendee_id}, "
                    f"Contact: {attendee.contact_info}, "
                    f"Checked-in: {'Yes' if attendee.is_checked_in else 'No'})"
                )

    def _check_in(self) -> None:
        event_id = self._ask_int("Enter Event ID: ", minimum=1)
        attendee_id = self._ask_int("Enter Attendee ID to check-in: ", minimum=1)
        outcome = self._service.check_in(event_id, attendee_id, actor=self._user)
        self._report(outcome, "Checked in.")

    def _attendance_report(self) -> None:
        outcome = self._service.attendance_report(self._ask_int("Enter Event ID: ", minimum=1))
        if outcome.is_rejected:
            self._out(f"Error: {outcome.reason.message}")
            return
        self._out(render_attendance_report(outcome.value))

    def _export_attendees(self) -> None:
        outcome = self._service.export_attendee_list(self._ask_int("Enter Event ID: ", minimum=1))
        self._report(outcome, f"Attendee list exported to {outcome.value}.")

    def _inventory_management(self) -> None:
        self._dispatch("Inventory Management", [
            "Add New Inventory Item", "Update Inventory Item Details",
            "View All Inventory Items", "Generate Full Inventory Report",
        ], [self._add_item, self._update_item, self._list_items, self._inventory_report])

    def _add_item(self) -> None:
        name = self._ask("Item Name: ")
        quantity = self._ask_int("Total Quantity: ", minimum=0)
        description = self._ask("Description: ")
        outcome = self._service.add_inventory_item(name, quantity, description, actor=self._user)
        self._report(outcome, f"Inventory item '{name}' added.")

    def _update_item(self) -> None:
        item_id = self._ask_int("Enter Item ID to update: ", minimum=1)
        choice = self._menu("Update Item", ["Update Name", "Update Total Quantity", "Update Description"])
        if choice == 1:
            changes = {"name": self._ask("Enter new name: ")}
        elif choice == 2:
            changes = {"total_quantity": self._ask_int("Enter new total quantity: ", minimum=0)}
        elif choice == 3:
            changes = {"description": self._ask("Enter new description: ")}
        else:
            return
        outcome = self._service.update_inventory_item(item_id, actor=self._user, **changes)
        self._report(outcome, "Inventory item updated successfully.")

    def _list_items(self) -> None:
        for item in self._service.catalog.list_items():
            self._out(
                f"ID: {item.item_id}, Name: {item.name}, Total: {item.total_quantity}, "
                f"Allocated: {item.allocated_quantity}, Available: {item.available_quantity}, "
                f"Description: {item.description}"
            )

    def _inventory_report(self) -> None:
        self._out(render_inventory_report(self._service.inventory_report()))

    def _data_export(self) -> None:
        kinds = [RecordKind.EVENTS, RecordKind.ATTENDEES, RecordKind.INVENTORY, RecordKind.USERS]
        handlers = [
            (lambda kind=kind: self._out(f"Exported to {self._service.export_kind(kind)}."))
            for kind in kinds
        ]
        handlers.append(
            lambda: self._out(f"Exported to {', '.join(self._service.export_all())}.")
        )
        self._dispatch("Data Export", [
            "Export All Events Data", "Export All Attendees Data",
            "Export All Inventory Data", "Export All Users Data", "Export Everything",
        ], handlers)

    # ══════════════════════════════════════════════════════════
    # REGULAR USER MENU
    # ══════════════════════════════════════════════════════════

    def _user_menu(self) -> None:
        self._dispatch("User Menu", [
            "View All Events", "Search Events", "Register for Event",
            "Cancel My Registration", "Update My Contact Info", "Change My Password",
            "View My Profile",
        ], [
            self._list_events, self._search_events, self._register, self._cancel,
            self._update_contact, self._change_password, self._show_profile,
        ])

    def _search_events(self) -> None:
        term = self._ask("Enter event name or date to search: ")
        matches = self._service.search_events(term)
        if not matches:
            self._out(f"No events found matching '{term}'.")
        for event in matches:
            self._print_event(event)

    def _register(self) -> None:
        event_id = self._ask_int("Enter Event ID to register for: ", minimum=1)
        contact = self._ask("Enter your contact info (email/phone): ")
        outcome = self._service.register_for_event(self._user, event_id, contact)
        if outcome.is_accepted:
            self._out(f"Registered as attendee {outcome.value.attendee_id} for event {event_id}.")
        else:
            self._out(f"Error: {outcome.reason.message}")

    def _cancel(self) -> None:
        event_id = self._ask_int("Enter Event ID to cancel registration for: ", minimum=1)
        outcome = self._service.cancel_registration(self._user, event_id)
        self._report(outcome, "Your registration has been canceled.")

    def _update_contact(self) -> None:
        contact = self._ask("Enter new contact information (email/phone): ")
        outcome = self._service.update_contact_info(self._user, contact)
        self._report(outcome, "Your contact information has been updated.")


# ══════════════════════════════════════════════════════════════
# ENTRY POINT
# ══════════════════════════════════════════════════════════════

def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="eventdesk", description="Event management shell.")
    parser.add_argument("--data-dir", type=Path, help="directory holding the record files")
    parser.add_argument("--log-level", help="logging level name, e.g. INFO")
    parser.add_argument(
        "--no-seed", action="store_true", help="do not seed demo data into empty collections",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    settings = StorageSettings.from_env()
    overrides = {}
    if args.data_dir is not None:
        overrides["data_dir"] = args.data_dir
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    if args.no_seed:
        overrides["seed_on_empty"] = False
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    configure_logging(settings)
    Shell(build_service(settings)).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
