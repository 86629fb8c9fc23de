"""
Tests for core.primitives - inventory, event ledger, attendee, user.
"""

import logging

import pytest

from core.commands.rejection import ReasonCode
from core.primitives import (
    GENERIC_PROFILE,
    Attendee,
    Event,
    EventStatus,
    InventoryItem,
    Role,
    User,
)


def _item(total=10, allocated=0):
    return InventoryItem(item_id=1, name="Chairs", total_quantity=total,
                         allocated_quantity=allocated)


def _event(**kwargs):
    return Event(event_id=1, name="Expo", date="2025-10-20", time="09:00", **kwargs)


# ── InventoryItem ────────────────────────────────────────────

class TestInventoryItem:
    def test_available_quantity(self):
        assert _item(total=10, allocated=3).available_quantity == 7

    def test_allocate_accepts_within_available(self):
        item = _item(total=10)
        outcome = item.allocate(4)
        assert outcome.is_accepted
        assert outcome.value == 4
        assert item.allocated_quantity == 4

    def test_allocate_exactly_available(self):
        item = _item(total=5, allocated=2)
        assert item.allocate(3).is_accepted
        assert item.available_quantity == 0

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_allocate_rejects_non_positive(self, quantity):
        item = _item()
        outcome = item.allocate(quantity)
        assert outcome.code == ReasonCode.INVALID_QUANTITY
        assert item.allocated_quantity == 0

    def test_allocate_rejects_over_available(self):
        item = _item(total=5, allocated=4)
        outcome = item.allocate(2)
        assert outcome.code == ReasonCode.INSUFFICIENT_AVAILABLE
        assert item.allocated_quantity == 4

    def test_deallocate_rejects_over_allocated(self):
        item = _item(total=5, allocated=2)
        outcome = item.deallocate(3)
        assert outcome.code == ReasonCode.OVER_DEALLOCATION
        assert item.allocated_quantity == 2

    def test_deallocate_rejects_non_positive(self):
        assert _item(allocated=2).deallocate(0).code == ReasonCode.INVALID_QUANTITY

    def test_allocation_sequence_keeps_bounds(self):
        item = _item(total=6)
        for op, quantity in [("a", 4), ("a", 3), ("d", 5), ("d", 2), ("a", 2),
                             ("d", -1), ("a", 0), ("a", 4), ("d", 6)]:
            if op == "a":
                item.allocate(quantity)
            else:
                item.deallocate(quantity)
            assert 0 <= item.allocated_quantity <= item.total_quantity

    def test_set_total_below_allocated_rejected(self):
        item = _item(total=10, allocated=5)
        outcome = item.set_total_quantity(2)
        assert outcome.code == ReasonCode.BELOW_ALLOCATED
        assert item.total_quantity == 10
        assert item.allocated_quantity == 5

    def test_set_total_negative_rejected(self):
        item = _item()
        assert item.set_total_quantity(-1).code == ReasonCode.NEGATIVE_QUANTITY
        assert item.total_quantity == 10

    def test_set_total_accepts(self):
        item = _item(total=10, allocated=5)
        assert item.set_total_quantity(5).is_accepted
        assert item.total_quantity == 5

    def test_to_dict(self):
        data = _item(total=10, allocated=3).to_dict()
        assert data["available_quantity"] == 7


# ── Event ledger ─────────────────────────────────────────────

class TestEventLedger:
    def test_allocate_is_additive(self):
        event = _event()
        event.allocate_inventory_item(2, 3)
        event.allocate_inventory_item(2, 4)
        assert event.allocated_inventory == {2: 7}

    def test_allocate_ignores_non_positive(self):
        event = _event()
        event.allocate_inventory_item(2, 0)
        event.allocate_inventory_item(2, -5)
        assert event.allocated_inventory == {}

    def test_over_deallocation_returns_held_and_removes_entry(self):
        event = _event(allocated_inventory={2: 3})
        assert event.deallocate_inventory_item(2, 10) == 3
        assert 2 not in event.allocated_inventory

    def test_partial_deallocation(self):
        event = _event(allocated_inventory={2: 5})
        assert event.deallocate_inventory_item(2, 2) == 2
        assert event.allocated_inventory == {2: 3}

    def test_deallocate_missing_or_non_positive(self):
        event = _event(allocated_inventory={2: 5})
        assert event.deallocate_inventory_item(9, 1) == 0
        assert event.deallocate_inventory_item(2, 0) == 0
        assert event.allocated_inventory == {2: 5}

    def test_allocated_quantity_of(self):
        event = _event(allocated_inventory={2: 5})
        assert event.allocated_quantity_of(2) == 5
        assert event.allocated_quantity_of(3) == 0


class TestEventAttendees:
    def test_duplicate_add_is_noop(self, caplog):
        event = _event()
        assert event.add_attendee(3)
        with caplog.at_level(logging.INFO, logger="eventdesk.primitives"):
            assert not event.add_attendee(3)
        assert event.attendee_ids == {3}
        assert "already registered" in caplog.text

    def test_remove_absent_is_noop(self):
        event = _event(attendee_ids={1})
        assert not event.remove_attendee(2)
        assert event.remove_attendee(1)
        assert event.attendee_ids == set()


class TestEventStatus:
    def test_codes(self):
        assert [s.value for s in EventStatus] == [0, 1, 2, 3]

    def test_labels(self):
        assert EventStatus.CANCELED.label == "Canceled"

    @pytest.mark.parametrize("status,expected", [
        (EventStatus.UPCOMING, True),
        (EventStatus.ONGOING, True),
        (EventStatus.COMPLETED, False),
        (EventStatus.CANCELED, False),
    ])
    def test_accepts_registrations(self, status, expected):
        assert status.accepts_registrations is expected


# ── Attendee ─────────────────────────────────────────────────

class TestAttendee:
    def test_generic_profile(self):
        assert Attendee(1, "user1", "a@b").is_generic_profile
        assert Attendee(1, "user1", "a@b").event_id == GENERIC_PROFILE
        assert not Attendee(1, "user1", "a@b", event_id=4).is_generic_profile

    def test_check_in_is_monotonic(self):
        attendee = Attendee(1, "user1", "a@b", event_id=4)
        assert attendee.check_in()
        assert not attendee.check_in()
        assert attendee.is_checked_in


# ── User ─────────────────────────────────────────────────────

class TestUser:
    def test_role_checks(self):
        admin = User(1, "admin", "adminpass", Role.ADMIN)
        user = User(2, "user1", "user1pass", Role.REGULAR_USER)
        assert admin.is_admin and not admin.is_regular
        assert user.is_regular and not user.is_admin

    def test_role_must_be_enum(self):
        with pytest.raises(ValueError):
            User(1, "admin", "adminpass", 0)

    def test_owns_attendee_name_ignores_case(self):
        user = User(2, "User1", "user1pass", Role.REGULAR_USER)
        assert user.owns_attendee_name("user1")
        assert not user.owns_attendee_name("user2")

    def test_to_dict_hides_password(self):
        data = User(1, "admin", "adminpass", Role.ADMIN).to_dict()
        assert "password" not in data
        assert data["role"] == "Admin"

    def test_frozen(self):
        user = User(1, "admin", "adminpass", Role.ADMIN)
        with pytest.raises(AttributeError):
            user.password = "other"
