"""EventDesk catalog service tests (seeded in-memory catalog)."""

import pytest

from core.commands.rejection import ReasonCode
from core.errors import CapacityError, ValidationError
from core.primitives import EventStatus, Role
from core.records import InMemoryRecordBackend, RecordKind
from engines.catalog.repository import EventCatalog
from engines.catalog.service import CascadeResult, CatalogService

PROJECTOR = 1
CHAIRS = 2
TECH_CONF = 1
FESTIVAL = 2


@pytest.fixture
def backend():
    return InMemoryRecordBackend()


@pytest.fixture
def service(backend):
    service = CatalogService(EventCatalog(backend))
    service.seed_initial_data()
    return service


@pytest.fixture
def admin(service):
    return service.catalog.find_user("admin")


@pytest.fixture
def user1(service):
    return service.catalog.find_user("user1")


def reload(backend):
    catalog = EventCatalog(backend)
    catalog.load()
    return catalog


def assert_allocation_consistent(catalog):
    for item in catalog.list_items():
        ledger_total = sum(
            event.allocated_quantity_of(item.item_id) for event in catalog.list_events()
        )
        assert item.allocated_quantity == ledger_total
        assert 0 <= item.allocated_quantity <= item.total_quantity


class TestSeeding:
    def test_seeds_empty_catalog(self, service):
        catalog = service.catalog
        assert [u.username for u in catalog.list_users()] == ["admin", "user1", "user2"]
        assert catalog.get_event(TECH_CONF).name == "Tech Conference 2025"
        assert catalog.get_event(FESTIVAL).category == "Social"
        assert catalog.get_item(PROJECTOR).total_quantity == 5
        assert catalog.get_item(CHAIRS).total_quantity == 100

    def test_seed_is_persisted(self, service, backend):
        assert "1,admin,adminpass,0" in backend.get_text("users.txt")

    def test_seed_skips_populated_collections(self, service):
        assert service.seed_initial_data() == []
        assert len(service.catalog.list_users()) == 3


class TestAccounts:
    def test_authenticate(self, service):
        assert service.authenticate("admin", "adminpass").value.is_admin
        assert service.authenticate("admin", "wrong").code == ReasonCode.INVALID_CREDENTIALS
        assert service.authenticate("ghost", "x").code == ReasonCode.INVALID_CREDENTIALS

    def test_create_user(self, service, admin, backend):
        outcome = service.create_user("carol", "carolpass", Role.ADMIN, actor=admin)
        assert outcome.is_accepted
        assert outcome.value.user_id == 4
        assert "4,carol,carolpass,0" in backend.get_text("users.txt")

    def test_create_user_rules(self, service, admin):
        assert service.create_user("USER1", "longpass", Role.REGULAR_USER, actor=admin).code == (
            ReasonCode.USERNAME_TAKEN
        )
        assert service.create_user("dave", "short", Role.REGULAR_USER, actor=admin).code == (
            ReasonCode.PASSWORD_TOO_SHORT
        )

    def test_create_user_requires_admin(self, service, user1):
        outcome = service.create_user("eve", "evepass", Role.ADMIN, actor=user1)
        assert outcome.code == ReasonCode.PERMISSION_DENIED

    def test_register_account_is_regular(self, service):
        outcome = service.register_account("frank", "frankpass")
        assert outcome.value.role is Role.REGULAR_USER

    def test_username_with_comma_rejected(self, service):
        with pytest.raises(ValidationError):
            service.register_account("a,b", "password")

    def test_delete_user(self, service, admin):
        assert service.delete_user("user2", actor=admin).is_accepted
        assert service.catalog.find_user("user2") is None
        assert service.delete_user("user2", actor=admin).code == ReasonCode.NOT_FOUND
        assert service.delete_user("admin", actor=admin).code == ReasonCode.SELF_DELETION

    def test_delete_user_drops_their_attendee_records(self, service, admin, user1, backend):
        service.update_contact_info(user1, "profile@example.com")
        registration = service.register_for_event(user1, TECH_CONF, "u1@example.com").value
        assert service.delete_user("user1", actor=admin).is_accepted

        catalog = reload(backend)
        assert catalog.attendees_named("user1") == []
        assert registration.attendee_id not in catalog.get_event(TECH_CONF).attendee_ids

    def test_reused_username_starts_without_registrations(self, service, admin, user1):
        service.register_for_event(user1, TECH_CONF, "u1@example.com")
        service.delete_user("user1", actor=admin)

        newcomer = service.register_account("USER1", "freshpass").value
        assert service.cancel_registration(newcomer, TECH_CONF).code == (
            ReasonCode.NOT_REGISTERED
        )
        outcome = service.register_for_event(newcomer, TECH_CONF, "new@example.com")
        assert outcome.is_accepted
        assert outcome.value.contact_info == "new@example.com"

    def test_change_password(self, service, user1, backend):
        assert service.change_password(user1, "wrong", "newpass1").code == (
            ReasonCode.INVALID_CREDENTIALS
        )
        assert service.change_password(user1, "user1pass", "abc").code == (
            ReasonCode.PASSWORD_TOO_SHORT
        )
        assert service.change_password(user1, "user1pass", "newpass1").is_accepted
        assert reload(backend).find_user("user1").password == "newpass1"


class TestEvents:
    def test_create_event(self, service, admin):
        outcome = service.create_event(
            "Workshop", "2025-11-01", "13:30", "Room 2", "Hands-on", "Training", actor=admin,
        )
        assert outcome.value.event_id == 3
        assert outcome.value.status is EventStatus.UPCOMING

    def test_create_event_validates(self, service, admin):
        with pytest.raises(ValidationError):
            service.create_event("Bad", "2025-13-01", "10:00", actor=admin)
        with pytest.raises(ValidationError):
            service.create_event("Bad", "2025-01-01", "25:00", actor=admin)
        with pytest.raises(ValidationError):
            service.create_event("A, B", "2025-01-01", "10:00", actor=admin)
        assert len(service.catalog.list_events()) == 2

    def test_create_event_requires_admin(self, service, user1):
        outcome = service.create_event("X", "2025-01-01", "10:00", actor=user1)
        assert outcome.code == ReasonCode.PERMISSION_DENIED

    def test_edit_event(self, service, admin):
        outcome = service.edit_event(TECH_CONF, actor=admin, location="Hall B", time="10:00")
        assert outcome.is_accepted
        assert service.catalog.get_event(TECH_CONF).location == "Hall B"

    def test_edit_event_bad_value_leaves_event(self, service, admin):
        with pytest.raises(ValidationError):
            service.edit_event(TECH_CONF, actor=admin, location="Hall B", date="nope")
        assert service.catalog.get_event(TECH_CONF).location == "Grand Hall"

    def test_edit_event_unknown_field(self, service, admin):
        with pytest.raises(ValidationError):
            service.edit_event(TECH_CONF, actor=admin, status="3")

    def test_update_status(self, service, admin, backend):
        assert service.update_event_status(FESTIVAL, 3, actor=admin).is_accepted
        assert reload(backend).get_event(FESTIVAL).status is EventStatus.CANCELED
        assert service.update_event_status(99, EventStatus.ONGOING, actor=admin).code == (
            ReasonCode.NOT_FOUND
        )

    def test_search(self, service):
        assert [e.event_id for e in service.search_events("music")] == [FESTIVAL]
        assert [e.event_id for e in service.search_events("2025-10")] == [TECH_CONF]
        assert len(service.search_events("2025")) == 2
        assert service.search_events("opera") == []


class TestAllocation:
    def test_allocate_reserves_item_and_ledger(self, service, admin, backend):
        outcome = service.allocate_to_event(TECH_CONF, PROJECTOR, 3, actor=admin)
        assert outcome.value == 3
        catalog = service.catalog
        assert catalog.get_item(PROJECTOR).allocated_quantity == 3
        assert catalog.get_event(TECH_CONF).allocated_inventory == {PROJECTOR: 3}
        assert_allocation_consistent(reload(backend))

    def test_allocate_over_available_changes_nothing(self, service, admin):
        service.allocate_to_event(TECH_CONF, PROJECTOR, 3, actor=admin)
        outcome = service.allocate_to_event(FESTIVAL, PROJECTOR, 3, actor=admin)
        assert outcome.code == ReasonCode.INSUFFICIENT_AVAILABLE
        assert service.catalog.get_event(FESTIVAL).allocated_inventory == {}
        assert service.catalog.get_item(PROJECTOR).allocated_quantity == 3
        with pytest.raises(CapacityError):
            outcome.raise_for_rejection()

    def test_allocate_unknown_ids(self, service, admin):
        assert service.allocate_to_event(99, PROJECTOR, 1, actor=admin).code == ReasonCode.NOT_FOUND
        assert service.allocate_to_event(TECH_CONF, 99, 1, actor=admin).code == ReasonCode.NOT_FOUND

    def test_over_deallocation_releases_held_amount(self, service, admin):
        service.allocate_to_event(TECH_CONF, CHAIRS, 3, actor=admin)
        outcome = service.deallocate_from_event(TECH_CONF, CHAIRS, 10, actor=admin)
        assert outcome.value == 3
        assert CHAIRS not in service.catalog.get_event(TECH_CONF).allocated_inventory
        assert service.catalog.get_item(CHAIRS).allocated_quantity == 0

    def test_deallocate_nothing_allocated(self, service, admin):
        outcome = service.deallocate_from_event(TECH_CONF, CHAIRS, 1, actor=admin)
        assert outcome.code == ReasonCode.NOTHING_ALLOCATED

    def test_deallocate_non_positive(self, service, admin):
        service.allocate_to_event(TECH_CONF, CHAIRS, 3, actor=admin)
        outcome = service.deallocate_from_event(TECH_CONF, CHAIRS, 0, actor=admin)
        assert outcome.code == ReasonCode.INVALID_QUANTITY

    def test_sequence_keeps_invariants(self, service, admin):
        steps = [
            ("a", TECH_CONF, CHAIRS, 40), ("a", FESTIVAL, CHAIRS, 70),
            ("a", FESTIVAL, CHAIRS, 60), ("d", TECH_CONF, CHAIRS, 15),
            ("a", FESTIVAL, PROJECTOR, 5), ("d", FESTIVAL, PROJECTOR, 9),
            ("d", TECH_CONF, CHAIRS, 100), ("a", TECH_CONF, PROJECTOR, 2),
        ]
        for op, event_id, item_id, quantity in steps:
            if op == "a":
                service.allocate_to_event(event_id, item_id, quantity, actor=admin)
            else:
                service.deallocate_from_event(event_id, item_id, quantity, actor=admin)
            assert_allocation_consistent(service.catalog)

    def test_allocation_requires_admin(self, service, user1):
        outcome = service.allocate_to_event(TECH_CONF, PROJECTOR, 1, actor=user1)
        assert outcome.code == ReasonCode.PERMISSION_DENIED
        assert service.catalog.get_item(PROJECTOR).allocated_quantity == 0


class TestInventoryAdmin:
    def test_add_item(self, service, admin):
        outcome = service.add_inventory_item("Tables", 20, "Round, seats 8", actor=admin)
        assert outcome.value.item_id == 3
        assert outcome.value.description == "Round, seats 8"

    def test_add_item_negative_quantity(self, service, admin):
        outcome = service.add_inventory_item("Tables", -1, actor=admin)
        assert outcome.code == ReasonCode.NEGATIVE_QUANTITY

    def test_update_total_below_allocated_rejected(self, service, admin):
        service.allocate_to_event(TECH_CONF, PROJECTOR, 5, actor=admin)
        outcome = service.update_inventory_item(
            PROJECTOR, actor=admin, name="Beamer", total_quantity=2,
        )
        assert outcome.code == ReasonCode.BELOW_ALLOCATED
        item = service.catalog.get_item(PROJECTOR)
        assert (item.name, item.total_quantity, item.allocated_quantity) == ("Projector", 5, 5)

    def test_update_item(self, service, admin, backend):
        outcome = service.update_inventory_item(
            CHAIRS, actor=admin, total_quantity=150, description="Folding",
        )
        assert outcome.is_accepted
        item = reload(backend).get_item(CHAIRS)
        assert (item.total_quantity, item.description) == (150, "Folding")


class TestRegistration:
    def test_register_creates_attendee(self, service, user1, backend):
        outcome = service.register_for_event(user1, TECH_CONF, "u1@example.com")
        attendee = outcome.value
        assert attendee.name == "user1"
        assert attendee.event_id == TECH_CONF
        catalog = reload(backend)
        assert attendee.attendee_id in catalog.get_event(TECH_CONF).attendee_ids
        assert catalog.get_attendee(attendee.attendee_id).contact_info == "u1@example.com"

    def test_duplicate_registration_refreshes_contact(self, service, user1):
        first = service.register_for_event(user1, TECH_CONF, "old@example.com").value
        outcome = service.register_for_event(user1, TECH_CONF, "new@example.com")
        assert outcome.code == ReasonCode.DUPLICATE_REGISTRATION
        assert first.contact_info == "new@example.com"
        assert service.catalog.get_event(TECH_CONF).attendee_ids == {first.attendee_id}

    def test_closed_event_rejected(self, service, admin, user1):
        service.update_event_status(FESTIVAL, EventStatus.COMPLETED, actor=admin)
        outcome = service.register_for_event(user1, FESTIVAL, "u1@example.com")
        assert outcome.code == ReasonCode.REGISTRATION_CLOSED

    def test_admin_cannot_register(self, service, admin):
        outcome = service.register_for_event(admin, TECH_CONF, "a@example.com")
        assert outcome.code == ReasonCode.PERMISSION_DENIED

    def test_each_attendee_in_one_event(self, service, user1):
        service.update_contact_info(user1, "profile@example.com")
        a = service.register_for_event(user1, TECH_CONF, "u1@example.com").value
        b = service.register_for_event(user1, FESTIVAL, "u1@example.com").value
        assert a.attendee_id != b.attendee_id
        seen = {}
        for event in service.catalog.list_events():
            for attendee_id in event.attendee_ids:
                assert attendee_id not in seen
                seen[attendee_id] = event.event_id

    def test_cancel_registration(self, service, user1):
        attendee = service.register_for_event(user1, TECH_CONF, "u1@example.com").value
        assert service.cancel_registration(user1, TECH_CONF).is_accepted
        assert service.catalog.get_attendee(attendee.attendee_id) is None
        assert service.catalog.get_event(TECH_CONF).attendee_ids == set()
        assert service.cancel_registration(user1, TECH_CONF).code == ReasonCode.NOT_REGISTERED

    def test_update_contact_info(self, service, user1):
        registration = service.register_for_event(user1, TECH_CONF, "old@example.com").value
        profile = service.update_contact_info(user1, "new@example.com").value
        assert profile.is_generic_profile
        assert registration.contact_info == "new@example.com"
        again = service.update_contact_info(user1, "newer@example.com").value
        assert again.attendee_id == profile.attendee_id


class TestCheckIn:
    def test_check_in(self, service, admin, user1):
        attendee = service.register_for_event(user1, TECH_CONF, "u1@example.com").value
        assert service.check_in(TECH_CONF, attendee.attendee_id, actor=admin).is_accepted
        assert attendee.is_checked_in
        outcome = service.check_in(TECH_CONF, attendee.attendee_id, actor=admin)
        assert outcome.code == ReasonCode.ALREADY_CHECKED_IN

    def test_check_in_wrong_event(self, service, admin, user1):
        attendee = service.register_for_event(user1, TECH_CONF, "u1@example.com").value
        outcome = service.check_in(FESTIVAL, attendee.attendee_id, actor=admin)
        assert outcome.code == ReasonCode.NOT_REGISTERED
        assert service.check_in(TECH_CONF, 99, actor=admin).code == ReasonCode.NOT_FOUND


class TestDeleteEvent:
    def test_cascade(self, service, admin, user1, backend):
        service.allocate_to_event(FESTIVAL, CHAIRS, 10, actor=admin)
        attendee = service.register_for_event(user1, FESTIVAL, "u1@example.com").value

        outcome = service.delete_event(FESTIVAL, actor=admin)

        assert outcome.value == CascadeResult(
            event_id=FESTIVAL,
            released=((CHAIRS, 10),),
            removed_attendee_ids=(attendee.attendee_id,),
        )
        catalog = reload(backend)
        assert catalog.get_event(FESTIVAL) is None
        assert catalog.get_item(CHAIRS).allocated_quantity == 0
        assert catalog.get_attendee(attendee.attendee_id) is None

    def test_cascade_tolerates_missing_item(self, service, admin):
        service.catalog.get_event(FESTIVAL).allocate_inventory_item(42, 3)
        outcome = service.delete_event(FESTIVAL, actor=admin)
        assert outcome.value.released == ()
        assert service.catalog.get_event(FESTIVAL) is None

    def test_cascade_floors_inconsistent_item(self, service, admin):
        service.catalog.get_event(FESTIVAL).allocate_inventory_item(CHAIRS, 3)
        assert service.delete_event(FESTIVAL, actor=admin).is_accepted
        assert service.catalog.get_item(CHAIRS).allocated_quantity == 0

    def test_unknown_event(self, service, admin):
        assert service.delete_event(99, actor=admin).code == ReasonCode.NOT_FOUND

    def test_ids_not_reused_after_delete(self, service, admin):
        service.delete_event(FESTIVAL, actor=admin)
        outcome = service.create_event("New", "2025-01-01", "10:00", actor=admin)
        assert outcome.value.event_id == 3


class TestExports:
    def test_export_all(self, service, backend):
        names = service.export_all()
        assert names == [
            "users_export.txt", "events_export.txt",
            "attendees_export.txt", "inventory_export.txt",
        ]
        assert backend.get_text("users_export.txt") == backend.get_text("users.txt")

    def test_export_with_custom_encoder(self, service, backend):
        service.export_all(lambda kind, records: f"{kind.value}={len(records)}\n")
        assert backend.get_text("inventory_export.txt") == "inventory=2\n"

    def test_export_single_kind(self, service, backend):
        assert service.export_kind(RecordKind.EVENTS) == "events_export.txt"
        assert not backend.has("users_export.txt")

    def test_export_attendee_list(self, service, user1, backend):
        attendee = service.register_for_event(user1, TECH_CONF, "u1@example.com").value
        outcome = service.export_attendee_list(TECH_CONF)
        assert outcome.value == "attendees_event_1.txt"
        text = backend.get_text("attendees_event_1.txt")
        assert text.startswith("Attendee List for Event: Tech Conference 2025 (ID: 1)\n")
        assert "ID,Name,ContactInfo,CheckedInStatus\n" in text
        assert f"{attendee.attendee_id},user1,u1@example.com,Not Checked In\n" in text

    def test_export_attendee_list_unknown_event(self, service):
        assert service.export_attendee_list(99).code == ReasonCode.NOT_FOUND
