"""
EventDesk Catalog Engine - Policies
=====================================
Pure rule checks for catalog operations.

Each policy returns None when the operation may proceed, or a
RejectionReason describing why it may not. Policies never mutate
state and never raise.
"""

from __future__ import annotations

from typing import Iterable, Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.primitives.attendee import Attendee
from core.primitives.event import Event
from core.primitives.user import MIN_PASSWORD_LENGTH, User


def admin_only_policy(actor: User, operation: str) -> Optional[RejectionReason]:
    """Reject privileged operations requested by non-admin users."""
    if actor.is_admin:
        return None
    return RejectionReason(
        code=ReasonCode.PERMISSION_DENIED,
        message=f"Only administrators may {operation}.",
        policy_name="admin_only_policy",
    )


def regular_user_policy(actor: User, operation: str) -> Optional[RejectionReason]:
    """Registration and contact management belong to regular users."""
    if actor.is_regular:
        return None
    return RejectionReason(
        code=ReasonCode.PERMISSION_DENIED,
        message=f"Only regular users may {operation}.",
        policy_name="regular_user_policy",
    )


def password_length_policy(password: str) -> Optional[RejectionReason]:
    if len(password) >= MIN_PASSWORD_LENGTH:
        return None
    return RejectionReason(
        code=ReasonCode.PASSWORD_TOO_SHORT,
        message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.",
        policy_name="password_length_policy",
    )


def unique_username_policy(
    username: str,
    existing: Iterable[User],
) -> Optional[RejectionReason]:
    """Usernames are unique ignoring case, so attendee names match one user."""
    wanted = username.lower()
    for user in existing:
        if user.username.lower() == wanted:
            return RejectionReason(
                code=ReasonCode.USERNAME_TAKEN,
                message=f"Username '{username}' already exists.",
                policy_name="unique_username_policy",
            )
    return None


def self_deletion_policy(actor: User, target: User) -> Optional[RejectionReason]:
    if actor.user_id != target.user_id:
        return None
    return RejectionReason(
        code=ReasonCode.SELF_DELETION,
        message="You cannot delete your own account.",
        policy_name="self_deletion_policy",
    )


def registration_open_policy(event: Event) -> Optional[RejectionReason]:
    if event.status.accepts_registrations:
        return None
    return RejectionReason(
        code=ReasonCode.REGISTRATION_CLOSED,
        message=(
            f"Cannot register for event '{event.name}': "
            f"status is {event.status.label}."
        ),
        policy_name="registration_open_policy",
    )


def check_in_policy(event: Event, attendee: Attendee) -> Optional[RejectionReason]:
    """The attendee must belong to the event and not be checked in yet."""
    if attendee.attendee_id not in event.attendee_ids or attendee.event_id != event.event_id:
        return RejectionReason(
            code=ReasonCode.NOT_REGISTERED,
            message=(
                f"Attendee {attendee.attendee_id} is not registered "
                f"for event '{event.name}'."
            ),
            policy_name="check_in_policy",
        )
    if attendee.is_checked_in:
        return RejectionReason(
            code=ReasonCode.ALREADY_CHECKED_IN,
            message=f"{attendee.name} is already checked in.",
            policy_name="check_in_policy",
        )
    return None
