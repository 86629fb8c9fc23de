"""
EventDesk User Primitive - Operator Account
=============================================
Captures WHO is operating the shell.

Roles:
    ADMIN         - Manages events, attendees, inventory and accounts
    REGULAR_USER  - Registers for events and manages own contact info

Role is a tag on one record type, not a class hierarchy. Privileged
operations check `is_admin` explicitly.

RULES (NON-NEGOTIABLE):
- Usernames are unique (enforced by the repository)
- Passwords are at least MIN_PASSWORD_LENGTH characters
- Role values are the persisted role codes

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MIN_PASSWORD_LENGTH = 6


class Role(Enum):
    ADMIN = 0
    REGULAR_USER = 1

    @property
    def label(self) -> str:
        return "Admin" if self == Role.ADMIN else "User"


@dataclass(frozen=True)
class User:
    """
    Fields:
        user_id:   Unique, monotonic id
        username:  Login name; also the attendee name of the user's registrations
        password:  Stored as given (credential hashing is out of scope)
        role:      ADMIN | REGULAR_USER
    """
    user_id: int
    username: str
    password: str
    role: Role

    def __post_init__(self):
        if not isinstance(self.role, Role):
            raise ValueError("role must be Role enum.")
        if not self.username or not isinstance(self.username, str):
            raise ValueError("username must be a non-empty string.")

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_regular(self) -> bool:
        return self.role == Role.REGULAR_USER

    def owns_attendee_name(self, attendee_name: str) -> bool:
        """Attendee records are matched to their user by case-insensitive name."""
        return attendee_name.lower() == self.username.lower()

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "role": self.role.label,
        }
