"""
EventDesk Core - Error Taxonomy
=================================
Typed errors for the allocation and registration core.

Expected business conditions (insufficient stock, duplicate
registration, unknown id) are NOT raised. They are returned as
OperationOutcome values. These exceptions exist for:

- Boundary validation (bad date/time/text) -> ValidationError
- Decode-time parse failures                -> MalformedRecord
- Callers that opt in to exceptions via
  OperationOutcome.raise_for_rejection()    -> NotFoundError / CapacityError
"""

from __future__ import annotations

from typing import Optional


class EventDeskError(Exception):
    """Base error. Every subclass carries a machine-readable code."""

    code = "EVENTDESK_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(message)


class ValidationError(EventDeskError):
    """Bad date/time/quantity/text. Recoverable; re-prompt at the boundary."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, value: object, detail: str):
        self.field = field
        self.value = value
        if value is None:
            super().__init__(f"Invalid {field}: {detail}")
        else:
            super().__init__(f"Invalid {field} {value!r}: {detail}")


class NotFoundError(EventDeskError):
    """Unknown entity id."""

    code = "NOT_FOUND"


class CapacityError(EventDeskError):
    """Allocation, deallocation or total quantity outside the allowed bounds."""

    code = "CAPACITY_ERROR"


class MalformedRecord(EventDeskError):
    """A persisted line could not be decoded. The record is skipped."""

    code = "MALFORMED_RECORD"

    def __init__(self, kind: str, line: str, detail: str):
        self.kind = kind
        self.line = line
        self.detail = detail
        super().__init__(f"Malformed {kind} record {line!r}: {detail}")
