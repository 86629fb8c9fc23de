"""
EventDesk Core Config - Storage and Runtime Settings
======================================================
Where the flat files live, what they are called, and how the shell
logs. Values come from the environment, never from engine logic.

Environment:
    EVENTDESK_DATA_DIR   directory holding the record files (default: .)
    EVENTDESK_LOG_LEVEL  logging level name (default: WARNING)
    EVENTDESK_SEED       seed demo data into empty collections (default: 1)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from core.records.codec import RecordKind

DEFAULT_FILE_NAMES: Dict[RecordKind, str] = {
    RecordKind.USERS: "users.txt",
    RecordKind.EVENTS: "events.txt",
    RecordKind.ATTENDEES: "attendees.txt",
    RecordKind.INVENTORY: "inventory.txt",
}

DEFAULT_EXPORT_NAMES: Dict[RecordKind, str] = {
    RecordKind.USERS: "users_export.txt",
    RecordKind.EVENTS: "events_export.txt",
    RecordKind.ATTENDEES: "attendees_export.txt",
    RecordKind.INVENTORY: "inventory_export.txt",
}

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}.")


@dataclass(frozen=True)
class StorageSettings:
    """Immutable runtime settings. Build with from_env() or directly in tests."""

    data_dir: Path = Path(".")
    file_names: Mapping[RecordKind, str] = field(
        default_factory=lambda: dict(DEFAULT_FILE_NAMES)
    )
    export_names: Mapping[RecordKind, str] = field(
        default_factory=lambda: dict(DEFAULT_EXPORT_NAMES)
    )
    log_level: str = "WARNING"
    seed_on_empty: bool = True

    def __post_init__(self) -> None:
        missing = [kind.value for kind in RecordKind if kind not in self.file_names]
        if missing:
            raise ValueError(f"file_names missing record kinds: {missing}.")
        missing = [kind.value for kind in RecordKind if kind not in self.export_names]
        if missing:
            raise ValueError(f"export_names missing record kinds: {missing}.")

    def file_name(self, kind: RecordKind) -> str:
        return self.file_names[kind]

    def export_name(self, kind: RecordKind) -> str:
        return self.export_names[kind]

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> StorageSettings:
        env = os.environ if environ is None else environ
        return cls(
            data_dir=Path(env.get("EVENTDESK_DATA_DIR", ".")),
            log_level=env.get("EVENTDESK_LOG_LEVEL", "WARNING").upper(),
            seed_on_empty=_parse_bool(
                "EVENTDESK_SEED", env.get("EVENTDESK_SEED", "1"),
            ),
        )
