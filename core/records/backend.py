"""
EventDesk Records - Storage Backends
======================================
A backend stores named, line-oriented text documents.
It knows nothing about record formats; the codec does.

Implementations:
    FileRecordBackend      - one flat text file per name in a directory
    InMemoryRecordBackend  - dict-backed, for tests and dry runs

Writes replace the whole document. There is no write batching and
no partial-write detection: a truncated file is handled by the
tolerant per-line decoder on the next load. Files are decoded line by
line, so a line cut mid-character is skipped without losing the rest.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Protocol, Union

logger = logging.getLogger("eventdesk.records")


# ══════════════════════════════════════════════════════════════
# BACKEND PROTOCOL
# ══════════════════════════════════════════════════════════════

class RecordBackend(Protocol):
    """Protocol for line-oriented record storage."""

    def read_lines(self, name: str) -> List[str]:
        """Return the document's lines, or [] when it does not exist."""
        ...  # pragma: no cover

    def write_text(self, name: str, text: str) -> None:
        """Replace the document with `text`."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# FLAT FILE BACKEND
# ══════════════════════════════════════════════════════════════

class FileRecordBackend:
    def __init__(self, directory: Union[str, Path]) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, name: str) -> Path:
        return self._directory / name

    def read_lines(self, name: str) -> List[str]:
        path = self.path_for(name)
        if not path.exists():
            logger.debug("No %s yet; starting empty.", path)
            return []
        lines: List[str] = []
        for line_number, raw in enumerate(path.read_bytes().splitlines(), start=1):
            try:
                lines.append(raw.decode("utf-8"))
            except UnicodeDecodeError as exc:
                # Blank placeholder keeps later line numbers stable.
                logger.warning(
                    "Skipping %s line %d: not valid utf-8 (%s).",
                    name, line_number, exc.reason,
                )
                lines.append("")
        return lines

    def write_text(self, name: str, text: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(name)
        with path.open("w", encoding="utf-8", newline="\n") as handle:
            handle.write(text)
        logger.debug("Wrote %s.", path)


# ══════════════════════════════════════════════════════════════
# IN-MEMORY BACKEND (for testing)
# ══════════════════════════════════════════════════════════════

class InMemoryRecordBackend:
    def __init__(self, documents: Dict[str, str] | None = None) -> None:
        self._documents: Dict[str, str] = dict(documents or {})
        self.write_count = 0

    def read_lines(self, name: str) -> List[str]:
        return self._documents.get(name, "").splitlines()

    def write_text(self, name: str, text: str) -> None:
        self._documents[name] = text
        self.write_count += 1

    def get_text(self, name: str) -> str:
        return self._documents.get(name, "")

    def has(self, name: str) -> bool:
        return name in self._documents
