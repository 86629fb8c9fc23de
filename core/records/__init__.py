"""
EventDesk Records - Public API
================================
Line codec for every record kind plus pluggable storage backends.
"""

from core.records.backend import (
    FileRecordBackend,
    InMemoryRecordBackend,
    RecordBackend,
)
from core.records.codec import (
    CODECS,
    DecodeReport,
    Encoder,
    RecordCodec,
    RecordKind,
    SkippedRecord,
    decode_allocations,
    decode_attendee,
    decode_attendee_ids,
    decode_event,
    decode_inventory_item,
    decode_lines,
    decode_user,
    encode_all,
    encode_allocations,
    encode_attendee,
    encode_attendee_ids,
    encode_event,
    encode_inventory_item,
    encode_user,
    require_safe_text,
)

__all__ = [
    # ── Backends ──────────────────────────────────────────────
    "RecordBackend",
    "FileRecordBackend",
    "InMemoryRecordBackend",
    # ── Codec ─────────────────────────────────────────────────
    "CODECS",
    "DecodeReport",
    "Encoder",
    "RecordCodec",
    "RecordKind",
    "SkippedRecord",
    "decode_lines",
    "encode_all",
    "encode_user",
    "decode_user",
    "encode_event",
    "decode_event",
    "encode_attendee",
    "decode_attendee",
    "encode_inventory_item",
    "decode_inventory_item",
    "encode_attendee_ids",
    "decode_attendee_ids",
    "encode_allocations",
    "decode_allocations",
    "require_safe_text",
]
