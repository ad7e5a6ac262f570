"""Deterministic snapshot serialization for symbol descriptors."""

from snapshot.contract import (
    SNAPSHOT_SCHEMA_VERSION,
    SNAPSHOT_SUFFIX,
    SnapshotHeader,
    snapshot_filename,
)
from snapshot.literals import EnumRef, OpaqueValue, normalize_value
from snapshot.reader import CorruptSnapshot, load_snapshot, read_header
from snapshot.writer import dump_snapshot, snapshot_records

__all__ = [
    "SNAPSHOT_SCHEMA_VERSION",
    "SNAPSHOT_SUFFIX",
    "CorruptSnapshot",
    "EnumRef",
    "OpaqueValue",
    "SnapshotHeader",
    "dump_snapshot",
    "load_snapshot",
    "normalize_value",
    "read_header",
    "snapshot_filename",
    "snapshot_records",
]
