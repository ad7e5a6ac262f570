"""Snapshot file contract definitions.

This module defines the stable on-disk format for persisted snapshots: the
file naming rule, the header record and the ordered set of record tags.
"""

from __future__ import annotations

import hashlib
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from descriptors.models import SymbolKind

# Snapshot schema version. Files carrying any other version are rejected.
SNAPSHOT_SCHEMA_VERSION = 1

SNAPSHOT_FORMAT = "symcache-snapshot"

# Snapshot filename suffix (stable contract identifier).
SNAPSHOT_SUFFIX = ".snapshot.jsonl"

# Suffix of in-flight files written before the atomic rename.
TEMP_SUFFIX = ".tmp"

# ---------------------------------------------------------------------------
# Record tags, in emission order
# ---------------------------------------------------------------------------
OP_NAME = "name"
OP_NAMESPACE = "namespace"
OP_KIND = "kind"
OP_PROPERTY = "property"
OP_CONSTANT = "constant"
OP_METHOD = "method"
OP_TRAIT = "trait"
OP_INTERFACE = "interface"
OP_PARENT = "parent"
OP_ATTRIBUTE = "attribute"
OP_MODIFIERS = "modifiers"

RECORD_ORDER: tuple[str, ...] = (
    OP_NAME,
    OP_NAMESPACE,
    OP_KIND,
    OP_PROPERTY,
    OP_CONSTANT,
    OP_METHOD,
    OP_TRAIT,
    OP_INTERFACE,
    OP_PARENT,
    OP_ATTRIBUTE,
    OP_MODIFIERS,
)

# Tags that appear exactly once, and tags that appear at most once.
REQUIRED_OPS = frozenset({OP_NAME, OP_NAMESPACE, OP_KIND})
SINGLE_OPS = frozenset({OP_NAME, OP_NAMESPACE, OP_KIND, OP_PARENT, OP_MODIFIERS})


class SnapshotHeader(BaseModel):
    """First line of every snapshot file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    format: Literal["symcache-snapshot"] = SNAPSHOT_FORMAT
    schema_version: int = Field(default=SNAPSHOT_SCHEMA_VERSION)
    identifier: str
    kind: SymbolKind
    records: int = Field(ge=0)
    checksum: str = Field(description="sha256 hex digest of the record lines")


def snapshot_filename(identifier: str) -> str:
    """Build the deterministic snapshot filename for an identifier.

    Format: ``{sha1(identifier)}.snapshot.jsonl``. The identifier is hashed
    verbatim so that names are filesystem safe whatever the identifier holds.
    """
    digest = hashlib.sha1(identifier.encode("utf-8")).hexdigest()  # noqa: S324
    return f"{digest}{SNAPSHOT_SUFFIX}"


def body_checksum(body: bytes) -> str:
    return hashlib.sha256(body).hexdigest()


__all__ = [
    "OP_ATTRIBUTE",
    "OP_CONSTANT",
    "OP_INTERFACE",
    "OP_KIND",
    "OP_METHOD",
    "OP_MODIFIERS",
    "OP_NAME",
    "OP_NAMESPACE",
    "OP_PARENT",
    "OP_PROPERTY",
    "OP_TRAIT",
    "RECORD_ORDER",
    "REQUIRED_OPS",
    "SINGLE_OPS",
    "SNAPSHOT_FORMAT",
    "SNAPSHOT_SCHEMA_VERSION",
    "SNAPSHOT_SUFFIX",
    "TEMP_SUFFIX",
    "SnapshotHeader",
    "body_checksum",
    "snapshot_filename",
]
