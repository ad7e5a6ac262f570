"""Snapshot reconstruction.

Reading a snapshot never executes code or imports modules: the header is
validated, the body checksum compared, and the tagged records replayed
through the descriptor builders in their fixed order.
"""

from __future__ import annotations

from typing import Any

import orjson
from pydantic import ValidationError

from descriptors.builders import (
    ArgumentBuilder,
    AttributeBuilder,
    ConstantBuilder,
    MethodBuilder,
    PropertyBuilder,
    SymbolBuilder,
)
from descriptors.models import (
    ArgumentDescriptor,
    AttributeDescriptor,
    ConstantDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    SymbolDescriptor,
    SymbolKind,
)
from descriptors.modifiers import modifiers_from_names
from snapshot.contract import (
    OP_ATTRIBUTE,
    OP_CONSTANT,
    OP_INTERFACE,
    OP_KIND,
    OP_METHOD,
    OP_MODIFIERS,
    OP_NAME,
    OP_NAMESPACE,
    OP_PARENT,
    OP_PROPERTY,
    OP_TRAIT,
    RECORD_ORDER,
    REQUIRED_OPS,
    SINGLE_OPS,
    SNAPSHOT_SCHEMA_VERSION,
    SnapshotHeader,
    body_checksum,
)
from snapshot.literals import decode_literal

_RANK = {op: rank for rank, op in enumerate(RECORD_ORDER)}


class CorruptSnapshot(ValueError):
    """Raised when snapshot bytes cannot be turned back into a descriptor."""


def _split(data: bytes) -> tuple[bytes, bytes]:
    head, sep, body = data.partition(b"\n")
    if not sep:
        msg = "Snapshot has no header line"
        raise CorruptSnapshot(msg)
    return head, body


def _parse_header(head: bytes) -> SnapshotHeader:
    try:
        header = SnapshotHeader.model_validate(orjson.loads(head))
    except (orjson.JSONDecodeError, ValidationError) as exc:
        msg = f"Invalid snapshot header: {exc}"
        raise CorruptSnapshot(msg) from exc
    if header.schema_version != SNAPSHOT_SCHEMA_VERSION:
        msg = (
            f"Unsupported snapshot schema_version {header.schema_version} "
            f"(expected {SNAPSHOT_SCHEMA_VERSION})"
        )
        raise CorruptSnapshot(msg)
    return header


def read_header(data: bytes) -> SnapshotHeader:
    """Validate and return only the header of a snapshot.

    Raises:
        CorruptSnapshot: If the header is missing or invalid.
    """
    head, _ = _split(data)
    return _parse_header(head)


def _attribute(payload: dict[str, Any]) -> AttributeDescriptor:
    builder = AttributeBuilder().set_name(payload["name"])
    for argument in payload["arguments"]:
        key = argument["key"]
        value = decode_literal(argument["value"])
        if set(key) == {"positional"}:
            builder.add_positional(value, index=key["positional"])
        elif set(key) == {"named"}:
            builder.add_named(key["named"], value)
        else:
            msg = f"Invalid attribute argument key: {key!r}"
            raise ValueError(msg)
    return builder.build()


def _attributes(payload: dict[str, Any]) -> list[AttributeDescriptor]:
    return [_attribute(item) for item in payload["attributes"]]


def _argument(payload: dict[str, Any]) -> ArgumentDescriptor:
    builder = (
        ArgumentBuilder()
        .set_name(payload["name"])
        .set_position(payload["position"])
        .set_type(payload["type"])
        .set_optional(payload["optional"])
        .set_variadic(payload["variadic"])
        .set_by_reference(payload["by_reference"])
    )
    if "default" in payload:
        builder.set_default(decode_literal(payload["default"]))
    for attribute in _attributes(payload):
        builder.add_attribute(attribute)
    return builder.build()


def _property(payload: dict[str, Any]) -> PropertyDescriptor:
    builder = (
        PropertyBuilder()
        .set_name(payload["name"])
        .set_modifiers(modifiers_from_names(payload["modifiers"]))
        .set_type(payload["type"])
    )
    if "default" in payload:
        builder.set_default(decode_literal(payload["default"]))
    for attribute in _attributes(payload):
        builder.add_attribute(attribute)
    return builder.build()


def _constant(payload: dict[str, Any]) -> ConstantDescriptor:
    builder = (
        ConstantBuilder()
        .set_name(payload["name"])
        .set_modifiers(modifiers_from_names(payload["modifiers"]))
        .set_type(payload["type"])
        .set_value(decode_literal(payload["value"]))
    )
    for attribute in _attributes(payload):
        builder.add_attribute(attribute)
    return builder.build()


def _method(payload: dict[str, Any]) -> MethodDescriptor:
    builder = (
        MethodBuilder()
        .set_name(payload["name"])
        .set_modifiers(modifiers_from_names(payload["modifiers"]))
        .set_return_type(payload["return_type"])
    )
    for argument in payload["arguments"]:
        builder.add_argument(_argument(argument))
    for attribute in _attributes(payload):
        builder.add_attribute(attribute)
    return builder.build()


def _parse_records(body: bytes, header: SnapshotHeader) -> list[tuple[str, Any]]:
    lines = body.split(b"\n")
    if lines[-1] != b"":
        msg = "Snapshot body is not newline terminated"
        raise CorruptSnapshot(msg)
    lines.pop()
    if len(lines) != header.records:
        msg = f"Snapshot declares {header.records} records, found {len(lines)}"
        raise CorruptSnapshot(msg)

    records: list[tuple[str, Any]] = []
    for number, line in enumerate(lines, start=2):
        try:
            record = orjson.loads(line)
        except orjson.JSONDecodeError as exc:
            msg = f"Invalid JSON on line {number}: {exc}"
            raise CorruptSnapshot(msg) from exc
        if (
            not isinstance(record, dict)
            or set(record) != {"op", "value"}
            or not isinstance(record["op"], str)
        ):
            msg = f"Malformed record on line {number}"
            raise CorruptSnapshot(msg)
        records.append((record["op"], record["value"]))
    return records


def _check_order(records: list[tuple[str, Any]]) -> None:
    seen: set[str] = set()
    last_rank = -1
    for op, _ in records:
        rank = _RANK.get(op)
        if rank is None:
            msg = f"Unknown record op {op!r}"
            raise CorruptSnapshot(msg)
        if rank < last_rank:
            msg = f"Record {op!r} is out of order"
            raise CorruptSnapshot(msg)
        if op in SINGLE_OPS and op in seen:
            msg = f"Record {op!r} appears more than once"
            raise CorruptSnapshot(msg)
        seen.add(op)
        last_rank = rank
    missing = REQUIRED_OPS - seen
    if missing:
        msg = f"Snapshot is missing records: {', '.join(sorted(missing))}"
        raise CorruptSnapshot(msg)


def _replay(records: list[tuple[str, Any]], header: SnapshotHeader) -> SymbolDescriptor:
    values = dict(records[:3])
    kind = SymbolKind(values[OP_KIND])
    if kind != header.kind:
        msg = f"Kind record {kind.value!r} does not match header {header.kind.value!r}"
        raise ValueError(msg)
    builder = (
        SymbolBuilder(kind)
        .set_name(values[OP_NAME])
        .set_namespace(values[OP_NAMESPACE])
    )
    for op, value in records[3:]:
        if op == OP_PROPERTY:
            builder.add_property(_property(value))
        elif op == OP_CONSTANT:
            builder.add_constant(_constant(value))
        elif op == OP_METHOD:
            builder.add_method(_method(value))
        elif op == OP_TRAIT:
            builder.add_trait(_text(value))
        elif op == OP_INTERFACE:
            builder.add_interface(_text(value))
        elif op == OP_PARENT:
            builder.set_parent(_text(value))
        elif op == OP_ATTRIBUTE:
            builder.add_attribute(_attribute(value))
        elif op == OP_MODIFIERS:
            builder.set_modifiers(modifiers_from_names(value))
    return builder.build()


def _text(value: Any) -> str:
    if not isinstance(value, str):
        msg = f"Expected a string, got {type(value).__name__}"
        raise TypeError(msg)
    return value


def load_snapshot(
    data: bytes, *, expected_identifier: str | None = None
) -> SymbolDescriptor:
    """Reconstruct a descriptor from snapshot bytes.

    Args:
        data: Full snapshot file content.
        expected_identifier: When given, the header must name this identifier.

    Returns:
        A descriptor structurally equal to the one that was serialized.

    Raises:
        CorruptSnapshot: On any structural, checksum or payload failure.
    """
    head, body = _split(data)
    header = _parse_header(head)
    if expected_identifier is not None and header.identifier != expected_identifier:
        msg = (
            f"Snapshot belongs to {header.identifier!r}, "
            f"expected {expected_identifier!r}"
        )
        raise CorruptSnapshot(msg)
    if body_checksum(body) != header.checksum:
        msg = f"Checksum mismatch for snapshot of {header.identifier!r}"
        raise CorruptSnapshot(msg)

    records = _parse_records(body, header)
    _check_order(records)
    try:
        return _replay(records, header)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        # ValidationError and literal decode errors are ValueErrors.
        msg = f"Invalid record payload in snapshot of {header.identifier!r}: {exc}"
        raise CorruptSnapshot(msg) from exc


__all__ = ["CorruptSnapshot", "load_snapshot", "read_header"]
