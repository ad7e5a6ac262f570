"""Snapshot emission for symbol descriptors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson

from descriptors.models import Positional
from descriptors.modifiers import modifier_names
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
    SnapshotHeader,
    body_checksum,
)
from snapshot.literals import encode_literal

if TYPE_CHECKING:
    from descriptors.models import (
        ArgumentDescriptor,
        AttributeDescriptor,
        ConstantDescriptor,
        MethodDescriptor,
        PropertyDescriptor,
        SymbolDescriptor,
    )


def _attribute_payload(attribute: AttributeDescriptor) -> dict[str, Any]:
    arguments: list[dict[str, Any]] = []
    for argument in attribute.arguments:
        if isinstance(argument.key, Positional):
            key: dict[str, Any] = {"positional": argument.key.index}
        else:
            key = {"named": argument.key.key}
        arguments.append({"key": key, "value": encode_literal(argument.value)})
    return {"name": attribute.name, "arguments": arguments}


def _attributes(attributes: tuple[AttributeDescriptor, ...]) -> list[dict[str, Any]]:
    return [_attribute_payload(attribute) for attribute in attributes]


def _argument_payload(argument: ArgumentDescriptor) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": argument.name,
        "position": argument.position,
        "type": argument.type,
        "optional": argument.optional,
        "variadic": argument.variadic,
        "by_reference": argument.by_reference,
        "attributes": _attributes(argument.attributes),
    }
    if argument.has_default:
        payload["default"] = encode_literal(argument.default)
    return payload


def _property_payload(prop: PropertyDescriptor) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": prop.name,
        "modifiers": modifier_names(prop.modifiers),
        "type": prop.type,
        "attributes": _attributes(prop.attributes),
    }
    if prop.has_default:
        payload["default"] = encode_literal(prop.default)
    return payload


def _constant_payload(constant: ConstantDescriptor) -> dict[str, Any]:
    return {
        "name": constant.name,
        "modifiers": modifier_names(constant.modifiers),
        "type": constant.type,
        "value": encode_literal(constant.value),
        "attributes": _attributes(constant.attributes),
    }


def _method_payload(method: MethodDescriptor) -> dict[str, Any]:
    arguments = sorted(method.arguments, key=lambda a: a.position)
    return {
        "name": method.name,
        "modifiers": modifier_names(method.modifiers),
        "return_type": method.return_type,
        "arguments": [_argument_payload(argument) for argument in arguments],
        "attributes": _attributes(method.attributes),
    }


def snapshot_records(symbol: SymbolDescriptor) -> list[dict[str, Any]]:
    """Return the ordered tagged records describing ``symbol``."""
    records: list[dict[str, Any]] = [
        {"op": OP_NAME, "value": symbol.name},
        {"op": OP_NAMESPACE, "value": symbol.namespace},
        {"op": OP_KIND, "value": symbol.kind.value},
    ]
    records.extend(
        {"op": OP_PROPERTY, "value": _property_payload(prop)}
        for prop in symbol.properties.values()
    )
    records.extend(
        {"op": OP_CONSTANT, "value": _constant_payload(constant)}
        for constant in symbol.constants.values()
    )
    records.extend(
        {"op": OP_METHOD, "value": _method_payload(method)}
        for method in symbol.methods.values()
    )
    records.extend({"op": OP_TRAIT, "value": trait} for trait in symbol.traits)
    records.extend(
        {"op": OP_INTERFACE, "value": interface} for interface in symbol.interfaces
    )
    if symbol.parent is not None:
        records.append({"op": OP_PARENT, "value": symbol.parent})
    records.extend(
        {"op": OP_ATTRIBUTE, "value": _attribute_payload(attribute)}
        for attribute in symbol.attributes
    )
    flags = modifier_names(symbol.modifiers)
    if flags:
        records.append({"op": OP_MODIFIERS, "value": flags})
    return records


def dump_snapshot(symbol: SymbolDescriptor, *, identifier: str | None = None) -> bytes:
    """Serialize ``symbol`` into snapshot bytes.

    Equal descriptors always produce byte-identical output.

    Args:
        symbol: Descriptor to serialize.
        identifier: Cache key recorded in the header (default: ``symbol.name``).

    Raises:
        TypeError: If a value held by the descriptor has no literal encoding.
    """
    body = b"".join(
        orjson.dumps(record, option=orjson.OPT_SORT_KEYS) + b"\n"
        for record in snapshot_records(symbol)
    )
    header = SnapshotHeader(
        identifier=identifier if identifier is not None else symbol.name,
        kind=symbol.kind,
        records=body.count(b"\n"),
        checksum=body_checksum(body),
    )
    head = orjson.dumps(header.model_dump(mode="json"), option=orjson.OPT_SORT_KEYS)
    return head + b"\n" + body


__all__ = ["dump_snapshot", "snapshot_records"]
