"""Literal codec for values embedded in snapshots.

Every default value, constant value and attribute argument passes through
:func:`encode_literal` on the way out and :func:`decode_literal` on the way
in, so a given value always encodes to the same JSON.

JSON natives (None, bool, str, finite floats, 64-bit ints) and lists encode
as themselves. Everything else becomes a single-key tag object such as
``{"$tuple": [...]}``. Values that are not literals at all are captured by
:func:`normalize_value` as :class:`EnumRef` or :class:`OpaqueValue`, which
are plain records and never require imports or code execution to restore.
"""

from __future__ import annotations

import base64
import binascii
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

import orjson

from utils import qualified_name

_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1

TAG_TUPLE = "$tuple"
TAG_DICT = "$dict"
TAG_SET = "$set"
TAG_FROZENSET = "$frozenset"
TAG_BYTES = "$bytes"
TAG_FLOAT = "$float"
TAG_INT = "$int"
TAG_COMPLEX = "$complex"
TAG_ENUM = "$enum"
TAG_OPAQUE = "$opaque"

# Every NaN is folded into this one object so that equal graphs compare equal.
_NAN = float("nan")


@dataclass(frozen=True)
class EnumRef:
    """Reference to an enum member by type and member name.

    Flag values without a name (``Perm(0)``, unnamed composites) carry the
    ``repr`` of their underlying value instead.
    """

    type_name: str
    member: str


@dataclass(frozen=True)
class OpaqueValue:
    """Placeholder for a runtime value that has no literal form."""

    type_name: str
    text: str


_PLAIN_TYPES = (type(None), bool, int, float, str, bytes, complex)


def normalize_value(value: Any) -> Any:
    """Reduce a runtime value to something :func:`encode_literal` accepts.

    Enum members become :class:`EnumRef`; objects without a literal form
    (functions, class instances, handles) become :class:`OpaqueValue`
    carrying their ``repr``. Containers are normalized element-wise;
    self-referencing containers are captured as opaque.
    """
    return _normalize(value, set())


def _normalize(value: Any, active: set[int]) -> Any:
    if isinstance(value, (EnumRef, OpaqueValue)):
        return value
    if isinstance(value, Enum):
        member = value.name if value.name is not None else repr(value.value)
        return EnumRef(type_name=qualified_name(type(value)), member=member)
    if type(value) is float and math.isnan(value):
        return _NAN
    if type(value) in _PLAIN_TYPES:
        return value
    if type(value) in (list, tuple, set, frozenset, dict):
        marker = id(value)
        if marker in active:
            return _opaque(value)
        active.add(marker)
        try:
            if isinstance(value, dict):
                return {
                    _normalize(k, active): _normalize(v, active)
                    for k, v in value.items()
                }
            items = [_normalize(item, active) for item in value]
            return type(value)(items)
        except TypeError:
            # Normalized elements may turn unhashable inside a set.
            return _opaque(value)
        finally:
            active.discard(marker)
    return _opaque(value)


def _opaque(value: Any) -> OpaqueValue:
    try:
        text = repr(value)
    except Exception:  # noqa: BLE001 - arbitrary __repr__ implementations
        text = f"<{qualified_name(type(value))}>"
    return OpaqueValue(type_name=qualified_name(type(value)), text=text)


def encode_literal(value: Any) -> Any:
    """Encode a normalized value into JSON-compatible data.

    Raises:
        TypeError: If the value has no literal encoding. Run it through
            :func:`normalize_value` first.
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        if type(value) is not int:
            msg = f"Cannot encode int subclass {qualified_name(type(value))}"
            raise TypeError(msg)
        if _INT_MIN <= value <= _INT_MAX:
            return value
        return {TAG_INT: str(value)}
    if isinstance(value, float):
        if math.isnan(value):
            return {TAG_FLOAT: "nan"}
        if math.isinf(value):
            return {TAG_FLOAT: "inf" if value > 0 else "-inf"}
        return value
    if isinstance(value, complex):
        return {TAG_COMPLEX: [encode_literal(value.real), encode_literal(value.imag)]}
    if isinstance(value, bytes):
        return {TAG_BYTES: base64.b64encode(value).decode("ascii")}
    if isinstance(value, EnumRef):
        return {TAG_ENUM: {"type": value.type_name, "member": value.member}}
    if isinstance(value, OpaqueValue):
        return {TAG_OPAQUE: {"type": value.type_name, "text": value.text}}
    if type(value) is list:
        return [encode_literal(item) for item in value]
    if type(value) is tuple:
        return {TAG_TUPLE: [encode_literal(item) for item in value]}
    if type(value) is dict:
        return {
            TAG_DICT: [[encode_literal(k), encode_literal(v)] for k, v in value.items()]
        }
    if type(value) in (set, frozenset):
        tag = TAG_SET if type(value) is set else TAG_FROZENSET
        encoded = [encode_literal(item) for item in value]
        # Set iteration order depends on hash seeds; sort for stable output.
        encoded.sort(key=lambda item: orjson.dumps(item, option=orjson.OPT_SORT_KEYS))
        return {tag: encoded}
    msg = f"Cannot encode value of type {qualified_name(type(value))}"
    raise TypeError(msg)


def decode_literal(data: Any) -> Any:
    """Inverse of :func:`encode_literal`.

    Raises:
        ValueError: If ``data`` is not a valid literal encoding.
    """
    if data is None or isinstance(data, (bool, int, float, str)):
        return data
    if isinstance(data, list):
        return [decode_literal(item) for item in data]
    if not isinstance(data, dict) or len(data) != 1:
        msg = f"Malformed literal: {data!r}"
        raise ValueError(msg)

    ((tag, payload),) = data.items()
    try:
        return _decode_tagged(tag, payload)
    except (AttributeError, TypeError, KeyError, binascii.Error) as exc:
        msg = f"Malformed {tag} literal: {payload!r}"
        raise ValueError(msg) from exc


def _decode_tagged(tag: str, payload: Any) -> Any:
    if tag == TAG_TUPLE:
        return tuple(decode_literal(item) for item in _as_list(payload))
    if tag == TAG_DICT:
        result: dict[Any, Any] = {}
        for pair in _as_list(payload):
            key, value = _as_list(pair)
            result[decode_literal(key)] = decode_literal(value)
        return result
    if tag == TAG_SET:
        return {decode_literal(item) for item in _as_list(payload)}
    if tag == TAG_FROZENSET:
        return frozenset(decode_literal(item) for item in _as_list(payload))
    if tag == TAG_BYTES:
        return base64.b64decode(payload.encode("ascii"), validate=True)
    if tag == TAG_FLOAT:
        if payload not in ("nan", "inf", "-inf"):
            msg = f"Unknown float literal {payload!r}"
            raise ValueError(msg)
        return _NAN if payload == "nan" else float(payload)
    if tag == TAG_INT:
        return int(payload)
    if tag == TAG_COMPLEX:
        real, imag = _as_list(payload)
        return complex(decode_literal(real), decode_literal(imag))
    if tag == TAG_ENUM:
        member = payload["member"]
        if not isinstance(member, str):
            msg = f"Enum member must be a string, got {member!r}"
            raise TypeError(msg)
        return EnumRef(type_name=str(payload["type"]), member=member)
    if tag == TAG_OPAQUE:
        return OpaqueValue(type_name=str(payload["type"]), text=str(payload["text"]))
    msg = f"Unknown literal tag {tag!r}"
    raise ValueError(msg)


def _as_list(payload: Any) -> list[Any]:
    if not isinstance(payload, list):
        msg = f"Expected a list, got {type(payload).__name__}"
        raise TypeError(msg)
    return payload


__all__ = [
    "EnumRef",
    "OpaqueValue",
    "decode_literal",
    "encode_literal",
    "normalize_value",
]
