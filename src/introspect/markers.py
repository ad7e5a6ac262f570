"""Declaration markers read by the Python introspector.

``attribute`` decorates classes, functions and properties::

    @attribute("route", "/widgets", method="GET")
    def list_widgets(self) -> list[str]: ...

``declare`` is placed in ``typing.Annotated`` metadata for annotated class
attributes and parameters::

    color: Annotated[str, declare("column", "color", nullable=False)] = "red"

``trait`` flags a mix-in class as a trait regardless of its name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeVar

ATTRIBUTES_ATTR = "__symcache_attributes__"
TRAIT_ATTR = "__symcache_trait__"

_T = TypeVar("_T")


@dataclass(frozen=True)
class AttributeDeclaration:
    """One declared attribute with its constructor arguments."""

    name: str
    args: tuple[Any, ...] = ()
    kwargs: tuple[tuple[str, Any], ...] = ()


def declare(name: str, *args: Any, **kwargs: Any) -> AttributeDeclaration:
    return AttributeDeclaration(name=name, args=args, kwargs=tuple(kwargs.items()))


def _carrier(target: Any) -> Any:
    if isinstance(target, (staticmethod, classmethod)):
        return target.__func__
    if isinstance(target, property):
        return target.fget
    return target


def attribute(name: str, *args: Any, **kwargs: Any):
    """Decorator recording an attribute declaration on its target.

    Stacked decorators keep source order, top to bottom.
    """
    declaration = declare(name, *args, **kwargs)

    def decorate(target: _T) -> _T:
        carrier = _carrier(target)
        existing = vars(carrier).get(ATTRIBUTES_ATTR, ())
        setattr(carrier, ATTRIBUTES_ATTR, (declaration, *existing))
        return target

    return decorate


def trait(cls: type[_T]) -> type[_T]:
    setattr(cls, TRAIT_ATTR, True)
    return cls


def declared_attributes(target: Any) -> tuple[AttributeDeclaration, ...]:
    """Declarations made directly on ``target`` (never inherited)."""
    carrier = _carrier(target)
    if carrier is None:
        return ()
    try:
        return tuple(vars(carrier).get(ATTRIBUTES_ATTR, ()))
    except TypeError:
        return ()


def is_marked_trait(cls: type) -> bool:
    return bool(vars(cls).get(TRAIT_ATTR, False))


__all__ = [
    "AttributeDeclaration",
    "attribute",
    "declare",
    "declared_attributes",
    "is_marked_trait",
    "trait",
]
