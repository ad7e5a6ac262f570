"""Fluent builders producing frozen descriptors.

Every setter returns the builder itself so population reads as one chain::

    method = (
        MethodBuilder()
        .set_name("render")
        .set_public()
        .set_return_type("str")
        .build()
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from descriptors.models import (
    ANY_TYPE,
    ArgumentDescriptor,
    AttributeArgument,
    AttributeDescriptor,
    ConstantDescriptor,
    MethodDescriptor,
    Named,
    Positional,
    PropertyDescriptor,
    SymbolDescriptor,
    SymbolKind,
)
from descriptors.modifiers import NO_MODIFIERS, Modifier
from utils import split_identifier

if TYPE_CHECKING:
    from collections.abc import Iterable


class _NameMixin:
    _name: str | None = None

    def set_name(self, name: str) -> Self:
        self._name = name
        return self

    def _require_name(self) -> str:
        if not self._name:
            msg = f"{type(self).__name__} requires a name before build()"
            raise ValueError(msg)
        return self._name


class _ModifierMixin:
    _modifiers: Modifier = NO_MODIFIERS

    def _flag(self, flag: Modifier, value: bool) -> Self:
        if value:
            self._modifiers |= flag
        else:
            self._modifiers &= ~flag
        return self

    def set_modifiers(self, modifiers: Modifier) -> Self:
        self._modifiers = modifiers
        return self

    def set_public(self, value: bool = True) -> Self:
        return self._flag(Modifier.PUBLIC, value)

    def set_protected(self, value: bool = True) -> Self:
        return self._flag(Modifier.PROTECTED, value)

    def set_private(self, value: bool = True) -> Self:
        return self._flag(Modifier.PRIVATE, value)

    def set_static(self, value: bool = True) -> Self:
        return self._flag(Modifier.STATIC, value)

    def set_final(self, value: bool = True) -> Self:
        return self._flag(Modifier.FINAL, value)

    def set_abstract(self, value: bool = True) -> Self:
        return self._flag(Modifier.ABSTRACT, value)

    def set_readonly(self, value: bool = True) -> Self:
        return self._flag(Modifier.READONLY, value)


class _AttributeMixin:
    _attributes: list[AttributeDescriptor]

    def add_attribute(self, attribute: AttributeDescriptor) -> Self:
        self._attributes.append(attribute)
        return self

    def _built_attributes(self) -> tuple[AttributeDescriptor, ...]:
        return tuple(self._attributes)


class _TypedMixin:
    """Type annotation and optional default value."""

    _type: str = ANY_TYPE
    _has_default: bool = False
    _default: Any = None

    def set_type(self, type_name: str | None) -> Self:
        self._type = type_name or ANY_TYPE
        return self

    def set_default(self, value: Any) -> Self:
        self._has_default = True
        self._default = value
        return self


class AttributeBuilder(_NameMixin):
    """Builds an :class:`AttributeDescriptor`.

    Arguments are keyed by position or keyword; re-adding a key replaces the
    earlier value in place.
    """

    def __init__(self) -> None:
        self._arguments: dict[tuple[str, int | str], AttributeArgument] = {}

    def _put(self, argument: AttributeArgument) -> Self:
        if isinstance(argument.key, Positional):
            slot: tuple[str, int | str] = ("positional", argument.key.index)
        else:
            slot = ("named", argument.key.key)
        self._arguments[slot] = argument
        return self

    def add_argument(self, argument: AttributeArgument) -> Self:
        return self._put(argument)

    def add_positional(self, value: Any, index: int | None = None) -> Self:
        if index is None:
            index = sum(1 for kind, _ in self._arguments if kind == "positional")
        return self._put(AttributeArgument(key=Positional(index=index), value=value))

    def add_named(self, key: str, value: Any) -> Self:
        return self._put(AttributeArgument(key=Named(key=key), value=value))

    def build(self) -> AttributeDescriptor:
        return AttributeDescriptor(
            name=self._require_name(),
            arguments=tuple(self._arguments.values()),
        )


class ArgumentBuilder(_NameMixin, _TypedMixin, _AttributeMixin):
    """Builds an :class:`ArgumentDescriptor`."""

    def __init__(self) -> None:
        self._attributes = []
        self._position = 0
        self._optional = False
        self._variadic = False
        self._by_reference = False

    def set_position(self, position: int) -> Self:
        self._position = position
        return self

    def set_optional(self, optional: bool = True) -> Self:
        self._optional = optional
        return self

    def set_variadic(self, variadic: bool = True) -> Self:
        self._variadic = variadic
        return self

    def set_by_reference(self, by_reference: bool = True) -> Self:
        self._by_reference = by_reference
        return self

    def build(self) -> ArgumentDescriptor:
        # A default only exists for optional or variadic parameters.
        keep_default = self._has_default and (self._optional or self._variadic)
        return ArgumentDescriptor(
            name=self._require_name(),
            position=self._position,
            type=self._type,
            optional=self._optional,
            has_default=keep_default,
            default=self._default if keep_default else None,
            variadic=self._variadic,
            by_reference=self._by_reference,
            attributes=self._built_attributes(),
        )


class PropertyBuilder(_NameMixin, _ModifierMixin, _TypedMixin, _AttributeMixin):
    """Builds a :class:`PropertyDescriptor`."""

    def __init__(self) -> None:
        self._attributes = []

    def build(self) -> PropertyDescriptor:
        return PropertyDescriptor(
            name=self._require_name(),
            modifiers=self._modifiers,
            type=self._type,
            has_default=self._has_default,
            default=self._default,
            attributes=self._built_attributes(),
        )


class ConstantBuilder(_NameMixin, _ModifierMixin, _TypedMixin, _AttributeMixin):
    """Builds a :class:`ConstantDescriptor`."""

    def __init__(self) -> None:
        self._attributes = []

    def set_value(self, value: Any) -> Self:
        return self.set_default(value)

    def build(self) -> ConstantDescriptor:
        return ConstantDescriptor(
            name=self._require_name(),
            modifiers=self._modifiers,
            type=self._type,
            value=self._default,
            attributes=self._built_attributes(),
        )


class MethodBuilder(_NameMixin, _ModifierMixin, _AttributeMixin):
    """Builds a :class:`MethodDescriptor`."""

    def __init__(self) -> None:
        self._attributes = []
        self._return_type = ANY_TYPE
        self._arguments: dict[str, ArgumentDescriptor] = {}

    def set_return_type(self, return_type: str | None) -> Self:
        self._return_type = return_type or ANY_TYPE
        return self

    def add_argument(self, argument: ArgumentDescriptor) -> Self:
        self._arguments[argument.name] = argument
        return self

    def build(self) -> MethodDescriptor:
        return MethodDescriptor(
            name=self._require_name(),
            modifiers=self._modifiers,
            return_type=self._return_type,
            arguments=tuple(self._arguments.values()),
            attributes=self._built_attributes(),
        )


class SymbolBuilder(_NameMixin, _ModifierMixin, _AttributeMixin):
    """Builds a :class:`SymbolDescriptor` of a fixed kind."""

    def __init__(self, kind: SymbolKind | str) -> None:
        self._attributes = []
        self._kind = SymbolKind(kind)
        self._namespace: str | None = None
        self._properties: dict[str, PropertyDescriptor] = {}
        self._constants: dict[str, ConstantDescriptor] = {}
        self._methods: dict[str, MethodDescriptor] = {}
        self._traits: list[str] = []
        self._interfaces: list[str] = []
        self._parent: str | None = None

    @property
    def kind(self) -> SymbolKind:
        return self._kind

    def set_namespace(self, namespace: str) -> Self:
        self._namespace = namespace
        return self

    def add_property(self, prop: PropertyDescriptor) -> Self:
        self._properties[prop.name] = prop
        return self

    def add_constant(self, constant: ConstantDescriptor) -> Self:
        self._constants[constant.name] = constant
        return self

    def add_method(self, method: MethodDescriptor) -> Self:
        self._methods[method.name] = method
        return self

    def add_trait(self, identifier: str) -> Self:
        self._traits.append(identifier)
        return self

    def add_traits(self, identifiers: Iterable[str]) -> Self:
        for identifier in identifiers:
            self.add_trait(identifier)
        return self

    def add_interface(self, identifier: str) -> Self:
        self._interfaces.append(identifier)
        return self

    def set_parent(self, identifier: str | None) -> Self:
        self._parent = identifier
        return self

    def build(self) -> SymbolDescriptor:
        name = self._require_name()
        namespace = self._namespace
        if namespace is None:
            namespace = split_identifier(name)[0]
        return SymbolDescriptor(
            name=name,
            namespace=namespace,
            kind=self._kind,
            properties=dict(self._properties),
            constants=dict(self._constants),
            methods=dict(self._methods),
            traits=tuple(self._traits),
            interfaces=tuple(self._interfaces),
            parent=self._parent,
            attributes=self._built_attributes(),
            modifiers=self._modifiers,
        )


__all__ = [
    "ArgumentBuilder",
    "AttributeBuilder",
    "ConstantBuilder",
    "MethodBuilder",
    "PropertyBuilder",
    "SymbolBuilder",
]
