"""Descriptor models for symbols and their members.

Descriptors are frozen once built. They are produced either by the live
introspection path or by replaying a persisted snapshot, and both origins
yield structurally equal graphs.
"""

from __future__ import annotations

from enum import Enum
from functools import cached_property
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from descriptors.modifiers import NO_MODIFIERS, Modifier, ModifierAccessors
from utils import split_identifier

# Rendered type for members declared without an annotation.
ANY_TYPE = "Any"

# Prefix marking a type that also admits None.
NULLABLE_MARKER = "?"


class SymbolKind(str, Enum):
    """Kinds of class-like symbols."""

    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Positional(_Frozen):
    """Key of an attribute argument passed by position."""

    index: int


class Named(_Frozen):
    """Key of an attribute argument passed by keyword."""

    key: str


class AttributeArgument(_Frozen):
    """One constructor argument of a declared attribute."""

    key: Positional | Named
    value: Any = None

    @property
    def label(self) -> str:
        """Positional index or keyword, as text."""
        if isinstance(self.key, Positional):
            return str(self.key.index)
        return self.key.key


class AttributeDescriptor(_Frozen):
    """A declared attribute and its constructor arguments."""

    name: str
    arguments: tuple[AttributeArgument, ...] = ()

    def positional(self) -> list[Any]:
        """Values of positional arguments, ordered by index."""
        items = [a for a in self.arguments if isinstance(a.key, Positional)]
        items.sort(key=lambda a: a.key.index)  # type: ignore[union-attr]
        return [a.value for a in items]

    def named(self) -> dict[str, Any]:
        """Keyword arguments in declaration order."""
        return {
            a.key.key: a.value for a in self.arguments if isinstance(a.key, Named)
        }


class AttributeQueries:
    """Lookup helpers for descriptors carrying an ``attributes`` tuple."""

    def has_attribute(self, name: str) -> bool:
        return self.get_attribute(name) is not None

    def get_attribute(self, name: str) -> AttributeDescriptor | None:
        """Return the first attribute named ``name``, if any."""
        for attribute in self.attributes:  # type: ignore[attr-defined]
            if attribute.name == name:
                return attribute
        return None


class ArgumentDescriptor(AttributeQueries, _Frozen):
    """A parameter of a method."""

    name: str
    position: int = Field(ge=0)
    type: str = ANY_TYPE
    optional: bool = False
    has_default: bool = False
    default: Any = None
    variadic: bool = False
    by_reference: bool = False
    attributes: tuple[AttributeDescriptor, ...] = ()


class PropertyDescriptor(ModifierAccessors, AttributeQueries, _Frozen):
    """An instance or class-level attribute of a symbol."""

    name: str
    modifiers: Modifier = NO_MODIFIERS
    type: str = ANY_TYPE
    has_default: bool = False
    default: Any = None
    attributes: tuple[AttributeDescriptor, ...] = ()


class ConstantDescriptor(ModifierAccessors, AttributeQueries, _Frozen):
    """A constant declared on a symbol."""

    name: str
    modifiers: Modifier = NO_MODIFIERS
    type: str = ANY_TYPE
    value: Any = None
    attributes: tuple[AttributeDescriptor, ...] = ()


class MethodDescriptor(ModifierAccessors, AttributeQueries, _Frozen):
    """A method declared on, or inherited by, a symbol."""

    name: str
    modifiers: Modifier = NO_MODIFIERS
    return_type: str = ANY_TYPE
    arguments: tuple[ArgumentDescriptor, ...] = ()
    attributes: tuple[AttributeDescriptor, ...] = ()

    @property
    def argument_count(self) -> int:
        return len(self.arguments)

    def has_argument(self, name: str) -> bool:
        return self.get_argument(name) is not None

    def get_argument(self, name: str) -> ArgumentDescriptor | None:
        for argument in self.arguments:
            if argument.name == name:
                return argument
        return None


class SymbolDescriptor(ModifierAccessors, AttributeQueries, _Frozen):
    """A class, interface or trait with its members and relations."""

    name: str
    namespace: str = ""
    kind: SymbolKind
    properties: dict[str, PropertyDescriptor] = Field(default_factory=dict)
    constants: dict[str, ConstantDescriptor] = Field(default_factory=dict)
    methods: dict[str, MethodDescriptor] = Field(default_factory=dict)
    traits: tuple[str, ...] = ()
    interfaces: tuple[str, ...] = ()
    parent: str | None = None
    attributes: tuple[AttributeDescriptor, ...] = ()
    modifiers: Modifier = NO_MODIFIERS

    @cached_property
    def short_name(self) -> str:
        return split_identifier(self.name)[1]

    # Properties

    def has_property(self, name: str) -> bool:
        return name in self.properties

    def get_property(self, name: str) -> PropertyDescriptor | None:
        return self.properties.get(name)

    # Methods

    def has_method(self, name: str) -> bool:
        return name in self.methods

    def get_method(self, name: str) -> MethodDescriptor | None:
        return self.methods.get(name)

    # Constants

    def has_constant(self, name: str) -> bool:
        return name in self.constants

    def get_constant(self, name: str) -> ConstantDescriptor | None:
        return self.constants.get(name)

    @property
    def constant_count(self) -> int:
        return len(self.constants)

    # Relations

    def uses_trait(self, identifier: str) -> bool:
        return identifier in self.traits

    def does_implement(self, identifier: str) -> bool:
        return identifier in self.interfaces

    def extends(self, identifier: str) -> bool:
        return self.parent == identifier


__all__ = [
    "ANY_TYPE",
    "NULLABLE_MARKER",
    "ArgumentDescriptor",
    "AttributeArgument",
    "AttributeDescriptor",
    "ConstantDescriptor",
    "MethodDescriptor",
    "Named",
    "Positional",
    "PropertyDescriptor",
    "SymbolDescriptor",
    "SymbolKind",
]
