"""Descriptor model for symbols and their members."""

from descriptors.builders import (
    ArgumentBuilder,
    AttributeBuilder,
    ConstantBuilder,
    MethodBuilder,
    PropertyBuilder,
    SymbolBuilder,
)
from descriptors.models import (
    ANY_TYPE,
    NULLABLE_MARKER,
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

__all__ = [
    "ANY_TYPE",
    "NO_MODIFIERS",
    "NULLABLE_MARKER",
    "ArgumentBuilder",
    "ArgumentDescriptor",
    "AttributeArgument",
    "AttributeBuilder",
    "AttributeDescriptor",
    "ConstantBuilder",
    "ConstantDescriptor",
    "MethodBuilder",
    "MethodDescriptor",
    "Modifier",
    "Named",
    "Positional",
    "PropertyBuilder",
    "PropertyDescriptor",
    "SymbolBuilder",
    "SymbolDescriptor",
    "SymbolKind",
]
