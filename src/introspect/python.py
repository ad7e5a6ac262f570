"""Live introspection of Python classes into symbol descriptors.

Classes are located through an explicit registry, configured aliases or a
dotted import path, then read with :mod:`inspect` and :mod:`typing`. This is
the expensive tier that the loader caches.
"""

from __future__ import annotations

import abc
import inspect
import types
import typing
from collections.abc import Iterable, Mapping
from typing import Annotated, Any, ClassVar, Final, Literal

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
    AttributeDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    SymbolDescriptor,
    SymbolKind,
)
from descriptors.modifiers import NO_MODIFIERS, Modifier
from introspect.errors import NotFound
from introspect.markers import (
    AttributeDeclaration,
    declared_attributes,
    is_marked_trait,
)
from logs import get_logger
from snapshot.literals import normalize_value
from utils import import_dotted, qualified_name

logger = get_logger("introspect")

# Bases that carry no structure of their own.
_STRUCTURAL_BASES: frozenset[type] = frozenset(
    {object, typing.Generic, typing.Protocol, abc.ABC}  # type: ignore[arg-type]
)

# Modules whose helper functions get injected into user classes.
_FOREIGN_MODULES = frozenset({"abc", "builtins", "enum", "typing"})

_IGNORED_NAMES = frozenset(
    {
        "_abc_impl",
        "_is_protocol",
        "_is_runtime_protocol",
        "__annotate__",
        "__annotate_func__",
        "__annotations_cache__",
    }
)

_NONE_TYPE = type(None)


def _annotations(obj: Any) -> dict[str, Any]:
    try:
        return dict(inspect.get_annotations(obj, eval_str=True))
    except Exception:  # noqa: BLE001 - unresolved forward references
        return dict(inspect.get_annotations(obj))


def _lookup(cls: type, name: str) -> tuple[bool, Any]:
    """Find the runtime value of a class attribute along the MRO."""
    for owner in cls.__mro__:
        namespace = vars(owner)
        if name in namespace:
            return True, namespace[name]
    return False, None


def _is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def _is_foreign(value: Any) -> bool:
    func = value.__func__ if isinstance(value, (staticmethod, classmethod)) else value
    return getattr(func, "__module__", None) in _FOREIGN_MODULES


def _is_method(value: Any) -> bool:
    return isinstance(value, (staticmethod, classmethod)) or inspect.isfunction(value)


def _is_abstract(value: Any) -> bool:
    return bool(getattr(value, "__isabstractmethod__", False))


def _demangle(name: str, owner: type) -> tuple[str, bool]:
    """Undo private name mangling. Returns the source name and privacy."""
    prefix = f"_{owner.__name__.lstrip('_')}__"
    if name.startswith(prefix) and not name.endswith("__"):
        return "__" + name[len(prefix) :], True
    return name, False


def _visibility(name: str, private: bool) -> Modifier:
    if private:
        return Modifier.PRIVATE
    if name.startswith("_") and not _is_dunder(name):
        return Modifier.PROTECTED
    return Modifier.PUBLIC


def _is_constant_name(name: str) -> bool:
    stripped = name.strip("_")
    return bool(stripped) and stripped.isupper()


def _unwrap(hint: Any) -> tuple[Any, set[Any], list[AttributeDeclaration]]:
    """Strip ``Annotated``, ``ClassVar`` and ``Final`` wrappers from a hint."""
    qualifiers: set[Any] = set()
    declarations: list[AttributeDeclaration] = []
    while True:
        origin = typing.get_origin(hint)
        if origin is Annotated:
            hint, *metadata = typing.get_args(hint)
            declarations.extend(
                item for item in metadata if isinstance(item, AttributeDeclaration)
            )
        elif origin in (ClassVar, Final):
            qualifiers.add(origin)
            hint = typing.get_args(hint)[0]
        elif hint is ClassVar or hint is Final:
            qualifiers.add(hint)
            hint = inspect.Parameter.empty
        else:
            return hint, qualifiers, declarations


class PythonIntrospector:
    """Introspection facility over importable Python classes.

    Args:
        aliases: Identifier to dotted import path, for identifiers that are
            not import paths themselves (e.g. ``"Acme.Widget"``).
        registry: Identifier to class, consulted before anything is imported.
    """

    def __init__(
        self,
        aliases: Mapping[str, str] | None = None,
        registry: Mapping[str, type] | None = None,
    ) -> None:
        self._aliases = dict(aliases or {})
        self._registry: dict[str, type] = {}
        self._names: dict[type, str] = {}
        for identifier, cls in (registry or {}).items():
            self.register(identifier, cls)

    def register(self, identifier: str, cls: type) -> None:
        """Make ``cls`` resolvable as ``identifier``."""
        self._registry[identifier] = cls
        self._names.setdefault(cls, identifier)

    # ------------------------------------------------------------------
    # Locating

    def locate(self, identifier: str) -> type:
        """Return the class named by ``identifier``.

        Raises:
            NotFound: If the identifier cannot be resolved to a class.
        """
        if identifier in self._registry:
            return self._registry[identifier]
        path = self._aliases.get(identifier, identifier)
        try:
            target = import_dotted(path)
        except (ImportError, AttributeError) as exc:
            raise NotFound(identifier, str(exc)) from exc
        if not inspect.isclass(target):
            raise NotFound(identifier, f"{path} is not a class")
        return target

    def name_of(self, cls: type) -> str:
        """Identifier used when ``cls`` appears as a related symbol or type."""
        if cls in self._names:
            return self._names[cls]
        dotted = qualified_name(cls)
        for identifier, path in self._aliases.items():
            if path == dotted:
                return identifier
        return dotted

    # ------------------------------------------------------------------
    # Classification

    def is_interface(self, cls: type) -> bool:
        if cls in _STRUCTURAL_BASES:
            return False
        if vars(cls).get("_is_protocol", False):
            return True
        if not isinstance(cls, abc.ABCMeta):
            return False
        for base in cls.__bases__:
            if base not in _STRUCTURAL_BASES and not self.is_interface(base):
                return False
        own = [
            value
            for name, value in vars(cls).items()
            if (_is_method(value) or isinstance(value, property))
            and not _is_foreign(value)
            and name not in _IGNORED_NAMES
        ]
        if not own:
            return abc.ABC in cls.__bases__
        return all(_is_abstract(value) for value in own)

    def is_trait(self, cls: type) -> bool:
        return is_marked_trait(cls) or cls.__name__.endswith("Mixin")

    def classify(self, cls: type) -> SymbolKind:
        if self.is_interface(cls):
            return SymbolKind.INTERFACE
        if self.is_trait(cls):
            return SymbolKind.TRAIT
        return SymbolKind.CLASS

    def _parent(self, cls: type) -> type | None:
        for base in cls.__bases__:
            if base in _STRUCTURAL_BASES or base.__module__ == "builtins":
                continue
            if self.is_interface(base) or self.is_trait(base):
                continue
            return base
        return None

    # ------------------------------------------------------------------
    # Describing

    def describe(self, kind: SymbolKind | str, identifier: str) -> SymbolDescriptor:
        """Build a fresh descriptor for ``identifier`` as a symbol of ``kind``.

        Raises:
            NotFound: If the identifier does not resolve to a class.
        """
        kind = SymbolKind(kind)
        cls = self.locate(identifier)
        actual = self.classify(cls)
        if actual is not kind:
            logger.debug(
                "%s requested as %s but looks like %s",
                identifier,
                kind.value,
                actual.value,
            )
        logger.debug("introspecting %s (%s)", identifier, qualified_name(cls))

        builder = SymbolBuilder(kind).set_name(identifier)
        self._collect_members(cls, builder)

        for base in cls.__bases__:
            if base not in _STRUCTURAL_BASES and self.is_trait(base):
                builder.add_trait(self.name_of(base))
        for ancestor in cls.__mro__[1:]:
            if self.is_interface(ancestor):
                builder.add_interface(self.name_of(ancestor))
        parent = self._parent(cls)
        if parent is not None:
            builder.set_parent(self.name_of(parent))
        for attribute in self._attributes(declared_attributes(cls)):
            builder.add_attribute(attribute)

        modifiers = NO_MODIFIERS
        if getattr(cls, "__final__", False):
            modifiers |= Modifier.FINAL
        if kind is SymbolKind.CLASS and inspect.isabstract(cls):
            modifiers |= Modifier.ABSTRACT
        return builder.set_modifiers(modifiers).build()

    def _collect_members(self, cls: type, builder: SymbolBuilder) -> None:
        seen: set[str] = set()
        for owner in cls.__mro__:
            if owner in _STRUCTURAL_BASES or owner.__module__ == "builtins":
                continue
            hints = _annotations(owner)
            namespace = vars(owner)

            for raw_name, hint in hints.items():
                name, private = _demangle(raw_name, owner)
                if name in seen or _is_dunder(name) or raw_name in _IGNORED_NAMES:
                    continue
                seen.add(name)
                has_value, value = _lookup(cls, raw_name)
                if isinstance(value, types.MemberDescriptorType):
                    has_value, value = False, None
                self._add_annotated(
                    builder, name, private, hint, has_value=has_value, value=value
                )

            for raw_name, value in namespace.items():
                name, private = _demangle(raw_name, owner)
                if name in seen or raw_name in _IGNORED_NAMES:
                    continue
                if raw_name.startswith("_abc_"):
                    continue
                if _is_method(value):
                    if _is_foreign(value):
                        continue
                    seen.add(name)
                    builder.add_method(self._method(name, private, value))
                elif isinstance(value, property):
                    seen.add(name)
                    builder.add_property(self._property_object(name, private, value))
                elif _is_dunder(name) or inspect.isclass(value) or callable(value):
                    continue
                elif isinstance(value, (types.ModuleType, types.MemberDescriptorType)):
                    continue
                elif _is_constant_name(name):
                    seen.add(name)
                    builder.add_constant(
                        ConstantBuilder()
                        .set_name(name)
                        .set_modifiers(_visibility(name, private))
                        .set_type(qualified_name(type(value)))
                        .set_value(normalize_value(value))
                        .build()
                    )
                else:
                    seen.add(name)
                    builder.add_property(
                        PropertyBuilder()
                        .set_name(name)
                        .set_modifiers(_visibility(name, private))
                        .set_default(normalize_value(value))
                        .build()
                    )

    def _add_annotated(
        self,
        builder: SymbolBuilder,
        name: str,
        private: bool,
        hint: Any,
        has_value: bool,
        value: Any,
    ) -> None:
        inner, qualifiers, declarations = _unwrap(hint)
        modifiers = _visibility(name, private)
        attributes = self._attributes(declarations)

        if Final in qualifiers or (has_value and _is_constant_name(name)):
            if not has_value:
                return
            if Final in qualifiers:
                modifiers |= Modifier.FINAL
            constant = (
                ConstantBuilder()
                .set_name(name)
                .set_modifiers(modifiers)
                .set_type(qualified_name(type(value)))
                .set_value(normalize_value(value))
            )
            for attribute in attributes:
                constant.add_attribute(attribute)
            builder.add_constant(constant.build())
            return

        if ClassVar in qualifiers:
            modifiers |= Modifier.STATIC
        prop = (
            PropertyBuilder()
            .set_name(name)
            .set_modifiers(modifiers)
            .set_type(self.render_type(inner))
        )
        if has_value:
            prop.set_default(normalize_value(value))
        for attribute in attributes:
            prop.add_attribute(attribute)
        builder.add_property(prop.build())

    def _property_object(
        self, name: str, private: bool, value: property
    ) -> PropertyDescriptor:
        modifiers = _visibility(name, private)
        if value.fset is None:
            modifiers |= Modifier.READONLY
        if _is_abstract(value):
            modifiers |= Modifier.ABSTRACT
        return_hint = inspect.Parameter.empty
        if value.fget is not None:
            return_hint = _annotations(value.fget).get("return", return_hint)
        prop = (
            PropertyBuilder()
            .set_name(name)
            .set_modifiers(modifiers)
            .set_type(self.render_type(_unwrap(return_hint)[0]))
        )
        for attribute in self._attributes(declared_attributes(value)):
            prop.add_attribute(attribute)
        return prop.build()

    def _method(self, name: str, private: bool, value: Any) -> MethodDescriptor:
        modifiers = _visibility(name, private)
        drop_first = True
        func = value
        if isinstance(value, staticmethod):
            modifiers |= Modifier.STATIC
            drop_first = False
            func = value.__func__
        elif isinstance(value, classmethod):
            modifiers |= Modifier.STATIC
            func = value.__func__
        if getattr(func, "__final__", False):
            modifiers |= Modifier.FINAL
        if _is_abstract(value) or _is_abstract(func):
            modifiers |= Modifier.ABSTRACT

        hints = _annotations(func)
        method = MethodBuilder().set_name(name).set_modifiers(modifiers)
        if "return" in hints:
            method.set_return_type(self.render_type(_unwrap(hints["return"])[0]))

        try:
            parameters = list(inspect.signature(func).parameters.values())
        except (TypeError, ValueError):
            parameters = []
        if drop_first and parameters and parameters[0].kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            parameters = parameters[1:]

        for position, parameter in enumerate(parameters):
            inner, _, declarations = _unwrap(hints.get(parameter.name, parameter.empty))
            argument = (
                ArgumentBuilder()
                .set_name(parameter.name)
                .set_position(position)
                .set_type(self.render_type(inner))
            )
            if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
                argument.set_variadic().set_optional()
            elif parameter.default is not parameter.empty:
                argument.set_optional().set_default(normalize_value(parameter.default))
            for attribute in self._attributes(declarations):
                argument.add_attribute(attribute)
            method.add_argument(argument.build())

        for attribute in self._attributes(declared_attributes(value)):
            method.add_attribute(attribute)
        return method.build()

    def _attributes(
        self, declarations: Iterable[AttributeDeclaration]
    ) -> list[AttributeDescriptor]:
        built = []
        for declaration in declarations:
            attribute = AttributeBuilder().set_name(declaration.name)
            for value in declaration.args:
                attribute.add_positional(normalize_value(value))
            for key, value in declaration.kwargs:
                attribute.add_named(key, normalize_value(value))
            built.append(attribute.build())
        return built

    # ------------------------------------------------------------------
    # Types

    def render_type(self, hint: Any) -> str:
        """Render a resolved annotation as text.

        ``Optional[X]`` and ``X | None`` render as ``?X``; a missing
        annotation renders as ``Any``.
        """
        if hint is inspect.Parameter.empty or hint is Any:
            return ANY_TYPE
        if hint is None or hint is _NONE_TYPE:
            return "None"
        if isinstance(hint, str):
            return hint
        if isinstance(hint, typing.ForwardRef):
            return hint.__forward_arg__
        if isinstance(hint, typing.TypeVar):
            return hint.__name__

        origin = typing.get_origin(hint)
        args = typing.get_args(hint)
        if origin is typing.Union or origin is types.UnionType:
            members = [arg for arg in args if arg is not _NONE_TYPE]
            rendered = " | ".join(self.render_type(arg) for arg in members)
            if len(members) < len(args):
                if len(members) > 1:
                    rendered = f"({rendered})"
                return f"{NULLABLE_MARKER}{rendered}"
            return rendered
        if origin is Literal:
            return f"Literal[{', '.join(repr(arg) for arg in args)}]"
        if origin is not None:
            head = self.render_type(origin)
            if not args:
                return head
            return f"{head}[{', '.join(self._render_arg(arg) for arg in args)}]"
        if inspect.isclass(hint):
            return self.name_of(hint)
        return repr(hint).replace("typing.", "")

    def _render_arg(self, arg: Any) -> str:
        if isinstance(arg, list):
            return f"[{', '.join(self.render_type(item) for item in arg)}]"
        if arg is Ellipsis:
            return "..."
        return self.render_type(arg)


__all__ = ["PythonIntrospector"]
