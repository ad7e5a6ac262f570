from __future__ import annotations

from typing import Any, Optional

import pytest

from descriptors import Modifier, Named, Positional, SymbolKind
from fixtures import sample_symbols
from fixtures.sample_symbols import (
    AbstractShape,
    Color,
    Configured,
    Renderable,
    SealedWidget,
    Sized,
    Timestamps,
    Widget,
)
from introspect import NotFound, PythonIntrospector
from snapshot import EnumRef, OpaqueValue, dump_snapshot, load_snapshot
from utils import qualified_name

MODULE = sample_symbols.__name__


@pytest.fixture
def introspector() -> PythonIntrospector:
    return PythonIntrospector(
        registry={
            "Shop.Widget": Widget,
            "Shop.Renderable": Renderable,
            "Shop.Timestamps": Timestamps,
        }
    )


@pytest.fixture
def widget(introspector: PythonIntrospector):
    return introspector.describe(SymbolKind.CLASS, "Shop.Widget")


def test_identity_and_relations(widget) -> None:
    assert widget.name == "Shop.Widget"
    assert widget.namespace == "Shop"
    assert widget.short_name == "Widget"
    assert widget.kind is SymbolKind.CLASS
    assert widget.parent == f"{MODULE}.Base"
    assert widget.traits == ("Shop.Timestamps", f"{MODULE}.LoggingMixin")
    assert widget.interfaces == ("Shop.Renderable",)
    assert widget.modifiers == Modifier(0)


def test_class_attribute_declarations(widget) -> None:
    entity = widget.get_attribute("Entity")

    assert entity is not None
    assert entity.positional() == ["widgets"]
    assert entity.named() == {"primary": "id"}


def test_constants(widget) -> None:
    max_size = widget.get_constant("MAX_SIZE")
    default_color = widget.get_constant("DEFAULT_COLOR")

    assert max_size.value == 10
    assert max_size.type == "int"
    assert max_size.is_public
    assert not max_size.is_final
    assert default_color.is_final
    assert default_color.value == EnumRef(type_name=qualified_name(Color), member="RED")
    assert widget.constant_count == 2


def test_properties(widget) -> None:
    label = widget.get_property("label")
    count = widget.get_property("count")
    tags = widget.get_property("tags")

    assert label.type == "str"
    assert label.default == "widget"
    column = label.get_attribute("Column")
    assert [a.key for a in column.arguments] == [
        Positional(index=0),
        Named(key="nullable"),
    ]
    assert column.named() == {"nullable": False}
    assert count.is_static
    assert count.type == "int"
    assert count.default == 0
    assert tags.type == "list[str]"
    assert not tags.has_default


def test_visibility_by_naming(widget) -> None:
    assert widget.get_property("_secret").is_protected
    assert widget.get_property("__hidden").is_private
    assert widget.get_property("__hidden").default == "x"
    assert widget.get_method("__private_helper").is_private
    assert widget.get_method("render").is_public


def test_readonly_property_object(widget) -> None:
    area = widget.get_property("area")

    assert area.is_readonly
    assert area.type == "int"
    assert not area.has_default


def test_inherited_members_are_included(widget) -> None:
    assert widget.has_property("base_flag")
    assert widget.has_method("describe")
    assert widget.has_method("touch")
    assert widget.get_method("touch").has_attribute("Hook")
    assert widget.get_property("created").type == "?float"
    assert widget.get_method("log").get_argument("args").variadic


def test_method_signature(widget) -> None:
    resize = widget.get_method("resize")
    width, height, rest, options = resize.arguments

    assert resize.return_type == "Shop.Widget"
    assert [a.position for a in resize.arguments] == [0, 1, 2, 3]
    assert width.type == "int"
    assert width.has_attribute("Positive")
    assert not width.optional
    assert height.type == "?int"
    assert height.optional
    assert height.has_default
    assert height.default is None
    assert rest.variadic
    assert rest.type == "int"
    assert not rest.has_default
    assert options.variadic
    assert options.type == "Any"
    assert not any(a.by_reference for a in resize.arguments)


def test_static_and_class_methods(widget) -> None:
    create = widget.get_method("create")
    registry = widget.get_method("registry")

    assert create.is_static
    assert [a.name for a in create.arguments] == ["name"]
    assert registry.is_static
    assert registry.arguments == ()
    assert registry.return_type == "dict[str, int]"


def test_method_attribute_arguments(widget) -> None:
    route = widget.get_method("render").get_attribute("Route")

    assert route.positional() == ["/render"]
    assert route.named() == {"method": "GET"}
    assert widget.get_method("render").get_argument("indent").default == 0


def test_interface_from_abc(introspector: PythonIntrospector) -> None:
    renderable = introspector.describe(SymbolKind.INTERFACE, "Shop.Renderable")

    assert introspector.classify(Renderable) is SymbolKind.INTERFACE
    assert renderable.get_method("render").is_abstract
    assert renderable.get_attribute("Contract").positional() == ["render"]
    assert renderable.parent is None


def test_interface_from_protocol() -> None:
    introspector = PythonIntrospector()
    sized = introspector.describe("interface", f"{MODULE}.Sized")

    assert introspector.classify(Sized) is SymbolKind.INTERFACE
    assert list(sized.methods) == ["size"]
    assert sized.get_method("size").return_type == "int"
    assert sized.interfaces == ()


def test_interface_lists_the_interfaces_it_extends(
    introspector: PythonIntrospector,
) -> None:
    drawable = introspector.describe("interface", f"{MODULE}.Drawable")

    assert drawable.interfaces == ("Shop.Renderable",)
    assert drawable.parent is None
    assert drawable.get_method("render").is_abstract
    assert drawable.get_method("draw").is_abstract


def test_traits_by_marker_and_name(introspector: PythonIntrospector) -> None:
    assert introspector.classify(Timestamps) is SymbolKind.TRAIT
    assert introspector.classify(sample_symbols.LoggingMixin) is SymbolKind.TRAIT
    assert introspector.classify(Widget) is SymbolKind.CLASS


def test_abstract_and_final_classes() -> None:
    introspector = PythonIntrospector()

    shape = introspector.describe("class", f"{MODULE}.AbstractShape")
    sealed = introspector.describe("class", f"{MODULE}.SealedWidget")

    assert introspector.classify(AbstractShape) is SymbolKind.CLASS
    assert shape.is_abstract
    assert shape.get_method("area").is_abstract
    assert not shape.get_method("name").is_abstract
    assert sealed.is_final
    assert sealed.parent == f"{MODULE}.Widget"
    assert SealedWidget.__mro__[1] is Widget


def test_non_literal_values_are_normalized() -> None:
    introspector = PythonIntrospector()
    configured = introspector.describe("class", f"{MODULE}.Configured")

    handle = configured.get_property("handle").default
    assert handle == OpaqueValue(
        type_name=qualified_name(type(Configured.handle)), text="<Handle>"
    )
    assert configured.get_property("raw").default == b"\x00\xff"
    assert configured.get_property("pair").type == "tuple[int, str]"
    mode = configured.get_method("connect").get_argument("mode")
    assert mode.default == EnumRef(type_name=qualified_name(Color), member="BLUE")
    assert mode.type == qualified_name(Color)

    assert load_snapshot(dump_snapshot(configured)) == configured


def test_bare_annotation_keeps_inherited_value() -> None:
    boxed = PythonIntrospector().describe("class", f"{MODULE}.SizedBox")

    size = boxed.get_property("size")
    assert size.type == "int"
    assert size.has_default
    assert size.default == 3
    assert boxed.parent == f"{MODULE}.Box"


def test_alias_lookup() -> None:
    introspector = PythonIntrospector(aliases={"Acme.Widget": f"{MODULE}.AcmeWidget"})

    widget = introspector.describe("class", "Acme.Widget")

    assert widget.name == "Acme.Widget"
    assert widget.namespace == "Acme"
    assert introspector.name_of(sample_symbols.AcmeWidget) == "Acme.Widget"


@pytest.mark.parametrize(
    "identifier",
    ["Acme.DoesNotExist", f"{MODULE}.Missing", f"{MODULE}.not_a_class", ""],
)
def test_unknown_identifiers_raise_not_found(identifier: str) -> None:
    with pytest.raises(NotFound):
        PythonIntrospector().describe("class", identifier)


def test_render_type() -> None:
    introspector = PythonIntrospector(registry={"Shop.Widget": Widget})

    assert introspector.render_type(Optional[int]) == "?int"
    assert introspector.render_type(int | str | None) == "?(int | str)"
    assert introspector.render_type(int | str) == "int | str"
    assert introspector.render_type(Any) == "Any"
    assert introspector.render_type(None) == "None"
    assert introspector.render_type(list[Widget]) == "list[Shop.Widget]"
    assert introspector.render_type("Forward") == "Forward"
