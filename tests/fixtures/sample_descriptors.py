"""Hand-built descriptors covering every record type."""

from descriptors import (
    ArgumentBuilder,
    AttributeBuilder,
    ConstantBuilder,
    MethodBuilder,
    PropertyBuilder,
    SymbolBuilder,
    SymbolDescriptor,
    SymbolKind,
)
from snapshot.literals import EnumRef, OpaqueValue


def build_sample_symbol(name: str = "Acme.Shop.Widget") -> SymbolDescriptor:
    column = (
        AttributeBuilder()
        .set_name("Column")
        .add_positional("price")
        .add_named("nullable", False)
        .build()
    )
    route = (
        AttributeBuilder()
        .set_name("Route")
        .add_positional("/render")
        .add_named("methods", ("GET", "HEAD"))
        .build()
    )
    render = (
        MethodBuilder()
        .set_name("render")
        .set_public()
        .set_final()
        .set_return_type("str")
        .add_argument(
            ArgumentBuilder()
            .set_name("indent")
            .set_position(0)
            .set_type("int")
            .set_optional()
            .set_default(0)
            .build()
        )
        .add_argument(
            ArgumentBuilder()
            .set_name("extra")
            .set_position(1)
            .set_type("?str")
            .set_variadic()
            .add_attribute(AttributeBuilder().set_name("Sensitive").build())
            .build()
        )
        .add_attribute(route)
        .build()
    )
    return (
        SymbolBuilder(SymbolKind.CLASS)
        .set_name(name)
        .add_property(
            PropertyBuilder()
            .set_name("price")
            .set_public()
            .set_type("float")
            .set_default(float("inf"))
            .add_attribute(column)
            .build()
        )
        .add_property(PropertyBuilder().set_name("name").set_protected().build())
        .add_property(
            PropertyBuilder().set_name("owner").set_private().set_default(None).build()
        )
        .add_constant(
            ConstantBuilder()
            .set_name("COLORS")
            .set_public()
            .set_final()
            .set_type("dict")
            .set_value({"red": EnumRef("acme.Color", "RED"), "raw": b"\x01"})
            .build()
        )
        .add_constant(
            ConstantBuilder()
            .set_name("HANDLE")
            .set_type("acme.Handle")
            .set_value(OpaqueValue("acme.Handle", "<Handle>"))
            .build()
        )
        .add_method(render)
        .add_method(
            MethodBuilder().set_name("reset").set_protected().set_abstract().build()
        )
        .add_trait("Acme.Timestamps")
        .add_trait("Acme.Logging")
        .add_interface("Acme.Renderable")
        .set_parent("Acme.Base")
        .add_attribute(
            AttributeBuilder()
            .set_name("Entity")
            .add_positional("widgets")
            .add_named("tags", {"a", "b"})
            .build()
        )
        .set_abstract()
        .build()
    )
