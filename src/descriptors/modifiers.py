"""Modifier flags shared by symbols and their members."""

from __future__ import annotations

from enum import Flag


class Modifier(Flag):
    """Declaration modifiers stored as a single bit set."""

    PUBLIC = 1 << 0
    PROTECTED = 1 << 1
    PRIVATE = 1 << 2
    STATIC = 1 << 3
    FINAL = 1 << 4
    ABSTRACT = 1 << 5
    READONLY = 1 << 6


NO_MODIFIERS = Modifier(0)

# Bit order; snapshots list set flags in this order.
MODIFIER_ORDER: tuple[Modifier, ...] = (
    Modifier.PUBLIC,
    Modifier.PROTECTED,
    Modifier.PRIVATE,
    Modifier.STATIC,
    Modifier.FINAL,
    Modifier.ABSTRACT,
    Modifier.READONLY,
)


def modifier_names(modifiers: Modifier) -> list[str]:
    """Return the lowercase names of the flags set in ``modifiers``.

    Examples:
        >>> modifier_names(Modifier.PUBLIC | Modifier.STATIC)
        ['public', 'static']
        >>> modifier_names(NO_MODIFIERS)
        []
    """
    return [
        flag.name.lower()
        for flag in MODIFIER_ORDER
        if flag.name is not None and flag in modifiers
    ]


def modifiers_from_names(names: list[str]) -> Modifier:
    """Inverse of :func:`modifier_names`.

    Raises:
        ValueError: If a name does not match a known flag.
    """
    result = NO_MODIFIERS
    for name in names:
        try:
            result |= Modifier[name.upper()]
        except KeyError as exc:
            msg = f"Unknown modifier: {name!r}"
            raise ValueError(msg) from exc
    return result


class ModifierAccessors:
    """Named read accessors over a ``modifiers`` flag set.

    Host classes declare the ``modifiers`` field themselves.
    """

    @property
    def is_public(self) -> bool:
        return Modifier.PUBLIC in self.modifiers

    @property
    def is_protected(self) -> bool:
        return Modifier.PROTECTED in self.modifiers

    @property
    def is_private(self) -> bool:
        return Modifier.PRIVATE in self.modifiers

    @property
    def is_static(self) -> bool:
        return Modifier.STATIC in self.modifiers

    @property
    def is_final(self) -> bool:
        return Modifier.FINAL in self.modifiers

    @property
    def is_abstract(self) -> bool:
        return Modifier.ABSTRACT in self.modifiers

    @property
    def is_readonly(self) -> bool:
        return Modifier.READONLY in self.modifiers


__all__ = [
    "MODIFIER_ORDER",
    "NO_MODIFIERS",
    "Modifier",
    "ModifierAccessors",
    "modifier_names",
    "modifiers_from_names",
]
