"""Seam between the loader and whatever computes descriptors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from descriptors.models import SymbolDescriptor, SymbolKind


@runtime_checkable
class IntrospectionFacility(Protocol):
    """Builds a fresh descriptor for an identifier.

    Implementations raise :class:`introspect.errors.NotFound` for identifiers
    they cannot locate. They are expensive to call; the loader caches results.
    """

    def describe(self, kind: SymbolKind, identifier: str) -> SymbolDescriptor: ...


__all__ = ["IntrospectionFacility"]
