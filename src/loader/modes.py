"""Refresh policies deciding which cache tier is authoritative."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class ModeKind(str, Enum):
    FASTEST = "fastest"
    REFRESH = "refresh"
    SELECTIVE = "selective"


@dataclass(frozen=True)
class RefreshMode:
    """Per-request refresh policy.

    ``FASTEST`` trusts memory, then disk. ``REFRESH`` recomputes every
    request. ``SELECTIVE`` recomputes only the listed identifiers.
    """

    kind: ModeKind = ModeKind.FASTEST
    identifiers: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def fastest(cls) -> RefreshMode:
        return cls(ModeKind.FASTEST)

    @classmethod
    def refresh_all(cls) -> RefreshMode:
        return cls(ModeKind.REFRESH)

    @classmethod
    def selective(cls, identifiers: Iterable[str]) -> RefreshMode:
        return cls(ModeKind.SELECTIVE, frozenset(identifiers))

    @classmethod
    def coerce(cls, value: RefreshMode | str | Iterable[str]) -> RefreshMode:
        """Accept a mode, ``"fastest"``, ``"refresh"`` or an identifier list.

        Raises:
            ValueError: For a string that names no mode.
        """
        if isinstance(value, RefreshMode):
            return value
        if isinstance(value, str):
            if value == ModeKind.FASTEST.value:
                return cls.fastest()
            if value == ModeKind.REFRESH.value:
                return cls.refresh_all()
            msg = f"Unknown refresh mode: {value!r}"
            raise ValueError(msg)
        return cls.selective(value)

    def needs_refresh(self, identifier: str) -> bool:
        if self.kind is ModeKind.REFRESH:
            return True
        if self.kind is ModeKind.SELECTIVE:
            return identifier in self.identifiers
        return False


__all__ = ["ModeKind", "RefreshMode"]
