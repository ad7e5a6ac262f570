"""Errors raised by introspection facilities."""

from __future__ import annotations


class NotFound(LookupError):
    """Raised when an identifier does not name a known class-like symbol."""

    def __init__(self, identifier: str, reason: str | None = None) -> None:
        self.identifier = identifier
        self.reason = reason
        message = f"Symbol not found: {identifier}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


__all__ = ["NotFound"]
