"""Errors raised by the symbol loader."""

from __future__ import annotations


class LoaderNotInitialized(RuntimeError):
    """Raised when a loader is used before ``init`` or after ``shutdown``."""


__all__ = ["LoaderNotInitialized"]
