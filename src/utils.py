"""Shared identifier utilities for symcache."""

from __future__ import annotations

import importlib
from typing import Any


def split_identifier(identifier: str) -> tuple[str, str]:
    """Split a dotted identifier into its namespace and short name.

    Args:
        identifier: Fully-qualified identifier (e.g., "acme.shop.Widget")

    Returns:
        Tuple of (namespace, short_name). The namespace is empty for
        identifiers without a dot.

    Examples:
        >>> split_identifier("acme.shop.Widget")
        ('acme.shop', 'Widget')
        >>> split_identifier("Widget")
        ('', 'Widget')
        >>> split_identifier("Outer.Inner.")
        ('Outer', 'Inner')
    """
    normalized = identifier.strip().strip(".")
    namespace, _, short = normalized.rpartition(".")
    return namespace, short


def qualified_name(obj: object) -> str:
    """Return ``module.qualname`` for a class or function object.

    Builtins are reported by bare qualname (``int`` rather than
    ``builtins.int``) so rendered types stay readable.
    """
    module = getattr(obj, "__module__", None) or ""
    qualname = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", "")
    if not module or module == "builtins":
        return str(qualname)
    return f"{module}.{qualname}"


def import_dotted(path: str) -> Any:
    """Import the object named by a dotted path.

    The longest importable module prefix is imported and the remaining
    segments are resolved as attributes (``pkg.mod.Outer.Inner``).

    Raises:
        ImportError: If no prefix of ``path`` is an importable module.
        AttributeError: If a trailing segment does not exist.
    """
    parts = [part for part in path.strip().split(".") if part]
    if not parts:
        msg = f"Empty import path: {path!r}"
        raise ImportError(msg)
    for cut in range(len(parts), 0, -1):
        module_name = ".".join(parts[:cut])
        try:
            obj = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            # Only skip when the missing module is the candidate itself.
            if exc.name is not None and not module_name.startswith(exc.name):
                raise
            continue
        for attr in parts[cut:]:
            obj = getattr(obj, attr)
        return obj
    msg = f"No importable module in {path!r}"
    raise ImportError(msg)
