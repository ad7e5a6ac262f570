"""Introspection facilities that compute symbol descriptors."""

from introspect.errors import NotFound
from introspect.facility import IntrospectionFacility
from introspect.markers import attribute, declare, trait
from introspect.python import PythonIntrospector

__all__ = [
    "IntrospectionFacility",
    "NotFound",
    "PythonIntrospector",
    "attribute",
    "declare",
    "trait",
]
