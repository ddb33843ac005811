"""Runtime introspection: declarations for entities the host has already loaded."""

from apishape.introspection.base import EntityIntrospector, NullIntrospector
from apishape.introspection.reflection import (
    ReflectionSnapshotIntrospector,
    convert_reflected_type,
    type_of_value,
)
from apishape.introspection.snapshot import (
    ReflectedClass,
    ReflectedConstant,
    ReflectedFunction,
    ReflectedMethod,
    ReflectedParameter,
    ReflectedProperty,
    ReflectedType,
    ReflectionSnapshot,
)

__all__ = [
    "EntityIntrospector",
    "NullIntrospector",
    "ReflectedClass",
    "ReflectedConstant",
    "ReflectedFunction",
    "ReflectedMethod",
    "ReflectedParameter",
    "ReflectedProperty",
    "ReflectedType",
    "ReflectionSnapshot",
    "ReflectionSnapshotIntrospector",
    "convert_reflected_type",
    "type_of_value",
]
