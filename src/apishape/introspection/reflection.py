"""Snapshot-backed introspector.

Converts reflection snapshot entries into declaration records. Conversion
is lazy and cached per entity name.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from apishape.core.errors import NotFoundError
from apishape.core.models import (
    ClassDeclaration,
    ClassKind,
    ConstantDeclaration,
    FunctionDeclaration,
    MethodDeclaration,
    ParameterDeclaration,
    PropertyDeclaration,
)
from apishape.core.type_parser import parse_type_string
from apishape.core.types import ArrayType, ScalarType, Type, merge, mixed, null_type
from apishape.introspection.base import EntityIntrospector
from apishape.introspection.snapshot import (
    ReflectedClass,
    ReflectedFunction,
    ReflectedParameter,
    ReflectedType,
    ReflectionSnapshot,
)

logger = logging.getLogger(__name__)


def _key(name: str) -> str:
    return name.lstrip("\\").lower()


def convert_reflected_type(reflected: ReflectedType | None) -> Type | None:
    """Convert a reflection type descriptor into a ``Type``.

    Intersections have no counterpart in the type model and become ``mixed``.
    """
    if reflected is None:
        return None
    if reflected.kind == "intersection":
        return mixed()
    if reflected.kind == "union":
        members = [t for t in (convert_reflected_type(m) for m in reflected.types) if t is not None]
        converted = merge(members)
    else:
        converted = parse_type_string(reflected.name) or mixed()
    # mixed already admits null
    if reflected.allows_null and not converted.is_mixed():
        converted = converted.with_nullable(True)
    return converted


def type_of_value(value: Any) -> Type:
    """Type of a reflected default or constant value."""
    if value is None:
        return null_type()
    if isinstance(value, bool):
        return ScalarType(kind="bool")
    if isinstance(value, int):
        return ScalarType(kind="int")
    if isinstance(value, float):
        return ScalarType(kind="float")
    if isinstance(value, str):
        return ScalarType(kind="string")
    if isinstance(value, list):
        if not value:
            return ArrayType.simple()
        return ArrayType(
            key_type=ScalarType(kind="int"),
            value_type=merge([type_of_value(v) for v in value]),
        )
    if isinstance(value, dict):
        if not value:
            return ArrayType.simple()
        return ArrayType(
            key_type=ScalarType(kind="string"),
            value_type=merge([type_of_value(v) for v in value.values()]),
        )
    return mixed()


class ReflectionSnapshotIntrospector(EntityIntrospector):
    """Introspector answering from a ``ReflectionSnapshot``.

    The loaded entities are exactly the snapshot's classes and functions.
    Lookups ignore a leading backslash and letter case.
    """

    def __init__(self, snapshot: ReflectionSnapshot) -> None:
        self._classes: dict[str, ReflectedClass] = {_key(c.name): c for c in snapshot.classes}
        self._functions: dict[str, ReflectedFunction] = {
            _key(f.name): f for f in snapshot.functions
        }
        self._class_cache: dict[str, ClassDeclaration] = {}
        self._function_cache: dict[str, FunctionDeclaration] = {}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReflectionSnapshotIntrospector:
        return cls(ReflectionSnapshot.from_dict(data))

    @classmethod
    def from_json_file(cls, file_path: Path | str) -> ReflectionSnapshotIntrospector:
        return cls(ReflectionSnapshot.from_json_file(file_path))

    def is_loaded(self, name: str) -> bool:
        return _key(name) in self._classes

    def is_function_loaded(self, name: str) -> bool:
        return _key(name) in self._functions

    def introspect_entity(self, name: str) -> ClassDeclaration:
        key = _key(name)
        cached = self._class_cache.get(key)
        if cached is not None:
            return cached

        reflected = self._classes.get(key)
        if reflected is None:
            raise NotFoundError(f"Entity not loaded: {name}")

        declaration = self._convert_class(reflected)
        self._class_cache[key] = declaration
        logger.debug(f"Introspected {declaration.name} from snapshot")
        return declaration

    def introspect_function(self, name: str) -> FunctionDeclaration:
        key = _key(name)
        cached = self._function_cache.get(key)
        if cached is not None:
            return cached

        reflected = self._functions.get(key)
        if reflected is None:
            raise NotFoundError(f"Function not loaded: {name}")

        declaration = FunctionDeclaration(
            name=reflected.name.lstrip("\\"),
            parameters=self._convert_parameters(reflected.parameters),
            return_type=convert_reflected_type(reflected.return_type),
            doc_comment=reflected.doc_comment,
            file=reflected.file,
            line=reflected.line,
        )
        self._function_cache[key] = declaration
        return declaration

    def source_file(self, name: str) -> Path | None:
        reflected = self._classes.get(_key(name)) or self._functions.get(_key(name))
        if reflected is None or not reflected.file:
            return None
        return Path(reflected.file)

    def clear_cache(self) -> None:
        self._class_cache = {}
        self._function_cache = {}

    def _convert_class(self, reflected: ReflectedClass) -> ClassDeclaration:
        name = reflected.name.lstrip("\\")
        namespace, _, short_name = name.rpartition("\\")
        kind = ClassKind(reflected.kind)

        modifiers = [
            flag
            for flag, present in (
                ("abstract", reflected.abstract),
                ("final", reflected.final),
                ("readonly", reflected.readonly),
            )
            if present
        ]
        if kind != ClassKind.CLASS:
            modifiers.append(kind.value)

        methods: dict[str, MethodDeclaration] = {}
        for method in reflected.methods:
            methods[method.name] = MethodDeclaration(
                name=method.name,
                class_name=(method.class_name or name).lstrip("\\"),
                visibility=method.visibility,
                modifiers=[
                    flag
                    for flag, present in (
                        ("static", method.static),
                        ("abstract", method.abstract),
                        ("final", method.final),
                    )
                    if present
                ],
                parameters=self._convert_parameters(method.parameters),
                return_type=convert_reflected_type(method.return_type),
                doc_comment=method.doc_comment,
                file=method.file or reflected.file,
                line=method.line,
            )

        properties = {
            prop.name: PropertyDeclaration(
                name=prop.name,
                visibility=prop.visibility,
                static=prop.static,
                readonly=prop.readonly,
                type=convert_reflected_type(prop.type),
                default_value=type_of_value(prop.default_value) if prop.has_default else None,
                doc_comment=prop.doc_comment,
            )
            for prop in reflected.properties
        }

        constants = {
            const.name: ConstantDeclaration(
                name=const.name,
                visibility=const.visibility,
                type=type_of_value(const.value),
                value=const.value if isinstance(const.value, str) else json.dumps(const.value),
            )
            for const in reflected.constants
        }

        return ClassDeclaration(
            name=name,
            short_name=short_name,
            namespace=namespace,
            kind=kind,
            modifiers=modifiers,
            parent=reflected.parent.lstrip("\\") if reflected.parent else None,
            interfaces=[i.lstrip("\\") for i in reflected.interfaces],
            traits=[t.lstrip("\\") for t in reflected.traits],
            methods=methods,
            properties=properties,
            constants=constants,
            doc_comment=reflected.doc_comment,
            file=reflected.file,
            line=reflected.line,
        )

    @staticmethod
    def _convert_parameters(parameters: list[ReflectedParameter]) -> list[ParameterDeclaration]:
        return [
            ParameterDeclaration(
                name=param.name.lstrip("$"),
                position=param.position,
                type=convert_reflected_type(param.type),
                optional=param.optional or param.has_default or param.variadic,
                variadic=param.variadic,
                by_reference=param.by_reference,
                default_value=type_of_value(param.default_value) if param.has_default else None,
            )
            for param in sorted(parameters, key=lambda p: p.position)
        ]
