"""Reflection snapshot models.

The host runtime's reflection output, captured as data. A snapshot is
produced outside apishape (for example by a small script run inside the
analyzed application) and handed to ``ReflectionSnapshotIntrospector``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from apishape.core.errors import NotFoundError, SerializationError
from apishape.core.models import Visibility


class ReflectedType(BaseModel):
    """A reflection type descriptor (named, union or intersection)."""

    kind: Literal["named", "union", "intersection"] = "named"
    name: str | None = Field(None, description="Type name for named descriptors")
    allows_null: bool = False
    types: list[ReflectedType] = Field(
        default_factory=list, description="Members of union/intersection descriptors"
    )


class ReflectedParameter(BaseModel):
    name: str
    position: int = Field(..., ge=0)
    type: ReflectedType | None = None
    optional: bool = False
    variadic: bool = False
    by_reference: bool = False
    has_default: bool = False
    default_value: Any = None


class ReflectedFunction(BaseModel):
    name: str
    parameters: list[ReflectedParameter] = Field(default_factory=list)
    return_type: ReflectedType | None = None
    doc_comment: str | None = None
    file: str | None = None
    line: int | None = None


class ReflectedMethod(ReflectedFunction):
    class_name: str | None = Field(None, description="Declaring class, if not the reflected one")
    visibility: Visibility = Visibility.PUBLIC
    static: bool = False
    abstract: bool = False
    final: bool = False


class ReflectedProperty(BaseModel):
    name: str
    visibility: Visibility = Visibility.PUBLIC
    static: bool = False
    readonly: bool = False
    type: ReflectedType | None = None
    has_default: bool = False
    default_value: Any = None
    doc_comment: str | None = None


class ReflectedConstant(BaseModel):
    name: str
    visibility: Visibility = Visibility.PUBLIC
    value: Any = None


class ReflectedClass(BaseModel):
    """Reflection data for one class, interface, trait or enum."""

    name: str = Field(..., description="Fully qualified name")
    kind: Literal["class", "interface", "trait", "enum"] = "class"
    abstract: bool = False
    final: bool = False
    readonly: bool = False
    parent: str | None = None
    interfaces: list[str] = Field(default_factory=list)
    traits: list[str] = Field(default_factory=list)
    methods: list[ReflectedMethod] = Field(default_factory=list)
    properties: list[ReflectedProperty] = Field(default_factory=list)
    constants: list[ReflectedConstant] = Field(default_factory=list)
    doc_comment: str | None = None
    file: str | None = None
    line: int | None = None


class ReflectionSnapshot(BaseModel):
    """Every entity the host runtime reported as loaded."""

    classes: list[ReflectedClass] = Field(default_factory=list)
    functions: list[ReflectedFunction] = Field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReflectionSnapshot:
        """Build a snapshot from already-decoded data.

        Raises:
            SerializationError: If the data does not describe a snapshot.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise SerializationError("Invalid reflection snapshot", details) from e

    @classmethod
    def from_json_file(cls, file_path: Path | str) -> ReflectionSnapshot:
        """Load a snapshot from a JSON file.

        Raises:
            NotFoundError: If the file does not exist.
            SerializationError: If the file is not valid snapshot JSON.
        """
        path = Path(file_path)
        if not path.is_file():
            raise NotFoundError(f"Snapshot file not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise SerializationError(f"Invalid JSON in {path}", str(e)) from e
        return cls.from_dict(data)


ReflectedType.model_rebuild()
