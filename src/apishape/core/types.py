"""Type lattice for the apishape type model.

The model is a closed set of variants (scalar, array, named, union), each
carrying a ``nullable`` flag. Instances are frozen pydantic models, so they
are hashable and compare structurally; union membership is a frozenset and
therefore ignores ordering.

Nullability is tracked on the outermost type only. Union members are always
stored non-nullable and a ``null`` alternative is folded into the flag.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

ScalarKind = Literal["int", "float", "string", "bool"]

SCALAR_KINDS: tuple[str, ...] = ("int", "float", "string", "bool")
MIXED = "mixed"
NULL = "null"

_COMPOUND_NAMES = frozenset({"array", "object", "callable", "iterable"})
_SPECIAL_NAMES = frozenset({"resource", "null", "void", "never", "mixed"})


class BaseType(BaseModel):
    """Common behaviour shared by every type variant."""

    model_config = ConfigDict(frozen=True)

    nullable: bool = False

    @property
    def name(self) -> str:
        raise NotImplementedError

    def with_nullable(self, nullable: bool = True) -> Type:
        if self.nullable == nullable:
            return self  # type: ignore[return-value]
        return self.model_copy(update={"nullable": nullable})  # type: ignore[return-value]

    def is_scalar(self) -> bool:
        return False

    def is_mixed(self) -> bool:
        return False

    def is_class(self) -> bool:
        return False

    def _render(self) -> str:
        raise NotImplementedError

    def to_string(self) -> str:
        """Render the canonical type expression (parseable by ``parse_type_string``)."""
        text = self._render()
        if self.nullable and text != NULL:
            return f"?{text}"
        return text

    def is_compatible_with(self, other: Type) -> bool:
        """Loose assignability check used by downstream schema builders."""
        if isinstance(other, UnionType):
            return any(self.is_compatible_with(member) for member in other.members)
        if self.name == other.name:
            return True
        if other.name == NULL and self.nullable:
            return True
        if self.is_mixed() or other.is_mixed():
            return True
        return False

    def __str__(self) -> str:
        return self.to_string()


class ScalarType(BaseType):
    """One of the four scalar kinds."""

    variant: Literal["scalar"] = "scalar"
    kind: ScalarKind

    @property
    def name(self) -> str:
        return self.kind

    def is_scalar(self) -> bool:
        return True

    def _render(self) -> str:
        return self.kind

    def is_compatible_with(self, other: Type) -> bool:
        if super().is_compatible_with(other):
            return True
        # int and float are interchangeable for documentation purposes
        return {self.kind, other.name} == {"int", "float"}


class NamedType(BaseType):
    """A class, interface or record name, or one of the keyword types (``mixed``, ``void``)."""

    variant: Literal["named"] = "named"
    type_name: str = Field(..., min_length=1)

    @property
    def name(self) -> str:
        return self.type_name

    def is_mixed(self) -> bool:
        return self.type_name == MIXED

    def is_class(self) -> bool:
        lowered = self.type_name.lower()
        return lowered not in _COMPOUND_NAMES and lowered not in _SPECIAL_NAMES

    def _render(self) -> str:
        return self.type_name


class ArrayType(BaseType):
    """Plain or generic array. A missing key type means implicit int keys."""

    variant: Literal["array"] = "array"
    key_type: Type | None = None
    value_type: Type = Field(default_factory=lambda: NamedType(type_name=MIXED))

    @property
    def name(self) -> str:
        return "array"

    def is_associative(self) -> bool:
        return isinstance(self.key_type, ScalarType) and self.key_type.kind == "string"

    def is_indexed(self) -> bool:
        return isinstance(self.key_type, ScalarType) and self.key_type.kind == "int"

    def _render(self) -> str:
        if self.key_type is not None:
            return f"array<{self.key_type.to_string()}, {self.value_type.to_string()}>"
        if not self.value_type.is_mixed() or self.value_type.nullable:
            return f"array<{self.value_type.to_string()}>"
        return "array"

    @classmethod
    def simple(cls, nullable: bool = False) -> ArrayType:
        return cls(nullable=nullable)

    @classmethod
    def of(cls, value_type: Type, nullable: bool = False) -> ArrayType:
        return cls(value_type=value_type, nullable=nullable)

    @classmethod
    def associative(cls, value_type: Type, nullable: bool = False) -> ArrayType:
        return cls(key_type=ScalarType(kind="string"), value_type=value_type, nullable=nullable)

    @classmethod
    def indexed(cls, value_type: Type, nullable: bool = False) -> ArrayType:
        return cls(key_type=ScalarType(kind="int"), value_type=value_type, nullable=nullable)


class UnionType(BaseType):
    """Two or more non-nullable, non-union alternatives."""

    variant: Literal["union"] = "union"
    members: frozenset[Type]

    @model_validator(mode="after")
    def _check_members(self) -> UnionType:
        if len(self.members) < 2:
            raise ValueError("Union type must have at least 2 members")
        for member in self.members:
            if isinstance(member, UnionType):
                raise ValueError("Union members must be flattened")
            if member.nullable:
                raise ValueError("Union members carry no nullable flag; set it on the union")
        return self

    @property
    def name(self) -> str:
        return "|".join(self._sorted_member_strings())

    def has_type(self, type_name: str) -> bool:
        return any(member.name == type_name for member in self.members)

    def _sorted_member_strings(self) -> list[str]:
        return sorted(member.to_string() for member in self.members)

    def _render(self) -> str:
        return "|".join(self._sorted_member_strings())

    def to_string(self) -> str:
        text = self._render()
        return f"{text}|{NULL}" if self.nullable else text

    def is_compatible_with(self, other: Type) -> bool:
        return any(member.is_compatible_with(other) for member in self.members)


Type = Annotated[
    Union[ScalarType, ArrayType, NamedType, UnionType],
    Field(discriminator="variant"),
]

ArrayType.model_rebuild()
UnionType.model_rebuild()


def scalar(kind: str, nullable: bool = False) -> ScalarType:
    return ScalarType(kind=kind, nullable=nullable)  # type: ignore[arg-type]


def named(type_name: str, nullable: bool = False) -> NamedType:
    return NamedType(type_name=type_name, nullable=nullable)


def mixed() -> NamedType:
    return NamedType(type_name=MIXED)


def null_type() -> NamedType:
    return NamedType(type_name=NULL, nullable=True)


def _is_null(type_: Type) -> bool:
    return isinstance(type_, NamedType) and type_.type_name == NULL


def merge(types: list[Type]) -> Type:
    """Merge candidate types into one.

    An empty list yields ``mixed``; a list of structurally equal types yields
    that type; anything else yields a flattened union of the distinct shapes
    with nullability lifted onto the union.
    """
    if not types:
        return mixed()

    first = types[0]
    if all(candidate == first for candidate in types[1:]):
        return first

    nullable = False
    members: list[Type] = []
    for candidate in types:
        nullable = nullable or candidate.nullable
        parts = candidate.members if isinstance(candidate, UnionType) else (candidate,)
        for part in parts:
            if _is_null(part):
                nullable = True
                continue
            part = part.with_nullable(False)
            if part not in members:
                members.append(part)

    if not members:
        return null_type()
    if len(members) == 1:
        return members[0].with_nullable(nullable)
    return UnionType(members=frozenset(members), nullable=nullable)


def equals(a: Type | None, b: Type | None) -> bool:
    """Structural equality; union ordering is irrelevant."""
    return a == b
