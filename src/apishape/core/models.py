"""Declaration records produced by the analyzer.

Every record is a frozen pydantic model: declarations are built once and
replaced wholesale when a cache is cleared, never mutated in place. Type
fields are ``None`` when no source knew the type, which is distinct from an
explicit ``mixed``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from apishape.core.types import Type


class Visibility(str, Enum):
    """Visibility/access modifier."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class ClassKind(str, Enum):
    """Kind of class-like declaration."""

    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    ENUM = "enum"


class Declaration(BaseModel):
    """Base class for all declaration records."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Simple or fully qualified name")


class ParameterDeclaration(Declaration):
    """A function or method parameter."""

    position: int = Field(..., ge=0)
    type: Type | None = None
    optional: bool = False
    variadic: bool = False
    by_reference: bool = False
    default_value: Type | None = Field(None, description="Type of the default value")
    description: str = Field("", description="Text from the matching @param tag")
    promoted: Visibility | None = Field(
        None, description="Visibility when promoted to a property by a constructor"
    )


class FunctionDeclaration(Declaration):
    """A free function."""

    parameters: list[ParameterDeclaration] = Field(default_factory=list)
    return_type: Type | None = None
    doc_comment: str | None = None
    throws: list[str] = Field(default_factory=list, description="Types named by @throws")
    file: str | None = None
    line: int | None = None

    def get_parameter(self, name: str) -> ParameterDeclaration | None:
        return next((p for p in self.parameters if p.name == name), None)


class MethodDeclaration(FunctionDeclaration):
    """A method owned by a class-like declaration."""

    class_name: str = Field(..., description="Owning class (fully qualified)")
    visibility: Visibility = Visibility.PUBLIC
    modifiers: list[str] = Field(default_factory=list, description="static/abstract/final")

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.modifiers

    @property
    def is_final(self) -> bool:
        return "final" in self.modifiers

    @property
    def is_constructor(self) -> bool:
        return self.name.lower() == "__construct"


class PropertyDeclaration(Declaration):
    """A class property."""

    visibility: Visibility = Visibility.PUBLIC
    static: bool = False
    readonly: bool = False
    type: Type | None = None
    default_value: Type | None = None
    doc_comment: str | None = None


class ConstantDeclaration(Declaration):
    """A class constant."""

    visibility: Visibility = Visibility.PUBLIC
    type: Type | None = None
    value: str | None = Field(None, description="Source text or reflected literal")


class ClassDeclaration(Declaration):
    """A class, interface, trait or enum.

    Owns its methods, properties and constants.
    """

    short_name: str
    namespace: str = ""
    kind: ClassKind = ClassKind.CLASS
    modifiers: list[str] = Field(
        default_factory=list, description="abstract/final/readonly/interface/trait/enum"
    )
    parent: str | None = None
    interfaces: list[str] = Field(default_factory=list)
    traits: list[str] = Field(default_factory=list)
    methods: dict[str, MethodDeclaration] = Field(default_factory=dict)
    properties: dict[str, PropertyDeclaration] = Field(default_factory=dict)
    constants: dict[str, ConstantDeclaration] = Field(default_factory=dict)
    doc_comment: str | None = None
    file: str | None = None
    line: int | None = None

    @property
    def is_abstract(self) -> bool:
        return "abstract" in self.modifiers

    @property
    def is_final(self) -> bool:
        return "final" in self.modifiers

    @property
    def is_interface(self) -> bool:
        return self.kind == ClassKind.INTERFACE

    @property
    def is_trait(self) -> bool:
        return self.kind == ClassKind.TRAIT


class ParseError(BaseModel):
    """A syntax problem collected while parsing (data, not an exception)."""

    model_config = ConfigDict(frozen=True)

    message: str
    line: int = Field(..., ge=1)
    column: int = Field(..., ge=1)

    def __str__(self) -> str:
        return f"{self.message} on line {self.line}, column {self.column}"


class FileAnalysis(BaseModel):
    """All declarations found in a single source file."""

    model_config = ConfigDict(frozen=True)

    file: str
    namespace: str = ""
    classes: dict[str, ClassDeclaration] = Field(default_factory=dict)
    functions: dict[str, FunctionDeclaration] = Field(default_factory=dict)
    errors: list[ParseError] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0
