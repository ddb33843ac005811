"""Core module containing the type model, declaration records, errors and serializer."""

from apishape.core.config import AnalyzerConfig, get_config, reload_config
from apishape.core.errors import (
    AnalysisError,
    ApiShapeError,
    NotFoundError,
    SerializationError,
)
from apishape.core.models import (
    ClassDeclaration,
    ClassKind,
    ConstantDeclaration,
    Declaration,
    FileAnalysis,
    FunctionDeclaration,
    MethodDeclaration,
    ParameterDeclaration,
    ParseError,
    PropertyDeclaration,
    Visibility,
)
from apishape.core.serializer import (
    deserialize_class,
    deserialize_file_analysis,
    serialize,
    serialize_to_dict,
)
from apishape.core.type_parser import parse_type_string, qualify_type_names
from apishape.core.types import (
    ArrayType,
    NamedType,
    ScalarType,
    Type,
    UnionType,
    equals,
    merge,
    mixed,
    null_type,
)

__all__ = [
    "AnalysisError",
    "AnalyzerConfig",
    "ApiShapeError",
    "ArrayType",
    "ClassDeclaration",
    "ClassKind",
    "ConstantDeclaration",
    "Declaration",
    "FileAnalysis",
    "FunctionDeclaration",
    "MethodDeclaration",
    "NamedType",
    "NotFoundError",
    "ParameterDeclaration",
    "ParseError",
    "PropertyDeclaration",
    "ScalarType",
    "SerializationError",
    "Type",
    "UnionType",
    "Visibility",
    "deserialize_class",
    "deserialize_file_analysis",
    "equals",
    "get_config",
    "merge",
    "mixed",
    "null_type",
    "parse_type_string",
    "qualify_type_names",
    "reload_config",
    "serialize",
    "serialize_to_dict",
]
