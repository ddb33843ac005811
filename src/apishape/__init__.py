"""apishape: declared, documented and inferred types of PHP code.

Typical use::

    from apishape import CodeAnalyzer

    analysis = CodeAnalyzer().analyze("src/Http/UserController.php")
    for cls in analysis.classes.values():
        print(cls.name, list(cls.methods))
"""

from apishape.core import (
    AnalysisError,
    AnalyzerConfig,
    ApiShapeError,
    ArrayType,
    ClassDeclaration,
    FileAnalysis,
    FunctionDeclaration,
    MethodDeclaration,
    NamedType,
    NotFoundError,
    ParameterDeclaration,
    ParseError,
    PropertyDeclaration,
    ScalarType,
    SerializationError,
    Type,
    UnionType,
    deserialize_class,
    deserialize_file_analysis,
    equals,
    merge,
    parse_type_string,
    serialize,
    serialize_to_dict,
)
from apishape.docblock import DocBlock, DocBlockParser, Tag
from apishape.introspection import (
    EntityIntrospector,
    NullIntrospector,
    ReflectionSnapshot,
    ReflectionSnapshotIntrospector,
)
from apishape.services import BatchResult, CodeAnalyzer

__version__ = "0.1.0"

__all__ = [
    "AnalysisError",
    "AnalyzerConfig",
    "ApiShapeError",
    "ArrayType",
    "BatchResult",
    "ClassDeclaration",
    "CodeAnalyzer",
    "DocBlock",
    "DocBlockParser",
    "EntityIntrospector",
    "FileAnalysis",
    "FunctionDeclaration",
    "MethodDeclaration",
    "NamedType",
    "NotFoundError",
    "NullIntrospector",
    "ParameterDeclaration",
    "ParseError",
    "PropertyDeclaration",
    "ReflectionSnapshot",
    "ReflectionSnapshotIntrospector",
    "ScalarType",
    "SerializationError",
    "Tag",
    "Type",
    "UnionType",
    "deserialize_class",
    "deserialize_file_analysis",
    "equals",
    "merge",
    "parse_type_string",
    "serialize",
    "serialize_to_dict",
]
