"""Declaration graph serialization and deserialization.

Schema and document generators usually live in another process; this module
turns analysis results into JSON and back.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from apishape.core.errors import SerializationError
from apishape.core.models import ClassDeclaration, FileAnalysis

ModelT = TypeVar("ModelT", bound=BaseModel)


def serialize(result: BaseModel) -> str:
    """Serialize an analysis result to a JSON string.

    Args:
        result: A ``FileAnalysis``, ``ClassDeclaration`` or any other record.

    Returns:
        JSON string representation of the result.

    Raises:
        SerializationError: If serialization fails.
    """
    try:
        data = result.model_dump(mode="json")
        return json.dumps(data, indent=2, ensure_ascii=False)
    except Exception as e:
        raise SerializationError(
            message="Failed to serialize analysis result",
            details=str(e),
        ) from e


def serialize_to_dict(result: BaseModel) -> dict[str, Any]:
    """Serialize an analysis result to a dictionary."""
    return result.model_dump(mode="json")


def _validation_details(error: ValidationError) -> str:
    details = []
    for err in error.errors():
        loc = ".".join(str(x) for x in err["loc"])
        details.append(f"{loc}: {err['msg']}")
    return "; ".join(details)


def _deserialize(json_str: str, model: type[ModelT]) -> ModelT:
    try:
        data = json.loads(json_str)
        return model.model_validate(data)
    except json.JSONDecodeError as e:
        raise SerializationError(
            message="Invalid JSON format",
            details=f"Line {e.lineno}, column {e.colno}: {e.msg}",
        ) from e
    except ValidationError as e:
        raise SerializationError(
            message=f"{model.__name__} validation failed",
            details=_validation_details(e),
        ) from e


def deserialize_file_analysis(json_str: str) -> FileAnalysis:
    """Deserialize a JSON string produced by ``serialize`` for a file analysis.

    Raises:
        SerializationError: If deserialization fails with detailed error info.
    """
    return _deserialize(json_str, FileAnalysis)


def deserialize_class(json_str: str) -> ClassDeclaration:
    """Deserialize a JSON string produced by ``serialize`` for a class declaration.

    Raises:
        SerializationError: If deserialization fails with detailed error info.
    """
    return _deserialize(json_str, ClassDeclaration)
