"""Exception hierarchy for apishape.

Parse errors are not exceptions; they are collected as ``ParseError`` records
(see ``apishape.core.models``). Everything here aborts a single call.
"""

from __future__ import annotations


class ApiShapeError(Exception):
    """Base class for all apishape errors."""

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, str | None]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(ApiShapeError):
    """A requested entity is not loaded, or a requested file does not exist."""


class AnalysisError(ApiShapeError):
    """Analysis of a single target failed.

    Wraps whatever went wrong internally so callers see one error shape.
    The triggering exception is available as ``cause`` and is also chained
    via ``raise ... from``.
    """

    def __init__(
        self,
        message: str,
        details: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, details)
        self.cause = cause

    @classmethod
    def ast_parsing_failed(
        cls, file: str, reason: str, cause: BaseException | None = None
    ) -> AnalysisError:
        return cls(f"Failed to parse AST for file '{file}': {reason}", cause=cause)

    @classmethod
    def reflection_failed(
        cls, name: str, reason: str, cause: BaseException | None = None
    ) -> AnalysisError:
        return cls(f"Failed to analyze '{name}' via reflection: {reason}", cause=cause)

    @classmethod
    def target_not_found(cls, target: str, cause: BaseException | None = None) -> AnalysisError:
        return cls(f"Target not found: {target}", cause=cause)

    @classmethod
    def wrap(cls, target: str, exc: BaseException) -> AnalysisError:
        """Wrap an arbitrary failure while analyzing ``target``, keeping its message."""
        message = exc.message if isinstance(exc, ApiShapeError) else str(exc)
        return cls(
            f"Failed to analyze '{target}': {message}",
            details=type(exc).__name__,
            cause=exc,
        )


class SerializationError(ApiShapeError):
    """Error during serialization or deserialization."""
