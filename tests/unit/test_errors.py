"""Unit tests for the error hierarchy."""

from __future__ import annotations

from apishape.core.errors import AnalysisError, ApiShapeError, NotFoundError, SerializationError


class TestAnalysisError:
    def test_factories(self) -> None:
        assert AnalysisError.target_not_found("Foo").message == "Target not found: Foo"
        assert "a.php" in AnalysisError.ast_parsing_failed("a.php", "bad").message
        assert "via reflection" in AnalysisError.reflection_failed("Foo", "boom").message

    def test_wrap_keeps_message_and_cause(self) -> None:
        cause = NotFoundError("Entity not loaded: Foo")
        error = AnalysisError.wrap("Foo", cause)
        assert error.message == "Failed to analyze 'Foo': Entity not loaded: Foo"
        assert error.details == "NotFoundError"
        assert error.cause is cause

    def test_to_dict(self) -> None:
        assert AnalysisError("boom", details="x").to_dict() == {
            "error": "AnalysisError",
            "message": "boom",
            "details": "x",
        }

    def test_hierarchy(self) -> None:
        for cls in (AnalysisError, NotFoundError, SerializationError):
            assert issubclass(cls, ApiShapeError)
