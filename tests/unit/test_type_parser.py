"""Unit tests for the type-expression grammar."""

from __future__ import annotations

import pytest

from apishape.core.type_parser import parse_type_string, qualify_type_names, split_top_level
from apishape.core.types import ArrayType, NamedType, ScalarType, UnionType, mixed, null_type


class TestScalarsAndKeywords:
    @pytest.mark.parametrize(
        "text,kind",
        [
            ("int", "int"),
            ("integer", "int"),
            ("float", "float"),
            ("double", "float"),
            ("string", "string"),
            ("bool", "bool"),
            ("boolean", "bool"),
            ("false", "bool"),
            ("INT", "int"),
        ],
    )
    def test_scalar_aliases(self, text: str, kind: str) -> None:
        assert parse_type_string(text) == ScalarType(kind=kind)

    def test_keywords_are_lowercased(self) -> None:
        assert parse_type_string("Mixed") == mixed()
        assert parse_type_string("VOID") == NamedType(type_name="void")

    def test_null(self) -> None:
        assert parse_type_string("null") == null_type()

    def test_empty_input(self) -> None:
        assert parse_type_string("") is None
        assert parse_type_string("   ") is None
        assert parse_type_string(None) is None


class TestNamesAndArrays:
    def test_leading_backslash_dropped(self) -> None:
        assert parse_type_string("\\App\\Models\\User") == NamedType(type_name="App\\Models\\User")

    def test_bare_array_and_list(self) -> None:
        assert parse_type_string("array") == ArrayType.simple()
        assert parse_type_string("list") == ArrayType.simple()

    def test_generic_array(self) -> None:
        assert parse_type_string("array<int>") == ArrayType.of(ScalarType(kind="int"))
        assert parse_type_string("list<string>") == ArrayType.of(ScalarType(kind="string"))

    def test_generic_array_with_key(self) -> None:
        parsed = parse_type_string("array<string, User>")
        assert parsed == ArrayType(
            key_type=ScalarType(kind="string"), value_type=NamedType(type_name="User")
        )

    def test_suffix_array(self) -> None:
        assert parse_type_string("User[]") == ArrayType.of(NamedType(type_name="User"))

    def test_array_shape(self) -> None:
        assert parse_type_string("array{id: int, name: string}") == ArrayType.simple()

    def test_other_generics_keep_base_name(self) -> None:
        assert parse_type_string("Collection<int, User>") == NamedType(type_name="Collection")


class TestNullableAndUnions:
    def test_question_mark(self) -> None:
        assert parse_type_string("?int") == ScalarType(kind="int", nullable=True)

    def test_union_with_null(self) -> None:
        assert parse_type_string("string|null") == ScalarType(kind="string", nullable=True)

    def test_nullable_union(self) -> None:
        parsed = parse_type_string("?int|string")
        assert isinstance(parsed, UnionType)
        assert parsed.nullable
        assert parsed.members == frozenset({ScalarType(kind="int"), ScalarType(kind="string")})

    def test_union_inside_generic_is_not_split(self) -> None:
        parsed = parse_type_string("array<int|string>")
        assert isinstance(parsed, ArrayType)
        assert isinstance(parsed.value_type, UnionType)

    def test_intersection_is_mixed(self) -> None:
        assert parse_type_string("Countable&Stringable") == mixed()

    def test_dnf_group(self) -> None:
        assert parse_type_string("(A&B)|null") == NamedType(type_name="mixed", nullable=True)

    def test_rendering_reparses_to_same_type(self) -> None:
        parsed = parse_type_string("?int|string")
        assert parsed is not None
        assert parse_type_string(parsed.to_string()) == parsed


class TestSplitTopLevel:
    def test_ignores_nested_separators(self) -> None:
        assert split_top_level("array<int|string>|null", "|") == ["array<int|string>", "null"]


class TestQualifyTypeNames:
    @staticmethod
    def _resolve(name: str) -> str:
        return {"User": "App\\Models\\User"}.get(name, f"App\\{name}")

    def test_qualifies_class_names_only(self) -> None:
        text = qualify_type_names("?User|int|null", self._resolve)
        assert text == "?\\App\\Models\\User|int|null"

    def test_keeps_fully_qualified_names(self) -> None:
        assert qualify_type_names("\\Foo\\Bar", self._resolve) == "\\Foo\\Bar"

    def test_generic_arguments(self) -> None:
        text = qualify_type_names("array<string, User>", self._resolve)
        assert text == "array<string, \\App\\Models\\User>"

    def test_variables_untouched(self) -> None:
        assert qualify_type_names("$this", self._resolve) == "$this"
