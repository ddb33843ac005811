"""Unit tests for the type lattice."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from apishape.core.types import (
    ArrayType,
    NamedType,
    ScalarType,
    UnionType,
    equals,
    merge,
    mixed,
    null_type,
    scalar,
)


class TestTypeRendering:
    def test_scalar(self) -> None:
        assert ScalarType(kind="int").to_string() == "int"
        assert ScalarType(kind="string", nullable=True).to_string() == "?string"

    def test_arrays(self) -> None:
        assert ArrayType.simple().to_string() == "array"
        assert ArrayType.of(scalar("int")).to_string() == "array<int>"
        assert ArrayType.associative(scalar("bool")).to_string() == "array<string, bool>"

    def test_union_is_sorted_and_appends_null(self) -> None:
        union = UnionType(members=frozenset({scalar("string"), scalar("int")}), nullable=True)
        assert union.to_string() == "int|string|null"

    def test_null_is_not_prefixed(self) -> None:
        assert null_type().to_string() == "null"


class TestTypePredicates:
    def test_is_class(self) -> None:
        assert NamedType(type_name="App\\User").is_class()
        assert not NamedType(type_name="mixed").is_class()
        assert not NamedType(type_name="void").is_class()

    def test_array_key_kinds(self) -> None:
        assert ArrayType.associative(mixed()).is_associative()
        assert ArrayType.indexed(mixed()).is_indexed()
        assert not ArrayType.simple().is_indexed()

    def test_int_float_compatible(self) -> None:
        assert scalar("int").is_compatible_with(scalar("float"))
        assert not scalar("int").is_compatible_with(scalar("string"))

    def test_mixed_compatible_with_anything(self) -> None:
        assert mixed().is_compatible_with(ArrayType.simple())


class TestUnionValidation:
    def test_requires_two_members(self) -> None:
        with pytest.raises(ValidationError):
            UnionType(members=frozenset({scalar("int")}))

    def test_rejects_nullable_members(self) -> None:
        with pytest.raises(ValidationError):
            UnionType(members=frozenset({scalar("int", nullable=True), scalar("string")}))

    def test_equality_ignores_order(self) -> None:
        a = UnionType(members=frozenset([scalar("int"), scalar("string")]))
        b = UnionType(members=frozenset([scalar("string"), scalar("int")]))
        assert equals(a, b)
        assert hash(a) == hash(b)


class TestMerge:
    def test_empty_is_mixed(self) -> None:
        assert merge([]) == mixed()

    def test_single(self) -> None:
        assert merge([scalar("int")]) == scalar("int")

    def test_identical(self) -> None:
        assert merge([scalar("int"), scalar("int")]) == scalar("int")

    def test_distinct_make_union(self) -> None:
        result = merge([scalar("int"), scalar("string")])
        assert isinstance(result, UnionType)
        assert result.members == frozenset({scalar("int"), scalar("string")})
        assert not result.nullable

    def test_null_is_absorbed_into_flag(self) -> None:
        result = merge([scalar("int"), null_type()])
        assert result == scalar("int", nullable=True)

    def test_nested_unions_are_flattened(self) -> None:
        inner = merge([scalar("int"), scalar("string")])
        result = merge([inner, scalar("bool")])
        assert isinstance(result, UnionType)
        assert len(result.members) == 3

    def test_nullable_member_lifts_flag(self) -> None:
        result = merge([scalar("int", nullable=True), scalar("string")])
        assert isinstance(result, UnionType)
        assert result.nullable
        assert all(not m.nullable for m in result.members)

    def test_only_nulls(self) -> None:
        assert merge([null_type(), null_type()]) == null_type()
