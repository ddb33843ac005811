"""Property tests for the type lattice and the type-expression grammar.

For any types, merging is order-independent and idempotent, unions stay
flat with the nullable flag only on the outside, and every rendered type
parses back to itself.
"""

from __future__ import annotations

from hypothesis import given, strategies as st

from apishape.core.type_parser import parse_type_string
from apishape.core.types import (
    ArrayType,
    NamedType,
    ScalarType,
    Type,
    UnionType,
    equals,
    merge,
    null_type,
)

scalar_strategy = st.builds(
    ScalarType,
    kind=st.sampled_from(["int", "float", "string", "bool"]),
    nullable=st.booleans(),
)

named_strategy = st.builds(
    NamedType,
    type_name=st.sampled_from(["App\\Models\\User", "Foo", "mixed", "void", "object", "callable"]),
    nullable=st.booleans(),
)


def _extend(children: st.SearchStrategy[Type]) -> st.SearchStrategy[Type]:
    arrays = st.builds(
        ArrayType,
        key_type=st.none() | st.sampled_from([ScalarType(kind="int"), ScalarType(kind="string")]),
        value_type=children,
        nullable=st.booleans(),
    )
    unions = st.lists(children, min_size=2, max_size=4).map(merge)
    return arrays | unions


type_strategy: st.SearchStrategy[Type] = st.recursive(
    scalar_strategy | named_strategy, _extend, max_leaves=8
)


class TestMergeProperties:
    @given(type_strategy)
    def test_idempotent(self, t: Type) -> None:
        assert merge([t]) == t
        assert merge([t, t]) == t

    @given(type_strategy, type_strategy)
    def test_commutative(self, a: Type, b: Type) -> None:
        assert equals(merge([a, b]), merge([b, a]))

    @given(type_strategy, type_strategy, type_strategy)
    def test_flattening(self, a: Type, b: Type, c: Type) -> None:
        assert merge([merge([a, b]), c]) == merge([a, b, c])

    @given(st.lists(type_strategy, min_size=1, max_size=5))
    def test_unions_are_flat_and_outer_nullable(self, types: list[Type]) -> None:
        merged = merge(types)
        if isinstance(merged, UnionType):
            assert len(merged.members) >= 2
            assert all(not isinstance(m, UnionType) for m in merged.members)
            assert all(not m.nullable for m in merged.members)
        assert merged.nullable == any(t.nullable for t in types)

    @given(type_strategy)
    def test_null_only_adds_nullability(self, t: Type) -> None:
        assert merge([t, null_type()]) == merge([t]).with_nullable(True)


class TestGrammarProperties:
    @given(type_strategy)
    def test_rendering_round_trips(self, t: Type) -> None:
        assert parse_type_string(t.to_string()) == t

    @given(type_strategy)
    def test_nullable_prefix(self, t: Type) -> None:
        parsed = parse_type_string("?" + t.with_nullable(False).to_string())
        assert parsed == t.with_nullable(True)
