"""Unit tests for expression type inference."""

from __future__ import annotations

import pytest

from apishape.adapters.php import SyntaxParser, TypeInferrer
from apishape.core.types import (
    ArrayType,
    NamedType,
    ScalarType,
    Type,
    UnionType,
    mixed,
    null_type,
    scalar,
)


@pytest.fixture
def infer(parser: SyntaxParser, inferrer: TypeInferrer):
    def _infer(code: str) -> Type:
        return inferrer.infer_type(parser.parse_expression(code))

    return _infer


class TestLiterals:
    @pytest.mark.parametrize(
        "code,kind",
        [
            ("42", "int"),
            ("4.2", "float"),
            ("'text'", "string"),
            ('"hello $name"', "string"),
            ("true", "bool"),
        ],
    )
    def test_scalar_literals(self, infer, code: str, kind: str) -> None:
        assert infer(code) == ScalarType(kind=kind)

    def test_null(self, infer) -> None:
        assert infer("null") == null_type()


class TestArrays:
    def test_empty(self, infer) -> None:
        assert infer("[]") == ArrayType.simple()

    def test_list(self, infer) -> None:
        assert infer("[1, 2, 3]") == ArrayType(key_type=scalar("int"), value_type=scalar("int"))

    def test_long_syntax(self, infer) -> None:
        assert infer("array('a', 'b')") == ArrayType(
            key_type=scalar("int"), value_type=scalar("string")
        )

    def test_associative_mixed_values(self, infer) -> None:
        result = infer("['a' => 1, 'b' => 'x']")
        assert isinstance(result, ArrayType)
        assert result.key_type == scalar("string")
        assert result.value_type == UnionType(members=frozenset({scalar("int"), scalar("string")}))

    def test_spread_contributes_mixed(self, infer) -> None:
        result = infer("[...$rest]")
        assert isinstance(result, ArrayType)
        assert result.value_type == mixed()


class TestOperators:
    def test_untyped_variables(self, infer) -> None:
        assert infer("$a + $b") == mixed()

    def test_int_arithmetic(self, infer) -> None:
        assert infer("1 + 2") == scalar("int")
        assert infer("6 % 4") == scalar("int")

    def test_float_wins(self, infer) -> None:
        assert infer("1 * 2.5") == scalar("float")
        assert infer("$x / 2.0") == scalar("float")

    def test_concatenation(self, infer) -> None:
        assert infer("$a . 'suffix'") == scalar("string")

    @pytest.mark.parametrize(
        "code", ["$a == $b", "$a !== null", "$a < 3", "$a && $b", "$a or $b", "$a instanceof Foo"]
    )
    def test_boolean_operators(self, infer, code: str) -> None:
        assert infer(code) == scalar("bool")

    def test_bitwise(self, infer) -> None:
        assert infer("$flags | 4") == scalar("int")

    def test_unary(self, infer) -> None:
        assert infer("!$ok") == scalar("bool")
        assert infer("-1.5") == scalar("float")
        assert infer("-$x") == mixed()

    def test_parenthesized(self, infer) -> None:
        assert infer("(1 + 2)") == scalar("int")

    def test_ternary(self, infer) -> None:
        result = infer("$flag ? 1 : 'one'")
        assert result == UnionType(members=frozenset({scalar("int"), scalar("string")}))

    def test_ternary_same_branches(self, infer) -> None:
        assert infer("$flag ? 'yes' : 'no'") == scalar("string")

    def test_short_ternary_uses_condition(self, infer) -> None:
        assert infer("0 ?: 1") == scalar("int")

    def test_null_coalescing(self, infer) -> None:
        assert infer("'a' ?? 'b'") == scalar("string")


class TestCastsAndCalls:
    @pytest.mark.parametrize(
        "code,expected",
        [
            ("(int) $x", ScalarType(kind="int")),
            ("(integer) $x", ScalarType(kind="int")),
            ("(float) $x", ScalarType(kind="float")),
            ("(string) $x", ScalarType(kind="string")),
            ("(bool) $x", ScalarType(kind="bool")),
            ("(array) $x", ArrayType.simple()),
            ("(object) $x", NamedType(type_name="object")),
        ],
    )
    def test_casts(self, infer, code: str, expected: Type) -> None:
        assert infer(code) == expected

    def test_builtin_functions(self, infer) -> None:
        assert infer("count($items)") == scalar("int")
        assert infer("STRLEN($s)") == scalar("int")
        assert infer("floatval($s)") == scalar("float")
        assert infer("trim($s)") == scalar("string")
        assert infer("is_array($s)") == scalar("bool")
        assert infer("array_merge($a, $b)") == ArrayType.simple()

    def test_fully_qualified_builtin(self, infer) -> None:
        assert infer("\\strlen($s)") == scalar("int")

    def test_user_function(self, infer) -> None:
        assert infer("calculate($x)") == mixed()

    def test_method_call_and_property(self, infer) -> None:
        assert infer("$user->getName()") == mixed()
        assert infer("$user->name") == mixed()

    def test_new_expression(self, infer) -> None:
        assert infer("new User()") == NamedType(type_name="User")
        assert infer("new \\App\\Models\\User") == NamedType(type_name="App\\Models\\User")

    def test_custom_function_table(self, parser: SyntaxParser) -> None:
        inferrer = TypeInferrer({"Config_Get": scalar("string")})
        assert inferrer.infer_type(parser.parse_expression("config_get('x')")) == scalar("string")


class TestTypeDeclarationNodes:
    def test_routes_through_grammar(self, parser: SyntaxParser, inferrer: TypeInferrer) -> None:
        tree, _ = parser.parse("<?php function f(?int $a, int|string $b): array {}")
        params = parser.find_nodes_of_kind(tree.root, "simple_parameter")
        assert inferrer.infer_type(params[0].child_by_field_name("type")) == scalar(
            "int", nullable=True
        )
        assert inferrer.infer_type(params[1].child_by_field_name("type")) == UnionType(
            members=frozenset({scalar("int"), scalar("string")})
        )
        function = parser.find_functions(tree.root)[0]
        assert inferrer.infer_type(function.child_by_field_name("return_type")) == ArrayType.simple()


class TestMemoization:
    def test_cache_fills_and_clears(self, parser: SyntaxParser, inferrer: TypeInferrer) -> None:
        node = parser.parse_expression("1 + 2")
        first = inferrer.infer_type(node)
        assert inferrer.cache_size > 0
        assert inferrer.infer_type(node) is first

        inferrer.clear_cache()
        assert inferrer.cache_size == 0
