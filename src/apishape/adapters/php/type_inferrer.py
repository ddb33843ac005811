"""PHP type inference over tree-sitter expression nodes.

This module provides the TypeInferrer class that computes a best-effort
``Type`` for an expression from its structure alone: literals, array
literals, operators, casts and a fixed table of built-in functions.
Variables, property reads and user-defined calls are not tracked and infer
to ``mixed``.
"""

from __future__ import annotations

import hashlib
import logging

from tree_sitter import Node

from apishape.core.type_parser import parse_type_string
from apishape.core.types import (
    ArrayType,
    NamedType,
    ScalarType,
    Type,
    merge,
    mixed,
    null_type,
)

logger = logging.getLogger(__name__)

LITERAL_TYPES: dict[str, str] = {
    "integer": "int",
    "float": "float",
    "string": "string",
    "encapsed_string": "string",
    "heredoc": "string",
    "nowdoc": "string",
    "shell_command_expression": "string",
    "boolean": "bool",
}

TYPE_DECLARATION_NODES = frozenset(
    {
        "primitive_type",
        "named_type",
        "optional_type",
        "union_type",
        "intersection_type",
        "disjunctive_normal_form_type",
        "bottom_type",
        "cast_type",
        "type_list",
    }
)

ARITHMETIC_OPERATORS = frozenset({"+", "-", "*", "/", "%", "**"})
COMPARISON_OPERATORS = frozenset(
    {"==", "!=", "<>", "===", "!==", "<", ">", "<=", ">=", "instanceof"}
)
LOGICAL_OPERATORS = frozenset({"&&", "||", "and", "or", "xor"})
BITWISE_OPERATORS = frozenset({"&", "|", "^", "<<", ">>", "<=>"})

_STRING_FUNCTIONS = (
    "strval", "trim", "ltrim", "rtrim", "substr", "strtolower", "strtoupper", "ucfirst",
    "lcfirst", "str_repeat", "str_replace", "sprintf", "implode", "join", "json_encode",
    "md5", "sha1", "nl2br", "htmlspecialchars", "number_format", "date", "uniqid",
)
_INT_FUNCTIONS = ("count", "sizeof", "strlen", "mb_strlen", "intval", "time", "abs", "strpos")
_FLOAT_FUNCTIONS = ("floatval", "doubleval", "microtime", "round", "floor", "ceil")
_BOOL_FUNCTIONS = (
    "boolval", "is_array", "is_string", "is_int", "is_integer", "is_float", "is_bool",
    "is_numeric", "is_null", "is_object", "is_callable", "isset", "empty", "in_array",
    "array_key_exists", "method_exists", "property_exists", "class_exists", "file_exists",
    "str_contains", "str_starts_with", "str_ends_with",
)
_ARRAY_FUNCTIONS = (
    "array_merge", "array_filter", "array_map", "array_keys", "array_values", "array_slice",
    "array_unique", "array_reverse", "array_combine", "array_fill", "explode", "compact",
    "range", "str_split", "func_get_args",
)


def _table() -> dict[str, Type]:
    table: dict[str, Type] = {}
    for names, result in (
        (_STRING_FUNCTIONS, ScalarType(kind="string")),
        (_INT_FUNCTIONS, ScalarType(kind="int")),
        (_FLOAT_FUNCTIONS, ScalarType(kind="float")),
        (_BOOL_FUNCTIONS, ScalarType(kind="bool")),
        (_ARRAY_FUNCTIONS, ArrayType.simple()),
    ):
        for name in names:
            table[name] = result
    return table


BUILTIN_FUNCTION_TYPES: dict[str, Type] = _table()


class TypeInferrer:
    """Infers types from PHP AST nodes.

    Results are memoized by a key derived from the node kind and its source
    text. The memo table lives as long as the inferrer; call
    ``clear_cache()`` before reusing it on changed sources.
    """

    def __init__(self, function_types: dict[str, Type] | None = None) -> None:
        self._function_types = dict(BUILTIN_FUNCTION_TYPES)
        if function_types:
            self._function_types.update({k.lower(): v for k, v in function_types.items()})
        self._cache: dict[str, Type] = {}

    def infer_type(self, node: Node) -> Type:
        """Infer the type of an expression or type-declaration node.

        Args:
            node: The tree-sitter node.

        Returns:
            The inferred type; ``mixed`` when nothing better is known.
        """
        cache_key = self._cache_key(node)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        inferred = self._infer(node)
        self._cache[cache_key] = inferred
        return inferred

    def clear_cache(self) -> None:
        self._cache = {}

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def _infer(self, node: Node) -> Type:
        node_type = node.type

        if node_type in LITERAL_TYPES:
            return ScalarType(kind=LITERAL_TYPES[node_type])  # type: ignore[arg-type]

        if node_type == "null":
            return null_type()

        if node_type == "array_creation_expression":
            return self._infer_array(node)

        if node_type == "binary_expression":
            return self._infer_binary(node)

        if node_type == "conditional_expression":
            return self._infer_ternary(node)

        if node_type == "unary_op_expression":
            return self._infer_unary(node)

        if node_type == "cast_expression":
            return self._infer_cast(node)

        if node_type == "parenthesized_expression":
            return self._infer_parenthesized(node)

        if node_type == "function_call_expression":
            return self._infer_function_call(node)

        if node_type == "object_creation_expression":
            return self._infer_object_creation(node)

        if node_type in TYPE_DECLARATION_NODES:
            return self._infer_type_declaration(node)

        logger.debug(f"No inference rule for node type: {node_type}")
        return mixed()

    def _infer_array(self, node: Node) -> Type:
        key_types: list[Type] = []
        value_types: list[Type] = []

        for element in node.named_children:
            if element.type != "array_element_initializer":
                continue
            parts = [c for c in element.named_children if c.type not in ("comment", "by_ref")]
            if not parts:
                continue
            if parts[0].type == "variadic_unpacking":
                value_types.append(mixed())
                continue
            if len(parts) >= 2:
                key_types.append(self.infer_type(parts[0]))
                value_types.append(self.infer_type(parts[-1]))
            else:
                key_types.append(ScalarType(kind="int"))
                value_types.append(self.infer_type(parts[0]))

        if not value_types:
            return ArrayType.simple()

        return ArrayType(
            key_type=merge(key_types) if key_types else None,
            value_type=merge(value_types),
        )

    def _infer_binary(self, node: Node) -> Type:
        operator = self._operator(node)
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")

        if operator in ARITHMETIC_OPERATORS:
            if left is None or right is None:
                return mixed()
            return self._arithmetic(self.infer_type(left), self.infer_type(right))

        if operator == ".":
            return ScalarType(kind="string")

        if operator in COMPARISON_OPERATORS or operator in LOGICAL_OPERATORS:
            return ScalarType(kind="bool")

        if operator in BITWISE_OPERATORS:
            return ScalarType(kind="int")

        if operator == "??":
            sides = [self.infer_type(n) for n in (left, right) if n is not None]
            return merge([t.with_nullable(False) for t in sides[:-1]] + sides[-1:])

        return mixed()

    @staticmethod
    def _arithmetic(left: Type, right: Type) -> Type:
        names = (left.name, right.name)
        if "float" in names:
            return ScalarType(kind="float")
        if names == ("int", "int"):
            return ScalarType(kind="int")
        return mixed()

    def _infer_ternary(self, node: Node) -> Type:
        body = node.child_by_field_name("body")
        alternative = node.child_by_field_name("alternative")
        types: list[Type] = []
        if body is not None:
            types.append(self.infer_type(body))
        else:
            condition = node.child_by_field_name("condition")
            if condition is not None:
                # Short ternary: the condition itself is the true branch
                types.append(self.infer_type(condition))
        if alternative is not None:
            types.append(self.infer_type(alternative))
        return merge(types)

    def _infer_unary(self, node: Node) -> Type:
        operator = self._operator(node)
        operand = node.child_by_field_name("argument")
        if operand is None and node.named_child_count > 0:
            operand = node.named_children[-1]

        if operator == "!":
            return ScalarType(kind="bool")
        if operator == "~":
            return ScalarType(kind="int")
        if operator in ("-", "+") and operand is not None:
            inner = self.infer_type(operand)
            if isinstance(inner, ScalarType) and inner.kind in ("int", "float"):
                return inner
            return mixed()
        if operand is not None:
            # Error suppression (@expr) keeps the operand's type
            return self.infer_type(operand)
        return mixed()

    def _infer_cast(self, node: Node) -> Type:
        type_node = node.child_by_field_name("type")
        if type_node is None:
            type_node = next((c for c in node.named_children if c.type == "cast_type"), None)
        if type_node is None:
            return mixed()
        text = self._text(type_node).strip().lower()
        if text in ("unset", "void"):
            return null_type()
        if text == "binary":
            return ScalarType(kind="string")
        if text == "real":
            return ScalarType(kind="float")
        return parse_type_string(text) or mixed()

    def _infer_parenthesized(self, node: Node) -> Type:
        inner = next((c for c in node.named_children if c.type != "comment"), None)
        return self.infer_type(inner) if inner is not None else mixed()

    def _infer_function_call(self, node: Node) -> Type:
        function = node.child_by_field_name("function")
        if function is None or function.type not in ("name", "qualified_name"):
            return mixed()
        name = self._text(function).lstrip("\\").lower()
        return self._function_types.get(name, mixed())

    def _infer_object_creation(self, node: Node) -> Type:
        for child in node.named_children:
            if child.type in ("name", "qualified_name"):
                return NamedType(type_name=self._text(child).lstrip("\\"))
        return mixed()

    def _infer_type_declaration(self, node: Node) -> Type:
        return parse_type_string(self._text(node)) or mixed()

    def _operator(self, node: Node) -> str:
        operator = node.child_by_field_name("operator")
        if operator is None:
            operator = next((c for c in node.children if not c.is_named), None)
        if operator is None:
            return ""
        return self._text(operator).strip().lower()

    @staticmethod
    def _text(node: Node) -> str:
        text = node.text
        return text.decode("utf-8", errors="ignore") if text else ""

    def _cache_key(self, node: Node) -> str:
        digest = hashlib.md5(f"{node.type}:{self._text(node)}".encode("utf-8"))
        return digest.hexdigest()
