"""Type-expression grammar shared by the doc-comment parser and the declaration walker.

Accepts PHPDoc and native PHP type syntax::

    int            ?string          int|string|null
    array          array<int>       array<string, User>
    User[]         \\App\\Models\\User   (A&B)|null

The grammar never raises; text it cannot classify becomes a ``NamedType``.
"""

from __future__ import annotations

import re
from typing import Callable

from apishape.core.types import (
    ArrayType,
    NamedType,
    ScalarType,
    Type,
    merge,
    mixed,
    null_type,
)

SCALAR_ALIASES: dict[str, str] = {
    "int": "int",
    "integer": "int",
    "float": "float",
    "double": "float",
    "string": "string",
    "bool": "bool",
    "boolean": "bool",
    "true": "bool",
    "false": "bool",
}

ARRAY_KEYWORDS = frozenset({"array", "list"})

# Case-insensitive keyword types normalised to lower case
KEYWORD_TYPES = frozenset(
    {"mixed", "void", "never", "object", "callable", "iterable", "self", "static", "parent", "resource"}
)

RESERVED_TYPE_NAMES = frozenset(
    set(SCALAR_ALIASES) | ARRAY_KEYWORDS | KEYWORD_TYPES | {"null"}
)

_NAME_RE = re.compile(r"(?<![\w$\\])\\?[A-Za-z_\x80-\uffff][\w\\]*")
_GENERIC_RE = re.compile(r"^(?P<base>[\w\\]+)\s*<(?P<args>.*)>$", re.DOTALL)

_OPENERS = "<({["
_CLOSERS = ">)}]"


def split_top_level(text: str, separator: str) -> list[str]:
    """Split ``text`` on ``separator`` outside of any bracket pair."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(depth - 1, 0)
        if char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return parts


def qualify_type_names(type_string: str, resolve: Callable[[str], str]) -> str:
    """Rewrite the class names in a type expression to fully qualified form.

    Keyword and scalar names are left alone, as are names that already carry
    a leading backslash. Resolved names are emitted with a leading backslash
    so the result is unambiguous whatever namespace it is read in.

    Args:
        type_string: Raw type text, e.g. ``"?User|Models\\Post[]"``.
        resolve: Maps a relative class name to its qualified name.
    """

    def replace(match: re.Match[str]) -> str:
        name = match.group(0)
        if name.startswith("\\") or name.lower() in RESERVED_TYPE_NAMES:
            return name
        return "\\" + resolve(name).lstrip("\\")

    return _NAME_RE.sub(replace, type_string)


def parse_type_string(type_string: str | None) -> Type | None:
    """Parse a type expression into a ``Type``.

    Args:
        type_string: Raw type text, e.g. ``"?int|string"``.

    Returns:
        The parsed type, or None for empty input so callers can leave the
        field unset.
    """
    if type_string is None:
        return None
    text = type_string.strip()
    if not text:
        return None

    nullable = False
    if text.startswith("?"):
        nullable = True
        text = text[1:].strip()
        if not text:
            return None

    alternatives = split_top_level(text, "|")
    if len(alternatives) > 1:
        parsed = [t for t in (_parse_alternative(alt) for alt in alternatives) if t is not None]
        if not parsed:
            return None
        result = merge(parsed)
    else:
        result = _parse_alternative(text)
        if result is None:
            return None

    # The leading '?' applies to the whole expression
    return result.with_nullable(True) if nullable else result


def _is_wrapped(text: str) -> bool:
    if not (text.startswith("(") and text.endswith(")")):
        return False
    depth = 0
    for index, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0 and index != len(text) - 1:
                return False
    return True


def _parse_alternative(text: str) -> Type | None:
    text = text.strip()
    if not text:
        return None
    if _is_wrapped(text):
        return parse_type_string(text[1:-1])
    if len(split_top_level(text, "&")) > 1:
        # No intersection variant; collapse to mixed
        return mixed()
    return _parse_single(text)


def _parse_single(text: str) -> Type | None:
    if text.startswith("?"):
        return parse_type_string(text)

    lowered = text.lower()
    if lowered in SCALAR_ALIASES:
        return ScalarType(kind=SCALAR_ALIASES[lowered])  # type: ignore[arg-type]
    if lowered == "null":
        return null_type()
    if lowered in ARRAY_KEYWORDS:
        return ArrayType.simple()
    if lowered.startswith("array{") or lowered.startswith("list{"):
        # Array shapes are not modelled beyond "some array"
        return ArrayType.simple()

    generic = _GENERIC_RE.match(text)
    if generic is not None:
        base = generic.group("base").lstrip("\\")
        if base.lower() in ARRAY_KEYWORDS:
            return _parse_generic_array(generic.group("args"))
        return NamedType(type_name=base)

    if text.endswith("[]"):
        inner = parse_type_string(text[:-2])
        return ArrayType.of(inner or mixed())

    if lowered in KEYWORD_TYPES:
        return NamedType(type_name=lowered)
    name = text.lstrip("\\")
    if not name:
        return None
    return NamedType(type_name=name)


def _parse_generic_array(args: str) -> ArrayType:
    parts = split_top_level(args, ",")
    if len(parts) >= 2:
        key_type = parse_type_string(parts[0])
        value_type = parse_type_string(parts[1]) or mixed()
        return ArrayType(key_type=key_type, value_type=value_type)
    return ArrayType.of(parse_type_string(parts[0]) or mixed())
