"""Built-in tag sub-parsers.

A sub-parser takes the raw content after ``@name`` and returns the values it
extracted. An empty dict means "not understood": the tag keeps its raw
content only.
"""

from __future__ import annotations

import re
from typing import Any, Callable

TagParser = Callable[[str], dict[str, Any]]

FILE_TYPE_NAMES = frozenset({"file", "upload", "uploadedfile"})

_FILE_PARAM_RE = re.compile(r"^\{(file|upload)\}\s+\$?(\w+)(?:\s+(.+))?$", re.IGNORECASE | re.DOTALL)
_VARIABLE_RE = re.compile(
    r"^(?P<ref>&\s*)?(?P<variadic>\.\.\.)?\$(?P<var>\w+)(?:\s+(?P<desc>.*))?$", re.DOTALL
)
_EXTENSIONS_RE = re.compile(r"^[a-z0-9]+(,[a-z0-9]+)+$")
KNOWN_EXTENSIONS = frozenset(
    {"jpg", "jpeg", "png", "gif", "webp", "svg", "pdf", "txt", "csv", "doc", "docx", "xls", "xlsx", "zip"}
)
_MAX_SIZE_RE = re.compile(r"^max:(\d+)(KB|MB|GB)?$", re.IGNORECASE)

_SIZE_UNITS = {"KB": 1024, "MB": 1024 * 1024, "GB": 1024 * 1024 * 1024}


def split_type_token(content: str) -> tuple[str, str]:
    """Split a leading type expression off ``content``.

    Whitespace inside ``<...>``/``(...)``/``{...}`` and around ``|`` does not end
    the token, so ``array<string, int> $map`` and ``int | null $x`` keep their
    full type.
    """
    text = content.strip()
    depth = 0
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char in "<({[":
            depth += 1
        elif char in ">)}]":
            depth = max(depth - 1, 0)
        elif char.isspace() and depth == 0:
            rest = text[index:].lstrip()
            token = text[:index].rstrip()
            if token.endswith("|") or rest.startswith("|"):
                index += 1
                continue
            return token.replace(" ", ""), rest
        index += 1
    return text.replace(" ", "") if "|" in text else text, ""


def parse_param_tag(content: str) -> dict[str, Any]:
    """``@param <type> $<name> [description]`` plus the ``{file} $name`` form."""
    file_match = _FILE_PARAM_RE.match(content)
    if file_match is not None:
        return {
            "type": "file",
            "variable": file_match.group(2),
            "description": (file_match.group(3) or "").strip(),
            "is_file_upload": True,
        }

    type_text, rest = split_type_token(content)
    if type_text.startswith(("$", "&", "...")):
        type_text, rest = "", content.strip()

    var_match = _VARIABLE_RE.match(rest)
    if var_match is None:
        return {}

    result: dict[str, Any] = {
        "type": type_text or None,
        "variable": var_match.group("var"),
        "description": (var_match.group("desc") or "").strip(),
        "variadic": var_match.group("variadic") is not None,
    }
    if type_text.lower() in FILE_TYPE_NAMES:
        result["is_file_upload"] = True
    return result


def parse_type_tag(content: str) -> dict[str, Any]:
    """``@return <type> [description]``."""
    type_text, rest = split_type_token(content)
    if not type_text:
        return {}
    return {"type": type_text, "description": rest.strip()}


def parse_var_tag(content: str) -> dict[str, Any]:
    """``@var <type> [$name] [description]``."""
    parsed = parse_type_tag(content)
    if not parsed:
        return {}
    var_match = _VARIABLE_RE.match(parsed["description"])
    if var_match is not None:
        parsed["variable"] = var_match.group("var")
        parsed["description"] = (var_match.group("desc") or "").strip()
    return parsed


def parse_throws_tag(content: str) -> dict[str, Any]:
    """``@throws <exception type> [description]``."""
    type_text, rest = split_type_token(content)
    if not type_text:
        return {}
    return {"type": type_text, "description": rest.strip()}


def parse_upload_tag(content: str) -> dict[str, Any]:
    """``@upload name [required] [jpg,png] [max:2MB] description``."""
    parts = content.split()
    if not parts:
        return {}

    required = False
    allowed_types: list[str] = []
    max_size: int | None = None
    description: list[str] = []

    for part in parts[1:]:
        size_match = _MAX_SIZE_RE.match(part)
        if part == "required":
            required = True
        elif size_match is not None:
            unit = (size_match.group(2) or "MB").upper()
            max_size = int(size_match.group(1)) * _SIZE_UNITS[unit]
        elif _EXTENSIONS_RE.match(part) or part in KNOWN_EXTENSIONS:
            allowed_types = part.split(",")
        else:
            description.append(part)

    return {
        "variable": parts[0].lstrip("$"),
        "description": " ".join(description),
        "is_file_upload": True,
        "required": required,
        "allowed_types": allowed_types,
        "max_size": max_size,
    }


DEFAULT_TAG_PARSERS: dict[str, TagParser] = {
    "param": parse_param_tag,
    "return": parse_type_tag,
    "var": parse_var_tag,
    "throws": parse_throws_tag,
    "upload": parse_upload_tag,
    "file": parse_upload_tag,
}
