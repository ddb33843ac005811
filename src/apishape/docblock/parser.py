"""Documentation-comment (PHPDoc) parser.

Splits a ``/** ... */`` block into a summary, a free-text description and a
list of tags. Tag-specific grammars are looked up in a registration table so
collaborators can add their own tags without touching the dispatch.
"""

from __future__ import annotations

import logging
import re

from apishape.core.type_parser import parse_type_string
from apishape.core.types import Type
from apishape.docblock.models import DocBlock, Tag
from apishape.docblock.tags import DEFAULT_TAG_PARSERS, TagParser

logger = logging.getLogger(__name__)

_OPEN_CLOSE_RE = re.compile(r"^\s*/\*+|\*+/\s*$")
_LINE_MARKER_RE = re.compile(r"^\s*\*(?!/) ?", re.MULTILINE)
_TAG_RE = re.compile(r"^@(?P<name>[\w\\-]+)\s*(?P<content>.*)$", re.DOTALL)

_TAG_FIELDS = ("type", "variable", "description", "variadic", "is_file_upload")


class DocBlockParser:
    """Parses doc comments into ``DocBlock`` records.

    Parsing never raises. Results are memoized by comment text until
    ``clear_cache()`` is called.
    """

    def __init__(self, tag_parsers: dict[str, TagParser] | None = None) -> None:
        self._tag_parsers: dict[str, TagParser] = dict(DEFAULT_TAG_PARSERS)
        if tag_parsers:
            self._tag_parsers.update(tag_parsers)
        self._cache: dict[str, DocBlock] = {}

    def register_tag_parser(self, name: str, parser: TagParser) -> None:
        """Register (or replace) the sub-parser for ``@name`` tags."""
        self._tag_parsers[name] = parser
        self._cache.clear()

    def parse(self, doc_comment: str | None) -> DocBlock:
        """Parse a doc comment.

        Args:
            doc_comment: Raw comment text including delimiters.

        Returns:
            The parsed DocBlock (empty for empty input).
        """
        if not doc_comment:
            return DocBlock()
        cached = self._cache.get(doc_comment)
        if cached is not None:
            return cached

        summary = ""
        description: list[str] = []
        tags: list[Tag] = []

        for raw_line in self._clean(doc_comment).split("\n"):
            line = raw_line.strip()
            if not line:
                continue
            if line.startswith("@"):
                tag = self._parse_tag(line)
                if tag is not None:
                    tags.append(tag)
                    continue
            if not summary:
                summary = line
            else:
                description.append(line)

        block = DocBlock(summary=summary, description=" ".join(description), tags=tags)
        self._cache[doc_comment] = block
        return block

    def parameter_type(self, doc_comment: str | None, param_name: str) -> Type | None:
        tag = self.parse(doc_comment).param_tag(param_name)
        if tag is None:
            return None
        return parse_type_string(tag.type)

    def return_type(self, doc_comment: str | None) -> Type | None:
        tag = self.parse(doc_comment).first_tag("return")
        return parse_type_string(tag.type) if tag is not None else None

    def variable_type(self, doc_comment: str | None) -> Type | None:
        tag = self.parse(doc_comment).first_tag("var")
        return parse_type_string(tag.type) if tag is not None else None

    def throws(self, doc_comment: str | None) -> list[str]:
        return [
            tag.type.lstrip("\\")
            for tag in self.parse(doc_comment).get_tags("throws")
            if tag.type
        ]

    def clear_cache(self) -> None:
        self._cache = {}

    @staticmethod
    def _clean(doc_comment: str) -> str:
        cleaned = _OPEN_CLOSE_RE.sub("", doc_comment.strip())
        cleaned = _LINE_MARKER_RE.sub("", cleaned)
        return cleaned.strip()

    def _parse_tag(self, line: str) -> Tag | None:
        match = _TAG_RE.match(line)
        if match is None:
            return None
        name = match.group("name")
        content = match.group("content").strip()
        tag = Tag(name=name, content=content)

        sub_parser = self._tag_parsers.get(name) or self._tag_parsers.get(name.lower())
        if sub_parser is None:
            return tag

        try:
            values = sub_parser(content)
        except Exception as exc:
            # A faulty registered sub-parser must not fail the whole comment
            logger.debug(f"Sub-parser for @{name} failed on {content!r}: {exc}")
            return tag
        if not values:
            return tag

        fields = {key: values[key] for key in _TAG_FIELDS if key in values}
        extra = {key: value for key, value in values.items() if key not in _TAG_FIELDS}
        return tag.model_copy(update={**fields, "attributes": extra, "parsed": True})
