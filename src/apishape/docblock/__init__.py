"""Documentation-comment parsing."""

from apishape.docblock.models import DocBlock, Tag
from apishape.docblock.parser import DocBlockParser
from apishape.docblock.tags import DEFAULT_TAG_PARSERS, TagParser, split_type_token

__all__ = [
    "DEFAULT_TAG_PARSERS",
    "DocBlock",
    "DocBlockParser",
    "Tag",
    "TagParser",
    "split_type_token",
]
