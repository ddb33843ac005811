"""Parsed documentation-comment records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Tag(BaseModel):
    """A single ``@name content`` entry of a doc comment.

    ``content`` always holds the raw text after the tag name. The remaining
    fields are filled by the tag's sub-parser when it understood the line;
    tags without a sub-parser, or lines a sub-parser rejected, keep only the
    raw content (``parsed`` is False).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    content: str = ""
    parsed: bool = False
    type: str | None = Field(None, description="Raw type expression (@param/@return/@var/@throws)")
    variable: str | None = Field(None, description="Variable name without the leading $")
    description: str = ""
    variadic: bool = False
    is_file_upload: bool = False
    attributes: dict[str, Any] = Field(
        default_factory=dict, description="Tag-specific values from registered sub-parsers"
    )


class DocBlock(BaseModel):
    """Summary, description and tags of one doc comment."""

    model_config = ConfigDict(frozen=True)

    summary: str = ""
    description: str = ""
    tags: list[Tag] = Field(default_factory=list)

    def get_tags(self, name: str) -> list[Tag]:
        return [tag for tag in self.tags if tag.name == name]

    def first_tag(self, name: str) -> Tag | None:
        return next((tag for tag in self.tags if tag.name == name), None)

    def has_tag(self, name: str) -> bool:
        return self.first_tag(name) is not None

    def param_tag(self, variable: str) -> Tag | None:
        variable = variable.lstrip("$")
        return next(
            (tag for tag in self.tags if tag.name == "param" and tag.variable == variable),
            None,
        )
