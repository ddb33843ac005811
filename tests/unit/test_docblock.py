"""Unit tests for the documentation-comment parser."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from apishape.core.types import ArrayType, NamedType, ScalarType
from apishape.docblock import DocBlockParser, split_type_token

DOC = """/**
 * Create a user.
 *
 * Sends a welcome mail.
 * Fails when the email is taken.
 *
 * @param int $id the identifier
 * @param array<string, mixed> $attributes
 * @param string ...$roles role names
 * @return User|null the created user
 * @throws \\App\\Exceptions\\DuplicateEmail
 * @deprecated use register() instead
 */"""


class TestDocBlockStructure:
    def test_summary_and_description(self, docblock_parser: DocBlockParser) -> None:
        block = docblock_parser.parse(DOC)
        assert block.summary == "Create a user."
        assert block.description == "Sends a welcome mail. Fails when the email is taken."

    def test_tags_in_order(self, docblock_parser: DocBlockParser) -> None:
        names = [tag.name for tag in docblock_parser.parse(DOC).tags]
        assert names == ["param", "param", "param", "return", "throws", "deprecated"]

    def test_empty_comment(self, docblock_parser: DocBlockParser) -> None:
        block = docblock_parser.parse("")
        assert block.summary == ""
        assert block.tags == []

    def test_single_line_comment(self, docblock_parser: DocBlockParser) -> None:
        block = docblock_parser.parse("/** @var int */")
        assert block.summary == ""
        assert block.first_tag("var").type == "int"

    def test_unknown_tag_keeps_raw_content(self, docblock_parser: DocBlockParser) -> None:
        tag = docblock_parser.parse(DOC).first_tag("deprecated")
        assert tag.content == "use register() instead"
        assert not tag.parsed

    def test_cached_records_are_immutable(self, docblock_parser: DocBlockParser) -> None:
        block = docblock_parser.parse(DOC)

        with pytest.raises(ValidationError):
            block.summary = "changed"
        with pytest.raises(ValidationError):
            block.first_tag("return").type = "int"
        assert docblock_parser.parse(DOC) is block
        assert docblock_parser.parse(DOC).first_tag("return").type == "User|null"


class TestParamTags:
    def test_type_variable_description(self, docblock_parser: DocBlockParser) -> None:
        tag = docblock_parser.parse(DOC).param_tag("id")
        assert tag.type == "int"
        assert tag.variable == "id"
        assert tag.description == "the identifier"
        assert tag.parsed

    def test_generic_type_with_space(self, docblock_parser: DocBlockParser) -> None:
        tag = docblock_parser.parse(DOC).param_tag("attributes")
        assert tag.type == "array<string,mixed>"

    def test_variadic(self, docblock_parser: DocBlockParser) -> None:
        tag = docblock_parser.parse(DOC).param_tag("roles")
        assert tag.variadic
        assert tag.description == "role names"

    def test_missing_variable_keeps_raw_content(self, docblock_parser: DocBlockParser) -> None:
        tag = docblock_parser.parse("/** @param int */").first_tag("param")
        assert tag.content == "int"
        assert tag.variable is None
        assert not tag.parsed

    def test_file_upload_forms(self, docblock_parser: DocBlockParser) -> None:
        block = docblock_parser.parse(
            "/**\n * @param {file} $avatar profile picture\n * @param UploadedFile $doc\n */"
        )
        avatar = block.param_tag("avatar")
        assert avatar.is_file_upload
        assert avatar.description == "profile picture"
        assert block.param_tag("doc").is_file_upload


class TestOtherTags:
    def test_var_with_name(self, docblock_parser: DocBlockParser) -> None:
        tag = docblock_parser.parse("/** @var string[] $names all names */").first_tag("var")
        assert tag.type == "string[]"
        assert tag.variable == "names"
        assert tag.description == "all names"

    def test_upload_tag(self, docblock_parser: DocBlockParser) -> None:
        tag = docblock_parser.parse(
            "/** @upload avatar required jpg,png max:2MB Profile picture */"
        ).first_tag("upload")
        assert tag.variable == "avatar"
        assert tag.is_file_upload
        assert tag.attributes["required"] is True
        assert tag.attributes["allowed_types"] == ["jpg", "png"]
        assert tag.attributes["max_size"] == 2 * 1024 * 1024
        assert tag.description == "Profile picture"

    def test_custom_tag_parser(self, docblock_parser: DocBlockParser) -> None:
        docblock_parser.register_tag_parser("route", lambda content: {"path": content.split()[-1]})
        tag = docblock_parser.parse("/** @route GET /users */").first_tag("route")
        assert tag.parsed
        assert tag.attributes == {"path": "/users"}

    def test_failing_tag_parser_is_contained(self, docblock_parser: DocBlockParser) -> None:
        def broken(content: str) -> dict:
            raise RuntimeError("boom")

        docblock_parser.register_tag_parser("since", broken)
        block = docblock_parser.parse("/**\n * Summary.\n * @since 1.2\n */")
        assert block.summary == "Summary."
        assert block.first_tag("since").content == "1.2"


class TestTypeLookups:
    def test_parameter_type(self, docblock_parser: DocBlockParser) -> None:
        assert docblock_parser.parameter_type(DOC, "id") == ScalarType(kind="int")
        assert docblock_parser.parameter_type(DOC, "$id") == ScalarType(kind="int")
        assert docblock_parser.parameter_type(DOC, "missing") is None

    def test_return_type(self, docblock_parser: DocBlockParser) -> None:
        assert docblock_parser.return_type(DOC) == NamedType(type_name="User", nullable=True)
        assert docblock_parser.return_type("/** @return array<int> */") == ArrayType.of(
            ScalarType(kind="int")
        )

    def test_variable_type(self, docblock_parser: DocBlockParser) -> None:
        assert docblock_parser.variable_type("/** @var bool */") == ScalarType(kind="bool")
        assert docblock_parser.variable_type(None) is None

    def test_throws(self, docblock_parser: DocBlockParser) -> None:
        assert docblock_parser.throws(DOC) == ["App\\Exceptions\\DuplicateEmail"]


class TestSplitTypeToken:
    def test_spaces_around_pipe(self) -> None:
        assert split_type_token("int | null $x") == ("int|null", "$x")

    def test_plain(self) -> None:
        assert split_type_token("string $name the name") == ("string", "$name the name")
