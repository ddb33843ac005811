"""Syntax parser wrapping tree-sitter-php.

The rest of apishape never touches the grammar bindings directly: it asks
this module for a tree, the collected parse errors, and nodes of a given
kind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import tree_sitter_php as tsphp
from tree_sitter import Language, Node, Parser, Tree

from apishape.adapters.php.ast_utils import CLASS_LIKE_NODES, PhpAstUtils
from apishape.core.config import AnalyzerConfig, get_config
from apishape.core.errors import NotFoundError
from apishape.core.models import ParseError

logger = logging.getLogger(__name__)

_SNIPPET_LENGTH = 30


@dataclass
class SyntaxTree:
    """A parsed source: the tree-sitter tree plus the bytes it was built from."""

    tree: Tree
    content: bytes
    path: Path | None = None

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return PhpAstUtils.get_node_text(node, self.content)


class SyntaxParser:
    """Parses PHP source into tree-sitter trees and collects syntax errors.

    Malformed input never raises: the tree is returned as far as tree-sitter
    could recover it, and each ERROR or MISSING node becomes a ``ParseError``
    in the side channel exposed by ``get_errors()``.
    """

    def __init__(self, config: AnalyzerConfig | None = None) -> None:
        self._config = config or get_config()
        self._parser = Parser(Language(tsphp.language_php()))
        self._php_only_parser = Parser(Language(tsphp.language_php_only()))
        self._errors: list[ParseError] = []

    def parse(self, source: str | bytes) -> tuple[SyntaxTree, list[ParseError]]:
        """Parse source text.

        Text without an opening ``<?php`` tag is treated as bare PHP code.

        Args:
            source: PHP source as text or bytes.

        Returns:
            The syntax tree and the parse errors found in it.
        """
        content = source.encode("utf-8") if isinstance(source, str) else source
        parser = self._parser if b"<?" in content else self._php_only_parser
        tree = parser.parse(content)

        errors: list[ParseError] = []
        if self._config.collect_parse_errors and tree.root_node.has_error:
            errors = self._collect_errors(tree.root_node, content)
            self._errors.extend(errors)

        return SyntaxTree(tree=tree, content=content), errors

    def parse_file(self, file_path: Path | str) -> tuple[SyntaxTree, list[ParseError]]:
        """Parse a source file.

        Raises:
            NotFoundError: If the file does not exist.
            OSError: If the file exists but cannot be read.
            UnicodeDecodeError: If the file is not valid in the configured encoding.
        """
        path = Path(file_path)
        if not path.is_file():
            raise NotFoundError(f"File not found: {path}")

        content = path.read_bytes()
        encoding = self._config.source_encoding
        if encoding.lower().replace("_", "-") not in ("utf-8", "utf8"):
            # tree-sitter byte offsets assume UTF-8
            content = content.decode(encoding).encode("utf-8")
        syntax_tree, errors = self.parse(content)
        syntax_tree.path = path
        if errors:
            logger.debug(f"{len(errors)} parse error(s) in {path}")
        return syntax_tree, errors

    def parse_expression(self, code: str) -> Node:
        """Parse a single expression snippet such as ``"$a + $b"``.

        Returns:
            The expression node, or the closest node tree-sitter produced when
            the snippet is malformed.
        """
        snippet = code.strip().rstrip(";")
        syntax_tree, _ = self.parse(f"<?php {snippet};")
        statements = self.find_nodes_of_kind(syntax_tree.root, "expression_statement")
        if statements and statements[0].named_child_count > 0:
            return statements[0].named_children[0]
        candidates = [c for c in syntax_tree.root.named_children if c.type != "php_tag"]
        return candidates[0] if candidates else syntax_tree.root

    def find_nodes_of_kind(self, root: Node, kind: str | tuple[str, ...]) -> list[Node]:
        """Find all nodes of the given kind(s), in source order."""
        kinds = (kind,) if isinstance(kind, str) else kind
        found: list[Node] = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type in kinds:
                found.append(node)
            stack.extend(reversed(node.named_children))
        return found

    def find_classes(self, root: Node) -> list[Node]:
        return self.find_nodes_of_kind(root, CLASS_LIKE_NODES)

    def find_functions(self, root: Node) -> list[Node]:
        return self.find_nodes_of_kind(root, "function_definition")

    def find_methods(self, root: Node) -> list[Node]:
        return self.find_nodes_of_kind(root, "method_declaration")

    def get_errors(self) -> list[ParseError]:
        return list(self._errors)

    def has_errors(self) -> bool:
        return len(self._errors) > 0

    def clear_errors(self) -> None:
        self._errors = []

    def _collect_errors(self, root: Node, content: bytes) -> list[ParseError]:
        errors: list[ParseError] = []
        stack = [root]
        while stack and len(errors) < self._config.max_error_count:
            node = stack.pop()
            if node.type == "ERROR":
                snippet = PhpAstUtils.get_node_text(node, content).strip()
                snippet = snippet.splitlines()[0][:_SNIPPET_LENGTH] if snippet else ""
                message = (
                    f"Syntax error, unexpected '{snippet}'" if snippet else "Syntax error"
                )
                errors.append(self._make_error(message, node))
                continue
            if node.is_missing:
                errors.append(self._make_error(f"Syntax error, missing '{node.type}'", node))
                continue
            if node.has_error:
                stack.extend(reversed(node.children))
        return errors

    @staticmethod
    def _make_error(message: str, node: Node) -> ParseError:
        row, column = node.start_point
        return ParseError(message=message, line=row + 1, column=column + 1)
